"""
Lexical analysis for date/time phrases.

Turns raw phrase text into an ordered tuple of classified tokens. Rules are
a list of (kind, regex) pairs compiled into one alternation with named
groups; order matters, so longer literal forms (ISO dates and times) come
before the plain NUMBER rule that would otherwise claim their digits.

Unknown words are not an error here. They come out as WORD tokens and the
parser reports them with richer context.
"""

import re
import unicodedata
from enum import Enum
from typing import Iterator, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from .errors import LexError
from .vocabulary import is_keyword


class TokenKind(str, Enum):
    NUMBER = "NUMBER"
    ORDINAL = "ORDINAL"
    WORD = "WORD"
    ISO_DATE = "ISO_DATE"
    ISO_TIME = "ISO_TIME"
    PUNCTUATION = "PUNCTUATION"


class Token(BaseModel):
    """One token with its kind, source text and character offset."""

    model_config = ConfigDict(frozen=True)

    kind: TokenKind = Field(..., description="Token classification")
    lexeme: str = Field(..., description="Source text of the token")
    position: int = Field(..., ge=0, description="Character offset in the phrase")

    @property
    def text(self) -> str:
        """Lowercased lexeme, used for keyword matching."""
        return self.lexeme.lower()

    @property
    def number(self) -> int:
        """Integer value of a NUMBER or ORDINAL token."""
        return int(re.match(r"\d+", self.lexeme).group())

    @property
    def is_keyword(self) -> bool:
        return self.kind == TokenKind.WORD and is_keyword(self.lexeme)

    def __repr__(self):
        return f"Token({self.kind.value}, {self.lexeme!r}, position={self.position})"


ISO_TIME_PATTERN = (
    r"\d{1,2}:\d{2}(?::\d{2}(?:\.\d+)?)?"
    r"(?:\s?(?:am|pm)\b)?"
    r"(?:z\b|[+-]\d{2}(?::\d{2}(?::\d{2})?|\d{2})\b)?"
)

# Order is significant
RULES = [
    ("ISO_DATE", r"\d{4}-\d{2}-\d{2}(?!\d)"),
    ("ISO_TIME", ISO_TIME_PATTERN),
    ("ORDINAL", r"\d+(?:st|nd|rd|th)\b"),
    ("NUMBER", r"\d+"),
    ("WORD", r"[^\W\d_]+"),
    ("PUNCTUATION", r"[,/.:\-]"),
    ("SKIP", r"\s+"),
    ("OPAQUE", r"[^\s\w,/.:\-]+|_+"),
]

_MASTER = re.compile(
    "|".join(f"(?P<{name}>{pattern})" for name, pattern in RULES),
    re.IGNORECASE,
)


def _check_encodable(text: str) -> None:
    """Raise ``LexError`` at the first character that cannot be encoded."""
    for position, char in enumerate(text):
        if "\ud800" <= char <= "\udfff":
            raise LexError(position, "unpaired surrogate")
        if not char.isprintable() and not char.isspace():
            raise LexError(position, f"non-printable character {unicodedata.name(char, repr(char))}")


def _decode(text: Union[str, bytes]) -> str:
    if isinstance(text, bytes):
        try:
            return text.decode("utf-8")
        except UnicodeDecodeError as e:
            position = len(text[:e.start].decode("utf-8"))
            raise LexError(position, "invalid UTF-8 byte sequence") from e
    return text


def iter_tokens(text: Union[str, bytes]) -> Iterator[Token]:
    """Lazily yield the tokens of ``text`` in source order."""
    text = _decode(text)
    _check_encodable(text)

    for mo in _MASTER.finditer(text):
        kind = mo.lastgroup
        if kind == "SKIP":
            continue
        if kind == "OPAQUE":
            kind = "WORD"
        yield Token(kind=TokenKind(kind), lexeme=mo.group(), position=mo.start())


def tokenize(text: Union[str, bytes]) -> Tuple[Token, ...]:
    """Tokenize ``text`` into a fresh tuple of tokens.

    Raises:
        LexError: if ``text`` holds undecodable bytes, lone surrogates or
            control characters.
    """
    return tuple(iter_tokens(text))
