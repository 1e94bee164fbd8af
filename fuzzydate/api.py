"""Public entry points: tokenizer -> parser -> resolver."""

import logging
from datetime import datetime, tzinfo
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .clock import Clock, SystemClock
from .config import FuzzyDateConfig
from .errors import ErrorDetail, FuzzyDateError
from .expressions import Combination
from .grammar import parse_tokens
from .resolver import Anchor, resolve
from .tokenizer import Token, tokenize

logger = logging.getLogger(__name__)

Phrase = Union[str, bytes]


def parse_phrase(phrase: Phrase) -> Combination:
    """Tokenize and parse ``phrase`` into an expression tree."""
    tokens = tokenize(phrase)
    logger.debug(f"Tokenized {phrase!r} into {len(tokens)} tokens")
    tree = parse_tokens(tokens)
    logger.debug(f"Parsed {phrase!r}: {tree.describe()}")
    return tree


def aware_parse(
    phrase: Phrase,
    anchor_instant: datetime,
    anchor_timezone: Union[str, tzinfo, None] = None,
    config: Optional[FuzzyDateConfig] = None,
) -> datetime:
    """Resolve ``phrase`` against an explicit anchor.

    Does not consult the system clock or the environment.

    Args:
        phrase: Date/time phrase, e.g. "tomorrow at noon"
        anchor_instant: Reference instant; naive values are read in ``anchor_timezone``
        anchor_timezone: tzinfo or IANA name; defaults to the instant's own zone
        config: Calendar conventions (defaults to ``FuzzyDateConfig()``)

    Returns:
        Timezone-aware datetime

    Raises:
        LexError, ParseError, RangeError: on the first failing stage
    """
    anchor = Anchor.of(anchor_instant, anchor_timezone)
    try:
        return resolve(parse_phrase(phrase), anchor, config)
    except FuzzyDateError as e:
        logger.debug(f"Failed to resolve {phrase!r}: {e}")
        raise


def parse(
    phrase: Phrase,
    clock: Optional[Clock] = None,
    config: Optional[FuzzyDateConfig] = None,
) -> datetime:
    """Resolve ``phrase`` against the current time.

    The anchor comes from ``clock``; by default a ``SystemClock`` in the
    configured zone, or the local zone. Configuration defaults to
    ``FuzzyDateConfig.from_env()``.
    """
    config = config or FuzzyDateConfig.from_env()
    clock = clock or SystemClock(config.timezone)
    now = clock.now()
    return aware_parse(phrase, now, now.tzinfo, config)


class ParseTrace(BaseModel):
    """Every stage of one pipeline run, for debugging."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    phrase: str = Field(..., description="Input phrase")
    anchor: datetime = Field(..., description="Anchor instant used for resolution")
    tokens: Optional[List[Token]] = Field(None, description="Tokenizer output")
    tree: Optional[Combination] = Field(None, description="Parser output")
    result: Optional[datetime] = Field(None, description="Resolved timestamp")
    error: Optional[ErrorDetail] = Field(None, description="First error encountered")
    stage: str = Field(default="resolve", description="Last stage reached: tokenize, parse or resolve")


def debug_parse(
    phrase: Phrase,
    anchor_instant: Optional[datetime] = None,
    anchor_timezone: Union[str, tzinfo, None] = None,
    config: Optional[FuzzyDateConfig] = None,
) -> ParseTrace:
    """Run the pipeline and report every stage instead of raising.

    Without ``anchor_instant`` the system clock supplies the anchor.
    """
    config = config or FuzzyDateConfig()
    if anchor_instant is None:
        anchor_instant = SystemClock(anchor_timezone or config.timezone).now()
    anchor = Anchor.of(anchor_instant, anchor_timezone)
    text = phrase.decode("utf-8", errors="replace") if isinstance(phrase, bytes) else phrase
    trace = ParseTrace(phrase=text, anchor=anchor.instant, stage="tokenize")

    try:
        trace.tokens = list(tokenize(phrase))
        trace.stage = "parse"
        trace.tree = parse_tokens(trace.tokens)
        trace.stage = "resolve"
        trace.result = resolve(trace.tree, anchor, config)
    except FuzzyDateError as e:
        logger.debug(f"debug_parse stopped at {trace.stage} for {text!r}: {e}")
        trace.error = e.detail()
    return trace
