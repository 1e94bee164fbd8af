"""Error taxonomy for the phrase-to-timestamp pipeline."""

from typing import Any, Dict, Iterable, Optional

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Structured, serializable view of a pipeline error."""

    error_code: str = Field(..., description="Machine-readable error code")
    error_message: str = Field(..., description="Human-readable error message")
    position: Optional[int] = Field(None, ge=0, description="Character offset in the phrase")
    context: Optional[Dict[str, Any]] = Field(None, description="Additional error context")


class FuzzyDateError(ValueError):
    """Base class for every error raised while turning a phrase into a timestamp."""

    error_code = "fuzzydate_error"
    position: Optional[int] = None

    def _context(self) -> Dict[str, Any]:
        return {}

    def detail(self) -> ErrorDetail:
        """Return the error as an ``ErrorDetail`` model."""
        return ErrorDetail(
            error_code=self.error_code,
            error_message=str(self),
            position=self.position,
            context=self._context() or None,
        )


class LexError(FuzzyDateError):
    """The phrase contains a character sequence that cannot be encoded."""

    error_code = "lex_error"

    def __init__(self, position: int, reason: str = "unencodable character"):
        self.position = position
        self.reason = reason
        super().__init__(f"{reason} at position {position}")

    def _context(self) -> Dict[str, Any]:
        return {"reason": self.reason}


class ParseError(FuzzyDateError):
    """The tokens do not form a phrase of the grammar."""

    error_code = "parse_error"

    def __init__(
        self,
        position: int,
        expected: Iterable[str],
        found: Optional[str] = None,
        token_index: Optional[int] = None,
    ):
        self.position = position
        self.expected = tuple(sorted(set(expected)))
        self.found = found
        self.token_index = token_index

        wanted = ", ".join(self.expected) if self.expected else "nothing"
        got = f"'{found}'" if found is not None else "end of input"
        super().__init__(f"unexpected {got} at position {position}; expected one of: {wanted}")

    def _context(self) -> Dict[str, Any]:
        return {
            "expected": list(self.expected),
            "found": self.found,
            "token_index": self.token_index,
        }


class RangeError(FuzzyDateError):
    """A resolved field falls outside its valid domain."""

    error_code = "range_error"

    def __init__(self, field: str, value: Any, reason: Optional[str] = None):
        self.field = field
        self.value = value
        self.reason = reason
        message = f"{field} out of range: {value!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)

    def _context(self) -> Dict[str, Any]:
        return {"field": self.field, "value": repr(self.value)}
