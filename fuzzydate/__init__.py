"""fuzzydate - turn human date/time phrases into zone-aware timestamps.

Pipeline:  phrase -> tokenizer -> grammar -> expression tree -> resolver -> datetime
"""

# Import modules for re-export
from . import calendar_math, clock, config, errors, expressions, grammar, resolver, tokenizer, vocabulary

# Expose main entry points
from .api import ParseTrace, aware_parse, debug_parse, parse, parse_phrase

# Expose pipeline stages
from .tokenizer import Token, TokenKind, tokenize
from .grammar import parse_tokens
from .resolver import Anchor, resolve
from .calendar_math import add_units, resolve_weekday

# Expose collaborators and configuration
from .clock import Clock, FixedClock, SystemClock
from .config import FuzzyDateConfig

# Expose expression tree and errors
from .expressions import (
    AbsoluteDate,
    AbsoluteTime,
    AnchorKeyword,
    Combination,
    RelativeOffset,
    WeekdayReference,
)
from .errors import ErrorDetail, FuzzyDateError, LexError, ParseError, RangeError

# Explicit re-exports
__all__ = [
    # Modules
    "calendar_math",
    "clock",
    "config",
    "errors",
    "expressions",
    "grammar",
    "resolver",
    "tokenizer",
    "vocabulary",
    # Entry points
    "parse",
    "aware_parse",
    "debug_parse",
    "parse_phrase",
    "ParseTrace",
    # Pipeline stages
    "tokenize",
    "Token",
    "TokenKind",
    "parse_tokens",
    "resolve",
    "Anchor",
    "add_units",
    "resolve_weekday",
    # Collaborators and configuration
    "Clock",
    "SystemClock",
    "FixedClock",
    "FuzzyDateConfig",
    # Expression tree
    "AbsoluteDate",
    "AbsoluteTime",
    "AnchorKeyword",
    "Combination",
    "RelativeOffset",
    "WeekdayReference",
    # Errors
    "ErrorDetail",
    "FuzzyDateError",
    "LexError",
    "ParseError",
    "RangeError",
]
