"""Fixed keyword tables for the phrase grammar.

Everything here is immutable configuration: the tokenizer and the parser
look words up in these tables but never modify them.
"""

import calendar
from types import MappingProxyType

MONTHS = MappingProxyType({
    **{name.lower(): idx for idx, name in enumerate(calendar.month_name) if name},
    **{abbr.lower(): idx for idx, abbr in enumerate(calendar.month_abbr) if abbr},
    "sept": 9,
})

# Monday is 0, matching ``date.weekday()``
WEEKDAYS = MappingProxyType({
    **{name.lower(): idx for idx, name in enumerate(calendar.day_name)},
    **{abbr.lower(): idx for idx, abbr in enumerate(calendar.day_abbr)},
    "tues": 1,
    "weds": 2,
    "thur": 3,
    "thurs": 3,
})

UNITS = MappingProxyType({
    "second": "second",
    "seconds": "second",
    "sec": "second",
    "secs": "second",
    "minute": "minute",
    "minutes": "minute",
    "min": "minute",
    "mins": "minute",
    "hour": "hour",
    "hours": "hour",
    "hr": "hour",
    "hrs": "hour",
    "day": "day",
    "days": "day",
    "week": "week",
    "weeks": "week",
    "month": "month",
    "months": "month",
    "year": "year",
    "years": "year",
})

ONES = MappingProxyType({
    "one": 1,
    "two": 2,
    "three": 3,
    "four": 4,
    "five": 5,
    "six": 6,
    "seven": 7,
    "eight": 8,
    "nine": 9,
})

TEENS = MappingProxyType({
    "ten": 10,
    "eleven": 11,
    "twelve": 12,
    "thirteen": 13,
    "fourteen": 14,
    "fifteen": 15,
    "sixteen": 16,
    "seventeen": 17,
    "eighteen": 18,
    "nineteen": 19,
})

TENS = MappingProxyType({
    "twenty": 20,
    "thirty": 30,
    "forty": 40,
    "fourty": 40,
    "fifty": 50,
    "sixty": 60,
    "seventy": 70,
    "eighty": 80,
    "ninety": 90,
})

SCALES = MappingProxyType({
    "thousand": 1_000,
    "million": 1_000_000,
    "billion": 1_000_000_000,
})

ARTICLES = frozenset({"a", "an", "the"})

MODIFIERS = frozenset({"this", "next", "last"})

ANCHOR_KEYWORDS = frozenset({"now", "today", "tomorrow", "yesterday", "noon", "midnight"})

MERIDIEMS = frozenset({"am", "pm"})

CONNECTIVES = frozenset({
    "ago", "after", "before", "from", "in", "at", "on", "and", "of", "zero", "hundred", "t",
})

KEYWORDS = frozenset(
    set(MONTHS)
    | set(WEEKDAYS)
    | set(UNITS)
    | set(ONES)
    | set(TEENS)
    | set(TENS)
    | set(SCALES)
    | ARTICLES
    | MODIFIERS
    | ANCHOR_KEYWORDS
    | MERIDIEMS
    | CONNECTIVES
)


def is_keyword(word: str) -> bool:
    """Return True when ``word`` belongs to the grammar vocabulary."""
    return word.lower() in KEYWORDS
