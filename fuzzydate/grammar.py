"""
Recursive-descent grammar for date/time phrases.

Receives the token tuple from the tokenizer and builds a ``Combination``
whose parts are stored in the order the resolver applies them. For
"X after Y" that means Y's parts first, then X's offsets.

Every production takes a cursor index and returns ``(parts, next_index)``
or ``None``. Productions never move a shared position; a failed attempt
costs nothing but the lookahead it performed. At each decision point the
first production whose leading tokens match wins:

    1. ISO date/time literals
    2. weekday references (this/next/last <weekday>, bare <weekday>)
    3. anchor keywords (now, today, tomorrow, yesterday, noon, midnight)
    4. relative phrases (<duration> ago/after/from/before, in <duration>)
    5. combinators (at/on/"," between date and time, ","/and between offsets)
"""

import re
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from .errors import ParseError
from .expressions import (
    AbsoluteDate,
    AbsoluteTime,
    AnchorKeyword,
    Combination,
    RelativeOffset,
    WeekdayReference,
)
from .tokenizer import Token, TokenKind
from .vocabulary import ARTICLES, MONTHS, ONES, SCALES, TEENS, TENS, UNITS, WEEKDAYS

Parts = List
Match = Optional[Tuple[Parts, int]]

_ISO_TIME = re.compile(
    r"(?P<hour>\d{1,2}):(?P<minute>\d{2})"
    r"(?::(?P<second>\d{2})(?:\.\d+)?)?"
    r"\s?(?P<meridiem>am|pm)?"
    r"(?P<offset>z|[+-]\d{2}(?::\d{2}(?::\d{2})?|\d{2}))?$",
    re.IGNORECASE,
)

END = "end of input"


def _parse_offset(text: str) -> int:
    """Return a ``Z``/``+HH:MM``/``-HHMM``/``-HH:MM:SS`` offset in seconds."""
    if text.lower() == "z":
        return 0
    sign = -1 if text[0] == "-" else 1
    digits = text[1:].replace(":", "")
    hours, minutes, seconds = int(digits[:2]), int(digits[2:4]), int(digits[4:] or 0)
    return sign * (hours * 3600 + minutes * 60 + seconds)


class Parser:
    """Recursive-descent parser over an immutable token tuple.

    The only state kept between productions is the furthest position any
    production reached and what it expected there, which feeds the
    ``ParseError`` raised when no complete parse exists.
    """

    def __init__(self, tokens: Sequence[Token]):
        self.tokens = tuple(tokens)
        self._furthest = 0
        self._expected: Set[str] = set()

    # -- token helpers -------------------------------------------------

    def peek(self, pos: int) -> Optional[Token]:
        """Return the token at ``pos`` or None past the end."""
        return self.tokens[pos] if pos < len(self.tokens) else None

    def word(self, pos: int, words: Iterable[str]) -> Optional[str]:
        """Return the lowercased word at ``pos`` if it is one of ``words``."""
        token = self.peek(pos)
        if token is not None and token.kind == TokenKind.WORD and token.text in words:
            return token.text
        return None

    def punct(self, pos: int, marks: str) -> Optional[str]:
        token = self.peek(pos)
        if token is not None and token.kind == TokenKind.PUNCTUATION and token.lexeme in marks:
            return token.lexeme
        return None

    def number(self, pos: int, max_digits: Optional[int] = None) -> Optional[Token]:
        token = self.peek(pos)
        if token is None or token.kind != TokenKind.NUMBER:
            return None
        if max_digits is not None and len(token.lexeme) > max_digits:
            return None
        return token

    def expect(self, pos: int, *what: str) -> None:
        """Record that ``what`` would have been accepted at ``pos``."""
        if pos > self._furthest:
            self._furthest = pos
            self._expected = set(what)
        elif pos == self._furthest:
            self._expected.update(what)

    def error(self) -> ParseError:
        index = self._furthest
        token = self.peek(index)
        if token is not None:
            position, found = token.position, token.lexeme
        elif self.tokens:
            last = self.tokens[-1]
            position, found = last.position + len(last.lexeme), None
        else:
            position, found = 0, None
        return ParseError(position, self._expected, found=found, token_index=index)

    # -- entry point ---------------------------------------------------

    def parse(self) -> Combination:
        """Parse the whole token tuple into a ``Combination``."""
        result = self.datetime(0)
        if result is None:
            raise self.error()

        parts, pos = result
        if pos < len(self.tokens):
            self.expect(pos, END)
            raise self.error()
        return Combination(parts=parts)

    # -- phrase level --------------------------------------------------

    def datetime(self, pos: int) -> Match:
        """datetime := moment | relative"""
        return self.moment(pos) or self.relative(pos)

    def moment(self, pos: int) -> Match:
        """
        moment := now
                | date [,] [at] duration (after | before) time
                | date [,] [at time | T iso_time | time]
                | [at] time [,] [on] [date]
        """
        if self.word(pos, {"now"}):
            return [AnchorKeyword(keyword="now")], pos + 1

        date = self.date(pos)
        if date is not None:
            parts, end = date
            q = end + 1 if self.punct(end, ",") else end
            # ahead of time, which would read the "2" of "2 hours after noon" as an hour
            shifted = self.shifted_time(q + 1 if self.word(q, {"at"}) else q)
            if shifted is not None:
                return parts + shifted[0], shifted[1]
            if self.word(q, {"at"}):
                time = self.time(q + 1, bare_hour=True)
            elif self.word(q, {"t"}) and self.tokens[end - 1].kind == TokenKind.ISO_DATE:
                time = self.iso_time(q + 1)
            else:
                time = self.time(q, bare_hour=False)
            if time is not None:
                return parts + time[0], time[1]
            return parts, end

        at = self.word(pos, {"at"})
        time = self.time(pos + 1 if at else pos, bare_hour=bool(at))
        if time is None:
            self.expect(pos, "date", "time", "now")
            return None

        parts, end = time
        q = end + 1 if self.punct(end, ",") else end
        if self.word(q, {"on"}):
            q += 1
        date = self.date(q)
        if date is not None:
            return parts + date[0], date[1]
        return parts, end

    def relative(self, pos: int) -> Match:
        """
        relative := in duration [tail_time]
                  | duration ago [tail_time]
                  | duration (after | from) datetime
                  | duration before datetime
        """
        if self.word(pos, {"in"}):
            duration = self.duration(pos + 1)
            if duration is None:
                return None
            return self.tail_time(*duration)

        duration = self.duration(pos)
        if duration is None:
            return None

        offsets, end = duration
        direction = self.word(end, {"ago", "after", "from", "before"})
        if direction is None:
            self.expect(end, "ago", "after", "before", "from", "and")
            return None

        if direction == "ago":
            return self.tail_time([o.negated() for o in offsets], end + 1)

        base = self.datetime(end + 1)
        if base is None:
            return None
        if direction == "before":
            offsets = [o.negated() for o in offsets]
        return base[0] + offsets, base[1]

    def shifted_time(self, pos: int) -> Match:
        """duration (after | before) time, applied as the time then the offsets."""
        duration = self.duration(pos)
        if duration is None:
            return None
        offsets, end = duration
        direction = self.word(end, {"after", "before"})
        if direction is None:
            return None
        time = self.time(end + 1, bare_hour=False)
        if time is None:
            return None
        if direction == "before":
            offsets = [o.negated() for o in offsets]
        return time[0] + offsets, time[1]

    def tail_time(self, parts: Parts, pos: int) -> Match:
        """Optional trailing "[,] [at] time" after a relative phrase."""
        q = pos + 1 if self.punct(pos, ",") else pos
        at = self.word(q, {"at"})
        time = self.time(q + 1 if at else q, bare_hour=bool(at))
        if time is None:
            return parts, pos
        return parts + time[0], time[1]

    # -- durations -----------------------------------------------------

    def duration(self, pos: int) -> Match:
        """duration := quantity unit (("," | and) quantity unit)*"""
        first = self.quantity_unit(pos)
        if first is None:
            return None

        offsets = [first[0]]
        pos = first[1]
        while self.punct(pos, ",") or self.word(pos, {"and"}):
            nxt = self.quantity_unit(pos + 1)
            if nxt is None:
                break
            offsets.append(nxt[0])
            pos = nxt[1]
        return offsets, pos

    def quantity_unit(self, pos: int) -> Optional[Tuple[RelativeOffset, int]]:
        article = self.word(pos, ARTICLES)
        if article and not self.word(pos + 1, {"hundred", *SCALES}):
            quantity, end = 1, pos + 1
        else:
            number = self.spelled_number(pos + 1 if article else pos)
            if number is None:
                return None
            quantity, end = number

        unit = self.word(end, UNITS)
        if unit is None:
            self.expect(end, "time unit")
            return None
        return RelativeOffset(quantity=quantity, unit=UNITS[unit]), end + 1

    # -- numbers -------------------------------------------------------

    def spelled_number(self, pos: int) -> Optional[Tuple[int, int]]:
        """
        number := zero
                | [triple] scale [[and] number]
                | triple

        Digits and number words normalize to the same integer.
        """
        if self.word(pos, {"zero"}):
            return 0, pos + 1

        triple = self.triple(pos)
        value, end = triple if triple is not None else (1, pos)

        scale = self.word(end, SCALES)
        if scale is None:
            return triple

        value *= SCALES[scale]
        end += 1
        if self.word(end, {"and"}):
            rest = self.spelled_number(end + 1)
            if rest is not None:
                return value + rest[0], rest[1]
        else:
            rest = self.spelled_number(end)
            if rest is not None:
                return value + rest[0], rest[1]
        return value, end

    def triple(self, pos: int) -> Optional[Tuple[int, int]]:
        """triple := [small] hundred [[and] small] | small"""
        small = self.small_number(pos)
        if small is not None and self.word(small[1], {"hundred"}):
            value, end = small[0] * 100, small[1] + 1
        elif small is None and self.word(pos, {"hundred"}):
            value, end = 100, pos + 1
        else:
            return small

        q = end + 1 if self.word(end, {"and"}) else end
        rest = self.small_number(q)
        if rest is not None:
            return value + rest[0], rest[1]
        return value, end

    def small_number(self, pos: int) -> Optional[Tuple[int, int]]:
        """small := tens [-] [ones] | teens | ones | NUMBER"""
        token = self.peek(pos)
        if token is None:
            return None
        if token.kind == TokenKind.NUMBER:
            return token.number, pos + 1
        if token.kind != TokenKind.WORD:
            return None

        if token.text in TENS:
            value, end = TENS[token.text], pos + 1
            q = end + 1 if self.punct(end, "-") else end
            ones = self.word(q, ONES)
            if ones is not None:
                return value + ONES[ones], q + 1
            return value, end
        if token.text in TEENS:
            return TEENS[token.text], pos + 1
        if token.text in ONES:
            return ONES[token.text], pos + 1
        return None

    # -- dates ---------------------------------------------------------

    def date(self, pos: int) -> Match:
        """
        date := iso_date
              | [this | next | last] weekday
              | today | tomorrow | yesterday
              | (next | last) unit
              | month day [,] [year]
              | [the] day [of] [month [,] [year]]
              | numeric_date
        """
        token = self.peek(pos)
        if token is None:
            self.expect(pos, "date")
            return None

        if token.kind == TokenKind.ISO_DATE:
            year, month, day = (int(v) for v in token.lexeme.split("-"))
            return [AbsoluteDate(year=year, month=month, day=day)], pos + 1

        weekday = self.weekday_reference(pos)
        if weekday is not None:
            return weekday

        keyword = self.word(pos, {"today", "tomorrow", "yesterday"})
        if keyword is not None:
            return [AnchorKeyword(keyword=keyword)], pos + 1

        modifier = self.word(pos, {"next", "last"})
        if modifier is not None:
            unit = self.word(pos + 1, UNITS)
            if unit is None:
                self.expect(pos + 1, "weekday", "time unit")
                return None
            quantity = 1 if modifier == "next" else -1
            return [RelativeOffset(quantity=quantity, unit=UNITS[unit])], pos + 2

        return self.month_date(pos) or self.day_month_date(pos) or self.numeric_date(pos)

    def weekday_reference(self, pos: int) -> Match:
        modifier = self.word(pos, {"this", "next", "last"})
        q = pos + 1 if modifier else pos
        weekday = self.word(q, WEEKDAYS)
        if weekday is None:
            if modifier == "this":
                self.expect(q, "weekday")
            return None
        return [WeekdayReference(weekday=WEEKDAYS[weekday], modifier=modifier)], q + 1

    def year(self, pos: int) -> Optional[Tuple[int, int]]:
        """An optional "[,] YYYY" suffix."""
        q = pos + 1 if self.punct(pos, ",") else pos
        token = self.number(q)
        if token is not None and len(token.lexeme) == 4:
            return token.number, q + 1
        return None

    def month_date(self, pos: int) -> Match:
        month = self.word(pos, MONTHS)
        if month is None:
            return None

        token = self.peek(pos + 1)
        if token is None or token.kind not in (TokenKind.NUMBER, TokenKind.ORDINAL) or len(token.lexeme) > 4:
            self.expect(pos + 1, "day of month")
            return None
        if token.kind == TokenKind.NUMBER and len(token.lexeme) > 2:
            self.expect(pos + 1, "day of month")
            return None

        node = {"month": MONTHS[month], "day": token.number}
        end = pos + 2
        year = self.year(end)
        if year is not None:
            node["year"], end = year
        return [AbsoluteDate(**node)], end

    def day_month_date(self, pos: int) -> Match:
        q = pos + 1 if self.word(pos, {"the"}) else pos
        token = self.peek(q)
        if token is None:
            return None
        if token.kind == TokenKind.NUMBER and len(token.lexeme) <= 2 and self.word(q + 1, MONTHS):
            ordinal = False
        elif token.kind == TokenKind.ORDINAL:
            ordinal = True
        else:
            return None

        node = {"day": token.number}
        end = q + 1
        m = end + 1 if ordinal and self.word(end, {"of"}) else end
        month = self.word(m, MONTHS)
        if month is None:
            if m != end:
                self.expect(m, "month")
                return None
            return [AbsoluteDate(**node)], end

        node["month"] = MONTHS[month]
        end = m + 1
        year = self.year(end)
        if year is not None:
            node["year"], end = year
        return [AbsoluteDate(**node)], end

    def numeric_date(self, pos: int) -> Match:
        """
        numeric_date := NUMBER / NUMBER [/ NUMBER]      month first
                      | NUMBER - NUMBER [- NUMBER]      month first, or year first with 4 digits
                      | NUMBER . NUMBER [. NUMBER]      day first
        """
        first = self.number(pos)
        if first is None:
            return None
        delim = self.punct(pos + 1, "/-.")
        if delim is None:
            return None
        second = self.number(pos + 2, max_digits=2)
        if second is None:
            self.expect(pos + 2, "number")
            return None

        third = None
        end = pos + 3
        if self.punct(end, delim):
            third = self.number(end + 1, max_digits=4)
            if third is None:
                self.expect(end + 1, "number")
                return None
            end += 2

        a, b = first.number, second.number
        if len(first.lexeme) == 4:
            if third is None or len(third.lexeme) > 2:
                self.expect(pos + 3 if third is None else end - 1, "day of month")
                return None
            return [AbsoluteDate(year=a, month=b, day=third.number)], end
        if len(first.lexeme) > 2:
            self.expect(pos, "date")
            return None

        month, day = (b, a) if delim == "." else (a, b)
        node = {"month": month, "day": day}
        if third is not None:
            node["year"] = third.number
            node["century_implied"] = len(third.lexeme) <= 2
        return [AbsoluteDate(**node)], end

    # -- times ---------------------------------------------------------

    def time(self, pos: int, bare_hour: bool) -> Match:
        """
        time := iso_time | noon | midnight | NUMBER (am | pm)
              | NUMBER                    (only after "at")
        """
        token = self.peek(pos)
        if token is None:
            self.expect(pos, "time")
            return None

        if token.kind == TokenKind.ISO_TIME:
            return self.iso_time(pos)

        keyword = self.word(pos, {"noon", "midnight"})
        if keyword is not None:
            return [AnchorKeyword(keyword=keyword)], pos + 1

        hour = self.number(pos, max_digits=2)
        if hour is not None:
            meridiem = self.word(pos + 1, {"am", "pm"})
            if meridiem is not None:
                node = AbsoluteTime(hour=hour.number, minute=0, second=0, meridiem=meridiem)
                return [node], pos + 2
            if bare_hour:
                return [AbsoluteTime(hour=hour.number, minute=0, second=0)], pos + 1
            self.expect(pos + 1, "am", "pm")
            return None

        self.expect(pos, "time")
        return None

    def iso_time(self, pos: int) -> Match:
        token = self.peek(pos)
        if token is None or token.kind != TokenKind.ISO_TIME:
            self.expect(pos, "time")
            return None

        mo = _ISO_TIME.match(token.lexeme)
        fields = {
            "hour": int(mo.group("hour")),
            "minute": int(mo.group("minute")),
            "second": int(mo.group("second") or 0),
        }
        if mo.group("meridiem"):
            fields["meridiem"] = mo.group("meridiem").lower()
        if mo.group("offset"):
            fields["utc_offset"] = _parse_offset(mo.group("offset"))
        return [AbsoluteTime(**fields)], pos + 1


def parse_tokens(tokens: Sequence[Token]) -> Combination:
    """Parse ``tokens`` into an expression tree.

    Raises:
        ParseError: if the tokens match no production or input remains
            after the longest successful parse.
    """
    return Parser(tokens).parse()
