"""
Resolution of expression trees into concrete timestamps.

The resolver walks a ``Combination`` left to right, keeping a running
wall-clock value and a working timezone, both initialized from the anchor.
Field fragments overwrite only what they specify, offsets go through
``calendar_math`` cumulatively, and the final wall clock is localized in
the working zone.
"""

import calendar
from datetime import datetime, timedelta, tzinfo
from typing import Callable, Dict, NamedTuple, Optional

from dateutil import tz
from pydantic import BaseModel, ConfigDict, Field

from .calendar_math import FIXED_UNITS, add_units, resolve_weekday, shift_wall_clock
from .clock import get_timezone
from .config import FuzzyDateConfig
from .errors import RangeError
from .expressions import (
    AbsoluteDate,
    AbsoluteTime,
    AnchorKeyword,
    Combination,
    RelativeOffset,
    WeekdayReference,
)


class Anchor(BaseModel):
    """Reference instant and timezone for relative and defaulted fields."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    instant: datetime = Field(..., description="Aware reference instant, expressed in timezone")
    timezone: tzinfo = Field(..., description="Zone for wall-clock interpretation")

    @classmethod
    def of(cls, instant: datetime, timezone=None) -> "Anchor":
        """Build an anchor from an instant and an optional zone.

        A naive ``instant`` is read as wall-clock time in ``timezone``; an
        aware one is converted to it. Without ``timezone`` the instant's own
        zone is used, or the system local zone for naive instants.
        """
        if timezone is not None:
            zone = get_timezone(timezone)
        else:
            zone = instant.tzinfo or get_timezone(None)

        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=zone)
        else:
            instant = instant.astimezone(zone)
        return cls(instant=instant, timezone=zone)

    @property
    def wall(self) -> datetime:
        """Naive wall-clock value of the anchor, to the second."""
        return self.instant.replace(tzinfo=None, microsecond=0)


class _State(NamedTuple):
    wall: datetime
    zone: tzinfo


def localize(wall: datetime, zone: tzinfo) -> datetime:
    """Attach ``zone`` to a naive wall clock, rejecting nonexistent times."""
    aware = wall.replace(tzinfo=zone)
    if not tz.datetime_exists(aware):
        raise RangeError("time", wall.isoformat(), f"does not exist in {aware.tzname() or zone}")
    return aware


def expand_year(year: int, anchor_year: int, window: int) -> int:
    """Expand a two-digit year into the 100 years ending ``window`` years
    after ``anchor_year``.

    With an anchor of 2025 and a window of 10, "35" is 2035 and "36" is
    1936; with an anchor of 1998, "05" is 2005.
    """
    candidate = anchor_year - anchor_year % 100 + year
    if candidate > anchor_year + window:
        candidate -= 100
    elif candidate <= anchor_year + window - 100:
        candidate += 100
    return candidate


def _apply_date(part: AbsoluteDate, state: _State, anchor: Anchor, config: FuzzyDateConfig) -> _State:
    year = part.year
    if year is not None and part.century_implied:
        year = expand_year(year, anchor.instant.year, config.century_window)
    year = state.wall.year if year is None else year
    month = state.wall.month if part.month is None else part.month
    day = state.wall.day if part.day is None else part.day

    if not 1 <= year <= 9999:
        raise RangeError("year", year)
    if not 1 <= month <= 12:
        raise RangeError("month", month)
    days_in_month = calendar.monthrange(year, month)[1]
    if not 1 <= day <= days_in_month:
        raise RangeError("day", day, f"{year}-{month:02d} has {days_in_month} days")

    return state._replace(wall=state.wall.replace(year=year, month=month, day=day, fold=0))


def _apply_time(part: AbsoluteTime, state: _State, anchor: Anchor, config: FuzzyDateConfig) -> _State:
    hour = state.wall.hour if part.hour is None else part.hour
    minute = state.wall.minute if part.minute is None else part.minute
    second = state.wall.second if part.second is None else part.second

    if part.meridiem is not None:
        if not 1 <= hour <= 12:
            raise RangeError("hour", f"{hour}{part.meridiem}")
        hour = hour % 12 + (12 if part.meridiem == "pm" else 0)

    if not 0 <= hour <= 23:
        raise RangeError("hour", hour)
    if not 0 <= minute <= 59:
        raise RangeError("minute", minute)
    if not 0 <= second <= 59:
        raise RangeError("second", second)

    zone = state.zone
    if part.utc_offset is not None:
        if abs(part.utc_offset) >= 24 * 60 * 60:
            raise RangeError("utc_offset", part.utc_offset)
        zone = tz.UTC if part.utc_offset == 0 else tz.tzoffset(None, part.utc_offset)

    wall = state.wall.replace(hour=hour, minute=minute, second=second, fold=0)
    return _State(wall=wall, zone=zone)


def _apply_offset(part: RelativeOffset, state: _State, anchor: Anchor, config: FuzzyDateConfig) -> _State:
    if part.unit in FIXED_UNITS:
        moved = add_units(localize(state.wall, state.zone), part.quantity, part.unit)
        return state._replace(wall=moved.replace(tzinfo=None))
    return state._replace(wall=shift_wall_clock(state.wall, part.quantity, part.unit))


def _apply_weekday(part: WeekdayReference, state: _State, anchor: Anchor, config: FuzzyDateConfig) -> _State:
    day = resolve_weekday(state.wall.date(), part.weekday, part.modifier, config.week_start)
    return state._replace(wall=datetime.combine(day, state.wall.time()))


_DAY_SHIFTS = {"today": 0, "tomorrow": 1, "yesterday": -1}
_TIMES_OF_DAY = {"noon": 12, "midnight": 0}


def _apply_keyword(part: AnchorKeyword, state: _State, anchor: Anchor, config: FuzzyDateConfig) -> _State:
    if part.keyword == "now":
        return _State(wall=anchor.wall, zone=anchor.timezone)
    if part.keyword in _DAY_SHIFTS:
        day = anchor.wall.date() + timedelta(days=_DAY_SHIFTS[part.keyword])
        return state._replace(wall=datetime.combine(day, state.wall.time()))
    hour = _TIMES_OF_DAY[part.keyword]
    return state._replace(wall=state.wall.replace(hour=hour, minute=0, second=0, fold=0))


_HANDLERS: Dict[str, Callable[..., _State]] = {
    "absolute_date": _apply_date,
    "absolute_time": _apply_time,
    "relative_offset": _apply_offset,
    "weekday_reference": _apply_weekday,
    "anchor_keyword": _apply_keyword,
}


def resolve(tree: Combination, anchor: Anchor, config: Optional[FuzzyDateConfig] = None) -> datetime:
    """Combine ``tree`` with ``anchor`` into an aware timestamp.

    Args:
        tree: Parsed phrase
        anchor: Reference instant and zone
        config: Calendar conventions (default time of day, week start, century window)

    Returns:
        A timezone-aware datetime with second resolution

    Raises:
        RangeError: if a resolved field is outside its valid domain, or the
            final wall clock does not exist in the working zone
    """
    config = config or FuzzyDateConfig()
    wall = anchor.wall
    if config.default_time is not None:
        wall = datetime.combine(wall.date(), config.default_time)
    state = _State(wall=wall, zone=anchor.timezone)
    for part in tree.parts:
        try:
            handler = _HANDLERS[part.kind]
        except KeyError:
            raise TypeError(f"Unsupported expression node: {part.kind}") from None
        state = handler(part, state, anchor, config)
    return localize(state.wall, state.zone)
