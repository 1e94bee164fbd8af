"""Calendar-correct arithmetic used by the resolver."""

from datetime import date, datetime, timedelta, timezone
from typing import Optional

from dateutil.relativedelta import relativedelta

from .errors import RangeError

FIXED_UNITS = {
    "second": timedelta(seconds=1),
    "minute": timedelta(minutes=1),
    "hour": timedelta(hours=1),
    "day": timedelta(days=1),
    "week": timedelta(weeks=1),
}

CALENDAR_UNITS = {"month", "year"}


def shift_wall_clock(value: datetime, quantity: int, unit: str) -> datetime:
    """Add ``quantity`` units to the wall-clock fields of ``value``.

    Months and years change only the month/year fields and clamp the day to
    the last day of the resulting month, so Jan 31 + 1 month is Feb 28 (or
    Feb 29 in a leap year).
    """
    if unit not in CALENDAR_UNITS and unit not in FIXED_UNITS:
        raise ValueError(f"Unknown unit: {unit}")

    try:
        if unit in CALENDAR_UNITS:
            return value + relativedelta(**{unit + "s": quantity})
        return value + FIXED_UNITS[unit] * quantity
    except (OverflowError, ValueError) as e:
        raise RangeError("year", f"{quantity:+d} {unit}", str(e)) from e


def add_units(instant: datetime, quantity: int, unit: str) -> datetime:
    """Return ``instant`` moved by ``quantity`` units.

    Seconds, minutes, hours, days and weeks are fixed durations applied to
    the absolute instant, so "1 day" across a DST change is exactly 24 hours.
    Months and years are calendar additions on the wall clock (see
    ``shift_wall_clock``). Naive instants are treated as wall-clock values.

    Args:
        instant: Starting point, naive or aware
        quantity: Signed number of units; negative values go backwards
        unit: One of second, minute, hour, day, week, month, year

    Returns:
        A datetime in the same timezone as ``instant``
    """
    if unit in CALENDAR_UNITS or instant.tzinfo is None:
        return shift_wall_clock(instant, quantity, unit)

    zone = instant.tzinfo
    utc = instant.astimezone(timezone.utc)
    return shift_wall_clock(utc, quantity, unit).astimezone(zone)


def week_start_of(day: date, week_start: int = 0) -> date:
    """Return the first day of the week containing ``day``."""
    return day - timedelta(days=(day.weekday() - week_start) % 7)


def resolve_weekday(
    anchor_date: date,
    target_weekday: int,
    modifier: Optional[str] = None,
    week_start: int = 0,
) -> date:
    """Resolve a weekday reference against ``anchor_date``.

    Weeks run from ``week_start`` (0 is Monday) for seven days.

    - ``this``: the target inside the anchor's own week, which may be
      earlier than the anchor date
    - ``next``: the target inside the following week
    - ``last``: the target inside the preceding week
    - ``None``: the nearest target on or after the anchor date
    """
    if not 0 <= target_weekday <= 6:
        raise RangeError("weekday", target_weekday)

    if modifier is None:
        return anchor_date + timedelta(days=(target_weekday - anchor_date.weekday()) % 7)

    start = week_start_of(anchor_date, week_start)
    this = start + timedelta(days=(target_weekday - week_start) % 7)
    if modifier == "this":
        return this
    if modifier == "next":
        return this + timedelta(weeks=1)
    if modifier == "last":
        return this - timedelta(weeks=1)
    raise ValueError(f"Unknown weekday modifier: {modifier}")
