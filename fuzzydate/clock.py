"""Clock collaborators that supply the current instant and local zone."""

from datetime import datetime, tzinfo
from typing import Optional, Protocol, Union

from dateutil import tz


def get_timezone(name: Union[str, tzinfo, None]) -> tzinfo:
    """Return a tzinfo for ``name``, or the system local zone for None.

    Raises:
        ValueError: if ``name`` is not a known timezone
    """
    if name is None:
        return tz.tzlocal()
    if isinstance(name, tzinfo):
        return name
    zone = tz.gettz(name)
    if zone is None:
        raise ValueError(f"Unknown timezone: {name}")
    return zone


class Clock(Protocol):
    """Anything that can report the current, timezone-aware instant."""

    def now(self) -> datetime:
        ...


class SystemClock:
    """Read the current time from the operating system."""

    def __init__(self, timezone: Union[str, tzinfo, None] = None):
        self.timezone = get_timezone(timezone)

    def now(self) -> datetime:
        return datetime.now(self.timezone)


class FixedClock:
    """Always report the same instant. Useful for tests and replays."""

    def __init__(self, instant: datetime, timezone: Union[str, tzinfo, None] = None):
        zone: Optional[tzinfo] = None
        if timezone is not None or instant.tzinfo is None:
            zone = get_timezone(timezone)
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=zone)
        elif zone is not None:
            instant = instant.astimezone(zone)
        self.instant = instant

    def now(self) -> datetime:
        return self.instant
