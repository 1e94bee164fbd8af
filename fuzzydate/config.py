"""Configuration for phrase resolution."""

import os
from datetime import time
from typing import Optional

from dateutil import tz
from pydantic import BaseModel, ConfigDict, Field, field_validator


class FuzzyDateConfig(BaseModel):
    """Configuration for parsing and resolving date phrases."""

    model_config = ConfigDict(validate_assignment=True)

    # Anchor settings
    timezone: Optional[str] = Field(default=None, description="IANA zone used when no anchor zone is given")
    default_time: Optional[time] = Field(
        default=None, description="Time of day used where the phrase gives none (default: the anchor's)"
    )

    # Calendar conventions
    week_start: int = Field(default=0, ge=0, le=6, description="First day of the week, Monday is 0")
    century_window: int = Field(
        default=10, ge=0, le=99, description="Years past the anchor year a two-digit year may reach"
    )

    @field_validator("default_time")
    @classmethod
    def validate_default_time(cls, v):
        """Drop sub-second precision and any tzinfo; the anchor zone applies."""
        if v is None:
            return v
        return v.replace(microsecond=0, tzinfo=None)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v):
        """Validate the timezone name resolves in the timezone database."""
        if v is None:
            return v
        v = v.strip()
        if not v:
            return None
        if tz.gettz(v) is None:
            raise ValueError(f"Unknown timezone: {v}")
        return v

    @classmethod
    def from_env(cls) -> "FuzzyDateConfig":
        """Build a configuration from ``FUZZYDATE_*`` environment variables.

        Environment variables used:
        - FUZZYDATE_TIMEZONE: default zone name (default: system local zone)
        - FUZZYDATE_DEFAULT_TIME: default time of day, e.g. 09:00 (default: anchor time)
        - FUZZYDATE_WEEK_START: first day of the week, 0-6 (default: 0, Monday)
        - FUZZYDATE_CENTURY_WINDOW: two-digit year window (default: 10)
        """
        values = {}
        if os.environ.get("FUZZYDATE_TIMEZONE"):
            values["timezone"] = os.environ["FUZZYDATE_TIMEZONE"]
        if os.environ.get("FUZZYDATE_DEFAULT_TIME"):
            values["default_time"] = os.environ["FUZZYDATE_DEFAULT_TIME"]
        if os.environ.get("FUZZYDATE_WEEK_START"):
            values["week_start"] = int(os.environ["FUZZYDATE_WEEK_START"])
        if os.environ.get("FUZZYDATE_CENTURY_WINDOW"):
            values["century_window"] = int(os.environ["FUZZYDATE_CENTURY_WINDOW"])
        return cls(**values)
