"""Expression tree produced by the grammar and consumed by the resolver."""

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

Unit = Literal["second", "minute", "hour", "day", "week", "month", "year"]
Modifier = Literal["this", "next", "last"]
Keyword = Literal["now", "today", "tomorrow", "yesterday", "noon", "midnight"]


class _Node(BaseModel):
    model_config = ConfigDict(frozen=True)


class AbsoluteDate(_Node):
    """Calendar date fields; unset fields come from the running timestamp."""

    kind: Literal["absolute_date"] = "absolute_date"
    year: Optional[int] = Field(None, description="Year, or two digits when century_implied")
    month: Optional[int] = Field(None, description="Month number 1-12")
    day: Optional[int] = Field(None, description="Day of month")
    century_implied: bool = Field(default=False, description="Year was written with two digits")


class AbsoluteTime(_Node):
    """Time-of-day fields with an optional explicit UTC offset."""

    kind: Literal["absolute_time"] = "absolute_time"
    hour: Optional[int] = Field(None, description="Hour, on a 12-hour clock when meridiem is set")
    minute: Optional[int] = Field(None, description="Minute")
    second: Optional[int] = Field(None, description="Second")
    meridiem: Optional[Literal["am", "pm"]] = Field(None, description="am/pm marker on a 12-hour clock")
    utc_offset: Optional[int] = Field(None, description="Explicit offset from UTC in seconds")


class RelativeOffset(_Node):
    """Signed quantity of a unit; negative values point into the past."""

    kind: Literal["relative_offset"] = "relative_offset"
    quantity: int = Field(..., description="Signed number of units")
    unit: Unit = Field(..., description="Time unit")

    def negated(self) -> "RelativeOffset":
        return RelativeOffset(quantity=-self.quantity, unit=self.unit)


class WeekdayReference(_Node):
    """A named day of the week with an optional this/next/last modifier."""

    kind: Literal["weekday_reference"] = "weekday_reference"
    weekday: int = Field(..., ge=0, le=6, description="Weekday, Monday is 0")
    modifier: Optional[Modifier] = Field(None, description="this, next, last, or unset")


class AnchorKeyword(_Node):
    """A keyword whose meaning depends only on the anchor."""

    kind: Literal["anchor_keyword"] = "anchor_keyword"
    keyword: Keyword = Field(..., description="now, today, tomorrow, yesterday, noon or midnight")


Fragment = Annotated[
    Union[AbsoluteDate, AbsoluteTime, RelativeOffset, WeekdayReference, AnchorKeyword],
    Field(discriminator="kind"),
]


class Combination(_Node):
    """Ordered fragments, applied left to right by the resolver."""

    kind: Literal["combination"] = "combination"
    parts: List[Fragment] = Field(default_factory=list, description="Fragments in application order")

    @field_validator("parts")
    @classmethod
    def validate_parts(cls, v):
        """A combination must hold at least one fragment."""
        if not v:
            raise ValueError("Combination requires at least one part")
        return v

    def describe(self) -> str:
        """Render the fragments as a compact, human-readable string."""
        return " -> ".join(_describe(part) for part in self.parts)


def _describe(part) -> str:
    if isinstance(part, RelativeOffset):
        return f"{part.quantity:+d} {part.unit}"
    if isinstance(part, WeekdayReference):
        return f"{part.modifier or 'upcoming'} weekday {part.weekday}"
    if isinstance(part, AnchorKeyword):
        return part.keyword
    fields = part.model_dump(exclude={"kind"}, exclude_none=True, exclude_defaults=True)
    inner = ", ".join(f"{k}={v}" for k, v in fields.items())
    return f"{part.kind}({inner})"
