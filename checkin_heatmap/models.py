from datetime import date

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic.alias_generators import to_camel


class SnapshotModel(BaseModel):
    """Immutable base for everything handed to the presentation layer."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Stats(SnapshotModel):
    """Summary statistics derived from the day-count map."""

    total_checkins: int = Field(default=0, ge=0)
    total_days_visited: int = Field(default=0, ge=0)
    longest_streak: int = Field(default=0, ge=0)
    current_streak: int = Field(default=0, ge=0)
    average_per_week: str = "0.0"
    peak_hour: int = Field(default=0, ge=0, le=23)
    peak_hour_count: int = Field(default=0, ge=0)


class CalendarDay(SnapshotModel):
    """Single cell of the calendar grid."""

    date: date
    count: int = Field(ge=0)
    is_current_year: bool
    level: int = Field(default=0, ge=0, le=4)


class MonthLabel(SnapshotModel):
    """Month label spanning `width` consecutive week columns."""

    text: str
    width: int = Field(ge=1)
    start_index: int = Field(ge=0)


class CalendarGrid(SnapshotModel):
    """Sunday-first weeks covering the target year plus their month labels."""

    year: int
    weeks: list[list[CalendarDay]]
    months: list[MonthLabel]


class HeatmapSnapshot(SnapshotModel):
    """Everything derived from one load of the check-in log."""

    year: int
    day_counts: dict[str, int]
    hourly: list[int] = Field(min_length=24, max_length=24)
    stats: Stats
    calendar: CalendarGrid
    total_rows: int = Field(default=0, ge=0)
    discarded_rows: int = Field(default=0, ge=0)
