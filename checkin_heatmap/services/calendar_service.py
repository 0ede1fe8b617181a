from collections.abc import Mapping
from collections.abc import Sequence
from datetime import date
from datetime import timedelta
from functools import reduce

from checkin_heatmap.models import CalendarDay
from checkin_heatmap.models import CalendarGrid
from checkin_heatmap.models import MonthLabel


# The grid is anchored to the last day of this year.
TARGET_YEAR = 2024
DAYS_PER_WEEK = 7
MONTH_ABBREVIATIONS = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)


def contribution_level(count: int) -> int:
    """Map daily check-in count to a heatmap level in range 0..4."""

    if count <= 0:
        return 0
    if count <= 2:
        return 1
    if count <= 5:
        return 2
    if count <= 9:
        return 3
    return 4


def month_abbreviation(day: date) -> str:
    return MONTH_ABBREVIATIONS[day.month - 1]


def week_start_on_or_before(day: date) -> date:
    """Return the Sunday on or before `day`."""

    weekday = (day.weekday() + 1) % 7
    return day - timedelta(days=weekday)


def week_starts(year: int) -> list[date]:
    """Sundays from the one on or before Jan 1 up to and including Dec 31."""

    year_end = date(year, 12, 31)
    starts: list[date] = []
    current = week_start_on_or_before(date(year, 1, 1))
    while current <= year_end:
        starts.append(current)
        current += timedelta(weeks=1)
    return starts


def build_week(
    week_start: date, year: int, day_counts: Mapping[str, int]
) -> list[CalendarDay]:
    days: list[CalendarDay] = []
    for offset in range(DAYS_PER_WEEK):
        day = week_start + timedelta(days=offset)
        count = day_counts.get(day.isoformat(), 0)
        in_year = day.year == year
        days.append(
            CalendarDay(
                date=day,
                count=count,
                is_current_year=in_year,
                level=contribution_level(count) if in_year else 0,
            )
        )
    return days


def _week_has_year_days(week_start: date, year: int) -> bool:
    return any(
        (week_start + timedelta(days=offset)).year == year
        for offset in range(DAYS_PER_WEEK)
    )


def _fold_month_label(
    state: tuple[str | None, tuple[MonthLabel, ...]],
    indexed_week: tuple[int, date],
    year: int,
) -> tuple[str | None, tuple[MonthLabel, ...]]:
    prev_month, labels = state
    index, week_start = indexed_week

    has_year_days = _week_has_year_days(week_start, year)
    month = month_abbreviation(week_start)
    shows_label = (
        has_year_days and month != prev_month and week_start.year == year
    )
    next_month = month if has_year_days else prev_month

    if shows_label:
        return next_month, labels + (
            MonthLabel(text=month, width=1, start_index=index),
        )

    if not labels:
        # Weeks before the first label form a blank leading run.
        return next_month, (MonthLabel(text="", width=1, start_index=index),)

    last = labels[-1]
    widened = last.model_copy(update={"width": last.width + 1})
    return next_month, labels[:-1] + (widened,)


def build_month_labels(year: int, starts: Sequence[date]) -> list[MonthLabel]:
    """Run-length encode month labels over the week columns."""

    initial: tuple[str | None, tuple[MonthLabel, ...]] = (None, ())
    _, labels = reduce(
        lambda state, indexed: _fold_month_label(state, indexed, year),
        enumerate(starts),
        initial,
    )
    return list(labels)


def build_calendar(year: int, day_counts: Mapping[str, int]) -> CalendarGrid:
    """Build the Sunday-first week grid of `year` with its month labels."""

    starts = week_starts(year)
    return CalendarGrid(
        year=year,
        weeks=[build_week(start, year, day_counts) for start in starts],
        months=build_month_labels(year, starts),
    )
