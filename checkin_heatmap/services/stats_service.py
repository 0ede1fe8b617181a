from collections.abc import Mapping
from collections.abc import Sequence
from datetime import date

from checkin_heatmap.models import Stats


WEEKS_PER_YEAR = 52


def sorted_dates(day_counts: Mapping[str, int]) -> list[date]:
    return sorted(date.fromisoformat(key) for key in day_counts)


def longest_streak(dates: Sequence[date]) -> int:
    """Longest run of consecutive days in ascending `dates`."""

    longest = 0
    streak = 0
    previous: date | None = None

    for current in dates:
        if previous is not None and (current - previous).days == 1:
            streak += 1
        else:
            streak = 1
        longest = max(longest, streak)
        previous = current

    return longest


def current_streak(dates: Sequence[date]) -> int:
    """Length of the run ending at the most recent date in ascending `dates`."""

    if not dates:
        return 0

    streak = 1
    for index in range(len(dates) - 1, 0, -1):
        if (dates[index] - dates[index - 1]).days != 1:
            break
        streak += 1

    return streak


def average_per_week(total_days_visited: int) -> str:
    """Visited days per week over a fixed 52-week year, one decimal place."""

    if total_days_visited <= 0:
        return "0.0"
    return f"{total_days_visited / WEEKS_PER_YEAR:.1f}"


def calculate_stats(
    day_counts: Mapping[str, int],
    peak_hour: int = 0,
    peak_hour_count: int = 0,
) -> Stats:
    """Compute summary statistics from scratch for one day-count map."""

    dates = sorted_dates(day_counts)
    total_days_visited = len(dates)

    return Stats(
        total_checkins=sum(day_counts.values()),
        total_days_visited=total_days_visited,
        longest_streak=longest_streak(dates),
        current_streak=current_streak(dates),
        average_per_week=average_per_week(total_days_visited),
        peak_hour=peak_hour,
        peak_hour_count=peak_hour_count,
    )
