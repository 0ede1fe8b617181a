from collections.abc import Iterable

from checkin_heatmap.services.record_parser import ValidRecord


HOURS_PER_DAY = 24


def day_key(record: ValidRecord) -> str:
    return record.timestamp.date().isoformat()


def aggregate_daily(records: Iterable[ValidRecord]) -> dict[str, int]:
    """Count check-ins per local calendar date (`yyyy-MM-dd`)."""

    counts: dict[str, int] = {}
    for record in records:
        key = day_key(record)
        counts[key] = counts.get(key, 0) + 1
    return counts


def aggregate_hourly(records: Iterable[ValidRecord]) -> list[int]:
    """Count check-ins per local hour of day, always 24 buckets."""

    histogram = [0] * HOURS_PER_DAY
    for record in records:
        histogram[record.timestamp.hour] += 1
    return histogram


def find_peak_hour(histogram: list[int]) -> tuple[int, int]:
    """Return `(hour, count)` of the busiest bucket.

    The earliest hour wins a tie, and an empty histogram yields `(0, 0)`.
    """

    peak_hour = 0
    peak_count = 0
    for hour, count in enumerate(histogram):
        if count > peak_count:
            peak_hour = hour
            peak_count = count
    return peak_hour, peak_count


def hour_labels() -> list[str]:
    return [f"{hour}:00" for hour in range(HOURS_PER_DAY)]
