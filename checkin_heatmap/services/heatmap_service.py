import logging
from collections.abc import Iterable

import httpx

from checkin_heatmap.csv_source import CSVSourceError
from checkin_heatmap.csv_source import load_rows
from checkin_heatmap.models import HeatmapSnapshot
from checkin_heatmap.services.aggregation import aggregate_daily
from checkin_heatmap.services.aggregation import aggregate_hourly
from checkin_heatmap.services.aggregation import find_peak_hour
from checkin_heatmap.services.calendar_service import TARGET_YEAR
from checkin_heatmap.services.calendar_service import build_calendar
from checkin_heatmap.services.record_parser import parse_rows
from checkin_heatmap.services.stats_service import calculate_stats


logger = logging.getLogger(__name__)


class CheckinPipeline:
    """Pure fold from raw CSV rows to a complete heatmap snapshot."""

    def __init__(self, year: int = TARGET_YEAR) -> None:
        self.year = year

    def ingest(self, rows: Iterable[object]) -> HeatmapSnapshot:
        """Rebuild every derived structure from `rows`."""

        rows = list(rows)
        parsed = parse_rows(rows)
        day_counts = aggregate_daily(parsed.records)
        hourly = aggregate_hourly(parsed.records)
        peak_hour, peak_hour_count = find_peak_hour(hourly)

        if not day_counts:
            logger.warning("No valid data was parsed from %d rows", len(rows))

        return HeatmapSnapshot(
            year=self.year,
            day_counts=dict(sorted(day_counts.items())),
            hourly=hourly,
            stats=calculate_stats(day_counts, peak_hour, peak_hour_count),
            calendar=build_calendar(self.year, day_counts),
            total_rows=len(rows),
            discarded_rows=parsed.discarded,
        )

    def empty(self) -> HeatmapSnapshot:
        return self.ingest([])


class SnapshotStore:
    """Holds the latest snapshot and swaps in a new one after each load."""

    def __init__(
        self,
        pipeline: CheckinPipeline | None = None,
        snapshot: HeatmapSnapshot | None = None,
    ) -> None:
        self.pipeline = pipeline or CheckinPipeline()
        self._snapshot = snapshot or self.pipeline.empty()

    @property
    def current(self) -> HeatmapSnapshot:
        return self._snapshot

    async def reload(
        self,
        source: str,
        timeout: float = 20.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> HeatmapSnapshot:
        """Load `source` and replace the current snapshot.

        Raises:
            CSVSourceError: If the source cannot be loaded. The previous
                snapshot is kept.
        """

        try:
            rows = await load_rows(source, timeout=timeout, transport=transport)
        except CSVSourceError:
            logger.error("Error loading CSV from %s", source, exc_info=True)
            raise

        snapshot = self.pipeline.ingest(rows)
        self._snapshot = snapshot
        logger.info(
            "Loaded %d check-ins over %d days (%d rows discarded)",
            snapshot.stats.total_checkins,
            snapshot.stats.total_days_visited,
            snapshot.discarded_rows,
        )
        return snapshot
