import asyncio
from pathlib import Path

import pytest

from checkin_heatmap.csv_source import CSVSourceError
from checkin_heatmap.services.heatmap_service import CheckinPipeline
from checkin_heatmap.services.heatmap_service import SnapshotStore


RECORD_SETS = [
    [],
    [{"timestamp": "2024-01-01T09:00:00"}],
    [
        {"timestamp": "2024-01-01T09:00:00"},
        {"timestamp": "2024-01-02T09:00:00"},
        {"timestamp": "2024-01-02T10:00:00"},
    ],
    [
        {"timestamp": "2024-03-05T18:00:00"},
        {"timestamp": None},
        {"timestamp": "2024-03-01T07:00:00"},
        {"timestamp": "2024-03-02T07:30:00"},
        {"timestamp": "2024-03-02T23:00:00"},
        {"timestamp": "nonsense"},
    ],
]


def test_ingest_scenario_consecutive_days() -> None:
    snapshot = CheckinPipeline().ingest(RECORD_SETS[2])

    assert snapshot.day_counts == {"2024-01-01": 1, "2024-01-02": 2}
    assert snapshot.stats.total_checkins == 3
    assert snapshot.stats.total_days_visited == 2
    assert snapshot.stats.longest_streak == 2
    assert snapshot.stats.current_streak == 2


def test_ingest_scenario_peak_hour() -> None:
    rows = [{"timestamp": f"2024-02-{day:02d}T09:00:00"} for day in range(1, 8)]
    rows.append({"timestamp": "2024-02-08T14:45:00"})

    snapshot = CheckinPipeline().ingest(rows)

    assert snapshot.hourly[9] == 7
    assert snapshot.hourly[14] == 1
    assert snapshot.stats.peak_hour == 9
    assert snapshot.stats.peak_hour_count == 7


def test_ingest_scenario_empty() -> None:
    snapshot = CheckinPipeline().ingest([])

    assert snapshot.day_counts == {}
    assert snapshot.hourly == [0] * 24
    assert snapshot.stats.model_dump() == {
        "total_checkins": 0,
        "total_days_visited": 0,
        "longest_streak": 0,
        "current_streak": 0,
        "average_per_week": "0.0",
        "peak_hour": 0,
        "peak_hour_count": 0,
    }
    assert len(snapshot.calendar.weeks) == 53
    assert all(day.count == 0 for week in snapshot.calendar.weeks for day in week)


def test_ingest_scenario_null_timestamp_is_discarded() -> None:
    rows = [
        {"timestamp": "2024-05-01T08:00:00"},
        {"timestamp": None},
        {"timestamp": "2024-05-03T08:00:00"},
    ]

    snapshot = CheckinPipeline().ingest(rows)

    assert snapshot.stats.total_days_visited == 2
    assert snapshot.total_rows == 3
    assert snapshot.discarded_rows == 1


def test_ingest_scenario_gap_breaks_current_streak() -> None:
    snapshot = CheckinPipeline().ingest(RECORD_SETS[3])

    assert snapshot.day_counts == {"2024-03-01": 1, "2024-03-02": 2, "2024-03-05": 1}
    assert snapshot.stats.longest_streak == 2
    assert snapshot.stats.current_streak == 1
    assert snapshot.discarded_rows == 2


@pytest.mark.parametrize("rows", RECORD_SETS)
def test_ingest_invariants(rows: list[dict[str, object]]) -> None:
    snapshot = CheckinPipeline().ingest(rows)
    stats = snapshot.stats

    assert stats.total_checkins == sum(snapshot.day_counts.values())
    assert stats.total_checkins >= stats.total_days_visited >= 0
    assert len(snapshot.hourly) == 24
    assert all(count >= 0 for count in snapshot.hourly)
    assert (stats.longest_streak == 0) == (stats.total_days_visited == 0)
    assert 0 <= stats.current_streak <= stats.total_days_visited
    assert 0 <= stats.longest_streak <= stats.total_days_visited
    assert sum(label.width for label in snapshot.calendar.months) == len(
        snapshot.calendar.weeks
    )


@pytest.mark.parametrize("rows", RECORD_SETS)
def test_ingest_is_idempotent(rows: list[dict[str, object]]) -> None:
    pipeline = CheckinPipeline()

    assert pipeline.ingest(rows) == pipeline.ingest(rows)


def test_ingest_tolerates_arbitrary_row_shapes() -> None:
    rows = [None, 42, "text", ["2024-01-01"], {"timestamp": 3.5}, {"other": "x"}]

    snapshot = CheckinPipeline().ingest(rows)

    assert snapshot == CheckinPipeline().empty().model_copy(
        update={"total_rows": 6, "discarded_rows": 6}
    )


def test_pipeline_uses_configured_year() -> None:
    snapshot = CheckinPipeline(year=2023).ingest([{"timestamp": "2023-01-01T10:00:00"}])

    assert snapshot.year == 2023
    assert snapshot.calendar.weeks[0][0].count == 1
    assert snapshot.calendar.weeks[0][0].is_current_year is True


def test_store_starts_with_empty_snapshot() -> None:
    store = SnapshotStore()

    assert store.current == CheckinPipeline().empty()


def test_store_reload_replaces_snapshot(tmp_path: Path) -> None:
    source = tmp_path / "checkins.csv"
    source.write_text("timestamp\n2024-01-01T09:00:00\n", encoding="utf-8")
    store = SnapshotStore()
    before = store.current

    first = asyncio.run(store.reload(str(source)))

    assert store.current is first
    assert first.day_counts == {"2024-01-01": 1}
    assert before.day_counts == {}

    source.write_text("timestamp\n2024-02-01T09:00:00\n", encoding="utf-8")
    second = asyncio.run(store.reload(str(source)))

    assert second.day_counts == {"2024-02-01": 1}
    assert first.day_counts == {"2024-01-01": 1}


def test_store_reload_failure_keeps_previous_snapshot(tmp_path: Path) -> None:
    source = tmp_path / "checkins.csv"
    source.write_text("timestamp\n2024-01-01T09:00:00\n", encoding="utf-8")
    store = SnapshotStore()
    loaded = asyncio.run(store.reload(str(source)))

    with pytest.raises(CSVSourceError):
        asyncio.run(store.reload(str(tmp_path / "missing.csv")))

    assert store.current is loaded


def test_store_reload_survives_oversized_number_cell(tmp_path: Path) -> None:
    source = tmp_path / "checkins.csv"
    source.write_text(
        "timestamp,n\n2024-01-01T09:00:00," + "9" * 5000 + "\n", encoding="utf-8"
    )

    snapshot = asyncio.run(SnapshotStore().reload(str(source)))

    assert snapshot.day_counts == {"2024-01-01": 1}
    assert snapshot.discarded_rows == 0


def test_store_reload_counts_blank_cell_rows_as_discarded(tmp_path: Path) -> None:
    source = tmp_path / "checkins.csv"
    source.write_text(
        "timestamp,location\n2024-01-01T09:00:00,Downtown\n,\n\n", encoding="utf-8"
    )

    snapshot = asyncio.run(SnapshotStore().reload(str(source)))

    assert snapshot.total_rows == 2
    assert snapshot.discarded_rows == 1
    assert snapshot.day_counts == {"2024-01-01": 1}
