from checkin_heatmap.models import SnapshotModel


class HourlyResponse(SnapshotModel):
    """Hour-of-day histogram with chart axis labels and its peak."""

    hours: list[int]
    labels: list[str]
    peak_hour: int
    peak_hour_count: int


class ReloadResponse(SnapshotModel):
    """Summary of a completed CSV reload."""

    status: str
    rows: int
    discarded: int
    days_visited: int
