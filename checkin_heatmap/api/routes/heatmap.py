from fastapi import APIRouter
from fastapi import Depends
from fastapi import HTTPException
from fastapi import Request

from checkin_heatmap.api.schemas.heatmap import HourlyResponse
from checkin_heatmap.api.schemas.heatmap import ReloadResponse
from checkin_heatmap.core.security import require_reload_token
from checkin_heatmap.core.throttle import throttle_reload
from checkin_heatmap.csv_source import CSVSourceError
from checkin_heatmap.models import CalendarGrid
from checkin_heatmap.models import HeatmapSnapshot
from checkin_heatmap.models import Stats
from checkin_heatmap.services.aggregation import hour_labels
from checkin_heatmap.services.heatmap_service import SnapshotStore
from checkin_heatmap.settings import Settings


router = APIRouter()


def get_store(request: Request) -> SnapshotStore:
    return request.app.state.store


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_snapshot(store: SnapshotStore = Depends(get_store)) -> HeatmapSnapshot:
    return store.current


@router.get("/")
async def root() -> dict[str, str]:
    """Return a basic service greeting."""

    return {"message": "Check-in heatmap"}


@router.get("/health/live")
def health_live() -> dict[str, str]:
    """Return liveness probe response for health checks."""

    return {"status": "ok"}


@router.get("/checkins")
def get_checkins(
    snapshot: HeatmapSnapshot = Depends(get_snapshot),
) -> dict[str, int]:
    """Return check-in counts keyed by ISO date."""

    return snapshot.day_counts


@router.get("/hourly", response_model=HourlyResponse)
def get_hourly(snapshot: HeatmapSnapshot = Depends(get_snapshot)) -> HourlyResponse:
    """Return the hour-of-day histogram and its peak."""

    return HourlyResponse(
        hours=snapshot.hourly,
        labels=hour_labels(),
        peak_hour=snapshot.stats.peak_hour,
        peak_hour_count=snapshot.stats.peak_hour_count,
    )


@router.get("/stats", response_model=Stats)
def get_stats(snapshot: HeatmapSnapshot = Depends(get_snapshot)) -> Stats:
    """Return totals, streaks and weekly average."""

    return snapshot.stats


@router.get("/calendar", response_model=CalendarGrid)
def get_calendar(snapshot: HeatmapSnapshot = Depends(get_snapshot)) -> CalendarGrid:
    """Return the week grid and month labels for the target year."""

    return snapshot.calendar


@router.get("/snapshot", response_model=HeatmapSnapshot)
def get_full_snapshot(
    snapshot: HeatmapSnapshot = Depends(get_snapshot),
) -> HeatmapSnapshot:
    """Return every derived structure from the latest load."""

    return snapshot


@router.post(
    "/reload",
    response_model=ReloadResponse,
    dependencies=[Depends(throttle_reload), Depends(require_reload_token)],
)
async def reload_checkins(
    store: SnapshotStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> ReloadResponse:
    """Re-read the CSV source and replace the current snapshot."""

    try:
        snapshot = await store.reload(
            settings.csv_source, timeout=settings.csv_timeout_seconds
        )
    except CSVSourceError as exc:
        raise HTTPException(
            status_code=502, detail="CSV source could not be loaded"
        ) from exc

    return ReloadResponse(
        status="ok",
        rows=snapshot.total_rows,
        discarded=snapshot.discarded_rows,
        days_visited=snapshot.stats.total_days_visited,
    )
