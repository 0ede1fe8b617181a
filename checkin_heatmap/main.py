import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from checkin_heatmap.api.routes.heatmap import router
from checkin_heatmap.core.observability import configure_logging
from checkin_heatmap.core.observability import init_sentry
from checkin_heatmap.core.throttle import ReloadThrottle
from checkin_heatmap.csv_source import CSVSourceError
from checkin_heatmap.services.heatmap_service import SnapshotStore
from checkin_heatmap.settings import Settings


logger = logging.getLogger(__name__)


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Build the API application with its snapshot store and reload throttle."""

    app_settings = app_settings or Settings()
    configure_logging(app_settings)
    init_sentry(app_settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            await app.state.store.reload(
                app_settings.csv_source, timeout=app_settings.csv_timeout_seconds
            )
        except CSVSourceError:
            logger.warning("Serving empty heatmap, initial CSV load failed")
        yield

    app = FastAPI(title="Check-in heatmap", lifespan=lifespan)
    app.state.settings = app_settings
    app.state.store = SnapshotStore()
    app.state.reload_throttle = ReloadThrottle(
        max_reloads=app_settings.rate_limit_per_minute,
        window_seconds=app_settings.rate_limit_window_seconds,
    )
    app.include_router(router)
    return app


app = create_app()
