import logging
from typing import Any

import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration

from checkin_heatmap.settings import Settings


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(app_settings: Settings) -> None:
    """Configure root logging from the configured level name."""

    level = logging.getLevelName(app_settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("checkin_heatmap").setLevel(level)


def sentry_options(app_settings: Settings) -> dict[str, Any] | None:
    """Build Sentry SDK options, or None when no DSN is configured.

    Row discards are logged as warnings and stay breadcrumbs. Failed CSV
    loads are logged as errors and become Sentry events.
    """

    if not app_settings.sentry_dsn:
        return None

    return {
        "dsn": app_settings.sentry_dsn,
        "environment": app_settings.environment,
        "release": app_settings.release,
        "traces_sample_rate": app_settings.sentry_traces_sample_rate,
        "send_default_pii": False,
        "integrations": [
            LoggingIntegration(level=logging.WARNING, event_level=logging.ERROR)
        ],
    }


def init_sentry(app_settings: Settings) -> bool:
    """Initialize Sentry when configured and report whether it was enabled."""

    options = sentry_options(app_settings)
    if options is None:
        return False

    sentry_sdk.init(**options)
    return True
