from collections.abc import Callable
from dataclasses import dataclass
from time import monotonic

from fastapi import HTTPException
from fastapi import Request


@dataclass
class _Window:
    opened_at: float
    count: int = 0


class ReloadThrottle:
    """Fixed-window counter of CSV reloads per client.

    Expired windows are dropped on every check, so the table only holds
    clients seen within the last window.
    """

    def __init__(
        self,
        max_reloads: int = 5,
        window_seconds: int = 60,
        clock: Callable[[], float] = monotonic,
    ) -> None:
        self.max_reloads = max(1, max_reloads)
        self.window_seconds = max(1, window_seconds)
        self._clock = clock
        self._windows: dict[str, _Window] = {}

    def __len__(self) -> int:
        return len(self._windows)

    def check(self, client: str) -> None:
        """Count one reload for `client`.

        Raises:
            HTTPException: 429 with `Retry-After` once the window is full.
        """

        now = self._clock()
        self._windows = {
            key: window
            for key, window in self._windows.items()
            if now - window.opened_at < self.window_seconds
        }

        window = self._windows.setdefault(client, _Window(opened_at=now))
        if window.count >= self.max_reloads:
            retry_after = window.opened_at + self.window_seconds - now
            raise HTTPException(
                status_code=429,
                detail="Too Many Requests",
                headers={"Retry-After": str(max(1, int(retry_after)))},
            )
        window.count += 1


def client_key(request: Request) -> str:
    """First X-Forwarded-For hop, else the socket peer."""

    first_hop, _, _ = request.headers.get("x-forwarded-for", "").partition(",")
    host = first_hop.strip() or getattr(request.client, "host", None)
    return host or "unknown"


async def throttle_reload(request: Request) -> None:
    request.app.state.reload_throttle.check(client_key(request))
