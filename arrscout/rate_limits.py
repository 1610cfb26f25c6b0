"""Per-server request pacing shared by every connector in the process."""

from __future__ import annotations

import asyncio
import time
from collections import deque
from typing import Optional

from arrscout.service_profile import resolve_service_profile

SERVICE_MIN_INTERVAL_SECONDS = 0.25
SERVICE_WAIT_LOG_THRESHOLD_SECONDS = 1.0
SERVICE_RATE_LIMIT_WINDOW_SECONDS = 10.0


class ServerPacer:
    """Spacing between request starts on one server, plus an optional cap per window."""

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._last_start: Optional[float] = None
        self._window_starts: deque[float] = deque()

    def _delay(self, now: float, min_interval: float, request_limit: Optional[int]) -> float:
        delay = 0.0
        if self._last_start is not None:
            delay = min_interval - (now - self._last_start)
        if request_limit:
            window_open = now - SERVICE_RATE_LIMIT_WINDOW_SECONDS
            while self._window_starts and self._window_starts[0] <= window_open:
                self._window_starts.popleft()
            if len(self._window_starts) >= request_limit:
                delay = max(delay, self._window_starts[0] + SERVICE_RATE_LIMIT_WINDOW_SECONDS - now)
        return max(delay, 0.0)

    async def acquire(self, min_interval: float, request_limit: Optional[int] = None) -> float:
        """Wait for this server's turn and record the start. Returns the wait applied."""
        async with self._lock:
            delay = self._delay(time.monotonic(), max(0.0, float(min_interval)), request_limit)
            if delay > 0:
                await asyncio.sleep(delay)
            started = time.monotonic()
            self._last_start = started
            if request_limit:
                self._window_starts.append(started)
            return delay


_pacers: dict[str, ServerPacer] = {}


def pacer_for(base_url: str) -> ServerPacer:
    key = base_url.rstrip("/").lower()
    pacer = _pacers.get(key)
    if pacer is None:
        pacer = _pacers[key] = ServerPacer()
    return pacer


def _request_limit_for(service_type: Optional[str]) -> Optional[int]:
    if not service_type:
        return None
    try:
        return resolve_service_profile(service_type).request_limit
    except ValueError:
        return None


async def enforce_min_interval(
    base_url: str,
    min_interval_seconds: float = SERVICE_MIN_INTERVAL_SECONDS,
    service_type: Optional[str] = None,
) -> float:
    return await pacer_for(base_url).acquire(min_interval_seconds, _request_limit_for(service_type))


def _reset_rate_limits_for_tests() -> None:
    _pacers.clear()
