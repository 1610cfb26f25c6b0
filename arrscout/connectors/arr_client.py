"""Async HTTP adapter shared by the *arr and request-manager connectors."""

from __future__ import annotations

import asyncio
import time
from typing import Any, Dict, Optional

import aiohttp

from arrscout import logger
from arrscout.__version__ import __version__
from arrscout.config import ServiceConfig
from arrscout.connectors.resilience import is_retryable_exception, optional_int, retry_delay_seconds
from arrscout.discovery.types import SearchCandidate
from arrscout.rate_limits import (
    SERVICE_MIN_INTERVAL_SECONDS,
    SERVICE_WAIT_LOG_THRESHOLD_SECONDS,
    enforce_min_interval,
)
from arrscout.service_auth import build_service_auth_headers
from arrscout.service_profile import resolve_service_profile

DEFAULT_USER_AGENT = f"arrscout/{__version__}"
MAX_RETRIES = 3


class ArrServiceAdapter:
    """Base connector: one aiohttp session per service instance, paced and retried."""

    connector_type: str = ""

    def __init__(
        self,
        service_id: str,
        service: ServiceConfig,
        max_concurrency: int = 3,
        min_interval_seconds: float = SERVICE_MIN_INTERVAL_SECONDS,
    ):
        if not service.api_key:
            raise ValueError(f"API key is required for service '{service_id}'.")
        if self.connector_type and service.type.strip().lower() != self.connector_type:
            raise ValueError(
                f"Service '{service_id}' has type '{service.type}', expected '{self.connector_type}'."
            )

        self.connector_id = service_id
        self.connector_type = service.type.strip().lower()
        self.service = service
        self.timeout = service.timeout
        self.profile = resolve_service_profile(self.connector_type)
        self.base_url = service.url.rstrip("/")
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._min_interval_seconds = max(0.0, float(min_interval_seconds))
        self._session: aiohttp.ClientSession | None = None
        self._session_lock = asyncio.Lock()

    def _url(self, path: str) -> str:
        return f"{self.base_url}{self.profile.api_base}{path}"

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        status, data, elapsed_ms = await self._request_with_retries(self._url(path), params or {})
        logger.get_logger().api_response(status, data, elapsed_ms)
        return data

    async def _request_with_retries(
        self,
        url: str,
        params: Dict[str, Any],
    ) -> tuple[int, Any, float]:
        log = logger.get_logger()
        log.api_request("GET", url, params)
        service_name = self.connector_id.upper()
        request_start = time.time()

        async with self._semaphore:
            await self._enforce_interval()
            session = await self._ensure_session()
            for attempt in range(MAX_RETRIES):
                try:
                    async with session.get(url, params=params) as response:
                        if response.status >= 400:
                            text = await response.text()
                            raise aiohttp.ClientResponseError(
                                request_info=response.request_info,
                                history=response.history,
                                status=response.status,
                                message=text[:200],
                                headers=response.headers,
                            )
                        data = await response.json(content_type=None)
                        elapsed_ms = (time.time() - request_start) * 1000
                        return response.status, data, elapsed_ms
                except Exception as exc:
                    if not is_retryable_exception(exc):
                        raise
                    if attempt >= MAX_RETRIES - 1:
                        log.api_failed(service_name, MAX_RETRIES)
                        raise
                    headers = getattr(exc, "headers", None) or {}
                    delay = retry_delay_seconds(attempt=attempt, retry_after=headers.get("Retry-After"))
                    log.api_retry(service_name, attempt + 1, MAX_RETRIES, delay)
                    await asyncio.sleep(delay)
        raise RuntimeError("Unreachable retry exit")

    async def _enforce_interval(self) -> None:
        wait = await enforce_min_interval(
            self.base_url,
            min_interval_seconds=self._min_interval_seconds,
            service_type=self.connector_type,
        )
        log = logger.get_logger()
        log.api_wait_debug(self.connector_id.upper(), wait)
        if wait > SERVICE_WAIT_LOG_THRESHOLD_SECONDS:
            log.api_wait(self.connector_id.upper(), wait)

    async def _ensure_session(self) -> aiohttp.ClientSession:
        session = self._session
        if session is not None and not session.closed:
            return session

        async with self._session_lock:
            session = self._session
            if session is None or session.closed:
                timeout = aiohttp.ClientTimeout(total=self.timeout)
                self._session = aiohttp.ClientSession(
                    headers=self._get_headers(),
                    timeout=timeout,
                )
            return self._session

    def _get_headers(self) -> Dict[str, str]:
        headers = build_service_auth_headers(self.connector_type, self.service.api_key)
        headers["User-Agent"] = DEFAULT_USER_AGENT
        return headers

    async def check_status(self) -> Dict[str, Any]:
        """Fetch the service's status document (used by key verification)."""
        return await self._get(self.profile.status_path)

    async def close(self) -> None:
        """Close any open connections."""
        async with self._session_lock:
            session = self._session
            self._session = None
        if session is not None and not session.closed:
            await session.close()


def map_candidate(item: Dict[str, Any]) -> SearchCandidate:
    """Library/lookup resource to SearchCandidate; ids of 0 mean "not in library"."""
    return SearchCandidate(
        internal_id=optional_int(item.get("id")),
        title=str(item.get("title") or ""),
        year=optional_int(item.get("year")),
        catalog_id=optional_int(item.get("tmdbId")),
        secondary_catalog_id=optional_int(item.get("tvdbId")),
        external_id=item.get("imdbId") or None,
    )


def filter_min_seeders(releases: list[dict], min_seeders: int) -> list[dict]:
    """Drop torrents under ``min_seeders``; usenet and unknown seeder counts pass."""
    if min_seeders <= 0:
        return releases
    kept = []
    for release in releases:
        seeders = release.get("seeders")
        if seeders is None or str(release.get("protocol", "")).lower() == "usenet":
            kept.append(release)
            continue
        try:
            if int(seeders) >= min_seeders:
                kept.append(release)
        except (TypeError, ValueError):
            kept.append(release)
    return kept
