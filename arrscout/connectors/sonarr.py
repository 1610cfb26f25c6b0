"""Sonarr (series download service) connector."""

from __future__ import annotations

from typing import Any, Dict, Optional

from aiohttp import ClientResponseError

from arrscout import logger
from arrscout.connectors.arr_client import ArrServiceAdapter, filter_min_seeders, map_candidate
from arrscout.connectors.resilience import list_of_dicts
from arrscout.discovery.types import SearchCandidate


class SonarrConnector(ArrServiceAdapter):
    connector_type = "sonarr"

    async def search(self, query: str) -> list[SearchCandidate]:
        payload = await self._get("/series/lookup", {"term": query})
        return [map_candidate(item) for item in list_of_dicts(payload, "sonarr series lookup")]

    def _release_endpoints(self, series_id: int) -> tuple[str, ...]:
        # Older and newer Sonarr builds disagree on where releases live.
        return ("/release", f"/series/{series_id}/releases", "/releases")

    async def get_releases(
        self,
        internal_id: int,
        *,
        min_seeders: int = 0,
        season: Optional[int] = None,
        episode: Optional[int] = None,
    ) -> list[dict]:
        params: Dict[str, Any] = {"seriesId": internal_id}
        if season is not None:
            params["season"] = season
        if episode is not None:
            params["episode"] = episode

        tried = self._release_endpoints(internal_id)
        for endpoint in tried:
            try:
                payload = await self._get(endpoint, params)
            except ClientResponseError as exc:
                if exc.status == 404:
                    continue
                raise
            return filter_min_seeders(list_of_dicts(payload, f"sonarr {endpoint}"), min_seeders)

        logger.warning(
            f"[sonarr] {self.connector_id}: no working releases endpoint for series {internal_id} "
            f"(tried {', '.join(tried)})"
        )
        return []
