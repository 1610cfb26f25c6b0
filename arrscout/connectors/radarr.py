"""Radarr (movie download service) connector."""

from __future__ import annotations

from typing import Optional

from arrscout.connectors.arr_client import ArrServiceAdapter, filter_min_seeders, map_candidate
from arrscout.connectors.resilience import list_of_dicts
from arrscout.discovery.types import SearchCandidate


class RadarrConnector(ArrServiceAdapter):
    connector_type = "radarr"

    async def search(self, query: str) -> list[SearchCandidate]:
        payload = await self._get("/movie/lookup", {"term": query})
        return [map_candidate(item) for item in list_of_dicts(payload, "radarr movie lookup")]

    async def lookup_by_catalog_id(self, catalog_id: int) -> Optional[SearchCandidate]:
        payload = await self._get("/movie", {"tmdbId": catalog_id})
        for item in list_of_dicts(payload, "radarr movie"):
            candidate = map_candidate(item)
            if candidate.internal_id is not None:
                return candidate
        return None

    async def get_releases(self, internal_id: int, *, min_seeders: int = 0) -> list[dict]:
        payload = await self._get("/release", {"movieId": internal_id})
        return filter_min_seeders(list_of_dicts(payload, "radarr releases"), min_seeders)
