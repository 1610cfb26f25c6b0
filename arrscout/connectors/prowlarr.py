"""Prowlarr (indexer aggregator) connector."""

from __future__ import annotations

from typing import Any, Dict

from arrscout.connectors.arr_client import ArrServiceAdapter, filter_min_seeders
from arrscout.connectors.resilience import list_of_dicts
from arrscout.discovery.types import MediaIdentity

MOVIE_CATEGORIES = 2000
TV_CATEGORIES = 5000


def build_search_params(identity: MediaIdentity) -> Dict[str, Any]:
    """Prefer ID tokens Prowlarr understands; fall back to title and year."""
    if identity.media_type == "movie":
        search_type, categories = "movie", MOVIE_CATEGORIES
    else:
        search_type, categories = "tvsearch", TV_CATEGORIES

    if identity.catalog_id is not None:
        query = f"{{TmdbId:{identity.catalog_id}}}"
    elif identity.media_type == "series" and identity.secondary_catalog_id is not None:
        query = f"{{TvdbId:{identity.secondary_catalog_id}}}"
    elif identity.external_id:
        query = f"{{ImdbId:{identity.external_id}}}"
    else:
        query = " ".join(part for part in (identity.title, str(identity.year or "")) if part).strip()
    return {"query": query, "type": search_type, "categories": categories}


class ProwlarrConnector(ArrServiceAdapter):
    connector_type = "prowlarr"

    async def search_releases(self, identity: MediaIdentity, *, min_seeders: int = 0) -> list[dict]:
        payload = await self._get("/search", build_search_params(identity))
        return filter_min_seeders(list_of_dicts(payload, "prowlarr search"), min_seeders)
