"""Jellyseerr (request manager) connector used as a library ID mapping source."""

from __future__ import annotations

from typing import Optional

from arrscout.connectors.arr_client import ArrServiceAdapter
from arrscout.connectors.resilience import expect_dict, optional_dict, optional_int

_MEDIA_PATHS = {"radarr": "movie", "sonarr": "tv"}


class JellyseerrConnector(ArrServiceAdapter):
    connector_type = "jellyseerr"

    async def map_to_connector_internal_id(
        self,
        catalog_id: int,
        target_connector_type: str,
    ) -> Optional[int]:
        media_path = _MEDIA_PATHS.get(target_connector_type.lower())
        if media_path is None:
            return None
        payload = expect_dict(await self._get(f"/{media_path}/{catalog_id}"), f"jellyseerr {media_path}")
        media_info = optional_dict(payload, "mediaInfo", f"jellyseerr {media_path}")
        return optional_int(media_info.get("externalServiceId"))
