"""Map catalog IDs to another service's internal ID through a request manager."""

from __future__ import annotations

import asyncio
from typing import Optional, Sequence

from arrscout import logger
from arrscout.discovery.protocols import Chooser, MappingSource, SettingsStore
from arrscout.discovery.types import ChoicePrompt
from arrscout.service_profile import resolve_service_profile

_UNDECIDED = object()


class CrossServiceMapper:
    """Pick one mapping source (asking the user at most once) and query it.

    One instance serves one discovery query; the source decision, including a
    cancelled prompt, is remembered for its lifetime.
    """

    def __init__(
        self,
        sources: Sequence[MappingSource],
        settings: SettingsStore,
        chooser: Optional[Chooser] = None,
    ) -> None:
        self._sources = {source.connector_id: source for source in sources}
        self._settings = settings
        self._chooser = chooser
        self._selection_lock = asyncio.Lock()
        self._selected: object = _UNDECIDED

    async def select_source(self) -> Optional[MappingSource]:
        if self._selected is not _UNDECIDED:
            return self._selected  # type: ignore[return-value]
        async with self._selection_lock:
            if self._selected is _UNDECIDED:
                self._selected = await self._decide_source()
            return self._selected  # type: ignore[return-value]

    async def _decide_source(self) -> Optional[MappingSource]:
        if not self._sources:
            return None
        if len(self._sources) == 1:
            return next(iter(self._sources.values()))

        preferred = self._settings.get_preferred_mapping_source()
        if preferred:
            source = self._sources.get(preferred)
            if source is not None:
                return source
            logger.warning(
                f"[mapping] Preferred mapping source '{preferred}' is not configured; asking again"
            )

        if self._chooser is None:
            logger.warning("[mapping] Multiple mapping sources configured and no way to ask; skipping mapping")
            return None

        logger.debug("[mapping] Multiple mapping sources; prompting user")
        prompt = ChoicePrompt(
            title="Select Mapping Service",
            message="Multiple request services found. Select one to use for library ID lookup:",
            options=tuple(self._sources),
        )
        choice = await self._chooser(prompt)
        if choice is None:
            logger.info("[mapping] No mapping source chosen; falling back to search")
            return None
        source = self._sources.get(choice)
        if source is None:
            logger.warning(f"[mapping] Ignoring unknown mapping source choice '{choice}'")
            return None
        self._settings.set_preferred_mapping_source(choice)
        logger.info(f"[mapping] Saved '{choice}' as the default mapping source")
        return source

    async def map_catalog_id(self, catalog_id: int, target_connector_type: str) -> Optional[int]:
        source = await self.select_source()
        if source is None:
            return None
        profile = resolve_service_profile(source.connector_type)
        if target_connector_type.lower() not in profile.maps_to:
            return None
        internal_id = await source.map_to_connector_internal_id(catalog_id, target_connector_type)
        if internal_id:
            logger.debug(
                f"[mapping] {source.connector_id} mapped catalog id {catalog_id} to "
                f"{target_connector_type} id {internal_id}"
            )
            return internal_id
        return None

    def clear_preference(self) -> None:
        self._settings.set_preferred_mapping_source(None)
        self._selected = _UNDECIDED
