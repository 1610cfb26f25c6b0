"""Protocol definitions for the collaborators the discovery engine consumes."""

from __future__ import annotations

from typing import Optional, Protocol, Sequence, runtime_checkable

from arrscout.discovery.types import ChoicePrompt, MediaIdentity, SearchCandidate


class ReleaseConnector(Protocol):
    """Download-service connector: library search plus per-item releases."""

    connector_id: str
    connector_type: str

    async def search(self, query: str) -> Sequence[SearchCandidate]:
        ...

    async def get_releases(self, internal_id: int, *, min_seeders: int = 0) -> list[dict]:
        ...


@runtime_checkable
class CatalogLookupConnector(Protocol):
    """Optional extension: direct catalog ID to library item lookup."""

    async def lookup_by_catalog_id(self, catalog_id: int) -> Optional[SearchCandidate]:
        ...


class IndexerConnector(Protocol):
    """Indexer aggregator searched with the identity itself."""

    connector_id: str
    connector_type: str

    async def search_releases(self, identity: MediaIdentity, *, min_seeders: int = 0) -> list[dict]:
        ...


class MappingSource(Protocol):
    """Request-management service that knows other services' internal IDs."""

    connector_id: str
    connector_type: str

    async def map_to_connector_internal_id(
        self,
        catalog_id: int,
        target_connector_type: str,
    ) -> Optional[int]:
        ...


class Chooser(Protocol):
    """UI round-trip returning one of ``prompt.options`` or None."""

    async def __call__(self, prompt: ChoicePrompt) -> Optional[str]:
        ...


class SettingsStore(Protocol):
    def get_preferred_mapping_source(self) -> Optional[str]:
        ...

    def set_preferred_mapping_source(self, value: Optional[str]) -> None:
        ...
