"""Query API: resolve, fetch, merge and rank releases for one media item."""

from __future__ import annotations

import asyncio
from collections import Counter
from typing import Optional

from arrscout import logger
from arrscout.discovery.cache import ReleaseCache
from arrscout.discovery.identity_resolver import IdentityResolver
from arrscout.discovery.mapping_helper import CrossServiceMapper
from arrscout.discovery.protocols import Chooser, SettingsStore
from arrscout.discovery.ranking import merge_and_rank
from arrscout.discovery.registry import ConnectorRegistry
from arrscout.discovery.release_fetcher import FetchTarget, fetch_all
from arrscout.discovery.types import (
    DiscoverOptions,
    IndexerTarget,
    MediaIdentity,
    NormalizedRelease,
    ResolvedTarget,
)
from arrscout.settings_store import InMemorySettingsStore


class ReleaseDiscoveryEngine:
    """Find every downloadable candidate for a movie or series across configured services."""

    def __init__(
        self,
        registry: ConnectorRegistry,
        *,
        settings: Optional[SettingsStore] = None,
        chooser: Optional[Chooser] = None,
        cache: Optional[ReleaseCache] = None,
        resolver: Optional[IdentityResolver] = None,
    ) -> None:
        self.registry = registry
        self.settings = settings or InMemorySettingsStore()
        self.chooser = chooser
        self.cache = cache if cache is not None else ReleaseCache()
        self.resolver = resolver or IdentityResolver()

    def _new_mapper(self, identity: MediaIdentity) -> Optional[CrossServiceMapper]:
        sources = self.registry.for_media(identity.media_type, "mapping")
        if not sources:
            return None
        return CrossServiceMapper(sources, self.settings, self.chooser)

    async def _resolve_one(
        self,
        identity: MediaIdentity,
        connector,
        mapper: Optional[CrossServiceMapper],
    ) -> Optional[ResolvedTarget]:
        internal_id = await self.resolver.resolve(identity, connector, mapper)
        if internal_id is None:
            return None
        return ResolvedTarget(
            connector_id=connector.connector_id,
            connector_type=connector.connector_type,
            internal_id=internal_id,
            connector=connector,
        )

    async def resolve_targets(self, identity: MediaIdentity) -> list[FetchTarget]:
        """Resolved download-service targets followed by indexer targets.

        A request manager reports one library ID per service type. The mapping
        step is skipped for a type with several registered instances; each of
        them looks the catalog ID up in its own library.
        """
        download_connectors = self.registry.for_media(identity.media_type, "download")
        mapper = self._new_mapper(identity) if identity.catalog_id is not None else None
        type_counts = Counter(connector.connector_type for connector in download_connectors)
        resolved = await asyncio.gather(
            *(
                self._resolve_one(
                    identity,
                    connector,
                    mapper if type_counts[connector.connector_type] == 1 else None,
                )
                for connector in download_connectors
            )
        )
        targets: list[FetchTarget] = [target for target in resolved if target is not None]
        targets.extend(
            IndexerTarget(
                connector_id=connector.connector_id,
                connector_type=connector.connector_type,
                identity=identity,
                connector=connector,
            )
            for connector in self.registry.for_media(identity.media_type, "indexer")
        )
        return targets

    async def discover_releases(
        self,
        identity: MediaIdentity,
        options: Optional[DiscoverOptions] = None,
    ) -> list[NormalizedRelease]:
        """Ranked releases for ``identity``; an empty list means nothing was found.

        Raises InvalidIdentityError before any network activity when the
        identity carries no catalog, secondary or external ID.
        """
        options = options or DiscoverOptions()
        identity.validate()
        key = identity.cache_key(options.prefer_quality, options.min_seeders)

        cached = self.cache.lookup(key)
        if cached is not None and cached.fresh:
            logger.debug(f"[engine] Serving cached releases for {identity.describe()} ({cached.age_seconds:.0f}s old)")
            return cached.releases

        targets = await self.resolve_targets(identity)
        if not targets:
            if cached is not None:
                logger.warning(
                    f"[engine] No connector could place {identity.describe()}; "
                    f"serving cached releases from {cached.age_seconds:.0f}s ago"
                )
                return cached.releases
            logger.warning(f"[engine] No connector could place {identity.describe()}")
            return []

        report = await fetch_all(targets, options)
        if report.all_failed:
            if cached is not None:
                logger.warning(
                    f"[engine] Every connector failed for {identity.describe()}; "
                    f"serving cached releases from {cached.age_seconds:.0f}s ago"
                )
                return cached.releases
            logger.warning(f"[engine] Every connector failed for {identity.describe()}")
            return []

        ranked = merge_and_rank(report.releases, options)
        self.cache.store(key, ranked)
        logger.debug(
            f"[engine] {len(report.releases)} release(s) from {report.attempted - len(report.failed)} "
            f"connector(s) ranked down to {len(ranked)}"
        )
        return ranked

    def clear_preferred_mapping_source(self) -> None:
        self.settings.set_preferred_mapping_source(None)


async def discover_releases(
    registry: ConnectorRegistry,
    identity: MediaIdentity,
    options: Optional[DiscoverOptions] = None,
    *,
    settings: Optional[SettingsStore] = None,
    chooser: Optional[Chooser] = None,
    cache: Optional[ReleaseCache] = None,
) -> list[NormalizedRelease]:
    engine = ReleaseDiscoveryEngine(registry, settings=settings, chooser=chooser, cache=cache)
    return await engine.discover_releases(identity, options)
