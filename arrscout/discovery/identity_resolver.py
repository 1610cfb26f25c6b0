"""Resolve a media identity to one connector's internal ID."""

from __future__ import annotations

import re
from typing import Awaitable, Callable, Optional, Sequence

from arrscout import logger
from arrscout.discovery.mapping_helper import CrossServiceMapper
from arrscout.discovery.protocols import CatalogLookupConnector, ReleaseConnector
from arrscout.discovery.types import MediaIdentity, SearchCandidate

ERROR_MESSAGE_LIMIT = 200

Strategy = Callable[
    [MediaIdentity, ReleaseConnector, Optional[CrossServiceMapper]],
    Awaitable[Optional[int]],
]


def truncate_message(exc: BaseException, limit: int = ERROR_MESSAGE_LIMIT) -> str:
    message = str(exc) or type(exc).__name__
    if len(message) > limit:
        return message[:limit] + "..."
    return message


def _normalize_title(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip().casefold()


def _catalog_pairs(identity: MediaIdentity, candidate: SearchCandidate) -> list[tuple[int, int]]:
    pairs = []
    if identity.catalog_id is not None and candidate.catalog_id is not None:
        pairs.append((identity.catalog_id, candidate.catalog_id))
    if identity.secondary_catalog_id is not None and candidate.secondary_catalog_id is not None:
        pairs.append((identity.secondary_catalog_id, candidate.secondary_catalog_id))
    return pairs


def matches_title_query(identity: MediaIdentity, candidate: SearchCandidate) -> bool:
    """Catalog IDs decide when both sides have one; otherwise title and year must agree."""
    pairs = _catalog_pairs(identity, candidate)
    if pairs:
        return any(wanted == found for wanted, found in pairs)
    if not identity.title or not candidate.title:
        return False
    if _normalize_title(candidate.title) != _normalize_title(identity.title):
        return False
    return identity.year is None or candidate.year == identity.year


def _first_in_library(
    candidates: Sequence[SearchCandidate],
    predicate: Callable[[SearchCandidate], bool],
) -> Optional[int]:
    for candidate in candidates:
        if candidate.internal_id is None:
            continue
        if predicate(candidate):
            return candidate.internal_id
    return None


async def resolve_by_mapping(
    identity: MediaIdentity,
    connector: ReleaseConnector,
    mapper: Optional[CrossServiceMapper],
) -> Optional[int]:
    if identity.catalog_id is None:
        return None
    if mapper is not None:
        try:
            internal_id = await mapper.map_catalog_id(identity.catalog_id, connector.connector_type)
        except Exception as exc:
            logger.warning(f"[resolver] Mapping lookup for {connector.connector_id} failed: {truncate_message(exc)}")
            internal_id = None
        if internal_id:
            return internal_id
    if isinstance(connector, CatalogLookupConnector):
        logger.debug(f"[resolver] Trying catalog lookup on {connector.connector_id} for {identity.catalog_id}")
        candidate = await connector.lookup_by_catalog_id(identity.catalog_id)
        if candidate is not None and candidate.internal_id is not None:
            return candidate.internal_id
    return None


async def resolve_by_title(
    identity: MediaIdentity,
    connector: ReleaseConnector,
    mapper: Optional[CrossServiceMapper],
) -> Optional[int]:
    _ = mapper
    if not identity.title:
        return None
    logger.debug(f"[resolver] Trying title search on {connector.connector_id} for '{identity.title}'")
    candidates = await connector.search(identity.title)
    return _first_in_library(candidates, lambda candidate: matches_title_query(identity, candidate))


async def resolve_by_external_id(
    identity: MediaIdentity,
    connector: ReleaseConnector,
    mapper: Optional[CrossServiceMapper],
) -> Optional[int]:
    _ = mapper
    if not identity.external_id:
        return None
    logger.debug(f"[resolver] Trying external id search on {connector.connector_id} for {identity.external_id}")
    candidates = await connector.search(identity.external_id)
    return _first_in_library(candidates, lambda candidate: candidate.external_id == identity.external_id)


DEFAULT_STRATEGIES: tuple[Strategy, ...] = (
    resolve_by_mapping,
    resolve_by_title,
    resolve_by_external_id,
)


class IdentityResolver:
    """Try each strategy in order; the first internal ID found wins."""

    def __init__(self, strategies: Optional[Sequence[Strategy]] = None) -> None:
        self.strategies: tuple[Strategy, ...] = tuple(strategies or DEFAULT_STRATEGIES)

    async def resolve(
        self,
        identity: MediaIdentity,
        connector: ReleaseConnector,
        mapper: Optional[CrossServiceMapper] = None,
    ) -> Optional[int]:
        for strategy in self.strategies:
            try:
                internal_id = await strategy(identity, connector, mapper)
            except Exception as exc:
                logger.warning(
                    f"[resolver] {strategy.__name__} failed on {connector.connector_id}: {truncate_message(exc)}"
                )
                continue
            if internal_id:
                logger.debug(f"[resolver] {connector.connector_id} resolved via {strategy.__name__}: {internal_id}")
                return internal_id

        logger.warning(
            f"[resolver] Could not find {identity.describe()} on {connector.connector_id} after all lookup attempts"
        )
        return None
