"""Concurrent release fetch across resolved targets with per-connector isolation."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Optional, Sequence, Union

from arrscout import logger
from arrscout.discovery.identity_resolver import truncate_message
from arrscout.discovery.normalize import normalize_release
from arrscout.discovery.types import DiscoverOptions, IndexerTarget, NormalizedRelease, ResolvedTarget

FetchTarget = Union[ResolvedTarget, IndexerTarget]


@dataclass
class FetchReport:
    releases: list[NormalizedRelease] = field(default_factory=list)
    attempted: int = 0
    failed: list[str] = field(default_factory=list)

    @property
    def all_failed(self) -> bool:
        return self.attempted > 0 and len(self.failed) == self.attempted


async def _fetch_raw(target: FetchTarget, options: DiscoverOptions) -> object:
    if isinstance(target, IndexerTarget):
        return await target.connector.search_releases(target.identity, min_seeders=options.min_seeders)
    return await target.connector.get_releases(target.internal_id, min_seeders=options.min_seeders)


async def _fetch_one(
    target: FetchTarget,
    options: DiscoverOptions,
) -> tuple[list[NormalizedRelease], bool]:
    """Returns (releases, ok). Never raises except on cancellation."""
    try:
        payload = await _fetch_raw(target, options)
        if not isinstance(payload, list):
            raise ValueError(f"expected a list of releases, got '{type(payload).__name__}'")
        releases = [normalize_release(raw, target.connector_id) for raw in payload]
    except Exception as exc:
        logger.warning(f"[fetcher] Release fetch failed for {target.connector_id}: {truncate_message(exc)}")
        return [], False
    logger.debug(f"[fetcher] {target.connector_id} returned {len(releases)} release(s)")
    return releases, True


async def fetch_all(
    targets: Sequence[FetchTarget],
    options: Optional[DiscoverOptions] = None,
) -> FetchReport:
    """Fetch every target concurrently; failures contribute nothing and are reported."""
    options = options or DiscoverOptions()
    finished = 0

    async def _tracked(target: FetchTarget) -> tuple[list[NormalizedRelease], bool]:
        nonlocal finished
        outcome = await _fetch_one(target, options)
        finished += 1
        logger.status(f"Fetching releases {finished}/{len(targets)}")
        return outcome

    try:
        results = await asyncio.gather(*(_tracked(target) for target in targets))
    finally:
        logger.clear_status()

    report = FetchReport(attempted=len(targets))
    for target, (releases, ok) in zip(targets, results):
        if not ok:
            report.failed.append(target.connector_id)
            continue
        report.releases.extend(releases)
    return report


async def fetch_releases(
    targets: Sequence[FetchTarget],
    options: Optional[DiscoverOptions] = None,
) -> list[NormalizedRelease]:
    report = await fetch_all(targets, options)
    return report.releases
