"""Merge, deduplicate and rank normalized releases."""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Optional

from arrscout import logger
from arrscout.discovery.normalize import dedup_key, quality_rank_for_label
from arrscout.discovery.types import DedupKey, DiscoverOptions, NormalizedRelease

SEEDER_SCORE_CAP = 999_999
QUALITY_SCORE_WEIGHT = SEEDER_SCORE_CAP + 1
SEEDER_SCORE_WEIGHT = 10


def passes_seeder_filter(release: NormalizedRelease, min_seeders: int) -> bool:
    """Usenet has no seeders, so only non-usenet releases are held to the threshold."""
    if release.protocol == "usenet":
        return True
    return release.seeders >= min_seeders


def _representative_key(release: NormalizedRelease) -> tuple:
    # min() over this key picks the most seeded, then best quality, then first indexer name.
    return (
        -release.seeders,
        -release.quality_rank,
        release.indexer_name,
        release.source_connector_id,
        release.title,
        release.size_bytes,
    )


def deduplicate(releases: Iterable[NormalizedRelease]) -> list[NormalizedRelease]:
    groups: dict[DedupKey, NormalizedRelease] = {}
    for release in releases:
        key = dedup_key(release)
        existing = groups.get(key)
        if existing is None or _representative_key(release) < _representative_key(existing):
            groups[key] = release
    return list(groups.values())


def compute_score(release: NormalizedRelease, prefer_quality: bool) -> float:
    if prefer_quality:
        return float(release.quality_rank * QUALITY_SCORE_WEIGHT + min(release.seeders, SEEDER_SCORE_CAP))
    return float(release.seeders * SEEDER_SCORE_WEIGHT + release.quality_rank)


def _sort_key(release: NormalizedRelease, prefer_quality: bool) -> tuple:
    primary, secondary = (
        (release.quality_rank, release.seeders)
        if prefer_quality
        else (release.seeders, release.quality_rank)
    )
    return (
        -primary,
        -secondary,
        release.indexer_name,
        release.title,
        release.source_connector_id,
        release.protocol,
        release.size_bytes,
    )


def merge_and_rank(
    releases: Iterable[NormalizedRelease],
    options: Optional[DiscoverOptions] = None,
) -> list[NormalizedRelease]:
    """Filter by seeders, collapse duplicates, and order the survivors.

    The result depends only on the set of input releases, never on their
    order, so ranking an already ranked list returns it unchanged.
    """
    options = options or DiscoverOptions()
    if isinstance(releases, (str, bytes)) or not isinstance(releases, Iterable):
        logger.warning(f"[ranking] Ignoring invalid releases input of type {type(releases).__name__}")
        return []

    eligible = [
        release
        for release in releases
        if isinstance(release, NormalizedRelease) and passes_seeder_filter(release, options.min_seeders)
    ]
    ranked = sorted(deduplicate(eligible), key=lambda release: _sort_key(release, options.prefer_quality))
    return [replace(release, score=compute_score(release, options.prefer_quality)) for release in ranked]


def filter_releases_by_quality(
    releases: list[NormalizedRelease],
    min_quality: Optional[str],
) -> list[NormalizedRelease]:
    """Keep releases at or above the rank of ``min_quality`` (e.g. "720p")."""
    if not min_quality:
        return releases
    min_rank = quality_rank_for_label(min_quality)
    return [release for release in releases if release.quality_rank >= min_rank]
