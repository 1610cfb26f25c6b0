from __future__ import annotations

import random

import pytest

from arrscout import logger
from arrscout.discovery.normalize import dedup_key
from arrscout.discovery.ranking import (
    compute_score,
    deduplicate,
    filter_releases_by_quality,
    merge_and_rank,
)
from arrscout.discovery.types import DiscoverOptions, NormalizedRelease


def _release(
    title: str,
    *,
    seeders: int = 0,
    quality: int = 0,
    size: int = 2_000_000_000,
    protocol: str = "torrent",
    indexer: str = "IndexerA",
    source: str = "radarr",
) -> NormalizedRelease:
    return NormalizedRelease(
        title=title,
        size_bytes=size,
        seeders=seeders,
        leechers=0,
        quality_rank=quality,
        protocol=protocol,  # type: ignore[arg-type]
        indexer_name=indexer,
        source_connector_id=source,
    )


def _sample_releases() -> list[NormalizedRelease]:
    return [
        _release("Movie A 1080p", seeders=50, quality=4, source="radarr"),
        _release("movie.a.1080p", seeders=80, quality=4, source="prowlarr", indexer="IndexerB"),
        _release("Movie A 2160p", seeders=5, quality=5, size=20_000_000_000),
        _release("Movie A 720p", seeders=300, quality=3, size=1_000_000_000),
        _release("Movie A 720p", seeders=0, quality=3, size=1_000_000_000, protocol="usenet", indexer="NZB"),
        _release("Movie A CAM", seeders=2, quality=1, size=700_000_000),
        _release("Movie A 480p", seeders=12, quality=2, size=800_000_000, indexer="IndexerC"),
        _release("Movie A 480p", seeders=12, quality=2, size=800_000_000, indexer="IndexerB"),
    ]


@pytest.mark.parametrize("prefer_quality", [True, False])
def test_merge_and_rank_is_idempotent(prefer_quality: bool) -> None:
    options = DiscoverOptions(prefer_quality=prefer_quality, min_seeders=3)
    once = merge_and_rank(_sample_releases(), options)

    assert merge_and_rank(once, options) == once


def test_merge_and_rank_ignores_input_order() -> None:
    releases = _sample_releases()
    expected = merge_and_rank(releases)
    shuffled = list(releases)
    random.Random(7).shuffle(shuffled)

    assert merge_and_rank(shuffled) == expected


def test_dedup_keeps_one_release_per_key_with_most_seeders() -> None:
    releases = _sample_releases()
    ranked = merge_and_rank(releases)
    keys = [dedup_key(release) for release in ranked]

    assert len(keys) == len(set(keys))
    for kept in ranked:
        siblings = [release for release in releases if dedup_key(release) == dedup_key(kept)]
        assert all(kept.seeders >= sibling.seeders for sibling in siblings)


def test_dedup_tie_break_prefers_indexer_name_ascending() -> None:
    kept = deduplicate(
        [
            _release("Show S01", seeders=12, quality=2, indexer="Zeta"),
            _release("Show S01", seeders=12, quality=2, indexer="Alpha"),
        ]
    )

    assert [release.indexer_name for release in kept] == ["Alpha"]


def test_dedup_tie_break_prefers_quality_before_indexer() -> None:
    kept = deduplicate(
        [
            _release("Show S01", seeders=12, quality=4, indexer="Zeta"),
            _release("Show S01", seeders=12, quality=2, indexer="Alpha"),
        ]
    )

    assert [release.indexer_name for release in kept] == ["Zeta"]


def test_prefer_quality_ranking_is_monotonic() -> None:
    ranked = merge_and_rank(_sample_releases(), DiscoverOptions(prefer_quality=True))

    for a, b in zip(ranked, ranked[1:]):
        assert a.quality_rank > b.quality_rank or (
            a.quality_rank == b.quality_rank and a.seeders >= b.seeders
        )


def test_prefer_seeders_ranks_popular_release_first() -> None:
    ranked = merge_and_rank(
        [
            _release("Movie B UHD", seeders=10, quality=5, size=30_000_000_000),
            _release("Movie B DVD", seeders=90, quality=2, size=900_000_000),
        ],
        DiscoverOptions(prefer_quality=False),
    )

    assert [release.title for release in ranked] == ["Movie B DVD", "Movie B UHD"]


def test_min_seeders_filters_torrents_but_not_usenet() -> None:
    options = DiscoverOptions(min_seeders=10)
    ranked = merge_and_rank(_sample_releases(), options)

    assert all(release.seeders >= 10 for release in ranked if release.protocol != "usenet")
    assert any(release.protocol == "usenet" for release in ranked)
    assert not any(release.title == "Movie A CAM" for release in ranked)


def test_scores_follow_ranking_mode() -> None:
    release = _release("Movie C", seeders=2_000_000, quality=3)

    assert compute_score(release, prefer_quality=True) == 3 * 1_000_000 + 999_999
    assert compute_score(release, prefer_quality=False) == 2_000_000 * 10 + 3
    assert all(r.score is not None for r in merge_and_rank(_sample_releases()))


def test_merge_and_rank_rejects_invalid_input(monkeypatch: pytest.MonkeyPatch) -> None:
    warnings: list[str] = []
    monkeypatch.setattr(logger, "warning", lambda msg: warnings.append(msg))

    assert merge_and_rank(None) == []  # type: ignore[arg-type]
    assert merge_and_rank("releases") == []  # type: ignore[arg-type]
    assert len(warnings) == 2
    assert merge_and_rank([]) == []


def test_merge_and_rank_skips_non_release_items() -> None:
    ranked = merge_and_rank([_release("Movie D", seeders=1), {"title": "raw"}])  # type: ignore[list-item]

    assert [release.title for release in ranked] == ["Movie D"]


def test_filter_releases_by_quality() -> None:
    ranked = merge_and_rank(_sample_releases())

    kept = filter_releases_by_quality(ranked, "720p")

    assert kept and all(release.quality_rank >= 3 for release in kept)
    assert filter_releases_by_quality(ranked, None) == ranked
