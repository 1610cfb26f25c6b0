"""Shared data structures for release discovery."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Optional

MediaType = Literal["movie", "series"]
ReleaseProtocol = Literal["usenet", "torrent", "unknown"]

MEDIA_TYPES: tuple[str, ...] = ("movie", "series")

CacheKey = tuple[str, Optional[int], Optional[int], Optional[str], bool, int]
DedupKey = tuple[str, int, str]


class InvalidIdentityError(ValueError):
    """Raised when a media identity cannot drive any resolution strategy."""


@dataclass(frozen=True)
class MediaIdentity:
    """What the caller is looking for: a movie or series and its catalog IDs."""

    media_type: MediaType
    catalog_id: Optional[int] = None
    secondary_catalog_id: Optional[int] = None
    external_id: Optional[str] = None
    title: Optional[str] = None
    year: Optional[int] = None

    def has_identifier(self) -> bool:
        return any(
            value not in (None, "")
            for value in (self.catalog_id, self.secondary_catalog_id, self.external_id)
        )

    def validate(self) -> None:
        if self.media_type not in MEDIA_TYPES:
            raise InvalidIdentityError(
                f"Unsupported media type '{self.media_type}'. Expected one of: {', '.join(MEDIA_TYPES)}."
            )
        if not self.has_identifier():
            raise InvalidIdentityError(
                "A catalog ID, secondary catalog ID, or external ID is required for release lookup."
            )

    def cache_key(self, prefer_quality: bool, min_seeders: int) -> CacheKey:
        return (
            self.media_type,
            self.catalog_id,
            self.secondary_catalog_id,
            self.external_id,
            prefer_quality,
            min_seeders,
        )

    def describe(self) -> str:
        parts = [self.media_type]
        if self.title:
            parts.append(f"'{self.title}'" + (f" ({self.year})" if self.year else ""))
        if self.catalog_id is not None:
            parts.append(f"tmdb={self.catalog_id}")
        if self.secondary_catalog_id is not None:
            parts.append(f"tvdb={self.secondary_catalog_id}")
        if self.external_id:
            parts.append(f"imdb={self.external_id}")
        return " ".join(parts)


@dataclass(frozen=True)
class DiscoverOptions:
    prefer_quality: bool = True
    min_seeders: int = 0


@dataclass(frozen=True)
class SearchCandidate:
    """One hit from a connector's search; ``internal_id`` is None when not in the library."""

    internal_id: Optional[int]
    title: str
    year: Optional[int] = None
    catalog_id: Optional[int] = None
    secondary_catalog_id: Optional[int] = None
    external_id: Optional[str] = None


@dataclass(frozen=True)
class ResolvedTarget:
    connector_id: str
    connector_type: str
    internal_id: int
    connector: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class IndexerTarget:
    """An indexer aggregator queried directly with the identity."""

    connector_id: str
    connector_type: str
    identity: MediaIdentity
    connector: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class NormalizedRelease:
    title: str
    size_bytes: int
    seeders: int
    leechers: int
    quality_rank: int
    protocol: ReleaseProtocol
    indexer_name: str
    source_connector_id: str
    quality_name: Optional[str] = None
    guid: Optional[str] = None
    download_url: Optional[str] = None
    info_url: Optional[str] = None
    publish_date: Optional[str] = None
    score: Optional[float] = None


@dataclass(frozen=True)
class ChoicePrompt:
    title: str
    message: str
    options: tuple[str, ...]
    escape_options: tuple[str, ...] = ("Open Settings", "Cancel")
