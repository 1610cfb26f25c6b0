"""Release discovery: identity resolution, concurrent fetch, merge and rank."""

from .cache import CacheLookup, ReleaseCache
from .engine import ReleaseDiscoveryEngine, discover_releases
from .identity_resolver import IdentityResolver
from .mapping_helper import CrossServiceMapper
from .ranking import filter_releases_by_quality, merge_and_rank
from .registry import ConnectorRegistry
from .release_fetcher import FetchReport, fetch_all, fetch_releases
from .types import (
    ChoicePrompt,
    DiscoverOptions,
    IndexerTarget,
    InvalidIdentityError,
    MediaIdentity,
    NormalizedRelease,
    ResolvedTarget,
    SearchCandidate,
)

__all__ = [
    "CacheLookup",
    "ChoicePrompt",
    "ConnectorRegistry",
    "CrossServiceMapper",
    "DiscoverOptions",
    "FetchReport",
    "IdentityResolver",
    "IndexerTarget",
    "InvalidIdentityError",
    "MediaIdentity",
    "NormalizedRelease",
    "ReleaseCache",
    "ReleaseDiscoveryEngine",
    "ResolvedTarget",
    "SearchCandidate",
    "discover_releases",
    "fetch_all",
    "fetch_releases",
    "filter_releases_by_quality",
    "merge_and_rank",
]
