"""Raw connector payloads to NormalizedRelease, plus the shared dedup key."""

from __future__ import annotations

import math
import re
from typing import Any, Mapping, Optional

from arrscout.discovery.types import DedupKey, NormalizedRelease, ReleaseProtocol

# Checked in order; the first token found in the label wins.
QUALITY_RANKS: tuple[tuple[str, int], ...] = (
    ("2160p", 5),
    ("4k", 5),
    ("uhd", 5),
    ("1080p", 4),
    ("720p", 3),
    ("576p", 2),
    ("480p", 2),
    ("dvdrip", 2),
    ("dvd", 2),
    ("sdtv", 1),
    ("360p", 1),
    ("320p", 1),
    ("telesync", 1),
    ("hdcam", 1),
    ("cam", 1),
    ("ts", 1),
)
MAX_QUALITY_RANK = 5

_SIZE_UNITS = {
    "b": 1,
    "kb": 1024,
    "kib": 1024,
    "mb": 1024 ** 2,
    "mib": 1024 ** 2,
    "gb": 1024 ** 3,
    "gib": 1024 ** 3,
    "tb": 1024 ** 4,
    "tib": 1024 ** 4,
}
_SIZE_PATTERN = re.compile(r"^\s*([0-9]+(?:[.,][0-9]+)?)\s*([a-z]*)\s*$", re.IGNORECASE)
_LABEL_TOKENS = re.compile(r"[a-z0-9]+")
_NON_ALNUM = re.compile(r"[\W_]+", re.UNICODE)

# Download-progress fields that mean nothing before a grab.
_DROPPED_FIELDS = ("sizeleft", "timeleft")

SIZE_BUCKET_STEP = math.log(1.01)


def quality_rank_for_resolution(resolution: object) -> Optional[int]:
    try:
        value = int(resolution)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if value <= 0:
        return None
    if value >= 2160:
        return 5
    if value >= 1080:
        return 4
    if value >= 720:
        return 3
    if value >= 480:
        return 2
    return 1


def quality_rank_for_label(label: Optional[str]) -> int:
    if not label:
        return 0
    lower = label.lower()
    tokens = set(_LABEL_TOKENS.findall(lower))
    for key, rank in QUALITY_RANKS:
        # Short keys must be whole tokens ("ts" inside "tests" is not telesync).
        if len(key) <= 3:
            if key in tokens:
                return rank
        elif key in lower:
            return rank
    return 0


def parse_size_bytes(value: object) -> int:
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        if not math.isfinite(value) or value < 0:
            return 0
        return int(value)
    if isinstance(value, str):
        match = _SIZE_PATTERN.match(value)
        if not match:
            return 0
        number = float(match.group(1).replace(",", "."))
        unit = match.group(2).lower() or "b"
        multiplier = _SIZE_UNITS.get(unit)
        if multiplier is None:
            return 0
        return int(number * multiplier)
    return 0


def _coerce_count(value: object) -> int:
    if value is None or isinstance(value, bool):
        return 0
    try:
        count = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0
    return max(count, 0)


def normalize_protocol(value: object) -> ReleaseProtocol:
    text = str(value or "").strip().lower()
    if text == "usenet":
        return "usenet"
    if text == "torrent":
        return "torrent"
    return "unknown"


def normalize_title(title: str) -> str:
    return _NON_ALNUM.sub(" ", title.lower()).strip()


def size_bucket(size_bytes: int) -> int:
    """Sizes within about 1% of each other share a bucket."""
    if size_bytes <= 0:
        return 0
    return round(math.log(size_bytes) / SIZE_BUCKET_STEP)


def dedup_key(release: NormalizedRelease) -> DedupKey:
    return (normalize_title(release.title), size_bucket(release.size_bytes), release.protocol)


def _quality_fields(raw: Mapping[str, Any]) -> tuple[Optional[str], Optional[object]]:
    quality = raw.get("quality")
    # Radarr/Sonarr nest the name: {"quality": {"quality": {"name": ..., "resolution": ...}}}
    if isinstance(quality, Mapping):
        inner = quality.get("quality", quality)
        if isinstance(inner, Mapping):
            return inner.get("name"), inner.get("resolution")
        return None, None
    if isinstance(quality, str):
        return quality, None
    return None, None


def strip_progress_fields(raw: Mapping[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in raw.items() if key not in _DROPPED_FIELDS}


def normalize_release(raw: Mapping[str, Any], source_connector_id: str) -> NormalizedRelease:
    """Map a Radarr/Sonarr ReleaseResource or a Prowlarr search result."""
    if not isinstance(raw, Mapping):
        raise ValueError(f"release from {source_connector_id} has unexpected type '{type(raw).__name__}'")
    data = strip_progress_fields(raw)
    title = data.get("title")
    if not isinstance(title, str) or not title.strip():
        raise ValueError(f"release from {source_connector_id} has no title")

    quality_name, resolution = _quality_fields(data)
    rank = quality_rank_for_resolution(resolution)
    if rank is None:
        rank = quality_rank_for_label(quality_name)
        if rank == 0:
            rank = quality_rank_for_label(title)

    indexer = data.get("indexer") or data.get("indexerName") or ""
    guid = data.get("guid") or data.get("infoHash")
    return NormalizedRelease(
        title=title.strip(),
        size_bytes=parse_size_bytes(data.get("size")),
        seeders=_coerce_count(data.get("seeders")),
        leechers=_coerce_count(data.get("leechers")),
        quality_rank=rank,
        protocol=normalize_protocol(data.get("protocol")),
        indexer_name=str(indexer),
        source_connector_id=source_connector_id,
        quality_name=quality_name,
        guid=str(guid) if guid else None,
        download_url=data.get("downloadUrl") or data.get("magnetUrl"),
        info_url=data.get("infoUrl"),
        publish_date=data.get("publishDate"),
    )
