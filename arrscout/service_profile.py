"""Central service capability and policy definitions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ServiceRole = Literal["download", "indexer", "mapping"]


@dataclass(frozen=True)
class ServiceProfile:
    role: ServiceRole
    media_types: tuple[str, ...]
    api_base: str
    status_path: str
    request_limit: int | None
    maps_to: tuple[str, ...] = ()


_SERVICE_PROFILES: dict[str, ServiceProfile] = {
    "radarr": ServiceProfile(
        role="download",
        media_types=("movie",),
        api_base="/api/v3",
        status_path="/system/status",
        request_limit=None,
    ),
    "sonarr": ServiceProfile(
        role="download",
        media_types=("series",),
        api_base="/api/v3",
        status_path="/system/status",
        request_limit=None,
    ),
    "prowlarr": ServiceProfile(
        role="indexer",
        media_types=("movie", "series"),
        api_base="/api/v1",
        status_path="/system/status",
        request_limit=10,
    ),
    "jellyseerr": ServiceProfile(
        role="mapping",
        media_types=("movie", "series"),
        api_base="/api/v1",
        status_path="/status",
        request_limit=None,
        maps_to=("radarr", "sonarr"),
    ),
}


def _normalize_service_type(service_type: str | None) -> str:
    return (service_type or "").strip().lower()


def resolve_service_profile(service_type: str | None) -> ServiceProfile:
    normalized = _normalize_service_type(service_type)
    profile = _SERVICE_PROFILES.get(normalized)
    if profile is not None:
        return profile
    supported = ", ".join(sorted(_SERVICE_PROFILES))
    raise ValueError(
        f"Unsupported service type '{service_type}'. Supported types: {supported}."
    )


def service_types_for(media_type: str, role: ServiceRole) -> tuple[str, ...]:
    """Service types with ``role`` that handle ``media_type``, in stable order."""
    return tuple(
        name
        for name, profile in _SERVICE_PROFILES.items()
        if profile.role == role and media_type in profile.media_types
    )
