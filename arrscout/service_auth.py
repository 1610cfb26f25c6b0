"""Service-specific authentication header formatting."""

from __future__ import annotations

from arrscout.service_profile import resolve_service_profile


def build_service_auth_headers(service_type: str, api_key: str) -> dict[str, str]:
    """
    Return the authentication headers for a service.

    Radarr, Sonarr, Prowlarr and Jellyseerr all accept ``X-Api-Key``; the
    profile lookup still runs so unknown service types fail loudly.
    """
    resolve_service_profile(service_type)
    key = (api_key or "").strip()
    if not key:
        raise ValueError(f"API key is required for service type '{service_type}'.")
    return {"X-Api-Key": key}
