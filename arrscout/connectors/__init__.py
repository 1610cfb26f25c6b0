"""HTTP connectors for the services the discovery engine talks to."""

from arrscout.config import ServiceConfig

from .arr_client import ArrServiceAdapter
from .jellyseerr import JellyseerrConnector
from .prowlarr import ProwlarrConnector
from .radarr import RadarrConnector
from .sonarr import SonarrConnector

CONNECTOR_CLASSES: dict[str, type[ArrServiceAdapter]] = {
    "radarr": RadarrConnector,
    "sonarr": SonarrConnector,
    "prowlarr": ProwlarrConnector,
    "jellyseerr": JellyseerrConnector,
}


def build_connector(service_id: str, service: ServiceConfig) -> ArrServiceAdapter:
    connector_class = CONNECTOR_CLASSES.get(service.type.strip().lower())
    if connector_class is None:
        supported = ", ".join(sorted(CONNECTOR_CLASSES))
        raise ValueError(f"Unsupported service type '{service.type}'. Supported types: {supported}.")
    return connector_class(service_id, service)


__all__ = [
    "ArrServiceAdapter",
    "CONNECTOR_CLASSES",
    "JellyseerrConnector",
    "ProwlarrConnector",
    "RadarrConnector",
    "SonarrConnector",
    "build_connector",
]
