"""Configured connector instances, grouped by service type."""

from __future__ import annotations

from typing import Any, Callable, Iterable

from arrscout.service_profile import ServiceRole, resolve_service_profile, service_types_for


class ConnectorRegistry:
    def __init__(self, connectors: Iterable[Any] = ()) -> None:
        self._connectors: dict[str, Any] = {}
        for connector in connectors:
            self.register(connector)

    def register(self, connector: Any) -> None:
        resolve_service_profile(connector.connector_type)
        if connector.connector_id in self._connectors:
            raise ValueError(f"Connector '{connector.connector_id}' is already registered.")
        self._connectors[connector.connector_id] = connector

    def get(self, connector_id: str) -> Any:
        return self._connectors[connector_id]

    def by_type(self, connector_type: str) -> list[Any]:
        wanted = connector_type.lower()
        return [c for c in self._connectors.values() if c.connector_type.lower() == wanted]

    def for_media(self, media_type: str, role: ServiceRole) -> list[Any]:
        connectors: list[Any] = []
        for service_type in service_types_for(media_type, role):
            connectors.extend(self.by_type(service_type))
        return connectors

    def all(self) -> list[Any]:
        return list(self._connectors.values())

    def __len__(self) -> int:
        return len(self._connectors)

    @classmethod
    def from_services(cls, services: dict, factory: Callable[[str, Any], Any]) -> "ConnectorRegistry":
        return cls(factory(service_id, service) for service_id, service in services.items())

    async def close(self) -> None:
        for connector in self._connectors.values():
            close = getattr(connector, "close", None)
            if close is not None:
                await close()
