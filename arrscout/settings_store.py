"""Persistent user settings read and written by the discovery engine."""

from __future__ import annotations

import json
from pathlib import Path

from arrscout import logger

PREFERRED_MAPPING_SOURCE_KEY = "preferred_mapping_source"


class InMemorySettingsStore:
    """Process-local settings; nothing survives the process."""

    def __init__(self, preferred_mapping_source: str | None = None) -> None:
        self._preferred_mapping_source = preferred_mapping_source

    def get_preferred_mapping_source(self) -> str | None:
        return self._preferred_mapping_source

    def set_preferred_mapping_source(self, value: str | None) -> None:
        self._preferred_mapping_source = value or None


class JsonSettingsStore:
    """Settings persisted as a small JSON object on disk."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning(f"Ignoring unreadable settings file {self.path}: {exc}")
            return {}
        if not isinstance(payload, dict):
            logger.warning(f"Ignoring settings file {self.path}: root must be an object")
            return {}
        return payload

    def _write(self, payload: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    def get_preferred_mapping_source(self) -> str | None:
        value = self._read().get(PREFERRED_MAPPING_SOURCE_KEY)
        if isinstance(value, str) and value.strip():
            return value.strip()
        return None

    def set_preferred_mapping_source(self, value: str | None) -> None:
        payload = self._read()
        if value:
            payload[PREFERRED_MAPPING_SOURCE_KEY] = value
        else:
            payload.pop(PREFERRED_MAPPING_SOURCE_KEY, None)
        self._write(payload)
