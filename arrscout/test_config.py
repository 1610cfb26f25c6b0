from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from arrscout import config as config_module
from arrscout.config import DiscoveryConfig, ServiceConfig, load_config


def _write_config(tmp_path: Path, body: str) -> Path:
    path = tmp_path / "config.toml"
    path.write_text(body, encoding="utf-8")
    return path


def test_load_config_reads_services_and_discovery(tmp_path: Path) -> None:
    path = _write_config(
        tmp_path,
        """
[services.radarr]
type = "radarr"
url = "http://localhost:7878"
api_key = "abc123"

[services.jellyseerr]
type = "jellyseerr"
url = "http://localhost:5055"
api_key = ""

[discovery]
prefer_quality = false
min_seeders = 5

[settings]
path = "~/arrscout-settings.json"
""",
    )

    config = load_config(path)

    assert set(config.services) == {"radarr", "jellyseerr"}
    assert config.services["radarr"].timeout == 15.0
    assert config.discovery.prefer_quality is False
    assert config.discovery.min_seeders == 5
    assert config.discovery.fresh_seconds == 600
    assert config.settings.resolved_path == Path("~/arrscout-settings.json").expanduser()
    assert config.config_path == path


def test_active_services_skips_disabled_and_keyless(tmp_path: Path) -> None:
    path = _write_config(
        tmp_path,
        """
[services.radarr]
type = "radarr"
url = "http://localhost:7878"
api_key = "abc"

[services.sonarr]
type = "sonarr"
url = "http://localhost:8989"
api_key = "def"
enabled = false

[services.prowlarr]
type = "prowlarr"
url = "http://localhost:9696"
""",
    )

    config = load_config(path)

    assert list(config.active_services()) == ["radarr"]


def test_load_config_missing_file_exits(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    lines: list[str] = []
    monkeypatch.setattr(config_module.console, "print", lambda msg, *_a, **_k: lines.append(str(msg)))

    with pytest.raises(SystemExit) as excinfo:
        load_config(tmp_path / "missing.toml")

    assert excinfo.value.code == 1
    assert any("Configuration file not found" in line for line in lines)


def test_load_config_invalid_values_exit(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = _write_config(tmp_path, "[discovery]\nmin_seeders = -1\n")
    monkeypatch.setattr(config_module.console, "print", lambda *_a, **_k: None)

    with pytest.raises(SystemExit):
        load_config(path)


def test_service_timeout_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        ServiceConfig(type="radarr", url="http://x", timeout=0)


def test_service_display_name_falls_back_to_type() -> None:
    assert ServiceConfig(type="radarr", url="http://x").display_name == "radarr"
    assert ServiceConfig(type="radarr", url="http://x", name="4K Radarr").display_name == "4K Radarr"


def test_discovery_defaults() -> None:
    discovery = DiscoveryConfig()

    assert discovery.prefer_quality is True
    assert discovery.min_seeders == 0
    assert discovery.retention_seconds == 1800


def test_retention_shorter_than_fresh_window_is_rejected(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    with pytest.raises(ValidationError, match="retention_seconds must be at least fresh_seconds"):
        DiscoveryConfig(fresh_seconds=600, retention_seconds=300)

    path = _write_config(tmp_path, "[discovery]\nfresh_seconds = 600\nretention_seconds = 300\n")
    lines: list[str] = []
    monkeypatch.setattr(config_module.console, "print", lambda msg, *_a, **_k: lines.append(str(msg)))

    with pytest.raises(SystemExit) as excinfo:
        load_config(path)

    assert excinfo.value.code == 1
    assert any(line.startswith("[red][ERROR][/red] Error loading configuration") for line in lines)
