"""
config.py - Configuration model for arrscout
"""

from pathlib import Path
from typing import Dict, Optional
from pydantic import BaseModel, Field, model_validator
from rich.console import Console
import sys

try:
    import tomllib
except ModuleNotFoundError:
    import tomli as tomllib

console = Console()

DEFAULT_SETTINGS_PATH = "~/.config/arrscout/settings.json"


class ServiceConfig(BaseModel):
    type: str
    url: str
    api_key: str = ""
    name: str = ""
    timeout: float = Field(default=15.0, gt=0, description="Per-request timeout in seconds")
    enabled: bool = True

    @property
    def display_name(self) -> str:
        return self.name or self.type


class DiscoveryConfig(BaseModel):
    """Defaults for release discovery and result caching."""

    prefer_quality: bool = Field(
        default=True,
        description="Rank by quality first, then seeders (False flips the order)"
    )
    min_seeders: int = Field(default=0, ge=0)
    fresh_seconds: float = Field(
        default=600,
        ge=0,
        description="Cached results younger than this are returned without refetching"
    )
    retention_seconds: float = Field(
        default=1800,
        ge=0,
        description="Cached results older than this are evicted"
    )

    @model_validator(mode="after")
    def _retention_covers_fresh_window(self) -> "DiscoveryConfig":
        if self.retention_seconds < self.fresh_seconds:
            raise ValueError("retention_seconds must be at least fresh_seconds")
        return self


class SettingsStoreConfig(BaseModel):
    path: str = DEFAULT_SETTINGS_PATH

    @property
    def resolved_path(self) -> Path:
        return Path(self.path).expanduser()


class ArrscoutConfig(BaseModel):
    services: Dict[str, ServiceConfig] = Field(default_factory=dict)
    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
    settings: SettingsStoreConfig = Field(default_factory=SettingsStoreConfig)
    config_path: Optional[Path] = None

    def active_services(self) -> Dict[str, ServiceConfig]:
        """Services that can be registered: enabled and carrying an API key."""
        return {
            service_id: service
            for service_id, service in self.services.items()
            if service.enabled and service.api_key
        }


def load_config(config_path: Path) -> ArrscoutConfig:
    """Load configuration from TOML file"""

    if not config_path.exists():
        console.print(f"[red][ERROR][/red] Configuration file not found: {config_path}")
        console.print("Please create config.toml with your service URLs and API keys")
        sys.exit(1)

    try:
        with open(config_path, "rb") as f:
            config_data = tomllib.load(f)

        config = ArrscoutConfig(
            services={
                service_id: ServiceConfig(**service_data)
                for service_id, service_data in config_data.get("services", {}).items()
            },
            discovery=DiscoveryConfig(**config_data.get("discovery", {})),
            settings=SettingsStoreConfig(**config_data.get("settings", {})),
            config_path=config_path
        )

        return config

    except Exception as e:
        console.print(f"[red][ERROR][/red] Error loading configuration: {e}")
        sys.exit(1)
