"""arrscout - find and rank releases across Radarr, Sonarr and Prowlarr."""

from .__version__ import __version__

__all__ = ["__version__"]
