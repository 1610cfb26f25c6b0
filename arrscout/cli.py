#!/usr/bin/env python3
"""
cli.py - Entry point for arrscout
Find and rank releases for a movie or series across Radarr, Sonarr and Prowlarr.
"""

try:
    import asyncio
    import sys
    import argparse
    import time
    from pathlib import Path
    from typing import Optional
    from rich.console import Console
    from rich.prompt import Prompt
    from rich.table import Table
    import arrscout as pkg
    from . import logger
    from .api_verification import verify_api_keys
    from .config import ArrscoutConfig, load_config
    from .connectors import build_connector
    from .discovery import (
        ChoicePrompt,
        ConnectorRegistry,
        DiscoverOptions,
        InvalidIdentityError,
        MediaIdentity,
        NormalizedRelease,
        ReleaseCache,
        ReleaseDiscoveryEngine,
        filter_releases_by_quality,
    )
    from .settings_store import JsonSettingsStore
except ImportError as e:
    print(f"Error: Missing required dependency: {e}")
    print("Please install required dependencies: pip install -e .")
    sys.exit(1)

console = Console()
DEFAULT_RESULT_LIMIT = 25
_CLI_SESSION_START_MONOTONIC = time.monotonic()


def _ui_info(message: str) -> None:
    console.print(f"[cyan][INFO][/cyan] {message}")


def _ui_warn(message: str) -> None:
    console.print(f"[yellow][WARNING][/yellow] {message}")


def _ui_error(message: str) -> None:
    console.print(f"[red][ERROR][/red] {message}")


def _ui_prompt(label: str, default: str | None = None) -> str:
    if default is None:
        return Prompt.ask(label)
    return Prompt.ask(label, default=default)


def _reset_cli_session_timer() -> None:
    global _CLI_SESSION_START_MONOTONIC
    _CLI_SESSION_START_MONOTONIC = time.monotonic()


def _format_elapsed_runtime(seconds: float) -> str:
    if seconds < 60:
        return f"{seconds:.1f}s"
    if seconds < 3_600:
        return f"{seconds / 60:.1f}m"
    return f"{seconds / 3_600:.1f}h"


def redact_api_key(key: str) -> str:
    """Redact API key showing first 2 and last 2 characters"""
    if not key:
        return ""
    if len(key) <= 4:
        return "****"
    return f"{key[:2]}....{key[-2:]}"


def display_config_table(config: ArrscoutConfig) -> None:
    """Display configured services and their key status"""
    _ui_info(f"✓ Read configuration file \"{config.config_path}\"... ok!")

    table = Table(title="Configured services")
    table.add_column("Service", style="cyan")
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("URL")
    table.add_column("Status", style="green")
    for service_id, service in config.services.items():
        if not service.enabled:
            status = "✗ Disabled"
        elif service.api_key:
            status = f"✓ Configured = {redact_api_key(service.api_key)}"
        else:
            status = "✗ Not set"
        table.add_row(service_id, service.display_name, service.type, service.url, status)
    console.print(table)


def _parse_choice(raw: str, prompt: ChoicePrompt) -> Optional[str]:
    choice = raw.strip()
    if choice.isdigit() and 1 <= int(choice) <= len(prompt.options):
        return prompt.options[int(choice) - 1]
    for option in prompt.options:
        if option.lower() == choice.lower():
            return option
    lowered = choice.lower()
    if lowered in {"o", "settings", "open settings"}:
        _ui_info("Set a default with --prefer-mapping-source ID, or clear it with --clear-preferred-source.")
        return None
    if lowered not in {"c", "cancel", "x", ""}:
        _ui_warn("Invalid choice.")
    return None


async def prompt_choice(prompt: ChoicePrompt) -> Optional[str]:
    """Console chooser handed to the discovery engine."""
    console.print(f"\n[bold]{prompt.title}[/bold]")
    console.print(prompt.message)
    for idx, option in enumerate(prompt.options, start=1):
        console.print(f"  [{idx}] {option}")
    for escape_option in prompt.escape_options:
        console.print(f"  [{escape_option[0].upper()}] {escape_option}")
    # Prompt.ask blocks; keep other connector branches running meanwhile.
    raw = await asyncio.to_thread(_ui_prompt, "Choice", "C")
    return _parse_choice(raw, prompt)


def _format_size(size_bytes: int) -> str:
    size = float(size_bytes)
    for unit in ("B", "KiB", "MiB", "GiB"):
        if size < 1024:
            return f"{size:.1f} {unit}" if unit != "B" else f"{int(size)} B"
        size /= 1024
    return f"{size:.2f} TiB"


def render_releases(releases: list[NormalizedRelease], limit: int = DEFAULT_RESULT_LIMIT) -> None:
    if not releases:
        _ui_info("No releases found.")
        return
    table = Table(title=f"Releases ({len(releases)} found, showing {min(limit, len(releases))})")
    table.add_column("#", justify="right")
    table.add_column("Title", style="cyan")
    table.add_column("Quality")
    table.add_column("Size", justify="right")
    table.add_column("Seeders", justify="right", style="green")
    table.add_column("Protocol")
    table.add_column("Indexer", style="yellow")
    table.add_column("Source")
    for idx, release in enumerate(releases[:limit], start=1):
        seeders = "-" if release.protocol == "usenet" else f"{release.seeders:,}"
        table.add_row(
            str(idx),
            release.title,
            release.quality_name or str(release.quality_rank),
            _format_size(release.size_bytes),
            seeders,
            release.protocol,
            release.indexer_name,
            release.source_connector_id,
        )
    console.print(table)


def build_identity(args: argparse.Namespace) -> MediaIdentity:
    return MediaIdentity(
        media_type="series" if args.series else "movie",
        catalog_id=args.tmdb,
        secondary_catalog_id=args.tvdb,
        external_id=args.imdb,
        title=args.title,
        year=args.year,
    )


def build_engine(config: ArrscoutConfig) -> ReleaseDiscoveryEngine:
    registry = ConnectorRegistry.from_services(config.active_services(), build_connector)
    cache = ReleaseCache(
        fresh_seconds=config.discovery.fresh_seconds,
        retention_seconds=config.discovery.retention_seconds,
    )
    return ReleaseDiscoveryEngine(
        registry,
        settings=JsonSettingsStore(config.settings.resolved_path),
        chooser=prompt_choice,
        cache=cache,
    )


async def run_discovery(
    config: ArrscoutConfig,
    identity: MediaIdentity,
    options: DiscoverOptions,
    *,
    min_quality: Optional[str] = None,
    limit: int = DEFAULT_RESULT_LIMIT,
) -> list[NormalizedRelease]:
    engine = build_engine(config)
    if not len(engine.registry):
        _ui_warn("No services with an API key are configured.")
    try:
        _ui_info(f"Looking for releases: {identity.describe()}")
        releases = await engine.discover_releases(identity, options)
    finally:
        await engine.registry.close()
    releases = filter_releases_by_quality(releases, min_quality)
    render_releases(releases, limit)
    return releases


def show_help(parser: argparse.ArgumentParser) -> None:
    print(f"arrscout v{getattr(pkg, '__version__', '0.0.0')} - Find and rank releases across your *arr services")
    print()
    parser.print_help()


def resolve_config_path(args_config: Optional[str]) -> Path:
    if args_config:
        p = Path(args_config).expanduser()
        if p.is_dir():
            p = p / "config.toml"
        return p

    cwd_candidate = Path.cwd() / "config.toml"
    if cwd_candidate.exists():
        return cwd_candidate

    repo_root = Path(__file__).resolve().parent.parent
    root_candidate = repo_root / "config.toml"
    if root_candidate.exists() and (
        (repo_root / ".git").exists() or (repo_root / "pyproject.toml").exists()
    ):
        return root_candidate
    return cwd_candidate


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(add_help=False)
    for args, kwargs in (
        (("-h", "--help"), {"action": "store_true", "help": "Show help"}),
        (("--verify",), {"action": "store_true", "help": "Verify service API keys and exit"}),
        (("-c", "--config"), {"metavar": "PATH", "help": "Path to config.toml (file or directory)"}),
        (("-l", "--log-file"), {"metavar": "FILE", "help": "Also write log output to FILE"}),
        (("-d", "--debug"), {"action": "store_true", "help": "Debug mode with API calls, JSON responses, timestamps"}),
        (("--movie",), {"action": "store_true", "help": "Search for a movie (default)"}),
        (("--series",), {"action": "store_true", "help": "Search for a series"}),
        (("--tmdb",), {"type": int, "metavar": "ID", "help": "TMDB catalog ID"}),
        (("--tvdb",), {"type": int, "metavar": "ID", "help": "TVDB ID (series)"}),
        (("--imdb",), {"metavar": "ID", "help": "IMDB ID, e.g. tt0133093"}),
        (("-t", "--title"), {"help": "Title used for library search fallback"}),
        (("-y", "--year"), {"type": int, "help": "Release year used with --title"}),
        (("--by-seeders",), {"action": "store_true", "help": "Rank by seeders first instead of quality"}),
        (("--min-seeders",), {"type": int, "metavar": "N", "help": "Drop torrents with fewer seeders"}),
        (("--min-quality",), {"metavar": "LABEL", "help": "Drop releases below a quality, e.g. 720p"}),
        (("-n", "--limit"), {"type": int, "default": DEFAULT_RESULT_LIMIT, "help": "Rows to display"}),
        (("--prefer-mapping-source",), {"metavar": "ID", "help": "Save the default request service for ID mapping"}),
        (("--clear-preferred-source",), {"action": "store_true", "help": "Forget the saved mapping service"}),
    ):
        parser.add_argument(*args, **kwargs)
    return parser


def main():
    """Entry point"""
    _reset_cli_session_timer()
    parser = build_parser()

    try:
        args = parser.parse_args()
        if args.help:
            show_help(parser)
            sys.exit(0)

        config = load_config(resolve_config_path(args.config))
        log_file = Path(args.log_file).expanduser() if args.log_file else None
        logger.set_logger(logger.ArrscoutLogger(log_file=log_file, debug=args.debug))

        if args.verify:
            display_config_table(config)
            result = asyncio.run(verify_api_keys(config))
            sys.exit(0 if result else 1)

        settings = JsonSettingsStore(config.settings.resolved_path)
        if args.clear_preferred_source:
            settings.set_preferred_mapping_source(None)
            _ui_info("Cleared the saved mapping service.")
            sys.exit(0)
        if args.prefer_mapping_source:
            if args.prefer_mapping_source not in config.active_services():
                _ui_error(f"Service '{args.prefer_mapping_source}' is not configured.")
                sys.exit(1)
            settings.set_preferred_mapping_source(args.prefer_mapping_source)
            _ui_info(f"Saved '{args.prefer_mapping_source}' as the mapping service.")
            sys.exit(0)

        if args.movie and args.series:
            _ui_error("Cannot use both --movie and --series")
            sys.exit(1)

        identity = build_identity(args)
        if not identity.has_identifier() and not args.title:
            show_help(parser)
            sys.exit(0)

        options = DiscoverOptions(
            prefer_quality=config.discovery.prefer_quality and not args.by_seeders,
            min_seeders=args.min_seeders if args.min_seeders is not None else config.discovery.min_seeders,
        )
        asyncio.run(run_discovery(config, identity, options, min_quality=args.min_quality, limit=args.limit))
        sys.exit(0)
    except InvalidIdentityError as e:
        _ui_error(str(e))
        sys.exit(2)
    except KeyboardInterrupt:
        elapsed = max(0.0, time.monotonic() - _CLI_SESSION_START_MONOTONIC)
        _ui_info(f"Goodbye! Elapsed {_format_elapsed_runtime(elapsed)}")
        sys.exit(0)
    except Exception as e:
        _ui_error(f"Fatal error: {e}")
        sys.exit(1)
    finally:
        logger.get_logger().close()


if __name__ == "__main__":
    main()
