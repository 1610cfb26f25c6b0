"""
api_verification.py - API key verification for configured services
"""

import asyncio
from typing import Callable

import aiohttp
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import ArrscoutConfig, ServiceConfig
from .connectors import build_connector
from .connectors.arr_client import ArrServiceAdapter

console = Console()


def _invalid_key_msg(detail: str) -> str:
    """Generate standardized invalid API key message"""
    return f"Invalid API key - {detail}"


async def verify_service(connector: ArrServiceAdapter) -> tuple[str, bool, str]:
    """Hit the service's status endpoint and report who answered."""
    name = connector.connector_id.upper()
    try:
        data = await connector.check_status()
    except aiohttp.ClientResponseError as e:
        if e.status in (401, 403):
            return name, False, _invalid_key_msg(f"{e.status} {e.message}")
        return name, False, f"HTTP {e.status} from status endpoint"
    except (aiohttp.ClientError, asyncio.TimeoutError):
        return name, False, "Connection failed"
    except Exception as e:
        return name, False, f"Unexpected error: {type(e).__name__}: {e}"
    finally:
        await connector.close()

    if isinstance(data, dict):
        app_name = data.get("appName") or connector.connector_type.title()
        version = data.get("version")
        if version:
            return name, True, f"{app_name} {version}"
        return name, True, f"{app_name} reachable"
    return name, False, _invalid_key_msg("unexpected status payload")


async def verify_api_keys(
    config: ArrscoutConfig,
    connector_factory: Callable[[str, ServiceConfig], ArrServiceAdapter] = build_connector,
) -> bool:
    """Verify all configured services"""
    console.print("[cyan][INFO][/cyan] Verifying API Keys...")

    connectors = [
        connector_factory(service_id, service)
        for service_id, service in config.active_services().items()
    ]
    results = await asyncio.gather(*(verify_service(connector) for connector in connectors))

    table = Table(title="API Key Verification Results")
    table.add_column("Service", style="cyan", no_wrap=True)
    table.add_column("Status", style="bold", no_wrap=True)
    table.add_column("Details", style="yellow")

    for service, status, details in results:
        status_str = "[green]✓ Valid[/green]" if status else "[red]✗ Invalid[/red]"
        if details:
            details = escape(str(details).strip()[:100])
        table.add_row(service, status_str, details or "")

    if not results:
        table.add_row("No Keys", "[yellow]⚠ Warning[/yellow]", "No services configured")

    console.print(table)

    if results:
        return all(status for _, status, _ in results)
    return False
