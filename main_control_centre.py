"""Mini README: Entry point CLI for the Fieldbot control centre.

This script exposes a Typer CLI that starts the FastAPI application with
configurable host, port and production flags, estimates a route stored in
a JSON file, and lists the saved paths visible to the operator. Settings
are drawn from ``FIELDBOT_`` environment variables when available.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import typer
import uvicorn

from fieldbot.api_client import create_http_client
from fieldbot.configuration import get_settings
from fieldbot.errors import FieldbotError
from fieldbot.logging_utils import configure_root_logger
from fieldbot.route_planning import GridPosition, PathTemplate, Waypoint, estimate
from fieldbot.storage import JsonFileKeyValueStore, LocalPathRepository, PathStore, RemotePathRepository

cli = typer.Typer(help="Launch and manage the Fieldbot route control centre.")


@cli.command()
def run(
    host: str = typer.Option(None, help="Host interface to bind."),
    port: int = typer.Option(None, help="Port to listen on."),
    production: bool = typer.Option(
        False, help="Use production server settings (disable auto-reload)."
    ),
) -> None:
    """Start the FastAPI application using uvicorn."""

    settings = get_settings()
    effective_host = host or settings.interface_host
    effective_port = port or settings.interface_port
    configure_root_logger()

    # Browsers cannot open the 0.0.0.0 sentinel, so point operators at localhost.
    browser_host = "127.0.0.1" if effective_host in {"0.0.0.0", "::"} else effective_host
    typer.echo(
        "Starting Fieldbot on "
        f"{effective_host}:{effective_port}.\n"
        "Open your browser at "
        f"http://{browser_host}:{effective_port}/docs"
    )
    uvicorn.run(
        "fieldbot.interface.web_app:create_application",
        host=effective_host,
        port=effective_port,
        factory=True,
        reload=not production,
    )


@cli.command("estimate")
def estimate_route(
    route_file: Path = typer.Argument(..., exists=True, readable=True, help="JSON route or saved path."),
    start_x: int = typer.Option(0, help="Robot start column."),
    start_y: int = typer.Option(0, help="Robot start row."),
) -> None:
    """Print the estimated seconds for a route stored as JSON."""

    try:
        document = json.loads(route_file.read_text(encoding="utf-8"))
        if isinstance(document, dict):
            waypoints = PathTemplate.from_dict(document).waypoints
        else:
            waypoints = tuple(Waypoint.from_dict(item) for item in document)
    except (FieldbotError, TypeError, ValueError) as error:
        typer.echo(f"Invalid route: {error}", err=True)
        raise typer.Exit(code=1) from error
    ordered = sorted(waypoints, key=lambda waypoint: waypoint.order)
    seconds = estimate(GridPosition(start_x, start_y), ordered)
    typer.echo(f"{len(ordered)} waypoints, estimated {seconds}s")


@cli.command("paths")
def list_paths() -> None:
    """List saved paths, falling back to the local store if the backend is down."""

    settings = get_settings()

    async def _collect():
        async with create_http_client(settings) as client:
            store = PathStore(
                remote=RemotePathRepository(client),
                local=LocalPathRepository(
                    JsonFileKeyValueStore(settings.data_directory / "local_store.json"),
                    key=settings.local_store_key,
                ),
            )
            return await store.list()

    for template in asyncio.run(_collect()):
        typer.echo(
            f"{template.id or '-'}\t{template.origin.value}\t{template.name}\t"
            f"{len(template.waypoints)} waypoints"
        )


if __name__ == "__main__":
    cli()
