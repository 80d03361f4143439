"""Statusboard CLI entry point."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from statusboard.config.models import StatusboardConfig
    from statusboard.dashboard.row import RowView

app = typer.Typer(
    name="statusboard",
    help="Statusboard — tap-to-check service status dashboard",
    no_args_is_help=True,
)
console = Console()


_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _validate_log_level(value: str) -> str:
    level = value.upper()
    if level not in _LOG_LEVELS:
        raise typer.BadParameter(f"{value!r} is not one of {', '.join(_LOG_LEVELS)}")
    return level


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        "WARNING", "--log-level", callback=_validate_log_level, help="Logging level (DEBUG, INFO, ...)"
    ),
) -> None:
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _load(path: Path | None) -> StatusboardConfig:
    from statusboard.config.loader import load_config

    try:
        return load_config(path=path)
    except FileNotFoundError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)
    except ValueError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)


async def _check_all(config: StatusboardConfig) -> list[RowView]:
    from rich.live import Live

    from statusboard.dashboard import Dashboard, create_store
    from statusboard.render import status_table

    dashboard = Dashboard.from_config(config, store=create_store(config))
    await dashboard.load()
    dashboard.appear_all()
    try:
        if console.is_terminal:
            title = f"{config.statusboard.name} Service Status"
            with Live(status_table(dashboard.views(), title=title), console=console, transient=True) as live:
                idle = asyncio.ensure_future(dashboard.wait_idle())
                while not idle.done():
                    await asyncio.wait({idle}, timeout=0.1)
                    live.update(status_table(dashboard.views(), title=title))
        else:
            await dashboard.wait_idle()
        return dashboard.views()
    finally:
        dashboard.close()


async def _restore(config: StatusboardConfig, key: str) -> bool:
    from statusboard.dashboard import Dashboard, create_store

    dashboard = Dashboard.from_config(config, store=create_store(config))
    await dashboard.load()
    try:
        if key not in dashboard.deleted_keys:
            return False
        dashboard.set_edit_mode(True)
        await dashboard.restore(key)
        return True
    finally:
        dashboard.close()


@app.command()
def status(
    path: Path | None = typer.Option(None, "--path", "-p", help="Path to .statusboard.yaml"),
    show_codes: bool | None = typer.Option(
        None, "--show-codes/--hide-codes", help="Override display.show_error_codes"
    ),
) -> None:
    """Check every service once and show the dashboard."""
    from statusboard.render import status_table

    config = _load(path)
    if show_codes is not None:
        config.display.show_error_codes = show_codes
    if not config.services:
        console.print("[yellow]No services configured.[/yellow]")
        return

    views = asyncio.run(_check_all(config))
    console.print(status_table(views, title=f"{config.statusboard.name} Service Status"))


@app.command()
def tui(
    path: Path | None = typer.Option(None, "--path", "-p", help="Path to .statusboard.yaml"),
) -> None:
    """Open the interactive dashboard."""
    from statusboard.tui.app import StatusboardApp

    config = _load(path)
    StatusboardApp(config).run()


@app.command()
def restore(
    key: str = typer.Argument(..., help="Key of the deleted service"),
    path: Path | None = typer.Option(None, "--path", "-p", help="Path to .statusboard.yaml"),
) -> None:
    """Bring back a service that was deleted from the dashboard."""
    config = _load(path)
    if key not in config.services:
        console.print(f"[red]Unknown service: {key}[/red]")
        raise typer.Exit(1)
    if not config.store_db_path or config.store_db_path == ":memory:":
        console.print("[yellow]No store_db_path configured; deletions are not persisted.[/yellow]")
        return

    if asyncio.run(_restore(config, key)):
        console.print(f"[green]✓[/green] Restored {key}")
    else:
        console.print(f"[yellow]{key} is not deleted.[/yellow]")


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Bind host"),
    port: int = typer.Option(8000, help="Bind port"),
) -> None:
    """Start the Statusboard API server."""
    import uvicorn

    console.print(f"[bold]Statusboard[/bold] starting on http://{host}:{port}")
    uvicorn.run("statusboard.api.app:app", host=host, port=port, reload=False)


config_app = typer.Typer(name="config", help="Configuration commands")
app.add_typer(config_app)


@config_app.command("validate")
def config_validate(
    path: Path | None = typer.Option(None, "--path", "-p", help="Path to .statusboard.yaml"),
) -> None:
    """Validate configuration file."""
    from urllib.parse import urlparse

    import yaml

    from statusboard.config.loader import load_config

    errors: list[str] = []
    try:
        config = load_config(path=path)
        console.print("[green]✓[/green] YAML parses correctly")
        console.print("[green]✓[/green] Pydantic validation passes")
    except FileNotFoundError as exc:
        console.print(f"[red]✗ {exc}[/red]")
        raise typer.Exit(1)
    except yaml.YAMLError as exc:
        console.print(f"[red]✗ YAML parsing failed: {exc}[/red]")
        raise typer.Exit(1)
    except ValueError as exc:
        console.print("[green]✓[/green] YAML parses correctly")
        console.print(f"[red]✗ Pydantic validation failed: {exc}[/red]")
        raise typer.Exit(1)

    for key, entry in config.services.items():
        parsed = urlparse(entry.url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            errors.append(f"Service '{key}': invalid URL '{entry.url}'")
        else:
            console.print(f"[green]✓[/green] Service '{key}' URL is valid")

    warnings: list[str] = []
    if not config.services:
        warnings.append("No services configured")
    if config.display.minimum_loading_time > config.display.request_timeout:
        warnings.append("display.minimum_loading_time is longer than display.request_timeout")

    if not errors:
        for w in warnings:
            console.print(f"[yellow]! {w}[/yellow]")
        console.print("\n[green bold]Configuration is valid.[/green bold]")
    else:
        for err in errors:
            console.print(f"[red]✗ {err}[/red]")
        console.print(f"\n[red bold]{len(errors)} validation error(s) found.[/red bold]")
        raise typer.Exit(1)


@config_app.command("show")
def config_show(
    path: Path | None = typer.Option(None, "--path", "-p", help="Path to .statusboard.yaml"),
) -> None:
    """Print resolved configuration."""
    config = _load(path)

    console.print(f"[bold]Statusboard[/bold] {config.statusboard.name} v{config.statusboard.version}\n")

    console.print("[bold]Display:[/bold]")
    console.print(f"  Show error codes: {config.display.show_error_codes}")
    console.print(f"  Minimum loading time: {config.display.minimum_loading_time}s")
    console.print(f"  Request timeout: {config.display.request_timeout}s\n")

    console.print("[bold]Services:[/bold]")
    for key, entry in config.services.items():
        icon = f"{entry.image} " if entry.image else ""
        console.print(f"  {key}: {icon}{entry.name} @ {entry.url}")

    console.print(f"\n[bold]Store:[/bold] {config.store_db_path or 'in-memory'}")


def main() -> None:
    app()
