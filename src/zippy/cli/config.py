from __future__ import annotations

from dataclasses import asdict

import typer
from rich import print

from ..config import ConfigStore, resolve_config
from .common import handle_cli_errors

app = typer.Typer(help="Inspect and change stored defaults")

KEY_ARGUMENT = typer.Argument(..., help="Setting name: compression, compresslevel, sort_entries")
VALUE_ARGUMENT = typer.Argument(..., help="New value ('none' clears compresslevel)")


@app.command("show")
@handle_cli_errors
def show() -> None:
    """Print the effective settings, including ZIPPY_* environment overrides."""

    cfg = resolve_config()
    for key, value in asdict(cfg).items():
        print(f"{key} = {value}")


@app.command("set")
@handle_cli_errors
def set_value(key: str = KEY_ARGUMENT, value: str = VALUE_ARGUMENT) -> None:
    """Persist a setting to the config file."""

    store = ConfigStore()
    cfg = store.set_value(key, value)
    print(f"[green]Saved[/green] {key} = {getattr(cfg, key)}")


@app.command("path")
def path() -> None:
    """Print the location of the config file."""

    typer.echo(str(ConfigStore().path))


__all__ = ["app", "show", "set_value", "path"]
