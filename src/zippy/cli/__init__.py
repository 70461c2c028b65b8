from __future__ import annotations

import typer

from . import archive, config
from .common import VERBOSE_OPTION, configure_logging

app = typer.Typer(help="Pack directories into zip archives and unpack them again")

archive.register(app)
app.add_typer(config.app, name="config")


@app.callback()
def common(ctx: typer.Context, verbose: bool = VERBOSE_OPTION) -> None:
    """Initialize shared Typer context state."""

    ctx.ensure_object(dict)
    configure_logging(verbose)


__all__ = ["app", "archive", "config"]
