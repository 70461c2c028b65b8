"""``zippy pack`` and ``zippy unpack``."""

from __future__ import annotations

import typer

from ..cli_utils import get_config_from_context, with_overrides
from ..config import COMPRESSION_METHODS
from ..reader import unpack
from ..writer import pack
from .common import cli_reporter, handle_cli_errors

SOURCE_ARGUMENT = typer.Argument(
    ..., help="Directory to archive, relative to the working directory"
)
ARCHIVE_OUT_ARGUMENT = typer.Argument(
    ..., help="Zip file to create, relative to the working directory (must end in .zip)"
)
ARCHIVE_IN_ARGUMENT = typer.Argument(
    ..., help="Zip file to unpack; extracted next to it into a folder without the .zip suffix"
)
SORT_OPTION = typer.Option(
    None,
    "--sort/--no-sort",
    help="Store entries in sorted order (default: sort_entries from config)",
)
COMPRESSION_OPTION = typer.Option(
    None,
    "--compression",
    "-c",
    help=f"Compression method: {', '.join(COMPRESSION_METHODS)} (default: from config)",
)
LEVEL_OPTION = typer.Option(
    None, "--level", min=0, max=9, help="Compression level 0-9 (default: library default)"
)


def register(app: typer.Typer) -> None:
    app.command("pack")(pack_command)
    app.command("unpack")(unpack_command)


@handle_cli_errors
def pack_command(
    ctx: typer.Context,
    source_dir: str = SOURCE_ARGUMENT,
    archive: str = ARCHIVE_OUT_ARGUMENT,
    sort: bool | None = SORT_OPTION,
    compression: str | None = COMPRESSION_OPTION,
    level: int | None = LEVEL_OPTION,
) -> None:
    """Archive SOURCE_DIR into ARCHIVE, replacing any existing archive."""

    cfg = with_overrides(
        get_config_from_context(ctx),
        sort_entries=sort,
        compression=compression,
        compresslevel=level,
    )
    ok = pack(source_dir, archive, reporter=cli_reporter(), config=cfg)
    raise typer.Exit(code=0 if ok else 1)


@handle_cli_errors
def unpack_command(archive: str = ARCHIVE_IN_ARGUMENT) -> None:
    """Extract ARCHIVE, replacing any folder left by a previous unpack."""

    ok = unpack(archive, reporter=cli_reporter())
    raise typer.Exit(code=0 if ok else 1)


__all__ = ["register", "pack_command", "unpack_command"]
