from __future__ import annotations

import logging
import os
from collections.abc import Callable
from functools import wraps
from typing import Final, ParamSpec, TypeVar

import typer
from rich.console import Console
from rich.markup import escape

from ..errors import ConfigError, ZippyError
from ..reporting import ConsoleReporter

LOG_LEVEL_ENV: Final[str] = "ZIPPY_LOG_LEVEL"
DEBUG_ENV: Final[str] = "ZIPPY_DEBUG"

console = Console(highlight=False, soft_wrap=True)

VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr")


def cli_reporter() -> ConsoleReporter:
    return ConsoleReporter(console)


def configure_logging(verbose: bool = False) -> None:
    """Attach a stderr handler to the ``zippy`` logger.

    The level comes from ``--verbose`` (DEBUG) or ``ZIPPY_LOG_LEVEL``
    (default WARNING) so reporter output on stdout stays the only noise.
    """

    if verbose:
        level = logging.DEBUG
    else:
        level_name = os.getenv(LOG_LEVEL_ENV, "WARNING").upper()
        level = getattr(logging, level_name, logging.WARNING)

    logger = logging.getLogger("zippy")
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s - %(message)s"))
        logger.addHandler(handler)
    logger.setLevel(level)


CommandParams = ParamSpec("CommandParams")
CommandReturn = TypeVar("CommandReturn")


def handle_cli_errors(
    func: Callable[CommandParams, CommandReturn],
) -> Callable[CommandParams, CommandReturn]:
    @wraps(func)
    def wrapper(*args: CommandParams.args, **kwargs: CommandParams.kwargs) -> CommandReturn:
        try:
            return func(*args, **kwargs)
        except typer.BadParameter:
            raise
        except typer.Exit:
            raise
        except ConfigError as exc:
            console.print(f"[red]Error:[/red] {escape(str(exc))}")
            console.print("Run `zippy config show` to inspect the effective settings.")
            raise typer.Exit(1) from None
        except ZippyError as exc:
            console.print(f"[red]Error:[/red] {escape(str(exc))}")
            raise typer.Exit(1) from None
        except Exception as exc:
            if os.getenv(DEBUG_ENV):
                raise
            console.print(f"[red]Error:[/red] Unexpected failure: {escape(str(exc))}")
            console.print(f"Set {DEBUG_ENV}=1 for a stack trace.")
            raise typer.Exit(1) from exc

    return wrapper


__all__ = [
    "DEBUG_ENV",
    "LOG_LEVEL_ENV",
    "VERBOSE_OPTION",
    "cli_reporter",
    "configure_logging",
    "console",
    "handle_cli_errors",
]
