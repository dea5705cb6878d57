"""Shared utilities for CLI commands"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from tmprep.errors import PrepError

console = Console()
err_console = Console(stderr=True)
logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the tmprep CLI.

    Log levels:
    - Normal: Only warnings/errors shown
    - Verbose (-v): INFO level - shows each template as it is processed
    - Debug (TMPREP_DEBUG=1): DEBUG level - shows everything
    """
    debug = bool(os.environ.get("TMPREP_DEBUG"))
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler = RichHandler(
        console=err_console,
        show_time=verbose,
        show_path=debug,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    tmprep_logger = logging.getLogger("tmprep")
    tmprep_logger.setLevel(level)
    tmprep_logger.handlers = [handler]
    tmprep_logger.propagate = False


def handle_error(error: Exception) -> NoReturn:
    """Print `error` on stderr and leave the command with its exit code.

    Anything that is not a PrepError is a bug; its traceback goes to the
    debug log.
    """
    if isinstance(error, PrepError):
        label, code = "Error", error.exit_code
    else:
        logger.debug("Unhandled exception", exc_info=error)
        label, code = "Unexpected error", 1
    err_console.print(f"[red]{label}:[/red] {escape(str(error))}", soft_wrap=True)
    raise typer.Exit(code=code)


def read_template_data(file: Optional[Path]) -> str:
    """Read template text from `file`, or from stdin when no file is given."""
    if file is not None:
        if not file.exists():
            raise PrepError(f"File not found: {file}")
        return file.read_text(encoding="utf-8")

    if sys.stdin.isatty():
        return ""
    return sys.stdin.read().strip()
