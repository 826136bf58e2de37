"""
Shared CLI utilities for seqclusterizer commands.

Provides common functionality used across CLI modules.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)

from seqclusterizer.core.exceptions import InputFileError, OutputFileError


@contextmanager
def spinner_progress(
    description: str,
    console: Console | None = None,
    quiet: bool = False,
) -> Generator[Progress, None, None]:
    """Context manager for spinner-style progress display.

    The spinner is suppressed when quiet mode is enabled.

    Args:
        description: Task description to display.
        console: Rich Console instance. If None and not quiet, creates one.
        quiet: If True, suppress the progress display entirely.

    Yields:
        Progress instance (even when quiet, for API consistency).
    """
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console if not quiet else None,
        disable=quiet,
    ) as progress:
        progress.add_task(description=description, total=None)
        yield progress


@contextmanager
def bar_progress(
    console: Console | None = None,
    enabled: bool = True,
) -> Generator[Progress, None, None]:
    """Context manager for a progress bar with ETA.

    Used for the indexing and clustering phases when progress reporting
    is requested.
    """
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        TextColumn("•"),
        TimeRemainingColumn(),
        console=console,
        refresh_per_second=2,
        disable=not enabled,
    ) as progress:
        yield progress


def progress_sink(progress: Progress, task: TaskID) -> Callable[[int, int], None]:
    """Adapt a Rich progress task to a (completed, total) callback."""

    def update(completed: int, total: int) -> None:
        progress.update(task, completed=completed, total=total)

    return update


def print_error(console: Console, message: str) -> None:
    """Print an error message in red without interpreting Rich markup in it."""
    console.print(message, style="red", markup=False, highlight=False, soft_wrap=True)


def validate_input_path(path: Path) -> None:
    """Raise InputFileError unless path is a readable regular file."""
    if not path.exists():
        raise InputFileError(str(path), reason="does not exist")
    if not path.is_file():
        raise InputFileError(str(path), reason="is not a regular file")
    if not os.access(path, os.R_OK):
        raise InputFileError(str(path))


def validate_output_path(path: Path) -> None:
    """Raise OutputFileError unless path can be created or overwritten.

    Creates missing parent directories, like the other commands writing
    output files.
    """
    if path.is_dir():
        raise OutputFileError(str(path), reason="is a directory")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise OutputFileError(str(path)) from e
    target = path if path.exists() else path.parent
    if not os.access(target, os.W_OK):
        raise OutputFileError(str(path))


def infer_output_format(path: Path) -> str:
    """Pick an output format from the file extension (csv by default).

    Example:
        >>> infer_output_format(Path("forest.parquet"))
        'parquet'
        >>> infer_output_format(Path("forest.txt"))
        'csv'
    """
    suffix = path.suffix.lower()
    if suffix == ".parquet":
        return "parquet"
    if suffix == ".tsv":
        return "tsv"
    return "csv"


def configure_logging(verbose: bool) -> None:
    """Send library log records to stderr when verbose output is requested."""
    if verbose:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


class QuietConsole:
    """Console wrapper that suppresses output in quiet mode.

    This class wraps a Rich Console instance and conditionally suppresses
    print output when quiet mode is enabled. All other console methods
    are delegated to the wrapped instance.

    Example:
        >>> console = Console()
        >>> qc = QuietConsole(console, quiet=True)
        >>> qc.print("This won't be shown")  # Suppressed
    """

    def __init__(self, console: Console, quiet: bool = False):
        self._console = console
        self._quiet = quiet

    @property
    def console(self) -> Console:
        """Access the underlying Rich Console instance.

        Use this when you need to print regardless of quiet mode,
        such as for error messages.
        """
        return self._console

    def print(self, *args: Any, **kwargs: Any) -> None:
        """Print to console unless quiet mode is enabled."""
        if not self._quiet:
            self._console.print(*args, **kwargs)

    def __getattr__(self, name: str) -> Any:
        return getattr(self._console, name)
