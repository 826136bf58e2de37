"""
Integration test fixtures for CLI commands.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
from typer.testing import CliRunner

from seqclusterizer.cli.main import app

if TYPE_CHECKING:
    from click.testing import Result


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def invoke(cli_runner: CliRunner) -> Callable[..., Result]:
    """Invoke the seqclusterizer CLI with string arguments."""

    def _invoke(*args: str | Path) -> Result:
        return cli_runner.invoke(app, [str(arg) for arg in args])

    return _invoke
