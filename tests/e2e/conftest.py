"""
E2E test fixtures for seqclusterizer CLI testing.

Provides fixtures that combine the sequence family factory with CLI
invocation helpers for end-to-end clustering runs.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
from typer.testing import CliRunner

from seqclusterizer.cli.main import app
from tests.factories import SequenceFamilyFactory, SequenceRecord

if TYPE_CHECKING:
    from click.testing import Result


# =============================================================================
# Core Fixtures
# =============================================================================


@pytest.fixture
def e2e_runner() -> CliRunner:
    """Provide a CLI runner for E2E tests."""
    return CliRunner()


@pytest.fixture
def e2e_temp_dir(tmp_path: Path) -> Path:
    """Provide a clean output directory for E2E tests."""
    output_dir = tmp_path / "e2e_output"
    output_dir.mkdir()
    return output_dir


# =============================================================================
# Dataset Fixtures
# =============================================================================


@pytest.fixture
def family_records() -> list[SequenceRecord]:
    """Four interleaved families of six related sequences each."""
    return SequenceFamilyFactory(seed=1234).create_families(
        families=4, members=6, length=120, mutation_rate=0.04
    )


@pytest.fixture
def family_fasta(tmp_path: Path, family_records: list[SequenceRecord]) -> Path:
    return SequenceFamilyFactory.write_fasta(family_records, tmp_path / "families.fasta")


# =============================================================================
# CLI Invocation Helpers
# =============================================================================


@pytest.fixture
def run_cluster(
    e2e_runner: CliRunner,
    e2e_temp_dir: Path,
) -> Callable[..., Result]:
    """
    Factory fixture for running `cluster run` with common options.

    Returns a function that invokes the command and returns the result.
    """

    def _run(
        fasta: Path,
        output_name: str = "forest.csv",
        pattern_length: int = 4,
        workers: int = 0,
        backend: str = "thread",
        min_similarity: int | None = None,
        extra_args: list[str] | None = None,
    ) -> Result:
        args = [
            "cluster", "run",
            str(fasta),
            "--output", str(e2e_temp_dir / output_name),
            "--pattern-length", str(pattern_length),
            "--workers", str(workers),
            "--backend", backend,
            "--quiet",
        ]
        if min_similarity is not None:
            args.extend(["--min-similarity", str(min_similarity)])
        if extra_args:
            args.extend(extra_args)
        return e2e_runner.invoke(app, args)

    return _run
