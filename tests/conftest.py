"""
Shared pytest fixtures for seqclusterizer tests.

Provides reusable FASTA inputs, indexed record tables and temporary files
for unit and integration testing.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

from seqclusterizer.core.indexer import index_records
from seqclusterizer.models.records import RecordTable


def fasta_bytes(bodies: Sequence[str], prefix: str = "seq") -> bytes:
    """Build single-line FASTA content with one header per body."""
    lines = []
    for i, body in enumerate(bodies):
        lines.append(f">{prefix}{i}\n{body}\n")
    return "".join(lines).encode()


# =============================================================================
# FASTA File Fixtures
# =============================================================================


@pytest.fixture
def write_fasta(tmp_path: Path) -> Callable[..., Path]:
    """Factory fixture writing FASTA bodies to a file in tmp_path."""

    def _write(bodies: Sequence[str], name: str = "input.fasta") -> Path:
        path = tmp_path / name
        path.write_bytes(fasta_bytes(bodies))
        return path

    return _write


@pytest.fixture
def scenario_c_fasta(write_fasta: Callable[..., Path]) -> Path:
    """Three records: AAAA, AAAT, TTTT."""
    return write_fasta(["AAAA", "AAAT", "TTTT"], "scenario_c.fasta")


@pytest.fixture
def closer_later_fasta(write_fasta: Callable[..., Path]) -> Path:
    """Record 2 is closer to record 1 than to record 0 (pattern length 1).

    record 0 vs 2: 4 matches, 12 mismatches
    record 1 vs 2: 12 matches, 4 mismatches
    """
    return write_fasta(["AAAAA", "TTTTT", "TTTAT"], "closer_later.fasta")


@pytest.fixture
def mismatch_tiebreak_fasta(write_fasta: Callable[..., Path]) -> Path:
    """Record 2 ties on matches with 0 and 1; record 1 has fewer mismatches.

    record 0 vs 2: 2 matches, 14 mismatches
    record 1 vs 2: 2 matches, 6 mismatches
    """
    return write_fasta(["AAXXX", "ACX", "ACGTN"], "tiebreak.fasta")


@pytest.fixture
def mixed_fasta_content() -> bytes:
    """Records with a description, a short body and no trailing newline."""
    return b">r1\nACGT\n>r2 desc\nAC\n>r3\nGGGGG"


@pytest.fixture
def mixed_fasta(tmp_path: Path, mixed_fasta_content: bytes) -> Path:
    path = tmp_path / "mixed.fasta"
    path.write_bytes(mixed_fasta_content)
    return path


@pytest.fixture
def indexed(tmp_path: Path) -> Callable[[Path], RecordTable]:
    """Index a FASTA file into a record table."""

    def _index(path: Path) -> RecordTable:
        with path.open("rb") as handle:
            return index_records(handle)

    return _index
