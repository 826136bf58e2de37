"""Testing utilities for seqclusterizer."""

from tests.utils.assertions import CLIAssertions, ForestAssertions

__all__ = [
    "CLIAssertions",
    "ForestAssertions",
]
