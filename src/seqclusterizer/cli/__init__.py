"""
CLI commands for seqclusterizer.

Provides the command-line interface for indexing, clustering and
configuration management.
"""

__all__ = ["cluster", "config", "main"]
