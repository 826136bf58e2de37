"""
Constants used throughout the seqclusterizer package.

Centralizes format bytes, configuration bounds and output column names
to keep the indexer, comparison engine and CLI consistent.
"""

from __future__ import annotations

# =============================================================================
# Input Format
# =============================================================================

# Byte that starts a record header line
RECORD_MARKER = ord(">")

# Line terminator; never counted as part of a header or body
LINE_TERMINATOR = ord("\n")

# Bytes read per block while scanning the input
DEFAULT_BLOCK_SIZE = 1 << 20

# =============================================================================
# Configuration Bounds
# =============================================================================

# Similarity scores are integers scaled so that SIMILARITY_SCALE == 100%
SIMILARITY_SCALE = 100_000_000

# Exclusive upper bound for the minimum similarity threshold
MINIMUM_SIMILARITY_MAXIMUM = SIMILARITY_SCALE

# Largest worker pool accepted; 0 means sequential
WORKERS_MAX = 64

# Sentinel stored in the record table for "no parent"
NO_PARENT = -1

# =============================================================================
# Output Columns
# =============================================================================

COLUMN_INDEX = "index"
COLUMN_HEADER = "header"
COLUMN_PARENT = "parent_index"
COLUMN_MATCHES = "matches"
COLUMN_MISMATCHES = "mismatches"
COLUMN_SIMILARITY = "similarity"
COLUMN_IS_ROOT = "is_root"

OUTPUT_COLUMNS = (
    COLUMN_INDEX,
    COLUMN_HEADER,
    COLUMN_PARENT,
    COLUMN_MATCHES,
    COLUMN_MISMATCHES,
    COLUMN_SIMILARITY,
    COLUMN_IS_ROOT,
)
