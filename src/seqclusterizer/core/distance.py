"""
Fixed-width chunk matching between two sequences.

Each sequence is cut into consecutive, non-overlapping windows of
``pattern_length`` bytes. Every query window is compared against every
target window (a full cross product, not a diagonal alignment); equal
windows count as matches and all other pairs as mismatches.

A window is only used while ``offset + pattern_length < len(sequence)``,
so the trailing partial window and a window ending exactly on the last
byte are both excluded.
"""

from __future__ import annotations

from collections import Counter
from typing import NamedTuple

from seqclusterizer.core.exceptions import InvalidPatternLengthError

# IUPAC nucleotide complements, both cases
_COMPLEMENT = bytes.maketrans(
    b"ACGTUNRYKMSWBDHVacgtunrykmswbdhv",
    b"TGCAANYRMKSWVHDBtgcaanyrmkswvhdb",
)


class ChunkComparison(NamedTuple):
    """Window match counts for one query/target pair."""

    matches: int
    mismatches: int

    @property
    def total(self) -> int:
        return self.matches + self.mismatches


def window_count(length: int, pattern_length: int) -> int:
    """Number of windows compared for a sequence of the given length."""
    if length <= pattern_length:
        return 0
    return (length - 1) // pattern_length


def windows(sequence: bytes, pattern_length: int) -> list[bytes]:
    """Split a sequence into its comparable windows."""
    return [
        sequence[offset:offset + pattern_length]
        for offset in range(0, window_count(len(sequence), pattern_length) * pattern_length, pattern_length)
    ]


def compare(pattern_length: int, query: bytes, target: bytes) -> ChunkComparison:
    """
    Count exact window matches between two sequences.

    Equal windows are tallied by content, so the count of equal pairs in
    the cross product is found without comparing every pair byte by byte.
    ``matches + mismatches`` is always
    ``window_count(len(query)) * window_count(len(target))``.

    Args:
        pattern_length: Window width in bytes (>= 1).
        query: Query sequence body.
        target: Target sequence body.

    Returns:
        ChunkComparison with match and mismatch counts.

    Raises:
        InvalidPatternLengthError: If pattern_length is smaller than 1.

    Example:
        >>> compare(1, b"AAAA", b"AAAA")
        ChunkComparison(matches=9, mismatches=0)
        >>> compare(1, b"AAAA", b"TTTT")
        ChunkComparison(matches=0, mismatches=9)
    """
    if pattern_length < 1:
        raise InvalidPatternLengthError(pattern_length)

    query_windows = windows(query, pattern_length)
    target_windows = windows(target, pattern_length)
    if not query_windows or not target_windows:
        return ChunkComparison(0, 0)

    target_counts = Counter(target_windows)
    matches = sum(target_counts.get(window, 0) for window in query_windows)
    total = len(query_windows) * len(target_windows)
    return ChunkComparison(matches, total - matches)


def reverse_complement(sequence: bytes) -> bytes:
    """
    Reverse complement a nucleotide sequence.

    Unknown bytes are kept as-is; case is preserved.

    Example:
        >>> reverse_complement(b"AACGt")
        b'aCGTT'
    """
    return sequence.translate(_COMPLEMENT)[::-1]


def is_better_comparison(candidate: ChunkComparison, current: ChunkComparison) -> bool:
    """More matches win; on equal matches fewer mismatches win."""
    if candidate.matches != current.matches:
        return candidate.matches > current.matches
    return candidate.mismatches < current.mismatches


def compare_oriented(
    pattern_length: int,
    query: bytes,
    target: bytes,
    try_complement: bool = False,
) -> ChunkComparison:
    """
    Compare a query against a target and, optionally, its reverse complement.

    When ``try_complement`` is set, the orientation with the better
    match/mismatch pair is kept; the forward orientation wins ties.
    """
    forward = compare(pattern_length, query, target)
    if not try_complement:
        return forward
    reverse = compare(pattern_length, query, reverse_complement(target))
    if is_better_comparison(reverse, forward):
        return reverse
    return forward
