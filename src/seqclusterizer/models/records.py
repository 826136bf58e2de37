"""
Record table for indexed sequence collections.

The table stores only small per-record descriptors (byte offsets and
lengths) plus the current best-parent fields. Sequence bytes stay on
disk and are re-read on demand through the stored offsets.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import NamedTuple

import numpy as np

from seqclusterizer.core.constants import NO_PARENT

# offset, header length, body length, parent index, matches, mismatches
_FIELDS_PER_RECORD = 6

# =============================================================================
# Lightweight Record Views
# =============================================================================
# NamedTuples keep hot paths free of validation overhead; the table itself
# is the source of truth.


class ParentCandidate(NamedTuple):
    """A candidate parent for a target record with its comparison counts."""

    index: int
    matches: int
    mismatches: int


class Record(NamedTuple):
    """Read-only snapshot of one row of the record table."""

    index: int
    offset: int
    header_length: int
    body_length: int
    parent_index: int | None
    parent_matches: int
    parent_mismatches: int

    @property
    def header_offset(self) -> int:
        """Offset of the first header byte after the record marker."""
        return self.offset + 1

    @property
    def body_offset(self) -> int:
        """Offset of the first body byte (after the header terminator)."""
        return self.offset + 1 + self.header_length + 1

    @property
    def has_parent(self) -> bool:
        return self.parent_index is not None


class RecordTable:
    """
    Fixed-size table of record descriptors and parent assignments.

    The table is sized exactly once from the record count of the first
    indexing pass, populated with descriptors during the second pass and
    then mutated in place by the clustering phase. Records are never added
    or removed afterwards.

    Storage uses one int64 numpy array per field so that very large
    collections only cost a few dozen bytes per record.

    Example:
        >>> table = RecordTable(2)
        >>> table.set_descriptor(0, offset=0, header_length=3, body_length=4)
        >>> table[0].body_offset
        5
    """

    def __init__(self, total: int, longest_body_length: int = 0) -> None:
        if total < 0:
            msg = f"Record table size must be non-negative, got {total}"
            raise ValueError(msg)
        self._offsets = np.zeros(total, dtype=np.int64)
        self._header_lengths = np.zeros(total, dtype=np.int64)
        self._body_lengths = np.zeros(total, dtype=np.int64)
        self._parent_indices = np.full(total, NO_PARENT, dtype=np.int64)
        self._parent_matches = np.zeros(total, dtype=np.int64)
        self._parent_mismatches = np.zeros(total, dtype=np.int64)
        self.longest_body_length = longest_body_length

    def __len__(self) -> int:
        return len(self._offsets)

    def __getitem__(self, index: int) -> Record:
        if not 0 <= index < len(self):
            msg = f"Record index {index} out of range for table of {len(self)} records"
            raise IndexError(msg)
        parent = int(self._parent_indices[index])
        return Record(
            index=index,
            offset=int(self._offsets[index]),
            header_length=int(self._header_lengths[index]),
            body_length=int(self._body_lengths[index]),
            parent_index=None if parent == NO_PARENT else parent,
            parent_matches=int(self._parent_matches[index]),
            parent_mismatches=int(self._parent_mismatches[index]),
        )

    def __iter__(self) -> Iterator[Record]:
        for index in range(len(self)):
            yield self[index]

    def set_descriptor(
        self,
        index: int,
        offset: int,
        header_length: int,
        body_length: int,
    ) -> None:
        """Store the byte-range descriptors of one record."""
        self._offsets[index] = offset
        self._header_lengths[index] = header_length
        self._body_lengths[index] = body_length

    def body_length(self, index: int) -> int:
        return int(self._body_lengths[index])

    def parent_of(self, index: int) -> ParentCandidate | None:
        """Return the current best parent of a record, or None."""
        parent = int(self._parent_indices[index])
        if parent == NO_PARENT:
            return None
        return ParentCandidate(
            index=parent,
            matches=int(self._parent_matches[index]),
            mismatches=int(self._parent_mismatches[index]),
        )

    def set_parent(self, index: int, candidate: ParentCandidate) -> None:
        """Replace the parent fields of a record together.

        Raises:
            ValueError: If the candidate does not precede the record.
        """
        if not 0 <= candidate.index < index:
            msg = (
                f"Parent of record {index} must have a smaller index, "
                f"got {candidate.index}"
            )
            raise ValueError(msg)
        self._parent_indices[index] = candidate.index
        self._parent_matches[index] = candidate.matches
        self._parent_mismatches[index] = candidate.mismatches

    def parent_indices(self) -> np.ndarray:
        """Copy of the parent column with NO_PARENT for roots."""
        return self._parent_indices.copy()

    @property
    def shortest_body_length(self) -> int:
        if len(self) == 0:
            return 0
        return int(self._body_lengths.min())

    @staticmethod
    def estimate_bytes(total: int) -> int:
        """Memory a table of ``total`` records will allocate."""
        return total * _FIELDS_PER_RECORD * np.dtype(np.int64).itemsize

    @property
    def allocated_bytes(self) -> int:
        """Memory used by the descriptor and parent arrays."""
        return sum(
            array.nbytes
            for array in (
                self._offsets,
                self._header_lengths,
                self._body_lengths,
                self._parent_indices,
                self._parent_matches,
                self._parent_mismatches,
            )
        )
