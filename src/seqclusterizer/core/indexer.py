"""
Two-pass streaming indexer for FASTA-style record files.

The indexer locates record boundaries without keeping sequence bytes in
memory. Both passes share one state machine over the raw byte stream:

    NONE     --'>'-->  HEADER    (record starts)
    HEADER   --'\\n'-> SEQUENCE  (header ends)
    SEQUENCE --'>'-->  HEADER    (record ends, next record starts)

Pass one counts records and the longest body so the record table can be
sized once; pass two records each record's offset, header length and body
length into that table. The last record has no closing marker and is
finalized explicitly at end of stream.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import IntEnum
from typing import BinaryIO, NamedTuple, Protocol

from seqclusterizer.core.constants import (
    DEFAULT_BLOCK_SIZE,
    LINE_TERMINATOR,
    RECORD_MARKER,
)
from seqclusterizer.core.exceptions import IndexMismatchError
from seqclusterizer.models.records import RecordTable

logger = logging.getLogger(__name__)

ProgressSink = Callable[[int, int], None]


class State(IntEnum):
    """Scanner position relative to the current record."""

    NONE = 0
    HEADER = 1
    SEQUENCE = 2


class Event(IntEnum):
    """Side effect produced by a single state transition."""

    NOTHING = 0
    RECORD_START = 1
    HEADER_BYTE = 2
    HEADER_END = 3
    BODY_BYTE = 4
    RECORD_BOUNDARY = 5


def advance(state: State, byte: int) -> tuple[State, Event]:
    """
    Apply one input byte to the scanner state.

    Terminator bytes inside a body are ignored: they are neither counted
    nor treated as record boundaries.

    Args:
        state: Current scanner state.
        byte: Next byte of the input stream.

    Returns:
        Tuple of (next state, event to apply).
    """
    if state == State.NONE:
        if byte == RECORD_MARKER:
            return State.HEADER, Event.RECORD_START
        return State.NONE, Event.NOTHING
    if state == State.HEADER:
        if byte == LINE_TERMINATOR:
            return State.SEQUENCE, Event.HEADER_END
        return State.HEADER, Event.HEADER_BYTE
    if byte == RECORD_MARKER:
        return State.HEADER, Event.RECORD_BOUNDARY
    if byte == LINE_TERMINATOR:
        return State.SEQUENCE, Event.NOTHING
    return State.SEQUENCE, Event.BODY_BYTE


# Every (state, byte) transition, precomputed from advance()
_TRANSITIONS: tuple[tuple[tuple[State, Event], ...], ...] = tuple(
    tuple(advance(state, byte) for byte in range(256)) for state in State
)


class IndexStatistics(NamedTuple):
    """Result of the counting pass."""

    total_records: int
    longest_body_length: int
    shortest_body_length: int
    total_bytes: int


class _ScanHandler(Protocol):
    def start_record(self, offset: int) -> None: ...

    def end_header(self, header_length: int) -> None: ...

    def end_record(self, body_length: int) -> None: ...


class _CountingHandler:
    """Pass one: count records and track body length extremes."""

    def __init__(self) -> None:
        self.total = 0
        self.longest = 0
        self.shortest: int | None = None

    def start_record(self, offset: int) -> None:
        self.total += 1

    def end_header(self, header_length: int) -> None:
        pass

    def end_record(self, body_length: int) -> None:
        self.longest = max(self.longest, body_length)
        if self.shortest is None or body_length < self.shortest:
            self.shortest = body_length


class _RecordingHandler:
    """Pass two: write descriptors into a pre-sized record table."""

    def __init__(self, table: RecordTable) -> None:
        self._table = table
        self._offset = 0
        self._header_length = 0
        self.recorded = 0

    def start_record(self, offset: int) -> None:
        if self.recorded >= len(self._table):
            raise IndexMismatchError(counted=len(self._table), recorded=self.recorded + 1)
        self._offset = offset
        self._header_length = 0

    def end_header(self, header_length: int) -> None:
        self._header_length = header_length

    def end_record(self, body_length: int) -> None:
        self._table.set_descriptor(
            self.recorded,
            offset=self._offset,
            header_length=self._header_length,
            body_length=body_length,
        )
        self.recorded += 1


def _stream_size(stream: BinaryIO) -> int:
    """Return the number of bytes from the current position to the end."""
    if not stream.seekable():
        return 0
    start = stream.tell()
    end = stream.seek(0, 2)
    stream.seek(start)
    return end - start


def _scan(
    stream: BinaryIO,
    handler: _ScanHandler,
    block_size: int = DEFAULT_BLOCK_SIZE,
    progress: ProgressSink | None = None,
) -> int:
    """
    Drive the state machine over a stream and forward events to a handler.

    Reads fixed-size blocks so memory use does not depend on file size.

    Returns:
        Number of bytes scanned.
    """
    total_bytes = _stream_size(stream)
    state = State.NONE
    position = 0
    header_length = 0
    body_length = 0

    while block := stream.read(block_size):
        for byte in block:
            state_next, event = _TRANSITIONS[state][byte]
            if event == Event.BODY_BYTE:
                body_length += 1
            elif event == Event.HEADER_BYTE:
                header_length += 1
            elif event == Event.RECORD_START:
                handler.start_record(position)
                header_length = 0
            elif event == Event.HEADER_END:
                handler.end_header(header_length)
                body_length = 0
            elif event == Event.RECORD_BOUNDARY:
                handler.end_record(body_length)
                handler.start_record(position)
                header_length = 0
                body_length = 0
            state = state_next
            position += 1
        if progress is not None:
            progress(position, max(total_bytes, position))

    # The final record has no trailing marker to close it
    if state == State.HEADER:
        handler.end_header(header_length)
        handler.end_record(0)
    elif state == State.SEQUENCE:
        handler.end_record(body_length)

    return position


def count_records(
    stream: BinaryIO,
    block_size: int = DEFAULT_BLOCK_SIZE,
    progress: ProgressSink | None = None,
) -> IndexStatistics:
    """
    First pass: count records and find the longest body.

    Args:
        stream: Binary stream positioned at the start of the input.
        block_size: Bytes read per block.
        progress: Optional callback(bytes_done, bytes_total).

    Returns:
        IndexStatistics for the stream.
    """
    handler = _CountingHandler()
    scanned = _scan(stream, handler, block_size, progress)
    stats = IndexStatistics(
        total_records=handler.total,
        longest_body_length=handler.longest,
        shortest_body_length=handler.shortest or 0,
        total_bytes=scanned,
    )
    logger.info("Total of %d sequences", stats.total_records)
    logger.info("Longest sequence: %d characters", stats.longest_body_length)
    return stats


def record_positions(
    stream: BinaryIO,
    table: RecordTable,
    block_size: int = DEFAULT_BLOCK_SIZE,
    progress: ProgressSink | None = None,
) -> None:
    """
    Second pass: record offset, header length and body length per record.

    Raises:
        IndexMismatchError: If the stream holds a different number of
            records than the table was sized for.
    """
    handler = _RecordingHandler(table)
    _scan(stream, handler, block_size, progress)
    if handler.recorded != len(table):
        raise IndexMismatchError(counted=len(table), recorded=handler.recorded)


def index_records(
    stream: BinaryIO,
    block_size: int = DEFAULT_BLOCK_SIZE,
    progress: ProgressSink | None = None,
) -> RecordTable:
    """
    Index a seekable binary stream with both passes.

    Example:
        >>> import io
        >>> table = index_records(io.BytesIO(b">a\\nACGT\\n>b\\nAC\\n"))
        >>> [record.body_length for record in table]
        [4, 2]
    """
    stream.seek(0)
    stats = count_records(stream, block_size, progress)
    table = RecordTable(stats.total_records, stats.longest_body_length)
    logger.info("Allocating %d bytes for the record table", table.allocated_bytes)
    stream.seek(0)
    record_positions(stream, table, block_size, progress)
    return table
