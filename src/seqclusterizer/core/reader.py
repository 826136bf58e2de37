"""
On-demand access to record bytes through indexed offsets.
"""

from __future__ import annotations

import threading
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO

from seqclusterizer.core.exceptions import InputFileError, SequenceReadError
from seqclusterizer.models.records import RecordTable


class RecordReader:
    """
    Seek-and-read access to record headers and bodies.

    Seeking and reading are not atomic together, so a handle must not be
    shared between workers unless a lock is supplied. Workers that can
    open the input path get their own reader via ``RecordReader.open``.

    Example:
        >>> with RecordReader.open(path, table) as reader:
        ...     body = reader.read_body(0)
    """

    def __init__(
        self,
        stream: BinaryIO,
        table: RecordTable,
        lock: threading.Lock | None = None,
    ) -> None:
        self._stream = stream
        self._table = table
        self._lock = lock

    @property
    def table(self) -> RecordTable:
        return self._table

    @classmethod
    @contextmanager
    def open(cls, path: Path, table: RecordTable) -> Generator[RecordReader, None, None]:
        """Open an independent file handle and yield a reader over it."""
        try:
            handle = Path(path).open("rb")
        except OSError as e:
            raise InputFileError(str(path)) from e
        with handle:
            yield cls(handle, table)

    def _read_at(self, index: int, offset: int, size: int) -> bytes:
        try:
            if self._lock is None:
                self._stream.seek(offset)
                return self._stream.read(size)
            with self._lock:
                self._stream.seek(offset)
                return self._stream.read(size)
        except OSError as e:
            raise SequenceReadError(index, size, 0) from e

    def read_body(self, index: int) -> bytes:
        """
        Read the sequence body of a record.

        Raises:
            SequenceReadError: If the storage read fails or returns fewer
                bytes than the indexed body length.
        """
        record = self._table[index]
        data = self._read_at(index, record.body_offset, record.body_length)
        if len(data) != record.body_length:
            raise SequenceReadError(index, record.body_length, len(data))
        return data

    def read_header(self, index: int) -> str:
        """Read the header line of a record, without marker and terminator."""
        record = self._table[index]
        data = self._read_at(index, record.header_offset, record.header_length)
        if len(data) != record.header_length:
            raise SequenceReadError(index, record.header_length, len(data))
        return data.decode("utf-8", errors="replace").rstrip("\r")

    def synchronized(self) -> RecordReader:
        """Return a reader over the same handle that serializes seek+read pairs."""
        if self._lock is not None:
            return self
        return RecordReader(self._stream, self._table, lock=threading.Lock())
