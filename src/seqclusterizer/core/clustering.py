"""
Nearest-earlier-neighbor parent assignment.

For every query record ``q`` and every record ``t`` with a greater index,
the query body is compared against the target body and ``q`` becomes the
parent of ``t`` when it beats ``t``'s current parent. Records therefore
only ever point to earlier records, and the parent relation forms a
forest rooted at record 0 and every other record without a parent.

Scoring a query never touches the record table; candidates are collected
per query and applied by a single reducer so that parallel workers never
race on a target's parent fields.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from types import TracebackType
from typing import NamedTuple

from seqclusterizer.core.constants import SIMILARITY_SCALE
from seqclusterizer.core.dispatcher import WorkDispatcher
from seqclusterizer.core.distance import ChunkComparison, compare_oriented
from seqclusterizer.core.exceptions import InvalidPatternLengthError, SequenceReadError
from seqclusterizer.core.reader import RecordReader
from seqclusterizer.models.records import ParentCandidate, RecordTable

logger = logging.getLogger(__name__)


class QueryResult(NamedTuple):
    """Comparisons of one query against all later records."""

    query_index: int
    comparisons: tuple[tuple[int, ChunkComparison], ...]
    skipped: int = 0
    failed: bool = False


class ClusteringStats(NamedTuple):
    """Counters collected while assigning parents."""

    comparisons: int
    skipped_comparisons: int
    failed_queries: int


def is_better(candidate: ParentCandidate, current: ParentCandidate | None) -> bool:
    """
    Decide whether a candidate should replace a target's current parent.

    A target without a parent adopts any candidate. Otherwise more matches
    win, and on equal matches fewer mismatches win. When both counts tie,
    the earlier record wins; in increasing query order that never replaces
    the current parent, and it keeps the result independent of the order
    in which parallel workers deliver their candidates.

    Example:
        >>> is_better(ParentCandidate(1, 5, 4), ParentCandidate(0, 5, 6))
        True
        >>> is_better(ParentCandidate(1, 5, 6), ParentCandidate(0, 5, 6))
        False
    """
    if current is None:
        return True
    if candidate.matches != current.matches:
        return candidate.matches > current.matches
    if candidate.mismatches != current.mismatches:
        return candidate.mismatches < current.mismatches
    return candidate.index < current.index


def similarity_score(matches: int, mismatches: int) -> int:
    """
    Similarity of a comparison scaled so that SIMILARITY_SCALE equals 100%.

    Comparisons without any window pairs score 0.
    """
    total = matches + mismatches
    if total == 0:
        return 0
    return matches * SIMILARITY_SCALE // total


class ClusterAssigner:
    """
    Assigns every record its most similar earlier record.

    Example:
        >>> assigner = ClusterAssigner(table, pattern_length=4)
        >>> stats = assigner.assign_parents(path=fasta_path)
        >>> table[3].parent_index
        1
    """

    def __init__(
        self,
        table: RecordTable,
        pattern_length: int,
        try_complement: bool = False,
    ) -> None:
        if pattern_length < 1:
            raise InvalidPatternLengthError(pattern_length)
        self.table = table
        self.pattern_length = pattern_length
        self.try_complement = try_complement

    def score_query(self, query_index: int, reader: RecordReader) -> QueryResult:
        """
        Compare one query against every record with a greater index.

        A query whose body cannot be read is skipped entirely; a target
        whose body cannot be read skips only that comparison. Both are
        logged and never raised.
        """
        total = len(self.table)
        try:
            query = reader.read_body(query_index)
        except SequenceReadError as e:
            logger.warning("%s; skipping query", e.message)
            return QueryResult(query_index, (), skipped=total - query_index - 1, failed=True)

        comparisons: list[tuple[int, ChunkComparison]] = []
        skipped = 0
        for target_index in range(query_index + 1, total):
            try:
                target = reader.read_body(target_index)
            except SequenceReadError as e:
                logger.warning("%s; skipping comparison with query %d", e.message, query_index)
                skipped += 1
                continue
            comparison = compare_oriented(
                self.pattern_length, query, target, self.try_complement
            )
            comparisons.append((target_index, comparison))

        logger.debug("Query %d compared against %d records", query_index, len(comparisons))
        return QueryResult(query_index, tuple(comparisons), skipped=skipped)

    def apply(self, result: QueryResult) -> int:
        """
        Apply a query's comparisons to the record table.

        Must only be called from one thread at a time.

        Returns:
            Number of targets whose parent changed.
        """
        updated = 0
        for target_index, comparison in result.comparisons:
            candidate = ParentCandidate(
                result.query_index, comparison.matches, comparison.mismatches
            )
            if is_better(candidate, self.table.parent_of(target_index)):
                self.table.set_parent(target_index, candidate)
                updated += 1
        return updated

    def assign_parents(
        self,
        path: Path | None = None,
        reader: RecordReader | None = None,
        dispatcher: WorkDispatcher | None = None,
        progress: Callable[[int, int], None] | None = None,
    ) -> ClusteringStats:
        """
        Run the full clustering phase.

        Args:
            path: Input file; lets every worker open its own handle.
            reader: Shared reader, used when no path is given. It is
                wrapped with a lock when more than one thread uses it.
            dispatcher: Work distribution (sequential if None).
            progress: Optional callback(queries_done, queries_total).

        Returns:
            ClusteringStats for the run.
        """
        if path is None and reader is None:
            msg = "Either an input path or a reader is required"
            raise ValueError(msg)
        dispatcher = dispatcher or WorkDispatcher()
        if path is None and not dispatcher.is_sequential:
            reader = reader.synchronized()

        comparisons = 0
        skipped = 0
        failed = 0

        def reduce(result: QueryResult) -> None:
            nonlocal comparisons, skipped, failed
            self.apply(result)
            comparisons += len(result.comparisons)
            skipped += result.skipped
            failed += int(result.failed)

        dispatcher.run(
            len(self.table),
            lambda: QueryWorker(self, path=path, reader=reader),
            reduce,
            progress=progress,
        )

        if skipped:
            logger.warning("Skipped %d comparisons after read failures", skipped)
        return ClusteringStats(comparisons, skipped, failed)


class QueryWorker:
    """
    Scores queries with a reader owned by one worker.

    Entering the worker opens an independent handle on the input path, or
    reuses the shared reader when no path is available. Instances holding
    only a path are picklable and can be shipped to worker processes.
    """

    def __init__(
        self,
        assigner: ClusterAssigner,
        path: Path | None = None,
        reader: RecordReader | None = None,
    ) -> None:
        self._assigner = assigner
        self._path = path
        self._shared_reader = reader
        self._reader: RecordReader | None = None
        self._handle_context = None

    def __enter__(self) -> QueryWorker:
        if self._path is not None:
            self._handle_context = RecordReader.open(self._path, self._assigner.table)
            self._reader = self._handle_context.__enter__()
        else:
            self._reader = self._shared_reader
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._handle_context is not None:
            self._handle_context.__exit__(exc_type, exc, tb)
            self._handle_context = None
        self._reader = None

    def __call__(self, query_index: int) -> QueryResult:
        if self._reader is None:
            msg = "QueryWorker must be entered before scoring queries"
            raise RuntimeError(msg)
        return self._assigner.score_query(query_index, self._reader)

    def __getstate__(self) -> dict:
        if self._path is None:
            msg = "Only path-based workers can be sent to other processes"
            raise TypeError(msg)
        return {"_assigner": self._assigner, "_path": self._path}

    def __setstate__(self, state: dict) -> None:
        self.__init__(state["_assigner"], path=state["_path"])
