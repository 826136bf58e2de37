"""
End-to-end clustering of a record file.

Indexer -> record table -> WorkDispatcher -> ClusterAssigner -> forest table.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import polars as pl

from seqclusterizer.core.clustering import ClusterAssigner, ClusteringStats, similarity_score
from seqclusterizer.core.constants import (
    COLUMN_HEADER,
    COLUMN_INDEX,
    COLUMN_IS_ROOT,
    COLUMN_MATCHES,
    COLUMN_MISMATCHES,
    COLUMN_PARENT,
    COLUMN_SIMILARITY,
)
from seqclusterizer.core.dispatcher import WorkDispatcher
from seqclusterizer.core.exceptions import EmptyInputError, InputFileError, SequenceReadError
from seqclusterizer.core.indexer import index_records
from seqclusterizer.core.reader import RecordReader
from seqclusterizer.models.config import ClusterConfig
from seqclusterizer.models.records import RecordTable
from seqclusterizer.models.summary import ClusterSummary

logger = logging.getLogger(__name__)

ProgressSink = Callable[[int, int], None]

FOREST_SCHEMA: dict[str, pl.DataType] = {
    COLUMN_INDEX: pl.Int64,
    COLUMN_HEADER: pl.Utf8,
    COLUMN_PARENT: pl.Int64,
    COLUMN_MATCHES: pl.Int64,
    COLUMN_MISMATCHES: pl.Int64,
    COLUMN_SIMILARITY: pl.Int64,
    COLUMN_IS_ROOT: pl.Boolean,
}


@dataclass
class ClusteringRun:
    """Outcome of a clustering run."""

    table: RecordTable
    forest: pl.DataFrame
    summary: ClusterSummary


def forest_to_dataframe(
    table: RecordTable,
    reader: RecordReader,
    min_similarity: int = 0,
) -> pl.DataFrame:
    """
    Build the output table of a clustered record table.

    One row per record in file order. Records whose best parent scores
    below ``min_similarity`` are reported as roots; their best-candidate
    counts and similarity are kept for inspection.

    Args:
        table: Record table after parent assignment.
        reader: Reader used to fetch record headers.
        min_similarity: Scaled similarity threshold (0-100000000).

    Returns:
        DataFrame with the columns of FOREST_SCHEMA.
    """
    data: dict[str, list] = {column: [] for column in FOREST_SCHEMA}

    for record in table:
        try:
            header = reader.read_header(record.index)
        except SequenceReadError as e:
            logger.warning("%s; writing empty header", e.message)
            header = ""

        if record.has_parent:
            similarity = similarity_score(record.parent_matches, record.parent_mismatches)
        else:
            similarity = 0
        keep_parent = record.has_parent and similarity >= min_similarity

        data[COLUMN_INDEX].append(record.index)
        data[COLUMN_HEADER].append(header)
        data[COLUMN_PARENT].append(record.parent_index if keep_parent else None)
        data[COLUMN_MATCHES].append(record.parent_matches)
        data[COLUMN_MISMATCHES].append(record.parent_mismatches)
        data[COLUMN_SIMILARITY].append(similarity)
        data[COLUMN_IS_ROOT].append(not keep_parent)

    return pl.DataFrame(data, schema=FOREST_SCHEMA)


def summarize(
    table: RecordTable,
    forest: pl.DataFrame,
    stats: ClusteringStats,
) -> ClusterSummary:
    """Summarize a forest table and its clustering counters."""
    root_count = int(forest[COLUMN_IS_ROOT].sum())
    # Records that had a parent before the similarity filter
    with_parent = sum(1 for record in table if record.has_parent)
    assigned = len(forest) - root_count
    return ClusterSummary(
        total_records=len(table),
        longest_body_length=table.longest_body_length,
        shortest_body_length=table.shortest_body_length,
        root_count=root_count,
        assigned_count=assigned,
        filtered_count=with_parent - assigned,
        comparisons=stats.comparisons,
        skipped_comparisons=stats.skipped_comparisons,
        failed_queries=stats.failed_queries,
    )


def run_clustering(
    path: Path,
    config: ClusterConfig,
    index_progress: ProgressSink | None = None,
    cluster_progress: ProgressSink | None = None,
) -> ClusteringRun:
    """
    Index, cluster and tabulate a record file.

    Args:
        path: Input FASTA file (single-line bodies).
        config: Validated clustering configuration.
        index_progress: Optional callback(bytes_done, bytes_total) per pass.
        cluster_progress: Optional callback(queries_done, queries_total).

    Returns:
        ClusteringRun with the mutated record table, forest and summary.

    Raises:
        InputFileError: If the input cannot be opened.
        EmptyInputError: If the input holds no records.
    """
    path = Path(path)
    try:
        handle = path.open("rb")
    except OSError as e:
        raise InputFileError(str(path)) from e

    with handle:
        table = index_records(handle, config.block_size, index_progress)
        if len(table) == 0:
            raise EmptyInputError(str(path))
        if config.pattern_length >= table.shortest_body_length:
            logger.warning(
                "Pattern length %d is not smaller than the shortest sequence (%d characters); "
                "records that short have no windows to compare",
                config.pattern_length,
                table.shortest_body_length,
            )

        assigner = ClusterAssigner(table, config.pattern_length, config.try_complement)
        dispatcher = WorkDispatcher(config.workers, config.backend)
        logger.info(
            "Clustering %d records (pattern length %d, %s)",
            len(table),
            config.pattern_length,
            "sequential" if dispatcher.is_sequential else f"{config.workers} {config.backend} workers",
        )
        stats = assigner.assign_parents(
            path=path,
            dispatcher=dispatcher,
            progress=cluster_progress,
        )

        forest = forest_to_dataframe(table, RecordReader(handle, table), config.min_similarity)

    summary = summarize(table, forest, stats)
    logger.info(
        "Assigned parents to %d of %d records (%d filtered by similarity)",
        summary.assigned_count,
        summary.total_records,
        summary.filtered_count,
    )
    return ClusteringRun(table=table, forest=forest, summary=summary)
