"""
Core algorithms for chunk-match sequence clustering.

This module contains the two-pass indexer, the chunk comparison engine,
the parent assignment algorithm and the work dispatcher that parallelizes it.
"""

from seqclusterizer.core.clustering import ClusterAssigner, is_better, similarity_score
from seqclusterizer.core.dispatcher import WorkCursor, WorkDispatcher
from seqclusterizer.core.distance import ChunkComparison, compare, reverse_complement
from seqclusterizer.core.indexer import count_records, index_records, record_positions
from seqclusterizer.core.reader import RecordReader

__all__ = [
    "ChunkComparison",
    "ClusterAssigner",
    "RecordReader",
    "WorkCursor",
    "WorkDispatcher",
    "compare",
    "count_records",
    "index_records",
    "is_better",
    "record_positions",
    "reverse_complement",
    "similarity_score",
]
