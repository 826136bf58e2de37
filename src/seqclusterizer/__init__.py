"""
Seqclusterizer: chunk-match nearest-neighbor clustering of sequence records.

Indexes FASTA-style record collections without loading sequence bytes into
memory, compares every pair of records with a fixed-width chunk-matching
metric, and assigns each record its most similar earlier record to build a
forward-only clustering forest.
"""

__version__ = "0.1.0"
__author__ = "Seqclusterizer Team"

from seqclusterizer.core.clustering import ClusterAssigner
from seqclusterizer.core.distance import compare
from seqclusterizer.core.indexer import index_records
from seqclusterizer.core.pipeline import run_clustering
from seqclusterizer.models.config import ClusterConfig
from seqclusterizer.models.records import Record, RecordTable

__all__ = [
    "ClusterAssigner",
    "ClusterConfig",
    "Record",
    "RecordTable",
    "__version__",
    "compare",
    "index_records",
    "run_clustering",
]
