"""
Data models for seqclusterizer.

Pydantic models for configuration and run summaries, and the numpy-backed
record table shared by the indexing and clustering phases.
"""

from seqclusterizer.models.config import ClusterConfig
from seqclusterizer.models.records import ParentCandidate, Record, RecordTable
from seqclusterizer.models.summary import ClusterSummary

__all__ = [
    "ClusterConfig",
    "ClusterSummary",
    "ParentCandidate",
    "Record",
    "RecordTable",
]
