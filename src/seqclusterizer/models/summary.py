"""
Data models for clustering run summaries.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, computed_field


class ClusterSummary(BaseModel):
    """
    Summary statistics for a completed clustering run.

    Attributes:
        total_records: Number of records indexed
        longest_body_length: Longest sequence body in bytes
        shortest_body_length: Shortest sequence body in bytes
        root_count: Records reported without a parent
        assigned_count: Records reported with a parent
        filtered_count: Roots created by the minimum-similarity filter
        comparisons: Pairwise comparisons performed
        skipped_comparisons: Comparisons skipped after read failures
        failed_queries: Query records whose body could not be read
    """

    total_records: int = Field(ge=0)
    longest_body_length: int = Field(ge=0)
    shortest_body_length: int = Field(ge=0)
    root_count: int = Field(ge=0)
    assigned_count: int = Field(ge=0)
    filtered_count: int = Field(default=0, ge=0)
    comparisons: int = Field(default=0, ge=0)
    skipped_comparisons: int = Field(default=0, ge=0)
    failed_queries: int = Field(default=0, ge=0)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def assigned_fraction(self) -> float:
        """Fraction of records that kept a parent."""
        if self.total_records == 0:
            return 0.0
        return self.assigned_count / self.total_records

    model_config = {"frozen": True}
