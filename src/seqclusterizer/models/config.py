"""
Pydantic configuration models for seqclusterizer.

These models define the validated configuration for a clustering run:
comparison parameters, similarity filtering, execution mode and output
format. Configuration can be loaded from YAML files or CLI arguments.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, computed_field

from seqclusterizer.core.constants import (
    DEFAULT_BLOCK_SIZE,
    MINIMUM_SIMILARITY_MAXIMUM,
    SIMILARITY_SCALE,
    WORKERS_MAX,
)

logger = logging.getLogger(__name__)

Backend = Literal["thread", "process"]
OutputFormat = Literal["csv", "tsv", "parquet"]

# Nested YAML sections mapped onto flat ClusterConfig fields
_YAML_SECTIONS: dict[str, dict[str, str]] = {
    "comparison": {
        "pattern_length": "pattern_length",
        "try_complement": "try_complement",
    },
    "filtering": {
        "min_similarity": "min_similarity",
    },
    "execution": {
        "workers": "workers",
        "backend": "backend",
        "block_size": "block_size",
        "show_progress": "show_progress",
    },
    "output": {
        "format": "output_format",
    },
}


class ClusterConfig(BaseModel):
    """
    Configuration for a chunk-match clustering run.

    Comparison:
        Each record body is split into non-overlapping windows of
        ``pattern_length`` bytes. The pattern length should be smaller than
        the shortest body in the input; records too short to hold a full
        window contribute no matches or mismatches.

    Filtering:
        ``min_similarity`` is a scaled percentage where 100,000,000 equals
        100%. Records whose best parent scores below it are reported as
        roots.

    Execution:
        ``workers == 0`` runs sequentially. Otherwise a pool of ``workers``
        threads or processes claims query records from a shared cursor.
    """

    pattern_length: int = Field(
        ...,
        ge=1,
        description="Window width in bytes (larger than 0, smaller than the shortest sequence)",
    )
    min_similarity: int = Field(
        default=0,
        ge=0,
        lt=MINIMUM_SIMILARITY_MAXIMUM,
        description="Minimum similarity to keep a parent (0-100000000, scaled percentage)",
    )
    try_complement: bool = Field(
        default=False,
        description="Also compare each query against the reverse complement of the target",
    )
    workers: int = Field(
        default=0,
        ge=0,
        le=WORKERS_MAX,
        description="Dedicated workers (0 for sequential, maximum of 64)",
    )
    backend: Backend = Field(
        default="thread",
        description="Worker pool implementation: 'thread' or 'process'",
    )
    show_progress: bool = Field(
        default=False,
        description="Report indexing and clustering progress",
    )
    output_format: OutputFormat = Field(
        default="csv",
        description="Output table format",
    )
    block_size: int = Field(
        default=DEFAULT_BLOCK_SIZE,
        ge=1,
        description="Bytes read per block while indexing the input",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def min_similarity_percent(self) -> float:
        """Minimum similarity as a percentage (0-100)."""
        return self.min_similarity / SIMILARITY_SCALE * 100.0

    @property
    def is_sequential(self) -> bool:
        return self.workers == 0

    @classmethod
    def from_yaml(cls, path: Path, **overrides: Any) -> ClusterConfig:
        """
        Load clustering configuration from a YAML file.

        Nested sections (comparison, filtering, execution, output) are
        flattened onto model fields. Unknown keys are ignored for forward
        compatibility. Keyword overrides, typically CLI flags, take
        precedence over file values.

        Args:
            path: Path to YAML configuration file.
            **overrides: Field values that replace those from the file.

        Returns:
            ClusterConfig populated from YAML values merged with defaults.

        Raises:
            FileNotFoundError: If YAML file does not exist.
            ValueError: If YAML is not a mapping or contains invalid values.
        """
        import yaml

        raw = yaml.safe_load(path.read_text())
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            msg = f"YAML config must be a mapping, got {type(raw).__name__}"
            raise ValueError(msg)

        flat = _flatten_yaml_config(raw)
        flat.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**flat)

    def to_yaml(self, path: Path) -> None:
        """Write clustering configuration to a YAML file."""
        path.write_text(self.to_yaml_str())

    def to_yaml_str(self) -> str:
        """Serialize clustering configuration to a nested YAML string."""
        import yaml

        data: dict[str, dict[str, Any]] = {}
        for section, fields in _YAML_SECTIONS.items():
            data[section] = {key: getattr(self, field) for key, field in fields.items()}
        return yaml.dump(data, default_flow_style=False, sort_keys=False)

    model_config = {"frozen": True}


def _flatten_yaml_config(raw: dict[str, Any]) -> dict[str, Any]:
    """
    Flatten nested YAML config structure into ClusterConfig keyword arguments.

    Maps the documented nested YAML structure:
        comparison.pattern_length -> pattern_length
        filtering.min_similarity -> min_similarity
        output.format -> output_format

    Top-level keys matching a model field are accepted as-is.
    """
    flat: dict[str, Any] = {}
    field_names = set(ClusterConfig.model_fields)

    for key, value in raw.items():
        if key in _YAML_SECTIONS and isinstance(value, dict):
            mapping = _YAML_SECTIONS[key]
            for sub_key, sub_value in value.items():
                if sub_key in mapping:
                    flat[mapping[sub_key]] = sub_value
                else:
                    logger.debug("Ignoring unknown config key %s.%s", key, sub_key)
        elif key in field_names:
            flat[key] = value
        else:
            logger.debug("Ignoring unknown config key %s", key)

    return flat
