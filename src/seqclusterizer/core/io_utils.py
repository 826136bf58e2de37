"""
I/O utilities for result table serialization.

Provides consistent handling of output formats (CSV/TSV/Parquet) for
clustering forests.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import polars as pl

OutputFormat = Literal["csv", "tsv", "parquet"]


def write_dataframe(
    df: pl.DataFrame,
    path: Path,
    output_format: OutputFormat = "csv",
) -> None:
    """
    Write DataFrame to file in specified format.

    For Parquet output, uses zstd compression for optimal size/speed tradeoff.
    CSV and TSV output is deterministic, so rerunning the same clustering
    produces a byte-identical file.

    Args:
        df: Polars DataFrame to write.
        path: Output file path.
        output_format: Output format - 'csv', 'tsv' or 'parquet'.

    Example:
        >>> df = pl.DataFrame({"index": [0, 1], "parent_index": [None, 0]})
        >>> write_dataframe(df, Path("forest.tsv"), "tsv")
    """
    if output_format == "parquet":
        df.write_parquet(path, compression="zstd")
    elif output_format == "tsv":
        df.write_csv(path, separator="\t")
    else:
        df.write_csv(path)


def read_dataframe(path: Path) -> pl.DataFrame:
    """
    Read DataFrame from file, auto-detecting format from extension.

    Supports: .csv, .tsv, .parquet

    Args:
        path: Input file path.

    Returns:
        Polars DataFrame.

    Raises:
        ValueError: If file extension is not recognized.
    """
    suffix = path.suffix.lower()

    if suffix == ".parquet":
        return pl.read_parquet(path)
    if suffix == ".csv":
        return pl.read_csv(path)
    if suffix == ".tsv":
        return pl.read_csv(path, separator="\t")
    msg = f"Unrecognized file format: {path}"
    raise ValueError(msg)
