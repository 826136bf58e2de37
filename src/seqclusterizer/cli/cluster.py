"""
Cluster command for chunk-match parent assignment.

Provides subcommands:
- run: Index a FASTA file, assign parents and write the clustering forest
- index: Index a FASTA file and report record statistics
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import typer
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from seqclusterizer.cli.utils import (
    QuietConsole,
    bar_progress,
    configure_logging,
    infer_output_format,
    print_error,
    progress_sink,
    spinner_progress,
    validate_input_path,
    validate_output_path,
)
from seqclusterizer.core.exceptions import SeqClusterizerError
from seqclusterizer.core.indexer import count_records
from seqclusterizer.core.io_utils import write_dataframe
from seqclusterizer.core.pipeline import run_clustering
from seqclusterizer.models.config import ClusterConfig
from seqclusterizer.models.records import RecordTable
from seqclusterizer.models.summary import ClusterSummary

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="cluster",
    help="Cluster sequence records by chunk-match similarity",
    no_args_is_help=True,
)

console = Console()


def _format_validation_error(error: ValidationError) -> str:
    lines = []
    for item in error.errors():
        field = ".".join(str(part) for part in item["loc"]) or "config"
        lines.append(f"  {field}: {item['msg']}")
    return "Invalid configuration:\n" + "\n".join(lines)


def _build_config(config_path: Path | None, overrides: dict[str, Any]) -> ClusterConfig:
    if config_path is not None:
        return ClusterConfig.from_yaml(config_path, **overrides)
    values = {key: value for key, value in overrides.items() if value is not None}
    if "pattern_length" not in values:
        print_error(console, "Error: --pattern-length is required without --config")
        raise typer.Exit(code=1)
    return ClusterConfig(**values)


def _summary_table(summary: ClusterSummary) -> Table:
    table = Table(title="Clustering Summary", show_header=True)

    table.add_column("Metric", style="cyan", no_wrap=True)
    table.add_column("Value", justify="right", style="magenta")

    table.add_row("Records", f"{summary.total_records:,}")
    table.add_row("With parent", f"{summary.assigned_count:,}")
    table.add_row("Roots", f"{summary.root_count:,}")
    table.add_row("Filtered by similarity", f"{summary.filtered_count:,}")
    table.add_row("Comparisons", f"{summary.comparisons:,}")
    if summary.skipped_comparisons:
        table.add_row("Skipped comparisons", f"[red]{summary.skipped_comparisons:,}[/red]")
    table.add_row("Longest sequence", f"{summary.longest_body_length:,}")
    table.add_row("Shortest sequence", f"{summary.shortest_body_length:,}")
    return table


@app.command(name="run")
def run(
    input_file: Path = typer.Argument(
        ...,
        help="Input FASTA file (single-line sequences)",
    ),
    output: Path = typer.Option(
        ...,
        "--output",
        "-o",
        help="Output forest table (.csv, .tsv or .parquet)",
    ),
    pattern_length: int | None = typer.Option(
        None,
        "--pattern-length",
        "-p",
        help="Pattern length (larger than 0 and smaller than the smallest sequence)",
    ),
    min_similarity: int | None = typer.Option(
        None,
        "--min-similarity",
        "-s",
        help="Minimum sequence similarity (0-100000000, 100000000 = 100%)",
    ),
    try_complement: bool | None = typer.Option(
        None,
        "--try-complement/--no-try-complement",
        help="Also compare against the reverse complement sequence (default: config file, else off)",
    ),
    workers: int | None = typer.Option(
        None,
        "--workers",
        "-t",
        help="Total of dedicated workers (0 for sequential, maximum of 64)",
    ),
    backend: str | None = typer.Option(
        None,
        "--backend",
        help="Worker pool implementation: thread or process",
    ),
    output_format: str | None = typer.Option(
        None,
        "--format",
        "-f",
        help="Output format: csv, tsv or parquet (default: config file, else output extension)",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="YAML configuration file (command-line options take precedence)",
    ),
    show_progress: bool | None = typer.Option(
        None,
        "--progress/--no-progress",
        help="Show indexing and clustering progress (default: config file, else off)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress non-error output (for scripting)",
    ),
) -> None:
    """
    Assign every record its most similar earlier record.

    Each sequence is cut into non-overlapping windows of the pattern
    length; every window of one sequence is compared with every window of
    the other. The record with the most matching windows (fewest
    mismatching on ties) among the earlier records becomes the parent.

    Example:

        seqclusterizer cluster run sequences.fasta \\
            --output forest.csv \\
            --pattern-length 8 \\
            --min-similarity 50000000 \\
            --workers 4
    """
    configure_logging(verbose)
    out = QuietConsole(console, quiet=quiet)

    # Options left unset (None) keep the YAML configuration value
    overrides: dict[str, Any] = {
        "pattern_length": pattern_length,
        "min_similarity": min_similarity,
        "try_complement": try_complement,
        "workers": workers,
        "backend": backend,
        "output_format": output_format,
        "show_progress": show_progress,
    }

    try:
        cluster_config = _build_config(config, overrides)
        if output_format is None and "output_format" not in cluster_config.model_fields_set:
            cluster_config = cluster_config.model_copy(
                update={"output_format": infer_output_format(output)}
            )
        validate_input_path(input_file)
        validate_output_path(output)
    except ValidationError as e:
        print_error(console, _format_validation_error(e))
        raise typer.Exit(code=1) from None
    except (SeqClusterizerError, OSError, ValueError, yaml.YAMLError) as e:
        print_error(console, f"Error: {e}")
        raise typer.Exit(code=1) from None

    logger.debug("Using configuration %s", cluster_config.model_dump())

    out.print("\n[bold blue]Seqclusterizer[/bold blue]\n")
    out.print(f"[bold]Input:[/bold] {input_file}")
    out.print(f"[bold]Output:[/bold] {output}")
    out.print(f"[bold]Pattern length:[/bold] {cluster_config.pattern_length}")
    out.print(
        f"[bold]Minimum sequence similarity:[/bold] {cluster_config.min_similarity} "
        f"({cluster_config.min_similarity_percent:.2f}%)"
    )
    out.print(f"[bold]Try complement sequence:[/bold] {cluster_config.try_complement}")
    out.print(f"[bold]Workers:[/bold] {cluster_config.workers} ({cluster_config.backend})")

    try:
        with bar_progress(console, enabled=cluster_config.show_progress and not quiet) as progress:
            index_task = progress.add_task("Indexing records...", total=None)
            cluster_task = progress.add_task("Clustering...", total=None)
            result = run_clustering(
                input_file,
                cluster_config,
                index_progress=progress_sink(progress, index_task),
                cluster_progress=progress_sink(progress, cluster_task),
            )
        write_dataframe(result.forest, output, cluster_config.output_format)
    except (SeqClusterizerError, OSError) as e:
        print_error(console, f"Error: {e}")
        raise typer.Exit(code=1) from None

    out.print()
    out.print(_summary_table(result.summary))
    out.print("\n[bold green]Clustering complete![/bold green]")
    out.print(f"[bold]Output:[/bold] {output}")
    out.print()


@app.command(name="index")
def index(
    input_file: Path = typer.Argument(
        ...,
        help="Input FASTA file (single-line sequences)",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress progress output",
    ),
) -> None:
    """
    Count the records of a FASTA file and report sequence lengths.

    Runs only the first indexing pass, which is enough to size the record
    table and choose a pattern length.
    """
    try:
        validate_input_path(input_file)
    except SeqClusterizerError as e:
        print_error(console, f"Error: {e}")
        raise typer.Exit(code=1) from None

    with spinner_progress("Checking the entries in the input file...", console, quiet):
        with input_file.open("rb") as handle:
            stats = count_records(handle)

    allocated = RecordTable.estimate_bytes(stats.total_records)

    console.print(f"Total of {stats.total_records:,} sequences.")
    console.print(f"Longest sequence: {stats.longest_body_length:,} characters.")
    console.print(f"Shortest sequence: {stats.shortest_body_length:,} characters.")
    console.print(f"Record table: {allocated:,} bytes.")
