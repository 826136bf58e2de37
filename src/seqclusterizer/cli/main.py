"""
Main CLI entry point for seqclusterizer.

Provides subcommands for each stage of the clustering workflow:
- cluster: Index records and assign chunk-match parents
- config: Create and validate configuration files
"""

from __future__ import annotations

import typer
from rich import print as rprint
from rich.console import Console

from seqclusterizer import __version__

app = typer.Typer(
    name="seqclusterizer",
    help="Chunk-match nearest-neighbor clustering of sequence records",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        rprint(f"seqclusterizer version {__version__}")
        raise typer.Exit


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """
    Seqclusterizer: chunk-match nearest-neighbor clustering of sequence records.

    Compares every pair of records in a FASTA file using fixed-width window
    matching and links each record to its most similar earlier record,
    producing a forest of clusters without full alignment.
    """


# Import subcommands
from seqclusterizer.cli import cluster, config

# Register subcommands
app.add_typer(cluster.app, name="cluster")
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
