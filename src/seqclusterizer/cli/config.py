"""
Config command for managing clustering configuration files.

Provides subcommands:
- init: Write a YAML configuration file with default values
- show: Validate a YAML configuration file and print the effective values
"""

from __future__ import annotations

from pathlib import Path

import typer
import yaml
from pydantic import ValidationError
from rich.console import Console

from seqclusterizer.cli.utils import print_error
from seqclusterizer.models.config import ClusterConfig

app = typer.Typer(
    name="config",
    help="Create and validate clustering configuration files",
    no_args_is_help=True,
)

console = Console()


@app.command(name="init")
def init(
    output: Path = typer.Argument(
        ...,
        help="Output YAML file",
    ),
    pattern_length: int = typer.Option(
        8,
        "--pattern-length",
        "-p",
        help="Pattern length to store in the file",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        help="Overwrite an existing file",
    ),
) -> None:
    """
    Write a configuration file with default values.

    Example:

        seqclusterizer config init cluster.yaml --pattern-length 12
    """
    if output.exists() and not force:
        print_error(console, f"Error: {output} already exists (use --force to overwrite)")
        raise typer.Exit(code=1)

    try:
        config = ClusterConfig(pattern_length=pattern_length)
    except ValidationError as e:
        print_error(console, f"Error: {e}")
        raise typer.Exit(code=1) from None

    output.parent.mkdir(parents=True, exist_ok=True)
    config.to_yaml(output)
    console.print(f"[bold green]Configuration written:[/bold green] {output}")


@app.command(name="show")
def show(
    config_file: Path = typer.Argument(
        ...,
        help="YAML configuration file",
        exists=True,
        dir_okay=False,
    ),
) -> None:
    """
    Validate a configuration file and print the effective values.
    """
    try:
        config = ClusterConfig.from_yaml(config_file)
    except (ValidationError, ValueError, yaml.YAMLError) as e:
        print_error(console, f"Invalid configuration: {e}")
        raise typer.Exit(code=1) from None

    console.print(config.to_yaml_str(), end="")
