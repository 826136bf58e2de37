"""
Integration tests for the seqclusterizer CLI.

Tests the command-line interface using Typer's CliRunner for:
- Main entry point and version display
- cluster run with its options and output formats
- cluster index statistics
- config init and show
- Error handling for invalid inputs
"""

from __future__ import annotations

from pathlib import Path

import polars as pl
import pytest

from seqclusterizer import __version__
from seqclusterizer.core.io_utils import read_dataframe
from tests.utils.assertions import CLIAssertions, ForestAssertions


# =============================================================================
# Main Entry Point Tests
# =============================================================================


class TestMain:
    def test_version(self, invoke):
        result = invoke("--version")
        CLIAssertions.assert_success(result)
        assert f"seqclusterizer version {__version__}" in result.output

    def test_help_lists_commands(self, invoke):
        result = invoke("--help")
        CLIAssertions.assert_success(result)
        assert "cluster" in result.output
        assert "config" in result.output


# =============================================================================
# cluster run
# =============================================================================


class TestClusterRun:
    def test_csv_output(self, invoke, closer_later_fasta, tmp_path):
        output = tmp_path / "forest.csv"
        result = invoke("cluster", "run", closer_later_fasta, "-o", output, "-p", "1")

        CLIAssertions.assert_success(result)
        assert "Clustering complete!" in result.output

        forest = pl.read_csv(output)
        ForestAssertions.assert_valid_forest(forest)
        assert ForestAssertions.parents(forest) == [None, 0, 1]
        assert forest["header"].to_list() == ["seq0", "seq1", "seq2"]
        assert forest["similarity"].to_list() == [0, 0, 75_000_000]

    def test_min_similarity(self, invoke, closer_later_fasta, tmp_path):
        output = tmp_path / "forest.csv"
        result = invoke(
            "cluster", "run", closer_later_fasta, "-o", output, "-p", "1", "-s", "50000000"
        )

        CLIAssertions.assert_success(result)
        assert ForestAssertions.parents(pl.read_csv(output)) == [None, None, 1]

    def test_try_complement(self, invoke, write_fasta, tmp_path):
        path = write_fasta(["AAAAX", "TTTTX"])
        output = tmp_path / "forest.csv"
        result = invoke("cluster", "run", path, "-o", output, "-p", "1", "--try-complement")

        CLIAssertions.assert_success(result)
        forest = pl.read_csv(output)
        assert forest["matches"].to_list() == [0, 12]
        assert forest["mismatches"].to_list() == [0, 4]

    @pytest.mark.parametrize("workers", ["1", "4"])
    def test_threads_match_sequential(self, invoke, mismatch_tiebreak_fasta, tmp_path, workers):
        sequential = tmp_path / "sequential.csv"
        threaded = tmp_path / "threaded.csv"
        CLIAssertions.assert_success(
            invoke("cluster", "run", mismatch_tiebreak_fasta, "-o", sequential, "-p", "1")
        )
        CLIAssertions.assert_success(
            invoke("cluster", "run", mismatch_tiebreak_fasta, "-o", threaded, "-p", "1", "-t", workers)
        )
        assert sequential.read_bytes() == threaded.read_bytes()

    def test_tsv_inferred_from_extension(self, invoke, scenario_c_fasta, tmp_path):
        output = tmp_path / "forest.tsv"
        CLIAssertions.assert_success(invoke("cluster", "run", scenario_c_fasta, "-o", output, "-p", "1"))
        assert output.read_text().splitlines()[0].split("\t")[:3] == ["index", "header", "parent_index"]

    def test_parquet_output(self, invoke, scenario_c_fasta, tmp_path):
        output = tmp_path / "forest.parquet"
        CLIAssertions.assert_success(invoke("cluster", "run", scenario_c_fasta, "-o", output, "-p", "1"))
        forest = read_dataframe(output)
        ForestAssertions.assert_valid_forest(forest)
        assert ForestAssertions.parents(forest) == [None, 0, 0]

    def test_explicit_format_overrides_extension(self, invoke, scenario_c_fasta, tmp_path):
        output = tmp_path / "forest.csv"
        CLIAssertions.assert_success(
            invoke("cluster", "run", scenario_c_fasta, "-o", output, "-p", "1", "-f", "tsv")
        )
        assert "\t" in output.read_text().splitlines()[0]

    def test_config_file(self, invoke, closer_later_fasta, tmp_path):
        config = tmp_path / "cluster.yaml"
        config.write_text(
            "comparison:\n"
            "  pattern_length: 1\n"
            "execution:\n"
            "  workers: 2\n"
            "output:\n"
            "  format: tsv\n"
        )
        output = tmp_path / "forest.out"
        result = invoke("cluster", "run", closer_later_fasta, "-o", output, "-c", config)

        CLIAssertions.assert_success(result)
        forest = pl.read_csv(output, separator="\t")
        assert ForestAssertions.parents(forest) == [None, 0, 1]

    def test_config_without_format_uses_extension(self, invoke, scenario_c_fasta, tmp_path):
        config = tmp_path / "cluster.yaml"
        config.write_text("comparison:\n  pattern_length: 1\n")
        output = tmp_path / "forest.tsv"

        CLIAssertions.assert_success(invoke("cluster", "run", scenario_c_fasta, "-o", output, "-c", config))
        assert "\t" in output.read_text().splitlines()[0]

    def test_no_try_complement_overrides_config(self, invoke, write_fasta, tmp_path):
        path = write_fasta(["AAAAX", "TTTTX"])
        config = tmp_path / "cluster.yaml"
        config.write_text("comparison:\n  pattern_length: 1\n  try_complement: true\n")
        from_config = tmp_path / "from_config.csv"
        overridden = tmp_path / "overridden.csv"

        CLIAssertions.assert_success(invoke("cluster", "run", path, "-o", from_config, "-c", config))
        CLIAssertions.assert_success(
            invoke("cluster", "run", path, "-o", overridden, "-c", config, "--no-try-complement")
        )

        assert pl.read_csv(from_config)["matches"].to_list() == [0, 12]
        assert pl.read_csv(overridden)["matches"].to_list() == [0, 0]
        assert pl.read_csv(overridden)["mismatches"].to_list() == [0, 16]

    def test_no_progress_overrides_config(self, invoke, scenario_c_fasta, tmp_path):
        config = tmp_path / "cluster.yaml"
        config.write_text("comparison:\n  pattern_length: 1\nexecution:\n  show_progress: true\n")
        output = tmp_path / "forest.csv"

        result = invoke("cluster", "run", scenario_c_fasta, "-o", output, "-c", config, "--no-progress")
        CLIAssertions.assert_success(result)
        assert output.exists()

    def test_flags_override_config_file(self, invoke, closer_later_fasta, tmp_path):
        config = tmp_path / "cluster.yaml"
        config.write_text("comparison:\n  pattern_length: 4\n")
        output = tmp_path / "forest.csv"
        result = invoke(
            "cluster", "run", closer_later_fasta, "-o", output, "-c", config, "-p", "1", "-f", "csv"
        )

        CLIAssertions.assert_success(result)
        assert pl.read_csv(output)["matches"].to_list() == [0, 0, 12]

    def test_quiet(self, invoke, scenario_c_fasta, tmp_path):
        output = tmp_path / "forest.csv"
        result = invoke("cluster", "run", scenario_c_fasta, "-o", output, "-p", "1", "--quiet")

        CLIAssertions.assert_success(result)
        assert "Clustering complete!" not in result.output
        assert output.exists()

    def test_progress_and_verbose(self, invoke, scenario_c_fasta, tmp_path):
        output = tmp_path / "forest.csv"
        result = invoke(
            "cluster", "run", scenario_c_fasta, "-o", output, "-p", "1", "--progress", "--verbose"
        )
        CLIAssertions.assert_success(result)
        assert output.exists()

    def test_creates_output_directory(self, invoke, scenario_c_fasta, tmp_path):
        output = tmp_path / "results" / "forest.csv"
        CLIAssertions.assert_success(invoke("cluster", "run", scenario_c_fasta, "-o", output, "-p", "1"))
        assert output.exists()


class TestClusterRunErrors:
    """Configuration errors exit with code 1 before writing any output."""

    @pytest.mark.parametrize(
        ("options", "message"),
        [
            (["-p", "0"], "pattern_length"),
            (["-p", "1", "-s", "100000000"], "min_similarity"),
            (["-p", "1", "-s", "-1"], "min_similarity"),
            (["-p", "1", "-t", "65"], "workers"),
            (["-p", "1", "--backend", "fiber"], "backend"),
            ([], "--pattern-length is required"),
        ],
    )
    def test_invalid_options(self, invoke, scenario_c_fasta, tmp_path, options, message):
        output = tmp_path / "forest.csv"
        result = invoke("cluster", "run", scenario_c_fasta, "-o", output, *options)

        assert result.exit_code == 1
        CLIAssertions.assert_failure(result, message)
        CLIAssertions.assert_no_output_file(output)

    def test_missing_input(self, invoke, tmp_path):
        output = tmp_path / "forest.csv"
        result = invoke("cluster", "run", tmp_path / "missing.fasta", "-o", output, "-p", "1")

        assert result.exit_code == 1
        CLIAssertions.assert_failure(result, "Input file does not exist")
        CLIAssertions.assert_no_output_file(output)

    def test_output_is_directory(self, invoke, scenario_c_fasta, tmp_path):
        result = invoke("cluster", "run", scenario_c_fasta, "-o", tmp_path, "-p", "1")

        assert result.exit_code == 1
        CLIAssertions.assert_failure(result, "is a directory")

    def test_empty_input(self, invoke, tmp_path):
        path = tmp_path / "empty.fasta"
        path.write_text("")
        output = tmp_path / "forest.csv"
        result = invoke("cluster", "run", path, "-o", output, "-p", "1")

        assert result.exit_code == 1
        CLIAssertions.assert_failure(result, "Input contains no records")
        CLIAssertions.assert_no_output_file(output)

    def test_invalid_config_file(self, invoke, scenario_c_fasta, tmp_path):
        config = tmp_path / "cluster.yaml"
        config.write_text("- not\n- a mapping\n")
        output = tmp_path / "forest.csv"
        result = invoke("cluster", "run", scenario_c_fasta, "-o", output, "-c", config)

        assert result.exit_code == 1
        CLIAssertions.assert_failure(result, "must be a mapping")

    def test_missing_config_file(self, invoke, scenario_c_fasta, tmp_path):
        output = tmp_path / "forest.csv"
        result = invoke(
            "cluster", "run", scenario_c_fasta, "-o", output, "-c", tmp_path / "missing.yaml"
        )

        assert result.exit_code == 1
        CLIAssertions.assert_no_output_file(output)


# =============================================================================
# cluster index
# =============================================================================


class TestClusterIndex:
    def test_statistics(self, invoke, mixed_fasta):
        result = invoke("cluster", "index", mixed_fasta, "--quiet")

        CLIAssertions.assert_success(result)
        assert "Total of 3 sequences." in result.output
        assert "Longest sequence: 5 characters." in result.output
        assert "Shortest sequence: 2 characters." in result.output
        assert "Record table: 144 bytes." in result.output

    def test_missing_input(self, invoke, tmp_path):
        result = invoke("cluster", "index", tmp_path / "missing.fasta")
        assert result.exit_code == 1
        CLIAssertions.assert_failure(result, "does not exist")


# =============================================================================
# config init / show
# =============================================================================


class TestConfigCommands:
    def test_init_and_show(self, invoke, tmp_path):
        path = tmp_path / "cluster.yaml"
        result = invoke("config", "init", path, "--pattern-length", "12")

        CLIAssertions.assert_success(result)
        assert "Configuration written" in result.output
        assert path.exists()

        shown = invoke("config", "show", path)
        CLIAssertions.assert_success(shown)
        assert "pattern_length: 12" in shown.output
        assert "format: csv" in shown.output

    def test_init_refuses_overwrite(self, invoke, tmp_path):
        path = tmp_path / "cluster.yaml"
        path.write_text("keep: me\n")
        result = invoke("config", "init", path)

        assert result.exit_code == 1
        CLIAssertions.assert_failure(result, "already exists")
        assert path.read_text() == "keep: me\n"

    def test_init_force(self, invoke, tmp_path):
        path = tmp_path / "cluster.yaml"
        path.write_text("keep: me\n")
        CLIAssertions.assert_success(invoke("config", "init", path, "--force"))
        assert "pattern_length: 8" in path.read_text()

    def test_init_invalid_pattern_length(self, invoke, tmp_path):
        path = tmp_path / "cluster.yaml"
        result = invoke("config", "init", path, "-p", "0")
        assert result.exit_code == 1
        CLIAssertions.assert_no_output_file(path)

    def test_show_invalid(self, invoke, tmp_path):
        path = tmp_path / "cluster.yaml"
        path.write_text("comparison:\n  pattern_length: 0\n")
        result = invoke("config", "show", path)

        assert result.exit_code == 1
        CLIAssertions.assert_failure(result, "Invalid configuration")

    def test_generated_config_runs(self, invoke, closer_later_fasta, tmp_path):
        config = tmp_path / "cluster.yaml"
        CLIAssertions.assert_success(invoke("config", "init", config, "-p", "1"))
        output = tmp_path / "forest.csv"

        CLIAssertions.assert_success(invoke("cluster", "run", closer_later_fasta, "-o", output, "-c", config))
        assert ForestAssertions.parents(pl.read_csv(output)) == [None, 0, 1]
