"""
Custom exceptions with actionable guidance.

Provides specific error types for configuration, indexing and sequence
read failures, each with helpful suggestions for resolution.
"""

from __future__ import annotations


class SeqClusterizerError(Exception):
    """Base exception for seqclusterizer errors."""

    def __init__(self, message: str, suggestion: str | None = None):
        self.message = message
        self.suggestion = suggestion
        super().__init__(self.full_message)

    @property
    def full_message(self) -> str:
        if self.suggestion:
            return f"{self.message}\n\nSuggestion: {self.suggestion}"
        return self.message


class ConfigurationError(SeqClusterizerError):
    """Raised when configuration is invalid."""


class InvalidPatternLengthError(ConfigurationError):
    """Raised when the pattern length is smaller than one byte."""

    def __init__(self, value: int):
        super().__init__(
            message=f"The minimum length of the pattern is 1, got {value}",
            suggestion=(
                "Choose a pattern length of at least 1 and smaller than the "
                "shortest sequence body in the input."
            ),
        )
        self.value = value


class WorkerCountError(ConfigurationError):
    """Raised when the requested worker pool is larger than allowed."""

    def __init__(self, workers: int, maximum: int):
        super().__init__(
            message=f"The total of workers ({workers}) is larger than allowed ({maximum})",
            suggestion=f"Use 0 for sequential mode or between 1 and {maximum} workers.",
        )
        self.workers = workers


class InputFileError(ConfigurationError):
    """Raised when the input file cannot be opened for reading."""

    def __init__(self, path: str, reason: str = "cannot be opened for reading"):
        super().__init__(
            message=f"Input file {reason}: {path}",
            suggestion="Check that the path exists and points to a readable FASTA file.",
        )
        self.path = path


class OutputFileError(ConfigurationError):
    """Raised when the output path cannot be written."""

    def __init__(self, path: str, reason: str = "cannot be opened for writing"):
        super().__init__(
            message=f"Output file {reason}: {path}",
            suggestion="Check that the output directory exists and is writable.",
        )
        self.path = path


class IndexingError(SeqClusterizerError):
    """Base class for input indexing errors."""


class EmptyInputError(IndexingError):
    """Raised when the input contains no records."""

    def __init__(self, path: str):
        super().__init__(
            message=f"Input contains no records: {path}",
            suggestion=(
                "Records must start with a '>' header line followed by a "
                "single-line sequence body."
            ),
        )


class IndexMismatchError(IndexingError):
    """Raised when the two indexing passes disagree on the record count."""

    def __init__(self, counted: int, recorded: int):
        super().__init__(
            message=(
                f"Indexing passes disagree: counted {counted} records, "
                f"recorded {recorded}"
            ),
            suggestion="Make sure the input file is not modified while it is being clustered.",
        )
        self.counted = counted
        self.recorded = recorded


class SequenceReadError(SeqClusterizerError):
    """Raised when a record body cannot be fully read from storage.

    This error is transient: the clustering phase logs it and skips the
    affected comparison instead of aborting the run.
    """

    def __init__(self, index: int, expected: int, actual: int):
        super().__init__(
            message=(
                f"Failed to read sequence of record {index}: "
                f"expected {expected} bytes, got {actual}"
            ),
        )
        self.index = index
        self.expected = expected
        self.actual = actual
