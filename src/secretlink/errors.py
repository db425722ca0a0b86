"""
Error taxonomy for secretlink.

Every failure that aborts a run derives from SecretLinkError so the CLI
can report it as a single diagnostic line and exit non-zero.
"""

from __future__ import annotations

from dataclasses import dataclass


class SecretLinkError(Exception):
    """Base exception for all fatal secretlink errors."""

    def __init__(self, message: str, source_path: str | None = None):
        self.source_path = source_path
        prefix = f"{source_path}: " if source_path else ""
        super().__init__(f"{prefix}{message}")


class UsageError(SecretLinkError):
    """Raised for conflicting or missing command-line options."""


class ExtractionError(SecretLinkError):
    """Raised when detector sources, rule config or an input document cannot be read."""


class StrictModeError(ExtractionError):
    """Raised when strict mode escalates an extraction warning."""


class DataFileError(SecretLinkError):
    """Raised when a curated data file (aliases, exact names) is malformed."""


class OutputExistsError(SecretLinkError):
    """Raised when the destination exists and overwriting was not requested."""


class WriteError(SecretLinkError):
    """Raised when the durable write of an output document fails."""


@dataclass(frozen=True)
class ExtractionWarning:
    """
    A recoverable anomaly found during extraction.

    Attributes:
        source: Detector directory or file the anomaly was found in
        message: Human-readable description
    """

    source: str
    message: str

    def __str__(self) -> str:
        return f"{self.source}: {self.message}"
