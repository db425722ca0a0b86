"""
Base export functionality for secretlink.

Defines the output modes and selects the document a run produces.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from secretlink.models.combined import CombinedExport
from secretlink.models.runtime import RuntimeStats

if TYPE_CHECKING:
    from secretlink.export.runtime import ExactNameTable


class ExportMode(Enum):
    """Supported output modes."""

    FULL = "full"  # Combined dataset
    GONDOLIN = "gondolin"  # Slim runtime dataset

    @classmethod
    def from_string(cls, value: str) -> ExportMode:
        """
        Create ExportMode from string value.

        Raises:
            ValueError: If value is not a valid mode
        """
        value_lower = value.lower()
        for mode in cls:
            if mode.value == value_lower:
                return mode
        raise ValueError(f"invalid mode {value!r}: must be 'full' or 'gondolin'")


@dataclass
class ExportResult:
    """
    Result of writing a document.

    Attributes:
        output_path: Path written (None for stdout)
        bytes_written: Size of the encoded document
    """

    output_path: Path | None = None
    bytes_written: int = 0


def build_output(
    combined: CombinedExport,
    mode: ExportMode,
    exact_names: ExactNameTable | None = None,
) -> tuple[dict[str, Any], RuntimeStats | None]:
    """
    Build the document for an output mode.

    Args:
        combined: Full combined export
        mode: Output mode
        exact_names: Curated env-var name table for slim output

    Returns:
        Tuple of (document, runtime stats or None for full mode)
    """
    if mode == ExportMode.GONDOLIN:
        from secretlink.export.runtime import to_runtime_export

        runtime = to_runtime_export(combined, exact_names)
        return runtime.to_dict(), RuntimeStats.from_export(runtime)

    return combined.to_dict(), None
