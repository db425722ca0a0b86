"""
Export functionality for secretlink.

Provides the runtime (slim) transform, output mode selection and the
durable JSON writer.
"""

from secretlink.export.base import (
    ExportMode,
    ExportResult,
    build_output,
)
from secretlink.export.runtime import (
    DEFAULT_EXACT_NAMES_FILE,
    ExactNameTable,
    RuntimeExporter,
    to_runtime_export,
)
from secretlink.export.writer import (
    encode_json,
    write_json_atomic,
    write_json_stdout,
)

__all__ = [
    "ExportMode",
    "ExportResult",
    "build_output",
    "DEFAULT_EXACT_NAMES_FILE",
    "ExactNameTable",
    "RuntimeExporter",
    "to_runtime_export",
    "encode_json",
    "write_json_atomic",
    "write_json_stdout",
]
