"""
Durable JSON output for secretlink.

Documents are written to a temporary file in the destination directory,
flushed to disk, then atomically renamed into place. The temporary file
is removed on every failure path, so a failed run never leaves a partial
document or an orphaned temp file behind.
"""

from __future__ import annotations

import json
import os
import sys
import tempfile
from pathlib import Path
from typing import Any, TextIO

from secretlink.errors import OutputExistsError, WriteError
from secretlink.export.base import ExportResult
from secretlink.observability.logging import get_logger

logger = get_logger("export.writer")

OUTPUT_FILE_MODE = 0o644


def encode_json(payload: Any) -> str:
    """Encode a document as indented JSON with a trailing newline."""
    return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"


def write_json_stdout(payload: Any, stream: TextIO | None = None) -> ExportResult:
    """
    Write a document to standard output.

    Args:
        payload: JSON-serializable document
        stream: Stream to write to (sys.stdout if not provided)

    Returns:
        ExportResult with no output path

    Raises:
        WriteError: If the stream cannot be written, e.g. a closed pipe
    """
    content = encode_json(payload)
    out = stream if stream is not None else sys.stdout
    try:
        out.write(content)
        out.flush()
    except OSError as e:
        raise WriteError(f"write stdout: {e}") from e
    return ExportResult(output_path=None, bytes_written=len(content.encode("utf-8")))


def write_json_atomic(
    path: Path | str,
    payload: Any,
    force: bool = False,
    sync_dir: bool = False,
) -> ExportResult:
    """
    Durably write a JSON document.

    Args:
        path: Destination path
        payload: JSON-serializable document
        force: Overwrite the destination if it already exists
        sync_dir: fsync the containing directory after the rename

    Returns:
        ExportResult with the written path and size

    Raises:
        OutputExistsError: If path exists and force is False
        WriteError: If any step of the write fails
    """
    path = Path(path)

    if not force and os.path.lexists(path):
        raise OutputExistsError(
            "output file already exists (use --force to overwrite)", str(path)
        )

    try:
        content = encode_json(payload).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise WriteError(f"encode json: {e}", str(path)) from e

    directory = path.parent if str(path.parent) else Path(".")
    try:
        fd, tmp_path = tempfile.mkstemp(prefix=f"{path.name}.tmp-", dir=directory)
    except OSError as e:
        raise WriteError(f"create temp output: {e}", str(path)) from e

    try:
        with os.fdopen(fd, "wb") as f:
            os.fchmod(f.fileno(), OUTPUT_FILE_MODE)
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except OSError as e:
        _remove_quietly(tmp_path)
        raise WriteError(f"write output: {e}", str(path)) from e
    except BaseException:
        _remove_quietly(tmp_path)
        raise

    if sync_dir:
        _fsync_directory(directory)

    logger.export_written(str(path), len(content))
    return ExportResult(output_path=path, bytes_written=len(content))


def _remove_quietly(tmp_path: str) -> None:
    try:
        os.unlink(tmp_path)
    except FileNotFoundError:
        pass


def _fsync_directory(directory: Path) -> None:
    # Not every platform or filesystem allows opening a directory for fsync
    try:
        dir_fd = os.open(directory, os.O_RDONLY)
    except OSError as e:
        logger.warning(f"Cannot open {directory} for fsync: {e}")
        return
    try:
        os.fsync(dir_fd)
    except OSError as e:
        logger.warning(f"Directory fsync failed for {directory}: {e}")
    finally:
        os.close(dir_fd)
