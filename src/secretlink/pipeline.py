"""
Run orchestration for secretlink.

A run is a single sequential batch:

    extract detectors/rules -> join -> (runtime transform) -> write

or, with a pre-built combined document:

    read document -> (runtime transform) -> write

Any failure raises a SecretLinkError and aborts the run.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

from secretlink.errors import (
    ExtractionError,
    OutputExistsError,
    StrictModeError,
    UsageError,
)
from secretlink.export.base import ExportMode, ExportResult, build_output
from secretlink.export.runtime import ExactNameTable
from secretlink.export.writer import write_json_atomic, write_json_stdout
from secretlink.extract.detectors import DetectorExtractOptions, extract_detectors
from secretlink.extract.rules import extract_rules
from secretlink.matching.aliases import AliasTable
from secretlink.matching.join import JoinEngine
from secretlink.models.combined import CombinedExport
from secretlink.models.records import DetectorRecord, RuleRecord
from secretlink.models.runtime import RunStats, RuntimeStats
from secretlink.observability.logging import get_logger

logger = get_logger("pipeline")

STDOUT_PATH = "-"


@dataclass
class RunOptions:
    """
    Inputs and switches for one run.

    Attributes:
        trufflehog: Detector tree root
        gitleaks: Rule config path
        from_full: Pre-built combined document (excludes the two above)
        out: Output path, "-" for stdout
        mode: Output mode
        force: Overwrite an existing output file
        strict: Escalate the first extraction warning to an error
        allow_ip_hosts: Keep IP-literal hosts
        sync_dir: fsync output directories after writes
        stats_json: Optional path for the run-stats document
        warning_preview_limit: Extraction warnings echoed to the log
        alias_file: Alias table override
        exact_names_file: Exact env-name table override
    """

    trufflehog: str = ""
    gitleaks: str = ""
    from_full: str = ""
    out: str = STDOUT_PATH
    mode: ExportMode = ExportMode.FULL
    force: bool = False
    strict: bool = False
    allow_ip_hosts: bool = False
    sync_dir: bool = False
    stats_json: str = ""
    warning_preview_limit: int = 5
    alias_file: Path | None = None
    exact_names_file: Path | None = None


@dataclass
class RunResult:
    """
    Outcome of a successful run.

    Attributes:
        combined: The combined export the output was derived from
        run_stats: Counters reported for the run
        output: Result of writing the main document
        stats_output: Result of writing the run-stats document, if requested
        summary: Human-readable summary lines for stderr
    """

    combined: CombinedExport
    run_stats: RunStats
    output: ExportResult
    stats_output: ExportResult | None = None
    summary: list[str] = field(default_factory=list)


def validate_options(options: RunOptions) -> None:
    """
    Check source-selection options before any I/O.

    Raises:
        UsageError: If both or neither of the source kinds are given
    """
    if not isinstance(options.mode, ExportMode):
        raise UsageError(f"invalid mode {options.mode!r}: must be 'full' or 'gondolin'")
    if options.from_full and (options.trufflehog or options.gitleaks):
        raise UsageError("--from-full cannot be combined with --trufflehog or --gitleaks")
    if not options.from_full and not options.trufflehog and not options.gitleaks:
        raise UsageError("at least one of --from-full or (--trufflehog / --gitleaks) is required")


def load_full_document(path: Path | str) -> CombinedExport:
    """
    Read a previously written combined export.

    Raises:
        ExtractionError: If the file cannot be read or decoded
    """
    path = str(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ExtractionError(f"read --from-full: {e}", path) from e
    except json.JSONDecodeError as e:
        raise ExtractionError(f"decode --from-full JSON: {e}", path) from e

    try:
        return CombinedExport.from_dict(data)
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise ExtractionError(f"decode --from-full JSON: {e}", path) from e


def extract_sources(options: RunOptions) -> tuple[list[DetectorRecord], list[RuleRecord]]:
    """
    Run the detector and rule extractors that were requested.

    Raises:
        ExtractionError: On malformed sources
        StrictModeError: On the first warning when strict mode is on
    """
    detectors: list[DetectorRecord] = []
    rules: list[RuleRecord] = []

    if options.trufflehog:
        extraction = extract_detectors(
            options.trufflehog,
            DetectorExtractOptions(allow_ip_hosts=options.allow_ip_hosts),
        )
        if extraction.skipped:
            logger.info(f"TruffleHog: skipped {len(extraction.skipped)} detectors without hosts")
        if extraction.warnings:
            limit = options.warning_preview_limit
            logger.warning(
                f"TruffleHog: {len(extraction.warnings)} warnings (showing up to {limit})"
            )
            for warning in extraction.warnings[:limit]:
                logger.warning(f"  - {warning}")
            if options.strict:
                raise StrictModeError(
                    f"trufflehog extraction produced {len(extraction.warnings)} warnings "
                    f"(first: {extraction.warnings[0]})"
                )
        detectors = extraction.detectors
        logger.extraction_completed(
            "TruffleHog",
            len(detectors),
            skipped_count=len(extraction.skipped),
            warning_count=len(extraction.warnings),
        )

    if options.gitleaks:
        rules = extract_rules(options.gitleaks)
        logger.extraction_completed("Gitleaks", len(rules))

    return detectors, rules


def _load_aliases(options: RunOptions) -> AliasTable:
    if options.alias_file:
        return AliasTable.from_file(options.alias_file)
    return AliasTable.default()


def _load_exact_names(options: RunOptions) -> ExactNameTable:
    if options.exact_names_file:
        return ExactNameTable.from_file(options.exact_names_file)
    return ExactNameTable.default()


def build_combined(options: RunOptions) -> CombinedExport:
    """Produce the combined export from sources or a pre-built document."""
    if options.from_full:
        return load_full_document(options.from_full)

    aliases = _load_aliases(options)
    detectors, rules = extract_sources(options)
    return JoinEngine(aliases).combine(detectors, rules)


def format_summary(combined: CombinedExport, runtime_stats: RuntimeStats | None) -> list[str]:
    """Human-readable run summary lines."""
    lines: list[str] = []
    if runtime_stats is not None:
        lines += [
            "",
            "=== Gondolin Export ===",
            f"Keyword→host mappings: {runtime_stats.keyword_host_mappings}",
            f"Exact-name mappings:   {runtime_stats.exact_name_mappings}",
            f"Value patterns:        {runtime_stats.value_patterns} "
            f"(with host linkage: {runtime_stats.linked_patterns})",
        ]

    s = combined.stats
    lines += [
        "",
        "=== Summary ===",
        f"Total services:       {s.total_services}",
        f"  With hosts+rules:   {s.services_with_hosts} "
        f"(exact:{s.match_exact} prefix:{s.match_prefix} alias:{s.match_alias})",
        f"  Rules only (no host):{s.services_no_hosts}",
        f"  Hosts only (no rule):{s.host_only_services}",
        f"Total rules:          {s.total_rules} ({s.rules_with_hosts} with hosts)",
    ]
    return lines


def run_export(options: RunOptions, stdout: TextIO | None = None) -> RunResult:
    """
    Execute one run.

    Args:
        options: Run options
        stdout: Stream used when the output path is "-"

    Returns:
        RunResult

    Raises:
        SecretLinkError: On any failure
    """
    validate_options(options)

    writes_file = bool(options.out) and options.out != STDOUT_PATH
    if writes_file and not options.force and Path(options.out).exists():
        raise OutputExistsError(
            "output file already exists (use --force to overwrite)", options.out
        )

    combined = build_combined(options)

    exact_names = _load_exact_names(options) if options.mode == ExportMode.GONDOLIN else None
    payload, runtime_stats = build_output(combined, options.mode, exact_names)

    if writes_file:
        output = write_json_atomic(
            options.out, payload, force=options.force, sync_dir=options.sync_dir
        )
    else:
        output = write_json_stdout(payload, stdout)

    run_stats = RunStats(
        mode=options.mode.value,
        combined=combined.stats,
        slim_mode_stats=runtime_stats,
    )

    stats_output = None
    if options.stats_json:
        stats_output = write_json_atomic(
            options.stats_json, run_stats.to_dict(), force=True, sync_dir=options.sync_dir
        )

    return RunResult(
        combined=combined,
        run_stats=run_stats,
        output=output,
        stats_output=stats_output,
        summary=format_summary(combined, runtime_stats),
    )
