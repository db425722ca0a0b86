"""
secretlink - unified secret-detection dataset builder

Reconciles two independently curated datasets:
- Detectors carrying verified API hosts (TruffleHog)
- Regex rules carrying a keyword and a pattern (Gitleaks)

into one record per service, plus a slim runtime table that maps
environment-variable names and secret values to API hosts.

Quick Start:
    >>> from secretlink.extract import extract_detectors, extract_rules
    >>> from secretlink.matching import combine
    >>> from secretlink.export import to_runtime_export
    >>>
    >>> detectors = extract_detectors("trufflehog/pkg/detectors").detectors
    >>> rules = extract_rules("gitleaks/config/gitleaks.toml")
    >>> combined = combine(detectors, rules)
    >>> runtime = to_runtime_export(combined)
"""

from __future__ import annotations

__version__ = "0.1.0"

from secretlink.errors import (
    DataFileError,
    ExtractionError,
    ExtractionWarning,
    OutputExistsError,
    SecretLinkError,
    StrictModeError,
    UsageError,
    WriteError,
)
from secretlink.models import (
    CombinedExport,
    CombinedService,
    CombinedStats,
    DetectorRecord,
    HostOnlyEntry,
    MatchType,
    RuleRecord,
    RunStats,
    RuntimeExport,
    RuntimeStats,
    ValuePattern,
)
from secretlink.matching import AliasTable, JoinEngine, combine, normalize_keyword
from secretlink.export import (
    ExactNameTable,
    ExportMode,
    RuntimeExporter,
    to_runtime_export,
    write_json_atomic,
)

__all__ = [
    "__version__",
    # Errors
    "DataFileError",
    "ExtractionError",
    "ExtractionWarning",
    "OutputExistsError",
    "SecretLinkError",
    "StrictModeError",
    "UsageError",
    "WriteError",
    # Models
    "CombinedExport",
    "CombinedService",
    "CombinedStats",
    "DetectorRecord",
    "HostOnlyEntry",
    "MatchType",
    "RuleRecord",
    "RunStats",
    "RuntimeExport",
    "RuntimeStats",
    "ValuePattern",
    # Matching
    "AliasTable",
    "JoinEngine",
    "combine",
    "normalize_keyword",
    # Export
    "ExactNameTable",
    "ExportMode",
    "RuntimeExporter",
    "to_runtime_export",
    "write_json_atomic",
]
