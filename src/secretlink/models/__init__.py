"""
Data models for secretlink.

This package provides the records flowing through the pipeline:

- DetectorRecord / RuleRecord: extraction output, join input
- CombinedService / HostOnlyEntry / CombinedExport: full-mode artifact
- ValuePattern / RuntimeExport: slim-mode artifact
- CombinedStats / RuntimeStats / RunStats: counters
"""

from secretlink.models.records import (
    DetectorRecord,
    RuleRecord,
)
from secretlink.models.combined import (
    CombinedExport,
    CombinedService,
    CombinedStats,
    HostOnlyEntry,
    MatchType,
)
from secretlink.models.runtime import (
    RunStats,
    RuntimeExport,
    RuntimeStats,
    ValuePattern,
    count_linked_patterns,
)

__all__ = [
    # Records
    "DetectorRecord",
    "RuleRecord",
    # Combined export
    "CombinedExport",
    "CombinedService",
    "CombinedStats",
    "HostOnlyEntry",
    "MatchType",
    # Runtime export
    "RunStats",
    "RuntimeExport",
    "RuntimeStats",
    "ValuePattern",
    "count_linked_patterns",
]
