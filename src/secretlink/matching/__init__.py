"""
Keyword matching for secretlink.

Provides the keyword normalizer, the curated alias table, the
three-pass join engine and the stats recomputation.
"""

from secretlink.matching.aliases import (
    DEFAULT_ALIAS_FILE,
    AliasTable,
    load_versioned_mapping,
)
from secretlink.matching.join import (
    JoinEngine,
    combine,
    group_detectors,
    group_rules,
)
from secretlink.matching.keywords import normalize_keyword, same_keyword
from secretlink.matching.stats import compute_stats

__all__ = [
    "DEFAULT_ALIAS_FILE",
    "AliasTable",
    "load_versioned_mapping",
    "JoinEngine",
    "combine",
    "group_detectors",
    "group_rules",
    "normalize_keyword",
    "same_keyword",
    "compute_stats",
]
