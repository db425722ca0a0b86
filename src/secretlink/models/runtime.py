"""
Runtime (slim) export model for secretlink.

The runtime export is the compact lookup dataset consumed at use time
to map environment-variable names and secret values to API hosts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from secretlink.models.combined import CombinedStats


@dataclass(frozen=True)
class ValuePattern:
    """
    A value-matching pattern linked back to its service keyword.

    Attributes:
        id: Rule identifier
        pattern: Regular-expression text
        keyword: Owning service keyword, empty when the service has no hosts
    """

    id: str
    pattern: str
    keyword: str = ""

    @property
    def is_linked(self) -> bool:
        return self.keyword != ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, omitting an empty keyword."""
        result = {"id": self.id, "pattern": self.pattern}
        if self.keyword:
            result["keyword"] = self.keyword
        return result


@dataclass
class RuntimeExport:
    """
    The slim artifact.

    Attributes:
        keyword_host_map: Resolved service keyword to hosts
        exact_name_host_map: Curated env-var name to host overrides
        value_patterns: One entry per rule across all services
    """

    keyword_host_map: dict[str, list[str]] = field(default_factory=dict)
    exact_name_host_map: dict[str, str] = field(default_factory=dict)
    value_patterns: list[ValuePattern] = field(default_factory=list)

    @property
    def linked_patterns(self) -> int:
        """Number of value patterns carrying a service keyword."""
        return count_linked_patterns(self.value_patterns)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "keyword_host_map": {k: list(v) for k, v in self.keyword_host_map.items()},
            "exact_name_host_map": dict(self.exact_name_host_map),
            "value_patterns": [p.to_dict() for p in self.value_patterns],
        }


@dataclass(frozen=True)
class RuntimeStats:
    """Counters reported for a slim-mode run."""

    keyword_host_mappings: int = 0
    exact_name_mappings: int = 0
    value_patterns: int = 0
    linked_patterns: int = 0

    @classmethod
    def from_export(cls, runtime: RuntimeExport) -> RuntimeStats:
        """Derive counters from a runtime export."""
        return cls(
            keyword_host_mappings=len(runtime.keyword_host_map),
            exact_name_mappings=len(runtime.exact_name_host_map),
            value_patterns=len(runtime.value_patterns),
            linked_patterns=runtime.linked_patterns,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "keyword_host_mappings": self.keyword_host_mappings,
            "exact_name_mappings": self.exact_name_mappings,
            "value_patterns": self.value_patterns,
            "linked_patterns": self.linked_patterns,
        }


@dataclass(frozen=True)
class RunStats:
    """
    Machine-readable summary of one run.

    Attributes:
        mode: Output mode the run used
        combined: Stats of the combined export
        slim_mode_stats: Runtime counters, only for slim-mode runs
    """

    mode: str
    combined: CombinedStats
    slim_mode_stats: RuntimeStats | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        result: dict[str, Any] = {
            "mode": self.mode,
            "combined": self.combined.to_dict(),
        }
        if self.slim_mode_stats is not None:
            result["slim_mode_stats"] = self.slim_mode_stats.to_dict()
        return result


def count_linked_patterns(patterns: list[ValuePattern]) -> int:
    """Count value patterns that are linked to a resolved service."""
    return sum(1 for p in patterns if p.is_linked)
