"""
Combined export model for secretlink.

This module defines the per-service records produced by the join
engine and the CombinedExport document that holds them.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from secretlink.models.records import RuleRecord


class MatchType(Enum):
    """How a rule keyword was resolved to a detector keyword."""

    EXACT = "exact"
    ALIAS = "alias"
    PREFIX = "prefix"
    NONE = "none"

    @classmethod
    def from_string(cls, value: str) -> MatchType:
        """
        Create MatchType from string value.

        Args:
            value: String representation (case-insensitive)

        Returns:
            Matching MatchType enum value

        Raises:
            ValueError: If value is not a valid match type
        """
        if not isinstance(value, str):
            raise ValueError(f"Invalid match type: {value!r}")
        value_lower = value.lower()
        for match_type in cls:
            if match_type.value == value_lower:
                return match_type
        raise ValueError(f"Invalid match type: {value}")


@dataclass
class CombinedService:
    """
    One service per distinct rule keyword.

    Attributes:
        keyword: Keyword copied verbatim from the rules
        hosts: Union of resolved detector hosts, deduplicated
        rules: Every rule sharing this keyword, in input order
        match_type: Strategy that resolved the hosts
    """

    keyword: str
    hosts: list[str] = field(default_factory=list)
    rules: list[RuleRecord] = field(default_factory=list)
    match_type: MatchType = MatchType.NONE

    @property
    def is_resolved(self) -> bool:
        """True when the service was matched to at least one detector."""
        return self.match_type != MatchType.NONE

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "keyword": self.keyword,
            "hosts": list(self.hosts),
            "rules": [rule.to_dict() for rule in self.rules],
            "match_type": self.match_type.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CombinedService:
        """Create from dictionary."""
        keyword = data["keyword"]
        return cls(
            keyword=keyword,
            hosts=list(data.get("hosts") or []),
            rules=[RuleRecord.from_dict(r, keyword=keyword) for r in data.get("rules") or []],
            match_type=MatchType.from_string(data.get("match_type", "none")),
        )


@dataclass
class HostOnlyEntry:
    """A detector keyword that no rule resolved to."""

    keyword: str
    hosts: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"keyword": self.keyword, "hosts": list(self.hosts)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HostOnlyEntry:
        """Create from dictionary."""
        return cls(keyword=data["keyword"], hosts=list(data.get("hosts") or []))


@dataclass(frozen=True)
class CombinedStats:
    """
    Counters derived from a finished join.

    Attributes:
        total_services: Number of distinct rule keywords
        services_with_hosts: Services resolved by any strategy
        services_no_hosts: Services left unresolved
        host_only_services: Detector keywords no rule resolved to
        match_exact: Services resolved by exact keyword
        match_alias: Services resolved through the alias table
        match_prefix: Services resolved by keyword prefix
        total_rules: Rules across all services
        rules_with_hosts: Rules belonging to resolved services
    """

    total_services: int = 0
    services_with_hosts: int = 0
    services_no_hosts: int = 0
    host_only_services: int = 0
    match_exact: int = 0
    match_alias: int = 0
    match_prefix: int = 0
    total_rules: int = 0
    rules_with_hosts: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "total_services": self.total_services,
            "services_with_hosts": self.services_with_hosts,
            "services_no_hosts": self.services_no_hosts,
            "host_only_services": self.host_only_services,
            "match_exact": self.match_exact,
            "match_alias": self.match_alias,
            "match_prefix": self.match_prefix,
            "total_rules": self.total_rules,
            "rules_with_hosts": self.rules_with_hosts,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CombinedStats:
        """Create from dictionary."""
        if not isinstance(data, dict):
            raise ValueError("'stats' must be an object")
        return cls(**{name: int(data.get(name, 0)) for name in cls().to_dict()})


@dataclass
class CombinedExport:
    """
    The full-mode artifact.

    Attributes:
        generated_at: When the join ran (UTC)
        stats: Counters recomputed from services and host_only
        services: One entry per distinct rule keyword
        host_only: Detector keywords never claimed by a rule
        rules_without_hosts: Keywords of unresolved services
    """

    generated_at: datetime
    stats: CombinedStats
    services: list[CombinedService] = field(default_factory=list)
    host_only: list[HostOnlyEntry] = field(default_factory=list)
    rules_without_hosts: list[str] = field(default_factory=list)

    def get_service(self, keyword: str) -> CombinedService | None:
        """Look up a service by its verbatim keyword."""
        for service in self.services:
            if service.keyword == keyword:
                return service
        return None

    def resolved_services(self) -> list[CombinedService]:
        """Services that carry hosts."""
        return [s for s in self.services if s.is_resolved]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "generated_at": _format_timestamp(self.generated_at),
            "stats": self.stats.to_dict(),
            "services": [s.to_dict() for s in self.services],
            "host_only": [h.to_dict() for h in self.host_only],
            "rules_without_hosts": list(self.rules_without_hosts),
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CombinedExport:
        """
        Create from a previously written full document.

        Raises:
            ValueError: If the document does not have the expected shape
        """
        if not isinstance(data, dict):
            raise ValueError("combined export must be a JSON object")
        if not isinstance(data.get("services", []), list):
            raise ValueError("'services' must be a list")

        generated_at = data.get("generated_at")
        if generated_at is not None and not isinstance(generated_at, str):
            raise ValueError("'generated_at' must be an ISO-8601 string")
        return cls(
            generated_at=_parse_timestamp(generated_at) if generated_at else datetime.now(timezone.utc),
            stats=CombinedStats.from_dict(data.get("stats") or {}),
            services=[CombinedService.from_dict(s) for s in data.get("services") or []],
            host_only=[HostOnlyEntry.from_dict(h) for h in data.get("host_only") or []],
            rules_without_hosts=list(data.get("rules_without_hosts") or []),
        )

    @classmethod
    def from_json(cls, json_str: str) -> CombinedExport:
        """Create from JSON string."""
        return cls.from_dict(json.loads(json_str))


def _format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _parse_timestamp(value: str) -> datetime:
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)
