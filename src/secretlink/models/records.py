"""
Input records for secretlink.

DetectorRecord and RuleRecord are produced by the extraction layer
and consumed, unchanged, by the join engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class DetectorRecord:
    """
    A service detector carrying verified API hosts.

    Attributes:
        source_name: Origin identifier (detector directory name)
        keyword: Raw keyword, before normalization
        hosts: Hostnames in the order they were found (may be empty)
    """

    source_name: str
    keyword: str
    hosts: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "source_name": self.source_name,
            "keyword": self.keyword,
            "hosts": list(self.hosts),
        }


@dataclass(frozen=True)
class RuleRecord:
    """
    A regex-based secret-matching rule.

    Attributes:
        id: Stable rule identifier
        keyword: Raw keyword, before normalization
        pattern: Regular-expression text
    """

    id: str
    keyword: str
    pattern: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to the {id, pattern} shape used inside a service."""
        return {"id": self.id, "pattern": self.pattern}

    @classmethod
    def from_dict(cls, data: dict[str, Any], keyword: str = "") -> RuleRecord:
        """Create from a serialized service rule."""
        return cls(id=data["id"], keyword=keyword, pattern=data["pattern"])
