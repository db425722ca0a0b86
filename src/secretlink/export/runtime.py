"""
Runtime (slim) export for secretlink.

Derives the compact lookup dataset from a CombinedExport:

- keyword_host_map: resolved service keyword -> hosts, for substring
  matching of environment-variable names
- exact_name_host_map: curated literal env-var names -> host, for names
  that do not contain a service keyword
- value_patterns: every rule pattern, linked to its service keyword when
  that service resolved to hosts
"""

from __future__ import annotations

from pathlib import Path
from types import MappingProxyType
from typing import Iterator, Mapping

from secretlink.matching.aliases import DATA_DIR, load_versioned_mapping
from secretlink.models.combined import CombinedExport
from secretlink.models.runtime import RuntimeExport, ValuePattern

DEFAULT_EXACT_NAMES_FILE = DATA_DIR / "exact_name_hosts.yaml"


class ExactNameTable(Mapping[str, str]):
    """
    Read-only mapping of literal environment-variable name to host.
    """

    def __init__(self, hosts: Mapping[str, str] | None = None, version: int = 0):
        self._hosts: Mapping[str, str] = MappingProxyType(dict(hosts or {}))
        self.version = version

    @classmethod
    def from_file(cls, path: Path | str) -> ExactNameTable:
        """Load an exact-name table from a YAML data file."""
        version, hosts = load_versioned_mapping(path, "hosts")
        return cls(hosts, version=version)

    @classmethod
    def default(cls) -> ExactNameTable:
        """Load the exact-name table shipped with secretlink."""
        return cls.from_file(DEFAULT_EXACT_NAMES_FILE)

    def __getitem__(self, key: str) -> str:
        return self._hosts[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._hosts)

    def __len__(self) -> int:
        return len(self._hosts)

    def __repr__(self) -> str:
        return f"ExactNameTable(version={self.version}, entries={len(self)})"


class RuntimeExporter:
    """
    Stateless transform from CombinedExport to RuntimeExport.
    """

    def __init__(self, exact_names: ExactNameTable | None = None):
        """
        Initialize runtime exporter.

        Args:
            exact_names: Curated env-var name overrides (empty if not provided)
        """
        self.exact_names = exact_names if exact_names is not None else ExactNameTable()

    def export(self, combined: CombinedExport) -> RuntimeExport:
        """
        Build the runtime export.

        Args:
            combined: Full combined export

        Returns:
            RuntimeExport
        """
        keyword_host_map: dict[str, list[str]] = {}
        value_patterns: list[ValuePattern] = []

        for service in combined.services:
            if service.is_resolved:
                keyword_host_map[service.keyword] = list(service.hosts)
            linked_keyword = service.keyword if service.is_resolved else ""
            for rule in service.rules:
                value_patterns.append(
                    ValuePattern(id=rule.id, pattern=rule.pattern, keyword=linked_keyword)
                )

        return RuntimeExport(
            keyword_host_map=keyword_host_map,
            exact_name_host_map=dict(self.exact_names),
            value_patterns=value_patterns,
        )


def to_runtime_export(
    combined: CombinedExport,
    exact_names: ExactNameTable | None = None,
) -> RuntimeExport:
    """
    Convenience function to build the runtime export.

    Args:
        combined: Full combined export
        exact_names: Curated env-var name overrides (the packaged table
            if not provided)

    Returns:
        RuntimeExport
    """
    exporter = RuntimeExporter(
        exact_names if exact_names is not None else ExactNameTable.default()
    )
    return exporter.export(combined)
