"""
Curated keyword alias table for secretlink.

The alias table maps rule-keyword variants (a sub-brand, a vendor
prefix) to the keyword the detector dataset files the service under.
It is versioned data shipped in secretlink/data and loaded once into
an immutable mapping that is passed explicitly to the join engine.
"""

from __future__ import annotations

from pathlib import Path
from types import MappingProxyType
from typing import Iterator, Mapping

import yaml

from secretlink.errors import DataFileError
from secretlink.matching.keywords import normalize_keyword

DATA_DIR = Path(__file__).resolve().parent.parent / "data"
DEFAULT_ALIAS_FILE = DATA_DIR / "keyword_aliases.yaml"


def load_versioned_mapping(path: Path | str, section: str) -> tuple[int, dict[str, str]]:
    """
    Load a `{version, <section>: {key: value}}` YAML data file.

    Args:
        path: Data file path
        section: Name of the mapping section

    Returns:
        Tuple of (version, mapping)

    Raises:
        DataFileError: If the file is missing or malformed
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise DataFileError(f"cannot read data file: {e}", str(path)) from e
    except yaml.YAMLError as e:
        raise DataFileError(f"invalid YAML: {e}", str(path)) from e

    if not isinstance(data, dict):
        raise DataFileError("data file must be a mapping", str(path))

    version = data.get("version", 0)
    if not isinstance(version, int):
        raise DataFileError("'version' must be an integer", str(path))

    entries = data.get(section) or {}
    if not isinstance(entries, dict):
        raise DataFileError(f"'{section}' must be a mapping", str(path))

    mapping: dict[str, str] = {}
    for key, value in entries.items():
        if not isinstance(key, str) or not isinstance(value, str) or not key or not value:
            raise DataFileError(f"invalid entry {key!r}: {value!r}", str(path))
        mapping[key] = value
    return version, mapping


class AliasTable(Mapping[str, str]):
    """
    Read-only mapping of normalized rule keyword to normalized detector keyword.
    """

    def __init__(self, aliases: Mapping[str, str] | None = None, version: int = 0):
        """
        Initialize alias table.

        Args:
            aliases: Raw alias entries, normalized on construction
            version: Data version the entries came from
        """
        normalized: dict[str, str] = {}
        for variant, canonical in (aliases or {}).items():
            key = normalize_keyword(variant)
            if key:
                normalized[key] = normalize_keyword(canonical)
        self._aliases: Mapping[str, str] = MappingProxyType(normalized)
        self.version = version

    @classmethod
    def from_file(cls, path: Path | str) -> AliasTable:
        """Load an alias table from a YAML data file."""
        version, aliases = load_versioned_mapping(path, "aliases")
        return cls(aliases, version=version)

    @classmethod
    def default(cls) -> AliasTable:
        """Load the alias table shipped with secretlink."""
        return cls.from_file(DEFAULT_ALIAS_FILE)

    @classmethod
    def from_mapping(cls, aliases: Mapping[str, str]) -> AliasTable:
        """Build an alias table from an in-memory mapping."""
        return cls(aliases)

    def resolve(self, keyword: str) -> str | None:
        """
        Return the canonical detector keyword for a rule keyword.

        Args:
            keyword: Raw or normalized rule keyword

        Returns:
            Normalized detector keyword, or None if no alias exists
        """
        return self._aliases.get(normalize_keyword(keyword))

    def __getitem__(self, key: str) -> str:
        return self._aliases[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._aliases)

    def __len__(self) -> int:
        return len(self._aliases)

    def __repr__(self) -> str:
        return f"AliasTable(version={self.version}, entries={len(self)})"
