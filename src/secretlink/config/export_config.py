"""
Export configuration for secretlink.

Provides the settings that shape a run: which curated data files to
use, extraction strictness, write durability and logging.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from secretlink.errors import DataFileError, UsageError
from secretlink.observability.logging import LOG_FORMATS, LOG_LEVELS

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off", "")


@dataclass
class ExportConfiguration:
    """
    Settings for one secretlink run.

    Attributes:
        alias_file: Alias table override (packaged table if empty)
        exact_names_file: Exact env-name table override (packaged table if empty)
        strict: Escalate the first extraction warning to an error
        allow_ip_hosts: Keep IP-literal hosts found in detector sources
        sync_dir: fsync the output directory after each write
        warning_preview_limit: Number of extraction warnings echoed to the log
        log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log format (human, json)
    """

    alias_file: str = ""
    exact_names_file: str = ""
    strict: bool = False
    allow_ip_hosts: bool = False
    sync_dir: bool = False
    warning_preview_limit: int = 5
    log_level: str = "INFO"
    log_format: str = "human"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "alias_file": self.alias_file,
            "exact_names_file": self.exact_names_file,
            "strict": self.strict,
            "allow_ip_hosts": self.allow_ip_hosts,
            "sync_dir": self.sync_dir,
            "warning_preview_limit": self.warning_preview_limit,
            "log_level": self.log_level,
            "log_format": self.log_format,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExportConfiguration:
        """
        Create from dictionary.

        Unknown keys, unrecognized flag values and unknown log settings
        are rejected.

        Raises:
            ValueError: If a key or value is not recognized
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"unknown configuration keys: {', '.join(unknown)}")

        return cls(
            alias_file=str(data.get("alias_file") or ""),
            exact_names_file=str(data.get("exact_names_file") or ""),
            strict=_parse_flag("strict", data.get("strict")),
            allow_ip_hosts=_parse_flag("allow_ip_hosts", data.get("allow_ip_hosts")),
            sync_dir=_parse_flag("sync_dir", data.get("sync_dir")),
            warning_preview_limit=int(data.get("warning_preview_limit", 5)),
            log_level=_parse_log_level(str(data.get("log_level", "INFO"))),
            log_format=_parse_log_format(str(data.get("log_format", "human"))),
        )

    @classmethod
    def from_file(cls, path: str) -> ExportConfiguration:
        """
        Load configuration from a YAML or JSON file.

        Raises:
            DataFileError: If the file cannot be read or parsed
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                if path.endswith((".yaml", ".yml")):
                    data = yaml.safe_load(f) or {}
                else:
                    data = json.load(f)
        except OSError as e:
            raise DataFileError(f"cannot read configuration: {e}", path) from e
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise DataFileError(f"invalid configuration: {e}", path) from e

        if not isinstance(data, dict):
            raise DataFileError("configuration must be a mapping", path)
        try:
            return cls.from_dict(data)
        except (TypeError, ValueError) as e:
            raise DataFileError(str(e), path) from e

    def alias_path(self) -> Path | None:
        """Alias file override, with ~ expanded."""
        return Path(os.path.expanduser(self.alias_file)) if self.alias_file else None

    def exact_names_path(self) -> Path | None:
        """Exact-name file override, with ~ expanded."""
        if not self.exact_names_file:
            return None
        return Path(os.path.expanduser(self.exact_names_file))


def _parse_flag(name: str, value: Any) -> bool:
    if value is None or isinstance(value, bool):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
    raise ValueError(f"invalid value for {name!r}: expected true or false, got {value!r}")


def _parse_log_level(value: str) -> str:
    level = value.upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"invalid log level {value!r}: must be one of {', '.join(LOG_LEVELS)}")
    return level


def _parse_log_format(value: str) -> str:
    if value not in LOG_FORMATS:
        raise ValueError(f"invalid log format {value!r}: must be one of {', '.join(LOG_FORMATS)}")
    return value


def _env_flag(name: str) -> bool | None:
    value = os.getenv(name)
    if value is None:
        return None
    return value.strip().lower() in _TRUE_VALUES


def load_config_from_env(config_file: str | None = None) -> ExportConfiguration:
    """
    Load configuration from a file and environment variables.

    Environment variables override file values:
        SECRETLINK_CONFIG_FILE: Path to configuration file (if config_file is None)
        SECRETLINK_ALIAS_FILE: Alias table override
        SECRETLINK_EXACT_NAMES_FILE: Exact env-name table override
        SECRETLINK_STRICT: Treat extraction warnings as errors
        SECRETLINK_ALLOW_IP_HOSTS: Keep IP-literal hosts
        SECRETLINK_SYNC_DIR: fsync output directories
        SECRETLINK_LOG_LEVEL: Log level
        SECRETLINK_LOG_FORMAT: Log format

    Args:
        config_file: Explicit configuration file path

    Returns:
        ExportConfiguration instance

    Raises:
        DataFileError: If the configuration file is unreadable or invalid
        UsageError: If SECRETLINK_LOG_LEVEL or SECRETLINK_LOG_FORMAT is invalid
    """
    config_file = config_file or os.getenv("SECRETLINK_CONFIG_FILE")
    if config_file:
        config = ExportConfiguration.from_file(config_file)
    else:
        config = ExportConfiguration()

    alias_file = os.getenv("SECRETLINK_ALIAS_FILE")
    if alias_file:
        config.alias_file = alias_file

    exact_names_file = os.getenv("SECRETLINK_EXACT_NAMES_FILE")
    if exact_names_file:
        config.exact_names_file = exact_names_file

    for attr, env_name in (
        ("strict", "SECRETLINK_STRICT"),
        ("allow_ip_hosts", "SECRETLINK_ALLOW_IP_HOSTS"),
        ("sync_dir", "SECRETLINK_SYNC_DIR"),
    ):
        flag = _env_flag(env_name)
        if flag is not None:
            setattr(config, attr, flag)

    for attr, env_name, parse in (
        ("log_level", "SECRETLINK_LOG_LEVEL", _parse_log_level),
        ("log_format", "SECRETLINK_LOG_FORMAT", _parse_log_format),
    ):
        value = os.getenv(env_name)
        if value:
            try:
                setattr(config, attr, parse(value))
            except ValueError as e:
                raise UsageError(f"{env_name}: {e}") from e

    return config
