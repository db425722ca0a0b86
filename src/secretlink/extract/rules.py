"""
Rule extraction for secretlink.

Reads a Gitleaks-style TOML config and produces one RuleRecord per
`[[rules]]` entry that carries a regex.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from secretlink.errors import ExtractionError
from secretlink.models.records import RuleRecord
from secretlink.observability.logging import get_logger

logger = get_logger("extract.rules")

# Trailing rule-id segments that describe the credential, not the service
GENERIC_ID_SEGMENTS = frozenset(
    {
        "access",
        "account",
        "admin",
        "api",
        "app",
        "auth",
        "bearer",
        "bot",
        "client",
        "cred",
        "credentials",
        "id",
        "key",
        "keys",
        "oauth",
        "password",
        "pat",
        "private",
        "refresh",
        "secret",
        "token",
        "upload",
        "url",
        "user",
        "webhook",
    }
)


def derive_rule_keyword(rule_id: str) -> str:
    """
    Derive a service keyword from a hyphenated rule id.

    Generic trailing segments are dropped, so "cisco-meraki-api-key"
    becomes "cisco-meraki" and "slack-bot-token" becomes "slack". If every
    segment is generic the first one is kept.
    """
    segments = [s for s in rule_id.strip().lower().split("-") if s]
    if not segments:
        return ""
    while len(segments) > 1 and segments[-1] in GENERIC_ID_SEGMENTS:
        segments.pop()
    return "-".join(segments)


def parse_rules(data: dict[str, Any], source: str = "") -> list[RuleRecord]:
    """
    Convert a parsed Gitleaks config into rule records.

    Args:
        data: Parsed TOML document
        source: Path used in error messages

    Returns:
        Rule records in file order

    Raises:
        ExtractionError: If the document has no usable rules table
    """
    entries = data.get("rules", [])
    if not isinstance(entries, list):
        raise ExtractionError("'rules' must be an array of tables", source or None)

    rules: list[RuleRecord] = []
    for position, entry in enumerate(entries, start=1):
        if not isinstance(entry, dict):
            raise ExtractionError(f"rule #{position} is not a table", source or None)
        rule_id = entry.get("id")
        if not isinstance(rule_id, str) or not rule_id.strip():
            raise ExtractionError(f"rule #{position} has no id", source or None)

        pattern = entry.get("regex") or ""
        if not isinstance(pattern, str):
            raise ExtractionError(f"rule {rule_id!r} has a non-string regex", source or None)
        if not pattern:
            # Path-only rules carry no value pattern
            logger.debug(f"Skipping rule {rule_id}: no regex")
            continue

        rules.append(
            RuleRecord(
                id=rule_id.strip(),
                keyword=derive_rule_keyword(rule_id),
                pattern=pattern,
            )
        )
    return rules


def extract_rules(path: Path | str) -> list[RuleRecord]:
    """
    Extract rule records from a Gitleaks TOML config.

    Args:
        path: Path to gitleaks.toml

    Returns:
        Rule records in file order

    Raises:
        ExtractionError: If the file is missing or malformed
    """
    path = Path(path)
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except OSError as e:
        raise ExtractionError(f"cannot read rule config: {e}", str(path)) from e
    except tomllib.TOMLDecodeError as e:
        raise ExtractionError(f"invalid TOML: {e}", str(path)) from e

    return parse_rules(data, str(path))
