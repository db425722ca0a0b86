"""
Pytest configuration and fixtures for secretlink tests.

This module provides common fixtures used across unit and integration tests.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from secretlink.export.runtime import ExactNameTable
from secretlink.matching.aliases import AliasTable
from secretlink.models import DetectorRecord, RuleRecord
from secretlink.observability.logging import configure_logging

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def reset_logging():
    """Rebind the package log handler after each test."""
    yield
    configure_logging(level="INFO", format="human")


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the directory holding detector and rule fixtures."""
    return FIXTURES_DIR


@pytest.fixture
def detector_root(fixtures_dir: Path) -> Path:
    """Return the fixture detector tree."""
    return fixtures_dir / "trufflehog" / "pkg" / "detectors"


@pytest.fixture
def rules_path(fixtures_dir: Path) -> Path:
    """Return the fixture rule config."""
    return fixtures_dir / "gitleaks" / "config" / "gitleaks.toml"


@pytest.fixture
def fixed_time() -> datetime:
    """Return a fixed generation timestamp."""
    return datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def aliases() -> AliasTable:
    """Return a small alias table."""
    return AliasTable.from_mapping({"cisco-meraki": "meraki"})


@pytest.fixture
def exact_names() -> ExactNameTable:
    """Return a small exact env-name table."""
    return ExactNameTable({"GH_TOKEN": "api.github.com", "HF_TOKEN": "huggingface.co"})


@pytest.fixture
def basic_detectors() -> list[DetectorRecord]:
    """Return detectors where one has no matching rule."""
    return [
        DetectorRecord("anthropic", "anthropic", ("api.anthropic.com",)),
        DetectorRecord("openai", "openai", ("api.openai.com",)),
        DetectorRecord("cloudflareapitoken", "cloudflare", ("api.cloudflare.com",)),
        DetectorRecord("nogl", "nogl", ("api.nogl.com",)),
    ]


@pytest.fixture
def basic_rules() -> list[RuleRecord]:
    """Return rules where one has no matching detector."""
    return [
        RuleRecord("anthropic-api-key", "anthropic", r"sk-ant-api03-.*"),
        RuleRecord("openai-api-key", "openai", r"sk-[a-zA-Z0-9]{48}"),
        RuleRecord("cloudflare-api-key", "cloudflare", r"[a-f0-9]{37}"),
        RuleRecord("noth-secret", "noth", r"noth-[a-z]{10}"),
    ]


@pytest.fixture
def detector_tree(tmp_path: Path):
    """Return (root, write) for building a detector tree in tmp_path."""
    root = tmp_path / "detectors"
    root.mkdir()

    def write(name: str, source: str, filename: str | None = None) -> Path:
        detector_dir = root / name
        detector_dir.mkdir(parents=True, exist_ok=True)
        path = detector_dir / (filename or f"{name}.go")
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(source, encoding="utf-8")
        return path

    return root, write
