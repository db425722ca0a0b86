"""
Tests for secretlink data models.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from secretlink.errors import (
    ExtractionError,
    ExtractionWarning,
    SecretLinkError,
    StrictModeError,
)
from secretlink.models import (
    CombinedExport,
    CombinedService,
    CombinedStats,
    DetectorRecord,
    HostOnlyEntry,
    MatchType,
    RuleRecord,
    RunStats,
    RuntimeStats,
    ValuePattern,
    count_linked_patterns,
)


@pytest.fixture
def sample_export(fixed_time) -> CombinedExport:
    """Return a small combined export."""
    return CombinedExport(
        generated_at=fixed_time,
        stats=CombinedStats(
            total_services=2,
            services_with_hosts=1,
            services_no_hosts=1,
            host_only_services=1,
            match_exact=1,
            total_rules=2,
            rules_with_hosts=1,
        ),
        services=[
            CombinedService(
                keyword="anthropic",
                hosts=["api.anthropic.com"],
                rules=[RuleRecord("anthropic-api-key", "anthropic", "sk-ant-.*")],
                match_type=MatchType.EXACT,
            ),
            CombinedService(
                keyword="noth",
                rules=[RuleRecord("noth-secret", "noth", "noth-.*")],
            ),
        ],
        host_only=[HostOnlyEntry("nogl", ["api.nogl.com"])],
        rules_without_hosts=["noth"],
    )


class TestMatchType:
    """Tests for MatchType enum."""

    def test_values(self):
        """Test match type values."""
        assert [m.value for m in MatchType] == ["exact", "alias", "prefix", "none"]

    def test_from_string(self):
        """Test case-insensitive parsing."""
        assert MatchType.from_string("PREFIX") == MatchType.PREFIX

    def test_from_string_invalid(self):
        """Test unknown values are rejected."""
        with pytest.raises(ValueError):
            MatchType.from_string("fuzzy")

    def test_from_string_not_a_string(self):
        """Test non-string values are rejected as invalid."""
        with pytest.raises(ValueError, match="Invalid match type"):
            MatchType.from_string(5)


class TestRecords:
    """Tests for DetectorRecord and RuleRecord."""

    def test_detector_to_dict(self):
        """Test detector serialization."""
        record = DetectorRecord("pagerdutyapikey", "pagerduty", ("api.pagerduty.com",))

        assert record.to_dict() == {
            "source_name": "pagerdutyapikey",
            "keyword": "pagerduty",
            "hosts": ["api.pagerduty.com"],
        }

    def test_detector_default_hosts(self):
        """Test hosts default to empty."""
        assert DetectorRecord("x", "x").hosts == ()

    def test_rule_to_dict_shape(self):
        """Test rules serialize without their keyword."""
        rule = RuleRecord("slack-bot-token", "slack", "xoxb-.*")

        assert rule.to_dict() == {"id": "slack-bot-token", "pattern": "xoxb-.*"}
        assert RuleRecord.from_dict(rule.to_dict(), keyword="slack") == rule

    def test_records_immutable(self):
        """Test records are frozen."""
        rule = RuleRecord("a", "a", "a")

        with pytest.raises(AttributeError):
            rule.pattern = "b"


class TestCombinedExport:
    """Tests for CombinedExport."""

    def test_to_dict_shape(self, sample_export):
        """Test the document has the expected top-level keys."""
        data = sample_export.to_dict()

        assert list(data) == [
            "generated_at",
            "stats",
            "services",
            "host_only",
            "rules_without_hosts",
        ]
        assert data["generated_at"] == "2024-01-15T12:00:00Z"
        assert data["services"][0] == {
            "keyword": "anthropic",
            "hosts": ["api.anthropic.com"],
            "rules": [{"id": "anthropic-api-key", "pattern": "sk-ant-.*"}],
            "match_type": "exact",
        }
        assert data["services"][1]["hosts"] == []
        assert data["services"][1]["match_type"] == "none"

    def test_json_roundtrip(self, sample_export):
        """Test a written document reads back equal."""
        restored = CombinedExport.from_json(sample_export.to_json())

        assert restored == sample_export
        assert restored.services[0].rules[0].keyword == "anthropic"

    def test_naive_timestamp_treated_as_utc(self, sample_export):
        """Test naive timestamps serialize as UTC."""
        sample_export.generated_at = datetime(2024, 1, 15, 12, 0, 0)

        assert sample_export.to_dict()["generated_at"] == "2024-01-15T12:00:00Z"

    def test_from_dict_rejects_non_object(self):
        """Test a JSON array is not a combined export."""
        with pytest.raises(ValueError, match="JSON object"):
            CombinedExport.from_dict([])

    def test_from_dict_rejects_bad_services(self):
        """Test services must be a list."""
        with pytest.raises(ValueError, match="services"):
            CombinedExport.from_dict({"services": {}})

    def test_from_dict_minimal(self):
        """Test missing sections default to empty."""
        export = CombinedExport.from_dict({"generated_at": "2024-01-15T12:00:00Z"})

        assert export.services == []
        assert export.generated_at == datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)

    def test_get_service(self, sample_export):
        """Test lookup by verbatim keyword."""
        assert sample_export.get_service("noth").rules[0].id == "noth-secret"
        assert sample_export.get_service("missing") is None

    def test_resolved_services(self, sample_export):
        """Test only services with hosts are resolved."""
        assert [s.keyword for s in sample_export.resolved_services()] == ["anthropic"]


class TestRuntimeModels:
    """Tests for runtime models."""

    def test_value_pattern_link(self):
        """Test linkage follows the keyword."""
        linked = ValuePattern("a-key", "a", keyword="a")
        unlinked = ValuePattern("b-key", "b")

        assert linked.is_linked
        assert not unlinked.is_linked
        assert count_linked_patterns([linked, unlinked]) == 1

    def test_run_stats_full_mode(self):
        """Test full-mode run stats carry no slim counters."""
        stats = RunStats(mode="full", combined=CombinedStats(total_services=1))

        data = stats.to_dict()

        assert data["mode"] == "full"
        assert data["combined"]["total_services"] == 1
        assert "slim_mode_stats" not in data

    def test_run_stats_slim_mode(self):
        """Test slim-mode run stats include runtime counters."""
        stats = RunStats(
            mode="gondolin",
            combined=CombinedStats(),
            slim_mode_stats=RuntimeStats(keyword_host_mappings=3, value_patterns=5),
        )

        data = json.loads(json.dumps(stats.to_dict()))

        assert data["slim_mode_stats"]["keyword_host_mappings"] == 3
        assert data["slim_mode_stats"]["value_patterns"] == 5


class TestErrors:
    """Tests for the error types."""

    def test_source_path_prefix(self):
        """Test errors are prefixed with their source path."""
        error = SecretLinkError("invalid TOML", "gitleaks.toml")

        assert str(error) == "gitleaks.toml: invalid TOML"
        assert error.source_path == "gitleaks.toml"

    def test_no_source_path(self):
        """Test errors without a path have no prefix."""
        assert str(SecretLinkError("boom")) == "boom"

    def test_strict_mode_is_extraction_error(self):
        """Test strict-mode errors are extraction errors."""
        assert issubclass(StrictModeError, ExtractionError)
        assert issubclass(ExtractionError, SecretLinkError)

    def test_warning_str(self):
        """Test warnings render as source: message."""
        assert str(ExtractionWarning("onprem", "IP-literal host")) == "onprem: IP-literal host"
