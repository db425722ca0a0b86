"""
Tests for the secretlink CLI.

Tests argument parsing, option merging, exit codes and the run summary.
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path

import pytest

from secretlink.cli import _log_level, build_run_options, create_parser, main
from secretlink.config import ExportConfiguration
from secretlink.export.base import ExportMode


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep host configuration out of CLI runs."""
    for name in (
        "SECRETLINK_CONFIG_FILE",
        "SECRETLINK_ALIAS_FILE",
        "SECRETLINK_EXACT_NAMES_FILE",
        "SECRETLINK_STRICT",
        "SECRETLINK_ALLOW_IP_HOSTS",
        "SECRETLINK_SYNC_DIR",
        "SECRETLINK_LOG_LEVEL",
        "SECRETLINK_LOG_FORMAT",
    ):
        monkeypatch.delenv(name, raising=False)


class TestCLIParser:
    """Tests for CLI argument parsing."""

    @pytest.fixture
    def parser(self) -> argparse.ArgumentParser:
        """Return the CLI argument parser."""
        return create_parser()

    def test_defaults(self, parser):
        """Test default values."""
        args = parser.parse_args([])

        assert args.out == "-"
        assert args.mode == "full"
        assert args.force is False
        assert args.strict is False
        assert args.stats_json == ""
        assert args.config is None

    def test_source_aliases(self, parser):
        """Test --detectors and --rules are aliases."""
        args = parser.parse_args(["--detectors", "d", "--rules", "r.toml"])

        assert args.trufflehog == "d"
        assert args.gitleaks == "r.toml"

    def test_output_options(self, parser):
        """Test output options."""
        args = parser.parse_args(
            ["-o", "out.json", "--mode", "gondolin", "--force", "--sync-dir", "--stats-json", "s.json"]
        )

        assert args.out == "out.json"
        assert args.mode == "gondolin"
        assert args.force is True
        assert args.sync_dir is True
        assert args.stats_json == "s.json"

    def test_invalid_mode(self, parser):
        """Test unknown modes exit with a usage error."""
        with pytest.raises(SystemExit) as exc_info:
            parser.parse_args(["--mode", "slim"])

        assert exc_info.value.code == 2

    def test_verbosity(self, parser):
        """Test -v counts and -q."""
        args = parser.parse_args(["-vv", "-q"])

        assert args.verbose == 2
        assert args.quiet is True


class TestBuildRunOptions:
    """Tests for merging arguments and configuration."""

    def test_flags_or_config(self):
        """Test configuration can turn switches on."""
        args = create_parser().parse_args(["--trufflehog", "d", "--mode", "gondolin"])
        config = ExportConfiguration(strict=True, sync_dir=True, alias_file="a.yaml")

        options = build_run_options(args, config)

        assert options.mode == ExportMode.GONDOLIN
        assert options.strict is True
        assert options.allow_ip_hosts is False
        assert options.sync_dir is True
        assert options.alias_file == Path("a.yaml")
        assert options.exact_names_file is None

    def test_flags_win(self):
        """Test flags turn switches on when configuration does not."""
        args = create_parser().parse_args(["--gitleaks", "r", "--strict", "--allow-ip-hosts"])

        options = build_run_options(args, ExportConfiguration())

        assert options.strict is True
        assert options.allow_ip_hosts is True

    @pytest.mark.parametrize(
        "argv,expected",
        [([], "ERROR"), (["-v"], "DEBUG"), (["-q"], "WARNING"), (["-q", "-v"], "WARNING")],
    )
    def test_log_level(self, argv, expected):
        """Test quiet and verbose override the configured level."""
        args = create_parser().parse_args(argv)

        assert _log_level(args, ExportConfiguration(log_level="ERROR")) == expected


class TestMain:
    """Tests for the main entry point."""

    def test_no_sources(self, capsys):
        """Test missing sources is a usage error."""
        assert main([]) == 1

        assert "error: at least one of --from-full" in capsys.readouterr().err

    def test_conflicting_sources(self, capsys, tmp_path: Path):
        """Test --from-full cannot be mixed with extraction sources."""
        result = main(["--from-full", str(tmp_path / "x.json"), "--trufflehog", "d"])

        assert result == 1
        assert "cannot be combined" in capsys.readouterr().err

    def test_full_to_stdout(self, capsys, detector_root, rules_path):
        """Test a full run writes JSON to stdout and the summary to stderr."""
        result = main(["--trufflehog", str(detector_root), "--gitleaks", str(rules_path)])

        captured = capsys.readouterr()
        assert result == 0
        document = json.loads(captured.out)
        assert document["stats"]["services_with_hosts"] == 2
        assert "=== Summary ===" in captured.err
        assert "=== Gondolin Export ===" not in captured.err

    def test_gondolin_summary(self, capsys, detector_root, rules_path):
        """Test slim runs add the runtime block to the summary."""
        result = main(
            [
                "--trufflehog",
                str(detector_root),
                "--gitleaks",
                str(rules_path),
                "--mode",
                "gondolin",
            ]
        )

        captured = capsys.readouterr()
        assert result == 0
        assert "keyword_host_map" in json.loads(captured.out)
        assert "=== Gondolin Export ===" in captured.err
        assert "with host linkage: 2" in captured.err

    def test_quiet(self, capsys, detector_root, rules_path):
        """Test --quiet suppresses the summary."""
        result = main(
            ["-q", "--trufflehog", str(detector_root), "--gitleaks", str(rules_path)]
        )

        captured = capsys.readouterr()
        assert result == 0
        assert "=== Summary ===" not in captured.err

    def test_existing_output(self, capsys, tmp_path: Path, rules_path):
        """Test an existing output file is refused without --force."""
        out = tmp_path / "out.json"
        out.write_text("keep")

        result = main(["--gitleaks", str(rules_path), "-o", str(out)])

        assert result == 1
        assert "already exists" in capsys.readouterr().err
        assert out.read_text() == "keep"

    def test_missing_rule_file(self, capsys, tmp_path: Path):
        """Test extraction failures exit non-zero."""
        missing = tmp_path / "missing.toml"

        assert main(["--gitleaks", str(missing)]) == 1
        assert f"error: {missing}" in capsys.readouterr().err

    def test_config_file(self, capsys, tmp_path: Path, detector_tree, rules_path):
        """Test a configuration file enables strict mode."""
        root, write = detector_tree
        write("onprem", 'u := "https://203.0.113.7/api"\n')
        config = tmp_path / "secretlink.yaml"
        config.write_text("strict: true\n")

        result = main(
            ["--config", str(config), "--trufflehog", str(root), "--gitleaks", str(rules_path)]
        )

        assert result == 1
        assert "produced 1 warnings" in capsys.readouterr().err

    def test_mistyped_full_document(self, capsys, tmp_path: Path):
        """Test a mistyped --from-full document is reported, not raised."""
        document = tmp_path / "combined.json"
        document.write_text(json.dumps({"stats": [1, 2]}))

        assert main(["-q", "--from-full", str(document)]) == 1
        assert "error:" in capsys.readouterr().err

    def test_invalid_log_level_in_config(self, capsys, tmp_path: Path, rules_path):
        """Test an unknown configured log level is reported as an error."""
        config = tmp_path / "secretlink.yaml"
        config.write_text("log_level: verbose\n")

        result = main(["--gitleaks", str(rules_path), "--config", str(config)])

        assert result == 1
        assert "error:" in capsys.readouterr().err

    def test_invalid_log_level_in_env(self, capsys, monkeypatch, rules_path):
        """Test an unknown SECRETLINK_LOG_LEVEL is reported as an error."""
        monkeypatch.setenv("SECRETLINK_LOG_LEVEL", "verbose")

        assert main(["--gitleaks", str(rules_path)]) == 1
        assert "error: SECRETLINK_LOG_LEVEL" in capsys.readouterr().err
