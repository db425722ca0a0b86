"""
secretlink CLI entry point.

Combines TruffleHog verification hosts and Gitleaks regex patterns into
a unified secret-detection dataset, or derives the slim runtime dataset
from it.
"""

from __future__ import annotations

import argparse
import sys

from secretlink import __version__
from secretlink.config import ExportConfiguration, load_config_from_env
from secretlink.errors import SecretLinkError
from secretlink.export.base import ExportMode
from secretlink.observability.logging import configure_logging
from secretlink.pipeline import STDOUT_PATH, RunOptions, run_export, validate_options


def create_parser() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="secretlink",
        description="Combine detector hosts and secret rules into a unified dataset",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"secretlink {__version__}",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (can be repeated)",
    )

    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress non-essential output",
    )

    sources = parser.add_argument_group("sources")
    sources.add_argument(
        "--trufflehog",
        "--detectors",
        dest="trufflehog",
        default="",
        metavar="DIR",
        help="Path to trufflehog/pkg/detectors/",
    )
    sources.add_argument(
        "--gitleaks",
        "--rules",
        dest="gitleaks",
        default="",
        metavar="FILE",
        help="Path to gitleaks/config/gitleaks.toml",
    )
    sources.add_argument(
        "--from-full",
        default="",
        metavar="FILE",
        help="Read a combined export JSON instead of extracting from --trufflehog/--gitleaks",
    )

    output = parser.add_argument_group("output")
    output.add_argument(
        "-o",
        "--out",
        default=STDOUT_PATH,
        help="Output file path (or - for stdout, the default)",
    )
    output.add_argument(
        "--mode",
        choices=[m.value for m in ExportMode],
        default=ExportMode.FULL.value,
        help="Output mode: 'full' (combined dataset) or 'gondolin' (slim runtime dataset)",
    )
    output.add_argument(
        "--force",
        action="store_true",
        help="Overwrite --out if it already exists",
    )
    output.add_argument(
        "--sync-dir",
        action="store_true",
        help="fsync output directory after atomic writes (durability over speed)",
    )
    output.add_argument(
        "--stats-json",
        default="",
        metavar="FILE",
        help="Optional file path to write machine-readable run stats JSON",
    )

    extraction = parser.add_argument_group("extraction")
    extraction.add_argument(
        "--strict",
        action="store_true",
        help="Treat TruffleHog URL/host extraction warnings as errors",
    )
    extraction.add_argument(
        "--allow-ip-hosts",
        action="store_true",
        help="Allow exporting IP-literal hosts (unsafe; default: false)",
    )

    parser.add_argument(
        "--config",
        default=None,
        metavar="FILE",
        help="YAML or JSON configuration file",
    )

    return parser


def build_run_options(args: argparse.Namespace, config: ExportConfiguration) -> RunOptions:
    """Merge parsed arguments over configuration; flags only turn options on."""
    return RunOptions(
        trufflehog=args.trufflehog,
        gitleaks=args.gitleaks,
        from_full=args.from_full,
        out=args.out,
        mode=ExportMode.from_string(args.mode),
        force=args.force,
        strict=args.strict or config.strict,
        allow_ip_hosts=args.allow_ip_hosts or config.allow_ip_hosts,
        sync_dir=args.sync_dir or config.sync_dir,
        stats_json=args.stats_json,
        warning_preview_limit=config.warning_preview_limit,
        alias_file=config.alias_path(),
        exact_names_file=config.exact_names_path(),
    )


def _log_level(args: argparse.Namespace, config: ExportConfiguration) -> str:
    if args.quiet:
        return "WARNING"
    if args.verbose:
        return "DEBUG"
    return config.log_level


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        # Source selection is checked before any file is read
        validate_options(
            RunOptions(trufflehog=args.trufflehog, gitleaks=args.gitleaks, from_full=args.from_full)
        )
        config = load_config_from_env(args.config)
        configure_logging(level=_log_level(args, config), format=config.log_format)

        options = build_run_options(args, config)
        result = run_export(options)
    except SecretLinkError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    if not args.quiet:
        for line in result.summary:
            print(line, file=sys.stderr)

    return 0


if __name__ == "__main__":
    sys.exit(main())
