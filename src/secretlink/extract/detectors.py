"""
Detector extraction for secretlink.

Reads a TruffleHog-style detector tree (`pkg/detectors/<name>/...go`)
and produces one DetectorRecord per detector directory. Only the
verification hosts are taken from the source; nothing else is copied.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from secretlink.errors import ExtractionError, ExtractionWarning
from secretlink.extract.hosts import HostVerdict, classify_host, find_url_hosts
from secretlink.models.records import DetectorRecord
from secretlink.observability.logging import get_logger

logger = get_logger("extract.detectors")

SOURCE_SUFFIX = ".go"
TEST_SUFFIX = "_test.go"

# Credential-kind suffixes stripped from directory names to derive the
# service keyword. Longest first so compound suffixes win.
KEYWORD_SUFFIXES = tuple(
    sorted(
        (
            "personalaccesstoken",
            "personalapikey",
            "personaltoken",
            "globalapikey",
            "serviceaccount",
            "accesstoken",
            "accesskey",
            "apitoken",
            "apikeys",
            "apikey",
            "authtoken",
            "bottoken",
            "webhook",
            "oauth2",
            "oauth",
            "cakey",
            "token",
            "secret",
            "key",
            "api",
        ),
        key=len,
        reverse=True,
    )
)
MIN_KEYWORD_LENGTH = 3


@dataclass
class DetectorExtractOptions:
    """
    Options for detector extraction.

    Attributes:
        allow_ip_hosts: Keep IP-literal hosts instead of warning about them
    """

    allow_ip_hosts: bool = False


@dataclass
class DetectorExtraction:
    """
    Result of detector extraction.

    Attributes:
        detectors: Detectors with at least one host, in directory order
        skipped: Directory names that yielded no hosts
        warnings: Recoverable anomalies
    """

    detectors: list[DetectorRecord] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    warnings: list[ExtractionWarning] = field(default_factory=list)


def derive_detector_keyword(dir_name: str) -> str:
    """
    Derive a service keyword from a detector directory name.

    Credential suffixes are stripped repeatedly while at least three
    characters remain, so "cloudflareapitoken" becomes "cloudflare" and
    "discordbottoken" becomes "discord".
    """
    keyword = dir_name.lower().replace("_", "").replace("-", "")
    stripped = True
    while stripped:
        stripped = False
        for suffix in KEYWORD_SUFFIXES:
            if keyword.endswith(suffix) and len(keyword) - len(suffix) >= MIN_KEYWORD_LENGTH:
                keyword = keyword[: -len(suffix)]
                stripped = True
                break
    return keyword


def _source_files(detector_dir: Path) -> list[Path]:
    return sorted(
        p
        for p in detector_dir.rglob(f"*{SOURCE_SUFFIX}")
        if p.is_file() and not p.name.endswith(TEST_SUFFIX)
    )


def extract_detector_hosts(
    detector_dir: Path,
    options: DetectorExtractOptions,
    warnings: list[ExtractionWarning],
) -> list[str]:
    """
    Collect the verification hosts referenced by one detector.

    Args:
        detector_dir: Detector directory
        options: Extraction options
        warnings: List that receives recoverable anomalies

    Returns:
        Lower-cased hosts, deduplicated, in first-seen order
    """
    hosts: list[str] = []
    for source in _source_files(detector_dir):
        try:
            text = source.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise ExtractionError(f"cannot read detector source: {e}", str(source)) from e

        for candidate in find_url_hosts(text):
            verdict = classify_host(candidate.host)
            if verdict in (HostVerdict.TEMPLATED, HostVerdict.IGNORED):
                continue
            if verdict == HostVerdict.IP_LITERAL and not options.allow_ip_hosts:
                warnings.append(
                    ExtractionWarning(
                        detector_dir.name,
                        f"IP-literal host {candidate.host!r} rejected in {source.name}",
                    )
                )
                continue
            if verdict == HostVerdict.INVALID:
                warnings.append(
                    ExtractionWarning(
                        detector_dir.name,
                        f"invalid host {candidate.raw!r} in {source.name}",
                    )
                )
                continue
            if candidate.host not in hosts:
                hosts.append(candidate.host)
    return hosts


def extract_detectors(
    root: Path | str,
    options: DetectorExtractOptions | None = None,
) -> DetectorExtraction:
    """
    Extract detector records from a detector tree.

    Args:
        root: Directory holding one sub-directory per detector
        options: Extraction options

    Returns:
        DetectorExtraction with detectors, skipped names and warnings

    Raises:
        ExtractionError: If root is not a readable directory
    """
    options = options or DetectorExtractOptions()
    root = Path(root)
    if not root.is_dir():
        raise ExtractionError("detector root is not a directory", str(root))

    result = DetectorExtraction()
    try:
        detector_dirs = sorted(p for p in root.iterdir() if p.is_dir())
    except OSError as e:
        raise ExtractionError(f"cannot list detector root: {e}", str(root)) from e

    for detector_dir in detector_dirs:
        hosts = extract_detector_hosts(detector_dir, options, result.warnings)
        if not hosts:
            result.skipped.append(detector_dir.name)
            logger.debug(f"Skipping {detector_dir.name}: no hosts")
            continue
        result.detectors.append(
            DetectorRecord(
                source_name=detector_dir.name,
                keyword=derive_detector_keyword(detector_dir.name),
                hosts=tuple(hosts),
            )
        )

    return result
