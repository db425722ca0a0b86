"""
Source extraction for secretlink.

Turns a detector tree into DetectorRecords and a rule config into
RuleRecords.
"""

from secretlink.extract.detectors import (
    DetectorExtraction,
    DetectorExtractOptions,
    derive_detector_keyword,
    extract_detector_hosts,
    extract_detectors,
)
from secretlink.extract.hosts import (
    HostVerdict,
    classify_host,
    find_url_hosts,
    is_ip_literal,
)
from secretlink.extract.rules import (
    derive_rule_keyword,
    extract_rules,
    parse_rules,
)

__all__ = [
    "DetectorExtraction",
    "DetectorExtractOptions",
    "derive_detector_keyword",
    "extract_detector_hosts",
    "extract_detectors",
    "HostVerdict",
    "classify_host",
    "find_url_hosts",
    "is_ip_literal",
    "derive_rule_keyword",
    "extract_rules",
    "parse_rules",
]
