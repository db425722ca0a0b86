"""
Host extraction and validation for detector sources.
"""

from __future__ import annotations

import ipaddress
import re
from dataclasses import dataclass
from enum import Enum

# http(s) URL literals; the authority stops at the first path, query,
# fragment, port, quote or whitespace character
URL_REGEX = re.compile(r"""https?://([^/\s"'`?#<>\\]+)""", re.IGNORECASE)

VALID_HOST_REGEX = re.compile(
    r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?(?:\.[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?)+$"
)

TEMPLATE_MARKERS = ("%", "{", "}", "$", "+")

IGNORED_HOSTS = frozenset(
    {
        "localhost",
        "example.com",
        "example.org",
        "example.net",
        "www.example.com",
    }
)
IGNORED_SUFFIXES = (".example.com", ".example", ".test", ".invalid", ".local", ".localhost")


class HostVerdict(Enum):
    """Outcome of classifying a candidate host."""

    VALID = "valid"
    TEMPLATED = "templated"  # Built at runtime, silently ignored
    IGNORED = "ignored"  # Loopback or documentation host, silently ignored
    IP_LITERAL = "ip_literal"
    INVALID = "invalid"


@dataclass(frozen=True)
class HostCandidate:
    """A host found in a URL literal, before validation."""

    raw: str
    host: str


def find_url_hosts(text: str) -> list[HostCandidate]:
    """
    Find the host part of every http(s) URL in text.

    Userinfo and port are stripped and the host is lower-cased.
    """
    candidates = []
    for match in URL_REGEX.finditer(text):
        raw = match.group(1)
        host = raw.rsplit("@", 1)[-1]
        if host.startswith("["):
            host = host.split("]", 1)[0].lstrip("[")
        elif host.count(":") == 1:
            host = host.split(":", 1)[0]
        candidates.append(HostCandidate(raw=raw, host=host.rstrip(".").lower()))
    return candidates


def is_ip_literal(host: str) -> bool:
    """True if host is an IPv4 or IPv6 address."""
    try:
        ipaddress.ip_address(host)
    except ValueError:
        return False
    return True


def classify_host(host: str) -> HostVerdict:
    """
    Classify a candidate host.

    Args:
        host: Lower-cased host without port or userinfo

    Returns:
        HostVerdict
    """
    if not host or any(marker in host for marker in TEMPLATE_MARKERS):
        return HostVerdict.TEMPLATED
    if host in IGNORED_HOSTS or host.endswith(IGNORED_SUFFIXES):
        return HostVerdict.IGNORED
    if is_ip_literal(host):
        if ipaddress.ip_address(host).is_loopback:
            return HostVerdict.IGNORED
        return HostVerdict.IP_LITERAL
    if not VALID_HOST_REGEX.match(host):
        return HostVerdict.INVALID
    return HostVerdict.VALID
