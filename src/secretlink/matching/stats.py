"""
Statistics for a finished join.

Counters are always recomputed from the final service lists rather
than maintained while matching.
"""

from __future__ import annotations

from typing import Sequence

from secretlink.models.combined import (
    CombinedService,
    CombinedStats,
    HostOnlyEntry,
    MatchType,
)


def compute_stats(
    services: Sequence[CombinedService],
    host_only: Sequence[HostOnlyEntry],
) -> CombinedStats:
    """
    Derive CombinedStats from the join output.

    Args:
        services: Services produced by the join
        host_only: Detector keywords no rule resolved to

    Returns:
        CombinedStats where match_exact + match_alias + match_prefix
        equals services_with_hosts
    """
    by_type = {match_type: 0 for match_type in MatchType}
    total_rules = 0
    rules_with_hosts = 0

    for service in services:
        by_type[service.match_type] += 1
        total_rules += len(service.rules)
        if service.is_resolved:
            rules_with_hosts += len(service.rules)

    with_hosts = len(services) - by_type[MatchType.NONE]

    return CombinedStats(
        total_services=len(services),
        services_with_hosts=with_hosts,
        services_no_hosts=len(services) - with_hosts,
        host_only_services=len(host_only),
        match_exact=by_type[MatchType.EXACT],
        match_alias=by_type[MatchType.ALIAS],
        match_prefix=by_type[MatchType.PREFIX],
        total_rules=total_rules,
        rules_with_hosts=rules_with_hosts,
    )
