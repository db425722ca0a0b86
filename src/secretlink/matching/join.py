"""
Keyword join engine for secretlink.

Resolves every rule keyword against the detector keywords using three
passes of decreasing confidence:

1. exact  - normalized keywords are equal
2. alias  - the alias table maps the rule keyword to a detector keyword
3. prefix - the rule keyword is a strict prefix of detector keywords;
            every such detector is absorbed into the service

Each pass only sees detector keywords not claimed by an earlier pass.
Within the prefix pass, services are processed in rule-keyword order and
the first service to claim a detector keyword keeps it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Sequence

from secretlink.matching.aliases import AliasTable
from secretlink.matching.keywords import normalize_keyword
from secretlink.matching.stats import compute_stats
from secretlink.models.combined import (
    CombinedExport,
    CombinedService,
    HostOnlyEntry,
    MatchType,
)
from secretlink.models.records import DetectorRecord, RuleRecord
from secretlink.observability.logging import get_logger

logger = get_logger("matching.join")


@dataclass
class _DetectorGroup:
    """Detector records sharing one normalized keyword."""

    keyword: str
    normalized: str
    hosts: list[str] = field(default_factory=list)


def _append_unique(target: list[str], hosts: Iterable[str]) -> None:
    for host in hosts:
        if host not in target:
            target.append(host)


def group_rules(rules: Iterable[RuleRecord]) -> list[CombinedService]:
    """
    Group rules into one unresolved service per distinct raw keyword.

    Keyword order and within-keyword rule order follow first appearance.
    """
    services: dict[str, CombinedService] = {}
    for rule in rules:
        service = services.get(rule.keyword)
        if service is None:
            service = CombinedService(keyword=rule.keyword)
            services[rule.keyword] = service
        service.rules.append(rule)
    return list(services.values())


def group_detectors(detectors: Iterable[DetectorRecord]) -> list[_DetectorGroup]:
    """
    Group detectors by normalized keyword, merging their hosts.

    The group displays the first raw keyword seen; hosts keep first-seen
    order and are deduplicated.
    """
    groups: dict[str, _DetectorGroup] = {}
    for detector in detectors:
        normalized = normalize_keyword(detector.keyword)
        group = groups.get(normalized)
        if group is None:
            group = _DetectorGroup(keyword=detector.keyword, normalized=normalized)
            groups[normalized] = group
        _append_unique(group.hosts, detector.hosts)
    return list(groups.values())


class JoinEngine:
    """
    Joins detector records and rule records into a CombinedExport.

    The engine holds no state between calls; the alias table is the
    only collaborator and is read-only.
    """

    def __init__(self, aliases: AliasTable | None = None):
        """
        Initialize join engine.

        Args:
            aliases: Alias table to consult in the alias pass
                (empty table if not provided)
        """
        self.aliases = aliases if aliases is not None else AliasTable()

    def combine(
        self,
        detectors: Sequence[DetectorRecord],
        rules: Sequence[RuleRecord],
        generated_at: datetime | None = None,
    ) -> CombinedExport:
        """
        Join detectors and rules.

        Args:
            detectors: Detector records in extraction order
            rules: Rule records in extraction order
            generated_at: Timestamp for the export (defaults to now, UTC)

        Returns:
            CombinedExport with services, host-only entries, unresolved
            rule keywords and recomputed stats
        """
        services = group_rules(rules)
        # A group without hosts has nothing to resolve a service to
        groups = [g for g in group_detectors(detectors) if g.hosts]

        # Indexes into `groups`, consumed monotonically across passes
        unclaimed: set[int] = set(range(len(groups)))
        by_normalized = {g.normalized: i for i, g in enumerate(groups)}

        self._exact_pass(services, groups, unclaimed, by_normalized)
        self._alias_pass(services, groups, unclaimed, by_normalized)
        self._prefix_pass(services, groups, unclaimed)

        host_only = [
            HostOnlyEntry(keyword=groups[i].keyword, hosts=list(groups[i].hosts))
            for i in sorted(unclaimed)
        ]
        rules_without_hosts = [s.keyword for s in services if not s.is_resolved]

        stats = compute_stats(services, host_only)
        logger.join_completed(
            total_services=stats.total_services,
            services_with_hosts=stats.services_with_hosts,
            host_only_services=stats.host_only_services,
        )

        return CombinedExport(
            generated_at=generated_at or datetime.now(timezone.utc),
            stats=stats,
            services=services,
            host_only=host_only,
            rules_without_hosts=rules_without_hosts,
        )

    def _exact_pass(
        self,
        services: list[CombinedService],
        groups: list[_DetectorGroup],
        unclaimed: set[int],
        by_normalized: dict[str, int],
    ) -> None:
        for service in services:
            normalized = normalize_keyword(service.keyword)
            if not normalized:
                continue
            index = by_normalized.get(normalized)
            if index is not None and index in unclaimed:
                self._claim(service, groups, [index], unclaimed, MatchType.EXACT)

    def _alias_pass(
        self,
        services: list[CombinedService],
        groups: list[_DetectorGroup],
        unclaimed: set[int],
        by_normalized: dict[str, int],
    ) -> None:
        for service in services:
            if service.is_resolved:
                continue
            canonical = self.aliases.resolve(service.keyword)
            if not canonical:
                continue
            index = by_normalized.get(canonical)
            if index is not None and index in unclaimed:
                self._claim(service, groups, [index], unclaimed, MatchType.ALIAS)
            else:
                logger.debug(
                    f"Alias {service.keyword!r} -> {canonical!r} has no unclaimed detector",
                    keyword=service.keyword,
                )

    def _prefix_pass(
        self,
        services: list[CombinedService],
        groups: list[_DetectorGroup],
        unclaimed: set[int],
    ) -> None:
        for service in services:
            if service.is_resolved:
                continue
            prefix = normalize_keyword(service.keyword)
            if not prefix:
                continue
            matched = [
                i
                for i in sorted(unclaimed)
                if len(groups[i].normalized) > len(prefix)
                and groups[i].normalized.startswith(prefix)
            ]
            if matched:
                self._claim(service, groups, matched, unclaimed, MatchType.PREFIX)

    def _claim(
        self,
        service: CombinedService,
        groups: list[_DetectorGroup],
        indexes: list[int],
        unclaimed: set[int],
        match_type: MatchType,
    ) -> None:
        for index in indexes:
            _append_unique(service.hosts, groups[index].hosts)
            unclaimed.discard(index)
        service.match_type = match_type
        logger.debug(
            f"{service.keyword}: {match_type.value} match",
            keyword=service.keyword,
            match_type=match_type.value,
            detectors=[groups[i].keyword for i in indexes],
        )


def combine(
    detectors: Sequence[DetectorRecord],
    rules: Sequence[RuleRecord],
    aliases: AliasTable | None = None,
    generated_at: datetime | None = None,
) -> CombinedExport:
    """
    Convenience function to join detectors and rules.

    Args:
        detectors: Detector records
        rules: Rule records
        aliases: Alias table (the packaged table if not provided)
        generated_at: Timestamp for the export

    Returns:
        CombinedExport
    """
    engine = JoinEngine(aliases if aliases is not None else AliasTable.default())
    return engine.combine(detectors, rules, generated_at=generated_at)
