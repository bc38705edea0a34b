"""
Stake counts per kind and per status.

Summaries are derived on demand from the collections and never
stored, so they cannot drift from the data.
"""

from dataclasses import dataclass, field
from typing import Iterable

from mlw.entities.stake import StakeKind, StakeStatus
from mlw.entities.stakes_collection import StakesCollection


@dataclass
class KindStats:
    """Counts for one stake kind."""
    kind: StakeKind
    total: int = 0
    by_status: dict[StakeStatus, int] = field(default_factory=dict)

    @property
    def active(self) -> int:
        return self.by_status.get(StakeStatus.ACTIVE, 0)


@dataclass
class StakeStats:
    """Aggregated counts across all kinds."""
    kinds: dict[StakeKind, KindStats]

    @property
    def total(self) -> int:
        return sum(k.total for k in self.kinds.values())

    @property
    def by_status(self) -> dict[StakeStatus, int]:
        totals = {status: 0 for status in StakeStatus}
        for k in self.kinds.values():
            for status, count in k.by_status.items():
                totals[status] += count
        return totals

    def count(self, kind: StakeKind, status: StakeStatus | None = None) -> int:
        """Count stakes of a kind, optionally narrowed to one status."""
        kind_stats = self.kinds[kind]
        if status is None:
            return kind_stats.total
        return kind_stats.by_status.get(status, 0)


def summarize(collections: Iterable[StakesCollection]) -> StakeStats:
    """Build StakeStats from collections. Kinds not present count as empty."""
    kinds = {kind: KindStats(kind, 0, {s: 0 for s in StakeStatus}) for kind in StakeKind}
    for collection in collections:
        by_status = collection.counts_by_status()
        kinds[collection.kind] = KindStats(
            kind=collection.kind,
            total=sum(by_status.values()),
            by_status=by_status,
        )
    return StakeStats(kinds=kinds)


def format_stats_summary(stats: StakeStats) -> list[str]:
    """Format stats summary as list of lines for display."""
    lines = []
    for kind in StakeKind:
        k = stats.kinds[kind]
        label = f"{kind.value.capitalize()}s:"
        breakdown = ", ".join(
            f"{count} {status.value}" for status, count in k.by_status.items() if count
        )
        lines.append(f"  {label:<10}{k.total}" + (f" ({breakdown})" if breakdown else ""))
    lines.append(f"  {'Total:':<10}{stats.total}")
    return lines
