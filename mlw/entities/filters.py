"""
Predicate builders for StakesCollection.filter() and MLW.find().

Each builder returns a plain callable taking a Stake and returning bool,
so they compose with lambdas and with each other via all_of().
"""

from typing import Callable, Optional

from mlw.entities.stake import Stake, StakeId, StakeStatus

Predicate = Callable[[Stake], bool]


def by_status(*statuses: StakeStatus) -> Predicate:
    """Match stakes in any of the given statuses."""
    wanted = frozenset(statuses)
    return lambda stake: stake.status in wanted


def by_parent(parent: Optional[StakeId]) -> Predicate:
    """Match stakes whose parent is exactly parent (None matches root stakes)."""
    return lambda stake: stake.parent == parent


def name_contains(text: str) -> Predicate:
    """Case-insensitive substring match on the name."""
    needle = text.strip().lower()
    return lambda stake: needle in stake.name.lower()


def is_active(stake: Stake) -> bool:
    return stake.is_active


def is_completed(stake: Stake) -> bool:
    return stake.status is StakeStatus.COMPLETED


def all_of(*predicates: Predicate) -> Predicate:
    """Match stakes satisfying every predicate."""
    return lambda stake: all(p(stake) for p in predicates)
