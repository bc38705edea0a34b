"""
Collection owning all stakes of one kind.

The collection is the only issuer of ids for its kind. Stakes are kept
in a dict keyed by StakeId, so lookups are O(1) and traversal follows
insertion order.
"""

import logging
from typing import Callable, Iterator, Optional

from mlw.entities import filters
from mlw.entities.mutations import Mutation, Rename, SetNote, SetStatus
from mlw.entities.stake import Stake, StakeId, StakeKind, StakeStatus, clean_name
from mlw.entities.status_fsm import POLICIES, POLICY_FREE, StatusFSM
from mlw.errors import DuplicateName, HasDependents, NotFound, ValidationError

logger = logging.getLogger(__name__)


class StakeQuery:
    """Lazy, restartable view over a collection.

    Nothing is evaluated until iteration. Every new iteration walks the
    live store again, so results reflect the collection at that moment.
    """

    def __init__(self, store: dict[StakeId, Stake], predicate: Optional[Callable[[Stake], bool]] = None):
        self._store = store
        self._predicate = predicate

    def __iter__(self) -> Iterator[Stake]:
        if self._predicate is None:
            yield from self._store.values()
            return
        for stake in self._store.values():
            if self._predicate(stake):
                yield stake

    def ids(self) -> list[StakeId]:
        return [stake.id for stake in self]

    def first(self) -> Optional[Stake]:
        return next(iter(self), None)

    def count(self) -> int:
        return sum(1 for _ in self)


class StakesCollection:
    """All stakes of a single kind.

    Args:
        kind: The kind every stake in this collection has
        status_policy: Status policy applied by update() ("free" or "gtd")
        unique_names: Reject adds/renames that duplicate a live name
    """

    def __init__(self, kind: StakeKind, status_policy: str = POLICY_FREE, unique_names: bool = False):
        if status_policy not in POLICIES:
            raise ValidationError(f"Unknown status policy: {status_policy!r}", field="status_policy")
        self.kind = kind
        self.status_policy = status_policy
        self.unique_names = unique_names
        self._stakes: dict[StakeId, Stake] = {}
        self._next_seq = 1

    # --- id issuance ---

    def next_id(self) -> StakeId:
        """Peek at the id the next add() will issue."""
        return StakeId.new_for(self.kind, self._next_seq)

    def _issue_id(self) -> StakeId:
        stake_id = self.next_id()
        self._next_seq += 1
        return stake_id

    @property
    def next_seq(self) -> int:
        return self._next_seq

    def reserve_through(self, seq: int) -> None:
        """Make sure no id with sequence <= seq is issued again."""
        if seq >= self._next_seq:
            self._next_seq = seq + 1

    # --- writes ---

    def add(self, name: str, parent: Optional[StakeId] = None, *, note: Optional[str] = None) -> StakeId:
        """Create a stake and return its new id.

        Validation runs against a provisional id first, so a rejected add
        does not consume a sequence number.

        Raises:
            ValidationError: Empty name or illegal parent kind
            DuplicateName: Name taken, when unique_names is enabled
        """
        stake = Stake.create(self.next_id(), name, parent, note=note)
        self._check_unique(stake.name)
        self._issue_id()
        self._stakes[stake.id] = stake
        logger.debug(f"[COLLECTION] {self.kind.value}: added {stake.id} '{stake.name}'")
        return stake.id

    def restore(self, stake: Stake) -> None:
        """Insert an existing stake, keeping its id.

        Used by the snapshot restore path. Parent existence is the
        caller's concern; kind and id collisions are checked here.
        """
        if stake.kind is not self.kind:
            raise ValidationError(
                f"Cannot restore {stake.kind.value} {stake.id} into {self.kind.value} collection",
                field="kind",
            )
        if stake.id in self._stakes:
            raise ValidationError(f"Duplicate stake id: {stake.id}", field="id")
        self._check_unique(stake.name)
        self._stakes[stake.id] = stake
        self.reserve_through(stake.id.seq)

    def update(self, stake_id: StakeId, mutation: Mutation) -> Stake:
        """Apply a mutation to a stake and return it.

        Raises:
            NotFound: Unknown id
            ValidationError: Bad name or note
            InvalidStatusTransition: Status policy forbids the change
        """
        stake = self.require(stake_id)

        if isinstance(mutation, Rename):
            new_name = clean_name(mutation.name)
            if new_name.lower() != stake.name.lower():
                self._check_unique(new_name)
            stake.rename(new_name)
        elif isinstance(mutation, SetStatus):
            if not isinstance(mutation.status, StakeStatus):
                raise ValidationError(f"Unknown status: {mutation.status!r}", field="status")
            StatusFSM(stake, self.status_policy).transition_to(mutation.status)
        elif isinstance(mutation, SetNote):
            stake.set_note(mutation.note)
        else:
            raise TypeError(f"Unsupported mutation: {type(mutation).__name__}")

        logger.debug(f"[COLLECTION] {self.kind.value}: updated {stake_id} with {mutation}")
        return stake

    def remove(self, stake_id: StakeId) -> Stake:
        """Remove a stake and return it. Its id is never issued again.

        Only dependents in this collection are visible here; MLW checks
        the other collections before delegating.

        Raises:
            NotFound: Unknown id
            HasDependents: A stake in this collection names it as parent
        """
        self.require(stake_id)
        dependents = self.dependents_of(stake_id)
        if dependents:
            raise HasDependents(stake_id, dependents)
        stake = self._stakes.pop(stake_id)
        logger.info(f"[COLLECTION] {self.kind.value}: removed {stake_id} '{stake.name}'")
        return stake

    # --- reads ---

    def get(self, stake_id: StakeId) -> Optional[Stake]:
        return self._stakes.get(stake_id)

    def require(self, stake_id: StakeId) -> Stake:
        stake = self._stakes.get(stake_id)
        if stake is None:
            raise NotFound(stake_id)
        return stake

    def filter(self, predicate: Callable[[Stake], bool]) -> StakeQuery:
        return StakeQuery(self._stakes, predicate)

    def all(self) -> StakeQuery:
        return StakeQuery(self._stakes)

    def active_stakes(self) -> StakeQuery:
        return self.filter(filters.is_active)

    def completed_stakes(self) -> StakeQuery:
        return self.filter(filters.is_completed)

    def dependents_of(self, stake_id: StakeId) -> list[StakeId]:
        return self.filter(filters.by_parent(stake_id)).ids()

    def counts_by_status(self) -> dict[StakeStatus, int]:
        counts = {status: 0 for status in StakeStatus}
        for stake in self._stakes.values():
            counts[stake.status] += 1
        return counts

    def len(self) -> int:
        return len(self._stakes)

    def is_empty(self) -> bool:
        return not self._stakes

    def _check_unique(self, name: str) -> None:
        if not self.unique_names:
            return
        folded = name.lower()
        if any(s.name.lower() == folded for s in self._stakes.values()):
            raise DuplicateName(self.kind, name)

    def __len__(self) -> int:
        return len(self._stakes)

    def __contains__(self, stake_id: object) -> bool:
        return stake_id in self._stakes

    def __iter__(self) -> Iterator[Stake]:
        return iter(self.all())

    def __repr__(self) -> str:
        return f"StakesCollection(kind={self.kind.value}, size={len(self._stakes)})"
