"""
Stake entity and its identifier.

A stake is any actionable item in the hierarchy: an area of
responsibility, a project, or a task. Parents are held as ids only
and resolved through the owning aggregate when needed.
"""

import functools
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

from mlw.errors import ValidationError


class StakeKind(Enum):
    """The three stake kinds. Order of definition is the kind rank."""

    AREA = "area"
    PROJECT = "project"
    TASK = "task"

    @property
    def prefix(self) -> str:
        return _PREFIXES[self]

    @property
    def rank(self) -> int:
        return _RANKS[self]


_PREFIXES = {
    StakeKind.AREA: "AREA",
    StakeKind.PROJECT: "PROJ",
    StakeKind.TASK: "TASK",
}
_RANKS = {kind: i for i, kind in enumerate(StakeKind)}


class StakeStatus(Enum):
    """Workflow status of a stake."""

    ACTIVE = "active"
    COMPLETED = "completed"
    DEFERRED = "deferred"
    CANCELLED = "cancelled"


# Allowed parent kinds per child kind. Parents sit exactly one level up.
ALLOWED_PARENTS: dict[StakeKind, frozenset[StakeKind]] = {
    StakeKind.AREA: frozenset(),
    StakeKind.PROJECT: frozenset({StakeKind.AREA}),
    StakeKind.TASK: frozenset({StakeKind.PROJECT, StakeKind.AREA}),
}

STAKE_ID_PATTERN = re.compile(r"^(AREA|PROJ|TASK)-([0-9]{4,})$")


@functools.total_ordering
@dataclass(frozen=True)
class StakeId:
    """Identifier of a stake, scoped to its kind.

    Ids are issued by the owning StakesCollection through new_for().
    Two ids are equal only if both kind and sequence match, so an area
    id never compares equal to a project id with the same number.
    """
    kind: StakeKind
    seq: int

    @classmethod
    def new_for(cls, kind: StakeKind, sequence: int) -> "StakeId":
        """Build the id for the given issue sequence."""
        if not isinstance(kind, StakeKind):
            raise ValidationError(f"Unknown stake kind: {kind!r}", field="kind")
        if isinstance(sequence, bool) or not isinstance(sequence, int) or sequence < 1:
            raise ValidationError(f"Sequence must be a positive integer, got {sequence!r}", field="id")
        return cls(kind, sequence)

    @classmethod
    def parse(cls, text: str) -> "StakeId":
        """Parse the string form produced by str(), e.g. 'PROJ-0003'."""
        match = STAKE_ID_PATTERN.match(text.strip()) if isinstance(text, str) else None
        if not match:
            raise ValidationError(f"Malformed stake id: {text!r}", field="id")
        prefix, digits = match.groups()
        seq = int(digits)
        if digits != f"{seq:04d}":
            raise ValidationError(f"Malformed stake id: {text!r}", field="id")
        kind = next(k for k, p in _PREFIXES.items() if p == prefix)
        return cls.new_for(kind, seq)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, StakeId):
            return NotImplemented
        return (self.kind.rank, self.seq) < (other.kind.rank, other.seq)

    def __str__(self) -> str:
        return f"{self.kind.prefix}-{self.seq:04d}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def clean_name(name: str) -> str:
    """Return the stripped name, or raise ValidationError if it is empty."""
    if not isinstance(name, str):
        raise ValidationError(f"Name must be text, got {type(name).__name__}", field="name")
    cleaned = name.strip()
    if not cleaned:
        raise ValidationError("Name must not be empty", field="name")
    return cleaned


def clean_note(note: Optional[str]) -> Optional[str]:
    """Return note unchanged if it is text or None, else raise ValidationError."""
    if note is not None and not isinstance(note, str):
        raise ValidationError(f"Note must be text, got {type(note).__name__}", field="note")
    return note


def check_hierarchy(kind: StakeKind, parent: Optional[StakeId]) -> None:
    """Raise ValidationError if kind may not have a parent of parent's kind."""
    if parent is None:
        return
    if not isinstance(parent, StakeId):
        raise ValidationError(f"Parent must be a StakeId, got {type(parent).__name__}", field="parent")
    allowed = ALLOWED_PARENTS[kind]
    if parent.kind not in allowed:
        if not allowed:
            raise ValidationError(f"A {kind.value} cannot have a parent", field="parent")
        names = " or ".join(sorted(k.value for k in allowed))
        raise ValidationError(
            f"A {kind.value} parent must be {names}, not {parent.kind.value}",
            field="parent",
        )


@dataclass(eq=False)
class Stake:
    """An area, project or task.

    Equality and hashing go by id only. Mutate through the owning
    collection or the MLW aggregate, never by assigning fields.
    """
    id: StakeId
    name: str
    status: StakeStatus
    parent: Optional[StakeId]
    created_at: datetime
    updated_at: datetime
    note: Optional[str] = None

    @classmethod
    def create(
        cls,
        stake_id: StakeId,
        name: str,
        parent: Optional[StakeId] = None,
        *,
        note: Optional[str] = None,
    ) -> "Stake":
        """Create a new active stake.

        Raises:
            ValidationError: empty name, non-text note or illegal kind/parent combination
        """
        cleaned = clean_name(name)
        note = clean_note(note)
        check_hierarchy(stake_id.kind, parent)
        now = _utcnow()
        return cls(
            id=stake_id,
            name=cleaned,
            status=StakeStatus.ACTIVE,
            parent=parent,
            created_at=now,
            updated_at=now,
            note=note,
        )

    @property
    def kind(self) -> StakeKind:
        return self.id.kind

    @property
    def is_active(self) -> bool:
        return self.status is StakeStatus.ACTIVE

    @property
    def is_done(self) -> bool:
        return self.status in (StakeStatus.COMPLETED, StakeStatus.CANCELLED)

    def rename(self, new_name: str) -> None:
        self.name = clean_name(new_name)
        self._touch()

    def set_status(self, new_status: StakeStatus) -> None:
        """Move to any of the four statuses. No transition rules at this level."""
        if not isinstance(new_status, StakeStatus):
            raise ValidationError(f"Unknown status: {new_status!r}", field="status")
        self.status = new_status
        self._touch()

    def set_note(self, note: Optional[str]) -> None:
        self.note = clean_note(note)
        self._touch()

    def _touch(self) -> None:
        # updated_at must move strictly forward even if the clock has not advanced
        now = _utcnow()
        floor = self.updated_at + timedelta(microseconds=1)
        self.updated_at = now if now >= floor else floor

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Stake):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        return f"Stake(id={self.id}, name={self.name!r}, status={self.status.value})"
