"""
Error types for MLW.

Every error is recoverable and raised to the immediate caller.
Each carries the offending values as attributes so callers can react
without parsing messages.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mlw.entities.stake import StakeId, StakeKind, StakeStatus


class MlwError(Exception):
    """Base class for all MLW errors."""


class ValidationError(MlwError):
    """Malformed input: empty name, illegal kind/parent combination, bad value."""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message + (f" (field: {field})" if field else ""))


class DuplicateName(ValidationError):
    """Name already used by a live stake of the same kind (only when enforced)."""

    def __init__(self, kind: "StakeKind", name: str):
        self.kind = kind
        self.name = name
        super().__init__(f"{kind.value} named '{name}' already exists", field="name")


class NotFound(MlwError, LookupError):
    """Operation referenced an unknown or removed stake id."""

    def __init__(self, stake_id: "StakeId"):
        self.stake_id = stake_id
        super().__init__(f"Stake not found: {stake_id}")


class InvalidParent(MlwError):
    """Referenced parent does not exist or is of a disallowed kind."""

    def __init__(self, child_kind: "StakeKind", parent_id: "StakeId | None", reason: str):
        self.child_kind = child_kind
        self.parent_id = parent_id
        self.reason = reason
        super().__init__(f"Invalid parent {parent_id} for {child_kind.value}: {reason}")


class HasDependents(MlwError):
    """Removal blocked because other stakes reference this one as parent."""

    def __init__(self, stake_id: "StakeId", dependents: list["StakeId"]):
        self.stake_id = stake_id
        self.dependents = list(dependents)
        shown = ", ".join(str(d) for d in self.dependents[:5])
        more = f" (+{len(self.dependents) - 5} more)" if len(self.dependents) > 5 else ""
        super().__init__(f"Cannot remove {stake_id}: referenced by {shown}{more}")


class InvalidStatusTransition(MlwError):
    """Status change rejected by the configured status policy."""

    def __init__(self, stake_id: "StakeId", from_status: "StakeStatus", to_status: "StakeStatus"):
        self.stake_id = stake_id
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Invalid status transition for {stake_id}: "
            f"{from_status.value} -> {to_status.value}"
        )


class SnapshotError(MlwError):
    """Snapshot document is malformed or does not match its schema."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        super().__init__(message + (f" at {path}" if path else ""))
