"""
MLW: an in-memory model of areas, projects and tasks.

The MLW aggregate is the entry point; collaborators (persistence, CLI,
sync) talk to it rather than to collections or stakes directly.
"""

from mlw.entities import (
    Stake,
    StakeId,
    StakeKind,
    StakeStatus,
    StakesCollection,
    StakeQuery,
    Rename,
    SetStatus,
    SetNote,
)
from mlw.errors import (
    MlwError,
    ValidationError,
    DuplicateName,
    NotFound,
    InvalidParent,
    HasDependents,
    InvalidStatusTransition,
    SnapshotError,
)
from mlw.lib.config import MlwConfig, load_config
from mlw.mlw import MLW

__version__ = "0.1.0"

__all__ = [
    "MLW",
    "MlwConfig",
    "load_config",
    "Stake",
    "StakeId",
    "StakeKind",
    "StakeStatus",
    "StakesCollection",
    "StakeQuery",
    "Rename",
    "SetStatus",
    "SetNote",
    "MlwError",
    "ValidationError",
    "DuplicateName",
    "NotFound",
    "InvalidParent",
    "HasDependents",
    "InvalidStatusTransition",
    "SnapshotError",
]
