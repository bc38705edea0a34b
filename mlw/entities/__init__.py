"""
Entity layer: stakes, their ids, and the collections that own them.
"""

from mlw.entities.stake import Stake, StakeId, StakeKind, StakeStatus
from mlw.entities.mutations import Rename, SetStatus, SetNote
from mlw.entities.stakes_collection import StakesCollection, StakeQuery

__all__ = [
    "Stake",
    "StakeId",
    "StakeKind",
    "StakeStatus",
    "Rename",
    "SetStatus",
    "SetNote",
    "StakesCollection",
    "StakeQuery",
]
