"""
Mutations accepted by StakesCollection.update().

Each mutation is a small value describing one change. The collection
decides how to apply it so its own rules (name uniqueness, status
policy) are checked in one place.
"""

from dataclasses import dataclass
from typing import Optional, Union

from mlw.entities.stake import StakeStatus


@dataclass(frozen=True)
class Rename:
    name: str


@dataclass(frozen=True)
class SetStatus:
    status: StakeStatus


@dataclass(frozen=True)
class SetNote:
    note: Optional[str]


Mutation = Union[Rename, SetStatus, SetNote]
