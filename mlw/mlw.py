"""MLW aggregate: areas, projects and tasks behind one API.

The aggregate owns the three collections and enforces the rules no
single collection can check on its own: parents must exist in the right
collection, and a stake cannot be removed while anything depends on it.

Usage:
    from mlw import MLW

    mlw = MLW()
    health = mlw.add_area("Health")
    run = mlw.add_project("Run 5k", health)
    mlw.add_task("Buy shoes", run)
"""

import logging
from typing import Any, Callable, Iterator, Optional

from mlw.entities.mutations import Mutation, Rename, SetNote, SetStatus
from mlw.entities.stake import ALLOWED_PARENTS, Stake, StakeId, StakeKind, StakeStatus
from mlw.entities.stakes_collection import StakeQuery, StakesCollection
from mlw.errors import HasDependents, InvalidParent, NotFound, ValidationError
from mlw.lib import snapshot
from mlw.lib.config import MlwConfig
from mlw.lib.stats import StakeStats, summarize

logger = logging.getLogger(__name__)


class MLW:
    """Aggregate root over the areas, projects and tasks collections.

    Create one instance per session and pass it to collaborators; there
    is no shared global instance.
    """

    def __init__(self, config: Optional[MlwConfig] = None):
        self.config = config or MlwConfig()
        self.areas = self._new_collection(StakeKind.AREA)
        self.projects = self._new_collection(StakeKind.PROJECT)
        self.tasks = self._new_collection(StakeKind.TASK)

    def _new_collection(self, kind: StakeKind) -> StakesCollection:
        return StakesCollection(
            kind,
            status_policy=self.config.status_policy,
            unique_names=self.config.unique_names,
        )

    def collections(self) -> Iterator[StakesCollection]:
        """Yield collections in kind order: areas, projects, tasks."""
        yield self.areas
        yield self.projects
        yield self.tasks

    def collection_for(self, kind: StakeKind) -> StakesCollection:
        if kind is StakeKind.AREA:
            return self.areas
        if kind is StakeKind.PROJECT:
            return self.projects
        if kind is StakeKind.TASK:
            return self.tasks
        raise ValidationError(f"Unknown stake kind: {kind!r}", field="kind")

    # --- adds ---

    def add_area(self, name: str, *, note: Optional[str] = None) -> StakeId:
        stake_id = self.areas.add(name, None, note=note)
        logger.debug(f"[MLW] Added area {stake_id}")
        return stake_id

    def add_project(self, name: str, area_id: StakeId, *, note: Optional[str] = None) -> StakeId:
        """Add a project under an existing area.

        Raises:
            InvalidParent: area_id is not a live area
            ValidationError: Empty name
        """
        self._check_parent(StakeKind.PROJECT, area_id)
        stake_id = self.projects.add(name, area_id, note=note)
        logger.debug(f"[MLW] Added project {stake_id} under {area_id}")
        return stake_id

    def add_task(self, name: str, parent_id: StakeId, *, note: Optional[str] = None) -> StakeId:
        """Add a task under an existing project or area.

        Raises:
            InvalidParent: parent_id is not a live project or area
            ValidationError: Empty name
        """
        self._check_parent(StakeKind.TASK, parent_id)
        stake_id = self.tasks.add(name, parent_id, note=note)
        logger.debug(f"[MLW] Added task {stake_id} under {parent_id}")
        return stake_id

    def _check_parent(self, child_kind: StakeKind, parent_id: Any) -> None:
        if not isinstance(parent_id, StakeId):
            raise InvalidParent(child_kind, None, f"expected a stake id, got {type(parent_id).__name__}")
        allowed = ALLOWED_PARENTS[child_kind]
        if parent_id.kind not in allowed:
            names = " or ".join(sorted(k.value for k in allowed)) or "nothing"
            raise InvalidParent(child_kind, parent_id, f"parent must be {names}")
        if parent_id not in self.collection_for(parent_id.kind):
            raise InvalidParent(child_kind, parent_id, "parent does not exist")

    # --- reads ---

    def get(self, stake_id: StakeId) -> Optional[Stake]:
        return self.collection_for(stake_id.kind).get(stake_id)

    def find(self, kind: StakeKind, predicate: Callable[[Stake], bool]) -> StakeQuery:
        return self.collection_for(kind).filter(predicate)

    def dependents_of(self, stake_id: StakeId) -> list[StakeId]:
        """All stakes naming stake_id as parent, areas first then projects then tasks."""
        dependents: list[StakeId] = []
        for collection in self.collections():
            dependents.extend(collection.dependents_of(stake_id))
        return dependents

    def stats(self) -> StakeStats:
        return summarize(self.collections())

    # --- updates ---

    def update_stake(self, stake_id: StakeId, mutation: Mutation) -> Stake:
        return self.collection_for(stake_id.kind).update(stake_id, mutation)

    def rename_stake(self, stake_id: StakeId, new_name: str) -> Stake:
        return self.update_stake(stake_id, Rename(new_name))

    def set_status(self, stake_id: StakeId, status: StakeStatus) -> Stake:
        return self.update_stake(stake_id, SetStatus(status))

    def set_note(self, stake_id: StakeId, note: Optional[str]) -> Stake:
        return self.update_stake(stake_id, SetNote(note))

    # --- removal ---

    def remove_stake(self, kind: StakeKind, stake_id: StakeId) -> Stake:
        """Remove a stake that nothing depends on.

        Dependents are checked across every collection before the owning
        collection is touched, so a refused removal changes nothing.

        Raises:
            NotFound: No such stake of this kind
            HasDependents: Other stakes name it as parent
        """
        collection = self.collection_for(kind)
        if not isinstance(stake_id, StakeId) or stake_id not in collection:
            raise NotFound(stake_id)

        dependents = self.dependents_of(stake_id)
        if dependents:
            logger.info(f"[MLW] Refusing to remove {stake_id}: {len(dependents)} dependent(s)")
            raise HasDependents(stake_id, dependents)

        return collection.remove(stake_id)

    # --- snapshot ---

    def export_snapshot(self) -> dict[str, Any]:
        """Export every stake and id sequence for the persistence collaborator."""
        return snapshot.export_snapshot(self.collections())

    @classmethod
    def from_snapshot(cls, data: Any, config: Optional[MlwConfig] = None) -> "MLW":
        """Build a new aggregate from a snapshot, keeping original ids.

        Raises:
            SnapshotError: Document does not match the snapshot schema
            ValidationError: Bad stake data or duplicate ids
            InvalidParent: A parent reference is dangling
        """
        next_ids, stakes = snapshot.parse_snapshot(data)
        mlw = cls(config)
        for stake in stakes:
            if stake.parent is not None and mlw.get(stake.parent) is None:
                raise InvalidParent(stake.kind, stake.parent, f"parent of {stake.id} does not exist")
            mlw.collection_for(stake.kind).restore(stake)

        for kind, next_seq in next_ids.items():
            mlw.collection_for(kind).reserve_through(next_seq - 1)

        logger.info(f"[MLW] Restored {len(stakes)} stakes from snapshot")
        return mlw

    def restore(self, data: Any) -> None:
        """Load a snapshot into this empty aggregate. Nothing changes on failure."""
        if any(not c.is_empty() for c in self.collections()):
            raise ValidationError("Restore requires an empty aggregate")
        restored = self.from_snapshot(data, self.config)
        self.areas = restored.areas
        self.projects = restored.projects
        self.tasks = restored.tasks

    def __repr__(self) -> str:
        return (
            f"MLW(areas={len(self.areas)}, projects={len(self.projects)}, "
            f"tasks={len(self.tasks)})"
        )
