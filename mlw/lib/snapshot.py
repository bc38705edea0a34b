"""
Snapshot export and parsing for the persistence collaborator.

A snapshot is a JSON-compatible dict holding every stake across the
three collections plus each collection's next id sequence:

    {
      "version": 1,
      "next_ids": {"area": 2, "project": 1, "task": 1},
      "stakes": [
        {"id": "AREA-0001", "kind": "area", "name": "Health",
         "status": "active", "parent": null, "note": null,
         "created_at": "...", "updated_at": "..."}
      ]
    }

Stakes are ordered areas, projects, tasks, insertion order within each,
so parents always precede their dependents.
"""

import json
import logging
from datetime import datetime
from typing import Any, Iterable

from mlw.entities.stake import Stake, StakeId, StakeKind, StakeStatus, check_hierarchy, clean_name
from mlw.entities.stakes_collection import StakesCollection
from mlw.errors import SnapshotError, ValidationError
from mlw.lib.validate import validate

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


def stake_to_dict(stake: Stake) -> dict[str, Any]:
    return {
        "id": str(stake.id),
        "kind": stake.kind.value,
        "name": stake.name,
        "status": stake.status.value,
        "parent": str(stake.parent) if stake.parent else None,
        "note": stake.note,
        "created_at": stake.created_at.isoformat(),
        "updated_at": stake.updated_at.isoformat(),
    }


def _parse_timestamp(value: str, path: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise SnapshotError(f"Invalid timestamp {value!r}", path) from None
    if parsed.tzinfo is None:
        raise SnapshotError(f"Timestamp {value!r} has no timezone", path)
    return parsed


def stake_from_dict(data: dict[str, Any], index: int = 0) -> Stake:
    """Rebuild a Stake from its exported form, keeping id, status and timestamps.

    Raises:
        SnapshotError: Id/kind mismatch or bad timestamps
        ValidationError: Empty name or illegal kind/parent combination
    """
    path = f"stakes.{index}"
    stake_id = StakeId.parse(data["id"])
    if stake_id.kind.value != data["kind"]:
        raise SnapshotError(f"Id {stake_id} does not match kind {data['kind']!r}", f"{path}.kind")

    parent = StakeId.parse(data["parent"]) if data.get("parent") else None
    check_hierarchy(stake_id.kind, parent)

    created_at = _parse_timestamp(data["created_at"], f"{path}.created_at")
    updated_at = _parse_timestamp(data["updated_at"], f"{path}.updated_at")
    if updated_at < created_at:
        raise SnapshotError("updated_at precedes created_at", f"{path}.updated_at")

    return Stake(
        id=stake_id,
        name=clean_name(data["name"]),
        status=StakeStatus(data["status"]),
        parent=parent,
        created_at=created_at,
        updated_at=updated_at,
        note=data.get("note"),
    )


def export_snapshot(collections: Iterable[StakesCollection]) -> dict[str, Any]:
    """Export collections to a snapshot dict, ordered by kind rank."""
    ordered = sorted(collections, key=lambda c: c.kind.rank)
    next_ids = {kind.value: 1 for kind in StakeKind}
    stakes = []
    for collection in ordered:
        next_ids[collection.kind.value] = collection.next_seq
        stakes.extend(stake_to_dict(s) for s in collection.all())
    return {
        "version": SNAPSHOT_VERSION,
        "next_ids": next_ids,
        "stakes": stakes,
    }


def parse_snapshot(data: Any) -> tuple[dict[StakeKind, int], list[Stake]]:
    """Validate a snapshot document and rebuild its stakes.

    Returns:
        (next id sequence per kind, stakes sorted so parents come first)

    Raises:
        SnapshotError: Document does not match the snapshot schema
        ValidationError: A stake fails entity validation
    """
    validate(data, "snapshot")

    next_ids = {kind: data["next_ids"][kind.value] for kind in StakeKind}
    stakes = []
    for i, item in enumerate(data["stakes"]):
        try:
            stakes.append(stake_from_dict(item, i))
        except ValidationError as e:
            raise ValidationError(f"stakes.{i}: {e}", field=e.field) from None

    # Stable sort keeps insertion order within a kind
    stakes.sort(key=lambda s: s.kind.rank)
    logger.debug(f"[SNAPSHOT] Parsed {len(stakes)} stakes")
    return next_ids, stakes


def dumps_snapshot(data: dict[str, Any]) -> str:
    """Serialize a snapshot dict to JSON text."""
    return json.dumps(data, indent=2)


def loads_snapshot(text: str) -> dict[str, Any]:
    """Parse JSON text into a snapshot dict (schema checked on restore)."""
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise SnapshotError(f"Invalid snapshot JSON: {e}") from None
