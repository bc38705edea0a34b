"""Tests for mlw.entities.stake module."""

from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from mlw.entities.stake import (
    Stake,
    StakeId,
    StakeKind,
    StakeStatus,
    check_hierarchy,
)
from mlw.errors import ValidationError

AREA_1 = StakeId.new_for(StakeKind.AREA, 1)
PROJ_1 = StakeId.new_for(StakeKind.PROJECT, 1)
TASK_1 = StakeId.new_for(StakeKind.TASK, 1)


class TestStakeId:
    """Tests for StakeId value semantics."""

    def test_structural_equality(self):
        """Ids with the same kind and sequence should be equal and hash alike."""
        a = StakeId.new_for(StakeKind.TASK, 7)
        b = StakeId.new_for(StakeKind.TASK, 7)
        assert a == b
        assert hash(a) == hash(b)
        assert len({a, b}) == 1

    def test_kinds_never_mix(self):
        """An area id should never equal a project id with the same number."""
        assert AREA_1 != PROJ_1
        assert PROJ_1 != TASK_1

    def test_order_by_sequence_within_kind(self):
        """Ids of one kind should sort by creation sequence."""
        ids = [StakeId.new_for(StakeKind.TASK, n) for n in (3, 1, 2)]
        assert [i.seq for i in sorted(ids)] == [1, 2, 3]
        assert StakeId.new_for(StakeKind.TASK, 2) > TASK_1

    def test_order_across_kinds(self):
        """Areas sort before projects, projects before tasks."""
        assert sorted([TASK_1, AREA_1, PROJ_1]) == [AREA_1, PROJ_1, TASK_1]

    def test_format(self):
        """str() should give prefix and zero-padded sequence."""
        assert str(AREA_1) == "AREA-0001"
        assert str(StakeId.new_for(StakeKind.PROJECT, 42)) == "PROJ-0042"
        assert str(StakeId.new_for(StakeKind.TASK, 12345)) == "TASK-12345"

    def test_parse_inverts_format(self):
        """parse() should read back what str() writes."""
        for stake_id in (AREA_1, PROJ_1, StakeId.new_for(StakeKind.TASK, 12345)):
            assert StakeId.parse(str(stake_id)) == stake_id

    def test_parse_rejects_garbage(self):
        """Malformed id text should raise ValidationError."""
        for bad in ("", "AREA-1", "GOAL-0001", "task-0001", "AREA-0000"):
            with pytest.raises(ValidationError):
                StakeId.parse(bad)

    def test_parse_requires_canonical_digits(self):
        """Only ASCII digits with the minimal four-digit padding are accepted."""
        for bad in ("AREA-\u0661\u0662\u0663\u0664", "AREA-00001", "TASK-012345"):
            with pytest.raises(ValidationError) as exc_info:
                StakeId.parse(bad)
            assert exc_info.value.field == "id"
        assert str(StakeId.parse("TASK-12345")) == "TASK-12345"

    def test_new_for_rejects_bad_sequence(self):
        """Sequences must be positive integers."""
        with pytest.raises(ValidationError):
            StakeId.new_for(StakeKind.AREA, 0)
        with pytest.raises(ValidationError):
            StakeId.new_for(StakeKind.AREA, True)
        with pytest.raises(ValidationError):
            StakeId.new_for("area", 1)

    def test_immutable(self):
        """Ids should be frozen."""
        with pytest.raises(AttributeError):
            AREA_1.seq = 2


class TestCheckHierarchy:
    """Tests for the kind/parent rule."""

    def test_area_has_no_parent(self):
        check_hierarchy(StakeKind.AREA, None)
        for parent in (AREA_1, PROJ_1, TASK_1):
            with pytest.raises(ValidationError):
                check_hierarchy(StakeKind.AREA, parent)

    def test_project_parent_must_be_area(self):
        check_hierarchy(StakeKind.PROJECT, AREA_1)
        check_hierarchy(StakeKind.PROJECT, None)
        with pytest.raises(ValidationError):
            check_hierarchy(StakeKind.PROJECT, PROJ_1)
        with pytest.raises(ValidationError):
            check_hierarchy(StakeKind.PROJECT, TASK_1)

    def test_task_parent_project_or_area(self):
        check_hierarchy(StakeKind.TASK, AREA_1)
        check_hierarchy(StakeKind.TASK, PROJ_1)
        with pytest.raises(ValidationError):
            check_hierarchy(StakeKind.TASK, TASK_1)

    def test_parent_must_be_stake_id(self):
        with pytest.raises(ValidationError):
            check_hierarchy(StakeKind.TASK, 1)


class TestStakeCreate:
    """Tests for Stake.create()."""

    def test_initial_state(self):
        """New stakes start active with equal timestamps."""
        before = datetime.now(timezone.utc)
        stake = Stake.create(PROJ_1, "Run 5k", AREA_1)
        assert stake.id == PROJ_1
        assert stake.kind is StakeKind.PROJECT
        assert stake.name == "Run 5k"
        assert stake.parent == AREA_1
        assert stake.status is StakeStatus.ACTIVE
        assert stake.note is None
        assert stake.is_active
        assert not stake.is_done
        assert stake.created_at >= before
        assert stake.created_at == stake.updated_at

    def test_name_is_stripped(self):
        stake = Stake.create(AREA_1, "  Health  ")
        assert stake.name == "Health"

    def test_empty_names_rejected_for_every_kind(self):
        """Empty or whitespace-only names are always rejected."""
        for stake_id in (AREA_1, PROJ_1, TASK_1):
            for bad in ("", " ", "\t\n"):
                with pytest.raises(ValidationError) as exc_info:
                    Stake.create(stake_id, bad)
                assert exc_info.value.field == "name"

    def test_illegal_parent_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            Stake.create(AREA_1, "Health", AREA_1)
        assert exc_info.value.field == "parent"

    def test_note(self):
        stake = Stake.create(TASK_1, "Buy shoes", PROJ_1, note="size 44")
        assert stake.note == "size 44"

    def test_non_text_note_rejected(self):
        for bad in (5, b"size 44", ["size 44"]):
            with pytest.raises(ValidationError) as exc_info:
                Stake.create(TASK_1, "Buy shoes", note=bad)
            assert exc_info.value.field == "note"


class TestStakeMutation:
    """Tests for rename, set_status and set_note."""

    def test_rename(self):
        stake = Stake.create(AREA_1, "Health")
        created = stake.updated_at
        stake.rename("Fitness")
        assert stake.name == "Fitness"
        assert stake.updated_at > created

    @pytest.mark.parametrize("stake_id", [AREA_1, PROJ_1, TASK_1])
    def test_rename_rejects_empty(self, stake_id):
        stake = Stake.create(stake_id, "Health")
        stamp = stake.updated_at
        for bad in ("", "   ", "\t\n"):
            with pytest.raises(ValidationError):
                stake.rename(bad)
        assert stake.name == "Health"
        assert stake.updated_at == stamp

    def test_set_status_any_to_any(self):
        """The entity itself allows every status change."""
        stake = Stake.create(TASK_1, "Buy shoes")
        for status in (StakeStatus.COMPLETED, StakeStatus.ACTIVE, StakeStatus.CANCELLED,
                       StakeStatus.DEFERRED, StakeStatus.COMPLETED):
            stake.set_status(status)
            assert stake.status is status
        assert stake.is_done
        assert not stake.is_active

    def test_set_status_rejects_strings(self):
        stake = Stake.create(TASK_1, "Buy shoes")
        with pytest.raises(ValidationError):
            stake.set_status("completed")

    def test_set_note(self):
        stake = Stake.create(TASK_1, "Buy shoes")
        stake.set_note("running shoes")
        assert stake.note == "running shoes"
        stake.set_note(None)
        assert stake.note is None

    def test_set_note_rejects_non_text(self):
        stake = Stake.create(TASK_1, "Buy shoes", note="size 44")
        stamp = stake.updated_at
        with pytest.raises(ValidationError) as exc_info:
            stake.set_note(44)
        assert exc_info.value.field == "note"
        assert stake.note == "size 44"
        assert stake.updated_at == stamp

    def test_updated_at_moves_forward_with_frozen_clock(self):
        """updated_at must increase even when the clock does not."""
        fixed = datetime(2025, 1, 15, 10, 0, tzinfo=timezone.utc)
        with patch("mlw.entities.stake._utcnow", return_value=fixed):
            stake = Stake.create(TASK_1, "Buy shoes")
            stake.set_status(StakeStatus.COMPLETED)
            first = stake.updated_at
            stake.rename("Buy trail shoes")
        assert stake.created_at == fixed
        assert first > fixed
        assert stake.updated_at > first


class TestStakeEquality:
    """Equality goes by id only."""

    def test_same_id_different_attributes(self):
        a = Stake.create(TASK_1, "Buy shoes")
        b = Stake.create(TASK_1, "Something else", PROJ_1)
        assert a == b
        assert hash(a) == hash(b)

    def test_different_id_same_attributes(self):
        a = Stake.create(TASK_1, "Buy shoes")
        b = Stake.create(StakeId.new_for(StakeKind.TASK, 2), "Buy shoes")
        assert a != b
