"""Unit tests for targeting schemas.

These tests need no database connection.
"""

from uuid import uuid4

import pytest
from pydantic import ValidationError

from targethook.db.models import TargetingHook, TargetingTarget
from targethook.schemas.targeting import (
    EMPTY_HOOK,
    EMPTY_TARGET,
    ZERO_VECTOR,
    Behavior,
    HookData,
    ObjectType,
    TargetData,
    Vector,
)


class TestVector:
    def test_zero_vector(self) -> None:
        assert ZERO_VECTOR.is_zero
        assert Vector() == ZERO_VECTOR
        assert Vector(x=0, y=0, z=0) == ZERO_VECTOR

    @pytest.mark.parametrize("axis", ["x", "y", "z"])
    def test_any_nonzero_axis(self, axis: str) -> None:
        assert not Vector(**{axis: 0.01}).is_zero

    def test_frozen(self) -> None:
        with pytest.raises(ValidationError):
            ZERO_VECTOR.x = 1.0  # type: ignore[misc]

    def test_str(self) -> None:
        assert str(Vector(x=1, y=2.5, z=-3)) == "(1.00, 2.50, -3.00)"


class TestObjectType:
    def test_combined_filter(self) -> None:
        loot = ObjectType.PLACEABLE | ObjectType.CREATURE
        assert loot & ObjectType.CREATURE
        assert not loot & ObjectType.DOOR
        assert int(loot) == 65

    def test_all_covers_every_category(self) -> None:
        for flag in (ObjectType.CREATURE, ObjectType.ITEM, ObjectType.TILE):
            assert ObjectType.ALL & flag


def test_behavior_values() -> None:
    assert Behavior("append") is Behavior.APPEND
    assert Behavior("delete") is Behavior.DELETE


class TestHookData:
    def test_empty_sentinel(self) -> None:
        assert EMPTY_HOOK.hook_id == 0
        assert EMPTY_HOOK.owner is None
        assert not EMPTY_HOOK.exists
        assert not EMPTY_HOOK.unlimited

    def test_from_row(self) -> None:
        owner = uuid4()
        row = TargetingHook(
            hook_id=7,
            owner_ref=owner,
            slot_name="npc",
            object_type_filter=int(ObjectType.CREATURE),
            uses_remaining=-1,
            callback="cb",
        )

        hook = HookData.from_row(row)

        assert hook.exists
        assert hook.unlimited
        assert hook.owner == owner
        assert hook.slot_name == "npc"
        assert hook.callback == "cb"


class TestTargetData:
    def test_empty_sentinel(self) -> None:
        assert not EMPTY_TARGET.exists
        assert EMPTY_TARGET.entity is None
        assert EMPTY_TARGET.region is None
        assert EMPTY_TARGET.position == ZERO_VECTOR

    def test_from_row(self) -> None:
        entity, region = uuid4(), uuid4()
        row = TargetingTarget(
            target_id=3,
            owner_ref=uuid4(),
            slot_name="loot",
            entity_ref=entity,
            region_ref=region,
            pos_x=1.0,
            pos_y=2.0,
            pos_z=3.0,
        )

        target = TargetData.from_row(row)

        assert target.exists
        assert target.entity == entity
        assert target.region == region
        assert target.position == Vector(x=1, y=2, z=3)
