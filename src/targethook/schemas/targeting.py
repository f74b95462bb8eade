"""Pydantic schemas and enums for targeting hooks.

Accessors return these snapshots instead of ORM rows so that callers never
hold a live database object across events. Missing rows map to the EMPTY_*
sentinels defined at the bottom of this module.
"""

from enum import Enum, IntFlag
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from targethook.db.models import TargetingHook, TargetingTarget

# Sentinel for hooks that never run out
UNLIMITED_USES = -1


class ObjectType(IntFlag):
    """Categories of world entity a hook lets the player select."""

    CREATURE = 1
    ITEM = 2
    TRIGGER = 4
    DOOR = 8
    AREA_OF_EFFECT = 16
    WAYPOINT = 32
    PLACEABLE = 64
    STORE = 128
    ENCOUNTER = 256
    TILE = 512
    ALL = 32767


class Behavior(str, Enum):
    """What a valid selection does to the slot's captured targets."""

    APPEND = "append"
    DELETE = "delete"


class Vector(BaseModel):
    """A position in world space."""

    model_config = ConfigDict(frozen=True)

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @property
    def is_zero(self) -> bool:
        return self.x == 0.0 and self.y == 0.0 and self.z == 0.0

    def __str__(self) -> str:
        return f"({self.x:.2f}, {self.y:.2f}, {self.z:.2f})"


ZERO_VECTOR = Vector()


class HookData(BaseModel):
    """Snapshot of a targeting hook row."""

    model_config = ConfigDict(frozen=True)

    hook_id: int = Field(default=0, description="0 when no hook exists")
    owner: UUID | None = None
    slot_name: str = ""
    object_type_filter: int = 0
    uses_remaining: int = 0
    callback: str = ""

    @property
    def exists(self) -> bool:
        return self.hook_id != 0

    @property
    def unlimited(self) -> bool:
        return self.uses_remaining == UNLIMITED_USES

    @classmethod
    def from_row(cls, row: TargetingHook) -> "HookData":
        return cls(
            hook_id=row.hook_id,
            owner=row.owner_ref,
            slot_name=row.slot_name,
            object_type_filter=row.object_type_filter,
            uses_remaining=row.uses_remaining,
            callback=row.callback,
        )


class TargetData(BaseModel):
    """Snapshot of one captured selection."""

    model_config = ConfigDict(frozen=True)

    target_id: int = Field(default=0, description="0 when no target exists")
    owner: UUID | None = None
    slot_name: str = ""
    entity: UUID | None = None
    region: UUID | None = None
    position: Vector = ZERO_VECTOR

    @property
    def exists(self) -> bool:
        return self.target_id != 0

    @classmethod
    def from_row(cls, row: TargetingTarget) -> "TargetData":
        return cls(
            target_id=row.target_id,
            owner=row.owner_ref,
            slot_name=row.slot_name,
            entity=row.entity_ref,
            region=row.region_ref,
            position=Vector(x=row.pos_x, y=row.pos_y, z=row.pos_z),
        )


EMPTY_HOOK = HookData()
EMPTY_TARGET = TargetData()
