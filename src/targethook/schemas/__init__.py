"""Schemas for targethook data models."""

from targethook.schemas.targeting import (
    EMPTY_HOOK,
    EMPTY_TARGET,
    UNLIMITED_USES,
    ZERO_VECTOR,
    Behavior,
    HookData,
    ObjectType,
    TargetData,
    Vector,
)

__all__ = [
    "EMPTY_HOOK",
    "EMPTY_TARGET",
    "UNLIMITED_USES",
    "ZERO_VECTOR",
    "Behavior",
    "HookData",
    "ObjectType",
    "TargetData",
    "Vector",
]
