"""Captured target operations for targeting slots.

Targets are addressed either by their surrogate target_id or by
(owner, slot_name, index), where index is a 0-based offset into capture
order. Capture order is target_id order; ids need not be contiguous once
rows have been deleted.
"""

import logging
from collections.abc import AsyncIterator
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from targethook.db.models import TargetingTarget
from targethook.schemas.targeting import EMPTY_TARGET, ZERO_VECTOR, TargetData, Vector

logger = logging.getLogger(__name__)


def _slot_filter(owner: UUID, slot_name: str) -> tuple:
    return (TargetingTarget.owner_ref == owner, TargetingTarget.slot_name == slot_name)


async def add_target(
    session: AsyncSession,
    owner: UUID,
    slot_name: str,
    *,
    entity: UUID | None,
    region: UUID | None,
    position: Vector = ZERO_VECTOR,
) -> int:
    """Append a captured selection to a slot.

    Duplicates are allowed; selecting the same entity twice stores two rows.

    Returns:
        The target_id of the new row
    """
    target = TargetingTarget(
        owner_ref=owner,
        slot_name=slot_name,
        entity_ref=entity,
        region_ref=region,
        pos_x=position.x,
        pos_y=position.y,
        pos_z=position.z,
    )
    session.add(target)
    await session.flush()
    logger.debug(
        "Captured target %d for %s/%s: entity=%s region=%s at %s",
        target.target_id,
        owner,
        slot_name,
        entity,
        region,
        position,
    )
    return target.target_id


async def count_targets(session: AsyncSession, owner: UUID, slot_name: str) -> int:
    """Count captured targets in a slot (0 for an unknown slot)."""
    result = await session.execute(
        select(func.count()).select_from(TargetingTarget).where(*_slot_filter(owner, slot_name))
    )
    return result.scalar_one()


async def get_target(session: AsyncSession, owner: UUID, slot_name: str, index: int) -> TargetData:
    """Get the index-th captured target of a slot.

    Args:
        session: Database session
        owner: Owner UUID
        slot_name: Slot name
        index: 0-based position in capture order

    Returns:
        Target snapshot, or EMPTY_TARGET if index is out of range
    """
    if index < 0:
        return EMPTY_TARGET

    stmt = (
        select(TargetingTarget)
        .where(*_slot_filter(owner, slot_name))
        .order_by(TargetingTarget.target_id)
        .offset(index)
        .limit(1)
    )
    result = await session.execute(stmt)
    row = result.scalar_one_or_none()
    return TargetData.from_row(row) if row else EMPTY_TARGET


async def get_target_entity(
    session: AsyncSession, owner: UUID, slot_name: str, index: int
) -> UUID | None:
    """Get the entity of the index-th captured target, or None."""
    return (await get_target(session, owner, slot_name, index)).entity


async def get_target_region(
    session: AsyncSession, owner: UUID, slot_name: str, index: int
) -> UUID | None:
    """Get the region the index-th captured target was in, or None."""
    return (await get_target(session, owner, slot_name, index)).region


async def get_target_position(
    session: AsyncSession, owner: UUID, slot_name: str, index: int
) -> Vector:
    """Get the captured position of the index-th target, or the zero vector."""
    return (await get_target(session, owner, slot_name, index)).position


async def get_target_by_id(session: AsyncSession, target_id: int) -> TargetData:
    """Get a captured target by its surrogate ID."""
    row = await session.get(TargetingTarget, target_id)
    return TargetData.from_row(row) if row else EMPTY_TARGET


class SlotTargets:
    """Lazy view over a slot's captured targets in capture order.

    Each ``async for`` re-queries the database in keyset-paginated batches, so
    iterating twice replays the same rows unless the slot changed in between.
    """

    def __init__(
        self,
        session: AsyncSession,
        owner: UUID,
        slot_name: str,
        *,
        batch_size: int = 50,
    ) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")
        self.session = session
        self.owner = owner
        self.slot_name = slot_name
        self.batch_size = batch_size

    def __aiter__(self) -> AsyncIterator[TargetData]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[TargetData]:
        last_id = 0
        while True:
            stmt = (
                select(TargetingTarget)
                .where(
                    *_slot_filter(self.owner, self.slot_name),
                    TargetingTarget.target_id > last_id,
                )
                .order_by(TargetingTarget.target_id)
                .limit(self.batch_size)
            )
            result = await self.session.execute(stmt)
            rows = result.scalars().all()
            for row in rows:
                yield TargetData.from_row(row)
            if len(rows) < self.batch_size:
                return
            last_id = rows[-1].target_id


def iter_targets(session: AsyncSession, owner: UUID, slot_name: str) -> SlotTargets:
    """Return a lazy, restartable sequence of a slot's captured targets."""
    return SlotTargets(session, owner, slot_name)


async def list_targets(session: AsyncSession, owner: UUID, slot_name: str) -> list[TargetData]:
    """Get all captured targets of a slot in capture order."""
    return [target async for target in iter_targets(session, owner, slot_name)]


async def find_target_by_entity(
    session: AsyncSession, owner: UUID, slot_name: str, entity: UUID
) -> TargetData:
    """Find a captured target in a slot by exact entity match.

    When the same entity was captured more than once, the earliest capture
    (lowest target_id) is returned.

    Returns:
        Target snapshot, or EMPTY_TARGET if the entity is not in the slot
    """
    stmt = (
        select(TargetingTarget)
        .where(*_slot_filter(owner, slot_name), TargetingTarget.entity_ref == entity)
        .order_by(TargetingTarget.target_id)
        .limit(1)
    )
    result = await session.execute(stmt)
    row = result.scalar_one_or_none()
    return TargetData.from_row(row) if row else EMPTY_TARGET


async def delete_target(session: AsyncSession, target_id: int) -> bool:
    """Delete one captured target by ID.

    Returns:
        True if the target existed and was deleted, False otherwise
    """
    stmt = (
        delete(TargetingTarget)
        .where(TargetingTarget.target_id == target_id)
        .returning(TargetingTarget.target_id)
    )
    result = await session.execute(stmt)
    await session.flush()
    return result.scalar_one_or_none() is not None


async def clear_targets(session: AsyncSession, owner: UUID, slot_name: str) -> int:
    """Delete every captured target of a slot.

    Returns:
        Number of targets deleted
    """
    stmt = (
        delete(TargetingTarget)
        .where(*_slot_filter(owner, slot_name))
        .returning(TargetingTarget.target_id)
    )
    result = await session.execute(stmt)
    deleted = len(result.scalars().all())
    await session.flush()
    if deleted:
        logger.info("Cleared %d targets from %s/%s", deleted, owner, slot_name)
    return deleted
