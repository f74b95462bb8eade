"""Hook table operations: upsert, lookup, use counting and deletion."""

import logging
from typing import Any
from uuid import UUID

from sqlalchemy import case, delete, or_, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from targethook.db.models import TargetingHook
from targethook.schemas.targeting import EMPTY_HOOK, UNLIMITED_USES, HookData

logger = logging.getLogger(__name__)


class InvalidUsesError(ValueError):
    """Raised when a hook is registered with a use count it cannot honour."""


class UnsupportedDialectError(ValueError):
    """Raised when the configured database cannot express an upsert."""


def validate_uses(uses: int) -> None:
    """Reject use counts other than a positive number or the unlimited sentinel.

    Raises:
        InvalidUsesError: If uses is 0 or below -1
    """
    if uses == UNLIMITED_USES or uses > 0:
        return
    raise InvalidUsesError(
        f"uses must be a positive count or {UNLIMITED_USES} for unlimited, got {uses}"
    )


def upsert_insert(session: AsyncSession, table: Any) -> Any:  # noqa: ANN401
    """Return a dialect-specific INSERT that supports ON CONFLICT clauses.

    Raises:
        UnsupportedDialectError: If the bound database has no ON CONFLICT support
    """
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert(table)
    if dialect == "sqlite":
        return sqlite.insert(table)
    raise UnsupportedDialectError(f"Upsert is not supported on dialect '{dialect}'")


async def upsert_hook(
    session: AsyncSession,
    owner: UUID,
    slot_name: str,
    *,
    object_type_filter: int,
    callback: str = "",
    uses: int = 1,
) -> int:
    """Create or replace the hook for an (owner, slot) pair.

    An existing hook keeps its hook_id; its filter, uses and callback are
    overwritten. Captured targets for the slot are not touched.

    Args:
        session: Database session
        owner: Stable owner UUID
        slot_name: Slot the hook and its targets are filed under
        object_type_filter: Bitmask of selectable object types
        callback: Script to run when the hook terminates ("" for none)
        uses: Remaining selections, or -1 for unlimited

    Returns:
        The hook_id of the created or updated row

    Raises:
        InvalidUsesError: If uses is 0 or below -1
        ValueError: If slot_name is empty
    """
    validate_uses(uses)
    if not slot_name:
        raise ValueError("slot_name must not be empty")

    stmt = upsert_insert(session, TargetingHook).values(
        owner_ref=owner,
        slot_name=slot_name,
        object_type_filter=int(object_type_filter),
        uses_remaining=uses,
        callback=callback,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["owner_ref", "slot_name"],
        set_={
            "object_type_filter": stmt.excluded.object_type_filter,
            "uses_remaining": stmt.excluded.uses_remaining,
            "callback": stmt.excluded.callback,
        },
    ).returning(TargetingHook.hook_id)

    result = await session.execute(stmt)
    hook_id = result.scalar_one()
    await session.flush()

    logger.debug(
        "Upserted hook %d for %s/%s (filter=%d, uses=%d, callback=%r)",
        hook_id,
        owner,
        slot_name,
        int(object_type_filter),
        uses,
        callback,
    )
    return hook_id


async def get_hook(session: AsyncSession, hook_id: int) -> HookData:
    """Get a hook by its ID.

    Returns:
        Hook snapshot, or EMPTY_HOOK if no such hook exists
    """
    result = await session.execute(select(TargetingHook).where(TargetingHook.hook_id == hook_id))
    row = result.scalar_one_or_none()
    return HookData.from_row(row) if row else EMPTY_HOOK


async def get_hook_by_slot(session: AsyncSession, owner: UUID, slot_name: str) -> HookData:
    """Get the hook registered for an (owner, slot) pair.

    Returns:
        Hook snapshot, or EMPTY_HOOK if no such hook exists
    """
    result = await session.execute(
        select(TargetingHook).where(
            TargetingHook.owner_ref == owner, TargetingHook.slot_name == slot_name
        )
    )
    row = result.scalar_one_or_none()
    return HookData.from_row(row) if row else EMPTY_HOOK


async def consume_use(session: AsyncSession, hook_id: int) -> int | None:
    """Spend one use of a hook that has more than one left.

    The decrement happens in a single UPDATE, so concurrent selections
    against the same hook each take their own use. Unlimited hooks match
    and stay unlimited.

    Returns:
        The remaining-use count after this selection, or None if the hook is
        gone or this was its last use
    """
    stmt = (
        update(TargetingHook)
        .where(
            TargetingHook.hook_id == hook_id,
            or_(
                TargetingHook.uses_remaining == UNLIMITED_USES,
                TargetingHook.uses_remaining > 1,
            ),
        )
        .values(
            uses_remaining=case(
                (TargetingHook.uses_remaining == UNLIMITED_USES, UNLIMITED_USES),
                else_=TargetingHook.uses_remaining - 1,
            )
        )
        .returning(TargetingHook.uses_remaining)
    )
    result = await session.execute(stmt)
    await session.flush()
    return result.scalar_one_or_none()


async def delete_hook_row(session: AsyncSession, hook_id: int) -> HookData:
    """Delete a hook row, leaving its captured targets in place.

    Only the caller whose DELETE removed the row gets a snapshot back, so a
    hook is terminated at most once even when deletions race.

    Returns:
        Snapshot of the deleted hook, or EMPTY_HOOK if it did not exist
    """
    stmt = delete(TargetingHook).where(TargetingHook.hook_id == hook_id).returning(TargetingHook)
    result = await session.execute(stmt)
    row = result.scalar_one_or_none()
    await session.flush()
    return HookData.from_row(row) if row else EMPTY_HOOK


async def list_hooks(
    session: AsyncSession,
    *,
    owner: UUID | None = None,
    limit: int = 100,
) -> list[HookData]:
    """List hooks, optionally filtered by owner.

    Args:
        session: Database session
        owner: Optional owner UUID to filter by
        limit: Maximum number of hooks to return

    Returns:
        Hook snapshots ordered by hook_id
    """
    stmt = select(TargetingHook)

    if owner is not None:
        stmt = stmt.where(TargetingHook.owner_ref == owner)

    stmt = stmt.order_by(TargetingHook.hook_id).limit(limit)

    result = await session.execute(stmt)
    return [HookData.from_row(row) for row in result.scalars().all()]
