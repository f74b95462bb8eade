"""Targeting hook lifecycle engine.

Drives the per-hook state machine:

    ARMED(N > 0) --valid--> ARMED(N - 1) or TERMINATED when N - 1 == 0
    ARMED(-1)    --valid--> ARMED(-1)
    ARMED(any)   --invalid--> TERMINATED

A selection is invalid when it carries neither an entity nor a position; the
host reports a cancelled selection that way. Terminating a hook deletes its
row and runs its callback once. Captured targets are left in place so the
callback can read them.

Every event runs inside one database transaction. Use counting and hook
deletion are single conditional statements (UPDATE or DELETE ... RETURNING),
so concurrent events on one hook neither lose a use nor terminate it twice.
Callbacks run after commit.
"""

import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from targethook.config import get_settings
from targethook.host import Host
from targethook.schemas.targeting import ZERO_VECTOR, Behavior, HookData, Vector
from targethook.services.hooks import (
    consume_use,
    delete_hook_row,
    get_hook,
    get_hook_by_slot,
    upsert_hook,
    validate_uses,
)
from targethook.services.targets import add_target, delete_target, find_target_by_entity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActiveCapture:
    """The hook an owner is currently selecting for."""

    hook_id: int
    behavior: Behavior


class TargetingEngine:
    """Creates, drives and deletes targeting hooks.

    Hook and target state lives in the database behind ``sessions``. The only
    in-process state is which hook each owner is selecting for right now,
    which mirrors the host's capture mode and is lost with it.
    """

    def __init__(self, sessions: async_sessionmaker[AsyncSession], host: Host) -> None:
        self.sessions = sessions
        self.host = host
        self._captures: dict[UUID, ActiveCapture] = {}

    def active_capture(self, owner: UUID) -> ActiveCapture | None:
        """Return the capture an owner is in, if any."""
        return self._captures.get(owner)

    async def add_hook(
        self,
        owner: UUID,
        slot_name: str,
        object_type_filter: int | None = None,
        callback: str = "",
        uses: int = 1,
    ) -> int:
        """Register (or replace) the hook for an (owner, slot) pair.

        Does not put the owner into targeting mode; call
        enter_targeting_mode() for that.

        Args:
            owner: Stable owner UUID
            slot_name: Slot to capture targets into
            object_type_filter: Selectable object types (defaults to the
                configured filter, normally ObjectType.ALL)
            callback: Script to run when the hook terminates
            uses: Number of selections to accept, or -1 for unlimited

        Returns:
            The hook_id

        Raises:
            InvalidUsesError: If uses is 0 or below -1
        """
        validate_uses(uses)
        if object_type_filter is None:
            object_type_filter = get_settings().default_object_type_filter

        async with self.sessions() as session, session.begin():
            return await upsert_hook(
                session,
                owner,
                slot_name,
                object_type_filter=object_type_filter,
                callback=callback,
                uses=uses,
            )

    async def enter_targeting_mode(
        self, hook_id: int, behavior: Behavior = Behavior.APPEND
    ) -> bool:
        """Put a hook's owner into targeting mode.

        Returns:
            True if the owner is now selecting, False if the hook is gone or
            the owner is not online
        """
        async with self.sessions() as session:
            hook = await get_hook(session, hook_id)
        return self._arm(hook, behavior)

    async def enter_targeting_mode_by_slot(
        self, owner: UUID, slot_name: str, behavior: Behavior = Behavior.APPEND
    ) -> bool:
        """Put an owner into targeting mode for one of their slots."""
        async with self.sessions() as session:
            hook = await get_hook_by_slot(session, owner, slot_name)
        return self._arm(hook, behavior)

    def _arm(self, hook: HookData, behavior: Behavior) -> bool:
        if not hook.exists or hook.owner is None:
            logger.debug("No hook to arm")
            return False
        if self.host.resolve_session(hook.owner) is None:
            logger.debug("Owner %s of hook %d is not online", hook.owner, hook.hook_id)
            return False

        self.host.enter_targeting_mode(hook.owner, hook.object_type_filter)
        self._captures[hook.owner] = ActiveCapture(hook.hook_id, behavior)
        logger.debug(
            "Armed hook %d for %s/%s (%s, uses=%d)",
            hook.hook_id,
            hook.owner,
            hook.slot_name,
            behavior.value,
            hook.uses_remaining,
        )
        return True

    async def on_selection_produced(
        self,
        owner: UUID,
        entity: UUID | None = None,
        position: Vector = ZERO_VECTOR,
    ) -> bool:
        """Handle a selection (or cancellation) reported by the host.

        Args:
            owner: Owner UUID the selection came from
            entity: Selected entity, or None for a ground selection/cancel
            position: Selected position, the zero vector meaning none

        Returns:
            True if the selection was handled by an active hook
        """
        capture = self._captures.pop(owner, None)
        if capture is None:
            return False
        if self.host.resolve_session(owner) is None:
            logger.debug("Dropping selection from offline owner %s", owner)
            return False

        rearm: HookData | None = None
        terminated: HookData | None = None

        async with self.sessions() as session, session.begin():
            hook = await get_hook(session, capture.hook_id)
            if not hook.exists or hook.owner is None:
                logger.debug("Hook %d vanished before selection from %s", capture.hook_id, owner)
                return False

            if entity is None and position.is_zero:
                terminated = await delete_hook_row(session, hook.hook_id)
                if not terminated.exists:
                    logger.debug("Hook %d deleted concurrently", hook.hook_id)
                    return False
                logger.info(
                    "Selection cancelled for hook %d (%s/%s)", hook.hook_id, owner, hook.slot_name
                )
            else:
                remaining = await consume_use(session, hook.hook_id)
                if remaining is None:
                    terminated = await delete_hook_row(session, hook.hook_id)
                    if not terminated.exists:
                        logger.debug("Hook %d deleted concurrently", hook.hook_id)
                        return False
                    logger.info("Hook %d (%s/%s) used up", hook.hook_id, owner, hook.slot_name)
                else:
                    rearm = hook.model_copy(update={"uses_remaining": remaining})

                if capture.behavior is Behavior.APPEND:
                    await self._append(session, hook.owner, hook.slot_name, entity, position)
                else:
                    await self._remove(session, hook.owner, hook.slot_name, entity)

        if terminated is not None:
            await self._finish(terminated)
        elif rearm is not None:
            self._arm(rearm, capture.behavior)
        return True

    async def _append(
        self,
        session: AsyncSession,
        owner: UUID,
        slot_name: str,
        entity: UUID | None,
        position: Vector,
    ) -> None:
        # Ground selections are filed under the region the owner stands in
        region = self.host.region_of(entity if entity is not None else owner)
        await add_target(
            session,
            owner,
            slot_name,
            entity=entity,
            region=region,
            position=position,
        )

    async def _remove(
        self, session: AsyncSession, owner: UUID, slot_name: str, entity: UUID | None
    ) -> None:
        if entity is None:
            logger.debug("Ground selection cannot remove a target from %s", slot_name)
            return
        if self.host.region_of(entity) == entity:
            logger.debug("Region %s cannot be removed from %s", entity, slot_name)
            return

        target = await find_target_by_entity(session, owner, slot_name, entity)
        if not target.exists:
            logger.debug("Entity %s is not captured in %s", entity, slot_name)
            return
        await delete_target(session, target.target_id)
        logger.debug("Removed target %d from %s", target.target_id, slot_name)

    async def delete_hook(self, hook_id: int) -> bool:
        """Delete a hook, clear its owner's capture mode and run its callback.

        Captured targets are kept.

        Returns:
            True if the hook existed
        """
        async with self.sessions() as session, session.begin():
            hook = await delete_hook_row(session, hook_id)
        if not hook.exists:
            return False
        await self._finish(hook)
        return True

    async def delete_hook_by_slot(self, owner: UUID, slot_name: str) -> bool:
        """Delete the hook registered for an (owner, slot) pair."""
        async with self.sessions() as session:
            hook = await get_hook_by_slot(session, owner, slot_name)
        if not hook.exists:
            return False
        return await self.delete_hook(hook.hook_id)

    async def _finish(self, hook: HookData) -> None:
        """Clear capture markers for a deleted hook and run its callback."""
        owner = hook.owner
        if owner is None:
            return
        capture = self._captures.get(owner)
        if capture is not None and capture.hook_id == hook.hook_id:
            del self._captures[owner]
            if self.host.resolve_session(owner) is not None:
                self.host.exit_targeting_mode(owner)

        if not hook.callback:
            return
        try:
            await self.host.run_script(hook.callback, owner)
        except Exception:
            logger.exception(
                "Callback %r failed for hook %d (%s/%s)",
                hook.callback,
                hook.hook_id,
                hook.owner,
                hook.slot_name,
            )
