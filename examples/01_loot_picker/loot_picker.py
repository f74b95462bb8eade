#!/usr/bin/env python3
"""
Example: Loot Picker
====================

Demonstrates a two-use targeting hook driven by a toy in-process host.
The player picks a creature and a chest; once both are captured the hook
terminates and its callback reads the captured slot.

Features showcased:
- Register a hook with an object-type filter and a use count
- Enter targeting mode and feed selections to the engine
- Read captured targets after the hook has finished
- Cancel an unlimited hook with an empty selection

Usage:
    uv run python examples/01_loot_picker/loot_picker.py
"""

import asyncio
import logging
from uuid import UUID, uuid4

from dotenv import load_dotenv
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from targethook.db.engine import create_engine_from_settings, init_db, make_sessionmaker
from targethook.engine import TargetingEngine
from targethook.host import Host
from targethook.schemas.targeting import ZERO_VECTOR, ObjectType, Vector
from targethook.services.targets import clear_targets, list_targets

# Load environment variables from .env file
load_dotenv()

logging.basicConfig(level=logging.INFO, format="%(levelname)-8s %(name)s: %(message)s")


class ToyHost(Host):
    """Minimal host: one area, everyone online, scripts print their slot."""

    def __init__(self, sessions: async_sessionmaker[AsyncSession]) -> None:
        self.area = uuid4()
        self.locations: dict[UUID, UUID] = {self.area: self.area}
        self.players: set[UUID] = set()
        self.sessions = sessions

    def spawn(self) -> UUID:
        ref = uuid4()
        self.locations[ref] = self.area
        return ref

    def resolve_session(self, owner: UUID) -> UUID | None:
        return owner if owner in self.players else None

    def enter_targeting_mode(self, owner: UUID, object_type_filter: int) -> None:
        print(f"  [host] {owner} is targeting {ObjectType(object_type_filter)!r}")

    def exit_targeting_mode(self, owner: UUID) -> None:
        print(f"  [host] {owner} left targeting mode")

    def region_of(self, ref: UUID) -> UUID | None:
        return self.locations.get(ref)

    async def run_script(self, callback: str, owner: UUID) -> None:
        async with self.sessions() as session:
            targets = await list_targets(session, owner, callback)
        print(f"  [script:{callback}] {len(targets)} target(s) captured")
        for index, target in enumerate(targets):
            print(f"    {index}: entity={target.entity} at {target.position}")


async def main() -> None:
    db = create_engine_from_settings("sqlite+aiosqlite://")
    await init_db(db)
    sessions = make_sessionmaker(db)

    host = ToyHost(sessions)
    engine = TargetingEngine(sessions, host)

    player = host.spawn()
    host.players.add(player)

    print("\n=== Two-use loot hook ===")
    # The callback name doubles as the slot it reports on in this toy host
    hook_id = await engine.add_hook(
        player, "loot", ObjectType.CREATURE | ObjectType.PLACEABLE, callback="loot", uses=2
    )
    await engine.enter_targeting_mode(hook_id)
    await engine.on_selection_produced(player, host.spawn(), Vector(x=4.0, y=7.5))
    await engine.on_selection_produced(player, host.spawn(), Vector(x=5.0, y=7.0))

    print("\n=== Unlimited hook, cancelled by the player ===")
    hook_id = await engine.add_hook(player, "npc", ObjectType.CREATURE, callback="npc", uses=-1)
    await engine.enter_targeting_mode(hook_id)
    for x in range(3):
        await engine.on_selection_produced(player, host.spawn(), Vector(x=float(x)))
    await engine.on_selection_produced(player, None, ZERO_VECTOR)

    async with sessions() as session, session.begin():
        await clear_targets(session, player, "loot")
        await clear_targets(session, player, "npc")

    await db.dispose()


if __name__ == "__main__":
    asyncio.run(main())
