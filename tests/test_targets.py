"""Tests for captured target accessors."""

from uuid import UUID, uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from targethook.schemas.targeting import EMPTY_TARGET, ZERO_VECTOR, Vector
from targethook.services.targets import (
    SlotTargets,
    add_target,
    clear_targets,
    count_targets,
    delete_target,
    find_target_by_entity,
    get_target,
    get_target_by_id,
    get_target_entity,
    get_target_position,
    get_target_region,
    iter_targets,
    list_targets,
)


@pytest.fixture
def owner() -> UUID:
    return uuid4()


async def _capture(session: AsyncSession, owner: UUID, slot: str, n: int) -> list[UUID]:
    entities = []
    for i in range(n):
        entity = uuid4()
        await add_target(
            session, owner, slot, entity=entity, region=None, position=Vector(x=i, y=i * 2)
        )
        entities.append(entity)
    return entities


async def test_add_and_count(db_session: AsyncSession, owner: UUID) -> None:
    assert await count_targets(db_session, owner, "loot") == 0

    target_id = await add_target(
        db_session,
        owner,
        "loot",
        entity=uuid4(),
        region=uuid4(),
        position=Vector(x=1.5, y=2.5, z=0.25),
    )

    assert target_id > 0
    assert await count_targets(db_session, owner, "loot") == 1
    assert await count_targets(db_session, owner, "other") == 0
    assert await count_targets(db_session, uuid4(), "loot") == 0


async def test_duplicates_are_allowed(db_session: AsyncSession, owner: UUID) -> None:
    entity = uuid4()
    first = await add_target(db_session, owner, "s", entity=entity, region=None)
    second = await add_target(db_session, owner, "s", entity=entity, region=None)

    assert first != second
    assert await count_targets(db_session, owner, "s") == 2


async def test_get_target_honours_index(db_session: AsyncSession, owner: UUID) -> None:
    """Each index returns its own capture, not a fixed offset."""
    entities = await _capture(db_session, owner, "s", 3)

    for index, entity in enumerate(entities):
        target = await get_target(db_session, owner, "s", index)
        assert target.entity == entity
        assert target.position == Vector(x=index, y=index * 2)


async def test_get_target_out_of_range(db_session: AsyncSession, owner: UUID) -> None:
    await _capture(db_session, owner, "s", 2)

    assert await get_target(db_session, owner, "s", 2) == EMPTY_TARGET
    assert await get_target(db_session, owner, "s", -1) == EMPTY_TARGET
    assert await get_target(db_session, owner, "missing", 0) == EMPTY_TARGET


async def test_field_accessors(db_session: AsyncSession, owner: UUID) -> None:
    entity, region = uuid4(), uuid4()
    await add_target(
        db_session, owner, "s", entity=entity, region=region, position=Vector(x=3, y=4, z=5)
    )

    assert await get_target_entity(db_session, owner, "s", 0) == entity
    assert await get_target_region(db_session, owner, "s", 0) == region
    assert await get_target_position(db_session, owner, "s", 0) == Vector(x=3, y=4, z=5)


async def test_field_accessors_on_missing_target(db_session: AsyncSession, owner: UUID) -> None:
    assert await get_target_entity(db_session, owner, "s", 5) is None
    assert await get_target_region(db_session, owner, "s", 5) is None
    assert await get_target_position(db_session, owner, "s", 5) == ZERO_VECTOR


async def test_get_target_by_id(db_session: AsyncSession, owner: UUID) -> None:
    entity = uuid4()
    target_id = await add_target(db_session, owner, "s", entity=entity, region=None)

    target = await get_target_by_id(db_session, target_id)
    assert target.target_id == target_id
    assert target.entity == entity
    assert await get_target_by_id(db_session, target_id + 100) == EMPTY_TARGET


async def test_iteration_is_ordered_and_restartable(db_session: AsyncSession, owner: UUID) -> None:
    entities = await _capture(db_session, owner, "s", 5)

    view = iter_targets(db_session, owner, "s")
    assert isinstance(view, SlotTargets)

    first_pass = [t.entity async for t in view]
    second_pass = [t.entity async for t in view]
    assert first_pass == entities
    assert second_pass == entities


async def test_iteration_spans_batches(db_session: AsyncSession, owner: UUID) -> None:
    entities = await _capture(db_session, owner, "s", 7)

    view = SlotTargets(db_session, owner, "s", batch_size=3)

    assert [t.entity async for t in view] == entities


@pytest.mark.parametrize("batch_size", [0, -1])
async def test_iteration_rejects_empty_batches(
    db_session: AsyncSession, owner: UUID, batch_size: int
) -> None:
    with pytest.raises(ValueError, match="batch_size"):
        SlotTargets(db_session, owner, "s", batch_size=batch_size)


async def test_iteration_with_single_row_batches(db_session: AsyncSession, owner: UUID) -> None:
    entities = await _capture(db_session, owner, "s", 3)

    assert [t.entity async for t in SlotTargets(db_session, owner, "s", batch_size=1)] == entities


async def test_iteration_sees_changes(db_session: AsyncSession, owner: UUID) -> None:
    await _capture(db_session, owner, "s", 2)
    view = iter_targets(db_session, owner, "s")

    assert len([t async for t in view]) == 2
    await _capture(db_session, owner, "s", 1)
    assert len([t async for t in view]) == 3


async def test_list_targets_empty_slot(db_session: AsyncSession, owner: UUID) -> None:
    assert await list_targets(db_session, owner, "nothing") == []


async def test_find_target_by_entity(db_session: AsyncSession, owner: UUID) -> None:
    entity = uuid4()
    first = await add_target(db_session, owner, "s", entity=entity, region=None)
    await add_target(db_session, owner, "s", entity=entity, region=None)
    await add_target(db_session, owner, "other", entity=entity, region=None)

    found = await find_target_by_entity(db_session, owner, "s", entity)
    assert found.target_id == first

    assert await find_target_by_entity(db_session, owner, "s", uuid4()) == EMPTY_TARGET


async def test_delete_target(db_session: AsyncSession, owner: UUID) -> None:
    """Deleting a target leaves a gap in IDs but not in indexes."""
    entities = await _capture(db_session, owner, "s", 3)
    middle = await get_target(db_session, owner, "s", 1)

    assert await delete_target(db_session, middle.target_id) is True
    assert await delete_target(db_session, middle.target_id) is False

    assert await count_targets(db_session, owner, "s") == 2
    assert (await get_target(db_session, owner, "s", 1)).entity == entities[2]


async def test_clear_targets(db_session: AsyncSession, owner: UUID) -> None:
    await _capture(db_session, owner, "s", 4)
    await _capture(db_session, owner, "keep", 1)

    assert await clear_targets(db_session, owner, "s") == 4
    assert await count_targets(db_session, owner, "s") == 0
    assert await count_targets(db_session, owner, "keep") == 1
    assert await clear_targets(db_session, owner, "s") == 0
