"""Host engine interface used by the targeting engine.

The game server implements this to let the registry talk to live player
sessions. Owners are always passed as stable UUIDs; the host resolves them to
whatever in-memory object backs the player right now.
"""

from abc import ABC, abstractmethod
from typing import Any
from uuid import UUID


class Host(ABC):
    """Abstract bridge to the game server."""

    @abstractmethod
    def resolve_session(self, owner: UUID) -> Any | None:  # noqa: ANN401
        """Return the live session for an owner, or None if they are gone."""
        ...

    @abstractmethod
    def enter_targeting_mode(self, owner: UUID, object_type_filter: int) -> None:
        """Put the owner's client into target selection mode."""
        ...

    @abstractmethod
    def exit_targeting_mode(self, owner: UUID) -> None:
        """Take the owner's client out of target selection mode, if it is in it."""
        ...

    @abstractmethod
    def region_of(self, ref: UUID) -> UUID | None:
        """Return the region (area) an entity is currently in.

        A region is its own region, which is how region-level targets are
        recognised.
        """
        ...

    @abstractmethod
    async def run_script(self, callback: str, owner: UUID) -> None:
        """Run a registered script with the owner as its caller."""
        ...
