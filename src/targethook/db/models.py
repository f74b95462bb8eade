"""SQLAlchemy models for targethook."""

from uuid import UUID

from sqlalchemy import Float, Index, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""


class TargetingHook(Base):
    """An active targeting hook for one (owner, slot) pair."""

    __tablename__ = "targeting_hooks"

    hook_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_ref: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    slot_name: Mapped[str] = mapped_column(String(256), nullable=False)
    object_type_filter: Mapped[int] = mapped_column(Integer, nullable=False)
    # -1 means unlimited; a hook that reaches 0 is deleted instead of stored
    uses_remaining: Mapped[int] = mapped_column(
        Integer, nullable=False, default=1, server_default="1"
    )
    callback: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default="")

    __table_args__ = (
        UniqueConstraint("owner_ref", "slot_name", name="uq_targeting_hooks_owner_slot"),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self) -> str:
        return (
            f"<TargetingHook {self.hook_id} owner={self.owner_ref} "
            f"slot={self.slot_name!r} uses={self.uses_remaining}>"
        )


class TargetingTarget(Base):
    """A selection captured for an (owner, slot) pair.

    Rows are written once and never updated; they outlive the hook that
    produced them.
    """

    __tablename__ = "targeting_targets"

    target_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_ref: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    slot_name: Mapped[str] = mapped_column(String(256), nullable=False)
    entity_ref: Mapped[UUID | None] = mapped_column(Uuid, nullable=True)
    region_ref: Mapped[UUID | None] = mapped_column(Uuid, nullable=True)

    # Position snapshot at selection time
    pos_x: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    pos_y: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    pos_z: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    __table_args__ = (
        Index("idx_targeting_targets_owner_slot", "owner_ref", "slot_name"),
        Index("idx_targeting_targets_entity", "entity_ref"),
        {"sqlite_autoincrement": True},
    )
