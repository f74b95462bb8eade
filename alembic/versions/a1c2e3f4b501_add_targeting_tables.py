"""Add targeting_hooks and targeting_targets tables.

Revision ID: a1c2e3f4b501
Revises:
Create Date: 2026-10-19

Adds the durable targeting registry:
- targeting_hooks: one row per active (owner, slot) hook
- targeting_targets: captured selections, grouped by (owner, slot)
"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "a1c2e3f4b501"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "targeting_hooks",
        sa.Column("hook_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("owner_ref", sa.Uuid(), nullable=False),
        sa.Column("slot_name", sa.String(256), nullable=False),
        sa.Column("object_type_filter", sa.Integer(), nullable=False),
        sa.Column("uses_remaining", sa.Integer(), server_default="1", nullable=False),
        sa.Column("callback", sa.Text(), server_default="", nullable=False),
        sa.PrimaryKeyConstraint("hook_id"),
        sa.UniqueConstraint("owner_ref", "slot_name", name="uq_targeting_hooks_owner_slot"),
        sqlite_autoincrement=True,
    )

    op.create_table(
        "targeting_targets",
        sa.Column("target_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("owner_ref", sa.Uuid(), nullable=False),
        sa.Column("slot_name", sa.String(256), nullable=False),
        sa.Column("entity_ref", sa.Uuid(), nullable=True),
        sa.Column("region_ref", sa.Uuid(), nullable=True),
        sa.Column("pos_x", sa.Float(), nullable=False),
        sa.Column("pos_y", sa.Float(), nullable=False),
        sa.Column("pos_z", sa.Float(), nullable=False),
        sa.PrimaryKeyConstraint("target_id"),
        sqlite_autoincrement=True,
    )
    op.create_index(
        "idx_targeting_targets_owner_slot", "targeting_targets", ["owner_ref", "slot_name"]
    )
    op.create_index("idx_targeting_targets_entity", "targeting_targets", ["entity_ref"])


def downgrade() -> None:
    op.drop_index("idx_targeting_targets_entity", table_name="targeting_targets")
    op.drop_index("idx_targeting_targets_owner_slot", table_name="targeting_targets")
    op.drop_table("targeting_targets")
    op.drop_table("targeting_hooks")
