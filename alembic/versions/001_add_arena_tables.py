"""Add arena snapshot and progression tables.

Revision ID: 001_arena
Revises:
Create Date: 2026-10-19

This migration adds:
- arena_snapshots: one camelCase JSON document per (player, category)
- defeated_bosses: permanent boss defeats recorded outside the arena
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "001_arena"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Arena Snapshots
    op.create_table(
        "arena_snapshots",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("player_id", sa.BigInteger(), nullable=False, index=True),
        sa.Column("category", sa.String(20), nullable=False, comment="PLAYER or PROGRESSION"),
        sa.Column("schema_version", sa.Integer(), nullable=False),
        sa.Column("captured_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("document", sa.JSON(), nullable=False, comment="Snapshot document as camelCase JSON"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        "ix_arena_snapshots_player_category",
        "arena_snapshots",
        ["player_id", "category"],
        unique=True,
    )

    # Defeated Bosses
    op.create_table(
        "defeated_bosses",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("player_id", sa.BigInteger(), nullable=False, index=True),
        sa.Column("boss_id", sa.BigInteger(), nullable=False),
        sa.Column("defeated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        "ix_defeated_bosses_player_boss",
        "defeated_bosses",
        ["player_id", "boss_id"],
        unique=True,
    )


def downgrade() -> None:
    op.drop_index("ix_defeated_bosses_player_boss", table_name="defeated_bosses")
    op.drop_table("defeated_bosses")
    op.drop_index("ix_arena_snapshots_player_category", table_name="arena_snapshots")
    op.drop_table("arena_snapshots")
