"""Create platforms and wells tables.

Revision ID: 0001_initial_create
Revises:
Create Date: 2025-08-01 03:46:50
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

from wellsync.adapters.sqlalchemy.mappings import UTCDateTime

revision: str = "0001_initial_create"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "platforms",
        sa.Column("id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.Column("updated_at", UTCDateTime(), nullable=False),
        sa.Column("last_reconciled_at", UTCDateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_platforms")),
    )
    with op.batch_alter_table("platforms", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_platforms_name"), ["name"], unique=False)
        batch_op.create_index(
            batch_op.f("ix_platforms_last_reconciled_at"), ["last_reconciled_at"], unique=False
        )

    op.create_table(
        "wells",
        sa.Column("id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("platform_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.Column("updated_at", UTCDateTime(), nullable=False),
        sa.Column("last_reconciled_at", UTCDateTime(), nullable=True),
        sa.ForeignKeyConstraint(
            ["platform_id"],
            ["platforms.id"],
            name=op.f("fk_wells_wells_platform_id_platforms"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_wells")),
    )
    with op.batch_alter_table("wells", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_wells_platform_id"), ["platform_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_wells_name"), ["name"], unique=False)
        batch_op.create_index(
            batch_op.f("ix_wells_last_reconciled_at"), ["last_reconciled_at"], unique=False
        )


def downgrade() -> None:
    with op.batch_alter_table("wells", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix_wells_last_reconciled_at"))
        batch_op.drop_index(batch_op.f("ix_wells_name"))
        batch_op.drop_index(batch_op.f("ix_wells_platform_id"))
    op.drop_table("wells")

    with op.batch_alter_table("platforms", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix_platforms_last_reconciled_at"))
        batch_op.drop_index(batch_op.f("ix_platforms_name"))
    op.drop_table("platforms")
