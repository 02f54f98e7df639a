"""add lifecycle and counter columns to tags, comments and items

Revision ID: 0004
Revises: 0001
"""

from __future__ import annotations

import sqlalchemy as sa

from hedge.migrations.operations import SchemaOperations

revision: str = "0004"
down_revision: str | None = "0001"


def upgrade(op: SchemaOperations) -> None:
    op.add_column(
        "tags", sa.Column("created_at", sa.Integer(), nullable=False, server_default=sa.text("0"))
    )
    op.add_column("tags", sa.Column("deleted_at", sa.Integer(), nullable=True))

    op.add_column(
        "comments", sa.Column("removed", sa.Integer(), nullable=False, server_default=sa.text("0"))
    )
    op.add_column("comments", sa.Column("deleted_at", sa.Integer(), nullable=True))

    op.add_column("items", sa.Column("updated_at", sa.Integer(), nullable=True))
    op.add_column(
        "items",
        sa.Column("view_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
    )
    op.add_column("items", sa.Column("deleted_at", sa.Integer(), nullable=True))
