"""create initial schema

Revision ID: 0001
Revises:
"""

from __future__ import annotations

import sqlalchemy as sa

from hedge.migrations.operations import SchemaOperations

revision: str = "0001"
down_revision: str | None = None


def upgrade(op: SchemaOperations) -> None:
    op.create_table(
        "items",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("link", sa.Text(), nullable=True),
        sa.Column("image", sa.Text(), nullable=True),
        sa.Column("extract", sa.Text(), nullable=True),
        sa.Column("owner_comment", sa.Text(), nullable=False),
        sa.Column("created_at", sa.Integer(), nullable=False),
    )

    op.create_table(
        "comments",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("item_id", sa.Text(), nullable=False),
        sa.Column("parent_id", sa.Text(), nullable=True),
        sa.Column("author", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created_at", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["item_id"], ["items.id"]),
        sa.ForeignKeyConstraint(["parent_id"], ["comments.id"]),
    )

    op.create_table(
        "tags",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.UniqueConstraint("name"),
    )

    op.create_table(
        "item_tags",
        sa.Column("item_id", sa.Text(), nullable=False),
        sa.Column("tag_id", sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint("item_id", "tag_id"),
        sa.ForeignKeyConstraint(["item_id"], ["items.id"]),
        sa.ForeignKeyConstraint(["tag_id"], ["tags.id"]),
    )

    op.create_table(
        "guest_sessions",
        sa.Column("guest_id", sa.Text(), primary_key=True),
        sa.Column("display_name", sa.Text(), nullable=False),
        sa.Column("created_at", sa.Integer(), nullable=False),
    )

    op.create_index("idx_comments_item_id", "comments", ["item_id"])
    op.create_index("idx_comments_parent_id", "comments", ["parent_id"])
    op.create_index("idx_item_tags_item_id", "item_tags", ["item_id"])
    op.create_index("idx_item_tags_tag_id", "item_tags", ["tag_id"])
    op.create_index("idx_items_created_at", "items", [sa.text("created_at DESC")])
