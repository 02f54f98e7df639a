"""Integration tests checking that the common lookups use the store's indexes.

The store is filled with a realistic spread of rows and analyzed first, so the
planner chooses between indexes on statistics rather than on empty tables.
"""

from __future__ import annotations

import re
from collections.abc import Awaitable, Callable
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from hedge.services import CommentService, ItemService

ITEM_COUNT = 200
TAG_COUNT = 20
COMMENTS_PER_ITEM = 4


async def _plan(engine: AsyncEngine, sql: str, params: tuple[Any, ...] = ()) -> str:
    async with engine.connect() as conn:
        result = await conn.exec_driver_sql(f"EXPLAIN QUERY PLAN {sql}", params or None)
        return "\n".join(row[-1] for row in result)


def _scans(plan: str, table: str) -> bool:
    return re.search(rf"\bSCAN (TABLE )?{table}\b", plan) is not None


async def _populate(engine: AsyncEngine) -> None:
    items = [(f"item-{i}", f"title {i}", "owner", 1_000 + i) for i in range(ITEM_COUNT)]
    tags = [(f"tag-{t}", f"name-{t}") for t in range(TAG_COUNT)]
    item_tags = [
        (f"item-{i}", f"tag-{(i + offset) % TAG_COUNT}")
        for i in range(ITEM_COUNT)
        for offset in (0, 7)
    ]
    comments = []
    for i in range(ITEM_COUNT):
        # each item gets a reply chain, so most parents have exactly one reply
        parent = None
        for c in range(COMMENTS_PER_ITEM):
            comment_id = f"comment-{i}-{c}"
            comments.append((comment_id, f"item-{i}", parent, 2_000 + c))
            parent = comment_id

    async with engine.begin() as conn:
        await conn.exec_driver_sql(
            "INSERT INTO items (id, title, owner_comment, created_at) VALUES (?, ?, ?, ?)",
            items,
        )
        await conn.exec_driver_sql("INSERT INTO tags (id, name) VALUES (?, ?)", tags)
        await conn.exec_driver_sql(
            "INSERT INTO item_tags (item_id, tag_id) VALUES (?, ?)", item_tags
        )
        await conn.exec_driver_sql(
            "INSERT INTO comments (id, item_id, parent_id, author, content, created_at) "
            "VALUES (?, ?, ?, 'Ada', 'text', ?)",
            comments,
        )
        await conn.exec_driver_sql("ANALYZE")


@pytest_asyncio.fixture
async def populated_engine(migrated_engine: AsyncEngine) -> AsyncEngine:
    await _populate(migrated_engine)
    return migrated_engine


async def _issued_select(
    engine: AsyncEngine, call: Callable[[AsyncSession], Awaitable[object]]
) -> tuple[str, tuple[Any, ...]]:
    """Run ``call`` in a session and return the SELECT it sent to the database."""
    statements: list[tuple[str, tuple[Any, ...]]] = []

    def capture(_conn, _cursor, statement, parameters, _context, _executemany) -> None:
        if statement.lstrip().upper().startswith("SELECT"):
            statements.append((statement, tuple(parameters)))

    event.listen(engine.sync_engine, "before_cursor_execute", capture)
    try:
        session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
        async with session_maker() as session:
            await call(session)
    finally:
        event.remove(engine.sync_engine, "before_cursor_execute", capture)

    assert len(statements) == 1, statements
    return statements[0]


class TestCommentPlans:
    @pytest.mark.asyncio
    async def test_list_for_item_uses_item_index(self, populated_engine: AsyncEngine) -> None:
        # Arrange
        sql, params = await _issued_select(
            populated_engine, lambda s: CommentService(s).list_for_item("item-5")
        )

        # Act
        plan = await _plan(populated_engine, sql, params)

        # Assert
        assert "idx_comments_item_id (item_id=?)" in plan
        assert not _scans(plan, "comments")

    @pytest.mark.asyncio
    async def test_list_replies_uses_parent_index(self, populated_engine: AsyncEngine) -> None:
        sql, params = await _issued_select(
            populated_engine, lambda s: CommentService(s).list_replies("comment-5-0")
        )

        plan = await _plan(populated_engine, sql, params)

        assert "idx_comments_parent_id (parent_id=?)" in plan
        assert not _scans(plan, "comments")


class TestItemPlans:
    @pytest.mark.asyncio
    async def test_list_recent_reads_created_at_index(
        self, populated_engine: AsyncEngine
    ) -> None:
        """Test that the feed is read in index order with no sort step."""
        sql, params = await _issued_select(
            populated_engine, lambda s: ItemService(s).list_recent()
        )

        plan = await _plan(populated_engine, sql, params)

        assert "idx_items_created_at" in plan
        assert "TEMP B-TREE" not in plan

    @pytest.mark.asyncio
    async def test_tag_names_search_item_tags_by_item(
        self, populated_engine: AsyncEngine
    ) -> None:
        sql, params = await _issued_select(
            populated_engine, lambda s: ItemService(s).tag_names("item-5")
        )

        plan = await _plan(populated_engine, sql, params)

        assert re.search(r"SEARCH (TABLE )?item_tags USING .*INDEX .*\(item_id=\?", plan), plan
        assert not _scans(plan, "item_tags")

    @pytest.mark.asyncio
    async def test_list_by_tag_never_scans_item_tags(
        self, populated_engine: AsyncEngine
    ) -> None:
        sql, params = await _issued_select(
            populated_engine, lambda s: ItemService(s).list_by_tag("name-3")
        )

        plan = await _plan(populated_engine, sql, params)

        assert not _scans(plan, "item_tags")
        assert not _scans(plan, "tags")


class TestItemTagPlans:
    @pytest.mark.asyncio
    async def test_items_for_tag_use_tag_index(self, populated_engine: AsyncEngine) -> None:
        """Test that only the tag_id index can serve a lookup by tag."""
        plan = await _plan(
            populated_engine, "SELECT item_id FROM item_tags WHERE tag_id = ?", ("tag-3",)
        )

        assert "idx_item_tags_tag_id (tag_id=?)" in plan
        assert not _scans(plan, "item_tags")
