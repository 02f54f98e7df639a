"""Integration tests for CommentService."""

from __future__ import annotations

import pytest
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from hedge.core.errors import DanglingReferenceError, InvalidThreadError, RecordNotFoundError
from hedge.db.lifecycle import Deleted
from hedge.db.models import Comment, Item
from hedge.schemas import CommentCreate, ItemCreate
from hedge.services import CommentService, ItemService


async def _create_item(session: AsyncSession) -> Item:
    return await ItemService(session).create(
        ItemCreate(title="A link worth sharing", owner_comment="Read this")
    )


async def _set_created_at(session: AsyncSession, comment_id: str, created_at: int) -> None:
    await session.execute(
        update(Comment).where(Comment.id == comment_id).values(created_at=created_at)
    )


class TestCreate:
    @pytest.mark.asyncio
    async def test_create_top_level_comment(self, db_session: AsyncSession) -> None:
        # Arrange
        item = await _create_item(db_session)

        # Act
        comment = await CommentService(db_session).create(
            CommentCreate(item_id=item.id, content="Great find", author="Ada")
        )

        # Assert
        assert comment.item_id == item.id
        assert comment.parent_id is None
        assert comment.author == "Ada"
        assert comment.removed is False
        assert comment.created_at > 0

    @pytest.mark.asyncio
    async def test_author_defaults_to_anonymous(self, db_session: AsyncSession) -> None:
        item = await _create_item(db_session)

        comment = await CommentService(db_session).create(
            CommentCreate(item_id=item.id, content="Great find")
        )

        assert comment.author == "Anonymous"

    @pytest.mark.asyncio
    async def test_reply(self, db_session: AsyncSession) -> None:
        item = await _create_item(db_session)
        service = CommentService(db_session)
        parent = await service.create(CommentCreate(item_id=item.id, content="First"))

        reply = await service.create(
            CommentCreate(item_id=item.id, parent_id=parent.id, content="Second")
        )

        assert reply.parent_id == parent.id

    @pytest.mark.asyncio
    async def test_missing_item_rejected(self, db_session: AsyncSession) -> None:
        with pytest.raises(DanglingReferenceError) as exc_info:
            await CommentService(db_session).create(
                CommentCreate(item_id="missing", content="Hello?")
            )

        assert exc_info.value.error_code == "dangling_reference"
        assert exc_info.value.column == "item_id"

    @pytest.mark.asyncio
    async def test_missing_parent_rejected(self, db_session: AsyncSession) -> None:
        item = await _create_item(db_session)

        with pytest.raises(DanglingReferenceError) as exc_info:
            await CommentService(db_session).create(
                CommentCreate(item_id=item.id, parent_id="missing", content="Reply")
            )

        assert exc_info.value.column == "parent_id"

    @pytest.mark.asyncio
    async def test_parent_on_other_item_rejected(self, db_session: AsyncSession) -> None:
        """Test that a reply must stay on its parent's item."""
        # Arrange
        first = await _create_item(db_session)
        second = await _create_item(db_session)
        service = CommentService(db_session)
        parent = await service.create(CommentCreate(item_id=first.id, content="First"))

        # Act & Assert
        with pytest.raises(InvalidThreadError) as exc_info:
            await service.create(
                CommentCreate(item_id=second.id, parent_id=parent.id, content="Wrong item")
            )
        assert exc_info.value.error_code == "invalid_thread"

    @pytest.mark.asyncio
    async def test_validation_can_be_skipped(self, db_session: AsyncSession) -> None:
        comment = await CommentService(db_session).create(
            CommentCreate(item_id="missing", content="Imported"), validate=False
        )

        assert comment.item_id == "missing"


class TestReads:
    @pytest.mark.asyncio
    async def test_list_for_item_newest_first(self, db_session: AsyncSession) -> None:
        # Arrange
        item = await _create_item(db_session)
        service = CommentService(db_session)
        ids = []
        for created_at in (100, 300, 200):
            comment = await service.create(CommentCreate(item_id=item.id, content="c"))
            await _set_created_at(db_session, comment.id, created_at)
            ids.append(comment.id)

        # Act
        comments = await service.list_for_item(item.id)

        # Assert
        assert [c.id for c in comments] == [ids[1], ids[2], ids[0]]

    @pytest.mark.asyncio
    async def test_list_for_item_hides_deleted_keeps_removed(
        self, db_session: AsyncSession
    ) -> None:
        item = await _create_item(db_session)
        service = CommentService(db_session)
        removed = await service.create(CommentCreate(item_id=item.id, content="rude"))
        deleted = await service.create(CommentCreate(item_id=item.id, content="spam"))
        await service.remove(removed.id)
        await service.soft_delete(deleted.id)

        comments = await service.list_for_item(item.id)

        assert [c.id for c in comments] == [removed.id]
        assert comments[0].display_content is None

    @pytest.mark.asyncio
    async def test_list_for_item_zero_limit(self, db_session: AsyncSession) -> None:
        item = await _create_item(db_session)
        service = CommentService(db_session)
        await service.create(CommentCreate(item_id=item.id, content="c"))

        assert await service.list_for_item(item.id, limit=0) == []
        assert len(await service.list_for_item(item.id)) == 1

    @pytest.mark.asyncio
    async def test_list_replies_in_posting_order(self, db_session: AsyncSession) -> None:
        item = await _create_item(db_session)
        service = CommentService(db_session)
        parent = await service.create(CommentCreate(item_id=item.id, content="root"))
        later = await service.create(
            CommentCreate(item_id=item.id, parent_id=parent.id, content="later")
        )
        earlier = await service.create(
            CommentCreate(item_id=item.id, parent_id=parent.id, content="earlier")
        )
        await _set_created_at(db_session, later.id, 200)
        await _set_created_at(db_session, earlier.id, 100)

        replies = await service.list_replies(parent.id)

        assert [r.id for r in replies] == [earlier.id, later.id]

    @pytest.mark.asyncio
    async def test_get(self, db_session: AsyncSession) -> None:
        item = await _create_item(db_session)
        service = CommentService(db_session)
        comment = await service.create(CommentCreate(item_id=item.id, content="c"))
        await service.soft_delete(comment.id)

        assert await service.get(comment.id) is None
        assert await service.get(comment.id, include_deleted=True) is comment


class TestWrites:
    @pytest.mark.asyncio
    async def test_remove_keeps_thread_structure(self, db_session: AsyncSession) -> None:
        """Test that a removed comment keeps its replies and hides its content."""
        # Arrange
        item = await _create_item(db_session)
        service = CommentService(db_session)
        parent = await service.create(CommentCreate(item_id=item.id, content="rude"))
        reply = await service.create(
            CommentCreate(item_id=item.id, parent_id=parent.id, content="reply")
        )

        # Act
        removed = await service.remove(parent.id)

        # Assert
        assert removed.removed is True
        assert removed.content == "rude"
        assert removed.display_content is None
        assert [r.id for r in await service.list_replies(parent.id)] == [reply.id]

    @pytest.mark.asyncio
    async def test_soft_delete_and_restore(self, db_session: AsyncSession) -> None:
        item = await _create_item(db_session)
        service = CommentService(db_session)
        comment = await service.create(CommentCreate(item_id=item.id, content="c"))

        await service.soft_delete(comment.id, at=500)
        assert comment.lifecycle == Deleted(at=500)

        await service.restore(comment.id)
        assert await service.get(comment.id) is comment

    @pytest.mark.asyncio
    @pytest.mark.parametrize("operation", ["remove", "soft_delete", "restore"])
    async def test_missing_comment(self, db_session: AsyncSession, operation: str) -> None:
        service = CommentService(db_session)

        with pytest.raises(RecordNotFoundError) as exc_info:
            await getattr(service, operation)("missing")

        assert exc_info.value.table == "comments"
