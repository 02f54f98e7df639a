"""Comment service - threaded comments on items."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hedge.core.config import settings
from hedge.core.errors import RecordNotFoundError
from hedge.db.base import epoch_now, new_id
from hedge.db.lifecycle import Active, Deleted
from hedge.db.models import Comment
from hedge.schemas.comments import CommentCreate
from hedge.services.references import ReferenceValidator


class CommentService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, data: CommentCreate, validate: bool = True) -> Comment:
        """Insert a comment or reply.

        Args:
            data: Validated comment fields
            validate: Check the item and parent references before inserting

        Returns:
            The new Comment

        Raises:
            DanglingReferenceError: If the item or parent comment does not exist
            InvalidThreadError: If the parent comment belongs to another item
        """
        if validate:
            await ReferenceValidator(self._session).check_comment(data.item_id, data.parent_id)

        comment = Comment(
            id=new_id(),
            item_id=data.item_id,
            parent_id=data.parent_id,
            author=data.author_name,
            content=data.content,
            created_at=epoch_now(),
            removed=False,
        )
        self._session.add(comment)
        await self._session.flush()
        return comment

    async def get(self, comment_id: str, include_deleted: bool = False) -> Comment | None:
        stmt = select(Comment).where(Comment.id == comment_id)
        if not include_deleted:
            stmt = stmt.where(Comment.deleted_at.is_(None))
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def _require(self, comment_id: str) -> Comment:
        comment = await self.get(comment_id, include_deleted=True)
        if comment is None:
            raise RecordNotFoundError("comments", comment_id)
        return comment

    async def list_for_item(self, item_id: str, limit: int | None = None) -> list[Comment]:
        """Comments on an item, newest first. Removed comments stay in the list."""
        result = await self._session.scalars(
            select(Comment)
            .where(Comment.item_id == item_id, Comment.deleted_at.is_(None))
            .order_by(Comment.created_at.desc())
            .limit(settings.feed_limit if limit is None else limit)
        )
        return list(result)

    async def list_replies(self, parent_id: str) -> list[Comment]:
        """Direct replies in posting order."""
        result = await self._session.scalars(
            select(Comment)
            .where(Comment.parent_id == parent_id, Comment.deleted_at.is_(None))
            .order_by(Comment.created_at, Comment.id)
        )
        return list(result)

    async def remove(self, comment_id: str) -> Comment:
        """Hide a comment's content while keeping its place in the thread."""
        comment = await self._require(comment_id)
        comment.removed = True
        await self._session.flush()
        return comment

    async def soft_delete(self, comment_id: str, at: int | None = None) -> Comment:
        comment = await self._require(comment_id)
        if not comment.lifecycle.is_deleted:
            comment.lifecycle = Deleted(at=at if at is not None else epoch_now())
            await self._session.flush()
        return comment

    async def restore(self, comment_id: str) -> Comment:
        comment = await self._require(comment_id)
        comment.lifecycle = Active()
        await self._session.flush()
        return comment
