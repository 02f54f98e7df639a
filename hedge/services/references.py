"""Application-side checks for the store's soft foreign keys.

The engine records ``comments.item_id``, ``comments.parent_id`` and the
``item_tags`` pair but never verifies them. Writers call the ``check_*``
methods before inserting; operators run ``find_orphans`` and
``find_thread_cycles`` to report rows that slipped through.
Soft-deleted rows still count as existing targets.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute, aliased

from hedge.core.errors import DanglingReferenceError, InvalidThreadError
from hedge.db.models import Comment, Item, ItemTag, Tag

logger = logging.getLogger(__name__)

_VISITING = 1
_DONE = 2


class OrphanReport(BaseModel):
    """Rows whose soft references resolve to nothing."""

    comments_missing_item: list[str] = Field(default_factory=list)
    comments_missing_parent: list[str] = Field(default_factory=list)
    item_tags_missing_item: list[tuple[str, str]] = Field(default_factory=list)
    item_tags_missing_tag: list[tuple[str, str]] = Field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not (
            self.comments_missing_item
            or self.comments_missing_parent
            or self.item_tags_missing_item
            or self.item_tags_missing_tag
        )


class ReferenceValidator:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _exists(self, key_column: InstrumentedAttribute[Any], value: str) -> bool:
        result = await self._session.execute(select(key_column).where(key_column == value).limit(1))
        return result.first() is not None

    async def check_comment(self, item_id: str, parent_id: str | None) -> None:
        """Verify a comment's item exists and its parent sits on the same item.

        Raises:
            DanglingReferenceError: If the item or the parent comment is missing.
            InvalidThreadError: If the parent comment belongs to another item.
        """
        if not await self._exists(Item.id, item_id):
            raise DanglingReferenceError("comments", "item_id", item_id)
        if parent_id is None:
            return
        parent_item_id = await self._session.scalar(
            select(Comment.item_id).where(Comment.id == parent_id)
        )
        if parent_item_id is None:
            raise DanglingReferenceError("comments", "parent_id", parent_id)
        if parent_item_id != item_id:
            raise InvalidThreadError(
                f"Parent comment {parent_id} belongs to item {parent_item_id}, not {item_id}"
            )

    async def check_item_tag(self, item_id: str, tag_id: str) -> None:
        if not await self._exists(Item.id, item_id):
            raise DanglingReferenceError("item_tags", "item_id", item_id)
        if not await self._exists(Tag.id, tag_id):
            raise DanglingReferenceError("item_tags", "tag_id", tag_id)

    async def find_orphans(self) -> OrphanReport:
        parent = aliased(Comment)

        missing_item = await self._session.scalars(
            select(Comment.id)
            .outerjoin(Item, Item.id == Comment.item_id)
            .where(Item.id.is_(None))
            .order_by(Comment.id)
        )
        missing_parent = await self._session.scalars(
            select(Comment.id)
            .outerjoin(parent, parent.id == Comment.parent_id)
            .where(Comment.parent_id.is_not(None), parent.id.is_(None))
            .order_by(Comment.id)
        )
        tags_missing_item = await self._session.execute(
            select(ItemTag.item_id, ItemTag.tag_id)
            .outerjoin(Item, Item.id == ItemTag.item_id)
            .where(Item.id.is_(None))
            .order_by(ItemTag.item_id, ItemTag.tag_id)
        )
        tags_missing_tag = await self._session.execute(
            select(ItemTag.item_id, ItemTag.tag_id)
            .outerjoin(Tag, Tag.id == ItemTag.tag_id)
            .where(Tag.id.is_(None))
            .order_by(ItemTag.item_id, ItemTag.tag_id)
        )

        report = OrphanReport(
            comments_missing_item=list(missing_item),
            comments_missing_parent=list(missing_parent),
            item_tags_missing_item=[(row.item_id, row.tag_id) for row in tags_missing_item],
            item_tags_missing_tag=[(row.item_id, row.tag_id) for row in tags_missing_tag],
        )
        if not report.is_clean:
            logger.warning("Orphaned rows found", extra={"report": report.model_dump()})
        return report

    async def find_thread_cycles(self) -> list[list[str]]:
        """Return each cycle in the comment parent chains, as a list of comment ids."""
        result = await self._session.execute(
            select(Comment.id, Comment.parent_id).where(Comment.parent_id.is_not(None))
        )
        parents: dict[str, str] = {row.id: row.parent_id for row in result}

        state: dict[str, int] = {}
        cycles: list[list[str]] = []
        for start in sorted(parents):
            path: list[str] = []
            node: str | None = start
            while node is not None and node in parents and node not in state:
                state[node] = _VISITING
                path.append(node)
                node = parents[node]
            if node is not None and state.get(node) == _VISITING:
                cycles.append(path[path.index(node) :])
            for visited in path:
                state[visited] = _DONE
        return cycles
