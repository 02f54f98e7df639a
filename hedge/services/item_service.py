"""Item service - reads and writes for items and their tag links."""

from __future__ import annotations

from dataclasses import dataclass, field

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from hedge.core.config import settings
from hedge.core.errors import RecordNotFoundError
from hedge.db.base import epoch_now, new_id
from hedge.db.lifecycle import Active, Deleted
from hedge.db.models import Comment, Item, ItemTag, Tag
from hedge.schemas.items import ItemCreate, ItemUpdate
from hedge.services.comment_service import CommentService
from hedge.services.tag_service import TagService


@dataclass
class ItemDetail:
    item: Item
    comments: list[Comment] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)


class ItemService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, data: ItemCreate) -> Item:
        """Insert an item and link it to its tags, creating missing tags by name."""
        now = epoch_now()
        item = Item(
            id=new_id(),
            title=data.title,
            link=data.link,
            image=data.image,
            extract=data.extract,
            owner_comment=data.owner_comment,
            created_at=now,
            view_count=0,
        )
        self._session.add(item)
        await self._session.flush()

        tags = TagService(self._session)
        for name in data.tags:
            tag = await tags.ensure(name, now=now)
            await tags.attach(item.id, tag.id, validate=False)
        return item

    async def get(self, item_id: str, include_deleted: bool = False) -> Item | None:
        stmt = select(Item).where(Item.id == item_id)
        if not include_deleted:
            stmt = stmt.where(Item.deleted_at.is_(None))
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def _require(self, item_id: str) -> Item:
        item = await self.get(item_id, include_deleted=True)
        if item is None:
            raise RecordNotFoundError("items", item_id)
        return item

    async def tag_names(self, item_id: str) -> list[str]:
        result = await self._session.scalars(
            select(Tag.name)
            .join(ItemTag, ItemTag.tag_id == Tag.id)
            .where(ItemTag.item_id == item_id, Tag.deleted_at.is_(None))
            .order_by(Tag.name)
        )
        return list(result)

    async def get_detail(self, item_id: str) -> ItemDetail | None:
        """Active item with its comments and tag names, or None."""
        item = await self.get(item_id)
        if item is None:
            return None
        comments = await CommentService(self._session).list_for_item(item_id)
        return ItemDetail(item=item, comments=comments, tags=await self.tag_names(item_id))

    async def list_recent(self, limit: int | None = None) -> list[Item]:
        """Active items, newest first."""
        result = await self._session.scalars(
            select(Item)
            .where(Item.deleted_at.is_(None))
            .order_by(Item.created_at.desc())
            .limit(settings.feed_limit if limit is None else limit)
        )
        return list(result)

    async def list_by_tag(self, tag_name: str, limit: int | None = None) -> list[Item]:
        result = await self._session.scalars(
            select(Item)
            .join(ItemTag, ItemTag.item_id == Item.id)
            .join(Tag, Tag.id == ItemTag.tag_id)
            .where(
                Tag.name == tag_name,
                Tag.deleted_at.is_(None),
                Item.deleted_at.is_(None),
            )
            .order_by(Item.created_at.desc())
            .limit(settings.tag_items_limit if limit is None else limit)
        )
        return list(result)

    async def update(self, item_id: str, data: ItemUpdate) -> Item:
        """Write the fields set on ``data`` and stamp ``updated_at``.

        Raises:
            RecordNotFoundError: If no item has this id.
        """
        item = await self._require(item_id)
        changes = data.model_dump(exclude_unset=True)
        if not changes:
            return item
        for name, value in changes.items():
            setattr(item, name, value)
        item.updated_at = epoch_now()
        await self._session.flush()
        return item

    async def record_view(self, item_id: str) -> int:
        """Increment the view counter of an active item and return the new count."""
        result = await self._session.execute(
            update(Item)
            .where(Item.id == item_id, Item.deleted_at.is_(None))
            .values(view_count=Item.view_count + 1)
            .returning(Item.view_count)
            .execution_options(synchronize_session="fetch")
        )
        count = result.scalar_one_or_none()
        if count is None:
            raise RecordNotFoundError("items", item_id)
        return count

    async def soft_delete(self, item_id: str, at: int | None = None) -> Item:
        """Mark the item deleted. Its comments and tag links are left untouched."""
        item = await self._require(item_id)
        if not item.lifecycle.is_deleted:
            item.lifecycle = Deleted(at=at if at is not None else epoch_now())
            await self._session.flush()
        return item

    async def restore(self, item_id: str) -> Item:
        item = await self._require(item_id)
        item.lifecycle = Active()
        await self._session.flush()
        return item
