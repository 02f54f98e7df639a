"""Tag service - tag names and item-tag links."""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from hedge.core.errors import ConstraintViolationError, RecordNotFoundError
from hedge.db.base import epoch_now, new_id
from hedge.db.lifecycle import Active, Deleted
from hedge.db.models import ItemTag, Tag
from hedge.services.references import ReferenceValidator


class TagService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, name: str, now: int | None = None) -> Tag:
        """Insert a tag.

        Raises:
            ConstraintViolationError: If a tag with this name exists, deleted or not.
        """
        tag = Tag(id=new_id(), name=name, created_at=now if now is not None else epoch_now())
        try:
            # Savepoint keeps the caller's transaction usable after a duplicate
            async with self._session.begin_nested():
                self._session.add(tag)
        except IntegrityError as e:
            raise ConstraintViolationError(f"Tag name {name!r} already exists") from e
        return tag

    async def get_by_name(self, name: str, include_deleted: bool = False) -> Tag | None:
        stmt = select(Tag).where(Tag.name == name)
        if not include_deleted:
            stmt = stmt.where(Tag.deleted_at.is_(None))
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def ensure(self, name: str, now: int | None = None) -> Tag:
        """Return the tag with this name, creating it or undeleting it as needed."""
        tag = await self.get_by_name(name, include_deleted=True)
        if tag is None:
            return await self.create(name, now=now)
        if tag.lifecycle.is_deleted:
            tag.lifecycle = Active()
            await self._session.flush()
        return tag

    async def list_names(self) -> list[str]:
        result = await self._session.scalars(
            select(Tag.name).where(Tag.deleted_at.is_(None)).order_by(Tag.name)
        )
        return list(result)

    async def attach(self, item_id: str, tag_id: str, validate: bool = True) -> bool:
        """Link a tag to an item. Returns False if the link already exists."""
        if validate:
            await ReferenceValidator(self._session).check_item_tag(item_id, tag_id)
        if await self._session.get(ItemTag, (item_id, tag_id)) is not None:
            return False
        self._session.add(ItemTag(item_id=item_id, tag_id=tag_id))
        await self._session.flush()
        return True

    async def detach(self, item_id: str, tag_id: str) -> bool:
        result = await self._session.execute(
            delete(ItemTag).where(ItemTag.item_id == item_id, ItemTag.tag_id == tag_id)
        )
        return result.rowcount > 0

    async def soft_delete(self, tag_id: str, at: int | None = None) -> Tag:
        tag = await self._session.get(Tag, tag_id)
        if tag is None:
            raise RecordNotFoundError("tags", tag_id)
        if not tag.lifecycle.is_deleted:
            tag.lifecycle = Deleted(at=at if at is not None else epoch_now())
            await self._session.flush()
        return tag
