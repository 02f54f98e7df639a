from __future__ import annotations

from sqlalchemy import ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column

from hedge.db.base import Base


class ItemTag(Base):
    __tablename__ = "item_tags"

    item_id: Mapped[str] = mapped_column(ForeignKey("items.id"), primary_key=True)
    tag_id: Mapped[str] = mapped_column(ForeignKey("tags.id"), primary_key=True)


Index("idx_item_tags_item_id", ItemTag.item_id)
Index("idx_item_tags_tag_id", ItemTag.tag_id)
