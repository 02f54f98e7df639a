from __future__ import annotations

from sqlalchemy import Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hedge.db.base import Base, SoftDeleteMixin


class Item(SoftDeleteMixin, Base):
    __tablename__ = "items"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    title: Mapped[str] = mapped_column(Text)
    link: Mapped[str | None] = mapped_column(Text)
    image: Mapped[str | None] = mapped_column(Text)
    # Serialized rich-text document, opaque to the store
    extract: Mapped[str | None] = mapped_column(Text)
    owner_comment: Mapped[str] = mapped_column(Text)
    created_at: Mapped[int] = mapped_column(Integer)
    updated_at: Mapped[int | None] = mapped_column(Integer)
    view_count: Mapped[int] = mapped_column(Integer, default=0, server_default="0")

    comments = relationship("Comment", back_populates="item")
    tags = relationship("Tag", secondary="item_tags", back_populates="items", viewonly=True)


Index("idx_items_created_at", Item.created_at.desc())
