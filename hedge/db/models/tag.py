from __future__ import annotations

from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hedge.db.base import Base, SoftDeleteMixin


class Tag(SoftDeleteMixin, Base):
    __tablename__ = "tags"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    name: Mapped[str] = mapped_column(Text, unique=True)
    created_at: Mapped[int] = mapped_column(Integer, default=0, server_default="0")

    items = relationship("Item", secondary="item_tags", back_populates="tags", viewonly=True)
