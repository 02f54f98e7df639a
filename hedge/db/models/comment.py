from __future__ import annotations

from sqlalchemy import Boolean, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hedge.db.base import Base, SoftDeleteMixin


class Comment(SoftDeleteMixin, Base):
    __tablename__ = "comments"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    item_id: Mapped[str] = mapped_column(ForeignKey("items.id"))
    # NULL for top-level comments
    parent_id: Mapped[str | None] = mapped_column(ForeignKey("comments.id"))
    author: Mapped[str] = mapped_column(Text)
    content: Mapped[str] = mapped_column(Text)
    created_at: Mapped[int] = mapped_column(Integer)
    # Stored as INTEGER 0/1
    removed: Mapped[bool] = mapped_column(Boolean, default=False, server_default="0")

    item = relationship("Item", back_populates="comments")
    parent = relationship("Comment", remote_side="Comment.id", back_populates="replies")
    replies = relationship("Comment", back_populates="parent")

    @property
    def display_content(self) -> str | None:
        """Content to show in a thread; ``None`` once a moderator removed it."""
        if self.removed:
            return None
        return self.content


Index("idx_comments_item_id", Comment.item_id)
Index("idx_comments_parent_id", Comment.parent_id)
