from __future__ import annotations

from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from hedge.db.base import Base


class GuestSession(Base):
    """Identity of an unauthenticated participant.

    There is no soft-delete column: sessions lapse when they stop being renewed.
    """

    __tablename__ = "guest_sessions"

    guest_id: Mapped[str] = mapped_column(Text, primary_key=True)
    display_name: Mapped[str] = mapped_column(Text)
    created_at: Mapped[int] = mapped_column(Integer)
