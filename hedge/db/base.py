from __future__ import annotations

import time
import uuid

from sqlalchemy import Integer
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from hedge.db.lifecycle import Lifecycle, lifecycle_from_column, lifecycle_to_column


class Base(DeclarativeBase):
    pass


def epoch_now() -> int:
    """Current time as Unix epoch seconds (the store's timestamp format)."""
    return int(time.time())


def new_id() -> str:
    return str(uuid.uuid4())


class SoftDeleteMixin:
    # NULL while the row is active
    deleted_at: Mapped[int | None] = mapped_column(Integer, nullable=True)

    @property
    def lifecycle(self) -> Lifecycle:
        return lifecycle_from_column(self.deleted_at)

    @lifecycle.setter
    def lifecycle(self, state: Lifecycle) -> None:
        self.deleted_at = lifecycle_to_column(state)
