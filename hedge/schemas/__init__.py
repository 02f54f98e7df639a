"""Write models validated before anything reaches the store.

Import the models from the submodules or from this package for a single
entry point.
"""

from __future__ import annotations

from hedge.schemas.comments import DEFAULT_AUTHOR, CommentCreate
from hedge.schemas.items import MAX_TAGS, ItemCreate, ItemUpdate

__all__ = [
    "CommentCreate",
    "DEFAULT_AUTHOR",
    "ItemCreate",
    "ItemUpdate",
    "MAX_TAGS",
]
