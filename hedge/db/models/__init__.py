from hedge.db.models.comment import Comment
from hedge.db.models.guest_session import GuestSession
from hedge.db.models.item import Item
from hedge.db.models.item_tag import ItemTag
from hedge.db.models.tag import Tag

__all__ = ["Item", "Comment", "Tag", "ItemTag", "GuestSession"]
