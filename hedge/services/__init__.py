from hedge.services.comment_service import CommentService
from hedge.services.guest_session_service import GuestSessionService
from hedge.services.item_service import ItemDetail, ItemService
from hedge.services.references import OrphanReport, ReferenceValidator
from hedge.services.tag_service import TagService

__all__ = [
    "CommentService",
    "GuestSessionService",
    "ItemDetail",
    "ItemService",
    "OrphanReport",
    "ReferenceValidator",
    "TagService",
]
