from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from hedge.db.base import epoch_now
from hedge.db.models import GuestSession


class GuestSessionService:
    """Guest identities. Sessions are renewed, never deleted."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def upsert(self, guest_id: str, display_name: str) -> GuestSession:
        """Create the session or renew it with a new display name and timestamp."""
        now = epoch_now()
        guest = await self._session.get(GuestSession, guest_id)
        if guest is None:
            guest = GuestSession(guest_id=guest_id, display_name=display_name, created_at=now)
            self._session.add(guest)
        else:
            guest.display_name = display_name
            guest.created_at = now
        await self._session.flush()
        return guest

    async def get(self, guest_id: str) -> GuestSession | None:
        return await self._session.get(GuestSession, guest_id)
