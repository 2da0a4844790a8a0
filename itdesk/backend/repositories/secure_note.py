"""
Secure Note Repository.
"""

from sqlalchemy import delete, or_, select

from itdesk.backend.models.secure_note import SecureNote
from itdesk.backend.repositories.base import BaseRepository


class SecureNoteRepository(BaseRepository[SecureNote]):
    model = SecureNote

    async def list_newest_first(self) -> list[SecureNote]:
        result = await self.session.execute(
            select(SecureNote).order_by(SecureNote.created_at.desc(), SecureNote.id.desc())
        )
        return list(result.scalars().all())

    async def list_for_user(self, user_id: int) -> list[SecureNote]:
        """Notes the user sent or received, newest first."""
        result = await self.session.execute(
            select(SecureNote)
            .where(or_(SecureNote.sender_id == user_id, SecureNote.receiver_id == user_id))
            .order_by(SecureNote.created_at.desc(), SecureNote.id.desc())
        )
        return list(result.scalars().all())

    async def delete_for_user(self, user_id: int) -> int:
        result = await self.session.execute(
            delete(SecureNote).where(
                or_(SecureNote.sender_id == user_id, SecureNote.receiver_id == user_id)
            )
        )
        return result.rowcount
