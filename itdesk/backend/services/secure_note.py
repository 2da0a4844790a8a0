"""
Secure Note Service.

Notes travel from a sender to a receiver. Content is encrypted before it
reaches the database and is only decrypted for one of the two parties.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from itdesk.backend.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from itdesk.backend.core.security import decrypt_secret, encrypt_secret
from itdesk.backend.models.enums import NOTE_CATEGORY_LABELS, Category, NoteCategory
from itdesk.backend.models.secure_note import SecureNote
from itdesk.backend.models.user import User
from itdesk.backend.repositories.secure_note import SecureNoteRepository
from itdesk.backend.repositories.user import UserRepository
from itdesk.backend.services.access import AccessControl
from itdesk.backend.services.base import BaseService
from itdesk.backend.services.outbox import Notifier


class SecureNoteService(BaseService):

    def __init__(self, session: AsyncSession, notifier: Notifier | None = None) -> None:
        super().__init__(session, notifier)
        self.repo = SecureNoteRepository(session)
        self.user_repo = UserRepository(session)
        self.access = AccessControl(session)

    async def list_all(self) -> list[SecureNote]:
        return await self.repo.list_newest_first()

    async def list_for_user(self, user_id: int) -> list[SecureNote]:
        """Notes the user sent or received, newest first."""
        return await self.repo.list_for_user(user_id)

    async def get(self, note_id: int) -> SecureNote:
        return await self.repo.get_by_id(note_id)

    async def create(
        self,
        sender_id: int,
        receiver_id: int,
        title: str,
        content: str,
        category: NoteCategory = NoteCategory.OTHER,
    ) -> SecureNote:
        """
        Encrypt and store a note, then tell the receiver how to open it.

        Raises:
            ValidationError: If title or content is empty, or the receiver
                has no access to passwords
            NotFoundError: If the receiver does not exist
        """
        self._validate_required({"title": title, "content": content}, ["title", "content"])
        receiver = await self.user_repo.get_by_id_or_none(receiver_id)
        if receiver is None:
            raise NotFoundError("Receiver not found")
        if not await self.access.has_access(receiver, Category.PASSWORDS):
            raise ValidationError(
                "Receiver has no access to passwords",
                details={"receiver_id": receiver_id},
            )

        note = await self._execute_db_operation(
            "create_secure_note",
            self.repo.create(
                sender_id=sender_id,
                receiver_id=receiver_id,
                title=title.strip(),
                category=category,
                content_ciphertext=encrypt_secret(content),
            ),
        )
        self._log_operation(
            "Secure note created",
            note_id=note.id,
            sender_id=sender_id,
            receiver_id=receiver_id,
            category=category.value,
        )
        self._notify_user(
            receiver,
            f'{note.sender.display_name} sent you a secure note "{note.title}" '
            f"({NOTE_CATEGORY_LABELS[note.category]}). Open it with /password {note.id}",
        )
        await self._notify_channel(
            Category.PASSWORDS,
            f"Secure note #{note.id} sent from {note.sender.display_name} to {receiver.display_name}",
        )
        return note

    async def reveal(self, note_id: int, viewer: User) -> tuple[SecureNote, str]:
        """
        Decrypt a note for its sender or receiver.

        Opening a note as its receiver marks it read.

        Returns:
            Tuple of (note, plaintext content)

        Raises:
            NotFoundError: If the note does not exist
            AuthorizationError: If the viewer is neither sender nor receiver
        """
        note = await self.repo.get_by_id(note_id)
        if viewer.id not in (note.sender_id, note.receiver_id):
            self._logger.warning(
                "Secure note access denied",
                extra={"note_id": note_id, "user_id": viewer.id},
            )
            raise AuthorizationError("You cannot view this note")

        plaintext = decrypt_secret(note.content_ciphertext)
        if viewer.id == note.receiver_id:
            note = await self.mark_read(note_id)
        return note, plaintext

    async def mark_read(self, note_id: int) -> SecureNote:
        """Mark a note read. Already-read notes are returned untouched."""
        note = await self.repo.get_by_id(note_id)
        if note.is_read:
            return note
        note = await self._execute_db_operation(
            "mark_note_read",
            self.repo.update(note_id, is_read=True),
        )
        self._log_operation("Secure note marked read", note_id=note_id)
        return note
