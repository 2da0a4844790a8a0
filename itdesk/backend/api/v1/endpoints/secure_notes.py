"""
Secure Note API Endpoints.

Metadata only: note content is never returned over REST.
"""

from fastapi import APIRouter

from itdesk.backend.core.dependencies import DbSession, NotifierDep, PasswordsUser
from itdesk.backend.schemas.base import ApiResponse
from itdesk.backend.schemas.secure_note import SecureNoteCreate, SecureNoteResponse
from itdesk.backend.services.secure_note import SecureNoteService

router = APIRouter()


@router.get(
    "",
    response_model=ApiResponse[list[SecureNoteResponse]],
    summary="List secure notes",
    description="Every note, newest first, without content.",
)
async def list_notes(db: DbSession, user: PasswordsUser) -> ApiResponse[list[SecureNoteResponse]]:
    notes = await SecureNoteService(db).list_all()
    return ApiResponse(data=[SecureNoteResponse.model_validate(note) for note in notes])


@router.post(
    "",
    response_model=ApiResponse[SecureNoteResponse],
    status_code=201,
    summary="Send a secure note",
    description="The receiver must hold passwords access.",
)
async def create_note(
    data: SecureNoteCreate,
    db: DbSession,
    user: PasswordsUser,
    notifier: NotifierDep,
) -> ApiResponse[SecureNoteResponse]:
    note = await SecureNoteService(db, notifier).create(
        sender_id=user.id,
        receiver_id=data.receiver_id,
        title=data.title,
        content=data.content,
        category=data.category,
    )
    return ApiResponse(data=SecureNoteResponse.model_validate(note))


@router.patch(
    "/{note_id}/read",
    response_model=ApiResponse[SecureNoteResponse],
    summary="Mark as read",
    description="Idempotent.",
)
async def mark_read(note_id: int, db: DbSession, user: PasswordsUser) -> ApiResponse[SecureNoteResponse]:
    note = await SecureNoteService(db).mark_read(note_id)
    return ApiResponse(data=SecureNoteResponse.model_validate(note))
