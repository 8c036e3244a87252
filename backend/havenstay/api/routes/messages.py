"""Direct messaging routes."""

import uuid

from fastapi import APIRouter, Depends, status

from havenstay.api.deps import get_storage, require_authenticated
from havenstay.models.user import User
from havenstay.schemas.message import DirectMessageResponse, MessageCreate
from havenstay.services import ledger
from havenstay.storage.base import Storage

router = APIRouter(prefix="/api/messages", tags=["messages"])


@router.post("", response_model=DirectMessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
    body: MessageCreate,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(require_authenticated),
) -> DirectMessageResponse:
    message = await ledger.send_message(storage, current_user, body)
    await storage.commit()
    return DirectMessageResponse.model_validate(message)


@router.get("/{user_id}", response_model=list[DirectMessageResponse])
async def get_conversation(
    user_id: uuid.UUID,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(require_authenticated),
) -> list[DirectMessageResponse]:
    """Messages exchanged with ``user_id``, oldest first."""
    messages = await ledger.get_conversation(storage, current_user, user_id)
    return [DirectMessageResponse.model_validate(m) for m in messages]


@router.put("/{message_id}/read", response_model=DirectMessageResponse)
async def mark_message_read(
    message_id: uuid.UUID,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(require_authenticated),
) -> DirectMessageResponse:
    message = await ledger.mark_message_read(storage, current_user, message_id)
    await storage.commit()
    return DirectMessageResponse.model_validate(message)
