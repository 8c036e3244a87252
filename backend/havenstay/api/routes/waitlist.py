"""Pre-launch waitlist routes."""

from fastapi import APIRouter, Depends, status

from havenstay.api.deps import get_storage, require_admin
from havenstay.models.user import User
from havenstay.schemas.common import MessageResponse
from havenstay.schemas.waitlist import WaitlistCreate, WaitlistEntryResponse
from havenstay.services import accounts
from havenstay.storage.base import Storage

router = APIRouter(prefix="/api/waitlist", tags=["waitlist"])


@router.post("", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def join_waitlist(
    body: WaitlistCreate,
    storage: Storage = Depends(get_storage),
) -> MessageResponse:
    await accounts.join_waitlist(storage, body)
    await storage.commit()
    return MessageResponse(message="Successfully added to waitlist")


@router.get("", response_model=list[WaitlistEntryResponse])
async def list_waitlist(
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(require_admin),
) -> list[WaitlistEntryResponse]:
    entries = await storage.list_waitlist_entries()
    return [WaitlistEntryResponse.model_validate(e) for e in entries]
