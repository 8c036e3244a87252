"""Admin overview routes — user directory and platform counts."""

from typing import Literal

from fastapi import APIRouter, Depends, Query

from havenstay.api.deps import get_storage, require_admin
from havenstay.models.user import User
from havenstay.schemas.admin import PlatformStatsResponse
from havenstay.schemas.auth import UserResponse
from havenstay.services import admin
from havenstay.storage.base import Storage

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/users", response_model=list[UserResponse])
async def list_users(
    role: Literal["guest", "host", "admin"] | None = Query(None),
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(require_admin),
) -> list[UserResponse]:
    users = await storage.list_users(role)
    return [UserResponse.model_validate(u) for u in users]


@router.get("/stats", response_model=PlatformStatsResponse)
async def platform_stats(
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(require_admin),
) -> PlatformStatsResponse:
    return await admin.platform_stats(storage)
