"""Auth API router — register, login, logout, me."""

import logging

from fastapi import APIRouter, Depends, Request, Response, status

from havenstay.api.deps import get_session_store, get_storage, require_authenticated
from havenstay.auth.dependencies import clear_session_cookie, set_session_cookie
from havenstay.auth.sessions import SessionStore
from havenstay.config import settings
from havenstay.models.user import User
from havenstay.schemas.auth import LoginRequest, ProfileUpdate, RegisterRequest, UserResponse
from havenstay.schemas.common import MessageResponse
from havenstay.services import accounts
from havenstay.storage.base import Storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


async def _start_session(request: Request, response: Response, sessions: SessionStore, user: User) -> None:
    """Bind a fresh session to ``user``, dropping any session the client already had."""
    previous = request.cookies.get(settings.session_cookie_name)
    if previous:
        await sessions.destroy(previous)
    token = await sessions.create(user.id)
    set_session_cookie(response, token)


# ---------------------------------------------------------------------------
# POST /register
# ---------------------------------------------------------------------------


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    request: Request,
    response: Response,
    storage: Storage = Depends(get_storage),
    sessions: SessionStore = Depends(get_session_store),
) -> UserResponse:
    """Register with email and password; the new account is logged in."""
    user = await accounts.register(storage, body)
    await storage.commit()
    await _start_session(request, response, sessions, user)
    return UserResponse.model_validate(user)


# ---------------------------------------------------------------------------
# POST /login
# ---------------------------------------------------------------------------


@router.post("/login", response_model=UserResponse)
async def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    storage: Storage = Depends(get_storage),
    sessions: SessionStore = Depends(get_session_store),
) -> UserResponse:
    """Authenticate with email and password and set the session cookie."""
    user = await accounts.authenticate(storage, body)
    await _start_session(request, response, sessions, user)
    return UserResponse.model_validate(user)


# ---------------------------------------------------------------------------
# POST /logout
# ---------------------------------------------------------------------------


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    response: Response,
    sessions: SessionStore = Depends(get_session_store),
) -> MessageResponse:
    """Destroy the current session. Succeeds even without one."""
    token = request.cookies.get(settings.session_cookie_name)
    if token:
        await sessions.destroy(token)
    clear_session_cookie(response)
    return MessageResponse(message="Logged out successfully")


# ---------------------------------------------------------------------------
# GET/PUT /me
# ---------------------------------------------------------------------------


@router.get("/me", response_model=UserResponse)
async def me(current_user: User = Depends(require_authenticated)) -> UserResponse:
    """Return the currently authenticated user's profile."""
    return UserResponse.model_validate(current_user)


@router.put("/me", response_model=UserResponse)
async def update_me(
    body: ProfileUpdate,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(require_authenticated),
) -> UserResponse:
    """Update the caller's own profile fields."""
    user = await accounts.update_profile(storage, current_user, body)
    await storage.commit()
    return UserResponse.model_validate(user)
