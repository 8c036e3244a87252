"""FastAPI authentication dependencies for route protection.

Identity comes from the session cookie; the guards below layer role checks on
top of it:

- ``require_authenticated`` — any logged-in user, else 401
- ``require_host`` — host or admin, else 401/403
- ``require_admin`` — admin only, else 401/403
"""

from datetime import timedelta

from fastapi import Depends, Request, Response

from havenstay.auth.sessions import InMemorySessionStore, SessionStore, SqlSessionStore
from havenstay.config import Settings, settings
from havenstay.errors import Forbidden, Unauthorized
from havenstay.models.user import User
from havenstay.storage.base import Storage
from havenstay.storage.dependencies import get_storage


def build_session_store(config: Settings) -> SessionStore:
    """Create the session store selected by ``SESSION_BACKEND``."""
    ttl = timedelta(hours=config.session_ttl_hours)
    if config.session_backend == "memory":
        return InMemorySessionStore(ttl)

    from havenstay.database import async_session_factory

    return SqlSessionStore(async_session_factory, ttl)


def get_session_store(request: Request) -> SessionStore:
    """Return the application's session store (set up in the lifespan handler)."""
    return request.app.state.session_store


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_ttl_hours * 3600,
        httponly=True,
        secure=settings.is_production,
        samesite="none" if settings.is_production else "lax",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        secure=settings.is_production,
        samesite="none" if settings.is_production else "lax",
    )


async def get_optional_user(
    request: Request,
    response: Response,
    storage: Storage = Depends(get_storage),
    sessions: SessionStore = Depends(get_session_store),
) -> User | None:
    """Resolve the caller from the session cookie, or ``None`` when anonymous.

    A valid lookup slides the session; the cookie is re-issued so the browser
    keeps the same lifetime.
    """
    token = request.cookies.get(settings.session_cookie_name)
    if not token:
        return None

    user_id = await sessions.get(token)
    if user_id is None:
        return None

    user = await storage.get_user(user_id)
    if user is None:
        return None

    set_session_cookie(response, token)
    return user


async def require_authenticated(user: User | None = Depends(get_optional_user)) -> User:
    """Return the logged-in user.

    Raises:
        Unauthorized: If there is no valid session.
    """
    if user is None:
        raise Unauthorized()
    return user


async def require_host(user: User | None = Depends(get_optional_user)) -> User:
    """Return the caller if they are a host or an admin.

    Raises:
        Unauthorized: If there is no valid session.
        Forbidden: If the caller's role is ``guest``.
    """
    if user is None:
        raise Unauthorized()
    if not user.is_host:
        raise Forbidden("Forbidden: Requires host privileges")
    return user


async def require_admin(user: User | None = Depends(get_optional_user)) -> User:
    """Return the caller if they are an admin.

    Raises:
        Unauthorized: If there is no valid session.
        Forbidden: If the caller is not an admin.
    """
    if user is None:
        raise Unauthorized()
    if not user.is_admin:
        raise Forbidden("Forbidden: Requires admin privileges")
    return user
