"""Login session stores.

A session binds an opaque random token to a user id. Tokens travel in an
httpOnly cookie; the store is the only place that can turn one back into an
identity. Expiry is sliding: every successful lookup pushes it forward by the
configured TTL.
"""

import hashlib
import logging
import secrets
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timedelta

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from havenstay.database import utcnow
from havenstay.models.session import AuthSession

logger = logging.getLogger(__name__)


def new_token() -> str:
    return secrets.token_urlsafe(32)


class SessionStore(ABC):
    """``create(user_id) -> token``, ``get(token) -> user_id``, ``destroy(token)``."""

    def __init__(self, ttl: timedelta) -> None:
        self.ttl = ttl

    @abstractmethod
    async def create(self, user_id: uuid.UUID) -> str: ...

    @abstractmethod
    async def get(self, token: str) -> uuid.UUID | None:
        """Resolve a token, sliding its expiry. Unknown or expired tokens give ``None``."""

    @abstractmethod
    async def destroy(self, token: str) -> None: ...


class InMemorySessionStore(SessionStore):
    """Process-local store; sessions vanish on restart."""

    def __init__(self, ttl: timedelta) -> None:
        super().__init__(ttl)
        self._sessions: dict[str, tuple[uuid.UUID, datetime]] = {}

    async def create(self, user_id: uuid.UUID) -> str:
        token = new_token()
        self._sessions[token] = (user_id, utcnow() + self.ttl)
        return token

    async def get(self, token: str) -> uuid.UUID | None:
        entry = self._sessions.get(token)
        if entry is None:
            return None
        user_id, expires_at = entry
        now = utcnow()
        if expires_at <= now:
            del self._sessions[token]
            return None
        self._sessions[token] = (user_id, now + self.ttl)
        return user_id

    async def destroy(self, token: str) -> None:
        self._sessions.pop(token, None)

    def __len__(self) -> int:
        return len(self._sessions)


class SqlSessionStore(SessionStore):
    """Sessions persisted in the ``auth_sessions`` table.

    Only a sha256 digest of each token is stored, so a database dump does not
    hand out live sessions. Each call runs in its own short transaction.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], ttl: timedelta) -> None:
        super().__init__(ttl)
        self._session_factory = session_factory

    @staticmethod
    def _digest(token: str) -> str:
        return hashlib.sha256(token.encode("utf-8")).hexdigest()

    async def create(self, user_id: uuid.UUID) -> str:
        token = new_token()
        async with self._session_factory() as db:
            db.add(AuthSession(token_hash=self._digest(token), user_id=user_id, expires_at=utcnow() + self.ttl))
            await db.commit()
        return token

    async def get(self, token: str) -> uuid.UUID | None:
        async with self._session_factory() as db:
            result = await db.execute(select(AuthSession).where(AuthSession.token_hash == self._digest(token)))
            record = result.scalar_one_or_none()
            if record is None:
                return None
            now = utcnow()
            if record.expires_at <= now:
                await db.delete(record)
                await db.commit()
                return None
            record.expires_at = now + self.ttl
            await db.commit()
            return record.user_id

    async def destroy(self, token: str) -> None:
        async with self._session_factory() as db:
            await db.execute(delete(AuthSession).where(AuthSession.token_hash == self._digest(token)))
            await db.commit()

    async def purge_expired(self) -> int:
        """Delete expired sessions; returns how many were removed."""
        async with self._session_factory() as db:
            result = await db.execute(delete(AuthSession).where(AuthSession.expires_at <= utcnow()))
            await db.commit()
        if result.rowcount:
            logger.info("Purged %d expired sessions", result.rowcount)
        return result.rowcount or 0
