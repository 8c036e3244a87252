"""Server-side login sessions for the SQL session store."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from havenstay.database import Base, CreatedAtMixin


class AuthSession(CreatedAtMixin, Base):
    """Binds a session token (stored as a sha256 digest) to a user."""

    __tablename__ = "auth_sessions"

    token_hash: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<AuthSession(user_id={self.user_id}, expires_at={self.expires_at})>"
