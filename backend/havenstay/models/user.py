"""User model — authentication and profile."""

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from havenstay.database import Base, CreatedAtMixin, UUIDPrimaryKeyMixin

USER_ROLES = ("guest", "host", "admin")


class User(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    """Marketplace account. Role is fixed at registration."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str] = mapped_column(String(255), nullable=False)
    last_name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), default="guest", nullable=False, index=True)  # guest, host, admin
    phone_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    profile_picture: Mapped[str | None] = mapped_column(String(512), nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def is_host(self) -> bool:
        """Hosts and admins may manage listings."""
        return self.role in ("host", "admin")

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} role={self.role!r}>"
