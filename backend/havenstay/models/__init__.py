"""SQLAlchemy models for HavenStay.

All models are imported here so that Alembic's autogenerate can discover
them via Base.metadata. If you add a new model, import it in this file.
"""

from havenstay.models.booking import Booking
from havenstay.models.message import Message
from havenstay.models.property import Property
from havenstay.models.review import Review
from havenstay.models.session import AuthSession
from havenstay.models.user import User
from havenstay.models.waitlist import WaitlistEntry

__all__ = [
    "AuthSession",
    "Booking",
    "Message",
    "Property",
    "Review",
    "User",
    "WaitlistEntry",
]
