"""Account registration, login, profile updates and the waitlist."""

import logging

from havenstay.auth.passwords import hash_password, verify_password
from havenstay.errors import Conflict, InvalidInput
from havenstay.models import User, WaitlistEntry
from havenstay.schemas.auth import LoginRequest, ProfileUpdate, RegisterRequest
from havenstay.schemas.waitlist import WaitlistCreate
from havenstay.storage.base import Storage

logger = logging.getLogger(__name__)


async def register(storage: Storage, body: RegisterRequest) -> User:
    """Create an account with a bcrypt-hashed password.

    Raises:
        Conflict: The email is already registered.
    """
    email = body.email.lower()
    if await storage.get_user_by_email(email) is not None:
        raise Conflict("Email already registered")

    user = await storage.add_user(
        User(
            email=email,
            hashed_password=hash_password(body.password),
            first_name=body.first_name,
            last_name=body.last_name,
            role=body.role,
            phone_number=body.phone_number,
            is_verified=False,
        )
    )
    logger.info("Registered %s account %s", user.role, user.id)
    return user


async def authenticate(storage: Storage, body: LoginRequest) -> User:
    """Return the user whose email and password match.

    Unknown email and wrong password fail the same way.

    Raises:
        InvalidInput: Credentials do not match.
    """
    user = await storage.get_user_by_email(body.email.strip())
    if user is None or not verify_password(body.password, user.hashed_password):
        logger.warning("Failed login attempt for %s", body.email)
        raise InvalidInput("Invalid credentials")
    return user


async def update_profile(storage: Storage, user: User, patch: ProfileUpdate) -> User:
    return await storage.update_user(user, patch.changes())


async def join_waitlist(storage: Storage, body: WaitlistCreate) -> WaitlistEntry:
    """Capture a prospective user.

    Raises:
        Conflict: The email is already on the waitlist.
    """
    email = body.email.lower()
    if await storage.get_waitlist_entry_by_email(email) is not None:
        raise Conflict("Email already registered in waitlist")

    entry = await storage.add_waitlist_entry(
        WaitlistEntry(
            full_name=body.full_name,
            email=email,
            city=body.city,
            subscribe_to_newsletter=body.subscribe_to_newsletter,
        )
    )
    logger.info("Waitlist entry %s added (%s)", entry.id, entry.city)
    return entry
