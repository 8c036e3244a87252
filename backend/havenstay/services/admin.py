"""Platform-wide counts for the admin dashboard."""

from collections import Counter

from havenstay.models.booking import BOOKING_STATUSES
from havenstay.schemas.admin import PlatformStatsResponse
from havenstay.storage.base import PropertyFilters, Storage


async def platform_stats(storage: Storage) -> PlatformStatsResponse:
    """Users by role, listings awaiting approval and bookings by status.

    Every booking status is present in the result, zero when unused.
    """
    roles = Counter(user.role for user in await storage.list_users())
    properties = await storage.list_properties(PropertyFilters())
    waitlist = await storage.list_waitlist_entries()
    by_status = dict.fromkeys(BOOKING_STATUSES, 0)
    by_status.update(await storage.count_bookings_by_status())

    return PlatformStatsResponse(
        total_users=sum(roles.values()),
        total_guests=roles["guest"],
        total_hosts=roles["host"],
        total_admins=roles["admin"],
        total_waitlist=len(waitlist),
        total_properties=len(properties),
        pending_properties=sum(1 for p in properties if not p.is_approved),
        bookings_by_status=by_status,
    )
