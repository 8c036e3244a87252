"""Pydantic v2 schemas for the admin overview."""

from havenstay.schemas.common import ApiModel


class PlatformStatsResponse(ApiModel):
    """Headline counts for the admin dashboard."""

    total_users: int
    total_guests: int
    total_hosts: int
    total_admins: int
    total_waitlist: int
    total_properties: int
    pending_properties: int
    bookings_by_status: dict[str, int]
