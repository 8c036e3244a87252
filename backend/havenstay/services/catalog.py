"""Property catalog — listing creation, updates, approval and search."""

import logging
import uuid
from dataclasses import dataclass

from havenstay.errors import Forbidden, NotFound
from havenstay.models import Property, Review, User
from havenstay.schemas.property import PropertyCreate, PropertyQuery, PropertyUpdate
from havenstay.storage.base import PropertyFilters, Storage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PropertyDetail:
    property: Property
    host: User | None
    reviews: list[Review]
    avg_rating: float


def _can_manage(user: User | None, prop: Property) -> bool:
    return user is not None and (user.is_admin or prop.host_id == user.id)


async def _get_or_404(storage: Storage, property_id: uuid.UUID) -> Property:
    prop = await storage.get_property(property_id)
    if prop is None:
        raise NotFound("Property not found")
    return prop


async def get_managed_property(storage: Storage, user: User, property_id: uuid.UUID) -> Property:
    prop = await _get_or_404(storage, property_id)
    if not _can_manage(user, prop):
        raise Forbidden("Not authorized to update this property")
    return prop


async def create_property(storage: Storage, host: User, body: PropertyCreate, uploaded_images: list[str]) -> Property:
    """Create a listing owned by ``host``. It stays hidden until an admin approves it."""
    data = body.model_dump()
    if uploaded_images:
        data["images"] = uploaded_images
    prop = Property(host_id=host.id, is_approved=False, **data)
    prop = await storage.add_property(prop)
    logger.info("Property %s created by host %s, awaiting approval", prop.id, host.id)
    return prop


async def update_property(
    storage: Storage,
    user: User,
    property_id: uuid.UUID,
    patch: PropertyUpdate,
    uploaded_images: list[str] | None = None,
    keep_images: list[str] | None = None,
) -> Property:
    """Apply a patch as the owning host or an admin.

    New uploads are appended to ``keep_images`` (the previously stored images
    the client wants to retain). With neither uploads nor ``keep_images`` the
    image list only changes if the patch sets it.

    Raises:
        NotFound: Unknown property.
        Forbidden: Caller neither owns the property nor is an admin.
    """
    prop = await get_managed_property(storage, user, property_id)

    changes = patch.changes()
    if uploaded_images or keep_images is not None:
        changes["images"] = [*(keep_images or []), *(uploaded_images or [])]

    return await storage.update_property(prop, changes)


async def approve_property(storage: Storage, admin: User, property_id: uuid.UUID) -> Property:
    """Mark a listing approved. There is no way back; approving twice is a no-op."""
    prop = await _get_or_404(storage, property_id)
    if prop.is_approved:
        return prop
    prop = await storage.approve_property(prop)
    logger.info("Property %s approved by admin %s", prop.id, admin.id)
    return prop


async def list_properties(storage: Storage, query: PropertyQuery, user: User | None) -> list[Property]:
    """Search listings.

    Only approved, active listings are returned unless an admin passes
    explicit ``isApproved`` / ``isActive`` filters.

    Raises:
        Forbidden: A non-admin supplied approval or activity filters.
    """
    overrides = query.is_approved is not None or query.is_active is not None
    if overrides and (user is None or not user.is_admin):
        raise Forbidden("Only admins may filter by approval or activity")

    filters = PropertyFilters(
        city=query.city,
        neighborhood=query.neighborhood,
        property_type=query.property_type,
        min_price=query.min_price,
        max_price=query.max_price,
        guests=query.guests,
        bedrooms=query.bedrooms,
        is_approved=query.is_approved if overrides else True,
        is_active=query.is_active if overrides else True,
    )
    return await storage.list_properties(filters)


async def get_property_detail(storage: Storage, property_id: uuid.UUID, user: User | None) -> PropertyDetail:
    """Listing with host card, reviews and average rating.

    Unlisted properties are only visible to their host and admins.
    """
    prop = await _get_or_404(storage, property_id)
    if not prop.is_listable and not _can_manage(user, prop):
        raise NotFound("Property not found")

    host = await storage.get_user(prop.host_id)
    reviews = await storage.list_reviews_by_property(prop.id)
    avg_rating = sum(r.rating for r in reviews) / len(reviews) if reviews else 0
    return PropertyDetail(property=prop, host=host, reviews=reviews, avg_rating=avg_rating)


async def list_host_properties(storage: Storage, host: User) -> list[Property]:
    return await storage.list_properties_by_host(host.id)
