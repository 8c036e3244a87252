"""Seed the database with Lagos sample listings.

Creates an admin, two hosts, a guest, six approved listings across Lekki,
Victoria Island, Ikoyi and Yaba, and three bookings: one pending, one
confirmed and one canceled by the guest.

Run from the backend directory:
    python -m scripts.seed_data
"""

import asyncio
import sys
from datetime import date, datetime, timedelta
from pathlib import Path

# Add backend to path so imports work when run as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from havenstay.auth.passwords import hash_password
from havenstay.database import async_session_factory, engine
from havenstay.models import Property, User
from havenstay.services import booking_engine
from havenstay.storage.base import Storage
from havenstay.storage.sql import SqlStorage

# ---------------------------------------------------------------------------
# Seed data definitions
# ---------------------------------------------------------------------------

SEED_PASSWORD = "havenstay123"

USERS = [
    {"email": "admin@havenstay.ng", "first_name": "Amaka", "last_name": "Eze", "role": "admin"},
    {"email": "tobi@havenstay.ng", "first_name": "Tobi", "last_name": "Adeyemi", "role": "host"},
    {"email": "zainab@havenstay.ng", "first_name": "Zainab", "last_name": "Bello", "role": "host"},
    {"email": "kunle@havenstay.ng", "first_name": "Kunle", "last_name": "Ajayi", "role": "guest"},
]

# Prices in kobo
PROPERTIES = [
    {
        "host": "tobi@havenstay.ng",
        "title": "Lekki Phase 1 Waterfront Apartment",
        "description": (
            "Bright two-bedroom apartment overlooking the lagoon, five minutes from "
            "Lekki Conservation Centre. 24/7 power, fast fibre internet and a rooftop pool."
        ),
        "address": "7 Admiralty Road, Lekki Phase 1",
        "neighborhood": "Lekki",
        "property_type": "entire_apartment",
        "price_per_night": 6500000,
        "cleaning_fee": 1000000,
        "max_guests": 4,
        "bedrooms": 2,
        "beds": 2,
        "bathrooms": 2,
        "amenities": ["wifi", "ac", "pool", "generator", "kitchen", "parking"],
        "house_rules": "No parties. Quiet hours after 10pm.",
        "cancellation_policy": "moderate",
    },
    {
        "host": "tobi@havenstay.ng",
        "title": "Cosy Room near Lekki Toll Gate",
        "description": "Private en-suite room in a shared flat. Great base for Eko Atlantic and VI.",
        "address": "22 Fola Osibo Street, Lekki Phase 1",
        "neighborhood": "Lekki",
        "property_type": "private_room",
        "price_per_night": 2500000,
        "cleaning_fee": 0,
        "max_guests": 2,
        "bedrooms": 1,
        "beds": 1,
        "bathrooms": 1,
        "amenities": ["wifi", "ac", "generator"],
        "house_rules": None,
        "cancellation_policy": "flexible",
    },
    {
        "host": "zainab@havenstay.ng",
        "title": "Victoria Island Executive Suite",
        "description": (
            "Serviced one-bedroom suite on Ahmadu Bello Way, walking distance to the "
            "business district. Daily housekeeping and a gym on site."
        ),
        "address": "1412 Ahmadu Bello Way, Victoria Island",
        "neighborhood": "Victoria Island",
        "property_type": "entire_apartment",
        "price_per_night": 9000000,
        "cleaning_fee": 1500000,
        "max_guests": 2,
        "bedrooms": 1,
        "beds": 1,
        "bathrooms": 1,
        "amenities": ["wifi", "ac", "gym", "generator", "workspace", "security"],
        "house_rules": "No smoking.",
        "cancellation_policy": "strict",
    },
    {
        "host": "zainab@havenstay.ng",
        "title": "Ikoyi Garden Duplex",
        "description": "Three-bedroom duplex with a private garden on a quiet Ikoyi close.",
        "address": "4 Glover Road, Ikoyi",
        "neighborhood": "Ikoyi",
        "property_type": "entire_apartment",
        "price_per_night": 15000000,
        "cleaning_fee": 2000000,
        "max_guests": 6,
        "bedrooms": 3,
        "beds": 4,
        "bathrooms": 3,
        "amenities": ["wifi", "ac", "garden", "generator", "kitchen", "parking", "security"],
        "house_rules": "No events without prior approval.",
        "cancellation_policy": "moderate",
    },
    {
        "host": "tobi@havenstay.ng",
        "title": "Yaba Tech Hub Studio",
        "description": "Compact studio a short walk from the Yaba tech cluster and UNILAG.",
        "address": "15 Herbert Macaulay Way, Yaba",
        "neighborhood": "Yaba",
        "property_type": "entire_apartment",
        "price_per_night": 1800000,
        "cleaning_fee": 300000,
        "max_guests": 2,
        "bedrooms": 0,
        "beds": 1,
        "bathrooms": 1,
        "amenities": ["wifi", "workspace", "generator"],
        "house_rules": None,
        "cancellation_policy": "flexible",
    },
    {
        "host": "zainab@havenstay.ng",
        "title": "Shared Co-living Space, Yaba",
        "description": "Bunk in a friendly co-living space with shared kitchen and lounge.",
        "address": "9 Commercial Avenue, Yaba",
        "neighborhood": "Yaba",
        "property_type": "shared_space",
        "price_per_night": 800000,
        "cleaning_fee": 0,
        "max_guests": 1,
        "bedrooms": 1,
        "beds": 1,
        "bathrooms": 1,
        "amenities": ["wifi", "kitchen", "laundry"],
        "house_rules": "Shared spaces must be kept tidy.",
        "cancellation_policy": "flexible",
    },
]

# ---------------------------------------------------------------------------
# Main seed function
# ---------------------------------------------------------------------------


async def populate(storage: Storage) -> bool:
    """Write the sample data through ``storage``.

    Returns ``False`` without writing anything if the admin account already exists.
    """
    if await storage.get_user_by_email(USERS[0]["email"]) is not None:
        print(f"⚠️  '{USERS[0]['email']}' already exists. Nothing to do.")
        return False

    # ------------------------------------------------------------------
    # 1. Users
    # ------------------------------------------------------------------
    users: dict[str, User] = {}
    for data in USERS:
        user = await storage.add_user(
            User(hashed_password=hash_password(SEED_PASSWORD), is_verified=True, **data)
        )
        users[user.email] = user
    print(f"✅ Created {len(users)} users")

    # ------------------------------------------------------------------
    # 2. Approved listings
    # ------------------------------------------------------------------
    properties: list[Property] = []
    for data in PROPERTIES:
        data = dict(data)
        host = users[data.pop("host")]
        prop = await storage.add_property(
            Property(host_id=host.id, city="Lagos", images=[], is_approved=True, is_active=True, **data)
        )
        properties.append(prop)
        print(f"   🏠 {prop.title} ({prop.neighborhood}) ₦{prop.price_per_night // 100:,}/night")

    # ------------------------------------------------------------------
    # 3. Bookings, through the booking engine
    # ------------------------------------------------------------------
    guest = users["kunle@havenstay.ng"]
    start = datetime.combine(date.today() + timedelta(days=14), datetime.min.time())

    pending = await booking_engine.create_booking(
        storage, guest, properties[0].id, start, start + timedelta(days=3)
    )
    confirmed = await booking_engine.create_booking(
        storage, guest, properties[2].id, start + timedelta(days=7), start + timedelta(days=9)
    )
    await booking_engine.update_booking_status(
        storage, users["zainab@havenstay.ng"], confirmed.id, "confirmed", payment_id="seed_payment_001"
    )
    canceled = await booking_engine.create_booking(
        storage, guest, properties[3].id, start + timedelta(days=21), start + timedelta(days=24)
    )
    await booking_engine.update_booking_status(storage, guest, canceled.id, "canceled")

    print(f"✅ Created 3 bookings (pending {pending.id}, confirmed {confirmed.id}, canceled {canceled.id})")
    print()
    print("=" * 60)
    print("📊 Seed Summary")
    print("=" * 60)
    print(f"   Users:       {len(users)} (password: {SEED_PASSWORD})")
    print(f"   Properties:  {len(properties)}")
    print("   Bookings:    3")
    print("=" * 60)
    return True


async def seed() -> None:
    """Populate the database with Lagos sample data."""
    async with async_session_factory() as session:
        storage = SqlStorage(session)
        if await populate(storage):
            await storage.commit()

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
