"""Tests for the booking engine: pricing, overlap, lifecycle and atomicity."""

import asyncio
from datetime import datetime

import pytest

from conftest import drop_booking_lock, make_property, make_user, suspend_during_overlap_check
from havenstay.errors import DateConflict, Forbidden, InvalidDateRange, InvalidInput, InvalidTransition, NotFound
from havenstay.services import booking_engine
from havenstay.services.booking_engine import (
    ADMIN,
    GUEST,
    HOST,
    check_transition,
    compute_total_price,
    count_nights,
    ranges_overlap,
)
from havenstay.storage.memory import MemoryStorage


def d(day: int, hour: int = 0) -> datetime:
    return datetime(2025, 6, day, hour)


# ---------------------------------------------------------------------------
# Pure rules
# ---------------------------------------------------------------------------


class TestRules:
    def test_back_to_back_ranges_do_not_overlap(self):
        assert ranges_overlap(d(1), d(5), d(5), d(8)) is False
        assert ranges_overlap(d(5), d(8), d(1), d(5)) is False

    def test_partial_and_contained_overlap(self):
        assert ranges_overlap(d(1), d(5), d(4), d(8)) is True
        assert ranges_overlap(d(1), d(10), d(3), d(4)) is True
        assert ranges_overlap(d(3), d(4), d(1), d(10)) is True

    def test_nights_round_partial_days_up(self):
        assert count_nights(d(1), d(5)) == 4
        assert count_nights(d(1), d(1, 12)) == 1
        assert count_nights(d(1), d(2, 1)) == 2

    async def test_total_price(self, storage: MemoryStorage):
        host = await make_user(storage, "host")
        prop = await make_property(storage, host, price_per_night=20000, cleaning_fee=0)
        assert compute_total_price(prop, d(1), d(5)) == 80000

    async def test_total_price_includes_cleaning_fee(self, storage: MemoryStorage):
        host = await make_user(storage, "host")
        prop = await make_property(storage, host, price_per_night=10000, cleaning_fee=3000)
        assert compute_total_price(prop, d(1), d(3)) == 23000

    @pytest.mark.parametrize(
        "current,target",
        [
            ("pending", "completed"),
            ("pending", "pending"),
            ("confirmed", "pending"),
            ("confirmed", "confirmed"),
            ("canceled", "confirmed"),
            ("canceled", "pending"),
            ("completed", "canceled"),
            ("completed", "pending"),
        ],
    )
    def test_illegal_transitions(self, current, target):
        with pytest.raises(InvalidTransition):
            check_transition(current, target, {GUEST, HOST, ADMIN})

    def test_guest_cannot_confirm(self):
        with pytest.raises(Forbidden):
            check_transition("pending", "confirmed", {GUEST})

    def test_guest_can_cancel(self):
        check_transition("confirmed", "canceled", {GUEST})

    def test_invalid_transition_wins_over_role(self):
        with pytest.raises(InvalidTransition):
            check_transition("canceled", "confirmed", set())


# ---------------------------------------------------------------------------
# create_booking
# ---------------------------------------------------------------------------


class TestCreateBooking:
    async def test_creates_pending_with_server_price(self, storage: MemoryStorage):
        host = await make_user(storage, "host")
        guest = await make_user(storage, "guest")
        prop = await make_property(storage, host, price_per_night=20000, cleaning_fee=0)

        booking = await booking_engine.create_booking(storage, guest, prop.id, d(1), d(5))

        assert booking.status == "pending"
        assert booking.total_price == 80000
        assert booking.guest_id == guest.id
        assert booking.property_id == prop.id

    async def test_inverted_range_checked_first(self, storage: MemoryStorage):
        guest = await make_user(storage, "guest")
        with pytest.raises(InvalidDateRange):
            # Unknown property, but the range error comes first
            await booking_engine.create_booking(storage, guest, guest.id, d(5), d(5))

    async def test_unknown_property(self, storage: MemoryStorage):
        guest = await make_user(storage, "guest")
        with pytest.raises(NotFound):
            await booking_engine.create_booking(storage, guest, guest.id, d(1), d(2))

    async def test_unapproved_property_hidden_from_guests(self, storage: MemoryStorage):
        host = await make_user(storage, "host")
        guest = await make_user(storage, "guest")
        prop = await make_property(storage, host, approved=False)
        with pytest.raises(NotFound):
            await booking_engine.create_booking(storage, guest, prop.id, d(1), d(2))

    async def test_overlap_rejected_and_back_to_back_allowed(self, storage: MemoryStorage):
        host = await make_user(storage, "host")
        guest = await make_user(storage, "guest")
        prop = await make_property(storage, host)
        await booking_engine.create_booking(storage, guest, prop.id, d(1), d(5))

        with pytest.raises(DateConflict):
            await booking_engine.create_booking(storage, guest, prop.id, d(3), d(6))

        adjacent = await booking_engine.create_booking(storage, guest, prop.id, d(5), d(8))
        assert adjacent.status == "pending"

    async def test_canceled_booking_frees_dates(self, storage: MemoryStorage):
        host = await make_user(storage, "host")
        guest = await make_user(storage, "guest")
        prop = await make_property(storage, host)
        first = await booking_engine.create_booking(storage, guest, prop.id, d(1), d(5))
        await booking_engine.update_booking_status(storage, guest, first.id, "canceled")

        again = await booking_engine.create_booking(storage, guest, prop.id, d(1), d(5))
        assert again.id != first.id

    async def test_concurrent_requests_for_same_nights(self, storage: MemoryStorage, monkeypatch):
        suspend_during_overlap_check(monkeypatch, storage)
        host = await make_user(storage, "host")
        guests = [await make_user(storage, "guest") for _ in range(5)]
        prop = await make_property(storage, host)

        results = await asyncio.gather(
            *(booking_engine.create_booking(storage, g, prop.id, d(10), d(12)) for g in guests),
            return_exceptions=True,
        )

        created = [r for r in results if not isinstance(r, Exception)]
        conflicts = [r for r in results if isinstance(r, DateConflict)]
        assert len(created) == 1
        assert len(conflicts) == 4
        assert len(await storage.list_active_bookings(prop.id)) == 1

    async def test_overlap_check_alone_lets_concurrent_requests_double_book(
        self, storage: MemoryStorage, monkeypatch
    ):
        suspend_during_overlap_check(monkeypatch, storage)
        drop_booking_lock(monkeypatch, storage)
        host = await make_user(storage, "host")
        guests = [await make_user(storage, "guest") for _ in range(2)]
        prop = await make_property(storage, host)

        await asyncio.gather(
            *(booking_engine.create_booking(storage, g, prop.id, d(10), d(12)) for g in guests)
        )

        assert len(await storage.list_active_bookings(prop.id)) == 2


# ---------------------------------------------------------------------------
# update_booking_status
# ---------------------------------------------------------------------------


class TestUpdateBookingStatus:
    async def _setup(self, storage: MemoryStorage):
        host = await make_user(storage, "host")
        guest = await make_user(storage, "guest")
        prop = await make_property(storage, host)
        booking = await booking_engine.create_booking(storage, guest, prop.id, d(1), d(3))
        return host, guest, booking

    async def test_host_confirms_with_payment(self, storage: MemoryStorage):
        host, _, booking = await self._setup(storage)
        updated = await booking_engine.update_booking_status(
            storage, host, booking.id, "confirmed", payment_id="pay_123"
        )
        assert updated.status == "confirmed"
        assert updated.payment_id == "pay_123"

    async def test_full_lifecycle(self, storage: MemoryStorage):
        host, _, booking = await self._setup(storage)
        await booking_engine.update_booking_status(storage, host, booking.id, "confirmed")
        done = await booking_engine.update_booking_status(storage, host, booking.id, "completed")
        assert done.status == "completed"

        with pytest.raises(InvalidTransition):
            await booking_engine.update_booking_status(storage, host, booking.id, "canceled")

    async def test_guest_cannot_confirm(self, storage: MemoryStorage):
        _, guest, booking = await self._setup(storage)
        with pytest.raises(Forbidden):
            await booking_engine.update_booking_status(storage, guest, booking.id, "confirmed")

    async def test_other_host_cannot_cancel(self, storage: MemoryStorage):
        _, _, booking = await self._setup(storage)
        stranger = await make_user(storage, "host")
        with pytest.raises(Forbidden):
            await booking_engine.update_booking_status(storage, stranger, booking.id, "canceled")

    async def test_admin_can_confirm(self, storage: MemoryStorage):
        _, _, booking = await self._setup(storage)
        admin = await make_user(storage, "admin")
        updated = await booking_engine.update_booking_status(storage, admin, booking.id, "confirmed")
        assert updated.status == "confirmed"

    async def test_payment_id_only_on_confirm(self, storage: MemoryStorage):
        _, guest, booking = await self._setup(storage)
        with pytest.raises(InvalidInput):
            await booking_engine.update_booking_status(storage, guest, booking.id, "canceled", payment_id="pay_1")

    async def test_unknown_booking(self, storage: MemoryStorage):
        host, _, _ = await self._setup(storage)
        with pytest.raises(NotFound):
            await booking_engine.update_booking_status(storage, host, host.id, "confirmed")
