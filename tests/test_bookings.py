"""Tests for the booking record writer."""

import re

import pytest

from tests.conftest import ALICE, BOB
from transit_booking.schemas.booking_schema import BookingStatus, PaymentStatus
from transit_booking.storage.bookings import generate_reference


def _create(bookings, user_id=ALICE, **overrides):
    fields = {
        "user_id": user_id,
        "session_ref": "abc123",
        "departure_id": "dep-1",
        "passengers": 2,
        "total_amount": 20000,
    }
    fields.update(overrides)
    return bookings.create(**fields)


class TestReferences:
    def test_reference_format(self):
        assert re.fullmatch(r"BOOK-[0-9A-F]{8}", generate_reference())

    def test_references_are_unique(self, bookings):
        refs = {_create(bookings).booking_reference for _ in range(200)}
        assert len(refs) == 200


class TestCreate:
    def test_defaults(self, bookings):
        booking = _create(bookings)
        assert booking.status == BookingStatus.CONFIRMED
        assert booking.payment_status == PaymentStatus.PENDING
        assert booking.payment_reference is None
        assert bookings.get(booking.booking_reference) == booking

    @pytest.mark.parametrize("field", ["user_id", "session_ref", "departure_id"])
    def test_missing_required_field(self, bookings, field):
        with pytest.raises(ValueError, match=field):
            _create(bookings, **{field: " "})

    def test_zero_passengers_rejected(self, bookings):
        with pytest.raises(ValueError):
            _create(bookings, passengers=0)

    def test_list_for_user_only_returns_own(self, bookings):
        mine = _create(bookings)
        _create(bookings, user_id=BOB)
        assert bookings.list_for_user(ALICE) == [mine]

    def test_list_for_user_limit(self, bookings):
        for _ in range(7):
            _create(bookings)
        assert len(bookings.list_for_user(ALICE)) == 5
        assert len(bookings.list_for_user(ALICE, limit=10)) == 7


class TestPaymentFields:
    def test_record_payment_link(self, bookings):
        booking = _create(bookings)
        updated = bookings.record_payment_link(booking.booking_reference, "PSK-1", "https://pay/1")
        assert updated.payment_reference == "PSK-1"
        assert updated.authorization_url == "https://pay/1"
        assert bookings.find_by_payment_reference("PSK-1") == updated

    def test_first_link_wins(self, bookings):
        booking = _create(bookings)
        bookings.record_payment_link(booking.booking_reference, "PSK-1", "https://pay/1")
        again = bookings.record_payment_link(booking.booking_reference, "PSK-2", "https://pay/2")
        assert again.payment_reference == "PSK-1"
        assert bookings.find_by_payment_reference("PSK-2") is None

    def test_mark_payment(self, bookings):
        booking = _create(bookings)
        updated = bookings.mark_payment(booking.booking_reference, PaymentStatus.PAID)
        assert updated.payment_status == PaymentStatus.PAID
        assert updated.passengers == booking.passengers

    def test_mark_payment_unknown_reference(self, bookings):
        assert bookings.mark_payment("BOOK-00000000", PaymentStatus.PAID) is None
