"""Tests for reply rendering."""

from datetime import date, datetime, timezone

from transit_booking.config import BusinessConfig
from transit_booking.replies.formatter import (
    BookingLine,
    DepartureRow,
    ReplyFormatter,
    ReviewDetails,
)

MORNING = datetime(2025, 6, 11, 9, 0, tzinfo=timezone.utc)


class TestValues:
    def test_local_time_uses_display_timezone(self, formatter):
        assert formatter.local_time(MORNING) == "10:00 AM"

    def test_day(self, formatter):
        assert formatter.day(date(2025, 6, 11)) == "Wed Jun 11 2025"

    def test_money(self, formatter):
        assert formatter.money(15000) == "NGN15,000"

    def test_from_config(self):
        config = BusinessConfig(
            name="Coastline", currency="GHS", display_timezone="Africa/Accra", support_contact="help@x",
        )
        formatter = ReplyFormatter.from_config(config)
        assert formatter.local_time(MORNING) == "09:00 AM"
        assert "Coastline" in formatter.welcome_menu()
        assert "help@x" in formatter.support()


class TestListings:
    def test_numbered_origins(self, formatter):
        reply = formatter.origin_prompt(["ABUJA", "UYO"])
        assert "*1.* ABUJA" in reply
        assert "*2.* UYO" in reply

    def test_departure_list(self, formatter):
        rows = [
            DepartureRow("Mini-Van", MORNING, 10000, 5),
            DepartureRow("Luxury Bus", datetime(2025, 6, 11, 15, tzinfo=timezone.utc), 12000, 3),
        ]
        reply = formatter.departure_list("UYO", "LAGOS", date(2025, 6, 11), rows)
        assert "UYO to LAGOS on Wed Jun 11 2025" in reply
        assert "*1.* Mini-Van at 10:00 AM - Fare: NGN10,000 - Seats: 5" in reply
        assert "*2.* Luxury Bus at 04:00 PM - Fare: NGN12,000 - Seats: 3" in reply

    def test_review_summary(self, formatter):
        reply = formatter.review_summary(ReviewDetails(
            origin="UYO",
            destination="LAGOS",
            travel_date=date(2025, 6, 11),
            departure_time=MORNING,
            vehicle_name="Mini-Van",
            passengers=2,
            fare=10000,
            total_amount=20000,
        ))
        assert "*Passengers:* 2" in reply
        assert "*Fare per person:* NGN10,000" in reply
        assert "*Total Amount:* NGN20,000" in reply
        assert "'Yes' to confirm" in reply

    def test_booking_list(self, formatter):
        reply = formatter.booking_list([
            BookingLine("BOOK-AAAA1111", "UYO", "LAGOS", MORNING, 2, "confirmed", "paid"),
            BookingLine("BOOK-BBBB2222", "?", "?", None, 1, "confirmed", "pending"),
        ])
        assert "*BOOK-AAAA1111* UYO to LAGOS, Wed Jun 11 2025 10:00 AM" in reply
        assert "payment paid" in reply
        assert "date unavailable" in reply

    def test_empty_booking_list(self, formatter):
        assert "don't have any bookings" in formatter.booking_list([])


class TestPaymentReplies:
    def test_payment_link(self, formatter):
        reply = formatter.payment_link("BOOK-AAAA1111", 20000, "https://pay.test/x")
        assert "BOOK-AAAA1111" in reply
        assert "NGN20,000" in reply
        assert "https://pay.test/x" in reply

    def test_setup_failed_mentions_retry(self, formatter):
        assert "'pay'" in formatter.payment_setup_failed("BOOK-AAAA1111")

    def test_sold_out_reports_remaining(self, formatter):
        assert "only 2 seats" in formatter.sold_out(2)
