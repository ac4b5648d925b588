"""Tests for travel date parsing."""

from datetime import date, datetime, timedelta, timezone

import pytest

from transit_booking.conversation.dates import day_bounds, parse_travel_date, reference_day

# Tuesday
TODAY = date(2025, 6, 10)


class TestKeywords:
    def test_today(self):
        assert parse_travel_date("today", TODAY) == TODAY

    def test_tomorrow(self):
        assert parse_travel_date("Tomorrow", TODAY) == date(2025, 6, 11)

    def test_surrounding_whitespace(self):
        assert parse_travel_date("  tomorrow ", TODAY) == date(2025, 6, 11)


class TestNextWeekday:
    @pytest.mark.parametrize("text,expected", [
        ("next wednesday", date(2025, 6, 11)),
        ("next friday", date(2025, 6, 13)),
        ("next monday", date(2025, 6, 16)),
        ("Next  Sunday", date(2025, 6, 15)),
    ])
    def test_upcoming_weekday(self, text, expected):
        assert parse_travel_date(text, TODAY) == expected

    def test_same_weekday_rolls_a_full_week(self):
        assert parse_travel_date("next tuesday", TODAY) == date(2025, 6, 17)

    def test_unknown_weekday(self):
        assert parse_travel_date("next funday", TODAY) is None


class TestIsoDates:
    def test_valid_future_date(self):
        assert parse_travel_date("2025-07-01", TODAY) == date(2025, 7, 1)

    def test_impossible_date(self):
        assert parse_travel_date("2025-02-30", TODAY) is None

    def test_past_date(self):
        assert parse_travel_date("2024-01-01", TODAY) is None

    @pytest.mark.parametrize("text", ["2025-6-11", "11/06/2025", "2025-06-11T09:00", "June 11"])
    def test_other_formats_rejected(self, text):
        assert parse_travel_date(text, TODAY) is None

    def test_leap_day(self):
        assert parse_travel_date("2028-02-29", TODAY) == date(2028, 2, 29)


class TestReferenceDay:
    def test_uses_utc_day(self):
        # 23:30 in Lagos on the 10th is still the 10th in UTC
        lagos = timezone(timedelta(hours=1))
        assert reference_day(datetime(2025, 6, 10, 23, 30, tzinfo=lagos)) == date(2025, 6, 10)
        # 00:30 in Lagos on the 11th is 23:30 UTC on the 10th
        assert reference_day(datetime(2025, 6, 11, 0, 30, tzinfo=lagos)) == date(2025, 6, 10)

    def test_naive_treated_as_utc(self):
        assert reference_day(datetime(2025, 6, 10, 23, 59)) == date(2025, 6, 10)

    def test_day_bounds_are_half_open(self):
        start, end = day_bounds(date(2025, 6, 11))
        assert start == datetime(2025, 6, 11, tzinfo=timezone.utc)
        assert end - start == timedelta(days=1)
