"""Tests for option, count and yes/no resolution."""

import pytest

from transit_booking.conversation.choices import (
    is_affirmative,
    is_negative,
    parse_positive_int,
    resolve_choice,
)

CITIES = ["ABUJA", "LAGOS", "UYO"]


class TestResolveChoice:
    def test_by_number(self):
        assert resolve_choice("2", CITIES) == "LAGOS"

    def test_by_name_case_insensitive(self):
        assert resolve_choice("lagos", CITIES) == "LAGOS"

    def test_name_with_whitespace(self):
        assert resolve_choice("  Uyo ", CITIES) == "UYO"

    def test_out_of_range(self):
        assert resolve_choice("4", CITIES) is None

    def test_zero(self):
        assert resolve_choice("0", CITIES) is None

    def test_unknown_name(self):
        assert resolve_choice("Kano", CITIES) is None

    def test_empty(self):
        assert resolve_choice("   ", CITIES) is None

    def test_name_match_wins_over_position(self):
        assert resolve_choice("2", ["1", "2", "3"]) == "2"


class TestParsePositiveInt:
    @pytest.mark.parametrize("text,expected", [("1", 1), (" 12 ", 12), ("007", 7)])
    def test_valid(self, text, expected):
        assert parse_positive_int(text) == expected

    @pytest.mark.parametrize(
        "text", ["0", "-3", "2.5", "two", "2 seats", "", "+2", "1234567890", "9" * 5000]
    )
    def test_invalid(self, text):
        assert parse_positive_int(text) is None


class TestYesNo:
    @pytest.mark.parametrize("text", ["yes", "YES", "y", " Confirm "])
    def test_affirmative(self, text):
        assert is_affirmative(text)
        assert not is_negative(text)

    @pytest.mark.parametrize("text", ["no", "N", " No "])
    def test_negative(self, text):
        assert is_negative(text)
        assert not is_affirmative(text)

    @pytest.mark.parametrize("text", ["yeah", "nope", "ok", "yes please", ""])
    def test_neither(self, text):
        assert not is_affirmative(text)
        assert not is_negative(text)
