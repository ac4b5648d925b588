"""
Reply text for every dialogue step.

Replies are plain text with WhatsApp-style ``*bold*`` emphasis. The
emphasis is cosmetic; nothing downstream parses it.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Sequence
from zoneinfo import ZoneInfo

from transit_booking.config import BusinessConfig
from transit_booking.utils import format_amount

DATE_HINT = "*YYYY-MM-DD*, *today*, *tomorrow*, or *next Monday*"


@dataclass(frozen=True)
class DepartureRow:
    """One line of a departure listing."""
    vehicle_name: str
    departure_time: datetime
    fare: int
    available_seats: int


@dataclass(frozen=True)
class ReviewDetails:
    origin: str
    destination: str
    travel_date: date
    departure_time: datetime
    vehicle_name: str
    passengers: int
    fare: int
    total_amount: int


@dataclass(frozen=True)
class BookingLine:
    """One booking in a 'check my booking' listing."""
    reference: str
    origin: str
    destination: str
    departure_time: Optional[datetime]
    passengers: int
    status: str
    payment_status: str


def _numbered(options: Sequence[str]) -> str:
    return "\n".join(f"*{i}.* {option}" for i, option in enumerate(options, start=1))


class ReplyFormatter:
    """Renders state-specific replies with business currency and timezone."""

    def __init__(
        self,
        business_name: str,
        currency: str,
        display_timezone: str,
        support_contact: str,
    ) -> None:
        self.business_name = business_name
        self.currency = currency
        self.tz = ZoneInfo(display_timezone)
        self.support_contact = support_contact

    @classmethod
    def from_config(cls, config: BusinessConfig) -> "ReplyFormatter":
        return cls(
            business_name=config.name,
            currency=config.currency,
            display_timezone=config.display_timezone,
            support_contact=config.support_contact,
        )

    # ------------------------------------------------------------------ #
    # Value rendering
    # ------------------------------------------------------------------ #

    def money(self, amount: int) -> str:
        return format_amount(amount, self.currency)

    def local_time(self, moment: datetime) -> str:
        return moment.astimezone(self.tz).strftime("%I:%M %p")

    @staticmethod
    def day(value: date) -> str:
        return value.strftime("%a %b %d %Y")

    # ------------------------------------------------------------------ #
    # Menus and global commands
    # ------------------------------------------------------------------ #

    def welcome_menu(self) -> str:
        return (
            f"Welcome to {self.business_name}! Here's what I can do for you:\n\n"
            "*1.* Book a new trip\n"
            "*2.* Check my booking\n"
            "*3.* Help & Support\n\n"
            "Please reply with the number of your choice, or type 'reset' to start over."
        )

    def menu_not_understood(self) -> str:
        return "I didn't understand that. Please choose from the options (1, 2, 3) or type 'menu' to see options."

    def reset_ack(self) -> str:
        return "Okay, I've reset our conversation. Type 'menu' to start over."

    def support(self) -> str:
        return (
            f"You can reach a member of our team on {self.support_contact}. "
            "Type 'menu' to return to the main menu."
        )

    def help(self) -> str:
        return (
            "Reply *1* to book a trip and I'll walk you through origin, destination, date, "
            "departure and passengers. Type 'reset' at any time to start over, or 'support' "
            "to reach our team."
        )

    def apology_prefix(self) -> str:
        return (
            "I sense some frustration, and I'm sorry if something isn't working as expected. "
            "You can type 'reset' to start over or 'support' to reach a person.\n\n"
        )

    def upbeat_prefix(self) -> str:
        return "Fantastic! "

    # ------------------------------------------------------------------ #
    # Route selection
    # ------------------------------------------------------------------ #

    def no_routes(self) -> str:
        return "Sorry, no routes are currently available. Please try again later."

    def origin_prompt(self, origins: Sequence[str]) -> str:
        return (
            "Great! Where would you like to *depart from*?\n\n"
            f"{_numbered(origins)}\n\n"
            "Please reply with the city name or number."
        )

    def origin_reprompt(self, origins: Sequence[str]) -> str:
        return (
            "I didn't recognize that departure city. Please choose from the list "
            "or type 'menu' to start over.\n\n"
            f"Available origins:\n{_numbered(origins)}"
        )

    def destination_prompt(self, origin: str, destinations: Sequence[str]) -> str:
        return (
            f"Okay, from {origin}. Where would you like to *go to*?\n\n"
            f"{_numbered(destinations)}\n\n"
            "Please reply with the city name or number."
        )

    def destination_reprompt(self, origin: str, destinations: Sequence[str]) -> str:
        return (
            "I didn't recognize that destination city. Please choose from the list "
            "or type 'menu' to start over.\n\n"
            f"Available destinations from {origin}:\n{_numbered(destinations)}"
        )

    def no_destinations(self, origin: str) -> str:
        return (
            f"Sorry, no destinations are available from {origin} right now. "
            "Type 'menu' to start again with a different origin."
        )

    def route_unavailable(self, origin: str, destination: str) -> str:
        return (
            f"Sorry, there is no active route from {origin} to {destination} right now. "
            "Type 'menu' to start again."
        )

    # ------------------------------------------------------------------ #
    # Date and departure selection
    # ------------------------------------------------------------------ #

    def date_prompt(self, destination: str) -> str:
        return f"Got it, to {destination}. When would you like to travel? Please provide the *date* ({DATE_HINT})."

    def invalid_date(self) -> str:
        return (
            "I couldn't understand that date or it's in the past. "
            f"Please provide the date as {DATE_HINT}."
        )

    def no_departures(self, origin: str, destination: str, travel_date: date) -> str:
        return (
            f"Sorry, no available departures found for {origin} to {destination} on "
            f"{self.day(travel_date)}. Please choose another date or type 'reset'."
        )

    def departure_list(
        self, origin: str, destination: str, travel_date: date, rows: Sequence[DepartureRow]
    ) -> str:
        lines = [
            f"Here are the available departures for {origin} to {destination} on {self.day(travel_date)}:",
            "",
        ]
        for i, row in enumerate(rows, start=1):
            lines.append(
                f"*{i}.* {row.vehicle_name} at {self.local_time(row.departure_time)} - "
                f"Fare: {self.money(row.fare)} - Seats: {row.available_seats}"
            )
        lines.append("")
        lines.append("Please reply with the number of your preferred departure.")
        return "\n".join(lines)

    def departure_choice_reprompt(self, count: int) -> str:
        return f"I didn't understand that choice. Please reply with a number from 1 to {count}."

    def departure_full(self) -> str:
        return "Sorry, that departure has just sold out. Please choose another one from the list or type 'reset'."

    def departure_selected(self, departure_time: datetime, vehicle_name: str, available_seats: int) -> str:
        return (
            f"You've selected the {self.local_time(departure_time)} departure with {vehicle_name}. "
            f"How many passengers will be traveling? (Available seats: {available_seats})"
        )

    def invalid_passengers(self, available_seats: int) -> str:
        return (
            "Invalid number of passengers or not enough seats available "
            f"({available_seats} seats left). Please enter a valid number."
        )

    # ------------------------------------------------------------------ #
    # Review and confirmation
    # ------------------------------------------------------------------ #

    def review_summary(self, details: ReviewDetails) -> str:
        return (
            "Please review your booking details:\n\n"
            f"*From:* {details.origin}\n"
            f"*To:* {details.destination}\n"
            f"*Date:* {self.day(details.travel_date)}\n"
            f"*Time:* {self.local_time(details.departure_time)}\n"
            f"*Vehicle:* {details.vehicle_name}\n"
            f"*Passengers:* {details.passengers}\n"
            f"*Fare per person:* {self.money(details.fare)}\n"
            f"*Total Amount:* {self.money(details.total_amount)}\n\n"
            "Reply 'Yes' to confirm or 'No' to cancel."
        )

    def review_reprompt(self) -> str:
        return "Please reply with 'Yes' to confirm or 'No' to cancel."

    def booking_cancelled(self) -> str:
        return "Okay, I've cancelled the booking process. Type 'menu' to start over."

    def payment_link(self, reference: str, amount: int, url: str) -> str:
        return (
            f"Your booking (Ref: *{reference}*) has been created. Please complete your payment of "
            f"{self.money(amount)} using this secure link:\n\n{url}\n\n"
            "Your seats are held for this booking while we wait for payment."
        )

    def booking_confirmed(self, reference: str, amount: int) -> str:
        return (
            f"Your booking (Ref: *{reference}*) is confirmed. Amount due: {self.money(amount)}. "
            "Type 'menu' to make another booking."
        )

    def payment_setup_failed(self, reference: str) -> str:
        return (
            f"Your booking (Ref: *{reference}*) is saved and your seats are held, but I couldn't "
            "set up the payment link just now. Reply 'pay' to try again, or 'support' for help."
        )

    def awaiting_payment(self) -> str:
        return (
            "I'm currently waiting for your payment confirmation. If you've already paid, please wait "
            "a moment for me to update. Reply 'pay' to see your payment link again, 'support' for help, "
            "or 'reset' to start over."
        )

    def payment_received(self, reference: str) -> str:
        return f"Payment received for booking *{reference}*. Have a safe trip! Type 'menu' to book again."

    def payment_not_completed(self, reference: str) -> str:
        return f"Your payment for booking *{reference}* was not completed. Reply 'pay' to try again."

    # ------------------------------------------------------------------ #
    # Failures
    # ------------------------------------------------------------------ #

    def sold_out(self, available: int) -> str:
        return (
            f"Sorry, only {available} seats are now available for that departure. "
            "Type 'menu' to start a new booking."
        )

    def departure_unavailable(self) -> str:
        return "Sorry, that departure is no longer available. Type 'menu' to start a new booking."

    def flow_reset(self) -> str:
        return "Something went wrong with your booking details, so I've started over. Type 'menu' to begin again."

    def booking_failed(self) -> str:
        return "Sorry, I couldn't complete your booking. Type 'menu' to try again."

    # ------------------------------------------------------------------ #
    # Booking lookup
    # ------------------------------------------------------------------ #

    def booking_list(self, lines: Sequence[BookingLine]) -> str:
        if not lines:
            return "You don't have any bookings yet. Reply *1* to book a trip."
        rendered = ["Your recent bookings:", ""]
        for line in lines:
            when = (
                f"{self.day(line.departure_time.astimezone(self.tz).date())} "
                f"{self.local_time(line.departure_time)}"
                if line.departure_time else "date unavailable"
            )
            rendered.append(
                f"*{line.reference}* {line.origin} to {line.destination}, {when}, "
                f"{line.passengers} passenger(s) - {line.status}, payment {line.payment_status}"
            )
        return "\n".join(rendered)
