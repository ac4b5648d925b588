"""
Offline console demo: chat with the booking engine in the terminal.

Uses the real conversation engine, session store, inventory ledger and
booking writer, loaded with the demo catalog. Payment links are only
requested when PAYSTACK_SECRET_KEY is set; otherwise bookings are
confirmed with payment pending.

Usage:
    python console_demo.py
    python console_demo.py --contact whatsapp:+2348012345678
    python console_demo.py --scenario booking
    python console_demo.py --scenario race
"""

import argparse
import asyncio
from typing import Optional

from transit_booking.config import settings
from transit_booking.conversation.engine import ConversationEngine
from transit_booking.payments.gateway import PaystackGateway
from transit_booking.storage.bookings import InMemoryBookingWriter
from transit_booking.storage.inventory import InMemoryInventoryLedger
from transit_booking.storage.seed import build_demo_inventory
from transit_booking.storage.session_store import InMemorySessionStore
from transit_booking.utils import normalize_contact

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"

DEFAULT_CONTACT = "+2348000000001"
SECOND_CONTACT = "+2348000000002"


class ConsoleSession:
    """Feeds terminal input to the engine and prints the replies."""

    # Pre-scripted scenarios for --scenario flag
    SCENARIOS: dict[str, list[str]] = {
        "booking": ["hi", "1", "uyo", "lagos", "tomorrow", "1", "2", "yes", "2"],
        "browse": ["menu", "1", "2", "1", "next friday", "reset", "support", "3"],
        "frustrated": ["hello", "1", "nowhere", "this is useless", "menu"],
    }

    MAX_INPUT_LENGTH = 500

    def __init__(self, contact: str) -> None:
        self.contact = normalize_contact(contact) or DEFAULT_CONTACT
        catalog, ledger = build_demo_inventory()
        self.ledger: InMemoryInventoryLedger = ledger
        self.bookings = InMemoryBookingWriter()
        payments: Optional[PaystackGateway] = None
        if settings.payment.enabled:
            payments = PaystackGateway.from_config(settings.payment)
        self.engine = ConversationEngine(
            sessions=InMemorySessionStore(),
            catalog=catalog,
            ledger=ledger,
            bookings=self.bookings,
            payments=payments,
        )

    def bot_say(self, text: str) -> None:
        print(f"{GREEN}{BOLD}[{settings.business.name}]{RESET} {GREEN}{text}{RESET}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def _log_state(self, contact: str) -> None:
        session = self.engine.sessions.get(contact)
        self.system_log(f"Step: {session.step.value} | Context: {session.context.kind}")

    def _banner(self, title: str) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  TRANSIT BOOKING - {title}{RESET}")
        print(f"{BOLD}  Business: {settings.business.name}{RESET}")
        print(f"{BOLD}  Payments: {'enabled' if settings.payment.enabled else 'disabled'}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

    async def send(self, text: str, contact: Optional[str] = None) -> None:
        contact = contact or self.contact
        print(f"\n{BLUE}[{contact}] {RESET}{text}")
        reply = await self.engine.handle_message(contact, text)
        self.bot_say(reply)
        self._log_state(contact)

    async def run_scenario(self, scenario: str) -> None:
        """Auto-play a pre-scripted scenario for demo purposes."""
        if scenario == "race":
            await self.run_race()
            return
        steps = self.SCENARIOS.get(scenario)
        if not steps:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return

        self._banner(f"Scenario: {scenario}")
        for step in steps:
            await self.send(step)

        print(f"\n{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  Scenario '{scenario}' complete.{RESET}")
        for booking in self.bookings.list_for_user(self.contact):
            print(f"{DIM}  Booking {booking.booking_reference}: {booking.passengers} seat(s), "
                  f"payment {booking.payment_status.value}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

    async def run_race(self) -> None:
        """Two contacts confirm on the same Mini-Van departure at the same moment."""
        self._banner("Scenario: race")
        # Mini-Van tomorrow 17:00 is the third UYO -> LAGOS departure
        script = ["1", "uyo", "lagos", "tomorrow", "3", "6"]
        for contact in (self.contact, SECOND_CONTACT):
            for step in script:
                await self.send(step, contact)

        print(f"\n{YELLOW}Both contacts confirm simultaneously...{RESET}")
        replies = await asyncio.gather(
            self.engine.handle_message(self.contact, "yes"),
            self.engine.handle_message(SECOND_CONTACT, "yes"),
        )
        for contact, reply in zip((self.contact, SECOND_CONTACT), replies):
            print(f"\n{BLUE}[{contact}] {RESET}yes")
            self.bot_say(reply)
            self._log_state(contact)

        departure_id: Optional[str] = None
        for contact in (self.contact, SECOND_CONTACT):
            for booking in self.bookings.list_for_user(contact):
                departure_id = booking.departure_id
                print(f"{DIM}  {contact} holds {booking.booking_reference} "
                      f"({booking.passengers} seats){RESET}")
        if departure_id:
            departure = self.ledger.get(departure_id)
            if departure is not None:
                print(f"{DIM}  Seats left on {departure_id}: {departure.available_seats}{RESET}")

    async def run(self) -> None:
        self._banner("Console Demo")
        print(f"{BOLD}  Chatting as {self.contact}. Type 'quit' to exit{RESET}")
        self.bot_say(self.engine.formatter.welcome_menu())

        while True:
            user_input = (await asyncio.to_thread(input, f"\n{BLUE}[{self.contact}] {RESET}")).strip()
            if not user_input:
                continue
            if user_input.lower() in ("quit", "exit", "q"):
                print(f"\n{DIM}Session ended.{RESET}")
                return
            if len(user_input) > self.MAX_INPUT_LENGTH:
                self.bot_say("That was quite long. Could you keep it brief for me?")
                continue

            reply = await self.engine.handle_message(self.contact, user_input)
            self.bot_say(reply)
            self._log_state(self.contact)


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline transit booking console demo")
    parser.add_argument(
        "--scenario",
        choices=["booking", "browse", "frustrated", "race"],
        default=None,
        help="Auto-play a pre-scripted scenario instead of interactive mode",
    )
    parser.add_argument(
        "--contact",
        default=DEFAULT_CONTACT,
        help="Contact handle to chat as (whatsapp: prefix accepted)",
    )
    args = parser.parse_args()

    session = ConsoleSession(args.contact)
    try:
        if args.scenario:
            asyncio.run(session.run_scenario(args.scenario))
        else:
            asyncio.run(session.run())
    except (KeyboardInterrupt, EOFError):
        print(f"\n{DIM}Session ended.{RESET}")


if __name__ == "__main__":
    main()
