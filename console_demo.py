"""
Offline console demo: chat with the ordering assistant as if over WhatsApp.

Runs the real resolver, dialogue gate, message handler and in-memory
stores against the menu file from configuration. No WhatsApp account,
no network calls.

Usage:
    python console_demo.py
    python console_demo.py --owner
    python console_demo.py --scenario ordering
"""

import argparse
import sys

from whatsorder.config import settings
from whatsorder.conversation.intent_resolver import IntentResolver
from whatsorder.errors import CatalogUnavailableError
from whatsorder.handlers.message_handler import MessageHandler
from whatsorder.tools.menu_catalog import MenuCatalog, load_menu_file
from whatsorder.tools.order_ledger import OrderLedger
from whatsorder.tools.session_store import SessionStore

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"

DEMO_CUSTOMER_PHONE = "whatsapp:+919812345678"
DEMO_OWNER_PHONE = "+919000000001"


class ConsoleSession:
    """Feeds typed or scripted messages through the handler and prints replies."""

    # (sender, message) pairs; sender is "customer" or "owner"
    SCENARIOS: dict[str, list[tuple[str, str]]] = {
        "onboarding": [
            ("customer", "hi"),
            ("customer", "menu"),
            ("customer", "my name is priya sharma"),
            ("customer", "order 2 biryani"),
            ("customer", "12 MG Road, Bangalore"),
            ("customer", "Office at Cyber City"),
            ("customer", "menu"),
        ],
        "ordering": [
            ("customer", "Priya"),
            ("customer", "12 MG Road, Bangalore"),
            ("customer", "Home"),
            ("customer", "do you have lassi"),
            ("customer", "order 2 chicken biryani, 1 naan and 3 pizzas"),
            ("customer", "pay upi"),
            ("customer", "paid TXN987654321"),
            ("customer", "payment status"),
            ("customer", "status"),
        ],
        "owner": [
            ("customer", "Rahul"),
            ("customer", "Sector 15, Gurgaon"),
            ("customer", "Home"),
            ("customer", "order 1 item 4"),
            ("customer", "pay cod"),
            ("owner", "orders"),
            ("owner", "done 1"),
            ("owner", "add item Samosa 25 Crispy potato pastry"),
            ("owner", "edit item Samosa price 30"),
            ("owner", "toggle item 8"),
            ("owner", "stats"),
        ],
    }

    MAX_INPUT_LENGTH = 1000

    def __init__(self, catalog: MenuCatalog, phone: str, owner_phone: str) -> None:
        self.phone = phone
        self.owner_phone = owner_phone
        self.sessions = SessionStore()
        self.ledger = OrderLedger()
        resolver = IntentResolver(
            catalog,
            self.sessions,
            owner_phone=owner_phone,
            freshness_minutes=settings.session.freshness_minutes,
        )
        self.handler = MessageHandler(
            resolver,
            catalog,
            self.sessions,
            self.ledger,
            restaurant_name=settings.restaurant.name,
            upi_id=settings.restaurant.upi_id,
            currency=settings.restaurant.currency_symbol,
            recent_orders_limit=settings.display.recent_orders_limit,
            owner_orders_display_limit=settings.display.owner_orders_display_limit,
        )

    def bot_say(self, text: str) -> None:
        print(f"{GREEN}{BOLD}[{settings.restaurant.name}]{RESET} {GREEN}{text}{RESET}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def _send(self, phone: str, label: str, text: str) -> None:
        print(f"\n{BLUE}[{label}] {RESET}{text}")
        self.bot_say(self.handler.handle(text, phone))
        session = self.sessions.get(phone)
        if session is not None:
            self.system_log(
                f"name={session.name!r} home={session.home_location!r} "
                f"current={session.current_location!r} active={session.session_active}"
            )

    def _banner(self, title: str) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  WHATSAPP ORDERING ASSISTANT - {title}{RESET}")
        print(f"{BOLD}  Restaurant: {settings.restaurant.name}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

    def run_scenario(self, scenario: str) -> None:
        """Auto-play a pre-scripted scenario for demo purposes."""
        steps = self.SCENARIOS.get(scenario)
        if not steps:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return

        self._banner(f"Scenario: {scenario}")
        for sender, text in steps:
            if sender == "owner":
                self._send(self.owner_phone, "Owner", text)
            else:
                self._send(self.phone, "Customer", text)

        print(f"\n{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  Scenario '{scenario}' complete.{RESET}")
        print(f"{DIM}  Orders in ledger: {len(self.ledger.orders_for_owner(limit=500))} pending{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

    def run(self) -> None:
        self._banner("Console Demo")
        print(f"{BOLD}  Chatting as {self.phone}. Type 'quit' to exit{RESET}")
        label = "Owner" if self.handler.resolver.is_owner(self.phone) else "Customer"

        while True:
            try:
                user_input = input(f"\n{BLUE}[{label}] {RESET}").strip()
            except EOFError:
                print(f"\n{DIM}Session ended.{RESET}")
                return
            if not user_input:
                continue
            if user_input.lower() in ("quit", "exit", "q"):
                print(f"\n{DIM}Session ended.{RESET}")
                return
            if len(user_input) > self.MAX_INPUT_LENGTH:
                self.bot_say("That message is too long. Please keep it short.")
                continue

            self.bot_say(self.handler.handle(user_input, self.phone))


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline WhatsApp ordering demo")
    parser.add_argument(
        "--scenario",
        choices=sorted(ConsoleSession.SCENARIOS),
        default=None,
        help="Auto-play a pre-scripted scenario instead of interactive mode",
    )
    parser.add_argument("--phone", default=DEMO_CUSTOMER_PHONE, help="Sender phone number")
    parser.add_argument("--owner", action="store_true", help="Chat as the restaurant owner")
    args = parser.parse_args()

    try:
        catalog = load_menu_file(settings.restaurant.menu_file)
    except CatalogUnavailableError as exc:
        print(f"{RED}{exc}{RESET}")
        sys.exit(1)

    owner_phone = settings.restaurant.owner_phone or DEMO_OWNER_PHONE
    phone = owner_phone if args.owner else args.phone
    if not settings.restaurant.owner_phone:
        print(f"{YELLOW}RESTAURANT_OWNER_PHONE not set, using {DEMO_OWNER_PHONE} for the owner{RESET}")

    session = ConsoleSession(catalog, phone, owner_phone)
    if args.scenario:
        session.run_scenario(args.scenario)
    else:
        session.run()


if __name__ == "__main__":
    main()
