"""
Split Ledger - CLI Interface

Track shared expenses with contacts and groups and see who owes whom.
"""
import sys
from typing import Optional

from .balance_calculator import BalanceCalculator
from .config import get_settings
from .dashboard import Dashboard
from .ledger import Ledger
from .logging_config import configure_logging
from .models import USER_ID
from .settle_up import settle_up, settle_up_group
from .settlement import DebtSimplifier
from .storage import load_ledger, save_ledger


class SplitLedgerApp:
    """Main application class for the Split Ledger."""

    def __init__(self, ledger: Optional[Ledger] = None, data_file: Optional[str] = None):
        self.ledger = ledger if ledger is not None else Ledger()
        self.data_file = data_file

    @classmethod
    def from_file(cls, data_file: str) -> "SplitLedgerApp":
        return cls(load_ledger(data_file), data_file=data_file)

    def save(self) -> None:
        if self.data_file:
            save_ledger(self.ledger, self.data_file)

    def _resolve(self, name: str) -> Optional[str]:
        """Participant id for a typed name; 'you' means the primary user."""
        if name.lower() in ("you", "me", get_settings().user_name.lower()):
            return USER_ID
        contact = self.ledger.get_contact_by_name(name)
        return contact.id if contact else None

    def add_contact(self, name: str) -> None:
        if self.ledger.get_contact_by_name(name):
            print(f"Error: Contact '{name}' already exists!")
            return
        c = self.ledger.add_contact(name)
        self.save()
        print(f"Added: {name} (ID: {c.id})")

    def create_group(self, name: str, member_names: list[str]) -> None:
        members = []
        for member in member_names:
            pid = self._resolve(member)
            if pid is None:
                print(f"Error: Contact '{member}' not found!")
                return
            members.append(pid)
        g = self.ledger.add_group(name, members)
        self.save()
        print(f"Created group: {name} (ID: {g.id})")

    def add_expense(
        self,
        description: str,
        amount: float,
        paid_by_name: str,
        split_names: list[str],
        group_name: Optional[str] = None,
        custom: Optional[dict[str, float]] = None,
        category: Optional[str] = None
    ) -> None:
        """Record an expense, split equally unless custom amounts are given."""
        payer = self._resolve(paid_by_name)
        if payer is None:
            print(f"Error: Participant '{paid_by_name}' not found!")
            return

        group_id = None
        split_between = []
        if group_name is not None:
            group = self.ledger.get_group_by_name(group_name)
            if group is None:
                print(f"Error: Group '{group_name}' not found!")
                return
            group_id = group.id
            if not split_names:
                split_between = list(group.all_members())

        for name in split_names:
            pid = self._resolve(name)
            if pid is None:
                print(f"Error: Participant '{name}' not found!")
                return
            split_between.append(pid)

        custom_splits = None
        if custom:
            custom_splits = {}
            for name, amt in custom.items():
                pid = self._resolve(name)
                if pid is None:
                    print(f"Error: Participant '{name}' not found!")
                    return
                custom_splits[pid] = amt

        try:
            self.ledger.record_transaction(
                description=description,
                amount=amount,
                payer=payer,
                split_between=split_between,
                custom_splits=custom_splits,
                group_id=group_id,
                category=category
            )
        except ValueError as e:
            print(f"Error: {e}")
            return

        self.save()
        print(f"Added expense: {description} ({amount:.2f})")

    def show_balances(self) -> None:
        """Display the balance with every contact."""
        calculator = BalanceCalculator(self.ledger)

        print("\n--- Balances ---")
        df = calculator.get_balances()
        if df.empty:
            print("No contacts")
            return

        tolerance = get_settings().tolerance
        for _, row in df.iterrows():
            balance = row['balance']
            if abs(balance) < tolerance:
                print(f"  {row['name']}: settled up")
            elif balance > 0:
                print(f"  {row['name']}: owes you {balance:.2f}")
            else:
                print(f"  {row['name']}: you owe {-balance:.2f}")

        summary = calculator.get_contact_summary()
        print(f"\n  Owed to you: {summary['total_owed_to_you']:.2f}")
        print(f"  You owe: {-summary['total_you_owe']:.2f}")
        print()

    def show_history(self, contact_name: str) -> None:
        contact = self.ledger.get_contact_by_name(contact_name)
        if not contact:
            print(f"Error: Contact '{contact_name}' not found!")
            return

        print(f"\n--- History with {contact.name} ---")
        df = BalanceCalculator(self.ledger).get_history_dataframe(contact.id)
        if df.empty:
            print("No transactions recorded")
            return

        for _, row in df.iterrows():
            print(f"  {row['date']:%Y-%m-%d} {row['description']}: "
                  f"{row['amount']:.2f} (paid by {row['paid_by']}, your share {row['your_share']:.2f})")
        print()

    def settle_contact(self, contact_name: str) -> None:
        contact = self.ledger.get_contact_by_name(contact_name)
        if not contact:
            print(f"Error: Contact '{contact_name}' not found!")
            return

        tx = settle_up(self.ledger, contact.id)
        if tx is None:
            print(f"You are settled up with {contact.name}")
            return

        self.save()
        print(f"Recorded: {self.ledger.display_name(tx.payer)} paid {tx.amount:.2f}")

    def show_group(self, group_name: str) -> None:
        group = self.ledger.get_group_by_name(group_name)
        if not group:
            print(f"Error: Group '{group_name}' not found!")
            return

        print(f"\n--- {group.name} ---")
        print(DebtSimplifier(self.ledger).get_settlement_summary(group.id))
        print()

    def settle_group(self, group_name: str) -> None:
        group = self.ledger.get_group_by_name(group_name)
        if not group:
            print(f"Error: Group '{group_name}' not found!")
            return

        settlements = settle_up_group(self.ledger, group.id)
        if not settlements:
            print(f"You are settled up in {group.name}")
            return

        self.save()
        for tx in settlements:
            receiver = next(pid for pid in tx.split_between if pid != tx.payer)
            print(f"Recorded: {self.ledger.display_name(tx.payer)} paid "
                  f"{self.ledger.display_name(receiver)} {tx.amount:.2f}")

    def show_dashboard(self) -> None:
        dashboard = Dashboard(self.ledger)

        print("\n--- Dashboard ---")
        print(f"  Spent this month: {dashboard.monthly_spending():.2f}")
        for category, amount in dashboard.spending_by_category().items():
            print(f"    {category}: {amount:.2f}")

        for _, row in dashboard.contact_balances().iterrows():
            print(f"  {row['name']}: {row['balance']:+.2f}")
        for _, row in dashboard.group_summaries().iterrows():
            print(f"  [group] {row['name']}: {row['balance']:+.2f}")
        print()


def _split_names(text: str) -> list[str]:
    return [name.strip() for name in text.split(",") if name.strip()]


def interactive_mode(data_file: Optional[str] = None):
    """Run the application in interactive mode."""
    app = SplitLedgerApp.from_file(data_file or get_settings().data_file)

    print("=" * 50)
    print("  Split Ledger - Interactive Mode")
    print("=" * 50)
    print("\nCommands:")
    print("  contact <name>                      - Add contact")
    print("  group <name> <a,b,...>              - Create group")
    print("  expense <desc> <amt> <payer> <a,b>  - Add equal split expense")
    print("  gexpense <group> <desc> <amt> <payer> - Add group expense")
    print("  balances                            - Show balances")
    print("  history <contact>                   - Show history with contact")
    print("  settle <contact>                    - Settle up with contact")
    print("  debts <group>                       - Show who owes whom")
    print("  gsettle <group>                     - Settle up in group")
    print("  dashboard                           - Show overview")
    print("  quit                                - Exit")
    print()

    while True:
        try:
            cmd = input("> ").strip().split()
            if not cmd:
                continue

            action = cmd[0].lower()

            if action == "quit" or action == "exit":
                print("Goodbye!")
                break
            elif action == "contact" and len(cmd) >= 2:
                app.add_contact(" ".join(cmd[1:]))
            elif action == "group" and len(cmd) >= 3:
                app.create_group(cmd[1], _split_names(" ".join(cmd[2:])))
            elif action == "expense" and len(cmd) >= 5:
                app.add_expense(cmd[1], float(cmd[2]), cmd[3], _split_names(" ".join(cmd[4:])))
            elif action == "gexpense" and len(cmd) >= 5:
                app.add_expense(cmd[2], float(cmd[3]), cmd[4], [], group_name=cmd[1])
            elif action == "balances":
                app.show_balances()
            elif action == "history" and len(cmd) >= 2:
                app.show_history(" ".join(cmd[1:]))
            elif action == "settle" and len(cmd) >= 2:
                app.settle_contact(" ".join(cmd[1:]))
            elif action == "debts" and len(cmd) >= 2:
                app.show_group(" ".join(cmd[1:]))
            elif action == "gsettle" and len(cmd) >= 2:
                app.settle_group(" ".join(cmd[1:]))
            elif action == "dashboard":
                app.show_dashboard()
            else:
                print("Unknown command. Type 'quit' to exit.")

        except KeyboardInterrupt:
            print("\nGoodbye!")
            break
        except (ValueError, KeyError) as e:
            print(f"Error: {e}")


def demo():
    """Run a demonstration of the split ledger."""
    print("=" * 50)
    print("  Split Ledger - Demo")
    print("=" * 50)

    app = SplitLedgerApp()

    app.add_contact("Ivan")
    app.add_contact("Maria")
    app.add_contact("Georgi")
    app.create_group("Trip to Plovdiv", ["Ivan", "Maria", "Georgi"])

    app.add_expense("Coffee", 12.00, "you", ["you", "Ivan"])
    app.add_expense("Lunch", 40.00, "Maria", ["you", "Maria"], category="Food & Drink")
    app.add_expense("Dinner", 120.00, "you", [], group_name="Trip to Plovdiv", category="Food & Drink")
    app.add_expense("Taxi", 30.00, "Ivan", [], group_name="Trip to Plovdiv", category="Transport")
    app.add_expense("Museum tickets", 45.00, "Georgi", ["Georgi", "Maria", "Ivan"],
                    group_name="Trip to Plovdiv")

    app.show_balances()
    app.show_group("Trip to Plovdiv")
    app.show_dashboard()

    app.settle_contact("Maria")
    app.show_balances()


def cli():
    configure_logging()
    if len(sys.argv) > 1 and sys.argv[1] == "--demo":
        demo()
    else:
        interactive_mode(sys.argv[1] if len(sys.argv) > 1 else None)


if __name__ == "__main__":
    cli()
