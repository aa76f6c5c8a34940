"""
Group debt simplification - turns a group's expenses into settling transfers.
"""
from enum import Enum
from typing import Optional, Union

import numpy as np
import pandas as pd

from .config import get_settings
from .ledger import Ledger
from .logging_config import get_logger
from .models import USER_ID, Group, SimplifiedDebt, Transaction, is_user
from .splits import resolve_shares

logger = get_logger(__name__)


class SimplifyStrategy(Enum):
    """How net balances are decomposed into transfers."""
    GREEDY = "greedy"
    LARGEST_FIRST = "largest_first"


class DebtSimplifier:
    """
    Calculates who owes whom inside a group.

    The default GREEDY strategy walks debtors in a stable order and pays
    creditors left to right. It conserves the total debt but does not
    guarantee the minimum number of transfers. LARGEST_FIRST repeatedly
    matches the largest creditor with the largest debtor, which tends to
    produce fewer transfers but is not minimal either.
    """

    def __init__(
        self,
        ledger: Ledger,
        strategy: Optional[Union[SimplifyStrategy, str]] = None,
        tolerance: Optional[float] = None
    ):
        settings = get_settings()
        self.ledger = ledger
        strategy = strategy or settings.simplify_strategy
        if isinstance(strategy, str):
            strategy = strategy.strip().lower()
        self.strategy = SimplifyStrategy(strategy)
        self.tolerance = tolerance if tolerance is not None else settings.tolerance

    def net_balances(self, group_id: str) -> dict[str, float]:
        """
        Net balance per participant for the group's transactions.

        Positive = the participant is owed money overall
        Negative = the participant owes money overall

        Order is the primary user, then listed members, then any participant
        found in the transactions but not in the group, by first appearance.
        """
        group = self.ledger.get_group(group_id)
        if group is None:
            logger.warning("unknown_group", group_id=group_id)

        transactions = [tx for tx in self.ledger.snapshot() if tx.group_id == group_id]
        return self.net_balances_of(group, transactions)

    @staticmethod
    def net_balances_of(group: Optional[Group], transactions: list[Transaction]) -> dict[str, float]:
        """Pure fold of a group's transactions into net balances."""
        members = group.all_members() if group is not None else (USER_ID,)
        balances = {pid: 0.0 for pid in members}

        for tx in transactions:
            # Payer gets credit for the full amount
            balances[tx.payer] = balances.get(tx.payer, 0.0) + tx.amount

            # Each participant owes their share
            for pid, share in resolve_shares(tx).items():
                balances[pid] = balances.get(pid, 0.0) - share

        return balances

    def simplify(self, group_id: str) -> list[SimplifiedDebt]:
        """
        Decompose the group's net balances into settling transfers.

        Returns:
            List of SimplifiedDebt, every amount at least the tolerance
        """
        balances = self.net_balances(group_id)
        participants = list(balances)
        remaining = np.array([balances[pid] for pid in participants], dtype=np.float64)

        if self.strategy is SimplifyStrategy.LARGEST_FIRST:
            debts = self._largest_first(participants, remaining)
        else:
            debts = self._greedy(participants, remaining)

        logger.debug(
            "group_simplified",
            group_id=group_id,
            strategy=self.strategy.value,
            transfers=len(debts),
        )
        return debts

    def _greedy(self, participants: list[str], remaining: np.ndarray) -> list[SimplifiedDebt]:
        tol = self.tolerance
        debtors = [i for i in range(len(participants)) if remaining[i] < -tol]
        creditors = [i for i in range(len(participants)) if remaining[i] > tol]

        debts = []
        for d in debtors:
            for c in creditors:
                owed = -remaining[d]
                if owed < tol:
                    break
                due = remaining[c]
                if due < tol:
                    continue

                payment = min(owed, due)
                debts.append(SimplifiedDebt(
                    from_participant=participants[d],
                    to_participant=participants[c],
                    amount=float(payment)
                ))
                remaining[d] += payment
                remaining[c] -= payment

        return debts

    def _largest_first(self, participants: list[str], remaining: np.ndarray) -> list[SimplifiedDebt]:
        tol = self.tolerance
        debts = []

        # Keep settling until all balances are zero (within tolerance)
        while len(remaining):
            max_credit_idx = int(np.argmax(remaining))
            max_debit_idx = int(np.argmin(remaining))

            max_credit = remaining[max_credit_idx]
            max_debit = -remaining[max_debit_idx]

            if max_credit < tol or max_debit < tol:
                break

            payment = min(max_credit, max_debit)
            debts.append(SimplifiedDebt(
                from_participant=participants[max_debit_idx],
                to_participant=participants[max_credit_idx],
                amount=float(payment)
            ))

            remaining[max_credit_idx] -= payment
            remaining[max_debit_idx] += payment

        return debts

    def user_group_balance(self, group_id: str) -> float:
        """
        The primary user's position in the group after simplification.

        Returns:
            Amount the user is owed minus the amount the user owes
        """
        owed_to_user = 0.0
        user_owes = 0.0

        for debt in self.simplify(group_id):
            if is_user(debt.to_participant):
                owed_to_user += debt.amount
            if is_user(debt.from_participant):
                user_owes += debt.amount

        return owed_to_user - user_owes

    def get_balances(self, group_id: str) -> pd.DataFrame:
        """
        Net balances of the group as a DataFrame.

        Returns:
            DataFrame with participant_id, name, balance columns
        """
        balances = self.net_balances(group_id)

        return pd.DataFrame([
            {
                'participant_id': pid,
                'name': self.ledger.display_name(pid),
                'balance': balance
            }
            for pid, balance in balances.items()
        ])

    def get_settlements_dataframe(self, group_id: str) -> pd.DataFrame:
        """
        Get simplified debts as a formatted DataFrame.

        Returns:
            DataFrame with from, to, amount columns
        """
        debts = self.simplify(group_id)

        if not debts:
            return pd.DataFrame(columns=['from', 'to', 'amount'])

        return pd.DataFrame([
            {
                'from': self.ledger.display_name(d.from_participant),
                'to': self.ledger.display_name(d.to_participant),
                'amount': d.amount
            }
            for d in debts
        ])

    def get_settlement_summary(self, group_id: str) -> str:
        """
        Get human-readable settlement instructions.

        Returns:
            Formatted string with settlement instructions
        """
        debts = self.simplify(group_id)

        if not debts:
            return "Everyone is settled up!"

        lines = ["Settlements needed:", ""]

        for i, d in enumerate(debts, 1):
            from_name = self.ledger.display_name(d.from_participant)
            to_name = self.ledger.display_name(d.to_participant)
            lines.append(f"  {i}. {from_name} pays {to_name}: {d.amount:.2f}")

        lines.append("")
        lines.append(f"Total transactions: {len(debts)}")

        return "\n".join(lines)
