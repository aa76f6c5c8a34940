"""
Overview figures for the primary user: spending this month and open balances.
"""
from datetime import datetime
from typing import Optional

import pandas as pd

from .balance_calculator import BalanceCalculator
from .config import get_settings
from .ledger import Ledger
from .models import USER_ID, Transaction
from .settle_up import SETTLE_UP_DESCRIPTION
from .settlement import DebtSimplifier
from .splits import share_of

EXPENSE_CATEGORIES = [
    "General",
    "Food & Drink",
    "Groceries",
    "Transport",
    "Travel",
    "Rent",
    "Utilities",
    "Entertainment",
    "Shopping",
    "Health",
]


class Dashboard:
    """Summaries built on top of the balance calculators."""

    def __init__(self, ledger: Ledger):
        self.ledger = ledger
        self.tolerance = get_settings().tolerance

    def _monthly_transactions(self, now: Optional[datetime] = None) -> list[Transaction]:
        now = now or datetime.now()
        month_start = datetime(now.year, now.month, 1)

        # Settlements move money around, they are not spending
        return [
            tx for tx in self.ledger.snapshot()
            if tx.date >= month_start
            and USER_ID in tx.split_between
            and tx.description != SETTLE_UP_DESCRIPTION
        ]

    def monthly_spending(self, now: Optional[datetime] = None) -> float:
        """Total of the user's shares in this month's transactions."""
        return float(sum(share_of(tx, USER_ID) for tx in self._monthly_transactions(now)))

    def spending_by_category(self, now: Optional[datetime] = None) -> pd.Series:
        """
        The user's share of this month's spending per category.

        Returns:
            Series indexed by category, largest first
        """
        default_category = get_settings().default_category
        data = [
            {'category': tx.category or default_category, 'share': share_of(tx, USER_ID)}
            for tx in self._monthly_transactions(now)
        ]

        if not data:
            return pd.Series(dtype=float, name='share')

        df = pd.DataFrame(data)
        return df.groupby('category')['share'].sum().sort_values(ascending=False)

    def contact_balances(self) -> pd.DataFrame:
        """Open balances with contacts, largest magnitude first."""
        df = BalanceCalculator(self.ledger).get_balances()
        if df.empty:
            return df

        df = df[df['balance'].abs() >= self.tolerance]
        return df.sort_values('balance', key=lambda s: s.abs(), ascending=False).reset_index(drop=True)

    def group_summaries(self) -> pd.DataFrame:
        """
        The user's position in every group with an open balance.

        Returns:
            DataFrame with group_id, name, balance columns, largest magnitude first
        """
        simplifier = DebtSimplifier(self.ledger)
        data = [
            {'group_id': g.id, 'name': g.name, 'balance': simplifier.user_group_balance(g.id)}
            for g in self.ledger.groups
        ]
        data = [row for row in data if abs(row['balance']) >= self.tolerance]

        if not data:
            return pd.DataFrame(columns=['group_id', 'name', 'balance'])

        return pd.DataFrame(sorted(data, key=lambda row: abs(row['balance']), reverse=True))
