"""
Pairwise balances between the primary user and individual contacts.
"""
from typing import Optional

import numpy as np
import pandas as pd

from .config import get_settings
from .ledger import Ledger
from .models import USER_ID, Transaction, is_user
from .splits import share_of


class BalanceCalculator:
    """
    Folds the transaction log into signed balances against one contact.

    Positive balance = the contact owes the primary user
    Negative balance = the primary user owes the contact
    """

    def __init__(self, ledger: Ledger, tolerance: Optional[float] = None):
        self.ledger = ledger
        self.tolerance = tolerance if tolerance is not None else get_settings().tolerance

    def balance(self, contact_id: str) -> float:
        """
        Calculate the balance between the primary user and a contact.

        Group transactions never count here. A transaction counts only when
        both the user and the contact are in its split; a payment made by a
        third party is neutral between the two.

        Args:
            contact_id: Contact to compute the balance against

        Returns:
            Signed balance (positive = contact owes the user)
        """
        return self.balance_of(self.ledger.snapshot(), contact_id)

    @staticmethod
    def balance_of(transactions: tuple[Transaction, ...], contact_id: str) -> float:
        """Pure fold of a transaction snapshot into a pairwise balance."""
        balance = 0.0

        for tx in transactions:
            if tx.group_id is not None:
                continue
            if USER_ID not in tx.split_between or contact_id not in tx.split_between:
                continue

            if is_user(tx.payer):
                balance += share_of(tx, contact_id)
            elif tx.payer == contact_id:
                balance -= share_of(tx, USER_ID)

        return balance

    def is_settled(self, contact_id: str) -> bool:
        return abs(self.balance(contact_id)) < self.tolerance

    def get_balances(self) -> pd.DataFrame:
        """
        Balance against every known contact.

        Returns:
            DataFrame with contact_id, name, balance columns in contact order
        """
        snapshot = self.ledger.snapshot()

        data = [
            {
                'contact_id': c.id,
                'name': c.name,
                'balance': self.balance_of(snapshot, c.id)
            }
            for c in self.ledger.contacts
        ]

        if not data:
            return pd.DataFrame(columns=['contact_id', 'name', 'balance'])

        return pd.DataFrame(data)

    def get_contact_summary(self) -> dict[str, float]:
        """
        Totals across all contacts.

        Returns:
            Dict with total_balance, total_owed_to_you and total_you_owe
            (the last one is negative or zero)
        """
        balances = self.get_balances()['balance'].to_numpy(dtype=np.float64)

        return {
            'total_balance': float(balances.sum()),
            'total_owed_to_you': float(balances[balances > 0].sum()),
            'total_you_owe': float(balances[balances < 0].sum()),
        }

    def get_transactions_for_contact(self, contact_id: str) -> list[Transaction]:
        """
        Transactions involving both the user and the contact, newest first.

        Either party counts as involved when it paid or is in the split.
        """
        def involved(tx: Transaction, pid: str) -> bool:
            return tx.payer == pid or pid in tx.split_between

        history = [
            tx for tx in self.ledger.snapshot()
            if involved(tx, USER_ID) and involved(tx, contact_id)
        ]
        return sorted(history, key=lambda tx: tx.date, reverse=True)

    def get_history_dataframe(self, contact_id: str) -> pd.DataFrame:
        """History with a contact as a DataFrame, including the user's share."""
        history = self.get_transactions_for_contact(contact_id)

        if not history:
            return pd.DataFrame(columns=['id', 'date', 'description', 'amount', 'paid_by', 'your_share'])

        return pd.DataFrame([
            {
                'id': tx.id,
                'date': tx.date,
                'description': tx.description,
                'amount': tx.amount,
                'paid_by': self.ledger.display_name(tx.payer),
                'your_share': share_of(tx, USER_ID)
            }
            for tx in history
        ])
