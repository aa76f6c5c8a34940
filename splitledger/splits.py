"""
Share resolution: how much of a transaction each participant is responsible for.

This is the only place share semantics live; both balance calculators
consume it.
"""
from typing import Iterable

import pandas as pd

from .models import Transaction


def resolve_shares(transaction: Transaction) -> dict[str, float]:
    """
    Compute each participant's share of a transaction.

    Equal splits divide the amount by the number of participants without
    redistributing rounding residue. Custom splits use the recorded share,
    defaulting to 0 for a participant absent from the mapping.

    Args:
        transaction: A validated transaction

    Returns:
        Dict mapping participant id to share, in split order
    """
    if transaction.custom_splits is None:
        share = transaction.amount / len(transaction.split_between)
        return {pid: share for pid in transaction.split_between}

    return {
        pid: transaction.custom_splits.get(pid, 0.0)
        for pid in transaction.split_between
    }


def share_of(transaction: Transaction, participant_id: str) -> float:
    """Share owed by one participant, 0 if they are not in the split."""
    if participant_id not in transaction.split_between:
        return 0.0
    return resolve_shares(transaction)[participant_id]


def resolve_shares_frame(transactions: Iterable[Transaction]) -> pd.DataFrame:
    """
    Resolve shares for many transactions at once.

    Returns:
        DataFrame with transaction_id, participant_id, share columns
    """
    data = [
        {'transaction_id': tx.id, 'participant_id': pid, 'share': share}
        for tx in transactions
        for pid, share in resolve_shares(tx).items()
    ]

    if not data:
        return pd.DataFrame(columns=['transaction_id', 'participant_id', 'share'])

    return pd.DataFrame(data)
