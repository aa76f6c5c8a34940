"""
Settle-up synthesis: build the transaction that zeroes a balance.

The debtor is recorded as the payer and the whole amount is assigned as the
receiving party's share, so the normal balance folds bring the pair back
to zero once the transaction is appended.
"""
from typing import Optional

from .balance_calculator import BalanceCalculator
from .config import get_settings
from .ledger import Ledger
from .logging_config import get_logger
from .models import USER_ID, SimplifiedDebt, Transaction, is_user
from .settlement import DebtSimplifier

logger = get_logger(__name__)

SETTLE_UP_DESCRIPTION = "Settle Up"


def _settlement_transaction(
    debtor: str,
    creditor: str,
    amount: float,
    group_id: Optional[str] = None
) -> Transaction:
    return Transaction(
        description=SETTLE_UP_DESCRIPTION,
        amount=amount,
        payer=debtor,
        split_between=(debtor, creditor),
        custom_splits={debtor: 0.0, creditor: amount},
        group_id=group_id
    )


def synthesize_settlement(ledger: Ledger, contact_id: str) -> Optional[Transaction]:
    """
    Build the transaction that settles the user's balance with a contact.

    Args:
        ledger: Ledger holding the transaction log
        contact_id: Counterparty

    Returns:
        The transaction to append, or None if already settled
    """
    balance = BalanceCalculator(ledger).balance(contact_id)

    if abs(balance) < get_settings().tolerance:
        return None

    if balance > 0:
        # They owe you
        tx = _settlement_transaction(contact_id, USER_ID, balance)
    else:
        tx = _settlement_transaction(USER_ID, contact_id, -balance)

    logger.info(
        "settlement_synthesized",
        contact_id=contact_id,
        payer=tx.payer,
        amount=tx.amount,
    )
    return tx


def synthesize_group_settlements(ledger: Ledger, group_id: str) -> list[Transaction]:
    """
    Build group-tagged transactions settling every simplified debt the user is part of.

    Returns:
        Transactions to append, empty if the user is settled in the group
    """
    debts: list[SimplifiedDebt] = DebtSimplifier(ledger).simplify(group_id)

    settlements = [
        _settlement_transaction(d.from_participant, d.to_participant, d.amount, group_id=group_id)
        for d in debts
        if is_user(d.from_participant) or is_user(d.to_participant)
    ]

    if settlements:
        logger.info("group_settlement_synthesized", group_id=group_id, transfers=len(settlements))
    return settlements


def settle_up(ledger: Ledger, contact_id: str) -> Optional[Transaction]:
    """Synthesize a settlement with a contact and append it to the ledger."""
    tx = synthesize_settlement(ledger, contact_id)
    if tx is not None:
        ledger.append_transaction(tx)
    return tx


def settle_up_group(ledger: Ledger, group_id: str) -> list[Transaction]:
    """Synthesize the user's group settlements and append them to the ledger."""
    settlements = synthesize_group_settlements(ledger, group_id)
    for tx in settlements:
        ledger.append_transaction(tx)
    return settlements
