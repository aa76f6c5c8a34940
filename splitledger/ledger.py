"""
In-memory record store for contacts, groups and the transaction log.

The transaction log is the source of truth. Balances are never stored here;
calculators fold a snapshot of the log every time they are asked.
"""
from datetime import datetime
from typing import Iterable, Optional

from .config import get_settings
from .logging_config import get_logger
from .models import Contact, Group, Transaction, is_user

logger = get_logger(__name__)


class LedgerError(KeyError):
    """Raised when a record to replace or remove does not exist, or an id is reused."""


class Ledger:
    """Holds the records the balance engine computes from."""

    def __init__(
        self,
        contacts: Iterable[Contact] = (),
        transactions: Iterable[Transaction] = (),
        groups: Iterable[Group] = ()
    ):
        self._contacts: list[Contact] = list(contacts)
        for contact in self._contacts:
            self._check_contact_id(contact)
        self._transactions: list[Transaction] = list(transactions)
        self._groups: list[Group] = list(groups)

    @property
    def contacts(self) -> tuple[Contact, ...]:
        return tuple(self._contacts)

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        return tuple(self._transactions)

    @property
    def groups(self) -> tuple[Group, ...]:
        return tuple(self._groups)

    def snapshot(self) -> tuple[Transaction, ...]:
        """Immutable view of the log for the duration of one computation."""
        return tuple(self._transactions)

    # Contacts

    def add_contact(self, name: str) -> Contact:
        """Create a contact with a fresh id and append it."""
        contact = Contact(name=name)
        self.append_contact(contact)
        return contact

    def append_contact(self, contact: Contact) -> None:
        self._check_contact_id(contact)
        if self.get_contact(contact.id) is not None:
            raise LedgerError(f"Contact '{contact.id}' already exists")
        self._contacts.append(contact)
        logger.info("contact_added", contact_id=contact.id, name=contact.name)

    def replace_contact(self, contact: Contact) -> None:
        self._check_contact_id(contact)
        self._contacts[self._index_of(self._contacts, contact.id, "Contact")] = contact

    def get_contact(self, contact_id: str) -> Optional[Contact]:
        """Find a contact by id."""
        for c in self._contacts:
            if c.id == contact_id:
                return c
        return None

    def get_contact_by_name(self, name: str) -> Optional[Contact]:
        """Find a contact by name (case-insensitive)."""
        for c in self._contacts:
            if c.name.lower() == name.lower():
                return c
        return None

    def display_name(self, participant_id: str) -> str:
        """Name for a participant id, falling back to a placeholder for unknown ids."""
        settings = get_settings()
        if is_user(participant_id):
            return settings.user_name
        contact = self.get_contact(participant_id)
        return contact.name if contact else settings.unknown_name

    # Groups

    def add_group(self, name: str, members: Iterable[str] = ()) -> Group:
        """Create a group with a fresh id and append it."""
        group = Group(name=name, members=tuple(members))
        self.append_group(group)
        return group

    def append_group(self, group: Group) -> None:
        if self.get_group(group.id) is not None:
            raise LedgerError(f"Group '{group.id}' already exists")
        self._groups.append(group)
        logger.info("group_added", group_id=group.id, name=group.name, members=len(group.members))

    def replace_group(self, group: Group) -> None:
        self._groups[self._index_of(self._groups, group.id, "Group")] = group

    def get_group(self, group_id: str) -> Optional[Group]:
        for g in self._groups:
            if g.id == group_id:
                return g
        return None

    def get_group_by_name(self, name: str) -> Optional[Group]:
        for g in self._groups:
            if g.name.lower() == name.lower():
                return g
        return None

    # Transactions

    def record_transaction(
        self,
        description: str,
        amount: float,
        payer: str,
        split_between: Iterable[str],
        custom_splits: Optional[dict[str, float]] = None,
        group_id: Optional[str] = None,
        category: Optional[str] = None,
        receipt: Optional[str] = None,
        date: Optional[datetime] = None
    ) -> Transaction:
        """
        Build, validate and append a new transaction.

        Raises:
            TransactionValidationError: if the record is invalid; nothing is appended
        """
        kwargs = {}
        if date is not None:
            kwargs['date'] = date
        transaction = Transaction(
            description=description,
            amount=amount,
            payer=payer,
            split_between=tuple(split_between),
            custom_splits=custom_splits,
            group_id=group_id,
            category=category,
            receipt=receipt,
            **kwargs
        )
        self.append_transaction(transaction)
        return transaction

    def append_transaction(self, transaction: Transaction) -> None:
        if self.get_transaction(transaction.id) is not None:
            raise LedgerError(f"Transaction '{transaction.id}' already exists")
        self._check_references(transaction)
        self._transactions.append(transaction)
        logger.info(
            "transaction_recorded",
            transaction_id=transaction.id,
            amount=transaction.amount,
            payer=transaction.payer,
            group_id=transaction.group_id,
        )

    def replace_transaction(self, transaction: Transaction) -> None:
        """Replace the transaction with the same id, keeping its log position."""
        idx = self._index_of(self._transactions, transaction.id, "Transaction")
        self._check_references(transaction)
        self._transactions[idx] = transaction
        logger.info("transaction_amended", transaction_id=transaction.id)

    def remove_transaction(self, transaction_id: str) -> Transaction:
        idx = self._index_of(self._transactions, transaction_id, "Transaction")
        removed = self._transactions.pop(idx)
        logger.info("transaction_removed", transaction_id=transaction_id)
        return removed

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        for tx in self._transactions:
            if tx.id == transaction_id:
                return tx
        return None

    def group_transactions(self, group_id: str) -> list[Transaction]:
        """Transactions tagged with the group, in log order."""
        return [tx for tx in self._transactions if tx.group_id == group_id]

    @staticmethod
    def _check_contact_id(contact: Contact) -> None:
        if is_user(contact.id):
            raise LedgerError(f"Contact id '{contact.id}' is reserved for the primary user")

    @staticmethod
    def _index_of(records: list, record_id: str, kind: str) -> int:
        for i, record in enumerate(records):
            if record.id == record_id:
                return i
        raise LedgerError(f"{kind} '{record_id}' not found")

    def _check_references(self, transaction: Transaction) -> None:
        # Unknown ids are tolerated; balances are computed with the raw id.
        for pid in (transaction.payer,) + transaction.split_between:
            if not is_user(pid) and self.get_contact(pid) is None:
                logger.warning("unknown_participant", transaction_id=transaction.id, participant_id=pid)

        if transaction.group_id is None:
            return
        group = self.get_group(transaction.group_id)
        if group is None:
            logger.warning("unknown_group", transaction_id=transaction.id, group_id=transaction.group_id)
            return
        outsiders = [pid for pid in transaction.split_between if pid not in group.all_members()]
        if outsiders:
            logger.warning(
                "participant_not_in_group",
                transaction_id=transaction.id,
                group_id=group.id,
                participants=outsiders,
            )
