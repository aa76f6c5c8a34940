"""
Data models for the Split Ledger application.
"""
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime
from types import MappingProxyType
from typing import Optional
import uuid

import numpy as np

from .config import get_settings


# Reserved participant id for the primary user. Every other id is a contact id.
USER_ID = "you"


def new_id() -> str:
    return str(uuid.uuid4())[:8]


def is_user(participant_id: str) -> bool:
    """True when the participant id is the primary user sentinel."""
    return participant_id == USER_ID


class TransactionValidationError(ValueError):
    """Raised when a transaction violates its invariants."""


@dataclass(frozen=True)
class Contact:
    """A person the primary user shares expenses with."""
    name: str
    id: str = field(default_factory=new_id)

    def to_dict(self) -> dict:
        return {'id': self.id, 'name': self.name}

    @classmethod
    def from_dict(cls, data: dict) -> "Contact":
        return cls(name=data['name'], id=data['id'])


@dataclass(frozen=True)
class Group:
    """
    A named set of contacts.

    The primary user is an implicit member of every group and is never
    listed in `members`.
    """
    name: str
    members: tuple[str, ...] = ()
    id: str = field(default_factory=new_id)

    def __post_init__(self):
        members = tuple(dict.fromkeys(m for m in self.members if not is_user(m)))
        object.__setattr__(self, 'members', members)

    def all_members(self) -> tuple[str, ...]:
        """The primary user followed by the listed members."""
        return (USER_ID,) + self.members

    def to_dict(self) -> dict:
        return {'id': self.id, 'name': self.name, 'members': list(self.members)}

    @classmethod
    def from_dict(cls, data: dict) -> "Group":
        return cls(name=data['name'], members=tuple(data.get('members', ())), id=data['id'])


@dataclass(frozen=True)
class Transaction:
    """
    A single expense or settlement event.

    Construction validates the record; an invalid transaction never exists.
    `split_between` keeps first-occurrence order with duplicates dropped.
    """
    description: str
    amount: float
    payer: str
    split_between: tuple[str, ...]
    custom_splits: Optional[Mapping[str, float]] = None
    group_id: Optional[str] = None
    category: Optional[str] = None
    receipt: Optional[str] = None
    date: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=new_id)

    def __post_init__(self):
        try:
            amount = float(self.amount)
        except (TypeError, ValueError):
            raise TransactionValidationError(f"Amount must be a number, got {self.amount!r}")
        if not np.isfinite(amount) or amount <= 0:
            raise TransactionValidationError(f"Amount must be positive, got {amount}")
        object.__setattr__(self, 'amount', amount)

        split_between = tuple(dict.fromkeys(self.split_between))
        if not split_between:
            raise TransactionValidationError("A transaction must be split between at least one participant")
        object.__setattr__(self, 'split_between', split_between)

        if self.custom_splits is not None:
            if not isinstance(self.custom_splits, Mapping):
                raise TransactionValidationError(
                    f"Custom splits must map participants to shares, got {type(self.custom_splits).__name__}"
                )
            custom = {}
            for pid, share in self.custom_splits.items():
                try:
                    custom[pid] = float(share)
                except (TypeError, ValueError):
                    raise TransactionValidationError(f"Share for {pid} must be a number, got {share!r}")
                if not np.isfinite(custom[pid]):
                    raise TransactionValidationError(f"Share for {pid} must be finite, got {share!r}")
            missing = [pid for pid in split_between if pid not in custom]
            if missing:
                raise TransactionValidationError(
                    f"Custom splits are missing shares for: {', '.join(missing)}"
                )
            total = np.sum([custom[pid] for pid in split_between])
            if not abs(total - amount) < get_settings().tolerance:
                raise TransactionValidationError(
                    f"Custom splits must sum to total ({amount:.2f}), got {total:.2f}"
                )
            object.__setattr__(self, 'custom_splits', MappingProxyType(custom))

    def __hash__(self):
        return hash(self.id)

    def amend(self, **changes) -> "Transaction":
        """Return a re-validated copy with the same id and the given fields replaced."""
        if 'id' in changes and changes['id'] != self.id:
            raise TransactionValidationError("An amendment cannot change the transaction id")
        if 'custom_splits' not in changes and self.custom_splits is not None:
            changes['custom_splits'] = dict(self.custom_splits)
        return replace(self, **changes)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'description': self.description,
            'amount': self.amount,
            'date': self.date.isoformat(),
            'payer': self.payer,
            'split_between': list(self.split_between),
            'custom_splits': dict(self.custom_splits) if self.custom_splits is not None else None,
            'group_id': self.group_id,
            'category': self.category,
            'receipt': self.receipt,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Transaction":
        return cls(
            id=data['id'],
            description=data.get('description', ''),
            amount=data['amount'],
            date=datetime.fromisoformat(data['date']),
            payer=data['payer'],
            split_between=tuple(data.get('split_between', ())),
            custom_splits=data.get('custom_splits'),
            group_id=data.get('group_id'),
            category=data.get('category'),
            receipt=data.get('receipt'),
        )


@dataclass(frozen=True)
class SimplifiedDebt:
    """A transfer that settles part of a group's debts."""
    from_participant: str
    to_participant: str
    amount: float
