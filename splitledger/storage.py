"""
JSON file persistence for a ledger.
"""
import json
from pathlib import Path
from typing import Union

from .ledger import Ledger
from .logging_config import get_logger
from .models import Contact, Group, Transaction

logger = get_logger(__name__)


def ledger_to_dict(ledger: Ledger) -> dict:
    return {
        'contacts': [c.to_dict() for c in ledger.contacts],
        'groups': [g.to_dict() for g in ledger.groups],
        'transactions': [tx.to_dict() for tx in ledger.transactions],
    }


def ledger_from_dict(data: dict) -> Ledger:
    """
    Rebuild a ledger from its dict form.

    Every transaction is validated again while loading.

    Raises:
        TransactionValidationError: if a stored transaction is invalid
    """
    return Ledger(
        contacts=[Contact.from_dict(c) for c in data.get('contacts', [])],
        groups=[Group.from_dict(g) for g in data.get('groups', [])],
        transactions=[Transaction.from_dict(tx) for tx in data.get('transactions', [])],
    )


def save_ledger(ledger: Ledger, path: Union[str, Path]) -> None:
    """Write the ledger to a JSON file, replacing it atomically."""
    path = Path(path)
    tmp_path = path.with_name(path.name + ".tmp")

    with open(tmp_path, 'w', encoding='utf-8') as f:
        json.dump(ledger_to_dict(ledger), f, indent=2)
    tmp_path.replace(path)

    logger.debug("ledger_saved", path=str(path), transactions=len(ledger.transactions))


def load_ledger(path: Union[str, Path]) -> Ledger:
    """Read a ledger from a JSON file; a missing file gives an empty ledger."""
    path = Path(path)
    if not path.exists():
        logger.debug("ledger_file_missing", path=str(path))
        return Ledger()

    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    ledger = ledger_from_dict(data)
    logger.debug("ledger_loaded", path=str(path), transactions=len(ledger.transactions))
    return ledger
