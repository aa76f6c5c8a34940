"""
End-to-end scenarios for the balance engine.
"""
import unittest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from splitledger.models import USER_ID
from splitledger.ledger import Ledger
from splitledger.balance_calculator import BalanceCalculator
from splitledger.settlement import DebtSimplifier
from splitledger.settle_up import synthesize_settlement


class TestScenarios(unittest.TestCase):

    def setUp(self):
        self.ledger = Ledger()
        self.c = self.ledger.add_contact("Ivan")
        self.calculator = BalanceCalculator(self.ledger)

    def test_empty_log_has_zero_balance(self):
        self.assertEqual(self.calculator.balance(self.c.id), 0)

    def test_user_pays_for_two(self):
        self.ledger.record_transaction("Dinner", 100, USER_ID, [USER_ID, self.c.id])
        self.assertEqual(self.calculator.balance(self.c.id), 50)

    def test_contact_pays_back(self):
        self.ledger.record_transaction("Dinner", 100, USER_ID, [USER_ID, self.c.id])
        tx = synthesize_settlement(self.ledger, self.c.id)
        self.assertEqual(tx.payer, self.c.id)
        self.assertEqual(tx.amount, 50)

        self.ledger.append_transaction(tx)
        self.assertAlmostEqual(self.calculator.balance(self.c.id), 0, delta=0.01)

    def test_group_of_three(self):
        b = self.ledger.add_contact("Maria")
        group = self.ledger.add_group("G", [self.c.id, b.id])
        members = [USER_ID, self.c.id, b.id]
        self.ledger.record_transaction("Groceries", 90, USER_ID, members, group_id=group.id)
        self.ledger.record_transaction("Snacks", 30, self.c.id, members, group_id=group.id)

        simplifier = DebtSimplifier(self.ledger)
        balances = simplifier.net_balances(group.id)
        debts = simplifier.simplify(group.id)

        owed = sum(v for v in balances.values() if v > 0)
        self.assertAlmostEqual(sum(d.amount for d in debts), owed)
        self.assertAlmostEqual(owed, 50)
        self.assertTrue(all(d.to_participant == USER_ID for d in debts))


if __name__ == '__main__':
    unittest.main()
