"""
Tests for group debt simplification and group settle-up.
"""
import unittest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from splitledger.models import USER_ID, SimplifiedDebt
from splitledger.ledger import Ledger
from splitledger.settlement import DebtSimplifier, SimplifyStrategy
from splitledger.settle_up import settle_up_group, synthesize_group_settlements
from splitledger.balance_calculator import BalanceCalculator


class TestDebtSimplifier(unittest.TestCase):
    """Tests for group net balances and greedy decomposition."""

    def setUp(self):
        self.ledger = Ledger()
        self.a = self.ledger.add_contact("Ivan")
        self.b = self.ledger.add_contact("Maria")
        self.group = self.ledger.add_group("Trip", [self.a.id, self.b.id])
        self.simplifier = DebtSimplifier(self.ledger)

    def _scenario(self):
        members = self.group.all_members()
        self.ledger.record_transaction("Dinner", 90.0, USER_ID, members, group_id=self.group.id)
        self.ledger.record_transaction("Taxi", 30.0, self.a.id, members, group_id=self.group.id)

    def test_no_debts_without_transactions(self):
        self.assertEqual(self.simplifier.simplify(self.group.id), [])
        self.assertEqual(
            self.simplifier.net_balances(self.group.id),
            {USER_ID: 0.0, self.a.id: 0.0, self.b.id: 0.0}
        )

    def test_net_balances(self):
        self._scenario()
        balances = self.simplifier.net_balances(self.group.id)
        self.assertAlmostEqual(balances[USER_ID], 50.0)
        self.assertAlmostEqual(balances[self.a.id], -10.0)
        self.assertAlmostEqual(balances[self.b.id], -40.0)
        self.assertAlmostEqual(sum(balances.values()), 0.0)

    def test_greedy_transfers(self):
        self._scenario()
        debts = self.simplifier.simplify(self.group.id)

        self.assertEqual(len(debts), 2)
        self.assertEqual(debts[0].from_participant, self.a.id)
        self.assertEqual(debts[0].to_participant, USER_ID)
        self.assertAlmostEqual(debts[0].amount, 10.0)
        self.assertEqual(debts[1].from_participant, self.b.id)
        self.assertEqual(debts[1].to_participant, USER_ID)
        self.assertAlmostEqual(debts[1].amount, 40.0)

    def test_debt_is_conserved(self):
        members = self.group.all_members()
        self.ledger.record_transaction("Dinner", 97.0, USER_ID, members, group_id=self.group.id)
        self.ledger.record_transaction("Taxi", 31.0, self.a.id, [self.a.id, self.b.id], group_id=self.group.id)
        self.ledger.record_transaction(
            "Hotel", 120.0, self.b.id, members, group_id=self.group.id,
            custom_splits={USER_ID: 20.0, self.a.id: 60.0, self.b.id: 40.0}
        )

        balances = self.simplifier.net_balances(self.group.id)
        debts = self.simplifier.simplify(self.group.id)

        owed = sum(v for v in balances.values() if v > 0)
        transferred = sum(d.amount for d in debts)
        self.assertAlmostEqual(transferred, owed, places=2)
        for d in debts:
            self.assertGreaterEqual(d.amount, 0.01)
            self.assertNotEqual(d.from_participant, d.to_participant)

    def test_simplify_is_deterministic(self):
        self._scenario()
        self.assertEqual(self.simplifier.simplify(self.group.id), self.simplifier.simplify(self.group.id))

    def test_other_groups_and_pairwise_ignored(self):
        other = self.ledger.add_group("Flat", [self.a.id])
        self.ledger.record_transaction("Rent", 500.0, USER_ID, other.all_members(), group_id=other.id)
        self.ledger.record_transaction("Lunch", 20.0, USER_ID, [USER_ID, self.b.id])
        self.assertEqual(self.simplifier.simplify(self.group.id), [])

    def test_unknown_participant_tracked(self):
        self.ledger.record_transaction(
            "Boat", 60.0, "guest", [USER_ID, "guest", self.a.id], group_id=self.group.id
        )
        balances = self.simplifier.net_balances(self.group.id)
        self.assertEqual(list(balances), [USER_ID, self.a.id, self.b.id, "guest"])
        self.assertAlmostEqual(balances["guest"], 40.0)

        debts = self.simplifier.simplify(self.group.id)
        self.assertEqual(
            [(d.from_participant, d.to_participant) for d in debts],
            [(USER_ID, "guest"), (self.a.id, "guest")]
        )

    def test_unknown_group(self):
        self.assertEqual(self.simplifier.net_balances("missing"), {USER_ID: 0.0})
        self.assertEqual(self.simplifier.simplify("missing"), [])

    def test_greedy_is_not_minimal(self):
        c = self.ledger.add_contact("Georgi")
        d = self.ledger.add_contact("Elena")
        group = self.ledger.add_group("Four", [self.a.id, self.b.id, c.id, d.id])
        self.ledger.record_transaction("Snacks", 5.0, self.a.id, [c.id], group_id=group.id)
        self.ledger.record_transaction("Tickets", 10.0, self.b.id, [c.id, d.id], group_id=group.id)

        greedy = DebtSimplifier(self.ledger, strategy=SimplifyStrategy.GREEDY).simplify(group.id)
        largest = DebtSimplifier(self.ledger, strategy="largest_first").simplify(group.id)

        self.assertEqual(len(greedy), 3)
        self.assertEqual(len(largest), 2)
        self.assertAlmostEqual(sum(x.amount for x in greedy), 15.0)
        self.assertAlmostEqual(sum(x.amount for x in largest), 15.0)
        self.assertEqual(largest[0], SimplifiedDebt(c.id, self.b.id, 10.0))

    def test_strategy_name_is_case_insensitive(self):
        self.assertIs(DebtSimplifier(self.ledger, strategy="GREEDY").strategy, SimplifyStrategy.GREEDY)
        self.assertIs(
            DebtSimplifier(self.ledger, strategy=" Largest_First ").strategy,
            SimplifyStrategy.LARGEST_FIRST
        )

    def test_user_group_balance(self):
        self._scenario()
        self.assertAlmostEqual(self.simplifier.user_group_balance(self.group.id), 50.0)

    def test_settlement_summary(self):
        self._scenario()
        summary = self.simplifier.get_settlement_summary(self.group.id)
        self.assertIn("Ivan pays You: 10.00", summary)
        self.assertIn("Maria pays You: 40.00", summary)
        self.assertIn("Total transactions: 2", summary)

    def test_settlement_summary_settled(self):
        self.assertEqual(self.simplifier.get_settlement_summary(self.group.id), "Everyone is settled up!")

    def test_settlements_dataframe(self):
        self._scenario()
        df = self.simplifier.get_settlements_dataframe(self.group.id)
        self.assertEqual(list(df.columns), ['from', 'to', 'amount'])
        self.assertEqual(list(df['from']), ["Ivan", "Maria"])

    def test_balances_dataframe(self):
        self._scenario()
        df = self.simplifier.get_balances(self.group.id)
        self.assertEqual(list(df['name']), ["You", "Ivan", "Maria"])
        self.assertAlmostEqual(df['balance'].sum(), 0.0)


class TestGroupSettleUp(unittest.TestCase):
    """Tests for group settle-up synthesis."""

    def setUp(self):
        self.ledger = Ledger()
        self.a = self.ledger.add_contact("Ivan")
        self.b = self.ledger.add_contact("Maria")
        self.group = self.ledger.add_group("Trip", [self.a.id, self.b.id])
        self.simplifier = DebtSimplifier(self.ledger)

    def test_user_is_owed(self):
        members = self.group.all_members()
        self.ledger.record_transaction("Dinner", 90.0, USER_ID, members, group_id=self.group.id)

        settlements = synthesize_group_settlements(self.ledger, self.group.id)
        self.assertEqual(len(settlements), 2)
        for tx in settlements:
            self.assertEqual(tx.group_id, self.group.id)
            self.assertEqual(tx.custom_splits[tx.payer], 0.0)

        for tx in settlements:
            self.ledger.append_transaction(tx)
        self.assertEqual(self.simplifier.simplify(self.group.id), [])

    def test_user_owes(self):
        members = self.group.all_members()
        self.ledger.record_transaction("Hotel", 150.0, self.b.id, members, group_id=self.group.id)

        appended = settle_up_group(self.ledger, self.group.id)
        self.assertEqual(len(appended), 1)
        self.assertEqual(appended[0].payer, USER_ID)

        balances = self.simplifier.net_balances(self.group.id)
        self.assertAlmostEqual(balances[USER_ID], 0.0, places=2)
        # Ivan still owes Maria
        self.assertAlmostEqual(balances[self.a.id], -50.0)

    def test_group_settlement_leaves_pairwise_untouched(self):
        self.ledger.record_transaction("Hotel", 150.0, self.b.id, self.group.all_members(), group_id=self.group.id)
        settle_up_group(self.ledger, self.group.id)
        self.assertEqual(BalanceCalculator(self.ledger).balance(self.b.id), 0.0)

    def test_settled_group_is_noop(self):
        self.assertEqual(settle_up_group(self.ledger, self.group.id), [])
        self.assertEqual(len(self.ledger.transactions), 0)


if __name__ == '__main__':
    unittest.main()
