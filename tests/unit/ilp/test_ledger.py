"""Tests for the fee ledger."""

from kdex.ilp import FeeLedger
from tests.helpers import OTHER, TOKEN_A, TOKEN_B

PAIR = "0x" + "ab" * 20


class TestFeeLedger:
    def test_unknown_entry_is_zero(self):
        assert FeeLedger().amount(PAIR, TOKEN_A) == 0

    def test_credit_accumulates(self):
        ledger = FeeLedger()
        ledger.credit(PAIR, TOKEN_A, 5)
        assert ledger.credit(PAIR, TOKEN_A, 7) == 12
        assert ledger.amount(PAIR, TOKEN_A) == 12

    def test_entries_are_per_pair_and_token(self):
        ledger = FeeLedger()
        ledger.credit(PAIR, TOKEN_A, 5)
        ledger.credit(OTHER, TOKEN_A, 9)
        ledger.credit(PAIR, TOKEN_B, 3)
        assert ledger.pair_fees(PAIR, TOKEN_A, TOKEN_B) == (5, 3)

    def test_reset_keeps_entries(self):
        ledger = FeeLedger()
        ledger.credit(PAIR, TOKEN_A, 5)
        ledger.credit(PAIR, TOKEN_B, 3)
        ledger.reset(PAIR, TOKEN_A, TOKEN_B)
        assert ledger.pair_fees(PAIR, TOKEN_A, TOKEN_B) == (0, 0)
        assert (PAIR, TOKEN_A) in ledger.entries
