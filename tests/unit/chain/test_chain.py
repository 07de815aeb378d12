"""Tests for the chain: time, deployments, events and atomic calls."""

from dataclasses import dataclass

import pytest

from kdex.chain import GENESIS_TIMESTAMP, Chain, Context, Contract, external
from kdex.models.events import Event
from kdex.tokens import ERC20Token
from tests.helpers import OTHER, TOKEN_A, WALLET


@dataclass(frozen=True)
class Bumped(Event):
    value: int


@dataclass
class CounterState:
    value: int = 0


class Counter(Contract):
    state: CounterState

    def __init__(self, chain: Chain, address: str):
        super().__init__(chain, address)
        self.state = CounterState()
        self._deploy()

    @external
    def bump(self, ctx: Context, fail: bool = False) -> int:
        self.state.value += 1
        self._emit(Bumped(emitter=self.address, value=self.state.value))
        if fail:
            raise RuntimeError("bump failed")
        return self.state.value

    @external
    def bump_token(self, ctx: Context, token: ERC20Token, to: str, fail: bool) -> None:
        """Increment, then move this contract's tokens, then optionally fail."""
        self.state.value += 1
        token.transfer(self._as_caller, to, 1)
        if fail:
            raise RuntimeError("outer call failed")


COUNTER = "0x" + "99" * 20


class TestContext:
    def test_sender_is_normalized(self):
        assert Context("0xABCDEF" + "0" * 34).sender == "0xabcdef" + "0" * 34


class TestTime:
    def test_genesis(self):
        assert Chain().timestamp == GENESIS_TIMESTAMP

    def test_advance_time(self):
        chain = Chain(timestamp=100)
        assert chain.advance_time(5) == 105

    def test_cannot_go_backwards(self):
        chain = Chain(timestamp=100)
        with pytest.raises(ValueError):
            chain.advance_time(-1)
        with pytest.raises(ValueError):
            chain.set_timestamp(99)


class TestDeployments:
    def test_has_code(self, chain):
        Counter(chain, COUNTER)
        assert chain.has_code(COUNTER)
        assert not chain.has_code(OTHER)

    def test_double_deploy_rejected(self, chain):
        Counter(chain, COUNTER)
        with pytest.raises(ValueError):
            Counter(chain, COUNTER)

    def test_invalid_address_rejected(self, chain):
        with pytest.raises(ValueError):
            Counter(chain, "0x1234")

    def test_get_checks_type(self, chain):
        Counter(chain, COUNTER)
        assert isinstance(chain.get(COUNTER, Counter), Counter)
        with pytest.raises(LookupError):
            chain.get(COUNTER, ERC20Token)
        with pytest.raises(LookupError):
            chain.get(OTHER, Counter)

    def test_derive_address_is_deterministic(self, chain):
        first = chain.derive_address(TOKEN_A, "factory")
        assert first == chain.derive_address(TOKEN_A, "factory")
        assert first != chain.derive_address(TOKEN_A, "manager")
        assert len(first) == 42


class TestAtomicCalls:
    def test_successful_call_keeps_state_and_events(self, chain):
        counter = Counter(chain, COUNTER)
        assert counter.bump(Context(WALLET)) == 1
        assert counter.state.value == 1
        assert len(chain.events(Bumped)) == 1

    def test_failed_call_rolls_back_state_and_events(self, chain):
        counter = Counter(chain, COUNTER)
        counter.bump(Context(WALLET))
        with pytest.raises(RuntimeError):
            counter.bump(Context(WALLET), fail=True)
        assert counter.state.value == 1
        assert [e.value for e in chain.events(Bumped)] == [1]
        assert not chain.in_call

    def test_failure_rolls_back_nested_calls(self, chain):
        """Effects of a completed inner call are undone when the outer call fails."""
        counter = Counter(chain, COUNTER)
        token = ERC20Token(chain, TOKEN_A, COUNTER, 10)
        with pytest.raises(RuntimeError):
            counter.bump_token(Context(WALLET), token, OTHER, True)
        assert token.balance_of(COUNTER) == 10
        assert token.balance_of(OTHER) == 0
        assert counter.state.value == 0

    def test_nested_success(self, chain):
        counter = Counter(chain, COUNTER)
        token = ERC20Token(chain, TOKEN_A, COUNTER, 10)
        counter.bump_token(Context(WALLET), token, OTHER, False)
        assert token.balance_of(OTHER) == 1
        assert counter.state.value == 1

    def test_events_filter_by_emitter(self, chain):
        counter = Counter(chain, COUNTER)
        token = ERC20Token(chain, TOKEN_A, WALLET, 10)
        counter.bump(Context(WALLET))
        assert chain.events(emitter=COUNTER) == chain.events(Bumped)
        assert all(e.emitter == token.address for e in chain.events(emitter=TOKEN_A))
