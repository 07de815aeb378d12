"""Tests for the pair registry."""

import pytest

from kdex.chain import Context
from kdex.constants import ZERO_ADDRESS
from kdex.core.pair import Pair
from kdex.errors import Forbidden, IdenticalAddresses, PairExists, PairNotFound, ZeroAddress
from kdex.models.events import PairCreated
from tests.helpers import FEE_TO, OTHER, OWNER, TOKEN_A, TOKEN_B, TOKEN_C, WALLET


class TestCreatePair:
    """Tests for Factory.create_pair()."""

    def test_create_pair(self, chain, factory):
        address = factory.create_pair(Context(WALLET), TOKEN_B, TOKEN_A)

        assert address == chain.derive_address(factory.address, TOKEN_A, TOKEN_B)
        assert factory.get_pair(TOKEN_A, TOKEN_B) == address
        assert factory.get_pair(TOKEN_B, TOKEN_A) == address
        assert factory.all_pairs(0) == address
        assert factory.all_pairs_length() == 1
        assert chain.events(PairCreated)[-1] == PairCreated(
            emitter=factory.address, token0=TOKEN_A, token1=TOKEN_B, pair=address, pair_count=1
        )

    def test_pair_is_deployed_with_sorted_tokens(self, chain, factory):
        address = factory.create_pair(Context(WALLET), TOKEN_B, TOKEN_A)
        pair = chain.get(address, Pair)
        assert (pair.token0, pair.token1) == (TOKEN_A, TOKEN_B)
        assert pair.factory is factory
        assert pair.get_reserves() == (0, 0, 0)

    def test_existing_pair_in_either_order(self, factory):
        factory.create_pair(Context(WALLET), TOKEN_A, TOKEN_B)
        with pytest.raises(PairExists):
            factory.create_pair(Context(WALLET), TOKEN_A, TOKEN_B)
        with pytest.raises(PairExists):
            factory.create_pair(Context(WALLET), TOKEN_B, TOKEN_A)
        assert factory.all_pairs_length() == 1

    def test_identical_tokens(self, factory):
        with pytest.raises(IdenticalAddresses):
            factory.create_pair(Context(WALLET), TOKEN_A, TOKEN_A)

    def test_zero_address_token(self, factory):
        with pytest.raises(ZeroAddress):
            factory.create_pair(Context(WALLET), ZERO_ADDRESS, TOKEN_A)

    def test_pairs_counted(self, factory):
        factory.create_pair(Context(WALLET), TOKEN_A, TOKEN_B)
        factory.create_pair(Context(WALLET), TOKEN_A, TOKEN_C)
        assert factory.all_pairs_length() == 2

    def test_pair_at_unknown_address(self, factory):
        with pytest.raises(PairNotFound):
            factory.pair_at(OTHER)

    def test_get_pair_unknown(self, factory):
        assert factory.get_pair(TOKEN_A, TOKEN_C) == ZERO_ADDRESS


class TestSettings:
    def test_initial_settings(self, factory, manager):
        assert factory.fee_to == ZERO_ADDRESS
        assert factory.fee_to_setter == OWNER
        assert factory.ilp_manager_address == manager.address

    def test_set_fee_to(self, factory):
        factory.set_fee_to(Context(OWNER), FEE_TO)
        assert factory.fee_to == FEE_TO

    def test_set_fee_to_forbidden(self, factory):
        with pytest.raises(Forbidden):
            factory.set_fee_to(Context(OTHER), FEE_TO)

    def test_set_fee_to_setter_hands_over(self, factory):
        factory.set_fee_to_setter(Context(OWNER), OTHER)
        assert factory.fee_to_setter == OTHER
        with pytest.raises(Forbidden):
            factory.set_fee_to(Context(OWNER), FEE_TO)
        factory.set_fee_to(Context(OTHER), FEE_TO)
        assert factory.fee_to == FEE_TO

    def test_set_ilp_manager_forbidden(self, factory):
        with pytest.raises(Forbidden):
            factory.set_ilp_manager_address(Context(OTHER), OTHER)

    def test_pair_roles(self, factory, pair):
        factory.set_pair_ilp_fee_admin(Context(OWNER), pair.address, OTHER)
        factory.set_pair_ilp_fee_manager(Context(OWNER), pair.address, WALLET)
        assert factory.is_pair_ilp_fee_admin(pair.address, OTHER)
        assert not factory.is_pair_ilp_fee_admin(pair.address, WALLET)
        assert factory.is_pair_ilp_fee_manager(pair.address, WALLET)

    def test_pair_roles_replace_previous_holder(self, factory, pair):
        factory.set_pair_ilp_fee_admin(Context(OWNER), pair.address, OTHER)
        factory.set_pair_ilp_fee_admin(Context(OWNER), pair.address, WALLET)
        assert not factory.is_pair_ilp_fee_admin(pair.address, OTHER)

    def test_pair_roles_forbidden(self, factory, pair):
        with pytest.raises(Forbidden):
            factory.set_pair_ilp_fee_admin(Context(OTHER), pair.address, OTHER)
        with pytest.raises(Forbidden):
            factory.set_pair_ilp_fee_manager(Context(OTHER), pair.address, OTHER)

    def test_pair_roles_need_a_pair(self, factory):
        with pytest.raises(PairNotFound):
            factory.set_pair_ilp_fee_admin(Context(OWNER), OTHER, OTHER)
