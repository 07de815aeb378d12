"""Pytest configuration and fixtures."""

import pytest

from kdex.chain import Chain, Context
from kdex.core.factory import Factory
from kdex.core.pair import Pair
from kdex.deployment import Deployment, deploy
from kdex.ilp.manager import ILPManager
from kdex.tokens import ERC20Token
from tests.helpers import OWNER, TOKEN_A, TOKEN_B, TOKEN_SUPPLY, TREASURY, UPKEEP_CALLER, WALLET


@pytest.fixture
def chain() -> Chain:
    """A fresh chain at the genesis timestamp."""
    return Chain()


@pytest.fixture
def deployment(chain: Chain) -> Deployment:
    """Registry and ILP manager owned by OWNER, linked together."""
    return deploy(owner=OWNER, chain=chain)


@pytest.fixture
def factory(deployment: Deployment) -> Factory:
    return deployment.factory


@pytest.fixture
def manager(deployment: Deployment) -> ILPManager:
    return deployment.manager


@pytest.fixture
def token0(chain: Chain) -> ERC20Token:
    return ERC20Token(chain, TOKEN_A, WALLET, TOKEN_SUPPLY, name="Token A", symbol="TKA")


@pytest.fixture
def token1(chain: Chain) -> ERC20Token:
    return ERC20Token(chain, TOKEN_B, WALLET, TOKEN_SUPPLY, name="Token B", symbol="TKB")


@pytest.fixture
def pair(factory: Factory, token0: ERC20Token, token1: ERC20Token) -> Pair:
    """Empty pair for token0/token1 created through the registry."""
    address = factory.create_pair(Context(WALLET), token0.address, token1.address)
    return factory.pair_at(address)


@pytest.fixture
def configured_manager(manager: ILPManager) -> ILPManager:
    """ILP manager with an upkeep caller, a treasury and a 1% processing cut."""
    owner = Context(OWNER)
    manager.set_upkeep_caller(owner, UPKEEP_CALLER)
    manager.set_ilp_treasury_address(owner, TREASURY)
    manager.set_processing_fee_rate(owner, 100)
    return manager
