"""Fungible tokens: pair assets and the pool-share base."""

from kdex.tokens.erc20 import ERC20, ERC20Token, TokenState

__all__ = ["ERC20", "ERC20Token", "TokenState"]
