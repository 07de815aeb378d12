"""Execution environment: call context, block time, atomic calls."""

from kdex.chain.chain import GENESIS_TIMESTAMP, Chain, Context
from kdex.chain.contract import Contract, external

__all__ = ["GENESIS_TIMESTAMP", "Chain", "Context", "Contract", "external"]
