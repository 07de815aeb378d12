"""Interfaces of the pair's external collaborators."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from kdex.chain import Context


@runtime_checkable
class PairRegistry(Protocol):
    """Registry lookups the pair and the ILP manager depend on."""

    @property
    def fee_to(self) -> str:
        """Protocol fee recipient, or the zero address when the fee is off."""
        ...

    @property
    def ilp_manager_address(self) -> str:
        """Contract that receives ILP fees, or the zero address."""
        ...

    def get_pair(self, token_a: str, token_b: str) -> str:
        """Pair address for a token pair (either order), or the zero address."""
        ...

    def is_pair_ilp_fee_admin(self, pair: str, account: str) -> bool: ...

    def is_pair_ilp_fee_manager(self, pair: str, account: str) -> bool: ...


@runtime_checkable
class FeeDepositTarget(Protocol):
    """Receiver of ILP fees pushed by a pair during swaps."""

    def deposit_fee(self, ctx: Context, token: str, amount: int) -> None: ...


@runtime_checkable
class FlashSwapCallee(Protocol):
    """Contract called back by `Pair.swap` when `data` is non-empty.

    The callee receives the optimistic output first and must have returned
    enough input to the pair by the time the callback returns.
    """

    def uniswap_v2_call(
        self,
        ctx: Context,
        sender: str,
        amount0: int,
        amount1: int,
        data: bytes,
    ) -> None: ...
