"""Fungible token ledger.

`ERC20` is the share-token base of every pair; `ERC20Token` is a plain
standalone token used as the pair's underlying assets.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from kdex.chain import Chain, Context, Contract, external
from kdex.constants import ZERO_ADDRESS
from kdex.errors import InsufficientAllowance, InsufficientBalance
from kdex.models.events import Approval, Transfer
from kdex.models.types import normalize_address
from kdex.safe_int import UINT256_MAX, S


@dataclass
class TokenState:
    total_supply: int = 0
    balances: dict[str, int] = field(default_factory=dict)
    allowances: dict[tuple[str, str], int] = field(default_factory=dict)


class ERC20(Contract):
    """Balances, allowances and transfers.

    An allowance of UINT256_MAX is treated as infinite and never decremented.
    """

    state: TokenState

    def __init__(
        self,
        chain: Chain,
        address: str,
        name: str,
        symbol: str,
        decimals: int = 18,
    ) -> None:
        super().__init__(chain, address)
        self.name = name
        self.symbol = symbol
        self.decimals = decimals

    # --- Views ---

    @property
    def total_supply(self) -> int:
        return self.state.total_supply

    def balance_of(self, owner: str) -> int:
        return self.state.balances.get(normalize_address(owner), 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self.state.allowances.get((normalize_address(owner), normalize_address(spender)), 0)

    # --- External ---

    @external
    def transfer(self, ctx: Context, to: str, value: int) -> bool:
        self._transfer(ctx.sender, normalize_address(to), value)
        return True

    @external
    def approve(self, ctx: Context, spender: str, value: int) -> bool:
        self._approve(ctx.sender, normalize_address(spender), value)
        return True

    @external
    def transfer_from(self, ctx: Context, owner: str, to: str, value: int) -> bool:
        owner = normalize_address(owner)
        current = self.allowance(owner, ctx.sender)
        if current != UINT256_MAX:
            if current < value:
                raise InsufficientAllowance()
            self.state.allowances[(owner, ctx.sender)] = (S(current) - value).value
        self._transfer(owner, normalize_address(to), value)
        return True

    # --- Internal ---

    def _mint(self, to: str, value: int) -> None:
        self.state.total_supply = (S(self.state.total_supply) + value).to_uint(256)
        self.state.balances[to] = self.balance_of(to) + value
        self._emit(Transfer(emitter=self.address, sender=ZERO_ADDRESS, to=to, value=value))

    def _burn(self, owner: str, value: int) -> None:
        balance = self.balance_of(owner)
        if balance < value:
            raise InsufficientBalance()
        self.state.balances[owner] = balance - value
        self.state.total_supply = (S(self.state.total_supply) - value).value
        self._emit(Transfer(emitter=self.address, sender=owner, to=ZERO_ADDRESS, value=value))

    def _approve(self, owner: str, spender: str, value: int) -> None:
        self.state.allowances[(owner, spender)] = S(value).to_uint(256)
        self._emit(Approval(emitter=self.address, owner=owner, spender=spender, value=value))

    def _transfer(self, sender: str, to: str, value: int) -> None:
        if value < 0:
            raise ValueError(f"Transfer value cannot be negative: {value}")
        balance = self.balance_of(sender)
        if balance < value:
            raise InsufficientBalance(f"ERC20: INSUFFICIENT_BALANCE ({balance} < {value})")
        self.state.balances[sender] = balance - value
        self.state.balances[to] = self.balance_of(to) + value
        self._emit(Transfer(emitter=self.address, sender=sender, to=to, value=value))


class ERC20Token(ERC20):
    """Standalone token whose whole supply is minted to `owner` at deployment."""

    def __init__(
        self,
        chain: Chain,
        address: str,
        owner: str,
        initial_supply: int,
        name: str = "Test Token",
        symbol: str = "TEST",
        decimals: int = 18,
    ) -> None:
        super().__init__(chain, address, name, symbol, decimals)
        self.state = TokenState()
        self._deploy()
        self._mint(normalize_address(owner), initial_supply)
