"""Event records appended to the chain log.

Every event carries the address of the contract that emitted it. Events are
part of chain state: a reverted call drops the events it emitted.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Event:
    emitter: str


# --- Token ---


@dataclass(frozen=True)
class Transfer(Event):
    sender: str
    to: str
    value: int


@dataclass(frozen=True)
class Approval(Event):
    owner: str
    spender: str
    value: int


# --- Pair ---


@dataclass(frozen=True)
class Mint(Event):
    sender: str
    amount0: int
    amount1: int


@dataclass(frozen=True)
class Burn(Event):
    sender: str
    amount0: int
    amount1: int
    to: str


@dataclass(frozen=True)
class Swap(Event):
    """A swap; input amounts are gross, before ILP and LP fees."""

    sender: str
    amount0_in: int
    amount1_in: int
    amount0_out: int
    amount1_out: int
    to: str


@dataclass(frozen=True)
class Sync(Event):
    reserve0: int
    reserve1: int


@dataclass(frozen=True)
class IlpFeeStatusToggled(Event):
    active: bool


@dataclass(frozen=True)
class IlpFeeRatesSet(Event):
    rate_token0_in: int
    rate_token1_in: int


# --- Registry ---


@dataclass(frozen=True)
class PairCreated(Event):
    token0: str
    token1: str
    pair: str
    pair_count: int


# --- ILP manager ---


@dataclass(frozen=True)
class FeeDeposited(Event):
    token: str
    amount: int


@dataclass(frozen=True)
class UpkeepPerformed(Event):
    pair: str
    amount0: int
    amount1: int
    liquidity: int


@dataclass(frozen=True)
class ConfigUpdated(Event):
    field: str
    value: str
