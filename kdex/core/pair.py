"""Constant-product pair with a directional ILP fee.

The pair custodies two tokens, issues pool shares, and enforces the
constant-product invariant on every swap:

    (b0 * 10000 - in0 * 36) * (b1 * 10000 - in1 * 36) >= r0 * r1 * 10000**2

where b* are the post-swap balances, in* the inputs net of the ILP fee and
r* the pre-swap reserves. Fee ordering is fixed: the ILP fee comes off the
raw input first, the LP fee is charged on what remains, and the protocol
fee (a share of LP fee growth) is minted only at the next mint or burn.

ILP fee tokens leave the pair immediately: they are transferred to the
registry's ILP manager, which records them with `deposit_fee`. Swaps made by
the ILP manager itself are exempt, so its rebalancing swap never feeds new
fees into the ledger it is draining.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

import structlog

from kdex.amm.constant_product import (
    initial_liquidity,
    k_invariant_holds,
    proportional_liquidity,
    protocol_fee_liquidity,
)
from kdex.chain import Chain, Context, external
from kdex.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from kdex.constants import (
    SHARE_TOKEN_DECIMALS,
    SHARE_TOKEN_NAME,
    SHARE_TOKEN_SYMBOL,
    ZERO_ADDRESS,
)
from kdex.core.interfaces import FeeDepositTarget, FlashSwapCallee, PairRegistry
from kdex.core.reserves import ReserveLedger
from kdex.errors import (
    Forbidden,
    InsufficientInputAmount,
    InsufficientLiquidity,
    InsufficientLiquidityBurned,
    InsufficientLiquidityMinted,
    InsufficientOutputAmount,
    InvalidFeeRate,
    InvalidTo,
    KInvariantViolation,
    Locked,
)
from kdex.models.events import Burn, IlpFeeRatesSet, IlpFeeStatusToggled, Mint, Swap, Sync
from kdex.models.types import normalize_address
from kdex.safe_int import S
from kdex.tokens.erc20 import ERC20, TokenState

logger = structlog.get_logger()


@dataclass
class PairState(TokenState):
    reserves: ReserveLedger = field(default_factory=ReserveLedger)
    k_last: int = 0
    is_ilp_fee_active: bool = False
    ilp_fee_rate_token0_in: int = 0
    ilp_fee_rate_token1_in: int = 0
    unlocked: bool = True


class Pair(ERC20):
    """A trading pair and its pool-share token."""

    state: PairState

    def __init__(
        self,
        chain: Chain,
        address: str,
        factory: PairRegistry,
        token0: str,
        token1: str,
        config: EngineConfig = DEFAULT_ENGINE_CONFIG,
    ) -> None:
        super().__init__(chain, address, SHARE_TOKEN_NAME, SHARE_TOKEN_SYMBOL, SHARE_TOKEN_DECIMALS)
        self.factory = factory
        self.token0 = normalize_address(token0)
        self.token1 = normalize_address(token1)
        self.config = config
        self.state = PairState()
        self._deploy()

    # --- Views ---

    def get_reserves(self) -> tuple[int, int, int]:
        """(reserve0, reserve1, block_timestamp_last)."""
        return self.state.reserves.get_reserves()

    @property
    def price0_cumulative_last(self) -> int:
        return self.state.reserves.price0_cumulative_last

    @property
    def price1_cumulative_last(self) -> int:
        return self.state.reserves.price1_cumulative_last

    @property
    def k_last(self) -> int:
        return self.state.k_last

    @property
    def is_ilp_fee_active(self) -> bool:
        return self.state.is_ilp_fee_active

    def get_ilp_fee_rates(self) -> tuple[int, int]:
        """(rate for token0 input, rate for token1 input), in basis points."""
        return self.state.ilp_fee_rate_token0_in, self.state.ilp_fee_rate_token1_in

    # --- Liquidity ---

    @external
    def mint(self, ctx: Context, to: str) -> int:
        """Mint shares for tokens transferred in since the last sync.

        Raises:
            InsufficientLiquidityMinted: If the deposit is worth zero shares
        """
        to = normalize_address(to)
        with self._lock():
            reserve0, reserve1, _ = self.get_reserves()
            balance0, balance1 = self._balances()
            amount0 = (S(balance0) - reserve0).value
            amount1 = (S(balance1) - reserve1).value

            fee_on = self._mint_fee(reserve0, reserve1)
            # total_supply must be read after _mint_fee, which can change it
            total_supply = self.state.total_supply
            if total_supply == 0:
                liquidity = initial_liquidity(amount0, amount1, self.config.minimum_liquidity)
                if liquidity > 0:
                    self._mint(ZERO_ADDRESS, self.config.minimum_liquidity)
            else:
                liquidity = proportional_liquidity(
                    amount0, amount1, reserve0, reserve1, total_supply
                )
            if liquidity <= 0:
                raise InsufficientLiquidityMinted()
            self._mint(to, liquidity)

            self._update(balance0, balance1)
            if fee_on:
                self.state.k_last = self.state.reserves.k
            self._emit(
                Mint(emitter=self.address, sender=ctx.sender, amount0=amount0, amount1=amount1)
            )

        logger.debug(
            "liquidity_minted",
            pair=self.address[-8:],
            to=to[-8:],
            amount0=amount0,
            amount1=amount1,
            liquidity=liquidity,
        )
        return liquidity

    @external
    def burn(self, ctx: Context, to: str) -> tuple[int, int]:
        """Redeem the shares held by the pair itself for a pro-rata slice of reserves.

        Raises:
            InsufficientLiquidityBurned: If either redeemed amount rounds to zero
        """
        to = normalize_address(to)
        with self._lock():
            reserve0, reserve1, _ = self.get_reserves()
            liquidity = self.balance_of(self.address)

            fee_on = self._mint_fee(reserve0, reserve1)
            total_supply = self.state.total_supply
            amount0 = (S(liquidity) * reserve0 // total_supply).value if total_supply else 0
            amount1 = (S(liquidity) * reserve1 // total_supply).value if total_supply else 0
            if amount0 <= 0 or amount1 <= 0:
                raise InsufficientLiquidityBurned()

            self._burn(self.address, liquidity)
            self._safe_transfer(self.token0, to, amount0)
            self._safe_transfer(self.token1, to, amount1)

            balance0, balance1 = self._balances()
            self._update(balance0, balance1)
            if fee_on:
                self.state.k_last = self.state.reserves.k
            self._emit(
                Burn(
                    emitter=self.address,
                    sender=ctx.sender,
                    amount0=amount0,
                    amount1=amount1,
                    to=to,
                )
            )

        logger.debug(
            "liquidity_burned",
            pair=self.address[-8:],
            to=to[-8:],
            amount0=amount0,
            amount1=amount1,
            liquidity=liquidity,
        )
        return amount0, amount1

    # --- Swap ---

    @external
    def swap(
        self,
        ctx: Context,
        amount0_out: int,
        amount1_out: int,
        to: str,
        data: bytes = b"",
    ) -> None:
        """Send the requested outputs, then verify enough input arrived.

        Outputs are transferred before any balance is read, so `to` may be a
        flash-swap callee that pays for them from the proceeds during its
        `uniswap_v2_call` callback.

        Raises:
            InsufficientOutputAmount: If an output is negative or both are zero
            InsufficientLiquidity: If an output is not strictly below its reserve
            InsufficientInputAmount: If nothing was paid in
            KInvariantViolation: If the fee-adjusted balances shrink k
        """
        if amount0_out < 0 or amount1_out < 0:
            raise InsufficientOutputAmount()
        if amount0_out == 0 and amount1_out == 0:
            raise InsufficientOutputAmount()
        to = normalize_address(to)

        with self._lock():
            reserve0, reserve1, _ = self.get_reserves()
            if amount0_out >= reserve0 or amount1_out >= reserve1:
                raise InsufficientLiquidity()
            if to in (self.token0, self.token1):
                raise InvalidTo()

            if amount0_out > 0:
                self._safe_transfer(self.token0, to, amount0_out)
            if amount1_out > 0:
                self._safe_transfer(self.token1, to, amount1_out)
            if data:
                self._flash_callback(ctx.sender, to, amount0_out, amount1_out, data)

            balance0, balance1 = self._balances()
            amount0_in = _net_input(balance0, reserve0, amount0_out)
            amount1_in = _net_input(balance1, reserve1, amount1_out)
            if amount0_in <= 0 and amount1_in <= 0:
                raise InsufficientInputAmount()

            ilp_fee0 = ilp_fee1 = 0
            if self._ilp_fee_applies(ctx.sender):
                rate0, rate1 = self.get_ilp_fee_rates()
                ilp_fee0 = self._charge_ilp_fee(self.token0, amount0_in, rate0)
                ilp_fee1 = self._charge_ilp_fee(self.token1, amount1_in, rate1)
                if ilp_fee0 or ilp_fee1:
                    balance0, balance1 = self._balances()

            if not k_invariant_holds(
                balance0,
                balance1,
                amount0_in - ilp_fee0,
                amount1_in - ilp_fee1,
                reserve0,
                reserve1,
                self.config.lp_fee_bps,
            ):
                raise KInvariantViolation()

            self._update(balance0, balance1)
            self._emit(
                Swap(
                    emitter=self.address,
                    sender=ctx.sender,
                    amount0_in=amount0_in,
                    amount1_in=amount1_in,
                    amount0_out=amount0_out,
                    amount1_out=amount1_out,
                    to=to,
                )
            )

        logger.debug(
            "swap_executed",
            pair=self.address[-8:],
            amount0_in=amount0_in,
            amount1_in=amount1_in,
            amount0_out=amount0_out,
            amount1_out=amount1_out,
            ilp_fee0=ilp_fee0,
            ilp_fee1=ilp_fee1,
        )

    # --- Balance reconciliation ---

    @external
    def skim(self, ctx: Context, to: str) -> None:
        """Send any balance above the reserves to `to`, leaving reserves as they are."""
        to = normalize_address(to)
        with self._lock():
            reserve0, reserve1, _ = self.get_reserves()
            balance0, balance1 = self._balances()
            if balance0 > reserve0:
                self._safe_transfer(self.token0, to, balance0 - reserve0)
            if balance1 > reserve1:
                self._safe_transfer(self.token1, to, balance1 - reserve1)

    @external
    def sync(self, ctx: Context) -> None:
        """Force reserves to match the custodied balances."""
        with self._lock():
            balance0, balance1 = self._balances()
            self._update(balance0, balance1)

    # --- ILP fee administration ---

    @external
    def toggle_ilp_fee_status(self, ctx: Context, active: bool) -> None:
        if not self.factory.is_pair_ilp_fee_admin(self.address, ctx.sender):
            raise Forbidden()
        self.state.is_ilp_fee_active = active
        self._emit(IlpFeeStatusToggled(emitter=self.address, active=active))
        logger.info("ilp_fee_status_toggled", pair=self.address, active=active)

    @external
    def set_ilp_fee_rates(self, ctx: Context, rate_token0_in: int, rate_token1_in: int) -> None:
        """Set the per-input-side ILP fee rates in basis points.

        Raises:
            Forbidden: If the caller is not this pair's ILP fee manager
            InvalidFeeRate: If either rate is outside [0, max_ilp_fee_rate]
        """
        if not self.factory.is_pair_ilp_fee_manager(self.address, ctx.sender):
            raise Forbidden()
        for rate in (rate_token0_in, rate_token1_in):
            if rate < 0 or rate > self.config.max_ilp_fee_rate:
                raise InvalidFeeRate()
        self.state.ilp_fee_rate_token0_in = rate_token0_in
        self.state.ilp_fee_rate_token1_in = rate_token1_in
        self._emit(
            IlpFeeRatesSet(
                emitter=self.address,
                rate_token0_in=rate_token0_in,
                rate_token1_in=rate_token1_in,
            )
        )
        logger.info(
            "ilp_fee_rates_set",
            pair=self.address,
            rate_token0_in=rate_token0_in,
            rate_token1_in=rate_token1_in,
        )

    # --- Internal ---

    @contextmanager
    def _lock(self) -> Iterator[None]:
        """Re-entrancy guard held for the duration of mint/burn/swap/skim/sync."""
        if not self.state.unlocked:
            raise Locked()
        self.state.unlocked = False
        try:
            yield
        finally:
            self.state.unlocked = True

    def _update(self, balance0: int, balance1: int) -> None:
        ledger = self.state.reserves
        ledger.update(balance0, balance1, self.chain.timestamp)
        self._emit(Sync(emitter=self.address, reserve0=ledger.reserve0, reserve1=ledger.reserve1))

    def _mint_fee(self, reserve0: int, reserve1: int) -> bool:
        """Mint the protocol's share of sqrt(k) growth to fee_to, if the fee is on."""
        fee_to = normalize_address(self.factory.fee_to)
        fee_on = fee_to != ZERO_ADDRESS
        k_last = self.state.k_last
        if fee_on:
            if k_last != 0:
                root_k = (S(reserve0) * reserve1).isqrt().value
                root_k_last = S(k_last).isqrt().value
                if root_k > root_k_last:
                    liquidity = protocol_fee_liquidity(
                        self.state.total_supply,
                        root_k,
                        root_k_last,
                        self.config.protocol_fee_denominator,
                    )
                    if liquidity > 0:
                        self._mint(fee_to, liquidity)
        elif k_last != 0:
            self.state.k_last = 0
        return fee_on

    def _ilp_fee_applies(self, sender: str) -> bool:
        if not self.state.is_ilp_fee_active:
            return False
        return sender != normalize_address(self.factory.ilp_manager_address)

    def _charge_ilp_fee(self, token: str, amount_in: int, rate: int) -> int:
        """Move the ILP fee on one input side to the ILP manager and record it."""
        if amount_in <= 0 or rate <= 0:
            return 0
        fee = (S(amount_in) * rate // self.config.bps_denominator).value
        if fee == 0:
            return 0
        manager_address = normalize_address(self.factory.ilp_manager_address)
        if manager_address == ZERO_ADDRESS:
            logger.warning("ilp_fee_skipped_no_manager", pair=self.address, token=token, fee=fee)
            return 0

        manager = self.chain.contract_at(manager_address)
        if not isinstance(manager, FeeDepositTarget):
            raise LookupError(f"ILP manager {manager_address} cannot accept fee deposits")
        self._safe_transfer(token, manager_address, fee)
        manager.deposit_fee(self._as_caller, token, fee)
        return fee

    def _flash_callback(
        self, sender: str, to: str, amount0_out: int, amount1_out: int, data: bytes
    ) -> None:
        callee = self.chain.contract_at(to)
        if not isinstance(callee, FlashSwapCallee):
            raise LookupError(f"Flash swap recipient {to} does not implement uniswap_v2_call")
        callee.uniswap_v2_call(self._as_caller, sender, amount0_out, amount1_out, data)

    def _token(self, token: str) -> ERC20:
        return self.chain.get(token, ERC20)

    def _balances(self) -> tuple[int, int]:
        return (
            self._token(self.token0).balance_of(self.address),
            self._token(self.token1).balance_of(self.address),
        )

    def _safe_transfer(self, token: str, to: str, value: int) -> None:
        self._token(token).transfer(self._as_caller, to, value)


def _net_input(balance: int, reserve: int, amount_out: int) -> int:
    """Amount of a token paid in: whatever the balance holds beyond reserve - out."""
    expected = reserve - amount_out
    return balance - expected if balance > expected else 0
