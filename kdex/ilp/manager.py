"""ILP manager: collects ILP fees from pairs and turns them into liquidity.

Pairs push their ILP fees here during swaps (`deposit_fee`). An automation
caller periodically runs `perform_upkeep` for one pair, which walks the
phases

    IDLE -> EVALUATING -> REBALANCING -> DISTRIBUTING -> IDLE

EVALUATING may end the call early as a successful no-op (no fees, empty
reserves, or fee value below the threshold). REBALANCING swaps the excess
fee side through the pair so both sides match the pool ratio. DISTRIBUTING
sends the processing cut to the treasury and mints protocol-owned liquidity
to it from the rest.

The ledger entries are zeroed before any tokens leave the manager; a
failure anywhere later reverts the whole call, ledger included.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog
from eth_abi import decode, encode  # type: ignore[attr-defined]
from eth_abi.exceptions import DecodingError

from kdex.chain import Chain, Context, Contract, external
from kdex.config import RebalanceConfig
from kdex.constants import MAX_PROCESSING_FEE_RATE, ZERO_ADDRESS
from kdex.core.factory import Factory
from kdex.core.pair import Pair
from kdex.core.permissions import ILP_ADMIN_ROLES, Permissions, Role
from kdex.errors import InvalidFeeRate, InvalidPerformData, SenderNotPair, TreasuryNotSet
from kdex.ilp.ledger import FeeLedger
from kdex.ilp.rebalance import (
    Distribution,
    SelfSwap,
    UpkeepPhase,
    UpkeepResult,
    UpkeepStatus,
    evaluate,
    plan_rebalance,
    split_processing_fee,
)
from kdex.models.events import ConfigUpdated, FeeDeposited, UpkeepPerformed
from kdex.models.types import normalize_address
from kdex.tokens.erc20 import ERC20

logger = structlog.get_logger()

FORBIDDEN_REASON = "ILPManager: FORBIDDEN"
INVALID_FEE_RATE_REASON = "ILPManager: INVALID_FEE_RATE"


def encode_perform_data(pair: str) -> bytes:
    """ABI-encode a pair address as upkeep check/perform data."""
    return encode(["address"], [normalize_address(pair, validate=True)])


def decode_perform_data(data: bytes) -> str:
    """Decode upkeep data into a pair address.

    Raises:
        InvalidPerformData: If data is not the ABI encoding of one address
    """
    if not isinstance(data, (bytes, bytearray)):
        raise InvalidPerformData(f"{InvalidPerformData.reason} (expected bytes)")
    try:
        (pair,) = decode(["address"], bytes(data))
    except DecodingError as err:
        raise InvalidPerformData(f"{InvalidPerformData.reason} ({err})") from err
    return normalize_address(pair)


@dataclass
class ILPManagerState:
    config: RebalanceConfig = field(default_factory=RebalanceConfig)
    ledger: FeeLedger = field(default_factory=FeeLedger)
    permissions: Permissions = field(default_factory=Permissions)
    phase: UpkeepPhase = UpkeepPhase.IDLE


class ILPManager(Contract):
    """Fee custody, upkeep state machine, and its admin surface."""

    state: ILPManagerState

    def __init__(
        self,
        chain: Chain,
        address: str,
        factory: Factory,
        owner: str,
        permissions: Permissions | None = None,
    ) -> None:
        super().__init__(chain, address)
        self.factory = factory
        self.state = ILPManagerState(permissions=permissions or Permissions())
        self.state.permissions.assign(Role.ILP_MANAGER_OWNER, owner)
        self._deploy()

    # --- Views ---

    @property
    def owner(self) -> str:
        return self.state.permissions.holder(Role.ILP_MANAGER_OWNER)

    @property
    def ilp_manager_admin(self) -> str:
        """Holder of the setter roles granted by set_ilp_manager_admin."""
        return self.state.permissions.holder(Role.TREASURY_SETTER)

    @property
    def upkeep_caller(self) -> str:
        return self.state.permissions.holder(Role.UPKEEP_CALLER)

    @property
    def treasury_address(self) -> str:
        return self.state.config.treasury_address

    @property
    def threshold_value(self) -> int:
        return self.state.config.threshold_value

    @property
    def processing_fee_rate(self) -> int:
        return self.state.config.processing_fee_rate

    @property
    def phase(self) -> UpkeepPhase:
        return self.state.phase

    @property
    def permissions(self) -> Permissions:
        return self.state.permissions

    def get_accumulated_fees(self, pair: str, token: str) -> int:
        return self.state.ledger.amount(pair, token)

    def get_pair_fees(self, pair: str) -> tuple[int, int]:
        """(fee0, fee1) accumulated for a registered pair."""
        contract = self.factory.pair_at(pair)
        return self.state.ledger.pair_fees(contract.address, contract.token0, contract.token1)

    # --- Fee intake ---

    @external
    def deposit_fee(self, ctx: Context, token: str, amount: int) -> None:
        """Record an ILP fee pushed by a pair.

        The caller must be a pair deployed by the registry and `token` one
        of its two tokens. Each call adds to the ledger; repeating a call
        counts the fee twice.

        Raises:
            SenderNotPair: If the caller is not a registered pair for token
        """
        token = normalize_address(token)
        pair = self.chain.contract_at(ctx.sender) if self.chain.has_code(ctx.sender) else None
        if not isinstance(pair, Pair):
            raise SenderNotPair()
        if token not in (pair.token0, pair.token1):
            raise SenderNotPair()
        if self.factory.get_pair(pair.token0, pair.token1) != ctx.sender:
            raise SenderNotPair()

        total = self.state.ledger.credit(ctx.sender, token, amount)
        self._emit(FeeDeposited(emitter=self.address, token=token, amount=amount))
        logger.debug(
            "ilp_fee_deposited",
            pair=ctx.sender[-8:],
            token=token[-8:],
            amount=amount,
            total=total,
        )

    # --- Upkeep ---

    def check_upkeep(self, check_data: bytes) -> tuple[bool, bytes]:
        """Whether perform_upkeep would do work for the encoded pair.

        Returns:
            (upkeep_needed, perform_data); perform_data echoes check_data
        """
        pair = self.factory.pair_at(decode_perform_data(check_data))
        fee0, fee1 = self.state.ledger.pair_fees(pair.address, pair.token0, pair.token1)
        reserve0, reserve1, _ = pair.get_reserves()
        skip = evaluate(fee0, fee1, reserve0, reserve1, self.state.config.threshold_value)
        return skip is None, bytes(check_data)

    @external
    def perform_upkeep(self, ctx: Context, perform_data: bytes) -> UpkeepResult:
        """Rebalance one pair's accumulated fees into treasury-owned liquidity.

        Raises:
            Forbidden: If the caller is not the upkeep caller
            InvalidPerformData: If perform_data does not decode to an address
            PairNotFound: If the address is not a registered pair
            TreasuryNotSet: If work is due but no treasury is configured
        """
        self.state.permissions.require(Role.UPKEEP_CALLER, ctx.sender, reason=FORBIDDEN_REASON)
        pair = self.factory.pair_at(decode_perform_data(perform_data))

        self.state.phase = UpkeepPhase.EVALUATING
        config = self.state.config
        fee0, fee1 = self.state.ledger.pair_fees(pair.address, pair.token0, pair.token1)
        reserve0, reserve1, _ = pair.get_reserves()

        skip = evaluate(fee0, fee1, reserve0, reserve1, config.threshold_value)
        if skip is not None:
            self.state.phase = UpkeepPhase.IDLE
            logger.info(
                "upkeep_skipped",
                pair=pair.address,
                reason=skip.value,
                fee0=fee0,
                fee1=fee1,
                threshold=config.threshold_value,
            )
            return UpkeepResult(status=skip, pair=pair.address, fee0=fee0, fee1=fee1)

        treasury = config.treasury_address
        if treasury == ZERO_ADDRESS:
            raise TreasuryNotSet()

        self.state.ledger.reset(pair.address, pair.token0, pair.token1)

        self.state.phase = UpkeepPhase.REBALANCING
        plan = plan_rebalance(fee0, fee1, reserve0, reserve1, pair.config.fee_multiplier)
        if plan.swap is not None:
            self._execute_self_swap(pair, plan.swap)

        self.state.phase = UpkeepPhase.DISTRIBUTING
        distribution = split_processing_fee(plan.amount0, plan.amount1, config.processing_fee_rate)
        liquidity = self._provide_liquidity(pair, treasury, distribution)

        self.state.phase = UpkeepPhase.IDLE
        self._emit(
            UpkeepPerformed(
                emitter=self.address,
                pair=pair.address,
                amount0=distribution.liquidity0,
                amount1=distribution.liquidity1,
                liquidity=liquidity,
            )
        )
        logger.info(
            "upkeep_performed",
            pair=pair.address,
            fee0=fee0,
            fee1=fee1,
            swapped=plan.swap is not None,
            cut0=distribution.cut0,
            cut1=distribution.cut1,
            liquidity=liquidity,
        )
        return UpkeepResult(
            status=UpkeepStatus.EXECUTED,
            pair=pair.address,
            fee0=fee0,
            fee1=fee1,
            swap=plan.swap,
            distribution=distribution,
            liquidity=liquidity,
        )

    def _execute_self_swap(self, pair: Pair, swap: SelfSwap) -> None:
        token_in = pair.token0 if swap.zero_for_one else pair.token1
        self._token(token_in).transfer(self._as_caller, pair.address, swap.amount_in)
        if swap.zero_for_one:
            pair.swap(self._as_caller, 0, swap.amount_out, self.address)
        else:
            pair.swap(self._as_caller, swap.amount_out, 0, self.address)
        logger.debug(
            "self_swap_executed",
            pair=pair.address[-8:],
            zero_for_one=swap.zero_for_one,
            amount_in=swap.amount_in,
            amount_out=swap.amount_out,
        )

    def _provide_liquidity(self, pair: Pair, treasury: str, distribution: Distribution) -> int:
        token0 = self._token(pair.token0)
        token1 = self._token(pair.token1)
        if distribution.cut0 > 0:
            token0.transfer(self._as_caller, treasury, distribution.cut0)
        if distribution.cut1 > 0:
            token1.transfer(self._as_caller, treasury, distribution.cut1)
        if distribution.liquidity0 == 0 and distribution.liquidity1 == 0:
            # A full processing cut leaves nothing to provide
            logger.info("liquidity_provision_skipped", pair=pair.address, treasury=treasury)
            return 0
        token0.transfer(self._as_caller, pair.address, distribution.liquidity0)
        token1.transfer(self._as_caller, pair.address, distribution.liquidity1)
        return pair.mint(self._as_caller, treasury)

    def _token(self, address: str) -> ERC20:
        return self.chain.get(address, ERC20)

    # --- Administration ---

    @external
    def set_ilp_manager_admin(self, ctx: Context, admin: str) -> None:
        """Hand the four setter roles to admin, replacing the previous holder."""
        self.state.permissions.require(Role.ILP_MANAGER_OWNER, ctx.sender, reason=FORBIDDEN_REASON)
        for role in ILP_ADMIN_ROLES:
            self.state.permissions.assign(role, admin)
        self._config_updated("ilp_manager_admin", normalize_address(admin))

    @external
    def set_upkeep_caller(self, ctx: Context, caller: str) -> None:
        self.state.permissions.require(
            Role.UPKEEP_CALLER_SETTER, ctx.sender, reason=FORBIDDEN_REASON
        )
        self.state.permissions.assign(Role.UPKEEP_CALLER, caller)
        self._config_updated("upkeep_caller", normalize_address(caller))

    @external
    def set_ilp_treasury_address(self, ctx: Context, treasury: str) -> None:
        self.state.permissions.require(Role.TREASURY_SETTER, ctx.sender, reason=FORBIDDEN_REASON)
        self.state.config.treasury_address = normalize_address(treasury)
        self._config_updated("treasury_address", self.state.config.treasury_address)

    @external
    def set_threshold_value(self, ctx: Context, value: int) -> None:
        self.state.permissions.require(Role.THRESHOLD_SETTER, ctx.sender, reason=FORBIDDEN_REASON)
        if value < 0:
            raise ValueError(f"Threshold cannot be negative: {value}")
        self.state.config.threshold_value = value
        self._config_updated("threshold_value", str(value))

    @external
    def set_processing_fee_rate(self, ctx: Context, rate: int) -> None:
        """Set the treasury's processing cut in basis points (0 to 10000)."""
        self.state.permissions.require(
            Role.PROCESSING_FEE_SETTER, ctx.sender, reason=FORBIDDEN_REASON
        )
        if rate < 0 or rate > MAX_PROCESSING_FEE_RATE:
            raise InvalidFeeRate(INVALID_FEE_RATE_REASON)
        self.state.config.processing_fee_rate = rate
        self._config_updated("processing_fee_rate", str(rate))

    def _config_updated(self, name: str, value: str) -> None:
        self._emit(ConfigUpdated(emitter=self.address, field=name, value=value))
        logger.info("ilp_manager_config_updated", field=name, value=value)
