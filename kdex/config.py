"""Engine and rebalance configuration."""

from dataclasses import dataclass

from kdex.constants import (
    BPS_DENOMINATOR,
    LP_FEE_BPS,
    MAX_ILP_FEE_RATE,
    MINIMUM_LIQUIDITY,
    PROTOCOL_FEE_DENOMINATOR,
    ZERO_ADDRESS,
)


@dataclass(frozen=True)
class EngineConfig:
    """Fixed parameters of the pair engine.

    These mirror constants compiled into the pair contract. Tests may build a
    different instance to explore other fee tiers, but a deployed pair never
    changes its configuration.

    Attributes:
        lp_fee_bps: Liquidity-provider fee on swap input (36 = 0.36%)
        bps_denominator: Basis-point scale used by every fee (10000)
        max_ilp_fee_rate: Upper bound accepted by set_ilp_fee_rates (200 = 2%)
        minimum_liquidity: Shares locked forever on the first mint
        protocol_fee_denominator: The protocol takes 1/(d+1) of LP fee growth
    """

    lp_fee_bps: int = LP_FEE_BPS
    bps_denominator: int = BPS_DENOMINATOR
    max_ilp_fee_rate: int = MAX_ILP_FEE_RATE
    minimum_liquidity: int = MINIMUM_LIQUIDITY
    protocol_fee_denominator: int = PROTOCOL_FEE_DENOMINATOR

    @property
    def fee_multiplier(self) -> int:
        """Multiplier applied to swap input (10000 - lp_fee_bps = 9964)."""
        return self.bps_denominator - self.lp_fee_bps


DEFAULT_ENGINE_CONFIG = EngineConfig()


@dataclass
class RebalanceConfig:
    """Admin-set parameters read by the rebalance engine.

    Starts out unset; each field is written only through its setter on the
    ILP manager.

    Attributes:
        threshold_value: Minimum combined fee value (token0 units) to act on
        processing_fee_rate: Cut sent to the treasury, in basis points
        treasury_address: Receives the processing cut and the minted shares
    """

    threshold_value: int = 0
    processing_fee_rate: int = 0
    treasury_address: str = ZERO_ADDRESS
