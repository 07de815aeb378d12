"""Pydantic models for the HTTP service."""

from pydantic import BaseModel, Field

from kdex.models.types import Address, Bytes, Uint256


class PairInfo(BaseModel):
    """Pool state of one pair."""

    address: Address
    token0: Address
    token1: Address
    reserve0: Uint256
    reserve1: Uint256
    block_timestamp_last: int = Field(alias="blockTimestampLast")
    price0_cumulative_last: Uint256 = Field(alias="price0CumulativeLast")
    price1_cumulative_last: Uint256 = Field(alias="price1CumulativeLast")
    total_supply: Uint256 = Field(alias="totalSupply")
    k_last: Uint256 = Field(alias="kLast")
    is_ilp_fee_active: bool = Field(alias="isIlpFeeActive")
    ilp_fee_rate_token0_in: int = Field(alias="ilpFeeRateToken0In")
    ilp_fee_rate_token1_in: int = Field(alias="ilpFeeRateToken1In")

    model_config = {"populate_by_name": True}


class PairFees(BaseModel):
    """ILP fees accumulated in the manager for one pair."""

    pair: Address
    token0: Address
    token1: Address
    fee0: Uint256
    fee1: Uint256


class UpkeepCheck(BaseModel):
    """Result of check_upkeep for a pair."""

    pair: Address
    upkeep_needed: bool = Field(alias="upkeepNeeded")
    perform_data: Bytes = Field(alias="performData")

    model_config = {"populate_by_name": True}


class UpkeepRequest(BaseModel):
    """Body of POST /upkeep."""

    caller: Address = Field(description="Identity the upkeep is performed as")
    perform_data: Bytes = Field(alias="performData", description="ABI-encoded pair address")

    model_config = {"populate_by_name": True}


class UpkeepResponse(BaseModel):
    pair: Address
    status: str
    fee0: Uint256
    fee1: Uint256
    liquidity: Uint256
    swapped: bool
    cut0: Uint256 = "0"
    cut1: Uint256 = "0"
