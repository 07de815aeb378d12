"""API endpoints for the KDEX engine."""

import asyncio
from collections.abc import Callable
from typing import TypeVar

import structlog
from fastapi import APIRouter, Depends, HTTPException

from kdex.chain import Context
from kdex.deployment import Deployment, get_default_deployment
from kdex.errors import Forbidden, KdexError, PairNotFound
from kdex.ilp.manager import encode_perform_data
from kdex.ilp.rebalance import UpkeepResult
from kdex.models.api import PairFees, PairInfo, UpkeepCheck, UpkeepRequest, UpkeepResponse

logger = structlog.get_logger()

router = APIRouter()

T = TypeVar("T")


def get_deployment() -> Deployment:
    """Dependency provider for the engine deployment.

    Override this in tests to serve a prepared engine:
        app.dependency_overrides[get_deployment] = lambda: deployment
    """
    return get_default_deployment()


async def _run(deployment: Deployment, fn: Callable[..., T], *args: object) -> T:
    """Run an engine call in the executor, mapping engine errors to HTTP errors."""
    loop = asyncio.get_event_loop()
    try:
        return await loop.run_in_executor(None, deployment.call, fn, *args)
    except KdexError as err:
        logger.warning("engine_call_rejected", call=fn.__name__, error=str(err))
        raise HTTPException(status_code=_status_for(err), detail=str(err)) from err
    except Exception as err:
        # Log error with full traceback; the engine state was rolled back
        logger.exception("engine_error", call=fn.__name__)
        raise HTTPException(status_code=500, detail="Internal engine error") from err


def _status_for(err: KdexError) -> int:
    if isinstance(err, Forbidden):
        return 403
    if isinstance(err, PairNotFound):
        return 404
    return 409


def _pair_info(deployment: Deployment, address: str) -> PairInfo:
    pair = deployment.factory.pair_at(address)
    reserve0, reserve1, block_timestamp_last = pair.get_reserves()
    rate0, rate1 = pair.get_ilp_fee_rates()
    return PairInfo(
        address=pair.address,
        token0=pair.token0,
        token1=pair.token1,
        reserve0=reserve0,
        reserve1=reserve1,
        block_timestamp_last=block_timestamp_last,
        price0_cumulative_last=pair.price0_cumulative_last,
        price1_cumulative_last=pair.price1_cumulative_last,
        total_supply=pair.total_supply,
        k_last=pair.k_last,
        is_ilp_fee_active=pair.is_ilp_fee_active,
        ilp_fee_rate_token0_in=rate0,
        ilp_fee_rate_token1_in=rate1,
    )


def _pair_fees(deployment: Deployment, address: str) -> PairFees:
    pair = deployment.factory.pair_at(address)
    fee0, fee1 = deployment.manager.get_pair_fees(pair.address)
    return PairFees(pair=pair.address, token0=pair.token0, token1=pair.token1, fee0=fee0, fee1=fee1)


def _check_upkeep(deployment: Deployment, address: str) -> UpkeepCheck:
    pair = deployment.factory.pair_at(address)
    needed, perform_data = deployment.manager.check_upkeep(encode_perform_data(pair.address))
    return UpkeepCheck(
        pair=pair.address, upkeep_needed=needed, perform_data="0x" + perform_data.hex()
    )


def _perform_upkeep(deployment: Deployment, caller: str, perform_data: bytes) -> UpkeepResult:
    return deployment.manager.perform_upkeep(Context(caller), perform_data)


@router.get("/pairs/{pair}")
async def get_pair(pair: str, deployment: Deployment = Depends(get_deployment)) -> PairInfo:
    """Reserves, cumulative prices, share supply and ILP fee settings of a pair."""
    return await _run(deployment, _pair_info, deployment, pair)


@router.get("/pairs/{pair}/fees")
async def get_pair_fees(pair: str, deployment: Deployment = Depends(get_deployment)) -> PairFees:
    """ILP fees accumulated for a pair and awaiting the next upkeep."""
    return await _run(deployment, _pair_fees, deployment, pair)


@router.get("/upkeep/{pair}")
async def check_upkeep(pair: str, deployment: Deployment = Depends(get_deployment)) -> UpkeepCheck:
    """Whether an upkeep for the pair would do work, with the data to perform it."""
    return await _run(deployment, _check_upkeep, deployment, pair)


@router.post("/upkeep")
async def perform_upkeep(
    request: UpkeepRequest,
    deployment: Deployment = Depends(get_deployment),
) -> UpkeepResponse:
    """Perform an upkeep as `caller`.

    Error Handling:
        - Malformed hex in performData: 422
        - Caller is not the upkeep caller: 403
        - Unknown pair: 404
        - Any other engine failure (bad perform data, no treasury, ...): 409
    """
    try:
        perform_data = bytes.fromhex(request.perform_data[2:])
    except ValueError as err:
        raise HTTPException(status_code=422, detail=f"performData is not valid hex: {err}") from err

    logger.info("upkeep_requested", caller=request.caller, perform_data=request.perform_data)
    result = await _run(deployment, _perform_upkeep, deployment, request.caller, perform_data)

    distribution = result.distribution
    return UpkeepResponse(
        pair=result.pair,
        status=result.status.value,
        fee0=result.fee0,
        fee1=result.fee1,
        liquidity=result.liquidity,
        swapped=result.swap is not None,
        cut0=distribution.cut0 if distribution else 0,
        cut1=distribution.cut1 if distribution else 0,
    )
