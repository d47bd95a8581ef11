"""API endpoints for the pool service.

State-changing operations accept ``dryRun``: the operation then runs on a
copy of the pool and the result is returned without being committed.
"""

import structlog
from fastapi import APIRouter, Depends, Query

from bpool.api.models import (
    BindRequest,
    CreatePoolRequest,
    ExitPoolRequest,
    ExitswapExternAmountOutRequest,
    ExitswapPoolAmountInRequest,
    FeesRequest,
    FinalizeResponse,
    JoinPoolRequest,
    JoinswapExternAmountInRequest,
    JoinswapPoolAmountOutRequest,
    LiquidityResponse,
    OperationRequest,
    PoolStateResponse,
    SingleSidedResponse,
    SpotPriceResponse,
    SwapExactAmountInRequest,
    SwapExactAmountOutRequest,
    SwapResponse,
    UnbindRequest,
    UnbindResponse,
)
from bpool.api.registry import PoolRegistry, get_default_registry
from bpool.api.types import to_wei
from bpool.pool import WeightedPool

logger = structlog.get_logger()

router = APIRouter(prefix="/pools")


def get_registry() -> PoolRegistry:
    """Dependency provider for the pool registry.

    Override this in tests to inject a fresh registry:
        app.dependency_overrides[get_registry] = lambda: registry
    """
    return get_default_registry()


def _target(pool: WeightedPool, request: OperationRequest) -> WeightedPool:
    if request.dry_run:
        logger.debug("dry_run_quote", pool_id=pool.pool_id, request=type(request).__name__)
        return pool.copy()
    return pool


# =============================================================================
# Lifecycle
# =============================================================================


@router.post("", status_code=201)
def create_pool(
    request: CreatePoolRequest,
    registry: PoolRegistry = Depends(get_registry),
) -> PoolStateResponse:
    pool = registry.create(request.pool_id)
    return PoolStateResponse.from_pool(pool)


@router.get("")
def list_pools(registry: PoolRegistry = Depends(get_registry)) -> list[str]:
    return registry.ids()


@router.get("/{pool_id}")
def get_pool(pool_id: str, registry: PoolRegistry = Depends(get_registry)) -> PoolStateResponse:
    return PoolStateResponse.from_pool(registry.get(pool_id))


@router.post("/{pool_id}/bind")
def bind(
    pool_id: str, request: BindRequest, registry: PoolRegistry = Depends(get_registry)
) -> PoolStateResponse:
    pool = registry.get(pool_id)
    pool.bind(request.token, int(request.balance), request.denorm)
    return PoolStateResponse.from_pool(pool)


@router.post("/{pool_id}/rebind")
def rebind(
    pool_id: str, request: BindRequest, registry: PoolRegistry = Depends(get_registry)
) -> PoolStateResponse:
    pool = registry.get(pool_id)
    pool.rebind(request.token, int(request.balance), request.denorm)
    return PoolStateResponse.from_pool(pool)


@router.post("/{pool_id}/unbind")
def unbind(
    pool_id: str, request: UnbindRequest, registry: PoolRegistry = Depends(get_registry)
) -> UnbindResponse:
    released = registry.get(pool_id).unbind(request.token)
    return UnbindResponse(token=request.token, released=released)


@router.post("/{pool_id}/fees")
def set_fees(
    pool_id: str, request: FeesRequest, registry: PoolRegistry = Depends(get_registry)
) -> PoolStateResponse:
    pool = registry.get(pool_id)
    pool.set_fees(
        swap_fee=request.swap_fee,
        exit_fee=request.exit_fee,
        reserve_ratio=request.reserve_ratio,
    )
    return PoolStateResponse.from_pool(pool)


@router.post("/{pool_id}/finalize")
def finalize(pool_id: str, registry: PoolRegistry = Depends(get_registry)) -> FinalizeResponse:
    shares = registry.get(pool_id).finalize()
    return FinalizeResponse(shares_minted=shares)


@router.get("/{pool_id}/spot-price")
def spot_price(
    pool_id: str,
    token_in: str = Query(alias="tokenIn"),
    token_out: str = Query(alias="tokenOut"),
    registry: PoolRegistry = Depends(get_registry),
) -> SpotPriceResponse:
    snapshot = registry.get(pool_id).copy()
    return SpotPriceResponse(
        token_in=token_in,
        token_out=token_out,
        spot_price=snapshot.get_spot_price(token_in, token_out),
        spot_price_with_fee=snapshot.get_spot_price_with_fee(token_in, token_out),
    )


# =============================================================================
# Swaps
# =============================================================================


@router.post("/{pool_id}/swap/exact-in")
def swap_exact_amount_in(
    pool_id: str,
    request: SwapExactAmountInRequest,
    registry: PoolRegistry = Depends(get_registry),
) -> SwapResponse:
    pool = _target(registry.get(pool_id), request)
    result = pool.swap_exact_amount_in(
        request.token_in,
        int(request.token_amount_in),
        request.token_out,
        min_amount_out=int(request.min_amount_out),
        max_price=to_wei(request.max_price),
    )
    return SwapResponse.from_result(result, request.dry_run)


@router.post("/{pool_id}/swap/exact-out")
def swap_exact_amount_out(
    pool_id: str,
    request: SwapExactAmountOutRequest,
    registry: PoolRegistry = Depends(get_registry),
) -> SwapResponse:
    pool = _target(registry.get(pool_id), request)
    result = pool.swap_exact_amount_out(
        request.token_in,
        to_wei(request.max_amount_in),
        request.token_out,
        int(request.token_amount_out),
        max_price=to_wei(request.max_price),
    )
    return SwapResponse.from_result(result, request.dry_run)


# =============================================================================
# Liquidity
# =============================================================================


@router.post("/{pool_id}/join")
def join_pool(
    pool_id: str, request: JoinPoolRequest, registry: PoolRegistry = Depends(get_registry)
) -> LiquidityResponse:
    pool = _target(registry.get(pool_id), request)
    max_amounts_in = None
    if request.max_amounts_in is not None:
        max_amounts_in = [int(a) for a in request.max_amounts_in]
    result = pool.join_pool(int(request.pool_amount_out), max_amounts_in)
    return LiquidityResponse.from_result(result, request.dry_run)


@router.post("/{pool_id}/exit")
def exit_pool(
    pool_id: str, request: ExitPoolRequest, registry: PoolRegistry = Depends(get_registry)
) -> LiquidityResponse:
    pool = _target(registry.get(pool_id), request)
    min_amounts_out = None
    if request.min_amounts_out is not None:
        min_amounts_out = [int(a) for a in request.min_amounts_out]
    result = pool.exit_pool(int(request.pool_amount_in), min_amounts_out)
    return LiquidityResponse.from_result(result, request.dry_run)


@router.post("/{pool_id}/join-swap/extern-amount-in")
def joinswap_extern_amount_in(
    pool_id: str,
    request: JoinswapExternAmountInRequest,
    registry: PoolRegistry = Depends(get_registry),
) -> SingleSidedResponse:
    pool = _target(registry.get(pool_id), request)
    result = pool.joinswap_extern_amount_in(
        request.token_in, int(request.token_amount_in), int(request.min_pool_amount_out)
    )
    return SingleSidedResponse.from_result(result, request.dry_run)


@router.post("/{pool_id}/join-swap/pool-amount-out")
def joinswap_pool_amount_out(
    pool_id: str,
    request: JoinswapPoolAmountOutRequest,
    registry: PoolRegistry = Depends(get_registry),
) -> SingleSidedResponse:
    pool = _target(registry.get(pool_id), request)
    result = pool.joinswap_pool_amount_out(
        request.token_in, int(request.pool_amount_out), to_wei(request.max_amount_in)
    )
    return SingleSidedResponse.from_result(result, request.dry_run)


@router.post("/{pool_id}/exit-swap/pool-amount-in")
def exitswap_pool_amount_in(
    pool_id: str,
    request: ExitswapPoolAmountInRequest,
    registry: PoolRegistry = Depends(get_registry),
) -> SingleSidedResponse:
    pool = _target(registry.get(pool_id), request)
    result = pool.exitswap_pool_amount_in(
        request.token_out, int(request.pool_amount_in), int(request.min_amount_out)
    )
    return SingleSidedResponse.from_result(result, request.dry_run)


@router.post("/{pool_id}/exit-swap/extern-amount-out")
def exitswap_extern_amount_out(
    pool_id: str,
    request: ExitswapExternAmountOutRequest,
    registry: PoolRegistry = Depends(get_registry),
) -> SingleSidedResponse:
    pool = _target(registry.get(pool_id), request)
    result = pool.exitswap_extern_amount_out(
        request.token_out, int(request.token_amount_out), to_wei(request.max_pool_amount_in)
    )
    return SingleSidedResponse.from_result(result, request.dry_run)
