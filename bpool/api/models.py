"""Pydantic request and response models for the pool service."""

from decimal import Decimal

from pydantic import BaseModel, Field

from bpool.api.types import Fraction, TokenId, Uint256
from bpool.pool import LiquidityResult, SingleSidedResult, SwapResult, WeightedPool

# =============================================================================
# Pool lifecycle
# =============================================================================


class CreatePoolRequest(BaseModel):
    """Create an empty pool in the configuring phase."""

    pool_id: str | None = Field(
        default=None,
        alias="poolId",
        min_length=1,
        max_length=64,
        pattern=r"^[A-Za-z0-9_-]+$",
        description="Identifier for the new pool. Generated when omitted.",
    )

    model_config = {"populate_by_name": True}


class BindRequest(BaseModel):
    """Bind (or rebind) a token with its balance and denormalized weight."""

    token: TokenId
    balance: Uint256
    denorm: Fraction = Field(description="Denormalized weight, e.g. '25'")


class UnbindRequest(BaseModel):
    token: TokenId


class UnbindResponse(BaseModel):
    token: str
    released: Uint256 = Field(description="Balance returned to the caller.")


class FeesRequest(BaseModel):
    """Set any of the fee parameters. Omitted fields stay unchanged."""

    swap_fee: Fraction | None = Field(default=None, alias="swapFee")
    exit_fee: Fraction | None = Field(default=None, alias="exitFee")
    reserve_ratio: Fraction | None = Field(default=None, alias="reserveRatio")

    model_config = {"populate_by_name": True}


class FinalizeResponse(BaseModel):
    shares_minted: Uint256 = Field(alias="sharesMinted")

    model_config = {"populate_by_name": True}


class TokenState(BaseModel):
    """Per-token view of a pool."""

    token: str
    balance: Uint256
    denorm: Decimal
    normalized_weight: Decimal = Field(alias="normalizedWeight")
    collected_reserves: Uint256 = Field(alias="collectedReserves")

    model_config = {"populate_by_name": True}


class PoolStateResponse(BaseModel):
    """Full view of a pool."""

    pool_id: str = Field(alias="poolId")
    finalized: bool
    tokens: list[TokenState]
    swap_fee: Decimal = Field(alias="swapFee")
    exit_fee: Decimal = Field(alias="exitFee")
    reserve_ratio: Decimal = Field(alias="reserveRatio")
    total_denormalized_weight: Decimal = Field(alias="totalDenormalizedWeight")
    total_supply: Uint256 = Field(alias="totalSupply")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_pool(cls, pool: WeightedPool) -> "PoolStateResponse":
        # read from one snapshot so the view is consistent
        snapshot = pool.copy()
        return cls(
            pool_id=snapshot.pool_id,
            finalized=snapshot.is_finalized(),
            tokens=[
                TokenState(
                    token=token,
                    balance=snapshot.get_balance(token),
                    denorm=snapshot.get_denormalized_weight(token),
                    normalized_weight=snapshot.get_normalized_weight(token),
                    collected_reserves=snapshot.get_collected_reserves(token),
                )
                for token in snapshot.get_current_tokens()
            ],
            swap_fee=snapshot.get_swap_fee(),
            exit_fee=snapshot.get_exit_fee(),
            reserve_ratio=snapshot.get_reserve_ratio(),
            total_denormalized_weight=snapshot.get_total_denormalized_weight(),
            total_supply=snapshot.total_supply(),
        )


class SpotPriceResponse(BaseModel):
    token_in: str = Field(alias="tokenIn")
    token_out: str = Field(alias="tokenOut")
    spot_price: Uint256 = Field(alias="spotPrice", description="Fee-free spot price.")
    spot_price_with_fee: Uint256 = Field(
        alias="spotPriceWithFee", description="Fee-inclusive spot price."
    )

    model_config = {"populate_by_name": True}


# =============================================================================
# Operations
# =============================================================================


class OperationRequest(BaseModel):
    """Base for state-changing operations."""

    dry_run: bool = Field(
        default=False,
        alias="dryRun",
        description="Quote the operation without committing it.",
    )

    model_config = {"populate_by_name": True}


class SwapExactAmountInRequest(OperationRequest):
    token_in: TokenId = Field(alias="tokenIn")
    token_amount_in: Uint256 = Field(alias="tokenAmountIn")
    token_out: TokenId = Field(alias="tokenOut")
    min_amount_out: Uint256 = Field(default="0", alias="minAmountOut")
    max_price: Uint256 | None = Field(default=None, alias="maxPrice")


class SwapExactAmountOutRequest(OperationRequest):
    token_in: TokenId = Field(alias="tokenIn")
    max_amount_in: Uint256 | None = Field(default=None, alias="maxAmountIn")
    token_out: TokenId = Field(alias="tokenOut")
    token_amount_out: Uint256 = Field(alias="tokenAmountOut")
    max_price: Uint256 | None = Field(default=None, alias="maxPrice")


class JoinPoolRequest(OperationRequest):
    pool_amount_out: Uint256 = Field(alias="poolAmountOut")
    max_amounts_in: list[Uint256] | None = Field(
        default=None, alias="maxAmountsIn", description="One bound per token, in bind order."
    )


class ExitPoolRequest(OperationRequest):
    pool_amount_in: Uint256 = Field(alias="poolAmountIn")
    min_amounts_out: list[Uint256] | None = Field(
        default=None, alias="minAmountsOut", description="One bound per token, in bind order."
    )


class JoinswapExternAmountInRequest(OperationRequest):
    token_in: TokenId = Field(alias="tokenIn")
    token_amount_in: Uint256 = Field(alias="tokenAmountIn")
    min_pool_amount_out: Uint256 = Field(default="0", alias="minPoolAmountOut")


class JoinswapPoolAmountOutRequest(OperationRequest):
    token_in: TokenId = Field(alias="tokenIn")
    pool_amount_out: Uint256 = Field(alias="poolAmountOut")
    max_amount_in: Uint256 | None = Field(default=None, alias="maxAmountIn")


class ExitswapPoolAmountInRequest(OperationRequest):
    token_out: TokenId = Field(alias="tokenOut")
    pool_amount_in: Uint256 = Field(alias="poolAmountIn")
    min_amount_out: Uint256 = Field(default="0", alias="minAmountOut")


class ExitswapExternAmountOutRequest(OperationRequest):
    token_out: TokenId = Field(alias="tokenOut")
    token_amount_out: Uint256 = Field(alias="tokenAmountOut")
    max_pool_amount_in: Uint256 | None = Field(default=None, alias="maxPoolAmountIn")


class SwapResponse(BaseModel):
    token_in: str = Field(alias="tokenIn")
    token_out: str = Field(alias="tokenOut")
    amount_in: Uint256 = Field(alias="amountIn")
    amount_out: Uint256 = Field(alias="amountOut")
    spot_price_before: Uint256 = Field(alias="spotPriceBefore")
    spot_price_after: Uint256 = Field(alias="spotPriceAfter")
    reserve_amount: Uint256 = Field(alias="reserveAmount")
    dry_run: bool = Field(alias="dryRun")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_result(cls, result: SwapResult, dry_run: bool) -> "SwapResponse":
        return cls(
            token_in=result.token_in,
            token_out=result.token_out,
            amount_in=result.amount_in,
            amount_out=result.amount_out,
            spot_price_before=result.spot_price_before,
            spot_price_after=result.spot_price_after,
            reserve_amount=result.reserve_amount,
            dry_run=dry_run,
        )


class LiquidityResponse(BaseModel):
    pool_amount: Uint256 = Field(alias="poolAmount")
    token_amounts: list[Uint256] = Field(alias="tokenAmounts")
    dry_run: bool = Field(alias="dryRun")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_result(cls, result: LiquidityResult, dry_run: bool) -> "LiquidityResponse":
        return cls(
            pool_amount=result.pool_amount,
            token_amounts=list(result.token_amounts),
            dry_run=dry_run,
        )


class SingleSidedResponse(BaseModel):
    token: str
    token_amount: Uint256 = Field(alias="tokenAmount")
    pool_amount: Uint256 = Field(alias="poolAmount")
    reserve_amount: Uint256 = Field(alias="reserveAmount")
    dry_run: bool = Field(alias="dryRun")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_result(cls, result: SingleSidedResult, dry_run: bool) -> "SingleSidedResponse":
        return cls(
            token=result.token,
            token_amount=result.token_amount,
            pool_amount=result.pool_amount,
            reserve_amount=result.reserve_amount,
            dry_run=dry_run,
        )


class ErrorResponse(BaseModel):
    error: str
    detail: str
