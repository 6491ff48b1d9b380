"""API endpoints for reading pairs and quoting routes."""

from collections.abc import Callable, Sequence

import structlog
from fastapi import APIRouter, Depends, HTTPException

from pairswap.amm.pair import Pair
from pairswap.errors import PairswapError
from pairswap.market import Market, get_default_market
from pairswap.math import library
from pairswap.models.api import PairInfo, PairListResponse, QuoteRequest, QuoteResponse
from pairswap.models.types import normalize_address
from pairswap.pools.factory import Factory

logger = structlog.get_logger()

router = APIRouter()


def get_market() -> Market:
    """Dependency provider for the market instance.

    Override this in tests to inject a prepared market:
        app.dependency_overrides[get_market] = lambda: market
    """
    return get_default_market()


def _pair_info(pair: Pair) -> PairInfo:
    reserve0, reserve1, block_timestamp_last = pair.get_reserves()
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
    )


@router.get("/pairs")
async def list_pairs(market: Market = Depends(get_market)) -> PairListResponse:
    """Every pair the factory has created, in creation order."""
    factory = market.factory
    pairs = []
    for index in range(factory.all_pairs_length()):
        pair = factory.pair_at(factory.all_pairs(index))
        if pair is not None:
            pairs.append(_pair_info(pair))
    return PairListResponse(count=len(pairs), pairs=pairs)


@router.get("/pairs/{token_a}/{token_b}")
async def get_pair(
    token_a: str,
    token_b: str,
    market: Market = Depends(get_market),
) -> PairInfo:
    """State of the pair for two assets, in either order.

    Error Handling:
        - Malformed address: 422
        - No such pair: 404
    """
    try:
        a = normalize_address(token_a, validate=True)
        b = normalize_address(token_b, validate=True)
    except ValueError as err:
        raise HTTPException(status_code=422, detail=str(err)) from err

    address = market.factory.get_pair(a, b)
    pair = market.factory.pair_at(address) if address is not None else None
    if pair is None:
        raise HTTPException(status_code=404, detail=f"No pair for {a}/{b}")
    return _pair_info(pair)


def _quote(
    quoter: Callable[[Factory, int, Sequence[str]], list[int]],
    request: QuoteRequest,
    market: Market,
) -> QuoteResponse:
    path = [normalize_address(token) for token in request.path]
    try:
        amounts = quoter(market.factory, int(request.amount), path)
    except (PairswapError, ArithmeticError) as err:
        logger.info(
            "quote_rejected",
            quoter=quoter.__name__,
            reason=type(err).__name__,
            hops=max(len(path) - 1, 0),
        )
        raise HTTPException(
            status_code=422, detail=f"{type(err).__name__}: {err}"
        ) from err
    return QuoteResponse(path=path, amounts=[str(amount) for amount in amounts])


@router.post("/quote/amounts-out")
async def quote_amounts_out(
    request: QuoteRequest,
    market: Market = Depends(get_market),
) -> QuoteResponse:
    """Outputs of every hop when selling exactly `amount` of path[0]."""
    return _quote(library.get_amounts_out, request, market)


@router.post("/quote/amounts-in")
async def quote_amounts_in(
    request: QuoteRequest,
    market: Market = Depends(get_market),
) -> QuoteResponse:
    """Inputs of every hop when buying exactly `amount` of path[-1]."""
    return _quote(library.get_amounts_in, request, market)
