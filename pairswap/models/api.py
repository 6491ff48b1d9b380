"""Request and response bodies for the HTTP read API.

Amounts and accumulators are decimal strings (see `Uint256`).
"""

from pydantic import BaseModel, Field

from pairswap.models.types import Address, Uint256


class QuoteRequest(BaseModel):
    """Quote an exact amount along a path of assets."""

    amount: Uint256 = Field(description="Exact input (amounts-out) or exact output (amounts-in)")
    path: list[Address] = Field(description="Assets to route through, first to last")


class QuoteResponse(BaseModel):
    """Per-hop amounts for a quoted path."""

    path: list[Address]
    amounts: list[Uint256] = Field(description="One amount per asset in path")


class PairInfo(BaseModel):
    """Snapshot of one pair's public state."""

    address: Address
    token0: Address
    token1: Address
    reserve0: Uint256
    reserve1: Uint256
    block_timestamp_last: int = Field(ge=0, description="Last update, modulo 2**32")
    price0_cumulative_last: Uint256
    price1_cumulative_last: Uint256
    total_supply: Uint256


class PairListResponse(BaseModel):
    """Every pair in creation order."""

    count: int = Field(ge=0)
    pairs: list[PairInfo]
