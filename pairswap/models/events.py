"""Event records appended to the chain's log.

Every record carries the address of the contract that emitted it. Records
are immutable once emitted.
"""

from pydantic import BaseModel, ConfigDict, Field

from pairswap.models.types import Address, Amount


class Event(BaseModel):
    """Base class for all emitted records."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    address: Address = Field(description="Contract that emitted the record")


class Transfer(Event):
    """Fungible balance moved, minted (from zero) or burned (to zero)."""

    from_: Address = Field(alias="from")
    to: Address
    value: Amount


class Approval(Event):
    """Allowance set by owner for spender."""

    owner: Address
    spender: Address
    value: Amount


class Mint(Event):
    """Liquidity deposited into a pair."""

    sender: Address
    amount0: Amount
    amount1: Amount


class Burn(Event):
    """Liquidity withdrawn from a pair."""

    sender: Address
    amount0: Amount
    amount1: Amount
    to: Address


class Swap(Event):
    """Trade executed against a pair."""

    sender: Address
    amount0_in: Amount
    amount1_in: Amount
    amount0_out: Amount
    amount1_out: Amount
    to: Address


class Sync(Event):
    """Reserves overwritten with current balances."""

    reserve0: Amount
    reserve1: Amount


class PairCreated(Event):
    """Factory created a pair for a canonical asset pair."""

    token0: Address
    token1: Address
    pair: Address
    index: int = Field(ge=1, description="all_pairs_length() after creation")
