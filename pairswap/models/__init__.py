"""Event and API models for pairswap."""

from pairswap.models.events import (
    Approval,
    Burn,
    Event,
    Mint,
    PairCreated,
    Swap,
    Sync,
    Transfer,
)
from pairswap.models.types import Address, Amount, is_valid_address, normalize_address

__all__ = [
    "Address",
    "Amount",
    "is_valid_address",
    "normalize_address",
    "Event",
    "Transfer",
    "Approval",
    "Mint",
    "Burn",
    "Swap",
    "Sync",
    "PairCreated",
]
