"""Pure integer math for quoting trades against pairs.

This package provides:
- library: canonical ordering, pair address derivation and trade quotes
- uq112x112: the fixed-point format cumulative prices are stored in
"""

from pairswap.math.library import (
    canonical_order,
    get_amount_in,
    get_amount_out,
    get_amounts_in,
    get_amounts_out,
    get_reserves,
    pair_for,
    quote,
)
from pairswap.math.uq112x112 import Q112, encode_price

__all__ = [
    "canonical_order",
    "pair_for",
    "quote",
    "get_amount_out",
    "get_amount_in",
    "get_amounts_out",
    "get_amounts_in",
    "get_reserves",
    "Q112",
    "encode_price",
]
