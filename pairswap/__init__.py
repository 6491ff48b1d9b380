"""Pairswap - constant-product exchange core."""

from pairswap.amm.pair import Pair
from pairswap.chain import Chain
from pairswap.market import Market, create_market
from pairswap.pools.factory import Factory
from pairswap.routing.router import Router
from pairswap.tokens import ERC20

__version__ = "0.1.0"
__all__ = [
    "Chain",
    "ERC20",
    "Factory",
    "Market",
    "Pair",
    "Router",
    "create_market",
    "__version__",
]
