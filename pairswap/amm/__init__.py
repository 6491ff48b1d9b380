"""Constant-product pair engine."""

from pairswap.amm.base import FlashSwapCallee
from pairswap.amm.pair import Pair

__all__ = ["FlashSwapCallee", "Pair"]
