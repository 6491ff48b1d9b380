"""Routing package: path swaps and liquidity management over pairs."""

from .router import Router

__all__ = ["Router"]
