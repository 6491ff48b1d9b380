"""Pair registry package.

Provides the Factory that creates and enumerates pairs.
"""

from .factory import Factory

__all__ = ["Factory"]
