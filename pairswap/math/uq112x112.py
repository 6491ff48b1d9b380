"""UQ112x112 binary fixed-point numbers.

A UQ112x112 value is an unsigned integer scaled by 2**112: 112 integer bits
and 112 fractional bits, fitting in 224 bits. Pair prices are stored in this
format so that reserve ratios survive integer division.
"""

from pairswap.constants import UINT112_MAX
from pairswap.safe_int import S, UintOverflow

Q112 = 2**112


def encode(y: int) -> int:
    """Encode a uint112 as UQ112x112.

    Raises:
        UintOverflow: If y does not fit in 112 bits
    """
    if not 0 <= y <= UINT112_MAX:
        raise UintOverflow(f"Value exceeds uint112 max: {y}")
    return y * Q112


def uqdiv(x: int, y: int) -> int:
    """Divide a UQ112x112 by a uint112, returning a UQ112x112 (rounded down)."""
    return (S(x) // S(y)).value


def encode_price(reserve_num: int, reserve_den: int) -> int:
    """Price of the denominator asset in units of the numerator asset.

    `encode_price(reserve1, reserve0)` is the token0 price that
    price0_cumulative_last accumulates per second.
    """
    return uqdiv(encode(reserve_num), reserve_den)
