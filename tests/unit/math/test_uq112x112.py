"""Tests for UQ112x112 fixed-point encoding."""

import pytest

from pairswap.constants import ONE, UINT112_MAX
from pairswap.math.uq112x112 import Q112, encode, encode_price, uqdiv
from pairswap.safe_int import DivisionByZero, UintOverflow


class TestUQ112x112:
    """Tests for encode / uqdiv / encode_price."""

    def test_encode_scales_by_q112(self):
        assert encode(1) == Q112
        assert encode(UINT112_MAX) == UINT112_MAX * 2**112

    def test_encode_rejects_wide_values(self):
        with pytest.raises(UintOverflow):
            encode(UINT112_MAX + 1)

    def test_uqdiv_rounds_down(self):
        assert uqdiv(encode(1), 3) == Q112 // 3

    def test_uqdiv_by_zero_raises(self):
        with pytest.raises(DivisionByZero):
            uqdiv(encode(1), 0)

    def test_encode_price(self):
        """encode_price(num, den) is num/den in UQ112x112."""
        assert encode_price(3 * ONE, 3 * ONE) == Q112
        assert encode_price(6 * ONE, 2 * ONE) == 3 * Q112
        assert encode_price(2 * ONE, 6 * ONE) == (2 * ONE * Q112) // (6 * ONE)
