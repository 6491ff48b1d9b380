"""Tests for the ready-made market bundle."""

from eth_utils import keccak

from pairswap.config import PairswapConfig
from pairswap.market import (
    FACTORY_ADDRESS,
    FEE_TO_SETTER_ADDRESS,
    ROUTER_ADDRESS,
    create_market,
    derive_address,
)
from pairswap.models.types import is_valid_address


class TestMarket:
    def test_derive_address_is_deterministic(self):
        assert derive_address("x") == derive_address("x")
        assert derive_address("x") != derive_address("y")
        assert is_valid_address(derive_address("x"))

    def test_keccak_backend_is_installed(self):
        """System addresses hash with Keccak-256, not SHA3-256."""
        empty_digest = "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
        assert keccak(text="").hex() == empty_digest
        assert derive_address("") == "0x" + empty_digest[24:]

    def test_create_market(self):
        market = create_market(PairswapConfig(minimum_liquidity=10), timestamp=42)

        assert market.chain.timestamp == 42
        assert market.factory.address == FACTORY_ADDRESS
        assert market.router.address == ROUTER_ADDRESS
        assert market.router.factory is market.factory
        assert market.factory.fee_to_setter == FEE_TO_SETTER_ADDRESS
        assert market.factory.minimum_liquidity == 10
        assert market.chain.contract(FACTORY_ADDRESS) is market.factory
