"""Tests for the pair Factory."""

import pytest

from pairswap.amm.pair import Pair
from pairswap.chain import Chain
from pairswap.config import PairswapConfig
from pairswap.constants import ZERO_ADDRESS
from pairswap.errors import (
    Forbidden,
    IdenticalAssets,
    InvalidAsset,
    PairExists,
    PreconditionViolation,
    ZeroAsset,
)
from pairswap.math.library import pair_for
from pairswap.models.events import PairCreated
from pairswap.pools.factory import Factory
from tests.helpers import FEE_TO_SETTER, OTHER, TOKEN_A, TOKEN_B, TOKEN_C, WALLET


class TestCreatePair:
    """Tests for Factory.create_pair."""

    def test_creates_pair_at_derived_address(self, chain, factory):
        address = factory.create_pair(WALLET, TOKEN_B, TOKEN_A)

        assert address == pair_for(factory.address, TOKEN_A, TOKEN_B)
        assert factory.get_pair(TOKEN_A, TOKEN_B) == address
        assert factory.get_pair(TOKEN_B, TOKEN_A) == address
        assert factory.all_pairs(0) == address
        assert factory.all_pairs_length() == 1
        assert chain.events_of(PairCreated, factory.address) == [
            PairCreated(
                address=factory.address, token0=TOKEN_A, token1=TOKEN_B, pair=address, index=1
            )
        ]

    def test_pair_is_initialized(self, factory):
        pair = factory.pair_at(factory.create_pair(WALLET, TOKEN_B, TOKEN_A))
        assert isinstance(pair, Pair)
        assert (pair.token0, pair.token1) == (TOKEN_A, TOKEN_B)
        assert pair.factory == factory.address
        assert pair.get_reserves() == (0, 0, 0)

    def test_pair_exists_in_either_order(self, factory):
        factory.create_pair(WALLET, TOKEN_A, TOKEN_B)
        with pytest.raises(PairExists):
            factory.create_pair(WALLET, TOKEN_A, TOKEN_B)
        with pytest.raises(PairExists):
            factory.create_pair(WALLET, TOKEN_B, TOKEN_A)
        assert factory.all_pairs_length() == 1

    def test_invalid_assets(self, factory):
        with pytest.raises(IdenticalAssets):
            factory.create_pair(WALLET, TOKEN_A, TOKEN_A)
        with pytest.raises(ZeroAsset):
            factory.create_pair(WALLET, TOKEN_A, ZERO_ADDRESS)
        assert factory.all_pairs_length() == 0

    @pytest.mark.parametrize("malformed", ["0x0", "0x1234", "not-an-address"])
    def test_malformed_assets_are_precondition_failures(self, chain, factory, malformed):
        """Bad identities are rejected before any address derivation."""
        event_count = len(chain.events)

        with pytest.raises(InvalidAsset) as exc_info:
            factory.create_pair(WALLET, malformed, TOKEN_A)

        assert isinstance(exc_info.value, PreconditionViolation)
        assert factory.all_pairs_length() == 0
        assert len(chain.events) == event_count

    def test_enumerates_in_creation_order(self, chain, factory):
        first = factory.create_pair(WALLET, TOKEN_A, TOKEN_B)
        second = factory.create_pair(WALLET, TOKEN_C, TOKEN_A)
        assert [factory.all_pairs(i) for i in range(factory.all_pairs_length())] == [first, second]
        assert [event.index for event in chain.events_of(PairCreated)] == [1, 2]

    def test_config_flows_into_pairs(self):
        chain = Chain()
        config = PairswapConfig(minimum_liquidity=10, init_code_hash="0x" + "11" * 32)
        factory = chain.deploy(Factory(chain, "0x" + "fa" * 20, FEE_TO_SETTER, config))

        address = factory.create_pair(WALLET, TOKEN_A, TOKEN_B)

        assert address == pair_for(factory.address, TOKEN_A, TOKEN_B, "0x" + "11" * 32)
        assert factory.pair_at(address).minimum_liquidity == 10


class TestLookups:
    """Tests for get_pair / pair_at on unknown inputs."""

    def test_get_pair_absent(self, factory):
        assert factory.get_pair(TOKEN_A, TOKEN_B) is None
        assert factory.get_pair(TOKEN_A, TOKEN_A) is None

    def test_pair_at_non_pair(self, factory, token_a):
        assert factory.pair_at(OTHER) is None
        assert factory.pair_at(token_a.address) is None

    def test_all_pairs_out_of_range(self, factory):
        with pytest.raises(IndexError):
            factory.all_pairs(0)

    def test_all_pairs_rejects_negative_index(self, factory):
        """Creation order is indexed from zero only; no counting from the end."""
        factory.create_pair(WALLET, TOKEN_A, TOKEN_B)
        with pytest.raises(IndexError):
            factory.all_pairs(-1)


class TestFeeSettings:
    """Tests for the fee_to / fee_to_setter toggles."""

    def test_defaults(self, factory):
        assert factory.fee_to == ZERO_ADDRESS
        assert factory.fee_to_setter == FEE_TO_SETTER

    def test_set_fee_to(self, factory):
        factory.set_fee_to(FEE_TO_SETTER, OTHER)
        assert factory.fee_to == OTHER

    def test_set_fee_to_forbidden(self, factory):
        with pytest.raises(Forbidden):
            factory.set_fee_to(OTHER, OTHER)
        assert factory.fee_to == ZERO_ADDRESS

    def test_set_fee_to_setter(self, factory):
        factory.set_fee_to_setter(FEE_TO_SETTER, OTHER)
        assert factory.fee_to_setter == OTHER
        with pytest.raises(Forbidden):
            factory.set_fee_to_setter(FEE_TO_SETTER, FEE_TO_SETTER)
        factory.set_fee_to(OTHER, WALLET)
        assert factory.fee_to == WALLET
