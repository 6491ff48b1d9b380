"""Pytest configuration and fixtures.

Every fixture builds on one fresh Chain, so tests never share state.
"""

import pytest

from pairswap.amm.pair import Pair
from pairswap.chain import Chain
from pairswap.config import PairswapConfig
from pairswap.constants import UINT256_MAX
from pairswap.pools.factory import Factory
from pairswap.routing.router import Router
from tests.helpers import (
    FEE_TO_SETTER,
    START_TIMESTAMP,
    TOKEN_A,
    TOKEN_B,
    TOKEN_C,
    WALLET,
    MintableToken,
    deploy_token,
    token_at,
)

FACTORY_ADDRESS = "0x" + "fa" * 20
ROUTER_ADDRESS = "0x" + "0e" * 20


@pytest.fixture
def chain() -> Chain:
    """A fresh chain with the clock at START_TIMESTAMP."""
    return Chain(timestamp=START_TIMESTAMP)


@pytest.fixture
def config() -> PairswapConfig:
    return PairswapConfig()


@pytest.fixture
def factory(chain: Chain, config: PairswapConfig) -> Factory:
    return chain.deploy(Factory(chain, FACTORY_ADDRESS, FEE_TO_SETTER, config))


@pytest.fixture
def router(chain: Chain, factory: Factory) -> Router:
    return chain.deploy(Router(chain, ROUTER_ADDRESS, factory))


@pytest.fixture
def token_a(chain: Chain) -> MintableToken:
    return deploy_token(chain, TOKEN_A, "TKA")


@pytest.fixture
def token_b(chain: Chain) -> MintableToken:
    return deploy_token(chain, TOKEN_B, "TKB")


@pytest.fixture
def token_c(chain: Chain) -> MintableToken:
    return deploy_token(chain, TOKEN_C, "TKC")


@pytest.fixture
def pair(factory: Factory, token_a: MintableToken, token_b: MintableToken) -> Pair:
    """An empty TOKEN_A/TOKEN_B pair (token0 is TOKEN_A)."""
    address = factory.create_pair(WALLET, token_a.address, token_b.address)
    pair = factory.pair_at(address)
    assert pair is not None
    return pair


@pytest.fixture
def token0(pair: Pair) -> MintableToken:
    return token_at(pair.chain, pair.token0)


@pytest.fixture
def token1(pair: Pair) -> MintableToken:
    return token_at(pair.chain, pair.token1)


@pytest.fixture
def approved_router(
    router: Router,
    token_a: MintableToken,
    token_b: MintableToken,
    token_c: MintableToken,
) -> Router:
    """Router with unlimited WALLET allowances on all three test assets."""
    for token in (token_a, token_b, token_c):
        token.approve(WALLET, router.address, UINT256_MAX)
    return router
