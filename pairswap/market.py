"""A ready-to-use market: one chain with a deployed factory and router."""

from __future__ import annotations

from dataclasses import dataclass

import structlog
from eth_utils import keccak

from pairswap.chain import Chain
from pairswap.config import DEFAULT_CONFIG, PairswapConfig
from pairswap.pools.factory import Factory
from pairswap.routing.router import Router

logger = structlog.get_logger()


def derive_address(label: str) -> str:
    """Deterministic address for a named account or contract."""
    return "0x" + keccak(text=label)[12:].hex()


FACTORY_ADDRESS = derive_address("pairswap.factory")
ROUTER_ADDRESS = derive_address("pairswap.router")
FEE_TO_SETTER_ADDRESS = derive_address("pairswap.fee_to_setter")


@dataclass
class Market:
    """The contracts a client needs to trade and provide liquidity."""

    chain: Chain
    factory: Factory
    router: Router


def create_market(
    config: PairswapConfig = DEFAULT_CONFIG,
    fee_to_setter: str = FEE_TO_SETTER_ADDRESS,
    timestamp: int = 0,
) -> Market:
    """Deploy a factory and a router on a fresh chain."""
    chain = Chain(timestamp=timestamp)
    factory = chain.deploy(Factory(chain, FACTORY_ADDRESS, fee_to_setter, config))
    router = chain.deploy(Router(chain, ROUTER_ADDRESS, factory))
    logger.info(
        "market_created",
        factory=factory.address,
        router=router.address,
        minimum_liquidity=config.minimum_liquidity,
    )
    return Market(chain=chain, factory=factory, router=router)


_default_market: Market | None = None


def get_default_market() -> Market:
    """Process-wide market, created on first use from PAIRSWAP_* settings."""
    global _default_market
    if _default_market is None:
        _default_market = create_market(PairswapConfig.from_env())
    return _default_market
