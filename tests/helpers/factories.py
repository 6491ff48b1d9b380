"""Builders for test assets, liquidity and flash swap callees.

Usage:
    from tests.helpers import add_liquidity, deploy_token

    token = deploy_token(chain, TOKEN_A, "TKA")
    add_liquidity(pair, 5 * ONE, 10 * ONE)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import cast

from pairswap.amm.pair import Pair
from pairswap.chain import Chain, transactional
from pairswap.models.types import normalize_address
from pairswap.tokens import ERC20
from tests.helpers.constants import WALLET, WALLET_BALANCE


class MintableToken(ERC20):
    """ERC20 with an unrestricted mint, for funding test accounts."""

    @transactional
    def mint(self, to: str, value: int) -> None:
        self._mint(normalize_address(to), value)


def deploy_token(
    chain: Chain,
    address: str,
    symbol: str,
    holder: str = WALLET,
    balance: int = WALLET_BALANCE,
) -> MintableToken:
    """Deploy a MintableToken and fund holder with balance."""
    token = chain.deploy(MintableToken(chain, address, name=f"Test {symbol}", symbol=symbol))
    if balance:
        token.mint(holder, balance)
    return token


def token_at(chain: Chain, address: str) -> MintableToken:
    return cast(MintableToken, chain.contract(address))


def add_liquidity(
    pair: Pair,
    amount0: int,
    amount1: int,
    provider: str = WALLET,
    to: str = WALLET,
) -> int:
    """Transfer both assets from provider to the pair and mint shares to `to`."""
    token_at(pair.chain, pair.token0).transfer(provider, pair.address, amount0)
    token_at(pair.chain, pair.token1).transfer(provider, pair.address, amount1)
    return pair.mint(provider, to)


# =============================================================================
# Flash swap callees
# =============================================================================


@dataclass
class FlashCall:
    """Arguments one on_flash_swap invocation received."""

    pair: str
    sender: str
    amount0_out: int
    amount1_out: int
    data: bytes


@dataclass
class RepayingCallee:
    """Pays the pair back from `account` with fixed amounts per asset.

    Usage:
        callee = RepayingCallee(BORROWER, {pair.token0: 1_003_009_027_081_243_732})
        pair.swap(WALLET, ONE, 0, BORROWER, callback=callee)
    """

    account: str
    repayments: dict[str, int] = field(default_factory=dict)
    calls: list[FlashCall] = field(default_factory=list)

    def on_flash_swap(
        self, pair: Pair, sender: str, amount0_out: int, amount1_out: int, data: bytes
    ) -> None:
        self.calls.append(FlashCall(pair.address, sender, amount0_out, amount1_out, data))
        for token, amount in self.repayments.items():
            token_at(pair.chain, token).transfer(self.account, pair.address, amount)


@dataclass
class ReentrantCallee:
    """Tries to re-enter the pair from inside the callback.

    Usage:
        callee = ReentrantCallee(lambda pair: pair.skim(WALLET))
        pair.swap(WALLET, 0, ONE, BORROWER, callback=callee)
    """

    reenter: Callable[[Pair], object] = field(default=lambda pair: pair.sync())

    def on_flash_swap(
        self, pair: Pair, sender: str, amount0_out: int, amount1_out: int, data: bytes
    ) -> None:
        self.reenter(pair)
