"""Router: user-facing liquidity and multi-hop swap operations.

The router is stateless. It pulls the caller's assets with transfer_from
(the caller must have approved the router's address), sends them straight
to the pair, and lets the pair settle. Multi-hop swaps forward each hop's
output directly to the next pair in the path, so intermediate assets never
rest in the router.

Every entry point runs inside one atomic scope: a failure on any hop undoes
all earlier hops and transfers.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import cast

import structlog

from pairswap.amm.pair import Pair
from pairswap.chain import Chain, Contract, transactional
from pairswap.errors import (
    ExcessiveInputAmount,
    Expired,
    InsufficientAAmount,
    InsufficientBAmount,
    InsufficientLiquidity,
    InsufficientOutputAmount,
    TransferFailed,
)
from pairswap.math import library
from pairswap.models.types import normalize_address
from pairswap.pools.factory import Factory
from pairswap.tokens import FungibleAsset

logger = structlog.get_logger()


class Router(Contract):
    """Slippage-protected deposits, withdrawals and path swaps over one Factory."""

    def __init__(self, chain: Chain, address: str, factory: Factory) -> None:
        super().__init__(chain, address)
        self.factory = factory

    # --- Library passthroughs ---

    def quote(self, amount_a: int, reserve_a: int, reserve_b: int) -> int:
        return library.quote(amount_a, reserve_a, reserve_b)

    def get_amount_out(self, amount_in: int, reserve_in: int, reserve_out: int) -> int:
        return library.get_amount_out(amount_in, reserve_in, reserve_out)

    def get_amount_in(self, amount_out: int, reserve_in: int, reserve_out: int) -> int:
        return library.get_amount_in(amount_out, reserve_in, reserve_out)

    def get_amounts_out(self, amount_in: int, path: Sequence[str]) -> list[int]:
        return library.get_amounts_out(self.factory, amount_in, path)

    def get_amounts_in(self, amount_out: int, path: Sequence[str]) -> list[int]:
        return library.get_amounts_in(self.factory, amount_out, path)

    # --- Liquidity ---

    @transactional
    def add_liquidity(
        self,
        sender: str,
        token_a: str,
        token_b: str,
        amount_a_desired: int,
        amount_b_desired: int,
        amount_a_min: int,
        amount_b_min: int,
        to: str,
        deadline: int,
    ) -> tuple[int, int, int]:
        """Deposit both assets at the current ratio, creating the pair if needed.

        Returns:
            (amount_a, amount_b, liquidity) actually deposited and minted

        Raises:
            Expired: If the deadline has passed
            InsufficientAAmount: If the optimal A deposit is below amount_a_min
            InsufficientBAmount: If the optimal B deposit is below amount_b_min
        """
        self._ensure(deadline)
        amount_a, amount_b = self._add_liquidity(
            token_a, token_b, amount_a_desired, amount_b_desired, amount_a_min, amount_b_min
        )
        pair = self._pair(token_a, token_b)
        self._safe_transfer_from(token_a, sender, pair.address, amount_a)
        self._safe_transfer_from(token_b, sender, pair.address, amount_b)
        liquidity = pair.mint(self.address, to)

        logger.info(
            "liquidity_added",
            pair=pair.address[-8:],
            amount_a=amount_a,
            amount_b=amount_b,
            liquidity=liquidity,
        )
        return amount_a, amount_b, liquidity

    def _add_liquidity(
        self,
        token_a: str,
        token_b: str,
        amount_a_desired: int,
        amount_b_desired: int,
        amount_a_min: int,
        amount_b_min: int,
    ) -> tuple[int, int]:
        if self.factory.get_pair(token_a, token_b) is None:
            self.factory.create_pair(self.address, token_a, token_b)
        reserve_a, reserve_b = library.get_reserves(self.factory, token_a, token_b)
        if reserve_a == 0 and reserve_b == 0:
            return amount_a_desired, amount_b_desired

        amount_b_optimal = library.quote(amount_a_desired, reserve_a, reserve_b)
        if amount_b_optimal <= amount_b_desired:
            if amount_b_optimal < amount_b_min:
                raise InsufficientBAmount(f"Optimal B {amount_b_optimal} < min {amount_b_min}")
            return amount_a_desired, amount_b_optimal

        amount_a_optimal = library.quote(amount_b_desired, reserve_b, reserve_a)
        # amount_b_optimal > amount_b_desired implies amount_a_optimal <= amount_a_desired
        if amount_a_optimal < amount_a_min:
            raise InsufficientAAmount(f"Optimal A {amount_a_optimal} < min {amount_a_min}")
        return amount_a_optimal, amount_b_desired

    @transactional
    def remove_liquidity(
        self,
        sender: str,
        token_a: str,
        token_b: str,
        liquidity: int,
        amount_a_min: int,
        amount_b_min: int,
        to: str,
        deadline: int,
    ) -> tuple[int, int]:
        """Return sender's shares to the pair and withdraw both assets to `to`.

        Returns:
            (amount_a, amount_b) withdrawn, ordered like the arguments

        Raises:
            Expired: If the deadline has passed
            InsufficientAAmount: If the A payout is below amount_a_min
            InsufficientBAmount: If the B payout is below amount_b_min
        """
        self._ensure(deadline)
        pair = self._pair(token_a, token_b)
        pair.transfer_from(self.address, sender, pair.address, liquidity)
        amount0, amount1 = pair.burn(self.address, to)

        token0, _ = library.canonical_order(token_a, token_b)
        if normalize_address(token_a) == token0:
            amount_a, amount_b = amount0, amount1
        else:
            amount_a, amount_b = amount1, amount0
        if amount_a < amount_a_min:
            raise InsufficientAAmount(f"Withdrew A {amount_a} < min {amount_a_min}")
        if amount_b < amount_b_min:
            raise InsufficientBAmount(f"Withdrew B {amount_b} < min {amount_b_min}")

        logger.info(
            "liquidity_removed",
            pair=pair.address[-8:],
            liquidity=liquidity,
            amount_a=amount_a,
            amount_b=amount_b,
        )
        return amount_a, amount_b

    # --- Swaps ---

    @transactional
    def swap_exact_tokens_for_tokens(
        self,
        sender: str,
        amount_in: int,
        amount_out_min: int,
        path: Sequence[str],
        to: str,
        deadline: int,
    ) -> list[int]:
        """Sell exactly amount_in of path[0] for as much of path[-1] as possible.

        Returns:
            Per-hop amounts, [amount_in, ..., amount_out]

        Raises:
            Expired: If the deadline has passed
            InsufficientOutputAmount: If the final output is below amount_out_min
        """
        self._ensure(deadline)
        path = [normalize_address(token) for token in path]
        amounts = library.get_amounts_out(self.factory, amount_in, path)
        if amounts[-1] < amount_out_min:
            raise InsufficientOutputAmount(f"Output {amounts[-1]} < min {amount_out_min}")
        self._safe_transfer_from(path[0], sender, self._pair(path[0], path[1]).address, amounts[0])
        self._swap(amounts, path, to)

        logger.info("swap_routed", mode="exact_in", hops=len(path) - 1, amounts=amounts)
        return amounts

    @transactional
    def swap_tokens_for_exact_tokens(
        self,
        sender: str,
        amount_out: int,
        amount_in_max: int,
        path: Sequence[str],
        to: str,
        deadline: int,
    ) -> list[int]:
        """Buy exactly amount_out of path[-1], spending as little of path[0] as possible.

        Returns:
            Per-hop amounts, [amount_in, ..., amount_out]

        Raises:
            Expired: If the deadline has passed
            ExcessiveInputAmount: If the required input exceeds amount_in_max
        """
        self._ensure(deadline)
        path = [normalize_address(token) for token in path]
        amounts = library.get_amounts_in(self.factory, amount_out, path)
        if amounts[0] > amount_in_max:
            raise ExcessiveInputAmount(f"Input {amounts[0]} > max {amount_in_max}")
        self._safe_transfer_from(path[0], sender, self._pair(path[0], path[1]).address, amounts[0])
        self._swap(amounts, path, to)

        logger.info("swap_routed", mode="exact_out", hops=len(path) - 1, amounts=amounts)
        return amounts

    def _swap(self, amounts: Sequence[int], path: Sequence[str], to: str) -> None:
        """Execute each hop; input for the first hop must already be in the first pair."""
        for i in range(len(path) - 1):
            input_token, output_token = path[i], path[i + 1]
            token0, _ = library.canonical_order(input_token, output_token)
            amount_out = amounts[i + 1]
            if input_token == token0:
                amount0_out, amount1_out = 0, amount_out
            else:
                amount0_out, amount1_out = amount_out, 0
            # intermediate outputs go straight to the next hop's pair
            if i < len(path) - 2:
                recipient = self._pair(output_token, path[i + 2]).address
            else:
                recipient = to
            self._pair(input_token, output_token).swap(
                self.address, amount0_out, amount1_out, recipient
            )

    # --- Helpers ---

    def _ensure(self, deadline: int) -> None:
        if self.chain.timestamp > deadline:
            raise Expired(f"Deadline {deadline} passed (now {self.chain.timestamp})")

    def _pair(self, token_a: str, token_b: str) -> Pair:
        address = library.pair_for(
            self.factory.address, token_a, token_b, self.factory.init_code_hash
        )
        pair = self.factory.pair_at(address)
        if pair is None:
            raise InsufficientLiquidity(f"No pair for {token_a}/{token_b}")
        return pair

    def _safe_transfer_from(self, token: str, owner: str, to: str, value: int) -> None:
        asset = cast(FungibleAsset, self.chain.contract(token))
        if not asset.transfer_from(self.address, owner, to, value):
            raise TransferFailed(f"transfer_from of {value} {token} from {owner} failed")
