"""Capabilities a pair hands control to during a swap."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pairswap.amm.pair import Pair


@runtime_checkable
class FlashSwapCallee(Protocol):
    """Receiver of a flash swap.

    The pair transfers the requested outputs first, then calls
    `on_flash_swap`. By the time it returns, the callee must have sent the
    pair enough input for the fee-adjusted product check to pass, otherwise
    the whole swap (callback effects included) is rolled back.
    """

    def on_flash_swap(
        self,
        pair: Pair,
        sender: str,
        amount0_out: int,
        amount1_out: int,
        data: bytes,
    ) -> None:
        """Use the optimistic outputs and repay the pair.

        Args:
            pair: The pair executing the swap
            sender: Account that called swap()
            amount0_out: token0 already sent to the swap recipient
            amount1_out: token1 already sent to the swap recipient
            data: Opaque bytes forwarded from the swap() caller
        """
        ...
