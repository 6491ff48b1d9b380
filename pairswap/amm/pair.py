"""Constant-product pair: reserves, liquidity shares and the swap invariant.

A Pair owns one canonical asset pair (token0 < token1). It never pulls
assets: callers transfer assets in first, then call mint/swap, and the pair
infers what it received from the difference between its current balances and
its tracked reserves.

Invariant checked on every swap, with the 0.3% fee credited to the pair:

    (balance0 * 1000 - amount0_in * 3) * (balance1 * 1000 - amount1_in * 3)
        >= reserve0 * reserve1 * 1000**2
"""

from __future__ import annotations

import functools
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar, cast

import structlog

from pairswap.amm.base import FlashSwapCallee
from pairswap.chain import Chain, transactional
from pairswap.constants import (
    FEE_DENOMINATOR,
    FEE_TAKEN,
    MINIMUM_LIQUIDITY,
    PROTOCOL_FEE_DIVISOR,
    TIMESTAMP_MODULUS,
    UINT112_MAX,
    ZERO_ADDRESS,
)
from pairswap.errors import (
    Forbidden,
    InsufficientInitialLiquidity,
    InsufficientInputAmount,
    InsufficientLiquidity,
    InsufficientLiquidityBurned,
    InsufficientLiquidityMinted,
    InsufficientOutputAmount,
    InvalidRecipient,
    K,
    Locked,
    Overflow,
    TransferFailed,
)
from pairswap.math.uq112x112 import encode_price
from pairswap.models.events import Burn, Mint, Swap, Sync
from pairswap.models.types import normalize_address
from pairswap.safe_int import S
from pairswap.tokens import ERC20, FungibleAsset

if TYPE_CHECKING:
    from pairswap.pools.factory import Factory

logger = structlog.get_logger()

T = TypeVar("T")


def lock(method: Callable[..., T]) -> Callable[..., T]:
    """Reject re-entry into the same pair while a mutating call is in flight.

    The lock is released on every exit path, including failures.
    """

    @functools.wraps(method)
    def wrapper(self: Pair, *args: Any, **kwargs: Any) -> T:
        if not self._unlocked:
            raise Locked(f"Pair {self.address} is locked")
        self._unlocked = False
        try:
            return method(self, *args, **kwargs)
        finally:
            self._unlocked = True

    return wrapper


class Pair(ERC20):
    """Reserve ledger and liquidity-share token for one asset pair.

    Shares are the pair's own ERC20 balance. MINIMUM_LIQUIDITY shares are
    minted to the zero address on the first deposit, so total_supply never
    returns to zero.
    """

    _state_fields = ERC20._state_fields + (
        "reserve0",
        "reserve1",
        "block_timestamp_last",
        "price0_cumulative_last",
        "price1_cumulative_last",
        "k_last",
    )

    def __init__(
        self,
        chain: Chain,
        address: str,
        factory: str,
        minimum_liquidity: int = MINIMUM_LIQUIDITY,
    ) -> None:
        super().__init__(chain, address, name="Pairswap LP", symbol="PSW-LP")
        self.factory = normalize_address(factory)
        self.minimum_liquidity = minimum_liquidity
        self.token0 = ZERO_ADDRESS
        self.token1 = ZERO_ADDRESS

        # uint112 each
        self.reserve0 = 0
        self.reserve1 = 0
        # uint32, block timestamp modulo 2**32
        self.block_timestamp_last = 0
        # UQ112x112 sums, wrapping modulo 2**256
        self.price0_cumulative_last = 0
        self.price1_cumulative_last = 0
        # reserve0 * reserve1 after the most recent liquidity event (protocol fee only)
        self.k_last = 0

        self._unlocked = True

    def initialize(self, sender: str, token0: str, token1: str) -> None:
        """Set the immutable asset identities. Only the factory may call this."""
        if normalize_address(sender) != self.factory:
            raise Forbidden(f"Only the factory can initialize pair {self.address}")
        self.token0 = normalize_address(token0)
        self.token1 = normalize_address(token1)

    # --- Views ---

    def get_reserves(self) -> tuple[int, int, int]:
        """Return (reserve0, reserve1, block_timestamp_last)."""
        return self.reserve0, self.reserve1, self.block_timestamp_last

    def _asset(self, token: str) -> FungibleAsset:
        return cast(FungibleAsset, self.chain.contract(token))

    def _factory(self) -> Factory:
        return cast("Factory", self.chain.contract(self.factory))

    def _balances_of_self(self) -> tuple[int, int]:
        return (
            self._asset(self.token0).balance_of(self.address),
            self._asset(self.token1).balance_of(self.address),
        )

    # --- Internal state transitions ---

    def _safe_transfer(self, token: str, to: str, value: int) -> None:
        if not self._asset(token).transfer(self.address, to, value):
            raise TransferFailed(f"Transfer of {value} {token} to {to} failed")

    def _update(self, balance0: int, balance1: int, reserve0: int, reserve1: int) -> None:
        """Write balances into the reserves, advancing the price accumulators first.

        Accumulators advance once per distinct timestamp, using the reserves
        as they were before this call.
        """
        if balance0 > UINT112_MAX or balance1 > UINT112_MAX:
            raise Overflow(f"Balances ({balance0}, {balance1}) exceed uint112")

        block_timestamp = S(self.chain.timestamp % TIMESTAMP_MODULUS)
        # the 32-bit clock wraps, so elapsed time is taken modulo 2**32
        time_elapsed = block_timestamp.wrapping_sub(self.block_timestamp_last, bits=32)
        if time_elapsed > 0 and reserve0 != 0 and reserve1 != 0:
            self.price0_cumulative_last = (
                S(self.price0_cumulative_last)
                .wrapping_add(S(encode_price(reserve1, reserve0)) * time_elapsed)
                .value
            )
            self.price1_cumulative_last = (
                S(self.price1_cumulative_last)
                .wrapping_add(S(encode_price(reserve0, reserve1)) * time_elapsed)
                .value
            )

        self.reserve0 = balance0
        self.reserve1 = balance1
        self.block_timestamp_last = block_timestamp.value
        self.chain.emit(Sync(address=self.address, reserve0=balance0, reserve1=balance1))

    def _mint_fee(self, reserve0: int, reserve1: int) -> bool:
        """Mint the protocol's 1/6 share of fee growth since k_last, if enabled."""
        fee_to = self._factory().fee_to
        fee_on = fee_to != ZERO_ADDRESS
        if fee_on:
            if self.k_last != 0:
                root_k = (S(reserve0) * S(reserve1)).sqrt()
                root_k_last = S(self.k_last).sqrt()
                if root_k > root_k_last:
                    numerator = S(self.total_supply) * (root_k - root_k_last)
                    denominator = root_k * PROTOCOL_FEE_DIVISOR + root_k_last
                    liquidity = numerator // denominator
                    if liquidity > 0:
                        self._mint(fee_to, liquidity.value)
                        logger.debug(
                            "protocol_fee_minted",
                            pair=self.address[-8:],
                            fee_to=fee_to[-8:],
                            liquidity=liquidity.value,
                        )
        elif self.k_last != 0:
            self.k_last = 0
        return fee_on

    # --- Entry points ---

    @transactional
    @lock
    def mint(self, sender: str, to: str) -> int:
        """Mint shares for assets transferred in since the last update.

        Returns:
            Shares minted to `to`

        Raises:
            InsufficientInitialLiquidity: First deposit does not exceed the locked minimum
            InsufficientLiquidityMinted: Deposit is too small to mint a share
        """
        to = normalize_address(to)
        reserve0, reserve1 = self.reserve0, self.reserve1
        balance0, balance1 = self._balances_of_self()
        amount0 = S(balance0) - S(reserve0)
        amount1 = S(balance1) - S(reserve1)

        fee_on = self._mint_fee(reserve0, reserve1)
        # must be read after _mint_fee, which can mint
        total_supply = S(self.total_supply)
        if total_supply == 0:
            root = (amount0 * amount1).sqrt()
            if root <= self.minimum_liquidity:
                raise InsufficientInitialLiquidity(
                    f"sqrt({amount0} * {amount1}) = {root} <= {self.minimum_liquidity}"
                )
            liquidity = root - self.minimum_liquidity
            # permanently lock the first MINIMUM_LIQUIDITY shares
            self._mint(ZERO_ADDRESS, self.minimum_liquidity)
        else:
            liquidity = (amount0 * total_supply // S(reserve0)).min(
                amount1 * total_supply // S(reserve1)
            )
        if liquidity == 0:
            raise InsufficientLiquidityMinted(f"Deposit ({amount0}, {amount1}) mints no shares")

        self._mint(to, liquidity.value)
        self._update(balance0, balance1, reserve0, reserve1)
        if fee_on:
            self.k_last = (S(self.reserve0) * S(self.reserve1)).to_uint256()

        self.chain.emit(
            Mint(
                address=self.address,
                sender=normalize_address(sender),
                amount0=amount0.value,
                amount1=amount1.value,
            )
        )
        logger.debug(
            "liquidity_minted",
            pair=self.address[-8:],
            amount0=amount0.value,
            amount1=amount1.value,
            liquidity=liquidity.value,
        )
        return liquidity.value

    @transactional
    @lock
    def burn(self, sender: str, to: str) -> tuple[int, int]:
        """Burn the shares held by the pair itself and pay out both assets.

        Payouts are proportional to current balances, not reserves, so any
        surplus sent directly to the pair is shared with the burner.

        Returns:
            (amount0, amount1) sent to `to`

        Raises:
            InsufficientLiquidityBurned: If either payout would be zero
        """
        to = normalize_address(to)
        reserve0, reserve1 = self.reserve0, self.reserve1
        balance0, balance1 = self._balances_of_self()
        liquidity = S(self.balance_of(self.address))

        fee_on = self._mint_fee(reserve0, reserve1)
        total_supply = S(self.total_supply)
        if total_supply == 0:
            raise InsufficientLiquidityBurned(f"Pair {self.address} has no liquidity")
        amount0 = liquidity * S(balance0) // total_supply
        amount1 = liquidity * S(balance1) // total_supply
        if amount0 == 0 or amount1 == 0:
            raise InsufficientLiquidityBurned(
                f"Burning {liquidity} shares returns ({amount0}, {amount1})"
            )

        self._burn(self.address, liquidity.value)
        self._safe_transfer(self.token0, to, amount0.value)
        self._safe_transfer(self.token1, to, amount1.value)
        balance0, balance1 = self._balances_of_self()

        self._update(balance0, balance1, reserve0, reserve1)
        if fee_on:
            self.k_last = (S(self.reserve0) * S(self.reserve1)).to_uint256()

        self.chain.emit(
            Burn(
                address=self.address,
                sender=normalize_address(sender),
                amount0=amount0.value,
                amount1=amount1.value,
                to=to,
            )
        )
        logger.debug(
            "liquidity_burned",
            pair=self.address[-8:],
            liquidity=liquidity.value,
            amount0=amount0.value,
            amount1=amount1.value,
        )
        return amount0.value, amount1.value

    @transactional
    @lock
    def swap(
        self,
        sender: str,
        amount0_out: int,
        amount1_out: int,
        to: str,
        callback: FlashSwapCallee | None = None,
        data: bytes = b"",
    ) -> None:
        """Send outputs optimistically, then verify the fee-adjusted invariant.

        Phase 1 transfers the requested outputs and, if a callback is given,
        hands control to it (flash swap). Phase 2 reads the resulting
        balances, infers the inputs, and commits only if the product check
        passes; otherwise everything, callback effects included, is undone.

        Raises:
            InsufficientOutputAmount: If both outputs are zero
            InsufficientLiquidity: If an output is not below its reserve
            InvalidRecipient: If `to` is one of the pair's assets
            InsufficientInputAmount: If no input was received
            K: If the fee-adjusted product would decrease
        """
        if amount0_out < 0 or amount1_out < 0:
            raise ValueError(f"Outputs must be non-negative: ({amount0_out}, {amount1_out})")
        if amount0_out == 0 and amount1_out == 0:
            raise InsufficientOutputAmount("swap: no output requested")
        reserve0, reserve1 = self.reserve0, self.reserve1
        if amount0_out >= reserve0 or amount1_out >= reserve1:
            raise InsufficientLiquidity(
                f"Outputs ({amount0_out}, {amount1_out}) exceed reserves ({reserve0}, {reserve1})"
            )
        to = normalize_address(to)
        if to in (self.token0, self.token1):
            raise InvalidRecipient(f"Recipient {to} is one of the pair's assets")

        # phase 1: optimistic transfers, then the callee's turn
        if amount0_out > 0:
            self._safe_transfer(self.token0, to, amount0_out)
        if amount1_out > 0:
            self._safe_transfer(self.token1, to, amount1_out)
        if callback is not None:
            callback.on_flash_swap(self, normalize_address(sender), amount0_out, amount1_out, data)

        # phase 2: verify against what actually arrived
        balance0, balance1 = self._balances_of_self()
        amount0_in = S(balance0).saturating_sub(S(reserve0) - amount0_out)
        amount1_in = S(balance1).saturating_sub(S(reserve1) - amount1_out)
        if amount0_in == 0 and amount1_in == 0:
            raise InsufficientInputAmount("swap: no input received")

        balance0_adjusted = S(balance0) * FEE_DENOMINATOR - amount0_in * FEE_TAKEN
        balance1_adjusted = S(balance1) * FEE_DENOMINATOR - amount1_in * FEE_TAKEN
        if balance0_adjusted * balance1_adjusted < S(reserve0) * S(reserve1) * FEE_DENOMINATOR**2:
            raise K(
                f"Invariant violated: ({balance0}, {balance1}) after "
                f"in=({amount0_in}, {amount1_in}) out=({amount0_out}, {amount1_out})"
            )

        self._update(balance0, balance1, reserve0, reserve1)
        self.chain.emit(
            Swap(
                address=self.address,
                sender=normalize_address(sender),
                amount0_in=amount0_in.value,
                amount1_in=amount1_in.value,
                amount0_out=amount0_out,
                amount1_out=amount1_out,
                to=to,
            )
        )
        logger.debug(
            "swap_executed",
            pair=self.address[-8:],
            amount0_in=amount0_in.value,
            amount1_in=amount1_in.value,
            amount0_out=amount0_out,
            amount1_out=amount1_out,
            flash=callback is not None,
        )

    @transactional
    @lock
    def skim(self, to: str) -> tuple[int, int]:
        """Send any balance above the tracked reserves to `to`.

        Returns:
            (surplus0, surplus1) transferred
        """
        to = normalize_address(to)
        balance0, balance1 = self._balances_of_self()
        surplus0 = (S(balance0) - S(self.reserve0)).value
        surplus1 = (S(balance1) - S(self.reserve1)).value
        self._safe_transfer(self.token0, to, surplus0)
        self._safe_transfer(self.token1, to, surplus1)
        logger.debug("pair_skimmed", pair=self.address[-8:], surplus0=surplus0, surplus1=surplus1)
        return surplus0, surplus1

    @transactional
    @lock
    def sync(self) -> None:
        """Force reserves to match current balances."""
        balance0, balance1 = self._balances_of_self()
        self._update(balance0, balance1, self.reserve0, self.reserve1)
