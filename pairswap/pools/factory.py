"""Pair registry: at most one pair per unordered asset pair, ever.

Pair addresses are derived deterministically from the canonical asset pair
(see `pairswap.math.library.pair_for`), so any caller can compute a pair's
address without asking the factory. The registry is append-only: pairs are
never re-created or removed.
"""

from __future__ import annotations

import structlog

from pairswap.amm.pair import Pair
from pairswap.chain import Chain, Contract, transactional
from pairswap.config import DEFAULT_CONFIG, PairswapConfig
from pairswap.constants import ZERO_ADDRESS
from pairswap.errors import Forbidden, PairExists
from pairswap.math.library import canonical_order, pair_for
from pairswap.models.events import PairCreated
from pairswap.models.types import normalize_address

logger = structlog.get_logger()


class Factory(Contract):
    """Creates pairs and holds the single protocol-fee destination toggle."""

    _state_fields = ("fee_to", "fee_to_setter", "_pairs", "_all_pairs")

    def __init__(
        self,
        chain: Chain,
        address: str,
        fee_to_setter: str,
        config: PairswapConfig = DEFAULT_CONFIG,
    ) -> None:
        super().__init__(chain, address)
        self.init_code_hash = config.init_code_hash
        self.minimum_liquidity = config.minimum_liquidity
        # protocol fee is off while fee_to is the zero address
        self.fee_to = ZERO_ADDRESS
        self.fee_to_setter = normalize_address(fee_to_setter)
        self._pairs: dict[tuple[str, str], str] = {}
        self._all_pairs: list[str] = []

    # --- Views ---

    def get_pair(self, token_a: str, token_b: str) -> str | None:
        """Address of the pair for two assets (either order), or None."""
        a, b = normalize_address(token_a), normalize_address(token_b)
        key = (a, b) if a < b else (b, a)
        return self._pairs.get(key)

    def all_pairs(self, index: int) -> str:
        """Address of the index-th created pair (creation order).

        Raises:
            IndexError: If index is negative or past the last pair
        """
        if not 0 <= index < len(self._all_pairs):
            raise IndexError(f"Pair index {index} out of range [0, {len(self._all_pairs)})")
        return self._all_pairs[index]

    def all_pairs_length(self) -> int:
        return len(self._all_pairs)

    def pair_at(self, address: str) -> Pair | None:
        """Resolve a pair created by this factory, or None."""
        if not self.chain.is_deployed(address):
            return None
        contract = self.chain.contract(address)
        if isinstance(contract, Pair) and contract.factory == self.address:
            return contract
        return None

    # --- Entry points ---

    @transactional
    def create_pair(self, sender: str, token_a: str, token_b: str) -> str:
        """Create and register the pair for two assets.

        Returns:
            The new pair's address

        Raises:
            IdenticalAssets: If token_a == token_b
            ZeroAsset: If either asset is the zero address
            PairExists: If the pair was already created (in either order)
        """
        token0, token1 = canonical_order(token_a, token_b)
        if (token0, token1) in self._pairs:
            raise PairExists(f"Pair exists for {token0}/{token1}: {self._pairs[(token0, token1)]}")

        address = pair_for(self.address, token0, token1, self.init_code_hash)
        pair = self.chain.deploy(
            Pair(
                self.chain,
                address,
                factory=self.address,
                minimum_liquidity=self.minimum_liquidity,
            )
        )
        pair.initialize(self.address, token0, token1)
        self._pairs[(token0, token1)] = pair.address
        self._all_pairs.append(pair.address)

        self.chain.emit(
            PairCreated(
                address=self.address,
                token0=token0,
                token1=token1,
                pair=pair.address,
                index=len(self._all_pairs),
            )
        )
        logger.info(
            "pair_created",
            pair=pair.address,
            token0=token0[-8:],
            token1=token1[-8:],
            creator=normalize_address(sender)[-8:],
            total_pairs=len(self._all_pairs),
        )
        return pair.address

    @transactional
    def set_fee_to(self, sender: str, fee_to: str) -> None:
        """Set the protocol-fee destination (zero address turns the fee off)."""
        self._check_setter(sender)
        self.fee_to = normalize_address(fee_to, validate=True)
        logger.info("fee_to_updated", fee_to=self.fee_to, enabled=self.fee_to != ZERO_ADDRESS)

    @transactional
    def set_fee_to_setter(self, sender: str, fee_to_setter: str) -> None:
        """Hand the fee toggle to another account."""
        self._check_setter(sender)
        self.fee_to_setter = normalize_address(fee_to_setter, validate=True)
        logger.info("fee_to_setter_updated", fee_to_setter=self.fee_to_setter)

    def _check_setter(self, sender: str) -> None:
        if normalize_address(sender) != self.fee_to_setter:
            raise Forbidden(f"{sender} is not the fee_to_setter")
