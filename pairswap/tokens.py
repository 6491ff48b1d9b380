"""Fungible asset ledgers.

Pairs only depend on the narrow FungibleAsset protocol of the assets they
trade. ERC20 is the standard in-process implementation; pairs reuse it for
their own liquidity-share ledger.

Caller identity is explicit: `sender` for transfer/approve and `spender` for
transfer_from play the role of the calling account.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pairswap.chain import Chain, Contract, transactional
from pairswap.constants import DECIMALS, UINT256_MAX, ZERO_ADDRESS
from pairswap.errors import InsufficientAllowance, InsufficientBalance
from pairswap.models.events import Approval, Transfer
from pairswap.models.types import normalize_address


@runtime_checkable
class FungibleAsset(Protocol):
    """Minimal capability set a pair needs from a traded asset."""

    address: str

    def balance_of(self, holder: str) -> int:
        """Current balance of holder."""
        ...

    def transfer(self, sender: str, to: str, value: int) -> bool:
        """Move value from sender to `to`. Returns True on success."""
        ...

    def transfer_from(self, spender: str, owner: str, to: str, value: int) -> bool:
        """Move value from owner to `to` using spender's allowance."""
        ...


class ERC20(Contract):
    """Standard fungible ledger with balances, allowances and events.

    Invariant: the sum of all balances equals total_supply.
    """

    # _balances and _allowances are journaled per key through _set_entry
    _state_fields = ("total_supply",)

    def __init__(
        self,
        chain: Chain,
        address: str,
        name: str,
        symbol: str,
        decimals: int = DECIMALS,
    ) -> None:
        super().__init__(chain, address)
        self.name = name
        self.symbol = symbol
        self.decimals = decimals
        self.total_supply = 0
        self._balances: dict[str, int] = {}
        self._allowances: dict[tuple[str, str], int] = {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.symbol}@{self.address})"

    # --- Views ---

    def balance_of(self, holder: str) -> int:
        return self._balances.get(normalize_address(holder), 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((normalize_address(owner), normalize_address(spender)), 0)

    def balances(self) -> dict[str, int]:
        """Copy of every non-zero balance, keyed by holder."""
        return {holder: amount for holder, amount in self._balances.items() if amount}

    # --- Entry points ---

    @transactional
    def approve(self, owner: str, spender: str, value: int) -> bool:
        self._approve(normalize_address(owner), normalize_address(spender), value)
        return True

    @transactional
    def transfer(self, sender: str, to: str, value: int) -> bool:
        self._transfer(normalize_address(sender), normalize_address(to), value)
        return True

    @transactional
    def transfer_from(self, spender: str, owner: str, to: str, value: int) -> bool:
        """Move value out of owner's balance on behalf of spender.

        An allowance of UINT256_MAX is treated as infinite and not decremented.

        Raises:
            InsufficientAllowance: If spender's allowance is below value
            InsufficientBalance: If owner's balance is below value
        """
        owner_norm = normalize_address(owner)
        spender_norm = normalize_address(spender)
        current = self._allowances.get((owner_norm, spender_norm), 0)
        if current != UINT256_MAX:
            if current < value:
                raise InsufficientAllowance(
                    f"{self.symbol}: allowance {current} < {value} for {spender_norm}"
                )
            self._set_entry("_allowances", (owner_norm, spender_norm), current - value)
        self._transfer(owner_norm, normalize_address(to), value)
        return True

    # --- Internal ledger mutations ---

    def _approve(self, owner: str, spender: str, value: int) -> None:
        if not 0 <= value <= UINT256_MAX:
            raise ValueError(f"Allowance out of range: {value}")
        self._set_entry("_allowances", (owner, spender), value)
        self.chain.emit(Approval(address=self.address, owner=owner, spender=spender, value=value))

    def _transfer(self, from_: str, to: str, value: int) -> None:
        if value < 0:
            raise ValueError(f"Transfer amount must be non-negative: {value}")
        balance = self._balances.get(from_, 0)
        if balance < value:
            raise InsufficientBalance(f"{self.symbol}: balance {balance} < {value} for {from_}")
        self._set_entry("_balances", from_, balance - value)
        self._set_entry("_balances", to, self._balances.get(to, 0) + value)
        self.chain.emit(Transfer(address=self.address, from_=from_, to=to, value=value))

    def _mint(self, to: str, value: int) -> None:
        if value < 0:
            raise ValueError(f"Mint amount must be non-negative: {value}")
        self.total_supply += value
        self._set_entry("_balances", to, self._balances.get(to, 0) + value)
        self.chain.emit(Transfer(address=self.address, from_=ZERO_ADDRESS, to=to, value=value))

    def _burn(self, holder: str, value: int) -> None:
        balance = self._balances.get(holder, 0)
        if balance < value:
            raise InsufficientBalance(f"{self.symbol}: burn {value} exceeds balance {balance}")
        self._set_entry("_balances", holder, balance - value)
        self.total_supply -= value
        self.chain.emit(Transfer(address=self.address, from_=holder, to=ZERO_ADDRESS, value=value))
