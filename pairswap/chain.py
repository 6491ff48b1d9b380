"""In-process execution host for pairs, factories, routers and assets.

The Chain plays the role of the shared ledger: it owns the clock, the event
log and the address space. Every state-mutating entry point runs inside
`Chain.atomic()`, which gives each call all-or-nothing semantics: if the
call raises, the state of every contract the call touched, the event log
and the set of deployed contracts are restored to what they were when the
call began.

Rollback is journaled. A scope snapshots a contract's scalar fields the
first time it touches that contract, and records the previous value of each
ledger-mapping key it writes (balances, allowances). The cost of a call
therefore follows the state it touches, not the size of the ledger.

Calls are serialized by construction (plain synchronous Python), so the only
way to observe a pair mid-call is to re-enter it from a callback; pairs guard
against that with their own lock.
"""

from __future__ import annotations

import copy
import functools
from collections.abc import Callable, Hashable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, ClassVar, TypeVar

import structlog

from pairswap.errors import AddressCollision, UnknownContract
from pairswap.models.events import Event
from pairswap.models.types import normalize_address

logger = structlog.get_logger()

C = TypeVar("C", bound="Contract")
E = TypeVar("E", bound=Event)
T = TypeVar("T")

# Marks a ledger key that did not exist before the scope wrote it
_MISSING = object()


class Contract:
    """Base class for anything deployed on a Chain.

    Subclasses list their small mutable attributes in `_state_fields`; those
    are snapshotted the first time a scope touches the contract. Large
    mappings are written through `_set_entry` and journaled key by key.
    Immutable attributes (addresses, token identities) and the reentrancy
    lock are not snapshotted.
    """

    _state_fields: ClassVar[tuple[str, ...]] = ()

    def __init__(self, chain: Chain, address: str) -> None:
        self.chain = chain
        self.address = normalize_address(address, validate=True)

    def snapshot(self) -> dict[str, Any]:
        """Copy the snapshotted state of this contract."""
        return {name: copy.deepcopy(getattr(self, name)) for name in self._state_fields}

    def restore(self, state: dict[str, Any]) -> None:
        """Overwrite the snapshotted state with a previous snapshot."""
        for name, value in state.items():
            setattr(self, name, value)

    def _set_entry(self, mapping_name: str, key: Hashable, value: Any) -> None:
        """Write one key of a ledger mapping, journaling its previous value."""
        mapping = getattr(self, mapping_name)
        self.chain.record_entry(self, mapping_name, key, mapping.get(key, _MISSING))
        mapping[key] = value


def transactional(method: Callable[..., T]) -> Callable[..., T]:
    """Run a Contract method inside `self.chain.atomic(self)`."""

    @functools.wraps(method)
    def wrapper(self: Contract, *args: Any, **kwargs: Any) -> T:
        with self.chain.atomic(self):
            return method(self, *args, **kwargs)

    return wrapper


@dataclass
class _Journal:
    """Undo information collected by one atomic scope."""

    states: dict[Contract, dict[str, Any]] = field(default_factory=dict)
    entries: dict[tuple[Contract, str, Hashable], Any] = field(default_factory=dict)
    deployed: list[str] = field(default_factory=list)

    def absorb(self, child: _Journal) -> None:
        """Fold a committed inner scope into this one, keeping the older values."""
        for contract, state in child.states.items():
            self.states.setdefault(contract, state)
        for entry, previous in child.entries.items():
            self.entries.setdefault(entry, previous)
        self.deployed.extend(child.deployed)


class Chain:
    """Clock, event log and address space shared by all contracts."""

    def __init__(self, timestamp: int = 0) -> None:
        if timestamp < 0:
            raise ValueError(f"timestamp must be non-negative, got {timestamp}")
        self.timestamp = timestamp
        self.events: list[Event] = []
        self._contracts: dict[str, Contract] = {}
        self._journals: list[_Journal] = []

    # --- Address space ---

    def deploy(self, contract: C) -> C:
        """Register a contract under its address.

        Raises:
            AddressCollision: If the address is already taken
        """
        if contract.chain is not self:
            raise ValueError(f"Contract {contract.address} belongs to another chain")
        if contract.address in self._contracts:
            raise AddressCollision(f"Contract already deployed at {contract.address}")
        self._contracts[contract.address] = contract
        if self._journals:
            self._journals[-1].deployed.append(contract.address)
        logger.debug("contract_deployed", address=contract.address, kind=type(contract).__name__)
        return contract

    def contract(self, address: str) -> Contract:
        """Resolve a deployed contract.

        Raises:
            UnknownContract: If nothing is deployed at the address
        """
        try:
            return self._contracts[normalize_address(address)]
        except KeyError:
            raise UnknownContract(f"No contract deployed at {address}") from None

    def is_deployed(self, address: str) -> bool:
        return normalize_address(address) in self._contracts

    # --- Clock ---

    def set_timestamp(self, timestamp: int) -> None:
        """Move the block timestamp forward to an absolute value."""
        if timestamp < self.timestamp:
            raise ValueError(f"Time cannot move backwards: {timestamp} < {self.timestamp}")
        self.timestamp = timestamp

    def advance_time(self, seconds: int) -> int:
        """Move the block timestamp forward by `seconds`; returns the new timestamp."""
        if seconds < 0:
            raise ValueError(f"Time cannot move backwards: {seconds}")
        self.timestamp += seconds
        return self.timestamp

    # --- Event log ---

    def emit(self, event: Event) -> None:
        self.events.append(event)

    def events_of(self, event_type: type[E], address: str | None = None) -> list[E]:
        """Return emitted records of one type, optionally from one emitter."""
        emitter = normalize_address(address) if address is not None else None
        return [
            event
            for event in self.events
            if isinstance(event, event_type) and (emitter is None or event.address == emitter)
        ]

    # --- Atomicity ---

    def touch(self, contract: Contract) -> None:
        """Snapshot a contract's state fields in the innermost scope, once."""
        if self._journals and contract not in self._journals[-1].states:
            self._journals[-1].states[contract] = contract.snapshot()

    def record_entry(
        self, contract: Contract, mapping_name: str, key: Hashable, previous: Any
    ) -> None:
        """Remember the value a ledger key had before the innermost scope wrote it."""
        if self._journals:
            self._journals[-1].entries.setdefault((contract, mapping_name, key), previous)

    @contextmanager
    def atomic(self, *contracts: Contract) -> Iterator[None]:
        """All-or-nothing scope.

        `contracts` are touched on entry. On any exception, restores every
        touched contract and ledger key, forgets contracts deployed inside
        the scope, truncates the event log, then re-raises. Nested scopes
        only roll back their own span; a committed nested scope hands its
        undo information to the enclosing one.
        """
        journal = _Journal()
        self._journals.append(journal)
        for contract in contracts:
            self.touch(contract)
        event_count = len(self.events)
        try:
            yield
        except BaseException as exc:
            depth = len(self._journals)
            self._journals.pop()
            self._revert(journal)
            discarded = len(self.events) - event_count
            del self.events[event_count:]
            logger.debug(
                "call_reverted",
                depth=depth,
                reason=type(exc).__name__,
                events_discarded=discarded,
            )
            raise
        self._journals.pop()
        if self._journals:
            self._journals[-1].absorb(journal)

    def _revert(self, journal: _Journal) -> None:
        for (contract, mapping_name, key), previous in journal.entries.items():
            mapping = getattr(contract, mapping_name)
            if previous is _MISSING:
                mapping.pop(key, None)
            else:
                mapping[key] = previous
        for contract, state in journal.states.items():
            contract.restore(state)
        for address in journal.deployed:
            self._contracts.pop(address, None)
