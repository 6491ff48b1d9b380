"""Tests for the execution host: address space, clock, events, atomicity."""

import pytest

from pairswap.chain import Chain
from pairswap.errors import AddressCollision, InsufficientBalance, UnknownContract
from pairswap.math.library import pair_for
from pairswap.models.events import Transfer
from tests.helpers import OTHER, TOKEN_A, TOKEN_B, WALLET, MintableToken, deploy_token


class TestAddressSpace:
    """Tests for deploy / contract lookups."""

    def test_deploy_and_resolve(self, chain):
        token = deploy_token(chain, TOKEN_A, "TKA")
        assert chain.contract(TOKEN_A) is token
        assert chain.is_deployed(TOKEN_A)
        assert not chain.is_deployed(TOKEN_B)

    def test_address_collision(self, chain):
        deploy_token(chain, TOKEN_A, "TKA")
        with pytest.raises(AddressCollision):
            deploy_token(chain, TOKEN_A, "DUP")

    def test_unknown_contract(self, chain):
        with pytest.raises(UnknownContract):
            chain.contract(TOKEN_A)

    def test_foreign_contract_rejected(self, chain):
        other_chain = Chain()
        with pytest.raises(ValueError):
            chain.deploy(MintableToken(other_chain, TOKEN_A, "Test", "TKA"))

    def test_invalid_address_rejected(self, chain):
        with pytest.raises(ValueError):
            MintableToken(chain, "0x1234", "Test", "TKA")


class TestClock:
    """Tests for the block timestamp."""

    def test_advance_and_set(self):
        chain = Chain(timestamp=100)
        assert chain.advance_time(5) == 105
        chain.set_timestamp(200)
        assert chain.timestamp == 200

    def test_time_never_moves_backwards(self):
        chain = Chain(timestamp=100)
        with pytest.raises(ValueError):
            chain.set_timestamp(99)
        with pytest.raises(ValueError):
            chain.advance_time(-1)
        with pytest.raises(ValueError):
            Chain(timestamp=-1)


class TestEvents:
    """Tests for the event log."""

    def test_events_of_filters_by_type_and_emitter(self, chain, token_a, token_b):
        token_a.transfer(WALLET, OTHER, 1)
        token_b.transfer(WALLET, OTHER, 2)
        transfers = chain.events_of(Transfer)
        assert [event.value for event in transfers][-2:] == [1, 2]
        assert [event.value for event in chain.events_of(Transfer, TOKEN_B)][-1] == 2
        assert all(event.address == TOKEN_B for event in chain.events_of(Transfer, TOKEN_B))


class TestAtomic:
    """Tests for all-or-nothing scopes."""

    def test_rollback_restores_state_and_events(self, chain, token_a):
        event_count = len(chain.events)
        with pytest.raises(InsufficientBalance):
            with chain.atomic():
                token_a.transfer(WALLET, OTHER, 5)
                token_a.transfer(OTHER, WALLET, 6)
        assert token_a.balance_of(OTHER) == 0
        assert len(chain.events) == event_count

    def test_rollback_forgets_new_contracts(self, chain):
        with pytest.raises(RuntimeError):
            with chain.atomic():
                deploy_token(chain, TOKEN_A, "TKA")
                raise RuntimeError("abort")
        assert not chain.is_deployed(TOKEN_A)

    def test_nested_scope_rolls_back_only_its_span(self, chain, token_a):
        with chain.atomic():
            token_a.transfer(WALLET, OTHER, 5)
            with pytest.raises(InsufficientBalance):
                token_a.transfer(OTHER, WALLET, 6)
        assert token_a.balance_of(OTHER) == 5

    def test_success_commits(self, chain, token_a):
        with chain.atomic():
            token_a.transfer(WALLET, OTHER, 5)
        assert token_a.balance_of(OTHER) == 5

    def test_new_ledger_keys_are_removed_on_rollback(self, chain, token_a):
        """Holders and allowances first written inside a failed scope disappear."""
        with pytest.raises(RuntimeError):
            with chain.atomic():
                token_a.transfer(WALLET, OTHER, 5)
                token_a.approve(WALLET, OTHER, 7)
                raise RuntimeError("abort")
        assert OTHER not in token_a._balances
        assert token_a.allowance(WALLET, OTHER) == 0
        assert (WALLET, OTHER) not in token_a._allowances

    def test_committed_inner_scopes_roll_back_with_the_outer_scope(self, chain, factory):
        """A pair created by a committed nested call is undone by the enclosing failure."""
        with pytest.raises(RuntimeError):
            with chain.atomic():
                address = factory.create_pair(WALLET, TOKEN_A, TOKEN_B)
                assert chain.is_deployed(address)
                raise RuntimeError("abort")
        assert factory.all_pairs_length() == 0
        assert factory.get_pair(TOKEN_A, TOKEN_B) is None
        assert not chain.is_deployed(pair_for(factory.address, TOKEN_A, TOKEN_B))


class TestJournal:
    """Rollback cost follows the state a call touches."""

    def test_untouched_contracts_are_not_snapshotted(self, chain, token_a, token_b, monkeypatch):
        def fail():
            raise AssertionError("untouched contract was snapshotted")

        monkeypatch.setattr(token_b, "snapshot", fail)
        token_a.transfer(WALLET, OTHER, 5)
        with pytest.raises(InsufficientBalance):
            token_a.transfer(OTHER, WALLET, 6)
        assert token_a.balance_of(OTHER) == 5

    def test_ledger_mappings_are_not_copied(self, token_a):
        """Balances and allowances are journaled key by key instead of snapshotted."""
        assert set(token_a.snapshot()) == {"total_supply"}

    def test_transfer_journals_only_the_keys_it_writes(self, chain, token_a):
        for i in range(50):
            token_a.transfer(WALLET, "0x" + f"{i + 1:040x}", 1)

        with chain.atomic():
            token_a.transfer(WALLET, OTHER, 5)
            journal = chain._journals[-1]
            assert {key for _, name, key in journal.entries if name == "_balances"} == {
                WALLET,
                OTHER,
            }
