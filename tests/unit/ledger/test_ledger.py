"""Tests for the fungible ledgers and the token directory."""

import pytest

from cpamm.constants import ZERO_ADDRESS
from cpamm.errors import DuplicateToken, InsufficientBalance, LockedBalance, UnknownToken
from cpamm.ledger import AssetLedger, FungibleLedger, TokenDirectory, TokenLedger
from cpamm.safe_int import UINT256_MAX, Uint256Overflow
from tests.helpers.constants import ETHER, OTHER, OWNER, TOKEN_A, TOKEN_B


@pytest.fixture
def ledger() -> TokenLedger:
    token = TokenLedger(TOKEN_A, name="Token A", symbol="TKNA")
    token.mint(10 * ETHER, OWNER)
    return token


class TestTokenLedger:
    """Tests for balances, transfers and minting."""

    def test_mint_credits_and_tracks_supply(self, ledger: TokenLedger):
        assert ledger.balance_of(OWNER) == 10 * ETHER
        assert ledger.total_supply == 10 * ETHER

    def test_transfer_moves_balance(self, ledger: TokenLedger):
        assert ledger.transfer(OWNER, OTHER, 3 * ETHER) is True
        assert ledger.balance_of(OWNER) == 7 * ETHER
        assert ledger.balance_of(OTHER) == 3 * ETHER
        assert ledger.total_supply == 10 * ETHER

    def test_addresses_are_case_insensitive(self, ledger: TokenLedger):
        ledger.transfer(OWNER.upper().replace("0X", "0x"), OTHER, 1)
        assert ledger.balance_of(OTHER.upper().replace("0X", "0x")) == 1

    def test_transfer_more_than_balance_raises(self, ledger: TokenLedger):
        with pytest.raises(InsufficientBalance):
            ledger.transfer(OTHER, OWNER, 1)
        assert ledger.balance_of(OWNER) == 10 * ETHER

    def test_negative_amounts_rejected(self, ledger: TokenLedger):
        with pytest.raises(ValueError):
            ledger.transfer(OWNER, OTHER, -1)
        with pytest.raises(ValueError):
            ledger.mint(-1, OWNER)

    def test_zero_address_balance_is_locked(self, ledger: TokenLedger):
        ledger.transfer(OWNER, ZERO_ADDRESS, 5)
        with pytest.raises(LockedBalance):
            ledger.transfer(ZERO_ADDRESS, OTHER, 5)
        assert ledger.balance_of(ZERO_ADDRESS) == 5

    def test_supply_overflow_raises(self, ledger: TokenLedger):
        with pytest.raises(Uint256Overflow):
            ledger.mint(UINT256_MAX, OTHER)

    def test_holders_omits_zero_balances(self, ledger: TokenLedger):
        ledger.transfer(OWNER, OTHER, 10 * ETHER)
        assert ledger.holders() == {OTHER: 10 * ETHER}

    def test_satisfies_asset_ledger_protocol(self, ledger: TokenLedger):
        assert isinstance(ledger, AssetLedger)


class TestSnapshots:
    """Snapshot/restore is what pair rollback relies on."""

    def test_restore_undoes_changes(self):
        book = FungibleLedger(TOKEN_B)
        book._mint(OWNER, 100)
        snapshot = book.snapshot()

        book.transfer(OWNER, OTHER, 40)
        book._burn(OTHER, 40)
        book.restore(snapshot)

        assert book.balance_of(OWNER) == 100
        assert book.balance_of(OTHER) == 0
        assert book.total_supply == 100

    def test_snapshot_is_a_copy(self):
        book = FungibleLedger(TOKEN_B)
        book._mint(OWNER, 100)
        balances, supply = book.snapshot()
        book.transfer(OWNER, OTHER, 1)
        assert balances == {OWNER: 100}
        assert supply == 100


class TestTokenDirectory:
    """Tests for ledger registration and lookup."""

    def test_get_registered_ledger(self, ledger: TokenLedger):
        directory = TokenDirectory([ledger])
        assert directory.get(TOKEN_A.upper().replace("0X", "0x")) is ledger
        assert TOKEN_A in directory
        assert len(directory) == 1

    def test_unknown_token_raises(self):
        with pytest.raises(UnknownToken):
            TokenDirectory().get(TOKEN_A)

    def test_registering_same_ledger_twice_is_noop(self, ledger: TokenLedger):
        directory = TokenDirectory([ledger])
        directory.register(ledger)
        assert len(directory) == 1

    def test_conflicting_registration_raises(self, ledger: TokenLedger):
        directory = TokenDirectory([ledger])
        with pytest.raises(DuplicateToken):
            directory.register(TokenLedger(TOKEN_A))

    def test_create_token_derives_distinct_addresses(self):
        directory = TokenDirectory()
        first = directory.create_token("Token", "TKN")
        second = directory.create_token("Token", "TKN")
        assert first.address != second.address
        assert len(first.address) == 42
        assert directory.get(second.address) is second

    def test_create_token_with_explicit_address(self):
        directory = TokenDirectory()
        token = directory.create_token("Token A", "TKNA", decimals=6, address=TOKEN_A)
        assert token.address == TOKEN_A
        assert token.decimals == 6

    def test_malformed_address_rejected(self):
        with pytest.raises(ValueError):
            TokenLedger("0x1234")
