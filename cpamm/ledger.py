"""Fungible balance books.

FungibleLedger is the shared balance book behind both the asset ledgers a
pair holds custody in and the pair's own liquidity-receipt ledger. Python has
no implicit caller, so every movement names its sender explicitly.
"""

from __future__ import annotations

import threading
from typing import Protocol, runtime_checkable

import structlog
from eth_utils import keccak

from cpamm.constants import ZERO_ADDRESS
from cpamm.errors import DuplicateToken, InsufficientBalance, LockedBalance, UnknownToken
from cpamm.safe_int import S
from cpamm.types import normalize_address

logger = structlog.get_logger()

LedgerSnapshot = tuple[dict[str, int], int]


@runtime_checkable
class AssetLedger(Protocol):
    """What the pair engine needs from the ledger of an asset it trades."""

    address: str

    def balance_of(self, holder: str) -> int: ...

    def transfer(self, sender: str, to: str, amount: int) -> bool: ...


class FungibleLedger:
    """In-memory fungible balance book with a tracked total supply."""

    def __init__(self, address: str) -> None:
        self.address = normalize_address(address, validate=True)
        self._balances: dict[str, int] = {}
        self._total_supply = 0
        self._lock = threading.RLock()

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, holder: str) -> int:
        return self._balances.get(normalize_address(holder), 0)

    def holders(self) -> dict[str, int]:
        """Non-zero balances keyed by holder."""
        with self._lock:
            return dict(self._balances)

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        """Move amount from sender to to.

        Raises:
            ValueError: If amount is negative
            LockedBalance: If sender is the zero address
            InsufficientBalance: If sender holds less than amount
        """
        sender = normalize_address(sender)
        to = normalize_address(to)
        if amount < 0:
            raise ValueError(f"Transfer amount cannot be negative: {amount}")
        if sender == ZERO_ADDRESS:
            raise LockedBalance("Balance of the zero address cannot be transferred")
        with self._lock:
            self._debit(sender, amount)
            self._credit(to, amount)
        logger.debug(
            "ledger_transfer",
            ledger=self.address[-8:],
            sender=sender[-8:],
            to=to[-8:],
            amount=amount,
        )
        return True

    def snapshot(self) -> LedgerSnapshot:
        with self._lock:
            return dict(self._balances), self._total_supply

    def restore(self, snapshot: LedgerSnapshot) -> None:
        balances, total_supply = snapshot
        with self._lock:
            self._balances = dict(balances)
            self._total_supply = total_supply

    def _mint(self, to: str, amount: int) -> None:
        with self._lock:
            self._total_supply = (S(self._total_supply) + S(amount)).to_uint256()
            self._credit(normalize_address(to), amount)

    def _burn(self, holder: str, amount: int) -> None:
        with self._lock:
            self._debit(normalize_address(holder), amount)
            self._total_supply = (S(self._total_supply) - S(amount)).to_uint256()

    def _credit(self, holder: str, amount: int) -> None:
        balance = (S(self._balances.get(holder, 0)) + S(amount)).to_uint256()
        if balance:
            self._balances[holder] = balance

    def _debit(self, holder: str, amount: int) -> None:
        balance = self._balances.get(holder, 0)
        if balance < amount:
            raise InsufficientBalance(
                f"{holder} holds {balance} on {self.address}, cannot move {amount}"
            )
        if balance == amount:
            self._balances.pop(holder, None)
        else:
            self._balances[holder] = balance - amount


class TokenLedger(FungibleLedger):
    """Mintable asset ledger."""

    def __init__(self, address: str, name: str = "", symbol: str = "", decimals: int = 18) -> None:
        super().__init__(address)
        self.name = name
        self.symbol = symbol
        self.decimals = decimals

    def __repr__(self) -> str:
        return f"TokenLedger({self.symbol or self.address})"

    def mint(self, amount: int, to: str) -> None:
        """Create amount new units for to."""
        if amount < 0:
            raise ValueError(f"Mint amount cannot be negative: {amount}")
        self._mint(to, amount)
        logger.debug("token_minted", token=self.address[-8:], to=to[-8:], amount=amount)


class TokenDirectory:
    """Asset ledgers by address, consulted when a pair is bound to its assets."""

    def __init__(self, ledgers: list[AssetLedger] | None = None) -> None:
        self._ledgers: dict[str, AssetLedger] = {}
        self._lock = threading.Lock()
        for ledger in ledgers or []:
            self.register(ledger)

    def __contains__(self, address: object) -> bool:
        return isinstance(address, str) and normalize_address(address) in self._ledgers

    def __len__(self) -> int:
        return len(self._ledgers)

    def register(self, ledger: AssetLedger) -> AssetLedger:
        """Add a ledger, keyed by its normalized address.

        Raises:
            DuplicateToken: If another ledger is registered at the same address
        """
        address = normalize_address(ledger.address, validate=True)
        with self._lock:
            existing = self._ledgers.get(address)
            if existing is not None and existing is not ledger:
                raise DuplicateToken(f"Ledger already registered at {address}")
            self._ledgers[address] = ledger
        return ledger

    def create_token(
        self,
        name: str,
        symbol: str,
        decimals: int = 18,
        address: str | None = None,
    ) -> TokenLedger:
        """Create and register a TokenLedger.

        Without an explicit address one is derived from the name, the symbol and
        the number of ledgers already registered.
        """
        if address is None:
            digest = keccak(text=f"{name}:{symbol}:{len(self._ledgers)}")
            address = "0x" + digest[12:].hex()
        ledger = TokenLedger(address, name=name, symbol=symbol, decimals=decimals)
        self.register(ledger)
        logger.info("token_created", token=ledger.address[-8:], symbol=symbol)
        return ledger

    def get(self, address: str) -> AssetLedger:
        """Ledger for an address.

        Raises:
            UnknownToken: If no ledger is registered at address
        """
        ledger = self._ledgers.get(normalize_address(address))
        if ledger is None:
            raise UnknownToken(f"No ledger registered for {address}")
        return ledger
