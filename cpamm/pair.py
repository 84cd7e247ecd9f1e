"""Constant-product pair engine.

A Pair holds custody of two assets and never trusts a passed-in deposit
amount: callers push assets (or liquidity receipts) into the pair's custody
first, then call mint/burn/swap, and the pair derives what was paid in by
diffing the ledger balances against its last reserve snapshot.

Each transition runs inside the pair's critical section and either commits
as a whole or is rolled back as a whole, including any asset transfer the
pair already pushed out (swap transfers output optimistically, before the
invariant check).
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

import structlog

from cpamm.constants import FEE_DENOMINATOR, FEE_NUMERATOR, MINIMUM_LIQUIDITY, ZERO_ADDRESS
from cpamm.errors import (
    InsufficientInputAmount,
    InsufficientLiquidity,
    InsufficientLiquidityBurned,
    InsufficientLiquidityMinted,
    InsufficientOutputAmount,
    InvalidTo,
    InvariantViolated,
    Locked,
)
from cpamm.events import Burn, Event, Mint, Swap, Sync, Transfer
from cpamm.ledger import AssetLedger, FungibleLedger, LedgerSnapshot
from cpamm.safe_int import S
from cpamm.types import normalize_address

logger = structlog.get_logger()


@dataclass
class _Transition:
    """State needed to commit or roll back one pair transition."""

    reserves: tuple[int, int]
    liquidity: LedgerSnapshot
    undo: list[Callable[[], object]] = field(default_factory=list)
    events: list[Event] = field(default_factory=list)


class Pair:
    """Two-asset pool with a liquidity-receipt ledger.

    token0 sorts strictly below token1. The liquidity receipts live on a
    FungibleLedger at the pair's own address, so the pair can hold its own
    receipts (that is how they are handed back for burning).
    """

    def __init__(
        self,
        address: str,
        ledger0: AssetLedger,
        ledger1: AssetLedger,
        registry: str | None = None,
    ) -> None:
        self.address = normalize_address(address, validate=True)
        self.token0 = normalize_address(ledger0.address)
        self.token1 = normalize_address(ledger1.address)
        if self.token0 >= self.token1:
            raise ValueError(f"Pair tokens must be sorted: {self.token0} >= {self.token1}")
        self.registry = registry
        self._ledger0 = ledger0
        self._ledger1 = ledger1
        self._reserve0 = 0
        self._reserve1 = 0
        self.liquidity = FungibleLedger(self.address)
        self._events: list[Event] = []
        self._lock = threading.RLock()
        self._transition: _Transition | None = None

    def __repr__(self) -> str:
        return f"Pair({self.address}, {self.token0[-8:]}/{self.token1[-8:]})"

    # --- Views ---

    def get_reserves(self) -> tuple[int, int]:
        with self._lock:
            return self._reserve0, self._reserve1

    @property
    def reserve0(self) -> int:
        return self._reserve0

    @property
    def reserve1(self) -> int:
        return self._reserve1

    @property
    def total_supply(self) -> int:
        return self.liquidity.total_supply

    def balance_of(self, holder: str) -> int:
        """Liquidity receipts held by holder."""
        return self.liquidity.balance_of(holder)

    @property
    def events(self) -> tuple[Event, ...]:
        """Notifications of committed transitions, oldest first."""
        with self._lock:
            return tuple(self._events)

    # --- Liquidity receipts ---

    def transfer(self, sender: str, to: str, amount: int) -> bool:
        """Move liquidity receipts between holders."""
        sender = normalize_address(sender)
        to = normalize_address(to, validate=True)
        with self._transact("transfer") as tx:
            self.liquidity.transfer(sender, to, amount)
            tx.events.append(Transfer(sender=sender, to=to, amount=amount))
        return True

    # --- Transitions ---

    def mint(self, to: str, *, sender: str | None = None) -> int:
        """Credit liquidity for whatever was deposited since the last sync.

        The first mint locks MINIMUM_LIQUIDITY at the zero address, so the
        depositor receives floor(sqrt(amount0 * amount1)) - MINIMUM_LIQUIDITY.
        Later mints are credited against the scarcer of the two deposit ratios;
        any excess of the other asset accrues to existing holders.

        Args:
            to: Recipient of the minted liquidity
            sender: Caller recorded on the Mint event

        Returns:
            Liquidity minted to `to`

        Raises:
            InsufficientLiquidityMinted: If the deposit mints nothing
        """
        to = normalize_address(to, validate=True)
        with self._transact("mint") as tx:
            reserve0, reserve1 = self._reserve0, self._reserve1
            balance0 = self._ledger0.balance_of(self.address)
            balance1 = self._ledger1.balance_of(self.address)
            amount0 = S(balance0) - S(reserve0)
            amount1 = S(balance1) - S(reserve1)

            total_supply = S(self.liquidity.total_supply)
            if total_supply == 0:
                liquidity = (amount0 * amount1).isqrt().saturating_sub(MINIMUM_LIQUIDITY)
                if liquidity:
                    self._mint_liquidity(tx, ZERO_ADDRESS, MINIMUM_LIQUIDITY)
            else:
                liquidity = (amount0 * total_supply // reserve0).min(
                    amount1 * total_supply // reserve1
                )
            if not liquidity:
                raise InsufficientLiquidityMinted(
                    f"Deposit of ({amount0.value}, {amount1.value}) mints no liquidity"
                )

            self._mint_liquidity(tx, to, liquidity.to_uint256())
            self._update(tx, balance0, balance1)
            tx.events.append(Mint(sender=sender, amount0=amount0.value, amount1=amount1.value))

        logger.info(
            "pair_mint",
            pair=self.address[-8:],
            to=to[-8:],
            amount0=amount0.value,
            amount1=amount1.value,
            liquidity=liquidity.value,
        )
        return liquidity.value

    def burn(self, to: str, *, sender: str | None = None) -> tuple[int, int]:
        """Redeem the receipts the pair holds of itself for both assets.

        Payouts are pro rata against the current custodial balances, floor
        division. A pool with zero supply faults with DivisionByZero.

        Args:
            to: Recipient of both assets
            sender: Caller recorded on the Burn event

        Returns:
            (amount0, amount1) paid out

        Raises:
            InvalidTo: If `to` is the zero address
            InsufficientLiquidityBurned: If either payout rounds to zero
            DivisionByZero: If total supply is zero
        """
        to = normalize_address(to, validate=True)
        if to == ZERO_ADDRESS:
            raise InvalidTo("Burn payout cannot be sent to the zero address")
        with self._transact("burn") as tx:
            balance0 = self._ledger0.balance_of(self.address)
            balance1 = self._ledger1.balance_of(self.address)
            liquidity = S(self.liquidity.balance_of(self.address))
            total_supply = S(self.liquidity.total_supply)

            amount0 = (liquidity * balance0 // total_supply).to_uint256()
            amount1 = (liquidity * balance1 // total_supply).to_uint256()
            if not amount0 or not amount1:
                raise InsufficientLiquidityBurned(
                    f"Burning {liquidity.value} of {total_supply.value} pays out "
                    f"({amount0}, {amount1})"
                )

            self._burn_liquidity(tx, self.address, liquidity.value)
            self._push(tx, self._ledger0, to, amount0)
            self._push(tx, self._ledger1, to, amount1)
            self._update(
                tx,
                self._ledger0.balance_of(self.address),
                self._ledger1.balance_of(self.address),
            )
            tx.events.append(Burn(sender=sender, amount0=amount0, amount1=amount1, to=to))

        logger.info(
            "pair_burn",
            pair=self.address[-8:],
            to=to[-8:],
            amount0=amount0,
            amount1=amount1,
            liquidity=liquidity.value,
        )
        return amount0, amount1

    def swap(
        self,
        amount0_out: int,
        amount1_out: int,
        to: str,
        *,
        sender: str | None = None,
    ) -> None:
        """Pay out the requested amounts and check the fee-adjusted invariant.

        Outputs are transferred before anything paid in is measured. The swap
        commits only if
            (b0*1000 - in0*3) * (b1*1000 - in1*3) >= r0 * r1 * 1000**2
        where b is the post-transfer custodial balance, r the reserve before the
        swap and in the amount paid in on each side.

        Args:
            amount0_out: token0 to send to `to`
            amount1_out: token1 to send to `to`
            to: Recipient of the output
            sender: Caller recorded on the Swap event

        Raises:
            InsufficientOutputAmount: If both outputs are zero
            InsufficientLiquidity: If an output is not below its reserve
            InvalidTo: If `to` is one of the pair's assets or the zero address
            InsufficientInputAmount: If nothing was paid in
            InvariantViolated: If the constant product would decrease
        """
        to = normalize_address(to, validate=True)
        if amount0_out < 0 or amount1_out < 0:
            raise ValueError(f"Swap outputs cannot be negative: ({amount0_out}, {amount1_out})")
        if not amount0_out and not amount1_out:
            raise InsufficientOutputAmount("Swap must request some output")

        with self._transact("swap") as tx:
            reserve0, reserve1 = self._reserve0, self._reserve1
            if amount0_out >= reserve0 or amount1_out >= reserve1:
                raise InsufficientLiquidity(
                    f"Output ({amount0_out}, {amount1_out}) exceeds reserves ({reserve0}, {reserve1})"
                )
            if to in (self.token0, self.token1):
                raise InvalidTo(f"Swap recipient {to} is an asset of the pair")
            if to == ZERO_ADDRESS:
                raise InvalidTo("Swap output cannot be sent to the zero address")

            self._push(tx, self._ledger0, to, amount0_out)
            self._push(tx, self._ledger1, to, amount1_out)
            balance0 = self._ledger0.balance_of(self.address)
            balance1 = self._ledger1.balance_of(self.address)

            amount0_in = S(balance0).saturating_sub(S(reserve0) - S(amount0_out))
            amount1_in = S(balance1).saturating_sub(S(reserve1) - S(amount1_out))
            if not amount0_in and not amount1_in:
                raise InsufficientInputAmount("Nothing was paid in for the swap")

            adjusted0 = S(balance0) * FEE_DENOMINATOR - amount0_in * FEE_NUMERATOR
            adjusted1 = S(balance1) * FEE_DENOMINATOR - amount1_in * FEE_NUMERATOR
            if adjusted0 * adjusted1 < S(reserve0) * reserve1 * FEE_DENOMINATOR**2:
                raise InvariantViolated(
                    f"Constant product decreased: in ({amount0_in.value}, {amount1_in.value}), "
                    f"out ({amount0_out}, {amount1_out})"
                )

            self._update(tx, balance0, balance1)
            tx.events.append(
                Swap(
                    sender=sender,
                    amount0_in=amount0_in.value,
                    amount1_in=amount1_in.value,
                    amount0_out=amount0_out,
                    amount1_out=amount1_out,
                    to=to,
                )
            )

        logger.info(
            "pair_swap",
            pair=self.address[-8:],
            to=to[-8:],
            amount0_in=amount0_in.value,
            amount1_in=amount1_in.value,
            amount0_out=amount0_out,
            amount1_out=amount1_out,
        )

    def skim(self, to: str) -> tuple[int, int]:
        """Send custodial balances in excess of the reserves to `to`."""
        to = normalize_address(to, validate=True)
        if to == ZERO_ADDRESS:
            raise InvalidTo("Skimmed balances cannot be sent to the zero address")
        with self._transact("skim") as tx:
            excess0 = (S(self._ledger0.balance_of(self.address)) - S(self._reserve0)).value
            excess1 = (S(self._ledger1.balance_of(self.address)) - S(self._reserve1)).value
            self._push(tx, self._ledger0, to, excess0)
            self._push(tx, self._ledger1, to, excess1)
        logger.debug("pair_skim", pair=self.address[-8:], amount0=excess0, amount1=excess1)
        return excess0, excess1

    def sync(self) -> tuple[int, int]:
        """Force the reserves to match the custodial balances."""
        with self._transact("sync") as tx:
            self._update(
                tx,
                self._ledger0.balance_of(self.address),
                self._ledger1.balance_of(self.address),
            )
        return self.get_reserves()

    # --- Internals ---

    @contextmanager
    def _transact(self, operation: str) -> Iterator[_Transition]:
        """Run one transition inside the critical section, all or nothing."""
        with self._lock:
            if self._transition is not None:
                raise Locked(f"{operation} re-entered pair {self.address} during a transition")
            tx = _Transition(
                reserves=(self._reserve0, self._reserve1),
                liquidity=self.liquidity.snapshot(),
            )
            self._transition = tx
            try:
                yield tx
            except Exception as exc:
                logger.warning(
                    "pair_transition_rolled_back",
                    pair=self.address[-8:],
                    operation=operation,
                    error=type(exc).__name__,
                    reverted_transfers=len(tx.undo),
                )
                try:
                    for undo in reversed(tx.undo):
                        undo()
                finally:
                    self._reserve0, self._reserve1 = tx.reserves
                    self.liquidity.restore(tx.liquidity)
                raise
            finally:
                self._transition = None
            self._events.extend(tx.events)

    def _push(self, tx: _Transition, ledger: AssetLedger, to: str, amount: int) -> None:
        """Transfer an asset out of custody, journaled for rollback."""
        if not amount:
            return
        ledger.transfer(self.address, to, amount)
        tx.undo.append(lambda: ledger.transfer(to, self.address, amount))

    def _update(self, tx: _Transition, balance0: int, balance1: int) -> None:
        self._reserve0 = S(balance0).to_uint256()
        self._reserve1 = S(balance1).to_uint256()
        tx.events.append(Sync(reserve0=self._reserve0, reserve1=self._reserve1))

    def _mint_liquidity(self, tx: _Transition, to: str, amount: int) -> None:
        self.liquidity._mint(to, amount)
        tx.events.append(Transfer(sender=ZERO_ADDRESS, to=to, amount=amount))

    def _burn_liquidity(self, tx: _Transition, holder: str, amount: int) -> None:
        self.liquidity._burn(holder, amount)
        tx.events.append(Transfer(sender=holder, to=ZERO_ADDRESS, amount=amount))
