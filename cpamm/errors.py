"""Named failure conditions of the registry, the pair engine and the ledgers.

Arithmetic faults (division by a zero supply, underflow, uint256 overflow)
are not listed here: they are the ArithmeticError subclasses in
cpamm.safe_int and are never reported as one of these named conditions.
"""


class AMMError(Exception):
    """Base error for every named AMM condition."""

    pass


class InvalidPair(AMMError):
    """Both sides of a pair are the same asset."""

    pass


class UnknownToken(AMMError):
    """No asset ledger is registered for the given address."""

    pass


class PairError(AMMError):
    """Base error for pair engine transitions."""

    pass


class InsufficientLiquidityMinted(PairError):
    """A deposit would mint zero liquidity."""

    pass


class InsufficientLiquidityBurned(PairError):
    """A redemption would pay out zero of either asset."""

    pass


class InsufficientOutputAmount(PairError):
    """Swap requested no output at all."""

    pass


class InsufficientInputAmount(PairError):
    """Swap found nothing paid in."""

    pass


class InsufficientLiquidity(PairError):
    """Requested output is not strictly below the reserve."""

    pass


class InvalidTo(PairError):
    """Swap recipient is one of the pair's own assets."""

    pass


class Locked(PairError):
    """A pair transition was re-entered from inside another transition."""

    pass


class InvariantViolated(PairError):
    """Fee-adjusted constant product decreased across a swap."""

    pass


K = InvariantViolated


class LedgerError(AMMError):
    """Base error for fungible ledger operations."""

    pass


class InsufficientBalance(LedgerError):
    """Sender holds less than the amount being moved."""

    pass


class LockedBalance(LedgerError):
    """Balance held by the void address can never move."""

    pass


class DuplicateToken(LedgerError):
    """A different ledger is already registered at the address."""

    pass
