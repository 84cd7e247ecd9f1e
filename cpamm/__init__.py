"""Two-asset constant-product automated market maker."""

__version__ = "0.1.0"

from cpamm.errors import (  # noqa: E402
    AMMError,
    InsufficientInputAmount,
    InsufficientLiquidity,
    InsufficientLiquidityBurned,
    InsufficientLiquidityMinted,
    InsufficientOutputAmount,
    InvalidPair,
    InvalidTo,
    InvariantViolated,
    K,
    PairError,
    UnknownToken,
)
from cpamm.factory import PairRegistry, pair_address_for, sort_tokens  # noqa: E402
from cpamm.ledger import AssetLedger, TokenDirectory, TokenLedger  # noqa: E402
from cpamm.pair import Pair  # noqa: E402

__all__ = [
    "__version__",
    # Engine
    "Pair",
    "PairRegistry",
    "pair_address_for",
    "sort_tokens",
    # Ledgers
    "AssetLedger",
    "TokenDirectory",
    "TokenLedger",
    # Errors
    "AMMError",
    "PairError",
    "InvalidPair",
    "UnknownToken",
    "InsufficientLiquidityMinted",
    "InsufficientLiquidityBurned",
    "InsufficientOutputAmount",
    "InsufficientInputAmount",
    "InsufficientLiquidity",
    "InvalidTo",
    "InvariantViolated",
    "K",
]
