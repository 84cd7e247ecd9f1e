"""Test helpers module for shared test utilities.

- constants: Addresses and common amounts
- factories: Push-then-call helpers for pairs
"""

from tests.helpers.constants import (
    ETHER,
    INITIAL_BALANCE,
    OTHER,
    OWNER,
    TOKEN_A,
    TOKEN_B,
    TOKEN_C,
)
from tests.helpers.factories import provide_liquidity, remove_liquidity

__all__ = [
    # Constants
    "ETHER",
    "INITIAL_BALANCE",
    "OTHER",
    "OWNER",
    "TOKEN_A",
    "TOKEN_B",
    "TOKEN_C",
    # Factories
    "provide_liquidity",
    "remove_liquidity",
]
