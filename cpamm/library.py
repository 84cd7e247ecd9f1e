"""Quoting helpers for constant-product pairs.

These mirror the pair's own fee arithmetic, so an output computed here
passes the pair's invariant check when the matching input is pushed first:

    amount_out = (amount_in * 997 * reserve_out) / (reserve_in * 1000 + amount_in * 997)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from cpamm.constants import FEE_DENOMINATOR, FEE_RETENTION
from cpamm.factory import sort_tokens
from cpamm.safe_int import UINT256_MAX, S
from cpamm.types import normalize_address

if TYPE_CHECKING:
    from cpamm.factory import PairRegistry


def quote(amount_a: int, reserve_a: int, reserve_b: int) -> int:
    """Amount of B equal in value to amount_a of A at the current reserve ratio.

    Returns 0 for a non-positive amount or an empty side.
    """
    if amount_a <= 0 or reserve_a <= 0 or reserve_b <= 0:
        return 0
    return (S(amount_a) * S(reserve_b) // S(reserve_a)).value


def get_amount_out(amount_in: int, reserve_in: int, reserve_out: int) -> int:
    """Maximum output for an exact input, after the 0.3% fee.

    Args:
        amount_in: Input asset amount
        reserve_in: Reserve of the input asset
        reserve_out: Reserve of the output asset

    Returns:
        Output amount (0 for non-positive input or empty reserves)
    """
    if amount_in <= 0:
        return 0
    if reserve_in <= 0 or reserve_out <= 0:
        return 0

    amount_in_with_fee = S(amount_in) * FEE_RETENTION
    numerator = amount_in_with_fee * S(reserve_out)
    denominator = S(reserve_in) * FEE_DENOMINATOR + amount_in_with_fee
    return (numerator // denominator).value


def get_amount_in(amount_out: int, reserve_in: int, reserve_out: int) -> int:
    """Minimum input for an exact output, after the 0.3% fee.

    Formula: amount_in = (res_in * out * 1000) / ((res_out - out) * 997) + 1

    Returns:
        Required input (0 for non-positive output or empty reserves,
        max uint256 when the output would drain the reserve)
    """
    if amount_out <= 0:
        return 0
    if reserve_in <= 0 or reserve_out <= 0:
        return 0
    if amount_out >= reserve_out:
        return UINT256_MAX

    numerator = S(reserve_in) * S(amount_out) * FEE_DENOMINATOR
    denominator = (S(reserve_out) - S(amount_out)) * FEE_RETENTION
    return (numerator // denominator + 1).value


def get_reserves(registry: PairRegistry, token_a: str, token_b: str) -> tuple[int, int]:
    """Reserves of the pair for two assets, ordered as (reserve_a, reserve_b).

    Raises:
        ValueError: If no pair exists for the two assets
    """
    pair = registry.pairs(token_a, token_b)
    if pair is None:
        raise ValueError(f"No pair for {token_a}/{token_b}")
    token0, _ = sort_tokens(token_a, token_b)
    reserve0, reserve1 = pair.get_reserves()
    if normalize_address(token_a) == token0:
        return reserve0, reserve1
    return reserve1, reserve0


def get_amounts_out(registry: PairRegistry, amount_in: int, path: list[str]) -> list[int]:
    """Chain get_amount_out along a path of assets.

    Returns:
        Amounts at every hop, starting with amount_in
    """
    if len(path) < 2:
        raise ValueError(f"Path needs at least two assets, got {len(path)}")
    amounts = [amount_in]
    for token_in, token_out in zip(path, path[1:]):
        reserve_in, reserve_out = get_reserves(registry, token_in, token_out)
        amounts.append(get_amount_out(amounts[-1], reserve_in, reserve_out))
    return amounts


def get_amounts_in(registry: PairRegistry, amount_out: int, path: list[str]) -> list[int]:
    """Chain get_amount_in backwards along a path of assets.

    Returns:
        Amounts at every hop, ending with amount_out
    """
    if len(path) < 2:
        raise ValueError(f"Path needs at least two assets, got {len(path)}")
    amounts = [amount_out]
    for token_in, token_out in reversed(list(zip(path, path[1:]))):
        reserve_in, reserve_out = get_reserves(registry, token_in, token_out)
        amounts.insert(0, get_amount_in(amounts[0], reserve_in, reserve_out))
    return amounts
