"""Pytest configuration and fixtures."""

import pytest

from cpamm.factory import PairRegistry
from cpamm.ledger import TokenDirectory, TokenLedger
from cpamm.pair import Pair
from tests.helpers.constants import INITIAL_BALANCE, OWNER, TOKEN_A, TOKEN_B, TOKEN_C


@pytest.fixture
def tokens() -> TokenDirectory:
    """Directory with three mintable tokens, OWNER funded in each."""
    directory = TokenDirectory()
    for address, name, symbol in (
        (TOKEN_A, "Token A", "TKNA"),
        (TOKEN_B, "Token B", "TKNB"),
        (TOKEN_C, "Token C", "TKNC"),
    ):
        ledger = TokenLedger(address, name=name, symbol=symbol)
        ledger.mint(INITIAL_BALANCE, OWNER)
        directory.register(ledger)
    return directory


@pytest.fixture
def registry(tokens: TokenDirectory) -> PairRegistry:
    return PairRegistry(tokens)


@pytest.fixture
def pair(registry: PairRegistry) -> Pair:
    """Fresh TOKEN_A/TOKEN_B pair with no liquidity."""
    return registry.create_pair(TOKEN_A, TOKEN_B)


@pytest.fixture
def token0(pair: Pair, tokens: TokenDirectory) -> TokenLedger:
    """Ledger of the pair's token0."""
    return tokens.get(pair.token0)


@pytest.fixture
def token1(pair: Pair, tokens: TokenDirectory) -> TokenLedger:
    """Ledger of the pair's token1."""
    return tokens.get(pair.token1)
