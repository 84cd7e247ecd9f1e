"""Tests for Pair.mint liquidity accounting."""

import pytest

from cpamm.constants import MINIMUM_LIQUIDITY, ZERO_ADDRESS
from cpamm.errors import InsufficientLiquidityMinted
from cpamm.events import Mint, Sync, Transfer
from cpamm.ledger import TokenLedger
from cpamm.pair import Pair
from tests.helpers import ETHER, OTHER, OWNER, provide_liquidity


class TestBootstrap:
    """First mint into an empty pair."""

    def test_bootstrap_initial_liquidity(self, pair: Pair, token0: TokenLedger, token1: TokenLedger):
        minted = provide_liquidity(pair, token0, token1, 1 * ETHER, 1 * ETHER)

        assert minted == 1 * ETHER - MINIMUM_LIQUIDITY
        assert pair.balance_of(OWNER) == 1 * ETHER - MINIMUM_LIQUIDITY
        assert pair.get_reserves() == (1 * ETHER, 1 * ETHER)
        assert pair.total_supply == 1 * ETHER

    def test_minimum_liquidity_locked_at_zero_address(
        self, pair: Pair, token0: TokenLedger, token1: TokenLedger
    ):
        provide_liquidity(pair, token0, token1, 1 * ETHER, 1 * ETHER)
        assert pair.balance_of(ZERO_ADDRESS) == MINIMUM_LIQUIDITY

    def test_bootstrap_uses_geometric_mean(
        self, pair: Pair, token0: TokenLedger, token1: TokenLedger
    ):
        """sqrt(1e18 * 4e18) = 2e18."""
        minted = provide_liquidity(pair, token0, token1, 1 * ETHER, 4 * ETHER)
        assert minted == 2 * ETHER - MINIMUM_LIQUIDITY
        assert pair.total_supply == 2 * ETHER
        assert pair.get_reserves() == (1 * ETHER, 4 * ETHER)

    def test_bootstrap_floors_square_root(
        self, pair: Pair, token0: TokenLedger, token1: TokenLedger
    ):
        """sqrt(3000 * 5000) = 3872.98..., floored before the lock is taken."""
        minted = provide_liquidity(pair, token0, token1, 3000, 5000)
        assert minted == 3872 - MINIMUM_LIQUIDITY
        assert pair.total_supply == 3872

    def test_smallest_viable_bootstrap(self, pair: Pair, token0: TokenLedger, token1: TokenLedger):
        minted = provide_liquidity(pair, token0, token1, 1001, 1001)
        assert minted == 1

    def test_bootstrap_at_minimum_liquidity_fails(
        self, pair: Pair, token0: TokenLedger, token1: TokenLedger
    ):
        """sqrt(1000 * 1000) - 1000 = 0 mints nothing."""
        with pytest.raises(InsufficientLiquidityMinted):
            provide_liquidity(pair, token0, token1, 1000, 1000)
        assert pair.get_reserves() == (0, 0)
        assert pair.total_supply == 0
        assert pair.balance_of(ZERO_ADDRESS) == 0

    def test_bootstrap_below_minimum_liquidity_fails(
        self, pair: Pair, token0: TokenLedger, token1: TokenLedger
    ):
        with pytest.raises(InsufficientLiquidityMinted):
            provide_liquidity(pair, token0, token1, 10, 10)
        assert pair.total_supply == 0

    def test_one_sided_bootstrap_fails(self, pair: Pair, token0: TokenLedger, token1: TokenLedger):
        with pytest.raises(InsufficientLiquidityMinted):
            provide_liquidity(pair, token0, token1, 1 * ETHER, 0)

    def test_mint_events(self, pair: Pair, token0: TokenLedger, token1: TokenLedger):
        provide_liquidity(pair, token0, token1, 1 * ETHER, 1 * ETHER)
        assert pair.events == (
            Transfer(sender=ZERO_ADDRESS, to=ZERO_ADDRESS, amount=MINIMUM_LIQUIDITY),
            Transfer(sender=ZERO_ADDRESS, to=OWNER, amount=1 * ETHER - MINIMUM_LIQUIDITY),
            Sync(reserve0=1 * ETHER, reserve1=1 * ETHER),
            Mint(sender=OWNER, amount0=1 * ETHER, amount1=1 * ETHER),
        )


class TestSubsequentMint:
    """Mints into a pair that already has liquidity."""

    def test_mint_when_there_is_liquidity(
        self, pair: Pair, token0: TokenLedger, token1: TokenLedger
    ):
        provide_liquidity(pair, token0, token1, 1 * ETHER, 1 * ETHER)
        minted = provide_liquidity(pair, token0, token1, 2 * ETHER, 2 * ETHER)

        assert minted == 2 * ETHER
        assert pair.balance_of(OWNER) == 3 * ETHER - MINIMUM_LIQUIDITY
        assert pair.total_supply == 3 * ETHER
        assert pair.get_reserves() == (3 * ETHER, 3 * ETHER)

    def test_unbalanced_mint_credits_scarcer_side(
        self, pair: Pair, token0: TokenLedger, token1: TokenLedger
    ):
        """Excess token0 is donated to existing holders."""
        provide_liquidity(pair, token0, token1, 1 * ETHER, 1 * ETHER)
        minted = provide_liquidity(pair, token0, token1, 2 * ETHER, 1 * ETHER)

        assert minted == 1 * ETHER
        assert pair.balance_of(OWNER) == 2 * ETHER - MINIMUM_LIQUIDITY
        assert pair.total_supply == 2 * ETHER
        assert pair.get_reserves() == (3 * ETHER, 2 * ETHER)

    def test_mint_to_another_recipient(self, pair: Pair, token0: TokenLedger, token1: TokenLedger):
        provide_liquidity(pair, token0, token1, 1 * ETHER, 1 * ETHER)
        token0.transfer(OWNER, pair.address, 1 * ETHER)
        token1.transfer(OWNER, pair.address, 1 * ETHER)

        minted = pair.mint(OTHER)

        assert pair.balance_of(OTHER) == minted == 1 * ETHER
        assert pair.balance_of(OWNER) == 1 * ETHER - MINIMUM_LIQUIDITY

    def test_mint_without_deposit_fails(self, pair: Pair, token0: TokenLedger, token1: TokenLedger):
        provide_liquidity(pair, token0, token1, 1 * ETHER, 1 * ETHER)
        events_before = pair.events

        with pytest.raises(InsufficientLiquidityMinted):
            pair.mint(OWNER)

        assert pair.total_supply == 1 * ETHER
        assert pair.events == events_before

    def test_dust_deposit_rounds_to_zero(
        self, pair: Pair, token0: TokenLedger, token1: TokenLedger
    ):
        """1 * 1e18 // 4e18 floors to zero on the scarcer side."""
        provide_liquidity(pair, token0, token1, 4 * ETHER, 1 * ETHER)
        with pytest.raises(InsufficientLiquidityMinted):
            provide_liquidity(pair, token0, token1, 1, 1)

    def test_sum_of_balances_equals_supply(
        self, pair: Pair, token0: TokenLedger, token1: TokenLedger
    ):
        provide_liquidity(pair, token0, token1, 1 * ETHER, 1 * ETHER)
        token0.transfer(OWNER, OTHER, 1 * ETHER)
        token1.transfer(OWNER, OTHER, 1 * ETHER)
        provide_liquidity(pair, token0, token1, 1 * ETHER, 1 * ETHER, provider=OTHER)

        assert sum(pair.liquidity.holders().values()) == pair.total_supply
