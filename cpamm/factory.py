"""Pair registry: at most one Pair per unordered asset pair.

Pair identity is established by canonicalization, not by deduplication:
both argument orders sort to the same (token0, token1) key and derive the
same pair address.
"""

from __future__ import annotations

import threading

import structlog
from eth_abi.packed import encode_packed
from eth_utils import keccak

from cpamm.constants import DEFAULT_REGISTRY_ADDRESS, PAIR_INIT_CODE_HASH
from cpamm.errors import InvalidPair
from cpamm.events import PairCreated
from cpamm.ledger import TokenDirectory
from cpamm.pair import Pair
from cpamm.types import address_bytes, normalize_address

logger = structlog.get_logger()


def sort_tokens(token_a: str, token_b: str) -> tuple[str, str]:
    """Canonical (token0, token1) ordering of two asset addresses.

    Raises:
        ValueError: If either address is malformed
        InvalidPair: If both addresses are the same asset
    """
    token_a = normalize_address(token_a, validate=True)
    token_b = normalize_address(token_b, validate=True)
    if token_a == token_b:
        raise InvalidPair(f"Identical assets: {token_a}")
    # Byte order of fixed-width lowercase hex matches string order
    if address_bytes(token_a) > address_bytes(token_b):
        return token_b, token_a
    return token_a, token_b


def pair_address_for(registry_address: str, token_a: str, token_b: str) -> str:
    """Deterministic (CREATE2-style) address of the pair for two assets.

    address = keccak256(0xff ++ registry ++ keccak256(token0 ++ token1) ++ init_code_hash)[12:]
    """
    token0, token1 = sort_tokens(token_a, token_b)
    salt = keccak(
        encode_packed(["address", "address"], [address_bytes(token0), address_bytes(token1)])
    )
    digest = keccak(b"\xff" + address_bytes(registry_address) + salt + PAIR_INIT_CODE_HASH)
    return "0x" + digest[12:].hex()


class PairRegistry:
    """Creates and indexes pairs for the assets of a token directory.

    The registry is an ordinary object with an explicit owner; whoever
    constructs it passes it to everything that creates or looks up pairs.
    """

    def __init__(
        self,
        tokens: TokenDirectory | None = None,
        address: str = DEFAULT_REGISTRY_ADDRESS,
    ) -> None:
        self.address = normalize_address(address, validate=True)
        self.tokens = tokens if tokens is not None else TokenDirectory()
        self._pairs: dict[tuple[str, str], Pair] = {}
        self._pairs_by_address: dict[str, Pair] = {}
        self._all_pairs: list[Pair] = []
        self._events: list[PairCreated] = []
        self._lock = threading.Lock()

    @property
    def all_pairs(self) -> tuple[Pair, ...]:
        """Every pair in creation order."""
        return tuple(self._all_pairs)

    @property
    def all_pairs_length(self) -> int:
        return len(self._all_pairs)

    @property
    def events(self) -> tuple[PairCreated, ...]:
        return tuple(self._events)

    def create_pair(self, token_a: str, token_b: str) -> Pair:
        """Return the pair for two assets, creating it on first request.

        Args:
            token_a: One asset address (any case, either order)
            token_b: The other asset address

        Returns:
            The single Pair registered for {token_a, token_b}

        Raises:
            InvalidPair: If token_a and token_b are the same asset
            UnknownToken: If either asset has no registered ledger
        """
        token0, token1 = sort_tokens(token_a, token_b)
        key = (token0, token1)
        with self._lock:
            existing = self._pairs.get(key)
            if existing is not None:
                return existing

            pair = Pair(
                address=pair_address_for(self.address, token0, token1),
                ledger0=self.tokens.get(token0),
                ledger1=self.tokens.get(token1),
                registry=self.address,
            )
            self._pairs[key] = pair
            self._pairs_by_address[pair.address] = pair
            self._all_pairs.append(pair)
            self._events.append(
                PairCreated(token0=token0, token1=token1, pair=pair.address, index=len(self._all_pairs))
            )

        logger.info(
            "pair_created",
            pair=pair.address[-8:],
            token0=token0[-8:],
            token1=token1[-8:],
            total_pairs=len(self._all_pairs),
        )
        return pair

    def pairs(self, token_a: str, token_b: str) -> Pair | None:
        """Look up the pair for two assets (order independent).

        Returns:
            The Pair if one was created, None otherwise (including when both
            arguments are the same asset)
        """
        token_a = normalize_address(token_a)
        token_b = normalize_address(token_b)
        key = (token_a, token_b) if token_a < token_b else (token_b, token_a)
        return self._pairs.get(key)

    get_pair = pairs

    def pair_at(self, address: str) -> Pair | None:
        """Look up a pair by its own address."""
        return self._pairs_by_address.get(normalize_address(address))
