"""Notifications emitted by committed registry and pair transitions."""

from __future__ import annotations

from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class Event:
    """Base class for emitted notifications."""

    @property
    def name(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict[str, object]:
        return {"event": self.name, **asdict(self)}


@dataclass(frozen=True)
class PairCreated(Event):
    token0: str
    token1: str
    pair: str
    # Number of pairs in the registry after this one was added
    index: int


@dataclass(frozen=True)
class Transfer(Event):
    """Liquidity receipt movement (mint from / burn to the zero address)."""

    sender: str
    to: str
    amount: int


@dataclass(frozen=True)
class Mint(Event):
    sender: str | None
    amount0: int
    amount1: int


@dataclass(frozen=True)
class Burn(Event):
    sender: str | None
    amount0: int
    amount1: int
    to: str


@dataclass(frozen=True)
class Swap(Event):
    sender: str | None
    amount0_in: int
    amount1_in: int
    amount0_out: int
    amount1_out: int
    to: str


@dataclass(frozen=True)
class Sync(Event):
    reserve0: int
    reserve1: int
