"""Pydantic request/response models for the HTTP surface.

Amounts travel as decimal strings so uint256 values survive JSON clients
that parse numbers as doubles.
"""

from typing import Any

from pydantic import BaseModel, Field

from cpamm.events import Event
from cpamm.ledger import TokenLedger
from cpamm.pair import Pair
from cpamm.types import Address, Uint256


class CreateTokenRequest(BaseModel):
    name: str = Field(min_length=1)
    symbol: str = Field(min_length=1)
    decimals: int = Field(default=18, ge=0, le=255)
    address: Address | None = Field(
        default=None,
        description="Explicit ledger address. Derived from name and symbol if omitted.",
    )


class TokenResponse(BaseModel):
    address: Address
    name: str
    symbol: str
    decimals: int
    total_supply: Uint256 = Field(alias="totalSupply")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_ledger(cls, ledger: TokenLedger) -> "TokenResponse":
        return cls(
            address=ledger.address,
            name=ledger.name,
            symbol=ledger.symbol,
            decimals=ledger.decimals,
            total_supply=ledger.total_supply,
        )


class MintTokenRequest(BaseModel):
    to: Address
    amount: Uint256


class TransferRequest(BaseModel):
    sender: Address
    to: Address
    amount: Uint256


class BalanceResponse(BaseModel):
    holder: Address
    balance: Uint256


class CreatePairRequest(BaseModel):
    token_a: Address = Field(alias="tokenA")
    token_b: Address = Field(alias="tokenB")

    model_config = {"populate_by_name": True}


class PairResponse(BaseModel):
    address: Address
    token0: Address
    token1: Address
    reserve0: Uint256
    reserve1: Uint256
    total_supply: Uint256 = Field(alias="totalSupply")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_pair(cls, pair: Pair) -> "PairResponse":
        reserve0, reserve1 = pair.get_reserves()
        return cls(
            address=pair.address,
            token0=pair.token0,
            token1=pair.token1,
            reserve0=reserve0,
            reserve1=reserve1,
            total_supply=pair.total_supply,
        )


class ReservesResponse(BaseModel):
    reserve0: Uint256
    reserve1: Uint256


class RecipientRequest(BaseModel):
    to: Address
    sender: Address | None = Field(default=None, description="Caller recorded on the event.")


class SwapRequest(BaseModel):
    amount0_out: Uint256 = Field(alias="amount0Out")
    amount1_out: Uint256 = Field(alias="amount1Out")
    to: Address
    sender: Address | None = None

    model_config = {"populate_by_name": True}


class MintResponse(BaseModel):
    liquidity: Uint256


class AmountsResponse(BaseModel):
    amount0: Uint256
    amount1: Uint256


class EventsResponse(BaseModel):
    events: list[dict[str, Any]]

    @classmethod
    def from_events(cls, events: tuple[Event, ...]) -> "EventsResponse":
        rendered = []
        for event in events:
            rendered.append(
                {
                    key: str(value) if isinstance(value, int) else value
                    for key, value in event.to_dict().items()
                }
            )
        return cls(events=rendered)


class ErrorResponse(BaseModel):
    error: str = Field(description="Name of the failure condition.")
    detail: str
