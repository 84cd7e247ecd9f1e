"""API endpoints for tokens and pairs."""

import threading

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query

from cpamm.api.models import (
    AmountsResponse,
    BalanceResponse,
    CreatePairRequest,
    CreateTokenRequest,
    EventsResponse,
    MintResponse,
    MintTokenRequest,
    PairResponse,
    RecipientRequest,
    ReservesResponse,
    SwapRequest,
    TokenResponse,
    TransferRequest,
)
from cpamm.config import ServiceConfig
from cpamm.factory import PairRegistry
from cpamm.ledger import TokenLedger
from cpamm.pair import Pair
from cpamm.types import normalize_address

logger = structlog.get_logger()

router = APIRouter()

_default_registry: PairRegistry | None = None
_default_registry_lock = threading.Lock()


def get_default_registry() -> PairRegistry:
    """Process-wide registry owned by the HTTP service, created on first use."""
    global _default_registry
    with _default_registry_lock:
        if _default_registry is None:
            config = ServiceConfig.from_env()
            _default_registry = PairRegistry(address=config.registry_address)
            logger.info("registry_initialized", registry=_default_registry.address)
        return _default_registry


def get_registry() -> PairRegistry:
    """Dependency provider for the registry instance.

    Override this in tests to inject a fresh registry:
        app.dependency_overrides[get_registry] = lambda: registry
    """
    return get_default_registry()


def _token(registry: PairRegistry, address: str) -> TokenLedger:
    address = normalize_address(address)
    if address not in registry.tokens:
        raise HTTPException(status_code=404, detail=f"Unknown token {address}")
    ledger = registry.tokens.get(address)
    if not isinstance(ledger, TokenLedger):
        raise HTTPException(status_code=400, detail=f"Token {address} is not mintable")
    return ledger


def _pair(registry: PairRegistry, address: str) -> Pair:
    pair = registry.pair_at(address)
    if pair is None:
        raise HTTPException(status_code=404, detail=f"Unknown pair {address}")
    return pair


# --- Tokens ---


@router.post("/tokens", status_code=201)
def create_token(
    request: CreateTokenRequest,
    registry: PairRegistry = Depends(get_registry),
) -> TokenResponse:
    ledger = registry.tokens.create_token(
        name=request.name,
        symbol=request.symbol,
        decimals=request.decimals,
        address=request.address,
    )
    return TokenResponse.from_ledger(ledger)


@router.get("/tokens/{token}/balances/{holder}")
def token_balance(
    token: str,
    holder: str,
    registry: PairRegistry = Depends(get_registry),
) -> BalanceResponse:
    ledger = _token(registry, token)
    return BalanceResponse(holder=normalize_address(holder), balance=ledger.balance_of(holder))


@router.post("/tokens/{token}/mint")
def mint_token(
    token: str,
    request: MintTokenRequest,
    registry: PairRegistry = Depends(get_registry),
) -> TokenResponse:
    ledger = _token(registry, token)
    ledger.mint(int(request.amount), request.to)
    return TokenResponse.from_ledger(ledger)


@router.post("/tokens/{token}/transfer")
def transfer_token(
    token: str,
    request: TransferRequest,
    registry: PairRegistry = Depends(get_registry),
) -> BalanceResponse:
    ledger = _token(registry, token)
    ledger.transfer(request.sender, request.to, int(request.amount))
    return BalanceResponse(holder=request.to, balance=ledger.balance_of(request.to))


# --- Pairs ---


@router.post("/pairs")
def create_pair(
    request: CreatePairRequest,
    registry: PairRegistry = Depends(get_registry),
) -> PairResponse:
    """Create (or return the existing) pair for two tokens."""
    pair = registry.create_pair(request.token_a, request.token_b)
    return PairResponse.from_pair(pair)


@router.get("/pairs")
def lookup_pair(
    token_a: str = Query(alias="tokenA"),
    token_b: str = Query(alias="tokenB"),
    registry: PairRegistry = Depends(get_registry),
) -> PairResponse:
    """Symmetric lookup of the pair for two tokens."""
    pair = registry.pairs(token_a, token_b)
    if pair is None:
        raise HTTPException(status_code=404, detail=f"No pair for {token_a}/{token_b}")
    return PairResponse.from_pair(pair)


@router.get("/pairs/{pair_address}/reserves")
def reserves(
    pair_address: str,
    registry: PairRegistry = Depends(get_registry),
) -> ReservesResponse:
    reserve0, reserve1 = _pair(registry, pair_address).get_reserves()
    return ReservesResponse(reserve0=reserve0, reserve1=reserve1)


@router.get("/pairs/{pair_address}/balances/{holder}")
def liquidity_balance(
    pair_address: str,
    holder: str,
    registry: PairRegistry = Depends(get_registry),
) -> BalanceResponse:
    pair = _pair(registry, pair_address)
    return BalanceResponse(holder=normalize_address(holder), balance=pair.balance_of(holder))


@router.get("/pairs/{pair_address}/events")
def pair_events(
    pair_address: str,
    registry: PairRegistry = Depends(get_registry),
) -> EventsResponse:
    return EventsResponse.from_events(_pair(registry, pair_address).events)


@router.post("/pairs/{pair_address}/transfer")
def transfer_liquidity(
    pair_address: str,
    request: TransferRequest,
    registry: PairRegistry = Depends(get_registry),
) -> BalanceResponse:
    pair = _pair(registry, pair_address)
    pair.transfer(request.sender, request.to, int(request.amount))
    return BalanceResponse(holder=request.to, balance=pair.balance_of(request.to))


@router.post("/pairs/{pair_address}/mint")
def mint_liquidity(
    pair_address: str,
    request: RecipientRequest,
    registry: PairRegistry = Depends(get_registry),
) -> MintResponse:
    """Mint liquidity for assets already transferred to the pair."""
    liquidity = _pair(registry, pair_address).mint(request.to, sender=request.sender)
    return MintResponse(liquidity=liquidity)


@router.post("/pairs/{pair_address}/burn")
def burn_liquidity(
    pair_address: str,
    request: RecipientRequest,
    registry: PairRegistry = Depends(get_registry),
) -> AmountsResponse:
    """Redeem liquidity receipts already transferred to the pair."""
    amount0, amount1 = _pair(registry, pair_address).burn(request.to, sender=request.sender)
    return AmountsResponse(amount0=amount0, amount1=amount1)


@router.post("/pairs/{pair_address}/swap")
def swap(
    pair_address: str,
    request: SwapRequest,
    registry: PairRegistry = Depends(get_registry),
) -> ReservesResponse:
    pair = _pair(registry, pair_address)
    pair.swap(
        int(request.amount0_out),
        int(request.amount1_out),
        request.to,
        sender=request.sender,
    )
    reserve0, reserve1 = pair.get_reserves()
    return ReservesResponse(reserve0=reserve0, reserve1=reserve1)


@router.post("/pairs/{pair_address}/skim")
def skim(
    pair_address: str,
    request: RecipientRequest,
    registry: PairRegistry = Depends(get_registry),
) -> AmountsResponse:
    amount0, amount1 = _pair(registry, pair_address).skim(request.to)
    return AmountsResponse(amount0=amount0, amount1=amount1)


@router.post("/pairs/{pair_address}/sync")
def sync(
    pair_address: str,
    registry: PairRegistry = Depends(get_registry),
) -> ReservesResponse:
    reserve0, reserve1 = _pair(registry, pair_address).sync()
    return ReservesResponse(reserve0=reserve0, reserve1=reserve1)
