"""
Pydantic schemas and handlers for curve queries.
"""
from typing import Optional

from pydantic import BaseModel

from .math import sub_u128
from .models import AccountStats, SwapStats
from .state import (
    ACCOUNT_STATS,
    BASE_TOKEN,
    CURVE,
    FEE_ADDR,
    FEE_PCT_BUY,
    FEE_PCT_SELL,
    MAKER_STATS,
    NET_MAKER_FEE,
    NET_TAKER_FEE,
    QUOTE_RESERVE_VIRTUAL,
    QUOTE_TOKEN,
    TAKER_STATS,
)
from .storage.store import StateStore
from .token import Token
from .types import validate_address

# =======================
# COMMON
# =======================

class TokenSchema(BaseModel):
    kind: str  # native, tracked
    identifier: str

    @classmethod
    def from_token(cls, token: Token) -> "TokenSchema":
        return cls(kind=token.kind.value, identifier=token.identifier)

class SwapRecordSchema(BaseModel):
    amount: int
    initiator: str
    timestamp: int

class SwapStatsSchema(BaseModel):
    n: int
    max: Optional[SwapRecordSchema] = None

    @classmethod
    def from_stats(cls, stats: SwapStats) -> "SwapStatsSchema":
        return cls(
            n=stats.n,
            max=None if stats.max is None else SwapRecordSchema(
                amount=stats.max.amount,
                initiator=stats.max.initiator,
                timestamp=stats.max.timestamp,
            ),
        )

class AccountStatsSchema(BaseModel):
    n_buys: int
    n_sells: int
    net_quote_in: int
    net_quote_out: int
    net_base_in: int
    net_base_out: int
    total_cost: int

    @classmethod
    def from_stats(cls, stats: AccountStats) -> "AccountStatsSchema":
        return cls(**stats.__dict__)

# =======================
# 1. ACCOUNT
# =======================

class AccountResponse(BaseModel):
    address: str
    stats: AccountStatsSchema

# =======================
# 2. OVERVIEW
# =======================

class CurveAmmOverview(BaseModel):
    base_token: TokenSchema
    base_reserve: int
    base_decimals: int
    quote_token: TokenSchema
    quote_reserve_real: int
    quote_reserve_virtual: int
    quote_decimals: int
    constant_product: int
    quote_price: int

class CurveFeeOverview(BaseModel):
    recipient: str
    taker_pct: int  # parts-per-million
    maker_pct: int

class CurveStatsOverview(BaseModel):
    bids: SwapStatsSchema  # taker side
    asks: SwapStatsSchema  # maker side
    net_taker_fee: int
    net_maker_fee: int

class OverviewResponse(BaseModel):
    amm: CurveAmmOverview
    fees: CurveFeeOverview
    stats: CurveStatsOverview

# =======================
# 3. CONFIG
# =======================

class ConfigResponse(BaseModel):
    pass

# =======================
# HANDLERS
# =======================

def query_account(store: StateStore, address: str) -> AccountResponse:
    address = validate_address(address)
    stats = ACCOUNT_STATS.load(store, address)
    return AccountResponse(address=address, stats=AccountStatsSchema.from_stats(stats))

def query_overview(store: StateStore) -> OverviewResponse:
    curve = CURVE.load(store)
    virtual_reserve = QUOTE_RESERVE_VIRTUAL.load(store)

    return OverviewResponse(
        amm=CurveAmmOverview(
            base_token=TokenSchema.from_token(BASE_TOKEN.load(store)),
            base_reserve=curve.base_reserve,
            base_decimals=curve.base_decimals,
            quote_token=TokenSchema.from_token(QUOTE_TOKEN.load(store)),
            quote_reserve_real=sub_u128(curve.quote_reserve, virtual_reserve),
            quote_reserve_virtual=virtual_reserve,
            quote_decimals=curve.quote_decimals,
            constant_product=curve.k,
            quote_price=curve.quote_price(),
        ),
        fees=CurveFeeOverview(
            recipient=FEE_ADDR.load(store),
            taker_pct=FEE_PCT_BUY.load(store),
            maker_pct=FEE_PCT_SELL.load(store),
        ),
        stats=CurveStatsOverview(
            bids=SwapStatsSchema.from_stats(TAKER_STATS.load(store)),
            asks=SwapStatsSchema.from_stats(MAKER_STATS.load(store)),
            net_taker_fee=NET_TAKER_FEE.load(store),
            net_maker_fee=NET_MAKER_FEE.load(store),
        ),
    )

def query_config(store: StateStore) -> ConfigResponse:
    return ConfigResponse()
