"""
Curve AMM - Persisted State.

============================================================
PURPOSE
============================================================
Named entries of the key-value store and pool initialization.

ENTRIES:
- curve, virtual_quote_reserve: reserves and constant product
- q_token, b_token: the two legs
- operator_addr: optional exclusive controller
- fee_addr, b_fee, s_fee: fee recipient and fractions
- net_taker_fee, net_maker_fee: lifetime fee totals
- taker_stats, maker_stats: global swap statistics
- account_stats: per-account records
- ohlc_bars: one-minute candlesticks keyed by bucket start

============================================================
"""

import logging

from .curve import Curve
from .errors import ValidationError
from .math import PCT_SCALE
from .models import AccountStats, OhlcBar, SwapStats
from .storage.store import Item, Map, StateStore, int_key
from .token import Token
from .types import PoolParams


logger = logging.getLogger(__name__)


def _uint_item(namespace: str) -> Item[int]:
    return Item(namespace, str, int)


def _str_item(namespace: str) -> Item[str]:
    return Item(namespace, str, str)


# Curve consists of reserve amounts & decimals used by the CP AMM
CURVE: Item[Curve] = Item("curve", Curve.to_dict, Curve.from_dict)

# Initial "virtual" quote reserve amount
QUOTE_RESERVE_VIRTUAL = _uint_item("virtual_quote_reserve")

QUOTE_TOKEN: Item[Token] = Item("q_token", Token.to_dict, Token.from_dict)
BASE_TOKEN: Item[Token] = Item("b_token", Token.to_dict, Token.from_dict)

# When set, only the operator may swap, on behalf of any account
OPERATOR_ADDR = _str_item("operator_addr")

FEE_ADDR = _str_item("fee_addr")
FEE_PCT_BUY = _uint_item("b_fee")
FEE_PCT_SELL = _uint_item("s_fee")

NET_TAKER_FEE = _uint_item("net_taker_fee")
NET_MAKER_FEE = _uint_item("net_maker_fee")
TAKER_STATS: Item[SwapStats] = Item("taker_stats", SwapStats.to_dict, SwapStats.from_dict)
MAKER_STATS: Item[SwapStats] = Item("maker_stats", SwapStats.to_dict, SwapStats.from_dict)

ACCOUNT_STATS: Map[str, AccountStats] = Map("account_stats", AccountStats.to_dict, AccountStats.from_dict)
OHLC_BARS: Map[int, OhlcBar] = Map("ohlc_bars", OhlcBar.to_dict, OhlcBar.from_dict, key_encoder=int_key)


def is_initialized(store: StateStore) -> bool:
    return CURVE.may_load(store) is not None


def init_state(store: StateStore, params: PoolParams) -> Curve:
    """
    Write the initial state of a pool.
    
    Fee fractions above 100% are clamped to 100%.
    
    Raises:
        ValidationError: if params are invalid or the pool exists
    """
    params.validate()
    if is_initialized(store):
        raise ValidationError("pool is already initialized")
    
    QUOTE_TOKEN.save(store, params.quote_token)
    BASE_TOKEN.save(store, params.base_token)
    FEE_ADDR.save(store, params.fee_addr)
    FEE_PCT_BUY.save(store, min(params.taker_fee_pct, PCT_SCALE))
    FEE_PCT_SELL.save(store, min(params.maker_fee_pct, PCT_SCALE))
    NET_TAKER_FEE.save(store, 0)
    NET_MAKER_FEE.save(store, 0)
    QUOTE_RESERVE_VIRTUAL.save(store, params.quote_reserve)
    TAKER_STATS.save(store, SwapStats())
    MAKER_STATS.save(store, SwapStats())
    
    if params.operator_addr is not None:
        OPERATOR_ADDR.save(store, params.operator_addr)
    
    curve = Curve.create(
        base_reserve=params.base_reserve,
        quote_reserve=params.quote_reserve,
        base_decimals=params.base_decimals,
        quote_decimals=params.quote_decimals,
    )
    CURVE.save(store, curve)
    logger.info(
        f"Initialized pool {params.base_token}/{params.quote_token} "
        f"k={curve.k} operator={params.operator_addr}"
    )
    return curve
