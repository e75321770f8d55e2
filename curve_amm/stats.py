"""
Curve AMM - Statistics & Candlesticks.

============================================================
PURPOSE
============================================================
Incremental bookkeeping after every swap:
- Per-account counters and flows
- Global taker/maker swap count and largest swap
- One-minute OHLCV candlesticks

OHLC RULES:
- Bucket key = floor(timestamp / 60) * 60
- New bucket: o = h = l = c = price
- Existing bucket: h/l extend, c is overwritten
- Volumes and trade count always accumulate
- Buckets are append-only; a past bucket is never revisited

============================================================
"""

from typing import List, Optional

from .math import add_u32, add_u128
from .models import AccountStats, OhlcBar, SwapStats
from .state import ACCOUNT_STATS, MAKER_STATS, OHLC_BARS, TAKER_STATS
from .storage.store import StateStore
from .types import SwapSide


OHLC_INTERVAL_SECONDS = 60


def bucket_start(timestamp: int, interval: int = OHLC_INTERVAL_SECONDS) -> int:
    return timestamp - (timestamp % interval)


def apply_trade(bar: OhlcBar, price: int, base_volume: int, quote_volume: int) -> OhlcBar:
    """Fold one trade into a bar."""
    if bar.n > 0:
        bar.h = max(bar.h, price)
        bar.l = min(bar.l, price)
    else:
        bar.o = bar.h = bar.l = price
    bar.c = price
    bar.vb = add_u128(bar.vb, base_volume)
    bar.vq = add_u128(bar.vq, quote_volume)
    bar.n = add_u32(bar.n, 1)
    return bar


class StatsAggregator:
    """Applies swap results to the persisted statistics."""
    
    def __init__(self, store: StateStore):
        self._store = store
    
    # --------------------------------------------------------
    # ACCOUNTS
    # --------------------------------------------------------
    
    def record_account_swap(
        self,
        initiator: str,
        side: SwapSide,
        quote_amount: int,
        base_amount: int,
    ) -> AccountStats:
        """
        Book a swap to the initiator's account.
        
        Args:
            initiator: Account credited with the swap
            side: BUY or SELL
            quote_amount: Quote paid (buy) or received (sell)
            base_amount: Base received (buy) or paid (sell)
        """
        def update(stats: Optional[AccountStats]) -> AccountStats:
            stats = stats or AccountStats()
            if side is SwapSide.BUY:
                stats.n_buys = add_u32(stats.n_buys, 1)
                stats.net_quote_out = add_u128(stats.net_quote_out, quote_amount)
                stats.net_base_in = add_u128(stats.net_base_in, base_amount)
                stats.total_cost = add_u128(stats.total_cost, quote_amount)
            else:
                stats.n_sells = add_u32(stats.n_sells, 1)
                stats.net_quote_in = add_u128(stats.net_quote_in, quote_amount)
                stats.net_base_out = add_u128(stats.net_base_out, base_amount)
            return stats
        
        return ACCOUNT_STATS.update(self._store, initiator, update)
    
    # --------------------------------------------------------
    # GLOBAL SWAP STATS
    # --------------------------------------------------------
    
    def record_swap(self, side: SwapSide, amount: int, initiator: str, timestamp: int) -> SwapStats:
        item = TAKER_STATS if side is SwapSide.BUY else MAKER_STATS
        
        def update(stats: Optional[SwapStats]) -> SwapStats:
            stats = stats or SwapStats()
            stats.record(amount, initiator, timestamp)
            return stats
        
        return item.update(self._store, update)
    
    # --------------------------------------------------------
    # CANDLESTICKS
    # --------------------------------------------------------
    
    def upsert_ohlc(
        self,
        timestamp: int,
        price: int,
        base_volume: int,
        quote_volume: int,
    ) -> OhlcBar:
        t = bucket_start(timestamp)
        return OHLC_BARS.update(
            self._store,
            t,
            lambda bar: apply_trade(bar or OhlcBar.open(t, price), price, base_volume, quote_volume),
        )
    
    def bars(self, start: Optional[int] = None, end: Optional[int] = None) -> List[OhlcBar]:
        """Bars with start <= t < end, oldest first."""
        return OHLC_BARS.range(self._store, start, end)
