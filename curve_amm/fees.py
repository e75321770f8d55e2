"""
Curve AMM - Fees.

============================================================
PURPOSE
============================================================
Percentage fees with a fixed parts-per-million scale.

    fee = floor(amount * fee_pct / 1_000_000)

- Buy (taker) fee comes off the quote paid in, BEFORE the curve
- Sell (maker) fee comes off the quote paid out, AFTER the curve

Every computed fee, zero included, is added to the lifetime
total for its side.

============================================================
"""

from dataclasses import dataclass
from typing import Tuple

from .math import add_u128, mul_pct_u128, sub_u128
from .state import FEE_ADDR, FEE_PCT_BUY, FEE_PCT_SELL, NET_MAKER_FEE, NET_TAKER_FEE
from .storage.store import StateStore


@dataclass(frozen=True)
class FeeSchedule:
    """Fee fractions and recipient."""
    
    taker_pct: int
    maker_pct: int
    recipient: str


def compute_fee(amount: int, fee_pct: int) -> int:
    return mul_pct_u128(amount, fee_pct)


class FeeEngine:
    """Computes swap fees and keeps the lifetime totals."""
    
    def __init__(self, store: StateStore):
        self._store = store
        self._schedule = None
    
    @property
    def schedule(self) -> FeeSchedule:
        if self._schedule is None:
            self._schedule = FeeSchedule(
                taker_pct=FEE_PCT_BUY.load(self._store),
                maker_pct=FEE_PCT_SELL.load(self._store),
                recipient=FEE_ADDR.load(self._store),
            )
        return self._schedule
    
    def take_buy_fee(self, gross_in: int) -> Tuple[int, int]:
        """
        Returns:
            (fee, amount entering the curve)
        """
        fee = compute_fee(gross_in, self.schedule.taker_pct)
        NET_TAKER_FEE.update(self._store, lambda total: add_u128(total or 0, fee))
        return fee, sub_u128(gross_in, fee)
    
    def take_sell_fee(self, curve_out: int) -> Tuple[int, int]:
        """
        Returns:
            (fee, amount delivered to the trader)
        """
        fee = compute_fee(curve_out, self.schedule.maker_pct)
        NET_MAKER_FEE.update(self._store, lambda total: add_u128(total or 0, fee))
        return fee, sub_u128(curve_out, fee)
