"""
Curve AMM - Statistics Models.

============================================================
PURPOSE
============================================================
Records kept alongside the curve:
- AccountStats: per-account counters, flows and total cost
- SwapStats: global count and largest swap, per side
- OhlcBar: one-minute candlestick with volumes

All amounts are unsigned integers in token base units and are
serialized as decimal strings.

============================================================
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .math import add_u64


# ============================================================
# ACCOUNT STATS
# ============================================================

@dataclass
class AccountStats:
    """
    Per-account trading record.
    
    Flows are from the account's point of view: a buy sends
    quote out and brings base in.
    """
    
    n_buys: int = 0
    n_sells: int = 0
    net_quote_in: int = 0
    net_quote_out: int = 0
    net_base_in: int = 0
    net_base_out: int = 0
    
    total_cost: int = 0
    """Quote spent on currently held base; drives the cost basis."""
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "n_buys": self.n_buys,
            "n_sells": self.n_sells,
            "net_quote_in": str(self.net_quote_in),
            "net_quote_out": str(self.net_quote_out),
            "net_base_in": str(self.net_base_in),
            "net_base_out": str(self.net_base_out),
            "total_cost": str(self.total_cost),
        }
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AccountStats":
        return cls(
            n_buys=int(data["n_buys"]),
            n_sells=int(data["n_sells"]),
            net_quote_in=int(data["net_quote_in"]),
            net_quote_out=int(data["net_quote_out"]),
            net_base_in=int(data["net_base_in"]),
            net_base_out=int(data["net_base_out"]),
            total_cost=int(data["total_cost"]),
        )


# ============================================================
# SWAP STATS
# ============================================================

@dataclass(frozen=True)
class SwapRecord:
    """A notable swap."""
    
    amount: int
    initiator: str
    timestamp: int
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "amount": str(self.amount),
            "initiator": self.initiator,
            "timestamp": self.timestamp,
        }
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SwapRecord":
        return cls(int(data["amount"]), data["initiator"], int(data["timestamp"]))


@dataclass
class SwapStats:
    """Global statistics for one side of the book."""
    
    n: int = 0
    max: Optional[SwapRecord] = None
    
    def record(self, amount: int, initiator: str, timestamp: int) -> None:
        """Count a swap; it replaces max only if strictly larger."""
        self.n = add_u64(self.n, 1)
        if self.max is None or amount > self.max.amount:
            self.max = SwapRecord(amount, initiator, timestamp)
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "n": self.n,
            "max": None if self.max is None else self.max.to_dict(),
        }
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SwapStats":
        raw_max = data.get("max")
        return cls(
            n=int(data["n"]),
            max=None if raw_max is None else SwapRecord.from_dict(raw_max),
        )


# ============================================================
# OHLC BAR
# ============================================================

@dataclass
class OhlcBar:
    """Candlestick for one fixed-width time bucket."""
    
    o: int
    h: int
    l: int
    c: int
    
    vb: int
    """Base volume."""
    
    vq: int
    """Quote volume."""
    
    n: int
    """Trade count."""
    
    t: int
    """Bucket start, unix seconds."""
    
    @classmethod
    def open(cls, t: int, price: int) -> "OhlcBar":
        return cls(o=price, h=price, l=price, c=price, vb=0, vq=0, n=0, t=t)
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "o": str(self.o),
            "h": str(self.h),
            "l": str(self.l),
            "c": str(self.c),
            "vb": str(self.vb),
            "vq": str(self.vq),
            "n": self.n,
            "t": self.t,
        }
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OhlcBar":
        return cls(
            o=int(data["o"]),
            h=int(data["h"]),
            l=int(data["l"]),
            c=int(data["c"]),
            vb=int(data["vb"]),
            vq=int(data["vq"]),
            n=int(data["n"]),
            t=int(data["t"]),
        )
