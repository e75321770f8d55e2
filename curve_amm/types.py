"""
Curve AMM - Types.

============================================================
PURPOSE
============================================================
Shared call-level types:
- CallContext: who is calling, when, and with what payment
- PoolParams: parameters used to initialize a pool
- Receipt / TradeReceipt: results of executed calls

============================================================
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .errors import ValidationError
from .math import U64_MAX, U128_MAX
from .token import Coin, Token, TransferEffect


MAX_DECIMALS = 38
"""10 ** 38 is the largest power of ten that fits in 128 bits."""


# ============================================================
# ENUMS
# ============================================================

class SwapSide(Enum):
    """Direction of a swap, from the trader's point of view."""
    
    BUY = "buy"
    """Quote in, base out (taker)."""
    
    SELL = "sell"
    """Base in, quote out (maker)."""


# ============================================================
# VALIDATION HELPERS
# ============================================================

def validate_address(address: Optional[str], field_name: str = "address") -> str:
    """Reject empty or whitespace-bearing account identifiers."""
    if not isinstance(address, str) or not address or address != address.strip() or " " in address:
        raise ValidationError(f"invalid {field_name}: {address!r}")
    return address


def validate_uint64(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0 or value > U64_MAX:
        raise ValidationError(f"{field_name} must be an unsigned 64-bit integer, got {value!r}")
    return value


def validate_uint128(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0 or value > U128_MAX:
        raise ValidationError(f"{field_name} must be an unsigned 128-bit integer, got {value!r}")
    return value


# ============================================================
# CALL CONTEXT
# ============================================================

@dataclass(frozen=True)
class CallContext:
    """
    Environment of a single call, supplied by the host.
    
    A call is serialized and all-or-nothing; nothing else runs
    against the same state while it executes.
    """
    
    sender: str
    """Immediate caller."""
    
    block_time: int
    """Execution time in unix seconds."""
    
    funds: Tuple[Coin, ...] = ()
    """Native coins attached to the call."""


# ============================================================
# POOL PARAMETERS
# ============================================================

@dataclass
class PoolParams:
    """Parameters for initializing a curve pool."""
    
    base_token: Token
    """Asset sold by the pool; its creation happens outside the core."""
    
    base_decimals: int
    base_reserve: int
    
    quote_token: Token
    quote_decimals: int
    
    quote_reserve: int
    """Initial virtual quote reserve; never withdrawable."""
    
    fee_addr: str
    """Recipient of taker and maker fees."""
    
    taker_fee_pct: int = 0
    """Buy-side fee in parts-per-million."""
    
    maker_fee_pct: int = 0
    """Sell-side fee in parts-per-million."""
    
    operator_addr: Optional[str] = None
    """Exclusive controller allowed to swap on behalf of accounts."""
    
    def validate(self) -> None:
        """Raise ValidationError if the pool cannot be created as given."""
        for name in ("base_reserve", "quote_reserve", "taker_fee_pct", "maker_fee_pct"):
            validate_uint128(getattr(self, name), name)
        if self.base_reserve == 0 or self.quote_reserve == 0:
            raise ValidationError("initial reserves must be non-zero")
        for name in ("base_decimals", "quote_decimals"):
            decimals = getattr(self, name)
            if isinstance(decimals, bool) or not isinstance(decimals, int) or not 0 <= decimals <= MAX_DECIMALS:
                raise ValidationError(f"{name} must be between 0 and {MAX_DECIMALS}, got {decimals!r}")
        if self.base_token == self.quote_token:
            raise ValidationError("base and quote tokens must differ")
        validate_address(self.fee_addr, "fee_addr")
        if self.operator_addr is not None:
            validate_address(self.operator_addr, "operator_addr")
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PoolParams":
        return cls(
            base_token=Token.from_dict(data["base_token"]),
            base_decimals=int(data["base_decimals"]),
            base_reserve=int(data["base_reserve"]),
            quote_token=Token.from_dict(data["quote_token"]),
            quote_decimals=int(data["quote_decimals"]),
            quote_reserve=int(data["quote_reserve"]),
            fee_addr=data["fee_addr"],
            taker_fee_pct=int(data.get("taker_fee_pct", 0)),
            maker_fee_pct=int(data.get("maker_fee_pct", 0)),
            operator_addr=data.get("operator_addr"),
        )
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "base_token": self.base_token.to_dict(),
            "base_decimals": self.base_decimals,
            "base_reserve": str(self.base_reserve),
            "quote_token": self.quote_token.to_dict(),
            "quote_decimals": self.quote_decimals,
            "quote_reserve": str(self.quote_reserve),
            "fee_addr": self.fee_addr,
            "taker_fee_pct": str(self.taker_fee_pct),
            "maker_fee_pct": str(self.maker_fee_pct),
            "operator_addr": self.operator_addr,
        }


# ============================================================
# RECEIPTS
# ============================================================

@dataclass
class Receipt:
    """Result of a non-trading call."""
    
    action: str
    effects: List[TransferEffect] = field(default_factory=list)
    
    def attributes(self) -> List[Tuple[str, str]]:
        return [("action", self.action)]


@dataclass
class TradeReceipt(Receipt):
    """Result of a buy or sell."""
    
    in_amount: int = 0
    """Gross amount paid in by the trader."""
    
    out_amount: int = 0
    """Amount delivered to the initiator."""
    
    fee_amount: int = 0
    initiator: str = ""
    
    def attributes(self) -> List[Tuple[str, str]]:
        return [
            ("action", self.action),
            ("in_amount", str(self.in_amount)),
            ("out_amount", str(self.out_amount)),
        ]
