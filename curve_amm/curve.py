"""
Curve AMM - Constant-Product Curve.

============================================================
PURPOSE
============================================================
Pure reserve math for the bonding curve:

    base_reserve * quote_reserve ~= k

After every swap the reserve being paid out is recomputed as
floor(k / other_reserve), so the truncated remainder always
stays with the pool:

    0 <= k - base_reserve * quote_reserve < reserve_divisor

The quote reserve includes a virtual offset injected at
creation; it is tracked separately in state, not here.

============================================================
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .errors import TooMuchSlippage
from .math import add_u128, div_u256, mul_ratio_u128, mul_u256, pow10, sub_u128, to_u128


@dataclass
class Curve:
    """Reserves and constant product of the pool."""
    
    k: int
    """Constant product (256-bit)."""
    
    base_reserve: int
    base_decimals: int
    quote_reserve: int
    quote_decimals: int
    
    @classmethod
    def create(
        cls,
        base_reserve: int,
        quote_reserve: int,
        base_decimals: int,
        quote_decimals: int,
    ) -> "Curve":
        return cls(
            k=mul_u256(base_reserve, quote_reserve),
            base_reserve=base_reserve,
            base_decimals=base_decimals,
            quote_reserve=quote_reserve,
            quote_decimals=quote_decimals,
        )
    
    # --------------------------------------------------------
    # SWAPS
    # --------------------------------------------------------
    
    def buy(self, in_amount: int, min_out_amount: Optional[int] = None) -> int:
        """
        Swap quote in for base out.
        
        Args:
            in_amount: Quote amount entering the curve (after fees)
            min_out_amount: Minimum acceptable base output
            
        Returns:
            Base amount leaving the curve
        """
        new_quote_reserve, new_base_reserve, out_amount = _swap(
            self.k, self.quote_reserve, self.base_reserve, in_amount
        )
        self.quote_reserve = new_quote_reserve
        self.base_reserve = new_base_reserve
        _enforce_slippage(out_amount, min_out_amount)
        return out_amount
    
    def sell(self, in_amount: int, min_out_amount: Optional[int] = None) -> int:
        """
        Swap base in for quote out.
        
        Args:
            in_amount: Base amount entering the curve
            min_out_amount: Minimum acceptable quote output
            
        Returns:
            Quote amount leaving the curve (before fees)
        """
        new_base_reserve, new_quote_reserve, out_amount = _swap(
            self.k, self.base_reserve, self.quote_reserve, in_amount
        )
        self.base_reserve = new_base_reserve
        self.quote_reserve = new_quote_reserve
        _enforce_slippage(out_amount, min_out_amount)
        return out_amount
    
    # --------------------------------------------------------
    # PRICES
    # --------------------------------------------------------
    
    def quote_price(self) -> int:
        """Price of one base unit in quote, scaled by 10^quote_decimals."""
        return mul_ratio_u128(self.quote_reserve, pow10(self.quote_decimals), self.base_reserve)
    
    def base_price(self) -> int:
        """Price of one quote unit in base, scaled by 10^quote_decimals."""
        return mul_ratio_u128(self.base_reserve, pow10(self.quote_decimals), self.quote_reserve)
    
    def to_base_amount(self, quote_amount: int) -> int:
        return mul_ratio_u128(quote_amount, pow10(self.quote_decimals), self.base_price())
    
    def to_quote_amount(self, base_amount: int) -> int:
        return mul_ratio_u128(base_amount, pow10(self.base_decimals), self.quote_price())
    
    # --------------------------------------------------------
    # SERIALIZATION
    # --------------------------------------------------------
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "k": str(self.k),
            "base_reserve": str(self.base_reserve),
            "base_decimals": self.base_decimals,
            "quote_reserve": str(self.quote_reserve),
            "quote_decimals": self.quote_decimals,
        }
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Curve":
        return cls(
            k=int(data["k"]),
            base_reserve=int(data["base_reserve"]),
            base_decimals=int(data["base_decimals"]),
            quote_reserve=int(data["quote_reserve"]),
            quote_decimals=int(data["quote_decimals"]),
        )


def _swap(k: int, in_reserve: int, out_reserve: int, in_amount: int) -> Tuple[int, int, int]:
    """
    Returns:
        (new_in_reserve, new_out_reserve, out_amount)
    """
    new_in_reserve = add_u128(in_reserve, in_amount)
    new_out_reserve = to_u128(div_u256(k, new_in_reserve))
    # Underflows when the pool is exhausted or in_amount is degenerate
    out_amount = sub_u128(out_reserve, new_out_reserve)
    return new_in_reserve, new_out_reserve, out_amount


def _enforce_slippage(out_amount: int, min_out_amount: Optional[int]) -> None:
    if min_out_amount is not None and out_amount < min_out_amount:
        raise TooMuchSlippage(out_amount, min_out_amount)
