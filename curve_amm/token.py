"""
Curve AMM - Token Abstraction.

============================================================
PURPOSE
============================================================
Represents either leg of the pool:
- NATIVE: a ledger asset paid by attaching coins to a call
- TRACKED: an external token contract identified by address

Moving assets is not done here. ``transfer`` only describes
the movement as a deferred effect; the host executes it
after the call (see effects.py).

============================================================
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Optional


# ============================================================
# TOKEN KIND
# ============================================================

class TokenKind(Enum):
    """How the asset is held and moved."""
    
    NATIVE = "native"
    """Ledger asset identified by denom."""
    
    TRACKED = "tracked"
    """External token contract identified by address."""


# ============================================================
# COIN
# ============================================================

@dataclass(frozen=True)
class Coin:
    """A native payment attached to a call."""
    
    denom: str
    amount: int


# ============================================================
# TOKEN
# ============================================================

@dataclass(frozen=True)
class Token:
    """One side of the pool."""
    
    kind: TokenKind
    """Native denom or tracked contract."""
    
    identifier: str
    """Denom for native tokens, contract address for tracked ones."""
    
    @classmethod
    def native(cls, denom: str) -> "Token":
        return cls(TokenKind.NATIVE, denom)
    
    @classmethod
    def tracked(cls, address: str) -> "Token":
        return cls(TokenKind.TRACKED, address)
    
    @property
    def is_native(self) -> bool:
        return self.kind is TokenKind.NATIVE
    
    @property
    def address(self) -> Optional[str]:
        """Contract address, or None for native tokens."""
        if self.kind is TokenKind.TRACKED:
            return self.identifier
        return None
    
    @property
    def denom(self) -> str:
        """Name used in funds errors."""
        return self.identifier
    
    def transfer(self, recipient: str, amount: int) -> "TransferEffect":
        """Describe a transfer of this token to recipient."""
        return TransferEffect(token=self, recipient=recipient, amount=amount)
    
    def find_in_funds(self, funds: Iterable[Coin]) -> Optional[int]:
        """
        Find this token's amount among attached coins.
        
        Tracked tokens never arrive as attached coins.
        
        Returns:
            Attached amount, or None if not attached
        """
        if self.kind is not TokenKind.NATIVE:
            return None
        for coin in funds:
            if coin.denom == self.identifier:
                return coin.amount
        return None
    
    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "identifier": self.identifier}
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Token":
        return cls(TokenKind(data["kind"]), data["identifier"])
    
    def __str__(self) -> str:
        return f"{self.kind.value}:{self.identifier}"


# ============================================================
# DEFERRED TRANSFER
# ============================================================

@dataclass(frozen=True)
class TransferEffect:
    """A transfer requested by a call, executed by the host afterward."""
    
    token: Token
    recipient: str
    amount: int
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "token": self.token.to_dict(),
            "recipient": self.recipient,
            "amount": str(self.amount),
        }
