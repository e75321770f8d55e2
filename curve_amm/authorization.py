"""
Curve AMM - Initiator Resolution.

============================================================
PURPOSE
============================================================
Decides whose account a swap is booked to.

MODES (mutually exclusive):
    DIRECT
        No operator configured. The sender is the initiator
        and may not name anyone else.
    DELEGATED
        An operator is configured. Only the operator may swap,
        on behalf of the initiator it names (itself if none).

This is the only authorization check on swaps.

============================================================
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .errors import NotAuthorized
from .state import OPERATOR_ADDR
from .storage.store import StateStore
from .types import validate_address


class AuthorizationMode(Enum):
    """Swap authorization mode."""
    
    DIRECT = "direct"
    DELEGATED = "delegated"


@dataclass(frozen=True)
class InitiatorPolicy:
    """Authorization policy evaluated once per swap."""
    
    mode: AuthorizationMode
    operator: Optional[str] = None
    
    @classmethod
    def direct(cls) -> "InitiatorPolicy":
        return cls(AuthorizationMode.DIRECT)
    
    @classmethod
    def delegated(cls, operator: str) -> "InitiatorPolicy":
        return cls(AuthorizationMode.DELEGATED, operator)
    
    @classmethod
    def from_operator(cls, operator: Optional[str]) -> "InitiatorPolicy":
        if operator is None:
            return cls.direct()
        return cls.delegated(operator)
    
    @classmethod
    def load(cls, store: StateStore) -> "InitiatorPolicy":
        return cls.from_operator(OPERATOR_ADDR.may_load(store))
    
    def resolve(self, sender: str, initiator: Optional[str] = None, action: str = "swap") -> str:
        """
        Return the account credited for the call.
        
        Raises:
            NotAuthorized: sender may not act as requested
        """
        if self.mode is AuthorizationMode.DELEGATED:
            if sender != self.operator:
                raise NotAuthorized(f"only operator {self.operator} may {action}")
            if initiator is None:
                return sender
            return validate_address(initiator, "initiator")
        
        if initiator is not None and initiator != sender:
            raise NotAuthorized(
                "only an operator can act on behalf of another account, but none is configured"
            )
        return sender
