"""
Curve AMM - Cost Basis Tracking.

============================================================
PURPOSE
============================================================
Keeps each account's total_cost consistent with its base
balance as the base token moves outside of swaps.

Notifications come from the base token's own transfer logic
and carry the balances BEFORE the change.

SENDER SIDE (transfer, burn):
    remaining == 0  -> total_cost = 0
    otherwise       -> total_cost -= delta * avg_cost_basis

RECIPIENT SIDE (transfer, mint):
    total_cost adjusted by delta directly, no price conversion
    (direction set by CostBasisConfig.recipient_adjustment)

============================================================
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .config import RecipientCostAdjustment
from .errors import ValidationError
from .math import add_u128, mul_ratio_u128, pow10, sub_u128
from .models import AccountStats
from .state import ACCOUNT_STATS
from .storage.store import StateStore
from .types import validate_address, validate_uint128


logger = logging.getLogger(__name__)


# ============================================================
# BALANCE CHANGE EVENTS
# ============================================================

class BalanceChangeKind(Enum):
    """Kind of base token balance change."""
    
    TRANSFER = "transfer"
    MINT = "mint"
    BURN = "burn"


@dataclass(frozen=True)
class BalanceChangeEvent:
    """Notification of a base token balance change."""
    
    kind: BalanceChangeKind
    initiator: str
    amount: int
    recipient: Optional[str] = None
    initiator_balance: Optional[int] = None
    recipient_balance: Optional[int] = None
    
    @classmethod
    def transfer(
        cls,
        initiator: str,
        recipient: str,
        initiator_balance: int,
        recipient_balance: int,
        amount: int,
    ) -> "BalanceChangeEvent":
        return cls(
            BalanceChangeKind.TRANSFER,
            initiator=initiator,
            recipient=recipient,
            initiator_balance=initiator_balance,
            recipient_balance=recipient_balance,
            amount=amount,
        )
    
    @classmethod
    def burn(cls, initiator: str, initiator_balance: int, amount: int) -> "BalanceChangeEvent":
        return cls(
            BalanceChangeKind.BURN,
            initiator=initiator,
            initiator_balance=initiator_balance,
            amount=amount,
        )
    
    @classmethod
    def mint(
        cls,
        initiator: str,
        recipient: str,
        recipient_balance: int,
        amount: int,
    ) -> "BalanceChangeEvent":
        return cls(
            BalanceChangeKind.MINT,
            initiator=initiator,
            recipient=recipient,
            recipient_balance=recipient_balance,
            amount=amount,
        )
    
    @property
    def debits_initiator(self) -> bool:
        return self.kind in (BalanceChangeKind.TRANSFER, BalanceChangeKind.BURN)
    
    @property
    def credits_recipient(self) -> bool:
        return self.kind in (BalanceChangeKind.TRANSFER, BalanceChangeKind.MINT)
    
    def validate(self) -> None:
        validate_address(self.initiator, "initiator")
        validate_uint128(self.amount, "amount")
        if self.debits_initiator:
            if self.initiator_balance is None:
                raise ValidationError(f"{self.kind.value} event requires initiator_balance")
            validate_uint128(self.initiator_balance, "initiator_balance")
        if self.credits_recipient:
            validate_address(self.recipient, "recipient")


# ============================================================
# TRACKER
# ============================================================

def calc_avg_cost_basis(quote_decimals: int, total_cost: int, balance: int) -> int:
    """Average quote cost per base unit, scaled by 10^quote_decimals."""
    return mul_ratio_u128(total_cost, pow10(quote_decimals), balance)


class CostBasisTracker:
    """Applies balance-change notifications to account total cost."""
    
    def __init__(
        self,
        store: StateStore,
        quote_decimals: int,
        recipient_adjustment: RecipientCostAdjustment = RecipientCostAdjustment.SUBTRACT,
    ):
        self._store = store
        self._quote_decimals = quote_decimals
        self._recipient_adjustment = recipient_adjustment
    
    def apply(self, event: BalanceChangeEvent) -> None:
        event.validate()
        if event.debits_initiator:
            self.debit(event.initiator, event.initiator_balance, event.amount)
        if event.credits_recipient:
            self.credit(event.recipient, event.amount)
    
    def debit(self, account: str, balance_before: int, delta: int) -> AccountStats:
        """
        Remove the cost of delta units leaving the account.
        
        Raises:
            ArithmeticUnderflow: delta exceeds the balance, or the
                removed cost exceeds the stored total cost
        """
        remaining = sub_u128(balance_before, delta)
        
        def update(stats: Optional[AccountStats]) -> AccountStats:
            stats = stats or AccountStats()
            if remaining == 0:
                logger.debug(f"Balance of {account} emptied, total cost reset")
                stats.total_cost = 0
            else:
                scale = pow10(self._quote_decimals)
                cost_basis = calc_avg_cost_basis(self._quote_decimals, stats.total_cost, balance_before)
                removed = mul_ratio_u128(delta, cost_basis, scale)
                stats.total_cost = sub_u128(stats.total_cost, removed)
            return stats
        
        return ACCOUNT_STATS.update(self._store, account, update)
    
    def credit(self, account: str, delta: int) -> AccountStats:
        def update(stats: Optional[AccountStats]) -> AccountStats:
            stats = stats or AccountStats()
            if self._recipient_adjustment is RecipientCostAdjustment.ADD:
                stats.total_cost = add_u128(stats.total_cost, delta)
            else:
                stats.total_cost = sub_u128(stats.total_cost, delta)
            return stats
        
        return ACCOUNT_STATS.update(self._store, account, update)
