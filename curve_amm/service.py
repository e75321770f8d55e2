"""
Curve AMM - Curve Service.

============================================================
PURPOSE
============================================================
Host-facing entry point for a single curve pool.

Every operation runs as one all-or-nothing unit:
1. Open a transaction on the state store
2. Execute the operation against a StateStore
3. Hand deferred transfers to the EffectRunner
4. Commit; on ANY exception roll back and re-raise

OPERATIONS:
- initialize: write the initial pool state
- buy / sell: swap with native or explicit amounts
- receive: swap funded by a tracked token contract
- on_balance_change: base token balance notifications
- set_config: accepted, no effect
- query_account / query_overview / query_config

============================================================
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Generator, Optional, TypeVar

from .config import CostBasisConfig
from .cost_basis import BalanceChangeEvent, CostBasisTracker
from .effects import EffectExecutionError, EffectRunner, RecordingEffectRunner
from .errors import CurveError, NotAuthorized, ValidationError
from .executor import SwapExecutor
from .queries import (
    AccountResponse,
    ConfigResponse,
    OverviewResponse,
    query_account,
    query_config,
    query_overview,
)
from .state import BASE_TOKEN, CURVE, OPERATOR_ADDR, QUOTE_TOKEN, init_state
from .storage.engine import Database
from .storage.store import StateStore
from .token import Token
from .types import CallContext, PoolParams, Receipt, SwapSide, TradeReceipt, validate_address


logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Receipt)


@dataclass(frozen=True)
class ReceiveHook:
    """Instruction forwarded by a tracked token along with a payment."""
    
    side: SwapSide
    initiator: Optional[str] = None
    min_out_amount: Optional[int] = None


class CurveService:
    """
    Curve pool service.
    
    AUTHORITY BOUNDARIES:
    - CAN: Swap against the pool, book statistics, request transfers
    - MUST NOT: Move assets itself (transfers are deferred effects)
    - MUST NOT: Leave partial state behind a failed call
    """
    
    def __init__(
        self,
        database: Database,
        effect_runner: Optional[EffectRunner] = None,
        cost_basis: Optional[CostBasisConfig] = None,
    ):
        self._db = database
        self._effects = effect_runner or RecordingEffectRunner()
        self._cost_basis = cost_basis or CostBasisConfig()
    
    # --------------------------------------------------------
    # TRANSACTION PLUMBING
    # --------------------------------------------------------
    
    @contextmanager
    def _call(self, action: str) -> Generator[StateStore, None, None]:
        try:
            with self._db.transaction_scope() as session:
                yield StateStore(session)
        except CurveError as e:
            logger.warning(f"{action} rejected [{e.code}]: {e}")
            raise
        except EffectExecutionError as e:
            logger.error(f"{action} rolled back, deferred transfer failed: {e}")
            raise
    
    def _execute(self, action: str, operation: Callable[[StateStore], R]) -> R:
        with self._call(action) as store:
            receipt = operation(store)
            self._effects.run(receipt.effects)
        return receipt
    
    # --------------------------------------------------------
    # LIFECYCLE
    # --------------------------------------------------------
    
    def initialize(self, params: PoolParams) -> Receipt:
        def operation(store: StateStore) -> Receipt:
            init_state(store, params)
            return Receipt(action="initialize")
        
        return self._execute("initialize", operation)
    
    # --------------------------------------------------------
    # SWAPS
    # --------------------------------------------------------
    
    def buy(
        self,
        ctx: CallContext,
        amount: Optional[int] = None,
        initiator: Optional[str] = None,
        min_out_amount: Optional[int] = None,
    ) -> TradeReceipt:
        """Buy base with attached quote coins."""
        return self._direct_swap(ctx, SwapSide.BUY, amount, initiator, min_out_amount)
    
    def sell(
        self,
        ctx: CallContext,
        amount: Optional[int] = None,
        initiator: Optional[str] = None,
        min_out_amount: Optional[int] = None,
    ) -> TradeReceipt:
        """Sell attached base coins for quote."""
        return self._direct_swap(ctx, SwapSide.SELL, amount, initiator, min_out_amount)
    
    def _direct_swap(
        self,
        ctx: CallContext,
        side: SwapSide,
        amount: Optional[int],
        initiator: Optional[str],
        min_out_amount: Optional[int],
    ) -> TradeReceipt:
        def operation(store: StateStore) -> TradeReceipt:
            token = QUOTE_TOKEN.load(store) if side is SwapSide.BUY else BASE_TOKEN.load(store)
            # Tracked payments can only be verified by the token contract
            if not token.is_native:
                raise ValidationError(f"{token.denom} is a tracked token, pay through receive")
            executor = SwapExecutor(store)
            if side is SwapSide.BUY:
                return executor.buy(ctx, amount, initiator, min_out_amount)
            return executor.sell(ctx, amount, initiator, min_out_amount)
        
        receipt = self._execute(side.value, operation)
        self._log_trade(receipt)
        return receipt
    
    def receive(
        self,
        ctx: CallContext,
        token_sender: str,
        amount: int,
        hook: ReceiveHook,
    ) -> TradeReceipt:
        """
        Swap funded by a tracked token transfer.
        
        ctx.sender is the token contract; token_sender is the
        account whose tokens were sent.
        """
        token_sender = validate_address(token_sender, "token_sender")
        
        def operation(store: StateStore) -> TradeReceipt:
            operator = OPERATOR_ADDR.may_load(store)
            if operator is not None and operator != token_sender:
                raise NotAuthorized("Only the defined operator can buy and sell")
            
            expected = QUOTE_TOKEN.load(store) if hook.side is SwapSide.BUY else BASE_TOKEN.load(store)
            _ensure_is_tracked_sender(expected, ctx.sender)
            
            swap_ctx = CallContext(sender=token_sender, block_time=ctx.block_time)
            executor = SwapExecutor(store)
            if hook.side is SwapSide.BUY:
                return executor.buy(swap_ctx, amount, hook.initiator, hook.min_out_amount)
            return executor.sell(swap_ctx, amount, hook.initiator, hook.min_out_amount)
        
        receipt = self._execute("receive", operation)
        self._log_trade(receipt)
        return receipt
    
    def _log_trade(self, receipt: TradeReceipt) -> None:
        logger.info(
            f"{receipt.action} by {receipt.initiator}: "
            f"in={receipt.in_amount} out={receipt.out_amount} fee={receipt.fee_amount}"
        )
    
    # --------------------------------------------------------
    # COST BASIS
    # --------------------------------------------------------
    
    def on_balance_change(self, ctx: CallContext, event: BalanceChangeEvent) -> Receipt:
        """Apply a balance change reported by the base token contract."""
        def operation(store: StateStore) -> Receipt:
            base_token = BASE_TOKEN.load(store)
            if base_token.address is None or ctx.sender != base_token.address:
                raise NotAuthorized(
                    f"OnBalanceChange received msg from unrecognized token: {ctx.sender}"
                )
            tracker = CostBasisTracker(
                store,
                CURVE.load(store).quote_decimals,
                self._cost_basis.recipient_adjustment,
            )
            tracker.apply(event)
            return Receipt(action="on_balance_change")
        
        return self._execute("on_balance_change", operation)
    
    # --------------------------------------------------------
    # CONFIG
    # --------------------------------------------------------
    
    def set_config(self, ctx: CallContext) -> Receipt:
        """Accepted for host compatibility; the pool has no mutable settings."""
        return self._execute("set_config", lambda store: Receipt(action="set_config"))
    
    # --------------------------------------------------------
    # QUERIES
    # --------------------------------------------------------
    
    def query_account(self, address: str) -> AccountResponse:
        with self._db.session() as session:
            return query_account(StateStore(session), address)
    
    def query_overview(self) -> OverviewResponse:
        with self._db.session() as session:
            return query_overview(StateStore(session))
    
    def query_config(self) -> ConfigResponse:
        with self._db.session() as session:
            return query_config(StateStore(session))


def _ensure_is_tracked_sender(expected: Token, sender: str) -> None:
    if expected.address is None:
        raise NotAuthorized("Curve token is not a tracked token")
    if expected.address != sender:
        raise NotAuthorized("Received unrecognized tracked token")
