"""
Curve AMM - Swap Executor.

============================================================
PURPOSE
============================================================
Runs a single buy or sell against the persisted pool.

EXECUTION PHASES:
1. Resolve the gross input (explicit amount or attached coins)
2. Extract the fee and add it to the lifetime total
3. Swap on the curve with the caller's slippage bound
4. Resolve the initiator (direct or operator-delegated)
5. Update the initiator's account stats
6. Update global taker/maker stats
7. Update the current one-minute candlestick
8. Build the receipt with deferred transfers

Phases write through the call's StateStore. Any exception
aborts the call and the owning transaction discards every
write, including reserve changes made before a slippage
failure.

============================================================
"""

from typing import List, Optional

from .authorization import InitiatorPolicy
from .curve import Curve
from .errors import InsufficientFunds, MissingFunds, ValidationError
from .fees import FeeEngine
from .state import BASE_TOKEN, CURVE, QUOTE_TOKEN
from .stats import StatsAggregator
from .storage.store import StateStore
from .token import Token, TransferEffect
from .types import CallContext, SwapSide, TradeReceipt, validate_uint128, validate_uint64


def resolve_gross_input(token: Token, amount: Optional[int], ctx: CallContext) -> int:
    """
    Determine how much of token the caller is paying in.
    
    Native tokens must be attached to the call; an explicit
    amount, if given, has to match the attachment. Tracked
    tokens arrive through the receive hook with an explicit
    amount.
    
    Raises:
        MissingFunds: nothing to pay with
        InsufficientFunds: attached amount differs from amount
        ValidationError: zero or malformed amount
    """
    if token.is_native:
        attached = token.find_in_funds(ctx.funds)
        if attached is None:
            raise MissingFunds(token.denom)
        if amount is not None and attached != amount:
            raise InsufficientFunds(token.denom, attached, amount)
        gross = attached
    else:
        if amount is None:
            raise MissingFunds(token.denom)
        gross = amount
    
    validate_uint128(gross, "amount")
    if gross == 0:
        raise ValidationError(f"cannot swap zero {token.denom}")
    return gross


class SwapExecutor:
    """Orchestrates buys and sells for one call."""
    
    def __init__(self, store: StateStore):
        self._store = store
        self._fees = FeeEngine(store)
        self._stats = StatsAggregator(store)
    
    def buy(
        self,
        ctx: CallContext,
        amount: Optional[int] = None,
        initiator: Optional[str] = None,
        min_out_amount: Optional[int] = None,
    ) -> TradeReceipt:
        """Pay quote, receive base."""
        validate_uint64(ctx.block_time, "block_time")
        quote_token = QUOTE_TOKEN.load(self._store)
        base_token = BASE_TOKEN.load(self._store)
        curve = CURVE.load(self._store)
        
        gross_in = resolve_gross_input(quote_token, amount, ctx)
        fee, curve_in = self._fees.take_buy_fee(gross_in)
        out_amount = curve.buy(curve_in, min_out_amount)
        CURVE.save(self._store, curve)
        
        account = InitiatorPolicy.load(self._store).resolve(ctx.sender, initiator, "buy")
        
        self._stats.record_account_swap(account, SwapSide.BUY, gross_in, out_amount)
        self._stats.record_swap(SwapSide.BUY, gross_in, account, ctx.block_time)
        self._record_candle(ctx, curve, base_volume=out_amount, quote_volume=curve_in)
        
        effects = self._fee_effects(quote_token, fee)
        effects.append(base_token.transfer(account, out_amount))
        
        return TradeReceipt(
            action=SwapSide.BUY.value,
            effects=effects,
            in_amount=gross_in,
            out_amount=out_amount,
            fee_amount=fee,
            initiator=account,
        )
    
    def sell(
        self,
        ctx: CallContext,
        amount: Optional[int],
        initiator: Optional[str] = None,
        min_out_amount: Optional[int] = None,
    ) -> TradeReceipt:
        """Pay base, receive quote."""
        validate_uint64(ctx.block_time, "block_time")
        quote_token = QUOTE_TOKEN.load(self._store)
        base_token = BASE_TOKEN.load(self._store)
        curve = CURVE.load(self._store)
        
        gross_in = resolve_gross_input(base_token, amount, ctx)
        curve_out = curve.sell(gross_in, min_out_amount)
        CURVE.save(self._store, curve)
        fee, out_amount = self._fees.take_sell_fee(curve_out)
        
        account = InitiatorPolicy.load(self._store).resolve(ctx.sender, initiator, "sell")
        
        self._stats.record_account_swap(account, SwapSide.SELL, out_amount, gross_in)
        self._stats.record_swap(SwapSide.SELL, out_amount, account, ctx.block_time)
        self._record_candle(ctx, curve, base_volume=gross_in, quote_volume=curve_out)
        
        effects = self._fee_effects(quote_token, fee)
        effects.append(quote_token.transfer(account, out_amount))
        
        return TradeReceipt(
            action=SwapSide.SELL.value,
            effects=effects,
            in_amount=gross_in,
            out_amount=out_amount,
            fee_amount=fee,
            initiator=account,
        )
    
    def _record_candle(self, ctx: CallContext, curve: Curve, base_volume: int, quote_volume: int) -> None:
        self._stats.upsert_ohlc(ctx.block_time, curve.quote_price(), base_volume, quote_volume)
    
    def _fee_effects(self, quote_token: Token, fee: int) -> List[TransferEffect]:
        if fee == 0:
            return []
        return [quote_token.transfer(self._fees.schedule.recipient, fee)]
