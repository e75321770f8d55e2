"""
Curve Service Tests.

============================================================
TEST COVERAGE
============================================================
1. Initialization
2. Buys and sells with native payments
3. Funds and slippage failures
4. Initiator resolution and the operator
5. Receive hook for tracked tokens
6. Atomicity with failing transfers
7. Balance-change notifications
8. Queries
============================================================
"""

import pytest

from curve_amm import (
    ArithmeticUnderflow,
    BalanceChangeEvent,
    CallContext,
    Coin,
    CostBasisConfig,
    EffectExecutionError,
    InsufficientFunds,
    MissingFunds,
    NotAuthorized,
    ReceiveHook,
    RecipientCostAdjustment,
    StateNotFoundError,
    StateStore,
    StatsAggregator,
    SwapSide,
    Token,
    TooMuchSlippage,
    TransferEffect,
    ValidationError,
)


QUOTE = Token.native("uquote")
BASE = Token.tracked("base_contract")
NATIVE_BASE = Token.native("ubase")
ONE_PERCENT = 10_000


def assert_pool_untouched(service):
    overview = service.query_overview()
    assert overview.amm.base_reserve == 1_000_000
    assert overview.amm.quote_reserve_real == 0
    assert overview.stats.bids.n == 0
    assert overview.stats.net_taker_fee == 0


# ============================================================
# INITIALIZATION TESTS
# ============================================================

class TestInitialize:
    """Tests for pool initialization."""
    
    def test_overview_after_init(self, make_service):
        """Test initial pool overview."""
        overview = make_service(taker_fee_pct=ONE_PERCENT).query_overview()
        
        assert overview.amm.base_token.identifier == "base_contract"
        assert overview.amm.base_token.kind == "tracked"
        assert overview.amm.quote_reserve_virtual == 1_000
        assert overview.amm.quote_reserve_real == 0
        assert overview.amm.constant_product == 1_000_000_000
        assert overview.amm.quote_price == 1_000
        assert overview.fees.recipient == "fee_collector"
        assert overview.fees.taker_pct == ONE_PERCENT
        assert overview.fees.maker_pct == 0
        assert overview.stats.bids.max is None
    
    def test_double_init(self, make_service, pool_params):
        """Test a pool cannot be initialized twice."""
        service = make_service()
        
        with pytest.raises(ValidationError, match="already initialized"):
            service.initialize(pool_params)
    
    def test_zero_reserve(self, make_service):
        """Test zero reserves are rejected."""
        with pytest.raises(ValidationError):
            make_service(base_reserve=0)
    
    def test_same_tokens(self, make_service):
        """Test base and quote must differ."""
        with pytest.raises(ValidationError):
            make_service(base_token=QUOTE)
    
    def test_too_many_decimals(self, make_service):
        """Test decimals above 38 are rejected."""
        with pytest.raises(ValidationError):
            make_service(quote_decimals=39)


# ============================================================
# BUY TESTS
# ============================================================

class TestBuy:
    """Tests for buys paid with attached coins."""
    
    def test_buy_without_fee(self, make_service, effects, pay):
        """Test a fee-free buy."""
        receipt = make_service().buy(pay("alice", 100))
        
        assert receipt.in_amount == 100
        assert receipt.out_amount == 90_910
        assert receipt.fee_amount == 0
        assert receipt.initiator == "alice"
        assert effects.executed == [TransferEffect(BASE, "alice", 90_910)]
    
    def test_buy_with_fee(self, make_service, effects, pay):
        """Test taker fee is paid out before the base."""
        service = make_service(taker_fee_pct=ONE_PERCENT)
        receipt = service.buy(pay("alice", 100))
        
        assert receipt.fee_amount == 1
        assert receipt.out_amount == 90_082
        assert effects.executed == [
            TransferEffect(QUOTE, "fee_collector", 1),
            TransferEffect(BASE, "alice", 90_082),
        ]
        
        overview = service.query_overview()
        assert overview.amm.quote_reserve_real == 99
        assert overview.amm.base_reserve == 909_918
        assert overview.stats.net_taker_fee == 1
    
    def test_account_and_global_stats(self, make_service, pay):
        """Test a buy books account and taker stats."""
        service = make_service(taker_fee_pct=ONE_PERCENT)
        service.buy(pay("alice", 100, block_time=42))
        
        stats = service.query_account("alice").stats
        assert stats.n_buys == 1
        assert stats.net_quote_out == 100
        assert stats.net_base_in == 90_082
        assert stats.total_cost == 100
        
        bids = service.query_overview().stats.bids
        assert bids.n == 1
        assert bids.max.amount == 100
        assert bids.max.initiator == "alice"
        assert bids.max.timestamp == 42
    
    def test_explicit_amount_matches(self, make_service, pay):
        """Test an explicit amount equal to the attachment."""
        receipt = make_service().buy(pay("alice", 100), amount=100)
        
        assert receipt.out_amount == 90_910
    
    def test_receipt_attributes(self, make_service, pay):
        """Test emitted attributes."""
        receipt = make_service().buy(pay("alice", 100))
        
        assert receipt.attributes() == [
            ("action", "buy"),
            ("in_amount", "100"),
            ("out_amount", "90910"),
        ]
    
    def test_candles(self, make_service, database, pay):
        """Test each minute gets its own bar."""
        service = make_service()
        service.buy(pay("alice", 100, block_time=10))
        service.buy(pay("bob", 100, block_time=30))
        service.buy(pay("alice", 100, block_time=75))
        
        with database.session() as session:
            bars = StatsAggregator(StateStore(session)).bars()
        
        assert [bar.t for bar in bars] == [0, 60]
        assert bars[0].n == 2
        assert bars[0].o == 1_210
        assert bars[0].vq == 200
        assert bars[0].c > bars[0].o
        assert bars[1].n == 1


# ============================================================
# FAILURE TESTS
# ============================================================

class TestBuyFailures:
    """Failed buys leave no trace."""
    
    def test_missing_funds(self, make_service):
        """Test a buy without attached quote."""
        service = make_service()
        
        with pytest.raises(MissingFunds, match="Expected uquote in funds"):
            service.buy(CallContext("alice", 0))
        assert_pool_untouched(service)
    
    def test_wrong_denom(self, make_service, pay):
        """Test attached coins of another denom."""
        with pytest.raises(MissingFunds):
            make_service().buy(pay("alice", 100, denom="uother"))
    
    def test_amount_mismatch(self, make_service, pay):
        """Test explicit amount differing from the attachment."""
        with pytest.raises(InsufficientFunds, match="Expected 150 uquote but got 100"):
            make_service().buy(pay("alice", 100), amount=150)
    
    @pytest.mark.parametrize("block_time", [-60, 2 ** 64, "60"])
    def test_invalid_block_time(self, make_service, effects, pay, block_time):
        """Test block times outside the unsigned 64-bit range are rejected."""
        service = make_service()
        
        with pytest.raises(ValidationError, match="block_time"):
            service.buy(pay("alice", 100, block_time=block_time))
        
        assert_pool_untouched(service)
        assert effects.executed == []
    
    def test_bars_stay_in_time_order(self, make_service, database, pay):
        """Test a rejected negative time leaves the bar series ordered."""
        service = make_service()
        service.buy(pay("alice", 100, block_time=120))
        with pytest.raises(ValidationError):
            service.buy(pay("alice", 100, block_time=-60))
        service.buy(pay("alice", 100, block_time=60))
        
        with database.session() as session:
            bars = StatsAggregator(StateStore(session)).bars()
        
        assert [bar.t for bar in bars] == [60, 120]
    
    def test_zero_amount(self, make_service, pay):
        """Test zero payments are rejected."""
        with pytest.raises(ValidationError):
            make_service().buy(pay("alice", 0))
    
    def test_slippage_rolls_back(self, make_service, effects, pay):
        """Test slippage failure discards fees, reserves and stats."""
        service = make_service(taker_fee_pct=ONE_PERCENT)
        
        with pytest.raises(TooMuchSlippage):
            service.buy(pay("alice", 100), min_out_amount=90_083)
        
        assert_pool_untouched(service)
        assert effects.executed == []
        with pytest.raises(StateNotFoundError):
            service.query_account("alice")
    
    def test_failed_transfer_rolls_back(self, make_service, effects, pay):
        """Test a failing transfer aborts the whole call."""
        service = make_service(taker_fee_pct=ONE_PERCENT)
        effects.config.fail_on = lambda effect: effect.token == BASE
        
        with pytest.raises(EffectExecutionError):
            service.buy(pay("alice", 100))
        
        assert_pool_untouched(service)
        with pytest.raises(StateNotFoundError):
            service.query_account("alice")
        assert effects.executed == []


# ============================================================
# SELL TESTS
# ============================================================

class TestSell:
    """Tests for sells."""
    
    def test_direct_sell_of_tracked_base(self, make_service, pay):
        """Test tracked base must come through receive."""
        service = make_service()
        service.buy(pay("alice", 100))
        
        with pytest.raises(ValidationError, match="pay through receive"):
            service.sell(CallContext("alice", 0), amount=90_910)
    
    def test_sell_native_base(self, make_service, effects, pay):
        """Test selling attached base with a maker fee."""
        service = make_service(base_token=NATIVE_BASE, maker_fee_pct=ONE_PERCENT)
        service.buy(pay("alice", 100))
        effects.executed.clear()
        
        receipt = service.sell(pay("alice", 90_910, denom="ubase"))
        
        assert receipt.in_amount == 90_910
        assert receipt.fee_amount == 1
        assert receipt.out_amount == 99
        assert effects.executed == [
            TransferEffect(QUOTE, "fee_collector", 1),
            TransferEffect(QUOTE, "alice", 99),
        ]
        
        stats = service.query_account("alice").stats
        assert stats.n_sells == 1
        assert stats.net_base_out == 90_910
        assert stats.net_quote_in == 99
        
        overview = service.query_overview()
        assert overview.amm.quote_reserve_real == 0
        assert overview.stats.asks.max.amount == 99
        assert overview.stats.net_maker_fee == 1


# ============================================================
# AUTHORIZATION TESTS
# ============================================================

class TestOperator:
    """Tests for initiator resolution through the service."""
    
    def test_direct_mode_rejects_other_initiator(self, make_service, pay):
        """Test naming another account without an operator."""
        with pytest.raises(NotAuthorized):
            make_service().buy(pay("alice", 100), initiator="bob")
    
    def test_operator_buys_for_account(self, make_service, effects, pay):
        """Test the operator books a buy to the named account."""
        service = make_service(operator_addr="op")
        receipt = service.buy(pay("op", 100), initiator="alice")
        
        assert receipt.initiator == "alice"
        assert effects.executed == [TransferEffect(BASE, "alice", 90_910)]
        assert service.query_account("alice").stats.n_buys == 1
        with pytest.raises(StateNotFoundError):
            service.query_account("op")
    
    def test_non_operator_rejected(self, make_service, pay):
        """Test only the operator may swap."""
        service = make_service(operator_addr="op")
        
        with pytest.raises(NotAuthorized):
            service.buy(pay("alice", 100))
        assert_pool_untouched(service)


# ============================================================
# RECEIVE HOOK TESTS
# ============================================================

class TestReceive:
    """Tests for swaps funded by tracked tokens."""
    
    def test_sell_through_receive(self, make_service, effects, pay):
        """Test the base contract forwards a sell."""
        service = make_service()
        service.buy(pay("alice", 100))
        effects.executed.clear()
        
        receipt = service.receive(
            CallContext("base_contract", 5), "alice", 90_910, ReceiveHook(SwapSide.SELL),
        )
        
        assert receipt.out_amount == 100
        assert effects.executed == [TransferEffect(QUOTE, "alice", 100)]
        assert service.query_account("alice").stats.net_base_out == 90_910
    
    def test_buy_through_receive(self, make_service, effects):
        """Test a tracked quote contract forwards a buy."""
        service = make_service(quote_token=Token.tracked("quote_contract"))
        
        receipt = service.receive(
            CallContext("quote_contract", 0), "alice", 100, ReceiveHook(SwapSide.BUY),
        )
        
        assert receipt.out_amount == 90_910
        assert effects.executed == [TransferEffect(BASE, "alice", 90_910)]
    
    def test_unrecognized_contract(self, make_service, pay):
        """Test transfers from other contracts are rejected."""
        service = make_service()
        service.buy(pay("alice", 100))
        
        with pytest.raises(NotAuthorized, match="unrecognized tracked token"):
            service.receive(CallContext("impostor", 0), "alice", 90_910, ReceiveHook(SwapSide.SELL))
    
    def test_native_leg_cannot_be_received(self, make_service):
        """Test buying through receive with a native quote."""
        with pytest.raises(NotAuthorized, match="not a tracked token"):
            make_service().receive(CallContext("base_contract", 0), "alice", 100, ReceiveHook(SwapSide.BUY))
    
    def test_sell_slippage_rolls_back(self, make_service, effects, pay):
        """Test a rejected sell leaves reserves, stats and maker fees unchanged."""
        service = make_service(maker_fee_pct=ONE_PERCENT)
        service.buy(pay("alice", 100))
        effects.executed.clear()
        before = service.query_overview()
        account_before = service.query_account("alice")
        
        with pytest.raises(TooMuchSlippage):
            service.receive(
                CallContext("base_contract", 5), "alice", 90_910,
                ReceiveHook(SwapSide.SELL, min_out_amount=101),
            )
        
        after = service.query_overview()
        assert after == before
        assert after.stats.net_maker_fee == 0
        assert after.stats.asks.n == 0
        assert service.query_account("alice") == account_before
        assert effects.executed == []
    
    def test_operator_only(self, make_service):
        """Test token senders other than the operator are rejected."""
        service = make_service(operator_addr="op", quote_token=Token.tracked("quote_contract"))
        
        with pytest.raises(NotAuthorized, match="Only the defined operator"):
            service.receive(CallContext("quote_contract", 0), "alice", 100, ReceiveHook(SwapSide.BUY))
    
    def test_operator_with_hook_initiator(self, make_service):
        """Test the hook names the account the operator acts for."""
        service = make_service(operator_addr="op", quote_token=Token.tracked("quote_contract"))
        
        receipt = service.receive(
            CallContext("quote_contract", 0), "op", 100, ReceiveHook(SwapSide.BUY, initiator="alice"),
        )
        
        assert receipt.initiator == "alice"
    
    def test_hook_slippage(self, make_service):
        """Test the hook's minimum output is enforced."""
        service = make_service(quote_token=Token.tracked("quote_contract"))
        
        with pytest.raises(TooMuchSlippage):
            service.receive(
                CallContext("quote_contract", 0), "alice", 100,
                ReceiveHook(SwapSide.BUY, min_out_amount=100_000),
            )


# ============================================================
# BALANCE CHANGE TESTS
# ============================================================

class TestBalanceChange:
    """Tests for cost basis notifications."""
    
    def test_transfer_with_add(self, make_service, pay):
        """Test a transfer moves cost between accounts."""
        service = make_service(cost_basis=CostBasisConfig(RecipientCostAdjustment.ADD))
        service.buy(pay("alice", 100))
        
        service.on_balance_change(
            CallContext("base_contract", 0),
            BalanceChangeEvent.transfer("alice", "bob", 90_910, 0, 10_000),
        )
        
        assert service.query_account("alice").stats.total_cost == 90
        assert service.query_account("bob").stats.total_cost == 10_000
    
    def test_subtract_underflow_rolls_back(self, make_service, pay):
        """Test the sender side is discarded when the recipient fails."""
        service = make_service()
        service.buy(pay("alice", 100))
        
        with pytest.raises(ArithmeticUnderflow):
            service.on_balance_change(
                CallContext("base_contract", 0),
                BalanceChangeEvent.transfer("alice", "bob", 90_910, 0, 10_000),
            )
        
        assert service.query_account("alice").stats.total_cost == 100
    
    def test_burn(self, make_service, pay):
        """Test burning the whole balance resets the cost."""
        service = make_service()
        service.buy(pay("alice", 100))
        
        service.on_balance_change(
            CallContext("base_contract", 0), BalanceChangeEvent.burn("alice", 90_910, 90_910),
        )
        
        assert service.query_account("alice").stats.total_cost == 0
    
    def test_unrecognized_sender(self, make_service):
        """Test only the base contract may notify."""
        with pytest.raises(NotAuthorized, match="unrecognized token: alice"):
            make_service().on_balance_change(
                CallContext("alice", 0), BalanceChangeEvent.burn("alice", 1, 1),
            )
    
    def test_native_base(self, make_service):
        """Test native base tokens never notify."""
        with pytest.raises(NotAuthorized):
            make_service(base_token=NATIVE_BASE).on_balance_change(
                CallContext("ubase", 0), BalanceChangeEvent.burn("alice", 1, 1),
            )


# ============================================================
# QUERY TESTS
# ============================================================

class TestQueries:
    """Tests for queries and config."""
    
    def test_unknown_account(self, make_service):
        """Test accounts that never traded."""
        with pytest.raises(StateNotFoundError):
            make_service().query_account("nobody")
    
    def test_invalid_address(self, make_service):
        """Test malformed addresses."""
        with pytest.raises(ValidationError):
            make_service().query_account("")
    
    def test_overview_serializes(self, make_service, pay):
        """Test the overview is plain data."""
        service = make_service()
        service.buy(pay("alice", 100))
        data = service.query_overview().model_dump()
        
        assert data["amm"]["quote_reserve_real"] == 100
        assert data["stats"]["bids"]["max"]["initiator"] == "alice"
    
    def test_config(self, make_service):
        """Test config is accepted and reported."""
        service = make_service()
        
        assert service.set_config(CallContext("anyone", 0)).action == "set_config"
        assert service.query_config().model_dump() == {}
