"""
Curve AMM Package.

============================================================
PURPOSE
============================================================
Bonding-curve automated market maker: swaps a base asset
against a quote asset on a constant-product curve while
tracking fees, trading statistics, one-minute candlesticks
and per-account cost basis.

CRITICAL PRINCIPLE:
    "Every call is all-or-nothing."
    "Assets are never moved directly; transfers are deferred."

============================================================
MODULES
============================================================
- math: Checked unsigned integer arithmetic
- curve: Constant-product curve
- fees: Taker/maker fee extraction
- authorization: Initiator resolution (direct / operator)
- executor: Buy/sell orchestration
- stats / models: Account, swap and OHLC statistics
- cost_basis: Balance-change driven cost basis
- token / effects: Asset legs and deferred transfers
- state / storage: Persisted entries and the state store
- queries: Response schemas
- service: Host-facing entry point
- config: Configuration

============================================================
"""

# ============================================================
# TYPES
# ============================================================
from .types import (
    CallContext,
    PoolParams,
    Receipt,
    SwapSide,
    TradeReceipt,
)
from .token import Coin, Token, TokenKind, TransferEffect

# ============================================================
# ERRORS
# ============================================================
from .errors import (
    ErrorCategory,
    ErrorSeverity,
    ErrorCodeInfo,
    ERROR_CODES,
    get_error_info,
    CurveError,
    CurveArithmeticError,
    ArithmeticOverflow,
    ArithmeticUnderflow,
    DivisionByZero,
    InsufficientFunds,
    MissingFunds,
    NotAuthorized,
    ValidationError,
    TooMuchSlippage,
    StateNotFoundError,
)

# ============================================================
# CONFIGURATION
# ============================================================
from .config import (
    DatabaseConfig,
    CostBasisConfig,
    RecipientCostAdjustment,
    LoggingConfig,
    CurveAmmConfig,
    configure_logging,
    load_config,
)

# ============================================================
# ENGINE
# ============================================================
from .curve import Curve
from .fees import FeeEngine, FeeSchedule
from .authorization import AuthorizationMode, InitiatorPolicy
from .models import AccountStats, OhlcBar, SwapRecord, SwapStats
from .stats import StatsAggregator, bucket_start
from .cost_basis import BalanceChangeEvent, BalanceChangeKind, CostBasisTracker
from .executor import SwapExecutor
from .effects import (
    EffectExecutionError,
    EffectRunner,
    MockEffectConfig,
    MockEffectRunner,
    RecordingEffectRunner,
)

# ============================================================
# SERVICE
# ============================================================
from .storage import Database, StateStore
from .service import CurveService, ReceiveHook


__all__ = [
    # Types
    "CallContext",
    "PoolParams",
    "Receipt",
    "SwapSide",
    "TradeReceipt",
    "Coin",
    "Token",
    "TokenKind",
    "TransferEffect",
    # Errors
    "ErrorCategory",
    "ErrorSeverity",
    "ErrorCodeInfo",
    "ERROR_CODES",
    "get_error_info",
    "CurveError",
    "CurveArithmeticError",
    "ArithmeticOverflow",
    "ArithmeticUnderflow",
    "DivisionByZero",
    "InsufficientFunds",
    "MissingFunds",
    "NotAuthorized",
    "ValidationError",
    "TooMuchSlippage",
    "StateNotFoundError",
    # Config
    "DatabaseConfig",
    "CostBasisConfig",
    "RecipientCostAdjustment",
    "LoggingConfig",
    "CurveAmmConfig",
    "configure_logging",
    "load_config",
    # Engine
    "Curve",
    "FeeEngine",
    "FeeSchedule",
    "AuthorizationMode",
    "InitiatorPolicy",
    "AccountStats",
    "OhlcBar",
    "SwapRecord",
    "SwapStats",
    "StatsAggregator",
    "bucket_start",
    "BalanceChangeEvent",
    "BalanceChangeKind",
    "CostBasisTracker",
    "SwapExecutor",
    "EffectExecutionError",
    "EffectRunner",
    "MockEffectConfig",
    "MockEffectRunner",
    "RecordingEffectRunner",
    # Service
    "Database",
    "StateStore",
    "CurveService",
    "ReceiveHook",
]
