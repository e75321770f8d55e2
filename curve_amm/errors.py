"""
Curve AMM - Error Taxonomy.

============================================================
PURPOSE
============================================================
Error classification for every failure a curve call can raise.

ERROR CATEGORIES:
1. Arithmetic Errors - Checked integer math overflowed/underflowed
2. Funds Errors - Attached payment missing or wrong
3. Authorization Errors - Sender may not perform the call
4. Validation Errors - Malformed input
5. Slippage Errors - Output below the caller's bound
6. State Errors - Persisted entry missing

TERMINAL ERRORS:
Every error aborts the call. Nothing is retried internally and
the whole call's state changes are discarded. Callers may
resubmit with adjusted parameters.

============================================================
"""

from enum import Enum
from typing import Dict, Optional, Set
from dataclasses import dataclass


# ============================================================
# ERROR CATEGORIES
# ============================================================

class ErrorCategory(Enum):
    """Error category classification."""
    
    ARITHMETIC = "ARITHMETIC"
    """Checked arithmetic failed."""
    
    FUNDS = "FUNDS"
    """Attached payment missing or mismatched."""
    
    AUTHORIZATION = "AUTHORIZATION"
    """Sender is not allowed to perform the call."""
    
    VALIDATION = "VALIDATION"
    """Input validation failed."""
    
    SLIPPAGE = "SLIPPAGE"
    """Achieved output below the caller's minimum."""
    
    STATE = "STATE"
    """Persisted state missing or inconsistent."""


class ErrorSeverity(Enum):
    """Error severity levels."""
    
    WARNING = "WARNING"
    """Caller mistake, expected in normal operation."""
    
    ERROR = "ERROR"
    """Degenerate input or configuration problem."""
    
    CRITICAL = "CRITICAL"
    """Stored state disagrees with an invariant."""


# ============================================================
# ERROR CODE REGISTRY
# ============================================================

@dataclass(frozen=True)
class ErrorCodeInfo:
    """Information about an error code."""
    
    code: str
    """Error code."""
    
    category: ErrorCategory
    """Error category."""
    
    severity: ErrorSeverity
    """Error severity."""
    
    description: str
    """Human-readable description."""
    
    recommended_action: str
    """Recommended action to take."""


ERROR_CODES: Dict[str, ErrorCodeInfo] = {
    # ========== ARITHMETIC ERRORS ==========
    "ARI_OVERFLOW": ErrorCodeInfo(
        code="ARI_OVERFLOW",
        category=ErrorCategory.ARITHMETIC,
        severity=ErrorSeverity.ERROR,
        description="Checked arithmetic exceeded the integer width",
        recommended_action="Reduce the swap amount",
    ),
    "ARI_UNDERFLOW": ErrorCodeInfo(
        code="ARI_UNDERFLOW",
        category=ErrorCategory.ARITHMETIC,
        severity=ErrorSeverity.CRITICAL,
        description="Checked subtraction went below zero",
        recommended_action="Check the pool reserves and stored cost basis",
    ),
    "ARI_DIVIDE_BY_ZERO": ErrorCodeInfo(
        code="ARI_DIVIDE_BY_ZERO",
        category=ErrorCategory.ARITHMETIC,
        severity=ErrorSeverity.ERROR,
        description="Division by zero",
        recommended_action="Check for an exhausted reserve or empty balance",
    ),
    
    # ========== FUNDS ERRORS ==========
    "FND_INSUFFICIENT": ErrorCodeInfo(
        code="FND_INSUFFICIENT",
        category=ErrorCategory.FUNDS,
        severity=ErrorSeverity.WARNING,
        description="Attached payment does not match the requested amount",
        recommended_action="Attach exactly the requested amount",
    ),
    "FND_MISSING": ErrorCodeInfo(
        code="FND_MISSING",
        category=ErrorCategory.FUNDS,
        severity=ErrorSeverity.WARNING,
        description="Expected payment not attached",
        recommended_action="Attach the expected asset",
    ),
    
    # ========== AUTHORIZATION ERRORS ==========
    "AUT_NOT_AUTHORIZED": ErrorCodeInfo(
        code="AUT_NOT_AUTHORIZED",
        category=ErrorCategory.AUTHORIZATION,
        severity=ErrorSeverity.WARNING,
        description="Sender is not authorized for this call",
        recommended_action="Send from the operator or drop the explicit initiator",
    ),
    
    # ========== VALIDATION ERRORS ==========
    "VAL_INVALID_INPUT": ErrorCodeInfo(
        code="VAL_INVALID_INPUT",
        category=ErrorCategory.VALIDATION,
        severity=ErrorSeverity.WARNING,
        description="Input failed validation",
        recommended_action="Fix the input and resubmit",
    ),
    
    # ========== SLIPPAGE ERRORS ==========
    "SLP_TOO_MUCH_SLIPPAGE": ErrorCodeInfo(
        code="SLP_TOO_MUCH_SLIPPAGE",
        category=ErrorCategory.SLIPPAGE,
        severity=ErrorSeverity.WARNING,
        description="Output amount below the requested minimum",
        recommended_action="Lower the minimum output or the swap size",
    ),
    
    # ========== STATE ERRORS ==========
    "STA_NOT_FOUND": ErrorCodeInfo(
        code="STA_NOT_FOUND",
        category=ErrorCategory.STATE,
        severity=ErrorSeverity.ERROR,
        description="Persisted entry not found",
        recommended_action="Initialize the pool or check the key",
    ),
}


def get_error_info(code: str) -> ErrorCodeInfo:
    """
    Get error info for a code.
    
    Args:
        code: Error code
        
    Returns:
        ErrorCodeInfo or default unknown error
    """
    return ERROR_CODES.get(code, ErrorCodeInfo(
        code=code,
        category=ErrorCategory.STATE,
        severity=ErrorSeverity.ERROR,
        description=f"Unknown error: {code}",
        recommended_action="Investigate error",
    ))


CRITICAL_ERROR_CODES: Set[str] = {
    code for code, info in ERROR_CODES.items()
    if info.severity is ErrorSeverity.CRITICAL
}


# ============================================================
# EXCEPTIONS
# ============================================================

class CurveError(Exception):
    """Base exception for the curve AMM."""
    
    code: str = "VAL_INVALID_INPUT"
    
    @property
    def info(self) -> ErrorCodeInfo:
        return get_error_info(self.code)


class CurveArithmeticError(CurveError, ArithmeticError):
    """Checked integer arithmetic failed."""
    
    def __init__(self, operation: str, left: int, right: int):
        self.operation = operation
        self.left = left
        self.right = right
        super().__init__(f"{type(self).__name__}: {operation} {left}, {right}")


class ArithmeticOverflow(CurveArithmeticError):
    code = "ARI_OVERFLOW"


class ArithmeticUnderflow(CurveArithmeticError):
    code = "ARI_UNDERFLOW"


class DivisionByZero(CurveArithmeticError):
    code = "ARI_DIVIDE_BY_ZERO"


class InsufficientFunds(CurveError):
    """Attached payment present but not the expected amount."""
    
    code = "FND_INSUFFICIENT"
    
    def __init__(self, denom: str, amount: int, expected: int):
        self.denom = denom
        self.amount = amount
        self.expected = expected
        super().__init__(
            f"InsufficientFunds: Expected {expected} {denom} but got {amount}"
        )


class MissingFunds(CurveError):
    """Expected payment absent."""
    
    code = "FND_MISSING"
    
    def __init__(self, denom: str):
        self.denom = denom
        super().__init__(f"MissingFunds: Expected {denom} in funds")


class NotAuthorized(CurveError):
    """Sender rejected by an authorization check."""
    
    code = "AUT_NOT_AUTHORIZED"
    
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"NotAuthorized: {reason}")


class ValidationError(CurveError):
    """Input validation not otherwise categorized."""
    
    code = "VAL_INVALID_INPUT"
    
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"ValidationError: {reason}")


class TooMuchSlippage(CurveError):
    """Achieved output below the caller's bound."""
    
    code = "SLP_TOO_MUCH_SLIPPAGE"
    
    def __init__(self, out_amount: Optional[int] = None, min_out_amount: Optional[int] = None):
        self.out_amount = out_amount
        self.min_out_amount = min_out_amount
        super().__init__("TooMuchSlippage: Exceeded slippage tolerance")


class StateNotFoundError(CurveError):
    """A persisted entry does not exist."""
    
    code = "STA_NOT_FOUND"
    
    def __init__(self, namespace: str, key: Optional[str] = None):
        self.namespace = namespace
        self.key = key
        target = namespace if key is None else f"{namespace}[{key}]"
        super().__init__(f"NotFound: {target}")
