"""
Initiator Resolution Tests.

============================================================
TEST COVERAGE
============================================================
1. Direct mode
2. Delegated (operator) mode
3. Policy loaded from state
4. Unsigned 64-bit input validation
============================================================
"""

import pytest

from curve_amm import AuthorizationMode, InitiatorPolicy, NotAuthorized, ValidationError
from curve_amm.state import init_state
from curve_amm.types import validate_uint64


# ============================================================
# DIRECT MODE TESTS
# ============================================================

class TestDirectMode:
    """No operator configured."""
    
    def test_sender_is_initiator(self):
        """Test the sender is credited."""
        assert InitiatorPolicy.direct().resolve("alice") == "alice"
    
    def test_naming_self_is_allowed(self):
        """Test naming the sender explicitly."""
        assert InitiatorPolicy.direct().resolve("alice", "alice") == "alice"
    
    def test_naming_another_account(self):
        """Test acting for someone else is rejected."""
        with pytest.raises(NotAuthorized, match="none is configured"):
            InitiatorPolicy.direct().resolve("alice", "bob")


# ============================================================
# DELEGATED MODE TESTS
# ============================================================

class TestDelegatedMode:
    """Operator configured."""
    
    def test_operator_defaults_to_self(self):
        """Test operator without initiator is credited itself."""
        assert InitiatorPolicy.delegated("op").resolve("op") == "op"
    
    def test_operator_acts_for_account(self):
        """Test operator may name any account."""
        assert InitiatorPolicy.delegated("op").resolve("op", "bob") == "bob"
    
    def test_non_operator_rejected(self):
        """Test only the operator may swap."""
        with pytest.raises(NotAuthorized, match="only operator op may buy"):
            InitiatorPolicy.delegated("op").resolve("alice", action="buy")
    
    def test_non_operator_rejected_even_for_self(self):
        """Test naming yourself does not bypass the operator."""
        with pytest.raises(NotAuthorized):
            InitiatorPolicy.delegated("op").resolve("alice", "alice")
    
    def test_invalid_initiator(self):
        """Test malformed initiator address."""
        with pytest.raises(ValidationError):
            InitiatorPolicy.delegated("op").resolve("op", "")


# ============================================================
# STATE TESTS
# ============================================================

class TestPolicyFromState:
    """Policy follows the persisted operator."""
    
    def test_without_operator(self, store, pool_params):
        """Test direct mode when no operator was set."""
        init_state(store, pool_params)
        
        assert InitiatorPolicy.load(store).mode is AuthorizationMode.DIRECT
    
    def test_with_operator(self, store, pool_params):
        """Test delegated mode when an operator was set."""
        pool_params.operator_addr = "op"
        init_state(store, pool_params)
        policy = InitiatorPolicy.load(store)
        
        assert policy.mode is AuthorizationMode.DELEGATED
        assert policy.operator == "op"


# ============================================================
# VALIDATOR TESTS
# ============================================================

class TestUint64Validation:
    """Tests for validate_uint64."""
    
    def test_bounds(self):
        """Test values inside and outside the 64-bit range."""
        assert validate_uint64(0, "block_time") == 0
        assert validate_uint64(2 ** 64 - 1, "block_time") == 2 ** 64 - 1
        
        for bad in (-1, 2 ** 64, True, 1.5):
            with pytest.raises(ValidationError, match="block_time"):
                validate_uint64(bad, "block_time")
