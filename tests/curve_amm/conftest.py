"""
Shared fixtures for curve AMM tests.

Pools run on an in-memory SQLite database through the real
SQLAlchemy stack, so rollbacks are the database's own.
"""

import pytest

from curve_amm import (
    CallContext,
    Coin,
    CurveService,
    Database,
    DatabaseConfig,
    MockEffectRunner,
    PoolParams,
    StateStore,
    Token,
)


QUOTE_DENOM = "uquote"
BASE_CONTRACT = "base_contract"
FEE_COLLECTOR = "fee_collector"


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def database():
    """In-memory database with the schema created."""
    db = Database(DatabaseConfig(url="sqlite://"))
    db.create_schema()
    yield db
    db.dispose()


@pytest.fixture
def store(database):
    """StateStore inside an open transaction."""
    with database.transaction_scope() as session:
        yield StateStore(session)


@pytest.fixture
def pool_params():
    """1,000,000 base against 1,000 virtual quote, no fees."""
    return PoolParams(
        base_token=Token.tracked(BASE_CONTRACT),
        base_decimals=6,
        base_reserve=1_000_000,
        quote_token=Token.native(QUOTE_DENOM),
        quote_decimals=6,
        quote_reserve=1_000,
        fee_addr=FEE_COLLECTOR,
    )


@pytest.fixture
def effects():
    return MockEffectRunner()


@pytest.fixture
def make_service(database, effects, pool_params):
    """Factory creating an initialized service; kwargs override pool params."""
    def factory(cost_basis=None, **overrides):
        for name, value in overrides.items():
            setattr(pool_params, name, value)
        service = CurveService(database, effects, cost_basis=cost_basis)
        service.initialize(pool_params)
        return service
    return factory


@pytest.fixture
def pay():
    """Build a CallContext attaching native coins."""
    def factory(sender, amount, block_time=0, denom=QUOTE_DENOM):
        return CallContext(sender=sender, block_time=block_time, funds=(Coin(denom, amount),))
    return factory
