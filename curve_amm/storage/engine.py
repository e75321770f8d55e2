"""
Curve AMM Storage - Database Engine.

============================================================
PURPOSE
============================================================
Owns the SQLAlchemy engine and session factory, and provides
the transaction boundary every curve call runs inside.

Requirements:
- Explicit transaction management
- Rollback on ANY exception, then re-raise
- Structured logging of lifecycle and failures

============================================================
"""

import logging
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from ..config import DatabaseConfig
from .models import Base


logger = logging.getLogger(__name__)


def _safe_url(url: str) -> str:
    return make_url(url).render_as_string(hide_password=True)


def create_database_engine(config: DatabaseConfig) -> Engine:
    """
    Create a SQLAlchemy engine for the configured URL.
    
    In-memory SQLite uses a single shared connection so every
    session sees the same database. Other backends get a
    QueuePool sized from config.
    """
    url = make_url(config.url)
    logger.info(f"Creating database engine for: {_safe_url(config.url)}")
    
    if url.get_backend_name() == "sqlite":
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(config.url, echo=config.echo, **kwargs)
    else:
        engine = create_engine(
            config.url,
            poolclass=QueuePool,
            pool_size=config.pool_size,
            max_overflow=config.max_overflow,
            pool_timeout=config.pool_timeout_seconds,
            pool_recycle=config.pool_recycle_seconds,
            echo=config.echo,
        )
    
    @event.listens_for(engine, "connect")
    def on_connect(dbapi_conn, connection_record):
        logger.debug("Database connection established")
    
    return engine


# ============================================================
# DATABASE
# ============================================================

class Database:
    """
    Connection management for the curve state store.
    
    Usage:
        db = Database(DatabaseConfig(url="sqlite://"))
        db.create_schema()
        with db.transaction_scope() as session:
            ...
    """
    
    def __init__(self, config: Optional[DatabaseConfig] = None):
        self._config = config or DatabaseConfig.from_env()
        self._engine = create_database_engine(self._config)
        self._session_factory = sessionmaker(
            bind=self._engine,
            autocommit=False,
            autoflush=True,
            expire_on_commit=False,
        )
    
    @property
    def engine(self) -> Engine:
        return self._engine
    
    def create_schema(self) -> None:
        """Create tables that do not exist yet."""
        Base.metadata.create_all(self._engine)
    
    def dispose(self) -> None:
        self._engine.dispose()
    
    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """
        Read-only session; always rolled back on exit.
        
        Queries never persist anything, even by accident.
        """
        session = self._session_factory()
        try:
            yield session
        finally:
            session.rollback()
            session.close()
    
    @contextmanager
    def transaction_scope(self) -> Generator[Session, None, None]:
        """
        Context manager for one all-or-nothing call.
        
        Commits only if no exception occurs.
        Rolls back on ANY exception.
        """
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Database error, rolling back: {e}")
            session.rollback()
            raise
        except Exception as e:
            logger.debug(f"Call failed, rolling back: {e}")
            session.rollback()
            raise
        finally:
            session.close()
    
    def health_check(self) -> bool:
        """Check the database answers a trivial query."""
        try:
            with self._engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.error(f"Database health check failed: {e}")
            return False
