"""
Curve AMM - Configuration.

============================================================
PURPOSE
============================================================
All configuration for hosting a curve pool.

SOURCES (later wins):
1. Dataclass defaults
2. Environment (.env loaded via python-dotenv)
3. YAML file passed to load_config()

Pool economics (reserves, fees, operator) are fixed when the
pool is initialized and live in persisted state afterwards.

============================================================
"""

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from .types import PoolParams


# Load environment variables
load_dotenv()


# ============================================================
# DATABASE CONFIGURATION
# ============================================================

@dataclass
class DatabaseConfig:
    """Connection settings for the state store."""
    
    url: str = "sqlite:///curve_amm.db"
    """SQLAlchemy database URL."""
    
    echo: bool = False
    """Log SQL statements."""
    
    pool_size: int = 5
    """Connections kept in the pool (non-SQLite backends)."""
    
    max_overflow: int = 10
    """Connections allowed beyond pool_size."""
    
    pool_timeout_seconds: int = 30
    """Seconds to wait for a free connection."""
    
    pool_recycle_seconds: int = 1800
    """Recycle connections after this many seconds."""
    
    @classmethod
    def from_env(cls) -> "DatabaseConfig":
        return cls(
            url=os.getenv("CURVE_AMM_DATABASE_URL", cls.url),
            echo=os.getenv("CURVE_AMM_DATABASE_ECHO", "false").lower() in ("1", "true", "yes"),
        )


# ============================================================
# COST BASIS CONFIGURATION
# ============================================================

class RecipientCostAdjustment(Enum):
    """How a received transfer changes the recipient's total cost."""
    
    SUBTRACT = "subtract"
    """total_cost -= amount (authoritative behaviour, pending confirmation)."""
    
    ADD = "add"
    """total_cost += amount."""


@dataclass
class CostBasisConfig:
    """Cost-basis tracking settings."""
    
    recipient_adjustment: RecipientCostAdjustment = RecipientCostAdjustment.SUBTRACT


# ============================================================
# LOGGING CONFIGURATION
# ============================================================

@dataclass
class LoggingConfig:
    """Logging settings applied by configure_logging()."""
    
    level: str = field(default_factory=lambda: os.getenv("CURVE_AMM_LOG_LEVEL", "INFO"))
    format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(config: LoggingConfig) -> None:
    """Apply logging settings to the root logger."""
    logging.basicConfig(level=config.level.upper(), format=config.format)


# ============================================================
# MAIN CONFIGURATION
# ============================================================

@dataclass
class CurveAmmConfig:
    """Complete curve AMM configuration."""
    
    database: DatabaseConfig = field(default_factory=DatabaseConfig.from_env)
    cost_basis: CostBasisConfig = field(default_factory=CostBasisConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    
    pool: Optional[PoolParams] = None
    """Parameters used when the pool is initialized from config."""
    
    @classmethod
    def from_yaml(cls, path: Path) -> "CurveAmmConfig":
        """Load configuration from YAML file."""
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
        
        config = cls()
        
        if "database" in data:
            db = data["database"]
            defaults = config.database
            config.database = DatabaseConfig(
                url=db.get("url", defaults.url),
                echo=db.get("echo", defaults.echo),
                pool_size=db.get("pool_size", defaults.pool_size),
                max_overflow=db.get("max_overflow", defaults.max_overflow),
                pool_timeout_seconds=db.get("pool_timeout_seconds", defaults.pool_timeout_seconds),
                pool_recycle_seconds=db.get("pool_recycle_seconds", defaults.pool_recycle_seconds),
            )
        
        if "cost_basis" in data:
            cb = data["cost_basis"]
            config.cost_basis = CostBasisConfig(
                recipient_adjustment=RecipientCostAdjustment(
                    cb.get("recipient_adjustment", RecipientCostAdjustment.SUBTRACT.value)
                ),
            )
        
        if "logging" in data:
            lg = data["logging"]
            config.logging = LoggingConfig(
                level=lg.get("level", config.logging.level),
                format=lg.get("format", config.logging.format),
            )
        
        if "pool" in data:
            config.pool = PoolParams.from_dict(data["pool"])
        
        return config
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "database": {
                "url": self.database.url,
                "echo": self.database.echo,
                "pool_size": self.database.pool_size,
                "max_overflow": self.database.max_overflow,
                "pool_timeout_seconds": self.database.pool_timeout_seconds,
                "pool_recycle_seconds": self.database.pool_recycle_seconds,
            },
            "cost_basis": {
                "recipient_adjustment": self.cost_basis.recipient_adjustment.value,
            },
            "logging": {
                "level": self.logging.level,
                "format": self.logging.format,
            },
            "pool": None if self.pool is None else self.pool.to_dict(),
        }


def load_config(path: Optional[Path] = None) -> CurveAmmConfig:
    """
    Load configuration from file or return defaults.
    
    Args:
        path: Optional path to YAML config file
        
    Returns:
        CurveAmmConfig instance
    """
    if path and Path(path).exists():
        return CurveAmmConfig.from_yaml(Path(path))
    return CurveAmmConfig()
