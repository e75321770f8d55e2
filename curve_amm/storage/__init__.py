"""
Curve AMM Storage Package.

Persistence for the curve state.

Modules:
- engine: Engine, sessions and transaction scope
- models: ORM table for state entries
- store: Key-value store with typed Item/Map entries
"""

from .engine import Database, create_database_engine
from .models import Base, StateEntryModel
from .store import Item, Map, StateStore, int_key

__all__ = [
    "Base",
    "Database",
    "Item",
    "Map",
    "StateEntryModel",
    "StateStore",
    "create_database_engine",
    "int_key",
]
