"""
Curve AMM Storage - ORM Models.

============================================================
PURPOSE
============================================================
SQLAlchemy ORM model backing the key-value store.

TABLES:
- curve_state_entries: one row per named entry; map entries
  share a namespace and differ by entry_key

Values are JSON text. Wide integers are stored as decimal
strings so no precision is lost.

============================================================
"""

from sqlalchemy import String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base for curve AMM tables."""
    pass


# ============================================================
# STATE ENTRY MODEL
# ============================================================

class StateEntryModel(Base):
    """A single persisted value."""
    
    __tablename__ = "curve_state_entries"
    
    namespace: Mapped[str] = mapped_column(String(64), primary_key=True)
    entry_key: Mapped[str] = mapped_column(String(128), primary_key=True, default="")
    value: Mapped[str] = mapped_column(Text, nullable=False)
    
    def __repr__(self) -> str:
        return f"<StateEntryModel {self.namespace}[{self.entry_key!r}]>"
