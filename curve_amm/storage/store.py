"""
Curve AMM Storage - Key-Value Store.

============================================================
PURPOSE
============================================================
Load/save/update contract over the persisted state, scoped to
one SQLAlchemy session (one call, one transaction).

COMPONENTS:
- StateStore: raw JSON values by (namespace, key)
- Item: a typed singleton entry
- Map: a typed keyed collection, iterable in key order

Visibility is all-or-nothing: nothing written through a store
is seen by other sessions until the owning transaction commits.

============================================================
"""

import json
import logging
from typing import Any, Callable, Generic, List, Optional, Tuple, TypeVar

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..errors import StateNotFoundError
from .models import StateEntryModel


logger = logging.getLogger(__name__)

T = TypeVar("T")
K = TypeVar("K")

SINGLETON_KEY = ""


# ============================================================
# STATE STORE
# ============================================================

class StateStore:
    """JSON values keyed by namespace and entry key."""
    
    def __init__(self, session: Session):
        self._session = session
    
    def _get(self, namespace: str, key: str) -> Optional[StateEntryModel]:
        return self._session.get(StateEntryModel, (namespace, key))
    
    def may_load(self, namespace: str, key: str = SINGLETON_KEY) -> Optional[Any]:
        model = self._get(namespace, key)
        if model is None:
            return None
        return json.loads(model.value)
    
    def load(self, namespace: str, key: str = SINGLETON_KEY) -> Any:
        model = self._get(namespace, key)
        if model is None:
            raise StateNotFoundError(namespace, key or None)
        return json.loads(model.value)
    
    def save(self, namespace: str, value: Any, key: str = SINGLETON_KEY) -> None:
        encoded = json.dumps(value, sort_keys=True)
        model = self._get(namespace, key)
        if model is None:
            self._session.add(StateEntryModel(namespace=namespace, entry_key=key, value=encoded))
        else:
            model.value = encoded
        self._session.flush()
        logger.debug(f"Saved {namespace}[{key!r}]")
    
    def remove(self, namespace: str, key: str = SINGLETON_KEY) -> None:
        model = self._get(namespace, key)
        if model is not None:
            self._session.delete(model)
            self._session.flush()
    
    def range(
        self,
        namespace: str,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> List[Tuple[str, Any]]:
        """
        Entries with start <= key < end, in ascending key order.
        """
        query = select(StateEntryModel).where(StateEntryModel.namespace == namespace)
        if start is not None:
            query = query.where(StateEntryModel.entry_key >= start)
        if end is not None:
            query = query.where(StateEntryModel.entry_key < end)
        query = query.order_by(StateEntryModel.entry_key)
        return [
            (model.entry_key, json.loads(model.value))
            for model in self._session.execute(query).scalars()
        ]


# ============================================================
# TYPED ENTRIES
# ============================================================

class Item(Generic[T]):
    """A named singleton entry."""
    
    def __init__(
        self,
        namespace: str,
        encode: Callable[[T], Any],
        decode: Callable[[Any], T],
    ):
        self.namespace = namespace
        self._encode = encode
        self._decode = decode
    
    def load(self, store: StateStore) -> T:
        return self._decode(store.load(self.namespace))
    
    def may_load(self, store: StateStore) -> Optional[T]:
        raw = store.may_load(self.namespace)
        return None if raw is None else self._decode(raw)
    
    def save(self, store: StateStore, value: T) -> None:
        store.save(self.namespace, self._encode(value))
    
    def update(self, store: StateStore, fn: Callable[[Optional[T]], T]) -> T:
        """
        Read-modify-write; fn receives None when the entry is missing.
        
        Exceptions raised by fn propagate and nothing is saved.
        """
        value = fn(self.may_load(store))
        self.save(store, value)
        return value


def int_key(key: int) -> str:
    """Zero-pad so lexicographic order equals numeric order for u64 keys."""
    return f"{key:020d}"


class Map(Generic[K, T]):
    """A named collection of entries."""
    
    def __init__(
        self,
        namespace: str,
        encode: Callable[[T], Any],
        decode: Callable[[Any], T],
        key_encoder: Callable[[K], str] = str,
    ):
        self.namespace = namespace
        self._encode = encode
        self._decode = decode
        self._key = key_encoder
    
    def load(self, store: StateStore, key: K) -> T:
        return self._decode(store.load(self.namespace, self._key(key)))
    
    def may_load(self, store: StateStore, key: K) -> Optional[T]:
        raw = store.may_load(self.namespace, self._key(key))
        return None if raw is None else self._decode(raw)
    
    def save(self, store: StateStore, key: K, value: T) -> None:
        store.save(self.namespace, self._encode(value), self._key(key))
    
    def update(self, store: StateStore, key: K, fn: Callable[[Optional[T]], T]) -> T:
        value = fn(self.may_load(store, key))
        self.save(store, key, value)
        return value
    
    def range(
        self,
        store: StateStore,
        start: Optional[K] = None,
        end: Optional[K] = None,
    ) -> List[T]:
        """Values with start <= key < end, in key order."""
        rows = store.range(
            self.namespace,
            None if start is None else self._key(start),
            None if end is None else self._key(end),
        )
        return [self._decode(raw) for _, raw in rows]
