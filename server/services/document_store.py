"""
Document Store abstraction.

The API reads and writes users, posts, comments and bookmarks only through
this contract: get/set/update by id, equality queries, store-generated ids,
batch delete, atomic field transforms and transactions. Implementations:
in-memory and JSON file (local/tests), Firestore (production). Swap via
DATA_SOURCE.
"""

import copy
import json
import logging
import threading
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, Tuple, TypeVar, Union

from engagement.errors import Internal, NotFound

logger = logging.getLogger(__name__)

# Collections
USERS = "users"
POSTS = "posts"
COMMENTS = "comments"
BOOKMARKS = "bookmarks"

T = TypeVar("T")


class StoreError(Internal):
    """Backend failure (network, permissions, corrupt file). Surfaces as 500."""


# ---------------------------------------------------------------------------
# Field transforms (applied atomically by the store, per document)
# ---------------------------------------------------------------------------


class ArrayUnion:
    """Append each value not already present."""

    def __init__(self, values: Iterable[Any]):
        self.values: Tuple[Any, ...] = tuple(values)

    def __repr__(self) -> str:
        return f"ArrayUnion({list(self.values)!r})"


class ArrayRemove:
    """Remove every occurrence of each value."""

    def __init__(self, values: Iterable[Any]):
        self.values: Tuple[Any, ...] = tuple(values)

    def __repr__(self) -> str:
        return f"ArrayRemove({list(self.values)!r})"


@dataclass(frozen=True)
class Increment:
    amount: int = 1


class _DeleteField:
    def __repr__(self) -> str:
        return "DELETE_FIELD"


DELETE_FIELD = _DeleteField()


class Transaction(Protocol):
    """Reads must come before writes; writes apply together on commit."""

    def get(self, collection: str, doc_id: str) -> Optional[Dict]:
        ...

    def set(self, collection: str, doc_id: str, data: Dict, merge: bool = False) -> None:
        ...

    def update(self, collection: str, doc_id: str, fields: Dict) -> None:
        ...

    def delete(self, collection: str, doc_id: str) -> None:
        ...


class DocumentStore(Protocol):
    """Protocol for document persistence. Implement for memory/JSON or Firestore."""

    def get(self, collection: str, doc_id: str) -> Optional[Dict]:
        """Return the document with its id under "id", or None."""
        ...

    def add(self, collection: str, data: Dict) -> str:
        """Create a document with a store-generated id. Returns the id."""
        ...

    def set(self, collection: str, doc_id: str, data: Dict, merge: bool = False) -> None:
        """Create or overwrite a document; merge=True merges into an existing one."""
        ...

    def update(self, collection: str, doc_id: str, fields: Dict) -> None:
        """
        Partial update. Keys may be dotted paths ("likes.likedBy"); values may be
        ArrayUnion/ArrayRemove/Increment/DELETE_FIELD. NotFound if absent.
        """
        ...

    def delete(self, collection: str, doc_id: str) -> bool:
        ...

    def query(self, collection: str, field: str, value: Any) -> List[Dict]:
        """Documents whose top-level field equals value."""
        ...

    def list(self, collection: str) -> List[Dict]:
        ...

    def batch_delete(self, refs: Iterable[Tuple[str, str]]) -> int:
        """Delete (collection, id) pairs in one atomic batch. Returns count requested."""
        ...

    def run_transaction(self, fn: Callable[[Transaction], T]) -> T:
        """Run fn(txn) serializably; fn may be retried and must only write via txn."""
        ...


# ---------------------------------------------------------------------------
# Update helpers shared by the in-process stores
# ---------------------------------------------------------------------------


def _apply_value(current: Any, value: Any) -> Any:
    if isinstance(value, ArrayUnion):
        result = list(current) if isinstance(current, list) else []
        for v in value.values:
            if v not in result:
                result.append(copy.deepcopy(v))
        return result
    if isinstance(value, ArrayRemove):
        if not isinstance(current, list):
            return []
        return [v for v in current if v not in value.values]
    if isinstance(value, Increment):
        base = current if isinstance(current, (int, float)) else 0
        return base + value.amount
    if isinstance(value, dict):
        return {k: _apply_value(None, v) for k, v in value.items() if v is not DELETE_FIELD}
    return copy.deepcopy(value)


def apply_update(doc: Dict, fields: Dict) -> Dict:
    """Apply a partial update (dotted paths + transforms) to a copy of doc."""
    result = copy.deepcopy(doc)
    for key, value in fields.items():
        parts = key.split(".")
        target = result
        for part in parts[:-1]:
            child = target.get(part)
            if not isinstance(child, dict):
                child = {}
                target[part] = child
            target = child
        leaf = parts[-1]
        if value is DELETE_FIELD:
            target.pop(leaf, None)
        else:
            target[leaf] = _apply_value(target.get(leaf), value)
    return result


def merge_document(base: Dict, updates: Dict) -> Dict:
    """Deep merge updates into base (set with merge=True), applying transforms."""
    result = copy.deepcopy(base)
    for key, value in updates.items():
        if value is DELETE_FIELD:
            result.pop(key, None)
        elif isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = merge_document(result[key], value)
        else:
            result[key] = _apply_value(result.get(key), value)
    return result


def _strip_id(data: Dict) -> Dict:
    return {k: v for k, v in data.items() if k != "id"}


def _with_id(doc_id: str, data: Dict) -> Dict:
    d = copy.deepcopy(data)
    d["id"] = doc_id
    return d


def new_document_id() -> str:
    """20-character id, the same length Firestore auto-ids use."""
    return uuid.uuid4().hex[:20]


# ---------------------------------------------------------------------------
# In-memory store
# ---------------------------------------------------------------------------


class _MemoryTransaction:
    def __init__(self, store: "MemoryDocumentStore"):
        self._store = store
        self._writes: List[Callable[[], None]] = []

    def get(self, collection: str, doc_id: str) -> Optional[Dict]:
        if self._writes:
            raise StoreError("Transaction reads must happen before writes")
        return self._store.get(collection, doc_id)

    def set(self, collection: str, doc_id: str, data: Dict, merge: bool = False) -> None:
        self._writes.append(lambda: self._store._write_set(collection, doc_id, data, merge))

    def update(self, collection: str, doc_id: str, fields: Dict) -> None:
        self._writes.append(lambda: self._store._write_update(collection, doc_id, fields))

    def delete(self, collection: str, doc_id: str) -> None:
        self._writes.append(lambda: self._store._write_delete(collection, doc_id))

    def commit(self) -> None:
        snapshot = copy.deepcopy(self._store._collections)
        try:
            for write in self._writes:
                write()
        except Exception:
            self._store._collections = snapshot
            raise


class MemoryDocumentStore:
    """
    Document store held in process memory.
    Used for local development and tests. One re-entrant lock serializes every
    operation, so each call and each transaction is atomic.
    """

    def __init__(self, collections: Optional[Dict[str, Dict[str, Dict]]] = None):
        self._collections: Dict[str, Dict[str, Dict]] = copy.deepcopy(collections or {})
        self._lock = threading.RLock()

    def _persist(self) -> None:
        """Hook for subclasses that keep a durable copy."""

    def _coll(self, collection: str) -> Dict[str, Dict]:
        return self._collections.setdefault(collection, {})

    # raw writes (caller holds the lock)

    def _write_set(self, collection: str, doc_id: str, data: Dict, merge: bool) -> None:
        coll = self._coll(collection)
        data = _strip_id(data)
        if merge and doc_id in coll:
            coll[doc_id] = merge_document(coll[doc_id], data)
        else:
            coll[doc_id] = merge_document({}, data)

    def _write_update(self, collection: str, doc_id: str, fields: Dict) -> None:
        coll = self._coll(collection)
        if doc_id not in coll:
            raise NotFound(f"Document {collection}/{doc_id} not found")
        coll[doc_id] = apply_update(coll[doc_id], _strip_id(fields))

    def _write_delete(self, collection: str, doc_id: str) -> bool:
        return self._coll(collection).pop(doc_id, None) is not None

    # DocumentStore

    def get(self, collection: str, doc_id: str) -> Optional[Dict]:
        with self._lock:
            data = self._coll(collection).get(doc_id)
            return _with_id(doc_id, data) if data is not None else None

    def add(self, collection: str, data: Dict) -> str:
        with self._lock:
            doc_id = new_document_id()
            while doc_id in self._coll(collection):
                doc_id = new_document_id()
            self._write_set(collection, doc_id, data, merge=False)
            self._persist()
            return doc_id

    def set(self, collection: str, doc_id: str, data: Dict, merge: bool = False) -> None:
        with self._lock:
            self._write_set(collection, doc_id, data, merge)
            self._persist()

    def update(self, collection: str, doc_id: str, fields: Dict) -> None:
        with self._lock:
            self._write_update(collection, doc_id, fields)
            self._persist()

    def delete(self, collection: str, doc_id: str) -> bool:
        with self._lock:
            deleted = self._write_delete(collection, doc_id)
            if deleted:
                self._persist()
            return deleted

    def query(self, collection: str, field: str, value: Any) -> List[Dict]:
        with self._lock:
            return [
                _with_id(doc_id, data)
                for doc_id, data in self._coll(collection).items()
                if data.get(field) == value
            ]

    def list(self, collection: str) -> List[Dict]:
        with self._lock:
            return [_with_id(doc_id, data) for doc_id, data in self._coll(collection).items()]

    def batch_delete(self, refs: Iterable[Tuple[str, str]]) -> int:
        refs = list(refs)
        with self._lock:
            for collection, doc_id in refs:
                self._write_delete(collection, doc_id)
            if refs:
                self._persist()
        return len(refs)

    def run_transaction(self, fn: Callable[[Transaction], T]) -> T:
        with self._lock:
            txn = _MemoryTransaction(self)
            result = fn(txn)
            txn.commit()
            self._persist()
            return result


class JsonDocumentStore(MemoryDocumentStore):
    """Memory store persisted to a JSON file (e.g. data/store.json) after each write."""

    def __init__(self, path: Union[Path, str]):
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        super().__init__(self._load())

    def _load(self) -> Dict[str, Dict[str, Dict]]:
        if not self._path.exists():
            return {}
        try:
            with open(self._path) as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            raise StoreError(f"Could not read document store file {self._path}: {e}") from e
        if not isinstance(data, dict):
            raise StoreError(f"Document store file {self._path} must hold a JSON object")
        logger.info(
            "[store] Loaded %s from %s",
            ", ".join(f"{name}={len(docs)}" for name, docs in data.items()) or "no collections",
            self._path,
        )
        return data

    def _persist(self) -> None:
        try:
            with open(self._path, "w") as f:
                json.dump(self._collections, f, indent=2)
        except IOError as e:
            raise StoreError(f"Could not write document store file {self._path}: {e}") from e
