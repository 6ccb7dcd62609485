"""
Firestore document store: one top-level collection per resource.

Used when DATA_SOURCE=firebase. Field transforms map to Firestore's own
ArrayUnion/ArrayRemove/Increment/DELETE_FIELD, so array membership changes are
atomic per document; run_transaction uses @firestore.transactional, which
retries the function on contention.
"""

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, TypeVar, Union

import firebase_admin
from firebase_admin import credentials, firestore
from google.api_core import exceptions as google_exceptions
from google.cloud.firestore_v1.base_query import FieldFilter

from engagement.errors import NotFound

from .document_store import (
    DELETE_FIELD,
    ArrayRemove,
    ArrayUnion,
    Increment,
    StoreError,
    Transaction,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Firestore caps a batched write at 500 operations
BATCH_SIZE = 500


def _to_firestore(value: Any) -> Any:
    """Translate store transforms into Firestore sentinels (recursively for maps)."""
    if isinstance(value, ArrayUnion):
        return firestore.ArrayUnion(list(value.values))
    if isinstance(value, ArrayRemove):
        return firestore.ArrayRemove(list(value.values))
    if isinstance(value, Increment):
        return firestore.Increment(value.amount)
    if value is DELETE_FIELD:
        return firestore.DELETE_FIELD
    if isinstance(value, dict):
        return {k: _to_firestore(v) for k, v in value.items() if k != "id"}
    return value


def _snapshot_to_dict(snapshot) -> Dict:
    d = snapshot.to_dict() or {}
    d["id"] = snapshot.id
    return d


class _FirestoreTransaction:
    def __init__(self, store: "FirestoreDocumentStore", transaction):
        self._store = store
        self._transaction = transaction

    def get(self, collection: str, doc_id: str) -> Optional[Dict]:
        snapshot = self._store._ref(collection, doc_id).get(transaction=self._transaction)
        return _snapshot_to_dict(snapshot) if snapshot.exists else None

    def set(self, collection: str, doc_id: str, data: Dict, merge: bool = False) -> None:
        self._transaction.set(self._store._ref(collection, doc_id), _to_firestore(data), merge=merge)

    def update(self, collection: str, doc_id: str, fields: Dict) -> None:
        self._transaction.update(self._store._ref(collection, doc_id), _to_firestore(fields))

    def delete(self, collection: str, doc_id: str) -> None:
        self._transaction.delete(self._store._ref(collection, doc_id))


class FirestoreDocumentStore:
    """Document store backed by Firestore (firebase-admin)."""

    def __init__(
        self,
        project_id: Optional[str] = None,
        credentials_path: Optional[Union[Path, str]] = None,
    ):
        if not firebase_admin._apps:
            if credentials_path:
                cred = credentials.Certificate(str(Path(credentials_path).resolve()))
                opts = {"projectId": project_id} if project_id else None
                firebase_admin.initialize_app(cred, opts)
            else:
                firebase_admin.initialize_app(options={"projectId": project_id} if project_id else None)
        self._db = firestore.client()
        self._project_id = project_id

    def _ref(self, collection: str, doc_id: str):
        return self._db.collection(collection).document(doc_id)

    def get(self, collection: str, doc_id: str) -> Optional[Dict]:
        try:
            snapshot = self._ref(collection, doc_id).get()
        except google_exceptions.GoogleAPICallError as e:
            raise StoreError(f"Firestore read {collection}/{doc_id} failed: {e}") from e
        return _snapshot_to_dict(snapshot) if snapshot.exists else None

    def add(self, collection: str, data: Dict) -> str:
        try:
            _, ref = self._db.collection(collection).add(_to_firestore(data))
        except google_exceptions.GoogleAPICallError as e:
            raise StoreError(f"Firestore add to {collection} failed: {e}") from e
        return ref.id

    def set(self, collection: str, doc_id: str, data: Dict, merge: bool = False) -> None:
        try:
            self._ref(collection, doc_id).set(_to_firestore(data), merge=merge)
        except google_exceptions.GoogleAPICallError as e:
            raise StoreError(f"Firestore set {collection}/{doc_id} failed: {e}") from e

    def update(self, collection: str, doc_id: str, fields: Dict) -> None:
        try:
            self._ref(collection, doc_id).update(_to_firestore(fields))
        except google_exceptions.NotFound as e:
            raise NotFound(f"Document {collection}/{doc_id} not found") from e
        except google_exceptions.GoogleAPICallError as e:
            raise StoreError(f"Firestore update {collection}/{doc_id} failed: {e}") from e

    def delete(self, collection: str, doc_id: str) -> bool:
        ref = self._ref(collection, doc_id)
        try:
            if not ref.get().exists:
                return False
            ref.delete()
        except google_exceptions.GoogleAPICallError as e:
            raise StoreError(f"Firestore delete {collection}/{doc_id} failed: {e}") from e
        return True

    def query(self, collection: str, field: str, value: Any) -> List[Dict]:
        query = self._db.collection(collection).where(filter=FieldFilter(field, "==", value))
        try:
            return [_snapshot_to_dict(doc) for doc in query.stream()]
        except google_exceptions.GoogleAPICallError as e:
            raise StoreError(f"Firestore query {collection}.{field} failed: {e}") from e

    def list(self, collection: str) -> List[Dict]:
        try:
            return [_snapshot_to_dict(doc) for doc in self._db.collection(collection).stream()]
        except google_exceptions.GoogleAPICallError as e:
            raise StoreError(f"Firestore list {collection} failed: {e}") from e

    def batch_delete(self, refs: Iterable[Tuple[str, str]]) -> int:
        """Delete in batches of 500; each batch commits atomically."""
        refs = list(refs)
        try:
            for start in range(0, len(refs), BATCH_SIZE):
                batch = self._db.batch()
                for collection, doc_id in refs[start:start + BATCH_SIZE]:
                    batch.delete(self._ref(collection, doc_id))
                batch.commit()
        except google_exceptions.GoogleAPICallError as e:
            raise StoreError(f"Firestore batch delete failed: {e}") from e
        if len(refs) > BATCH_SIZE:
            logger.warning("[store] batch delete of %d documents was split into several commits", len(refs))
        return len(refs)

    def run_transaction(self, fn: Callable[[Transaction], T]) -> T:
        @firestore.transactional
        def _run(transaction):
            return fn(_FirestoreTransaction(self, transaction))

        try:
            return _run(self._db.transaction())
        except google_exceptions.GoogleAPICallError as e:
            raise StoreError(f"Firestore transaction failed: {e}") from e
