"""
Document store abstraction: Firestore, SQL (SQLAlchemy) and an in-memory
test implementation.

The store is collection-oriented: documents are camelCase dicts addressed by
(collection, id) and can be queried by equality/range filters with ordering.
Fields set to ``SERVER_TIMESTAMP`` are filled in by the store on write.
"""

from __future__ import annotations

import copy
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Optional, Protocol, Sequence

from firebase_admin import firestore
from google.api_core import exceptions as google_exceptions
from google.cloud.firestore_v1 import SERVER_TIMESTAMP
from google.cloud.firestore_v1.base_query import FieldFilter as FirestoreFieldFilter
from sqlalchemy import JSON, Column, String, create_engine, delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from portfolio.errors import StoreError

FILTER_OPERATORS = ("==", "<", "<=", ">", ">=")


@dataclass(frozen=True)
class FieldFilter:
    field: str
    op: str
    value: Any

    def __post_init__(self):
        if self.op not in FILTER_OPERATORS:
            raise ValueError(f"Unsupported filter operator: {self.op}")


@dataclass(frozen=True)
class OrderBy:
    field: str
    descending: bool = False


@dataclass
class Document:
    id: str
    data: dict = field(default_factory=dict)


class DocumentMissingError(LookupError):
    """Raised by update() when the target document does not exist."""


class DocumentStore(Protocol):
    """Interface for document persistence."""

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        ...

    def add(self, collection: str, data: dict) -> str:
        ...

    def set(self, collection: str, doc_id: str, data: dict, *, merge: bool = False) -> None:
        ...

    def update(self, collection: str, doc_id: str, changes: dict) -> None:
        ...

    def delete(self, collection: str, doc_id: str) -> None:
        ...

    def query(
        self,
        collection: str,
        filters: Sequence[FieldFilter] = (),
        order_by: Sequence[OrderBy] = (),
        limit: Optional[int] = None,
    ) -> list[Document]:
        ...

    def count(self, collection: str, filters: Sequence[FieldFilter] = ()) -> int:
        ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _resolve_server_timestamps(data: dict, now: datetime) -> dict:
    return {k: (now if v is SERVER_TIMESTAMP else v) for k, v in data.items()}


def _compare(stored: Any, op: str, expected: Any) -> bool:
    try:
        if op == "==":
            return stored == expected
        if op == "<":
            return stored < expected
        if op == "<=":
            return stored <= expected
        if op == ">":
            return stored > expected
        return stored >= expected
    except TypeError:
        # Values of different types never match, as in Firestore.
        return False


def matches_filters(data: dict, filters: Iterable[FieldFilter]) -> bool:
    for f in filters:
        if f.field not in data or not _compare(data[f.field], f.op, f.value):
            return False
    return True


def _type_rank(value: Any) -> int:
    # Firestore cross-type ordering.
    if value is None:
        return 0
    if isinstance(value, bool):
        return 1
    if isinstance(value, (int, float)):
        return 2
    if isinstance(value, datetime):
        return 3
    if isinstance(value, str):
        return 4
    if isinstance(value, bytes):
        return 5
    if isinstance(value, list):
        return 6
    return 7


def sort_key(value: Any) -> tuple:
    """Orders values by type rank, then by value within the rank."""
    rank = _type_rank(value)
    if rank in (1, 2, 4, 5):
        return (rank, value)
    if rank == 3:
        return (rank, value if value.tzinfo else value.replace(tzinfo=timezone.utc))
    if rank in (6, 7):
        return (rank, repr(value))
    return (rank, 0)


def apply_query(
    documents: Iterable[Document],
    filters: Sequence[FieldFilter],
    order_by: Sequence[OrderBy],
    limit: Optional[int],
) -> list[Document]:
    """
    Evaluates filters, ordering and limit over already-loaded documents.
    Documents lacking an order-by field are excluded.
    """
    selected = [
        doc
        for doc in documents
        if matches_filters(doc.data, filters)
        and all(o.field in doc.data for o in order_by)
    ]
    for o in reversed(order_by):
        selected.sort(
            key=lambda d: sort_key(d.data[o.field]),
            reverse=o.descending,
        )
    if limit is not None:
        selected = selected[:limit]
    return selected


class InMemoryDocumentStore:
    """Simple in-memory document store for development and tests."""

    def __init__(self, clock: Callable[[], datetime] = _utcnow):
        self._clock = clock
        self._lock = threading.Lock()
        self.collections: dict[str, dict[str, dict]] = {}

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        with self._lock:
            data = self.collections.get(collection, {}).get(doc_id)
            if data is None:
                return None
            return Document(id=doc_id, data=copy.deepcopy(data))

    def add(self, collection: str, data: dict) -> str:
        doc_id = uuid.uuid4().hex
        self.set(collection, doc_id, data)
        return doc_id

    def set(self, collection: str, doc_id: str, data: dict, *, merge: bool = False) -> None:
        resolved = copy.deepcopy(_resolve_server_timestamps(data, self._clock()))
        with self._lock:
            docs = self.collections.setdefault(collection, {})
            if merge and doc_id in docs:
                docs[doc_id].update(resolved)
            else:
                docs[doc_id] = resolved

    def update(self, collection: str, doc_id: str, changes: dict) -> None:
        resolved = copy.deepcopy(_resolve_server_timestamps(changes, self._clock()))
        with self._lock:
            docs = self.collections.get(collection, {})
            if doc_id not in docs:
                raise DocumentMissingError(f"{collection}/{doc_id}")
            docs[doc_id].update(resolved)

    def delete(self, collection: str, doc_id: str) -> None:
        with self._lock:
            self.collections.get(collection, {}).pop(doc_id, None)

    def query(
        self,
        collection: str,
        filters: Sequence[FieldFilter] = (),
        order_by: Sequence[OrderBy] = (),
        limit: Optional[int] = None,
    ) -> list[Document]:
        with self._lock:
            snapshot = [
                Document(id=doc_id, data=copy.deepcopy(data))
                for doc_id, data in self.collections.get(collection, {}).items()
            ]
        return apply_query(snapshot, filters, order_by, limit)

    def count(self, collection: str, filters: Sequence[FieldFilter] = ()) -> int:
        return len(self.query(collection, filters))

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        with self._lock:
            self.collections.clear()


class FirestoreDocumentStore:
    """Firestore-backed implementation using the firebase-admin client."""

    def __init__(self, client: Any = None):
        self._client = client if client is not None else firestore.client()

    def _ref(self, collection: str, doc_id: str):
        return self._client.collection(collection).document(doc_id)

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        try:
            snapshot = self._ref(collection, doc_id).get()
        except google_exceptions.GoogleAPIError as e:
            raise StoreError() from e
        if not snapshot.exists:
            return None
        return Document(id=snapshot.id, data=snapshot.to_dict() or {})

    def add(self, collection: str, data: dict) -> str:
        try:
            _, doc_ref = self._client.collection(collection).add(data)
        except google_exceptions.GoogleAPIError as e:
            raise StoreError() from e
        return doc_ref.id

    def set(self, collection: str, doc_id: str, data: dict, *, merge: bool = False) -> None:
        try:
            self._ref(collection, doc_id).set(data, merge=merge)
        except google_exceptions.GoogleAPIError as e:
            raise StoreError() from e

    def update(self, collection: str, doc_id: str, changes: dict) -> None:
        try:
            self._ref(collection, doc_id).update(changes)
        except google_exceptions.NotFound as e:
            raise DocumentMissingError(f"{collection}/{doc_id}") from e
        except google_exceptions.GoogleAPIError as e:
            raise StoreError() from e

    def delete(self, collection: str, doc_id: str) -> None:
        try:
            self._ref(collection, doc_id).delete()
        except google_exceptions.GoogleAPIError as e:
            raise StoreError() from e

    def _build_query(
        self,
        collection: str,
        filters: Sequence[FieldFilter],
        order_by: Sequence[OrderBy] = (),
        limit: Optional[int] = None,
    ):
        query = self._client.collection(collection)
        for f in filters:
            query = query.where(filter=FirestoreFieldFilter(f.field, f.op, f.value))
        for o in order_by:
            direction = (
                firestore.Query.DESCENDING if o.descending else firestore.Query.ASCENDING
            )
            query = query.order_by(o.field, direction=direction)
        if limit is not None:
            query = query.limit(limit)
        return query

    def query(
        self,
        collection: str,
        filters: Sequence[FieldFilter] = (),
        order_by: Sequence[OrderBy] = (),
        limit: Optional[int] = None,
    ) -> list[Document]:
        try:
            snapshots = self._build_query(collection, filters, order_by, limit).stream()
            return [Document(id=s.id, data=s.to_dict() or {}) for s in snapshots]
        except google_exceptions.GoogleAPIError as e:
            raise StoreError() from e

    def count(self, collection: str, filters: Sequence[FieldFilter] = ()) -> int:
        try:
            results = self._build_query(collection, filters).count().get()
        except google_exceptions.GoogleAPIError as e:
            raise StoreError() from e
        return int(results[0][0].value)


_TIMESTAMP_TAG = "$timestamp"


def _to_json(value: Any) -> Any:
    if isinstance(value, datetime):
        return {_TIMESTAMP_TAG: value.isoformat()}
    if isinstance(value, dict):
        return {k: _to_json(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_to_json(v) for v in value]
    return value


def _from_json(value: Any) -> Any:
    if isinstance(value, dict):
        if set(value) == {_TIMESTAMP_TAG}:
            return datetime.fromisoformat(value[_TIMESTAMP_TAG])
        return {k: _from_json(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_from_json(v) for v in value]
    return value


class SqlDocumentStore:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres
    or SQLite for tests). Documents are kept as JSON rows; filters and ordering
    are evaluated per collection after loading.
    """

    def __init__(self, database_url: str, clock: Callable[[], datetime] = _utcnow):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlDocumentStore")
        self._clock = clock
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        try:
            with self.Session() as session:
                row = session.get(DocumentRow, (collection, doc_id))
                if not row:
                    return None
                return Document(id=row.id, data=_from_json(row.data))
        except SQLAlchemyError as e:
            raise StoreError() from e

    def add(self, collection: str, data: dict) -> str:
        doc_id = uuid.uuid4().hex
        self.set(collection, doc_id, data)
        return doc_id

    def set(self, collection: str, doc_id: str, data: dict, *, merge: bool = False) -> None:
        resolved = _to_json(_resolve_server_timestamps(data, self._clock()))
        try:
            with self.Session() as session:
                row = session.get(DocumentRow, (collection, doc_id))
                if row and merge:
                    row.data = {**row.data, **resolved}
                elif row:
                    row.data = resolved
                else:
                    session.add(DocumentRow(collection=collection, id=doc_id, data=resolved))
                session.commit()
        except SQLAlchemyError as e:
            raise StoreError() from e

    def update(self, collection: str, doc_id: str, changes: dict) -> None:
        resolved = _to_json(_resolve_server_timestamps(changes, self._clock()))
        try:
            with self.Session() as session:
                row = session.get(DocumentRow, (collection, doc_id))
                if not row:
                    raise DocumentMissingError(f"{collection}/{doc_id}")
                row.data = {**row.data, **resolved}
                session.commit()
        except SQLAlchemyError as e:
            raise StoreError() from e

    def delete(self, collection: str, doc_id: str) -> None:
        try:
            with self.Session() as session:
                session.execute(
                    delete(DocumentRow).where(
                        DocumentRow.collection == collection, DocumentRow.id == doc_id
                    )
                )
                session.commit()
        except SQLAlchemyError as e:
            raise StoreError() from e

    def query(
        self,
        collection: str,
        filters: Sequence[FieldFilter] = (),
        order_by: Sequence[OrderBy] = (),
        limit: Optional[int] = None,
    ) -> list[Document]:
        try:
            with self.Session() as session:
                rows = session.execute(
                    select(DocumentRow).where(DocumentRow.collection == collection)
                ).scalars()
                documents = [Document(id=row.id, data=_from_json(row.data)) for row in rows]
        except SQLAlchemyError as e:
            raise StoreError() from e
        return apply_query(documents, filters, order_by, limit)

    def count(self, collection: str, filters: Sequence[FieldFilter] = ()) -> int:
        return len(self.query(collection, filters))


Base = declarative_base()


class DocumentRow(Base):
    __tablename__ = "documents"

    collection = Column(String, primary_key=True)
    id = Column(String, primary_key=True)
    data = Column(JSON, nullable=False)
