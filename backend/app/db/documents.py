"""Document store used for ``users``, ``interviews`` and ``feedback``.

Two backends share one small surface (``get``, ``set``, ``add``, ``query``):

- ``SQLiteDocumentStore`` keeps each document as a JSON row in the local
  ``documents`` table and evaluates filters with ``json_extract``.
- ``FirestoreDocumentStore`` forwards to Cloud Firestore through
  ``firebase_admin``.

Both raise ``ProviderError`` for backend failures so callers only deal with
one error type.
"""

import json
import logging
import os
import re
import sqlite3
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol, Sequence

from ..errors import ProviderError
from .database import get_db, resolve_db_path
from .schema import init_db

logger = logging.getLogger(__name__)

Filter = tuple[str, str, Any]
OrderBy = tuple[str, str]

SUPPORTED_OPERATORS = {"==", "!=", "<", "<=", ">", ">="}
_FIELD_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass
class DocumentSnapshot:
    id: str
    data: dict[str, Any] | None

    @property
    def exists(self) -> bool:
        return self.data is not None


class DocumentStore(Protocol):
    def get(self, collection: str, doc_id: str) -> DocumentSnapshot: ...

    def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None: ...

    def add(self, collection: str, data: dict[str, Any]) -> str: ...

    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: OrderBy | None = None,
        limit: int | None = None,
    ) -> list[DocumentSnapshot]: ...


def _check_field(field: str) -> str:
    if not _FIELD_RE.match(field or ""):
        raise ValueError(f"Unsupported field name: {field!r}")
    return field


def _check_direction(direction: str) -> str:
    value = str(direction or "").strip().lower()
    if value not in {"asc", "desc"}:
        raise ValueError(f"Unsupported order direction: {direction!r}")
    return value


# ── SQLite backend ────────────────────────────────────────────────────────


class SQLiteDocumentStore:
    def __init__(self, db_path: str | Path | None = None):
        self.db_path = Path(db_path) if db_path is not None else resolve_db_path()
        init_db(self.db_path)

    def _connect(self) -> sqlite3.Connection:
        return get_db(self.db_path)

    def get(self, collection: str, doc_id: str) -> DocumentSnapshot:
        conn = self._connect()
        try:
            row = conn.execute(
                "SELECT data_json FROM documents WHERE collection = ? AND id = ?",
                (collection, doc_id),
            ).fetchone()
        except sqlite3.Error as exc:
            raise ProviderError(f"Failed to read {collection}/{doc_id}") from exc
        finally:
            conn.close()

        if row is None:
            return DocumentSnapshot(id=doc_id, data=None)
        return DocumentSnapshot(id=doc_id, data=self._decode(row["data_json"], collection, doc_id))

    def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        payload = json.dumps(data)
        conn = self._connect()
        try:
            conn.execute(
                """
                INSERT INTO documents (collection, id, data_json)
                VALUES (?, ?, ?)
                ON CONFLICT(collection, id) DO UPDATE SET
                    data_json = excluded.data_json,
                    updated_at = datetime('now')
                """,
                (collection, doc_id, payload),
            )
            conn.commit()
        except sqlite3.Error as exc:
            raise ProviderError(f"Failed to write {collection}/{doc_id}") from exc
        finally:
            conn.close()

    def add(self, collection: str, data: dict[str, Any]) -> str:
        doc_id = uuid.uuid4().hex
        payload = json.dumps(data)
        conn = self._connect()
        try:
            conn.execute(
                "INSERT INTO documents (collection, id, data_json) VALUES (?, ?, ?)",
                (collection, doc_id, payload),
            )
            conn.commit()
        except sqlite3.Error as exc:
            raise ProviderError(f"Failed to add document to {collection}") from exc
        finally:
            conn.close()
        return doc_id

    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: OrderBy | None = None,
        limit: int | None = None,
    ) -> list[DocumentSnapshot]:
        clauses = ["collection = ?"]
        params: list[Any] = [collection]
        for field, op, value in filters:
            if op not in SUPPORTED_OPERATORS:
                raise ValueError(f"Unsupported operator: {op!r}")
            if isinstance(value, (dict, list)):
                raise ValueError("Filter values must be scalars")
            op_sql = "=" if op == "==" else op
            clauses.append(f"json_extract(data_json, '$.{_check_field(field)}') {op_sql} ?")
            params.append(value)

        sql = f"SELECT id, data_json FROM documents WHERE {' AND '.join(clauses)}"
        if order_by is not None:
            field, direction = order_by
            sql += (
                f" ORDER BY json_extract(data_json, '$.{_check_field(field)}') "
                f"{_check_direction(direction).upper()}, rowid ASC"
            )
        else:
            sql += " ORDER BY rowid ASC"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(int(limit))

        conn = self._connect()
        try:
            rows = conn.execute(sql, params).fetchall()
        except sqlite3.Error as exc:
            raise ProviderError(f"Failed to query {collection}") from exc
        finally:
            conn.close()

        return [
            DocumentSnapshot(id=row["id"], data=self._decode(row["data_json"], collection, row["id"]))
            for row in rows
        ]

    @staticmethod
    def _decode(raw: str, collection: str, doc_id: str) -> dict[str, Any]:
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ProviderError(f"Corrupt document {collection}/{doc_id}") from exc
        if not isinstance(parsed, dict):
            raise ProviderError(f"Corrupt document {collection}/{doc_id}")
        return parsed


# ── Firestore backend ─────────────────────────────────────────────────────


class FirestoreDocumentStore:
    def __init__(self, client: Any = None):
        if client is None:
            from firebase_admin import firestore

            from ..clients.firebase import get_firebase_app

            client = firestore.client(app=get_firebase_app())
        self._client = client

    def get(self, collection: str, doc_id: str) -> DocumentSnapshot:
        try:
            snapshot = self._client.collection(collection).document(doc_id).get()
        except Exception as exc:
            raise ProviderError(f"Failed to read {collection}/{doc_id}") from exc
        return DocumentSnapshot(id=doc_id, data=snapshot.to_dict() if snapshot.exists else None)

    def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        try:
            self._client.collection(collection).document(doc_id).set(data)
        except Exception as exc:
            raise ProviderError(f"Failed to write {collection}/{doc_id}") from exc

    def add(self, collection: str, data: dict[str, Any]) -> str:
        try:
            _, ref = self._client.collection(collection).add(data)
        except Exception as exc:
            raise ProviderError(f"Failed to add document to {collection}") from exc
        return ref.id

    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: OrderBy | None = None,
        limit: int | None = None,
    ) -> list[DocumentSnapshot]:
        from google.cloud.firestore_v1.base_query import FieldFilter
        from google.cloud.firestore_v1.query import Query

        query = self._client.collection(collection)
        for field, op, value in filters:
            if op not in SUPPORTED_OPERATORS:
                raise ValueError(f"Unsupported operator: {op!r}")
            query = query.where(filter=FieldFilter(field, op, value))
        if order_by is not None:
            field, direction = order_by
            firestore_direction = (
                Query.DESCENDING if _check_direction(direction) == "desc" else Query.ASCENDING
            )
            query = query.order_by(field, direction=firestore_direction)
        if limit is not None:
            query = query.limit(int(limit))

        try:
            return [DocumentSnapshot(id=doc.id, data=doc.to_dict() or {}) for doc in query.stream()]
        except Exception as exc:
            raise ProviderError(f"Failed to query {collection}") from exc


# ── Process-wide handle ───────────────────────────────────────────────────

_store: DocumentStore | None = None  # module-level cache


def get_document_store() -> DocumentStore:
    """Return the configured document store, creating it on first use.

    ``DOCUMENT_STORE=firestore`` selects Cloud Firestore; anything else (or
    unset) uses the local SQLite file.
    """
    global _store  # noqa: PLW0603

    if _store is not None:
        return _store

    backend = os.environ.get("DOCUMENT_STORE", "sqlite").strip().lower()
    if backend == "firestore":
        _store = FirestoreDocumentStore()
    else:
        if backend != "sqlite":
            logger.warning("Unknown DOCUMENT_STORE=%s; falling back to sqlite", backend)
        _store = SQLiteDocumentStore()
    logger.info("Document store initialised (backend=%s)", type(_store).__name__)
    return _store
