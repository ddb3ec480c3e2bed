"""In-process backend -- documents, blobs and accounts kept in memory.

Used for tests, demos and offline development.  Transactions are
serialised with an ``asyncio.Lock``, which gives the same
at-most-once guarantees as the remote store for a single process.
"""

from __future__ import annotations

import asyncio
import copy
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, TypeVar

from voice_vote.backend.base import (
    SERVER_TIMESTAMP,
    AuthProvider,
    AuthUser,
    BlobStore,
    Document,
    DocumentStore,
    Increment,
    SnapshotCallback,
    Transaction,
    Unsubscribe,
)
from voice_vote.errors import AuthError

logger = logging.getLogger(__name__)

T = TypeVar("T")

MIN_PASSWORD_LENGTH = 6


def _new_id() -> str:
    return uuid.uuid4().hex[:20]


def apply_write(
    existing: dict[str, Any] | None, data: dict[str, Any], merge: bool
) -> dict[str, Any]:
    """Return the document that results from writing *data* over *existing*."""
    result = dict(existing or {}) if merge else {}
    for key, value in data.items():
        if isinstance(value, Increment):
            current = result.get(key, 0)
            if not isinstance(current, (int, float)) or isinstance(current, bool):
                current = 0
            result[key] = current + value.amount
        elif value is SERVER_TIMESTAMP:
            result[key] = datetime.now(timezone.utc)
        else:
            result[key] = copy.deepcopy(value)
    return result


class _MemoryTransaction(Transaction):
    def __init__(self, store: MemoryDocumentStore) -> None:
        self._store = store
        self._writes: list[tuple[str, str, dict[str, Any] | None, bool]] = []

    async def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        if self._writes:
            raise RuntimeError("Transaction reads must happen before writes")
        return self._store._read(collection, doc_id)

    def set(
        self, collection: str, doc_id: str, data: dict[str, Any], merge: bool = False
    ) -> None:
        self._writes.append((collection, doc_id, data, merge))

    def delete(self, collection: str, doc_id: str) -> None:
        self._writes.append((collection, doc_id, None, False))

    def commit(self) -> None:
        touched: set[str] = set()
        for collection, doc_id, data, merge in self._writes:
            if data is None:
                self._store._remove(collection, doc_id)
            else:
                self._store._write(collection, doc_id, data, merge)
            touched.add(collection)
        for collection in touched:
            self._store._notify(collection)


class MemoryDocumentStore(DocumentStore):
    """Dictionary-backed ``DocumentStore``.

    Parameters
    ----------
    initial:
        Optional seed data: ``{collection: {doc_id: data}}``.
    """

    def __init__(self, initial: dict[str, dict[str, dict[str, Any]]] | None = None) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._subscribers: dict[str, list[SnapshotCallback]] = {}
        self._lock = asyncio.Lock()
        for collection, docs in (initial or {}).items():
            for doc_id, data in docs.items():
                self._write(collection, doc_id, data, merge=False)

    # -- unlocked primitives --------------------------------------------------

    def _read(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        data = self._collections.get(collection, {}).get(doc_id)
        return copy.deepcopy(data) if data is not None else None

    def _write(self, collection: str, doc_id: str, data: dict[str, Any], merge: bool) -> None:
        docs = self._collections.setdefault(collection, {})
        docs[doc_id] = apply_write(docs.get(doc_id), data, merge)

    def _remove(self, collection: str, doc_id: str) -> None:
        self._collections.get(collection, {}).pop(doc_id, None)

    def _snapshot(self, collection: str) -> list[Document]:
        return [
            Document(doc_id, copy.deepcopy(data))
            for doc_id, data in self._collections.get(collection, {}).items()
        ]

    def _notify(self, collection: str) -> None:
        callbacks = list(self._subscribers.get(collection, ()))
        if not callbacks:
            return
        snapshot = self._snapshot(collection)
        for callback in callbacks:
            callback(list(snapshot))

    # -- DocumentStore --------------------------------------------------------

    async def add(self, collection: str, data: dict[str, Any]) -> str:
        doc_id = _new_id()
        async with self._lock:
            self._write(collection, doc_id, data, merge=False)
        self._notify(collection)
        return doc_id

    async def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        return self._read(collection, doc_id)

    async def set(
        self, collection: str, doc_id: str, data: dict[str, Any], merge: bool = False
    ) -> None:
        async with self._lock:
            self._write(collection, doc_id, data, merge)
        self._notify(collection)

    async def delete(self, collection: str, doc_id: str) -> None:
        async with self._lock:
            self._remove(collection, doc_id)
        self._notify(collection)

    async def list(self, collection: str) -> list[Document]:
        return self._snapshot(collection)

    async def subscribe(self, collection: str, callback: SnapshotCallback) -> Unsubscribe:
        callbacks = self._subscribers.setdefault(collection, [])
        callbacks.append(callback)
        callback(self._snapshot(collection))

        async def unsubscribe() -> None:
            if callback in callbacks:
                callbacks.remove(callback)

        return unsubscribe

    async def run_transaction(self, fn: Callable[[Transaction], Awaitable[T]]) -> T:
        async with self._lock:
            txn = _MemoryTransaction(self)
            result = await fn(txn)
            txn.commit()
        return result


class MemoryBlobStore(BlobStore):
    """Keeps uploaded files in a dict; URLs use the ``memory://`` scheme."""

    def __init__(self) -> None:
        self.files: dict[str, tuple[bytes, str]] = {}

    async def upload(
        self, data: bytes, path: str, content_type: str = "application/octet-stream"
    ) -> str:
        self.files[path] = (bytes(data), content_type)
        logger.debug("Stored %d bytes at %s", len(data), path)
        return f"memory://{path}"


class MemoryAuthProvider(AuthProvider):
    """Email/password accounts held in memory."""

    def __init__(self) -> None:
        self._accounts: dict[str, tuple[str, str]] = {}

    async def create_user(self, email: str, password: str) -> AuthUser:
        key = email.strip().lower()
        if not key or "@" not in key:
            raise AuthError(f"Invalid email address: {email!r}")
        if key in self._accounts:
            raise AuthError("The email address is already in use")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise AuthError(
                f"Password should be at least {MIN_PASSWORD_LENGTH} characters"
            )
        uid = _new_id()
        self._accounts[key] = (uid, password)
        return AuthUser(uid=uid, email=key)

    async def sign_in(self, email: str, password: str) -> AuthUser:
        key = email.strip().lower()
        account = self._accounts.get(key)
        if account is None or account[1] != password:
            raise AuthError("Invalid email or password")
        return AuthUser(uid=account[0], email=key)
