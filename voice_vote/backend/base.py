"""Abstract backend collaborators.

The voice layer talks to three remote services: a document store
(election data), a blob store (photos, eligibility documents, audio
proof) and an auth provider (student accounts).  Each is an ABC here;
``memory`` and ``firestore``/``firebase`` provide implementations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Document:
    """A stored document and its id."""

    id: str
    data: dict[str, Any]


@dataclass(frozen=True)
class Increment:
    """Field transform: add *amount* to the stored number (missing = 0)."""

    amount: int = 1


class _ServerTimestamp:
    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP: Any = _ServerTimestamp()
"""Sentinel replaced by the store's current time on write."""

SnapshotCallback = Callable[[list[Document]], None]
Unsubscribe = Callable[[], Awaitable[None]]


class Transaction(ABC):
    """Reads and buffered writes applied atomically on commit."""

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        ...

    @abstractmethod
    def set(
        self, collection: str, doc_id: str, data: dict[str, Any], merge: bool = False
    ) -> None:
        ...

    @abstractmethod
    def delete(self, collection: str, doc_id: str) -> None:
        ...


class DocumentStore(ABC):
    """Collection-scoped document CRUD with live subscriptions."""

    @abstractmethod
    async def add(self, collection: str, data: dict[str, Any]) -> str:
        """Create a document with a generated id and return the id."""
        ...

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        """Return the document's data, or ``None`` if it does not exist."""
        ...

    @abstractmethod
    async def set(
        self, collection: str, doc_id: str, data: dict[str, Any], merge: bool = False
    ) -> None:
        """Write a document.

        With ``merge=True`` only the given fields are written and
        ``Increment`` values add to the stored numbers; otherwise the
        document is replaced.
        """
        ...

    @abstractmethod
    async def delete(self, collection: str, doc_id: str) -> None:
        """Delete a document.  Deleting a missing document is not an error."""
        ...

    @abstractmethod
    async def list(self, collection: str) -> list[Document]:
        """Return every document of *collection*."""
        ...

    @abstractmethod
    async def subscribe(self, collection: str, callback: SnapshotCallback) -> Unsubscribe:
        """Call *callback* with the collection contents now and on every change.

        Returns an async function that ends the subscription.
        """
        ...

    @abstractmethod
    async def run_transaction(self, fn: Callable[[Transaction], Awaitable[T]]) -> T:
        """Run *fn* as one atomic read-modify-write and return its result."""
        ...


class BlobStore(ABC):
    """Remote file storage."""

    @abstractmethod
    async def upload(
        self, data: bytes, path: str, content_type: str = "application/octet-stream"
    ) -> str:
        """Store *data* at *path* and return its download URL."""
        ...


@dataclass(frozen=True)
class AuthUser:
    """A signed-in account."""

    uid: str
    email: str
    id_token: str | None = None


class AuthProvider(ABC):
    """Email/password accounts."""

    @abstractmethod
    async def create_user(self, email: str, password: str) -> AuthUser:
        """Create an account.

        Raises
        ------
        voice_vote.errors.AuthError
            If the email is taken or the password is rejected.
        """
        ...

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> AuthUser:
        """Sign in.

        Raises
        ------
        voice_vote.errors.AuthError
            If the credentials are invalid.
        """
        ...
