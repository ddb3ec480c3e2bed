"""Backend collaborators -- documents, blobs and accounts.

Usage::

    from voice_vote.backend import create_backend

    backend = create_backend("memory")
    doc_id = await backend.documents.add("reports", {"category": "Other"})
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from voice_vote.backend.base import (
    SERVER_TIMESTAMP,
    AuthProvider,
    AuthUser,
    BlobStore,
    Document,
    DocumentStore,
    Increment,
    Transaction,
)

__all__ = [
    "AuthProvider",
    "AuthUser",
    "Backend",
    "BACKENDS",
    "BlobStore",
    "Document",
    "DocumentStore",
    "Increment",
    "SERVER_TIMESTAMP",
    "Transaction",
    "create_backend",
]


@dataclass(frozen=True)
class Backend:
    """The three collaborators a running app needs."""

    documents: DocumentStore
    blobs: BlobStore
    auth: AuthProvider


def _create_memory(**kwargs: Any) -> Backend:
    from voice_vote.backend.memory import (
        MemoryAuthProvider,
        MemoryBlobStore,
        MemoryDocumentStore,
    )

    return Backend(
        documents=MemoryDocumentStore(kwargs.get("initial")),
        blobs=MemoryBlobStore(),
        auth=MemoryAuthProvider(),
    )


def _create_firebase(
    api_key: str | None = None,
    project_id: str | None = None,
    storage_bucket: str | None = None,
    **kwargs: Any,
) -> Backend:
    from voice_vote.backend.firebase import FirebaseAuth, FirebaseStorage
    from voice_vote.backend.firestore import FirestoreDocumentStore
    from voice_vote.backend.rest import RestClient

    client = RestClient(**kwargs)
    auth = FirebaseAuth(api_key=api_key, client=client)
    return Backend(
        documents=FirestoreDocumentStore(
            project_id=project_id, api_key=api_key, token_provider=auth.id_token, client=client
        ),
        blobs=FirebaseStorage(bucket=storage_bucket, token_provider=auth.id_token, client=client),
        auth=auth,
    )


BACKENDS: dict[str, str] = {
    "memory": "voice_vote.backend.memory",
    "firebase": "voice_vote.backend.firestore + voice_vote.backend.firebase",
}
"""Registry of available backend names."""


def create_backend(name: str, **kwargs: Any) -> Backend:
    """Create a backend by name.

    Parameters
    ----------
    name:
        ``"memory"`` or ``"firebase"``.
    **kwargs:
        Backend-specific configuration (credentials, ``timeout``,
        ``max_retries``, seed data for ``memory``).
    """
    if name == "memory":
        return _create_memory(**kwargs)
    if name == "firebase":
        return _create_firebase(**kwargs)
    raise ValueError(
        f"Unknown backend: {name!r}. Available backends: {', '.join(BACKENDS)}"
    )
