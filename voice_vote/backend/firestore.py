"""Cloud Firestore document store over the REST API.

Documents are converted to and from Firestore's typed ``Value`` JSON
(``encode_value`` / ``decode_value``).  Transactions use
``beginTransaction`` + ``commit``; ``Increment`` and
``SERVER_TIMESTAMP`` become field transforms so they are applied by the
server.  Live subscriptions are emulated by polling.
"""

from __future__ import annotations

import asyncio
import base64
import logging
import re
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, TypeVar
from urllib.parse import quote

from voice_vote.backend.base import (
    SERVER_TIMESTAMP,
    Document,
    DocumentStore,
    Increment,
    SnapshotCallback,
    Transaction,
    Unsubscribe,
)
from voice_vote.backend.rest import RestClient, env_or_arg
from voice_vote.errors import BackendError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_BASE_URL = "https://firestore.googleapis.com/v1"
_SIMPLE_FIELD = re.compile(r"^[A-Za-z_][A-Za-z_0-9]*$")
_PAGE_SIZE = 300
_TRANSACTION_ATTEMPTS = 5
CONFLICT = 409


# -- value codec ---------------------------------------------------------------


def encode_value(value: Any) -> dict[str, Any]:
    """Encode a Python value as a Firestore ``Value``."""
    if value is None:
        return {"nullValue": None}
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, int):
        return {"integerValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, str):
        return {"stringValue": value}
    if isinstance(value, bytes):
        return {"bytesValue": base64.b64encode(value).decode("ascii")}
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return {"timestampValue": value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")}
    if isinstance(value, dict):
        return {"mapValue": {"fields": encode_fields(value)}}
    if isinstance(value, (list, tuple)):
        return {"arrayValue": {"values": [encode_value(v) for v in value]}}
    raise TypeError(f"Cannot store value of type {type(value).__name__} in Firestore")


def encode_fields(data: dict[str, Any]) -> dict[str, Any]:
    return {str(key): encode_value(value) for key, value in data.items()}


def decode_value(value: dict[str, Any]) -> Any:
    """Decode a Firestore ``Value`` into a Python value."""
    if "nullValue" in value:
        return None
    if "booleanValue" in value:
        return bool(value["booleanValue"])
    if "integerValue" in value:
        return int(value["integerValue"])
    if "doubleValue" in value:
        return float(value["doubleValue"])
    if "stringValue" in value:
        return value["stringValue"]
    if "bytesValue" in value:
        return base64.b64decode(value["bytesValue"])
    if "timestampValue" in value:
        return datetime.fromisoformat(value["timestampValue"].replace("Z", "+00:00"))
    if "mapValue" in value:
        return decode_fields(value["mapValue"].get("fields", {}))
    if "arrayValue" in value:
        return [decode_value(v) for v in value["arrayValue"].get("values", [])]
    if "referenceValue" in value:
        return value["referenceValue"]
    if "geoPointValue" in value:
        return dict(value["geoPointValue"])
    raise ValueError(f"Unknown Firestore value: {value!r}")


def decode_fields(fields: dict[str, Any]) -> dict[str, Any]:
    return {key: decode_value(value) for key, value in fields.items()}


def field_path(key: str) -> str:
    """Quote *key* as a Firestore field path when it is not a plain identifier."""
    if _SIMPLE_FIELD.match(key):
        return key
    escaped = key.replace("\\", "\\\\").replace("`", "\\`")
    return f"`{escaped}`"


def _doc_id(name: str) -> str:
    return name.rsplit("/", 1)[-1]


# -- store ---------------------------------------------------------------------


class _FirestoreTransaction(Transaction):
    def __init__(self, store: FirestoreDocumentStore, transaction_id: str) -> None:
        self._store = store
        self.transaction_id = transaction_id
        self.writes: list[dict[str, Any]] = []

    async def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        return await self._store._get(collection, doc_id, transaction=self.transaction_id)

    def set(
        self, collection: str, doc_id: str, data: dict[str, Any], merge: bool = False
    ) -> None:
        self.writes.append(self._store._update_write(collection, doc_id, data, merge))

    def delete(self, collection: str, doc_id: str) -> None:
        self.writes.append({"delete": self._store._name(collection, doc_id)})


class FirestoreDocumentStore(DocumentStore):
    """``DocumentStore`` backed by the Cloud Firestore REST API.

    Parameters
    ----------
    project_id:
        Firebase project id.  Falls back to ``FIREBASE_PROJECT_ID``.
    api_key:
        Web API key.  Falls back to ``FIREBASE_API_KEY``.
    token_provider:
        Callable returning the signed-in user's ID token (or ``None``),
        sent as a bearer token so security rules see the user.
    poll_interval:
        Seconds between polls of a subscribed collection.
    client:
        Shared ``RestClient``.
    """

    def __init__(
        self,
        project_id: str | None = None,
        api_key: str | None = None,
        token_provider: Callable[[], str | None] | None = None,
        poll_interval: float = 5.0,
        client: RestClient | None = None,
        **kwargs: Any,
    ) -> None:
        self._project_id = env_or_arg(project_id, "FIREBASE_PROJECT_ID", "FirestoreDocumentStore")
        self._api_key = env_or_arg(api_key, "FIREBASE_API_KEY", "FirestoreDocumentStore")
        self._token_provider = token_provider
        self._poll_interval = poll_interval
        self._client = client or RestClient(**kwargs)
        self._root = f"projects/{self._project_id}/databases/(default)/documents"
        logger.info("FirestoreDocumentStore initialized (project=%s)", self._project_id)

    def _name(self, collection: str, doc_id: str) -> str:
        return f"{self._root}/{quote(collection, safe='')}/{quote(doc_id, safe='')}"

    def _url(self, path: str) -> str:
        return f"{_BASE_URL}/{path}"

    def _params(self, **extra: Any) -> dict[str, Any]:
        params: dict[str, Any] = {"key": self._api_key}
        params.update({k: v for k, v in extra.items() if v is not None})
        return params

    def _headers(self) -> dict[str, str] | None:
        token = self._token_provider() if self._token_provider else None
        return {"Authorization": f"Bearer {token}"} if token else None

    def _update_write(
        self, collection: str, doc_id: str, data: dict[str, Any], merge: bool
    ) -> dict[str, Any]:
        fields: dict[str, Any] = {}
        transforms: list[dict[str, Any]] = []
        for key, value in data.items():
            if isinstance(value, Increment):
                transforms.append(
                    {"fieldPath": field_path(key), "increment": encode_value(value.amount)}
                )
            elif value is SERVER_TIMESTAMP:
                transforms.append(
                    {"fieldPath": field_path(key), "setToServerValue": "REQUEST_TIME"}
                )
            else:
                fields[key] = value
        write: dict[str, Any] = {
            "update": {"name": self._name(collection, doc_id), "fields": encode_fields(fields)}
        }
        if merge:
            write["updateMask"] = {"fieldPaths": [field_path(k) for k in fields]}
        if transforms:
            write["updateTransforms"] = transforms
        return write

    async def _get(
        self, collection: str, doc_id: str, transaction: str | None = None
    ) -> dict[str, Any] | None:
        body = await self._client.request(
            "GET",
            self._url(self._name(collection, doc_id)),
            params=self._params(transaction=transaction),
            headers=self._headers(),
            allow_not_found=True,
        )
        if body is None:
            return None
        return decode_fields(body.get("fields", {}))

    async def _commit(self, writes: list[dict[str, Any]], transaction: str | None = None) -> None:
        payload: dict[str, Any] = {"writes": writes}
        if transaction:
            payload["transaction"] = transaction
        await self._client.request(
            "POST",
            self._url(f"{self._root}:commit"),
            params=self._params(),
            json_data=payload,
            headers=self._headers(),
        )

    async def _rollback(self, transaction: str) -> None:
        try:
            await self._client.request(
                "POST",
                self._url(f"{self._root}:rollback"),
                params=self._params(),
                json_data={"transaction": transaction},
                headers=self._headers(),
            )
        except BackendError:
            logger.warning("Rollback of transaction %s failed", transaction, exc_info=True)

    async def add(self, collection: str, data: dict[str, Any]) -> str:
        plain = {k: v for k, v in data.items() if v is not SERVER_TIMESTAMP}
        body = await self._client.request(
            "POST",
            self._url(f"{self._root}/{quote(collection, safe='')}"),
            params=self._params(),
            json_data={"fields": encode_fields(plain)},
            headers=self._headers(),
        )
        doc_id = _doc_id(body["name"])
        if len(plain) != len(data):
            await self.set(
                collection,
                doc_id,
                {k: v for k, v in data.items() if v is SERVER_TIMESTAMP},
                merge=True,
            )
        return doc_id

    async def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        return await self._get(collection, doc_id)

    async def set(
        self, collection: str, doc_id: str, data: dict[str, Any], merge: bool = False
    ) -> None:
        await self._commit([self._update_write(collection, doc_id, data, merge)])

    async def delete(self, collection: str, doc_id: str) -> None:
        await self._commit([{"delete": self._name(collection, doc_id)}])

    async def list(self, collection: str) -> list[Document]:
        documents: list[Document] = []
        page_token: str | None = None
        while True:
            body = await self._client.request(
                "GET",
                self._url(f"{self._root}/{quote(collection, safe='')}"),
                params=self._params(pageSize=_PAGE_SIZE, pageToken=page_token),
                headers=self._headers(),
                allow_not_found=True,
            )
            body = body or {}
            for doc in body.get("documents", []):
                documents.append(
                    Document(_doc_id(doc["name"]), decode_fields(doc.get("fields", {})))
                )
            page_token = body.get("nextPageToken")
            if not page_token:
                return documents

    async def subscribe(self, collection: str, callback: SnapshotCallback) -> Unsubscribe:
        snapshot = await self.list(collection)
        callback(snapshot)

        async def poll() -> None:
            previous = snapshot
            while True:
                await asyncio.sleep(self._poll_interval)
                try:
                    current = await self.list(collection)
                except BackendError as exc:
                    logger.warning("Polling %s failed: %s", collection, exc)
                    continue
                if current != previous:
                    previous = current
                    callback(current)

        task = asyncio.create_task(poll())

        async def unsubscribe() -> None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        return unsubscribe

    async def run_transaction(self, fn: Callable[[Transaction], Awaitable[T]]) -> T:
        last_error: BackendError | None = None
        for attempt in range(_TRANSACTION_ATTEMPTS):
            body = await self._client.request(
                "POST",
                self._url(f"{self._root}:beginTransaction"),
                params=self._params(),
                json_data={},
                headers=self._headers(),
            )
            txn = _FirestoreTransaction(self, body["transaction"])
            try:
                result = await fn(txn)
            except Exception:
                await self._rollback(txn.transaction_id)
                raise
            try:
                await self._commit(txn.writes, transaction=txn.transaction_id)
            except BackendError as exc:
                # Contention aborts the commit with 409; rerun the whole function.
                if exc.status_code != CONFLICT:
                    raise
                last_error = exc
                logger.info("Transaction aborted (attempt %d); retrying", attempt + 1)
                continue
            return result
        raise BackendError(
            f"Transaction failed after {_TRANSACTION_ATTEMPTS} attempts: {last_error}"
        )
