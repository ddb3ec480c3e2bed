"""Shared HTTP plumbing for the Firebase REST adapters.

Wraps an ``httpx.AsyncClient`` and retries transient failures (429,
5xx, connection errors) with exponential backoff.  Non-transient HTTP
errors are raised as ``BackendError`` carrying the service's message.
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Any

from voice_vote.errors import BackendError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
MAX_RETRIES = 3
BACKOFF_BASE = 2.0


def env_or_arg(value: str | None, env_var: str, component: str) -> str:
    """Return *value*, falling back to the *env_var* environment variable.

    Raises
    ------
    ValueError
        If neither is set.
    """
    resolved = value or os.environ.get(env_var)
    if not resolved:
        raise ValueError(
            f"{component} requires a value: pass it explicitly or set {env_var}"
        )
    return resolved


def error_message(resp: Any) -> str:
    """Extract the ``error.message`` of a Google API error body."""
    try:
        body = resp.json()
    except ValueError:
        return resp.text
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return resp.text


class RestClient:
    """Minimal retrying JSON/bytes HTTP client.

    Parameters
    ----------
    timeout:
        Request timeout in seconds.
    max_retries:
        Retry attempts for transient failures.
    http_client:
        Pre-built ``httpx.AsyncClient`` (e.g. with a mock transport).
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = MAX_RETRIES,
        http_client: Any = None,
    ) -> None:
        self._timeout = timeout
        self._max_retries = max_retries
        self._client: Any = http_client
        self._httpx: Any = None

    def _load(self) -> Any:
        if self._httpx is None:
            try:
                import httpx
            except ImportError as exc:
                raise ImportError(
                    "httpx is required for the Firebase backend. "
                    "Install it with: pip install voice-vote[firebase]"
                ) from exc
            self._httpx = httpx
        return self._httpx

    def _get_client(self) -> Any:
        """Lazy-initialize the HTTP client."""
        httpx = self._load()
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        json_data: dict[str, Any] | None = None,
        content: bytes | None = None,
        headers: dict[str, str] | None = None,
        allow_not_found: bool = False,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Returns ``None`` for a 404 when *allow_not_found* is set and for
        empty bodies.
        """
        httpx = self._load()
        client = self._get_client()
        last_error: Exception | None = None

        for attempt in range(self._max_retries + 1):
            try:
                resp = await client.request(
                    method,
                    url,
                    params=params,
                    json=json_data,
                    content=content,
                    headers=headers,
                )
            except httpx.TransportError as exc:
                last_error = exc
                if attempt < self._max_retries:
                    wait = BACKOFF_BASE ** attempt
                    logger.warning("Request failed (%s); retrying in %.1fs", exc, wait)
                    await asyncio.sleep(wait)
                    continue
                break

            if resp.status_code == 429 or resp.status_code >= 500:
                last_error = BackendError(
                    f"Server error {resp.status_code}: {error_message(resp)}",
                    status_code=resp.status_code,
                )
                if attempt < self._max_retries:
                    wait = float(resp.headers.get("Retry-After", BACKOFF_BASE ** attempt))
                    logger.warning(
                        "Server responded %d; retrying in %.1fs", resp.status_code, wait
                    )
                    await asyncio.sleep(wait)
                    continue
                raise last_error

            if resp.status_code == 404 and allow_not_found:
                return None
            if resp.status_code >= 400:
                raise BackendError(
                    f"API error {resp.status_code}: {error_message(resp)}",
                    status_code=resp.status_code,
                )
            if not resp.content:
                return None
            return resp.json()

        raise BackendError(
            f"Request to {url} failed after {self._max_retries + 1} attempts: {last_error}"
        )

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
