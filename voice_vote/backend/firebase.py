"""Firebase Authentication and Cloud Storage over REST.

``FirebaseAuth`` uses the Identity Toolkit ``accounts:signUp`` and
``accounts:signInWithPassword`` endpoints; ``FirebaseStorage`` uploads
through the Firebase Storage v0 API and returns token download URLs.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

from voice_vote.backend.base import AuthProvider, AuthUser, BlobStore
from voice_vote.backend.rest import RestClient, env_or_arg
from voice_vote.errors import AuthError, BackendError

logger = logging.getLogger(__name__)

_IDENTITY_URL = "https://identitytoolkit.googleapis.com/v1"
_STORAGE_URL = "https://firebasestorage.googleapis.com/v0/b"

_AUTH_MESSAGES = {
    "EMAIL_EXISTS": "The email address is already in use",
    "EMAIL_NOT_FOUND": "Invalid email or password",
    "INVALID_PASSWORD": "Invalid email or password",
    "INVALID_LOGIN_CREDENTIALS": "Invalid email or password",
    "INVALID_EMAIL": "Invalid email address",
    "USER_DISABLED": "This account has been disabled",
}


class FirebaseAuth(AuthProvider):
    """Email/password accounts via the Identity Toolkit REST API.

    Parameters
    ----------
    api_key:
        Web API key.  Falls back to ``FIREBASE_API_KEY``.
    client:
        Shared ``RestClient``.
    """

    def __init__(
        self,
        api_key: str | None = None,
        client: RestClient | None = None,
        **kwargs: Any,
    ) -> None:
        self._api_key = env_or_arg(api_key, "FIREBASE_API_KEY", "FirebaseAuth")
        self._client = client or RestClient(**kwargs)
        self.current_user: AuthUser | None = None

    def id_token(self) -> str | None:
        """ID token of the signed-in user, for authenticated requests."""
        return self.current_user.id_token if self.current_user else None

    async def _call(self, endpoint: str, email: str, password: str) -> AuthUser:
        try:
            body = await self._client.request(
                "POST",
                f"{_IDENTITY_URL}/accounts:{endpoint}",
                params={"key": self._api_key},
                json_data={"email": email, "password": password, "returnSecureToken": True},
            )
        except BackendError as exc:
            message = str(exc)
            for code, friendly in _AUTH_MESSAGES.items():
                if code in message:
                    raise AuthError(friendly) from exc
            if "WEAK_PASSWORD" in message:
                raise AuthError("Password should be at least 6 characters") from exc
            raise
        user = AuthUser(
            uid=body["localId"], email=body.get("email", email), id_token=body.get("idToken")
        )
        self.current_user = user
        return user

    async def create_user(self, email: str, password: str) -> AuthUser:
        user = await self._call("signUp", email, password)
        logger.info("Created account %s", user.uid)
        return user

    async def sign_in(self, email: str, password: str) -> AuthUser:
        return await self._call("signInWithPassword", email, password)


class FirebaseStorage(BlobStore):
    """Uploads files to a Firebase Storage bucket.

    Parameters
    ----------
    bucket:
        Bucket name (``<project>.appspot.com``).  Falls back to
        ``FIREBASE_STORAGE_BUCKET``.
    token_provider:
        Callable returning the signed-in user's ID token (or ``None``).
    client:
        Shared ``RestClient``.
    """

    def __init__(
        self,
        bucket: str | None = None,
        token_provider: Any = None,
        client: RestClient | None = None,
        **kwargs: Any,
    ) -> None:
        self._bucket = env_or_arg(bucket, "FIREBASE_STORAGE_BUCKET", "FirebaseStorage")
        self._token_provider = token_provider
        self._client = client or RestClient(**kwargs)

    def download_url(self, path: str, token: str) -> str:
        return f"{_STORAGE_URL}/{self._bucket}/o/{quote(path, safe='')}?alt=media&token={token}"

    async def upload(
        self, data: bytes, path: str, content_type: str = "application/octet-stream"
    ) -> str:
        headers = {"Content-Type": content_type}
        token = self._token_provider() if self._token_provider else None
        if token:
            headers["Authorization"] = f"Firebase {token}"
        body = await self._client.request(
            "POST",
            f"{_STORAGE_URL}/{self._bucket}/o",
            params={"name": path},
            content=data,
            headers=headers,
        )
        tokens = str((body or {}).get("downloadTokens") or "")
        if not tokens:
            raise BackendError(f"Upload of {path} returned no download token")
        logger.info("Uploaded %d bytes to %s", len(data), path)
        return self.download_url(path, tokens.split(",")[0])
