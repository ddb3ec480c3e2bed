"""AccountService -- student accounts."""

from __future__ import annotations

import logging
import os
from typing import Iterable

from voice_vote.backend.base import AuthProvider, AuthUser, DocumentStore
from voice_vote.models.records import UserProfile

logger = logging.getLogger(__name__)

USERS = "users"
ADMIN_EMAILS_ENV = "VOICE_VOTE_ADMIN_EMAILS"


class AccountService:
    """Creates accounts and signs users in.

    Parameters
    ----------
    auth:
        Auth provider.
    documents:
        Store holding the ``users/{uid}`` profiles.
    admin_emails:
        Emails routed to the admin screen after sign-in.  Defaults to
        the comma-separated ``VOICE_VOTE_ADMIN_EMAILS`` variable.
    """

    def __init__(
        self,
        auth: AuthProvider,
        documents: DocumentStore,
        admin_emails: Iterable[str] | None = None,
    ) -> None:
        self._auth = auth
        self._documents = documents
        if admin_emails is None:
            admin_emails = os.environ.get(ADMIN_EMAILS_ENV, "").split(",")
        self._admin_emails = frozenset(e.strip().lower() for e in admin_emails if e.strip())

    def is_admin(self, email: str) -> bool:
        return email.strip().lower() in self._admin_emails

    async def create_account(self, profile: UserProfile, password: str) -> AuthUser:
        """Create the auth account and its ``users`` profile document.

        Raises
        ------
        voice_vote.errors.AuthError
            If the account cannot be created.
        """
        user = await self._auth.create_user(profile.email, password)
        await self._documents.set(USERS, user.uid, profile.to_document())
        logger.info("Account %s created", user.uid)
        return user

    async def sign_in(self, email: str, password: str) -> AuthUser:
        user = await self._auth.sign_in(email.strip(), password)
        logger.info("User %s signed in", user.uid)
        return user
