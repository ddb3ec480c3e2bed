"""ApplicationService -- candidate applications and admin moderation."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import PurePosixPath
from typing import Any

from voice_vote.backend.base import BlobStore, Document, DocumentStore
from voice_vote.errors import BackendError, MissingFieldsError
from voice_vote.models.records import Application, Attachment
from voice_vote.services.ballot import CONTESTANTS

logger = logging.getLogger(__name__)

APPLICATIONS = "applications"
PHOTO_FOLDER = "passports"
DOCUMENT_FOLDER = "eligibility_docs"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ApplicationService:
    """Submits applications and moves approved ones onto the ballot."""

    def __init__(self, documents: DocumentStore, blobs: BlobStore) -> None:
        self._documents = documents
        self._blobs = blobs

    async def _upload(self, attachment: Attachment, folder: str, default_name: str) -> str:
        name = PurePosixPath(attachment.filename or default_name).name or default_name
        stamp = int(datetime.now(timezone.utc).timestamp() * 1000)
        return await self._blobs.upload(
            attachment.data, f"{folder}/{stamp}_{name}", attachment.content_type
        )

    async def submit(
        self,
        application: Application,
        photo: Attachment | None,
        document: Attachment | None,
    ) -> str:
        """Upload the attachments and store a pending application.

        Returns the new application id.

        Raises
        ------
        MissingFieldsError
            If a required field or attachment is missing.
        """
        missing = application.missing_fields()
        if photo is None:
            missing.append("photo")
        if document is None:
            missing.append("document")
        if missing:
            raise MissingFieldsError(missing)

        photo_url = await self._upload(photo, PHOTO_FOLDER, "photo.jpg")
        document_url = await self._upload(document, DOCUMENT_FOLDER, "doc.pdf")
        data = application.to_document()
        data.update(
            photoUrl=photo_url,
            documentUrl=document_url,
            status="pending",
            submittedAt=_now(),
        )
        app_id = await self._documents.add(APPLICATIONS, data)
        logger.info("Application %s submitted for %s", app_id, application.position)
        return app_id

    async def pending(self) -> list[Document]:
        return [
            doc
            for doc in await self._documents.list(APPLICATIONS)
            if doc.data.get("status", "pending") == "pending"
        ]

    async def approve(self, app_id: str) -> str:
        """Add the application to the contestants with zero votes and remove it.

        Returns the new contestant id.
        """
        data = await self._documents.get(APPLICATIONS, app_id)
        if data is None:
            raise BackendError(f"Application not found: {app_id!r}")
        candidate: dict[str, Any] = {
            k: v for k, v in data.items() if k not in ("status", "submittedAt")
        }
        candidate.update(votes=0, approvedAt=_now())
        contestant_id = await self._documents.add(CONTESTANTS, candidate)
        await self._documents.delete(APPLICATIONS, app_id)
        logger.info("Application %s approved as contestant %s", app_id, contestant_id)
        return contestant_id

    async def reject(self, app_id: str) -> None:
        await self._documents.delete(APPLICATIONS, app_id)
        logger.info("Application %s rejected", app_id)

    async def delete_candidate(self, candidate_id: str) -> None:
        await self._documents.delete(CONTESTANTS, candidate_id)
        logger.info("Contestant %s removed", candidate_id)
