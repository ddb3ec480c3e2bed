"""ReportService -- election incident reports."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from voice_vote.backend.base import SERVER_TIMESTAMP, BlobStore, DocumentStore
from voice_vote.models.records import REPORT_CATEGORIES, Attachment, IncidentReport

logger = logging.getLogger(__name__)

INCIDENTS = "incidents"
PROOF_FOLDER = "incident_reports"
DEFAULT_DESCRIPTION = "Voice Report"


class ReportService:
    def __init__(self, documents: DocumentStore, blobs: BlobStore) -> None:
        self._documents = documents
        self._blobs = blobs

    async def submit(self, report: IncidentReport, proof: Attachment | None = None) -> str:
        """Store *report*, uploading the optional audio *proof* first.

        Returns the incident id.

        Raises
        ------
        ValueError
            If the category is not one of ``REPORT_CATEGORIES``.
        """
        if report.category not in REPORT_CATEGORIES:
            raise ValueError(
                f"Unknown report category: {report.category!r}. "
                f"Expected one of: {', '.join(REPORT_CATEGORIES)}"
            )
        audio_url = None
        if proof is not None:
            stamp = int(datetime.now(timezone.utc).timestamp() * 1000)
            audio_url = await self._blobs.upload(
                proof.data, f"{PROOF_FOLDER}/report_{stamp}.m4a", proof.content_type
            )
        incident_id = await self._documents.add(
            INCIDENTS,
            {
                "category": report.category,
                "description": report.description.strip() or DEFAULT_DESCRIPTION,
                "audioUrl": audio_url,
                "userId": report.user_id,
                "timestamp": SERVER_TIMESTAMP,
                "status": "investigating",
                "flagged": True,
            },
        )
        logger.info("Incident %s reported (%s)", incident_id, report.category)
        return incident_id
