"""ResultsService -- vote tallies and result publication."""

from __future__ import annotations

import logging
from typing import Callable

from voice_vote.backend.base import Document, DocumentStore, Unsubscribe
from voice_vote.models.records import POSITION_ORDER, CandidateTally, PositionResult
from voice_vote.services.ballot import VOTES

logger = logging.getLogger(__name__)

SETTINGS = "settings"
ELECTION = "election"


def _position_key(position: str) -> tuple[int, str]:
    if position in POSITION_ORDER:
        return POSITION_ORDER.index(position), position
    return len(POSITION_ORDER), position


def tallies_from_documents(documents: list[Document]) -> list[PositionResult]:
    """Convert ``votes/{position}`` documents into sorted results."""
    results = []
    for doc in sorted(documents, key=lambda d: _position_key(d.id)):
        candidates = sorted(
            (CandidateTally(str(name), int(count or 0)) for name, count in doc.data.items()),
            key=lambda t: (-t.votes, t.name),
        )
        results.append(PositionResult(doc.id, tuple(candidates)))
    return results


class ResultsService:
    def __init__(self, documents: DocumentStore) -> None:
        self._documents = documents

    async def tallies(self) -> list[PositionResult]:
        """Results per position, highest vote count first."""
        return tallies_from_documents(await self._documents.list(VOTES))

    async def is_published(self) -> bool:
        settings = await self._documents.get(SETTINGS, ELECTION)
        return bool(settings and settings.get("resultsPublished"))

    async def set_published(self, published: bool) -> None:
        await self._documents.set(
            SETTINGS, ELECTION, {"resultsPublished": published}, merge=True
        )
        logger.info("Results %s", "published" if published else "hidden")

    async def subscribe(self, callback: Callable[[list[PositionResult]], None]) -> Unsubscribe:
        """Call *callback* with fresh results whenever a tally changes."""
        return await self._documents.subscribe(
            VOTES, lambda docs: callback(tallies_from_documents(docs))
        )
