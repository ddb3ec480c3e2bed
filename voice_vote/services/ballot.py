"""BallotService -- load the ballot and cast votes."""

from __future__ import annotations

import logging
from typing import Any

from voice_vote.backend.base import DocumentStore, Increment, Transaction
from voice_vote.errors import AlreadyVotedError
from voice_vote.models.records import POSITION_ORDER, BallotPosition, Candidate

logger = logging.getLogger(__name__)

CONTESTANTS = "contestants"
VOTES = "votes"
VOTERS = "voters"


class BallotService:
    """Ballot loading and vote casting.

    Tallies live in ``votes/{position}`` as ``{candidate name: count}``.
    Each voter has a ``voters/{user_id}`` marker document whose keys are
    the positions already voted for; the marker is checked and written
    in the same transaction as the tally increment.
    """

    def __init__(self, documents: DocumentStore) -> None:
        self._documents = documents

    async def load_ballot(self) -> list[BallotPosition]:
        """Return contestants grouped by position in ballot order.

        Positions without contestants are left out.  Positions outside
        the default order follow it, alphabetically.
        """
        grouped: dict[str, list[Candidate]] = {}
        for doc in await self._documents.list(CONTESTANTS):
            candidate = Candidate.from_document(doc.id, doc.data)
            grouped.setdefault(candidate.position, []).append(candidate)

        extra = sorted(p for p in grouped if p not in POSITION_ORDER)
        ballot = [
            BallotPosition(position, tuple(grouped[position]))
            for position in (*POSITION_ORDER, *extra)
            if grouped.get(position)
        ]
        logger.info("Loaded ballot with %d positions", len(ballot))
        return ballot

    async def has_voted(self, user_id: str, position: str) -> bool:
        marker = await self._documents.get(VOTERS, user_id)
        return bool(marker and marker.get(position))

    async def cast_vote(self, user_id: str, position: str, candidate: str) -> None:
        """Record one vote for *candidate*.

        Raises
        ------
        AlreadyVotedError
            If *user_id* already voted for *position*; nothing is
            written in that case.
        voice_vote.errors.BackendError
            If the store cannot be reached.
        """

        async def vote(txn: Transaction) -> None:
            marker: dict[str, Any] = await txn.get(VOTERS, user_id) or {}
            if marker.get(position):
                raise AlreadyVotedError(user_id, position)
            txn.set(VOTES, position, {candidate: Increment(1)}, merge=True)
            txn.set(VOTERS, user_id, {position: True}, merge=True)

        await self._documents.run_transaction(vote)
        logger.info("Vote cast for position %s", position)
