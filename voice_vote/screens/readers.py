"""Read-only screens that speak a summary: results and contestants."""

from __future__ import annotations

import logging

from voice_vote.dialogue.controller import TurnController
from voice_vote.errors import BackendError
from voice_vote.models.records import BallotPosition, PositionResult
from voice_vote.services.ballot import BallotService
from voice_vote.services.results import ResultsService

logger = logging.getLogger(__name__)


def describe_result(result: PositionResult) -> str:
    leader = result.leader
    if leader is None:
        return f"For {result.position}, there are no votes."
    return f"For {result.position}, the leader is {leader.name}, with {leader.votes} votes."


class ResultsReader:
    """Reads the current tallies aloud, leaders first.

    Parameters
    ----------
    controller:
        Turn controller of the results session.
    results:
        Results service.
    require_published:
        Only read results once an admin has published them.
    """

    screen = "results"

    def __init__(
        self,
        controller: TurnController,
        results: ResultsService,
        require_published: bool = False,
    ) -> None:
        self.controller = controller
        self.results = results
        self.require_published = require_published

    async def read(self) -> list[PositionResult]:
        """Speak the results and return what was read (empty on failure)."""
        speak = self.controller.speak
        try:
            if self.require_published and not await self.results.is_published():
                await speak("Results have not been published yet.")
                return []
            tallies = await self.results.tallies()
        except BackendError as exc:
            logger.warning("Could not fetch results: %s", exc)
            await speak("I could not fetch the results. Please check your internet.")
            return []

        if not tallies:
            await speak("No votes have been cast yet.")
            return []
        await speak("Here are the current election results.")
        for result in tallies:
            await speak(describe_result(result))
        await speak("End of results.")
        return tallies


class ContestantsReader:
    """Reads every position's contestants and their brief information."""

    screen = "contestants"

    def __init__(self, controller: TurnController, ballot: BallotService) -> None:
        self.controller = controller
        self.ballot = ballot

    async def read(self) -> list[BallotPosition]:
        speak = self.controller.speak
        try:
            positions = await self.ballot.load_ballot()
        except BackendError as exc:
            logger.warning("Could not fetch contestants: %s", exc)
            await speak("I could not fetch the contestants. Please check your internet.")
            return []

        if not positions:
            await speak("There are no contestants yet.")
            return []
        await speak("Here are the contestants.")
        for pos in positions:
            await speak(f"For the position of {pos.position}")
            for candidate in pos.candidates:
                await speak(f"{candidate.name}. {candidate.brief_info or ''}".strip())
            await speak("Moving to the next position.")
        return positions
