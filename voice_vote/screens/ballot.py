"""Ballot -- one voice step per position, each vote cast on confirmation."""

from __future__ import annotations

import logging
from typing import Sequence

from voice_vote.classifier import UtteranceClassifier, Vocabulary
from voice_vote.dialogue.controller import TurnController
from voice_vote.errors import AlreadyVotedError, BackendError
from voice_vote.models.records import BallotPosition
from voice_vote.models.step import InputKind, WizardStep
from voice_vote.services.ballot import BallotService
from voice_vote.wizard.runner import VoiceWizard, WizardOutcome, WizardResult

logger = logging.getLogger(__name__)

RESULTS_TARGET = "results"


def _step_id(number: int) -> str:
    return f"vote-{number}"


class BallotWizard(VoiceWizard):
    """Casts the user's votes position by position.

    A position the user already voted for is skipped without a voice
    turn.  Finishing the ballot navigates to the results screen.

    Parameters
    ----------
    controller:
        Turn controller of the ballot session.
    classifier:
        Utterance classifier.
    ballot:
        Positions to vote on, in order (see ``BallotService.load_ballot``).
    ballot_service:
        Service used to check and cast votes.
    user_id:
        The voter.

    Raises
    ------
    ValueError
        If *ballot* is empty.
    """

    screen = "voting"

    def __init__(
        self,
        controller: TurnController,
        classifier: UtteranceClassifier,
        ballot: Sequence[BallotPosition],
        ballot_service: BallotService,
        user_id: str,
    ) -> None:
        self.positions = {_step_id(n): pos for n, pos in enumerate(ballot, start=1)}
        if not self.positions:
            raise ValueError("The ballot has no positions")
        self.ballot_service = ballot_service
        self.user_id = user_id
        super().__init__(controller, classifier)

    def build_steps(self) -> list[WizardStep]:
        return [
            WizardStep(
                step_id,
                f"Voting for {pos.position}. Candidates are: "
                f"{', '.join(pos.candidate_names)}. Say a name.",
                kind=InputKind.ENUMERATED_CHOICE,
                confirm=True,
                acknowledgement="Vote for {value} confirmed.",
                reprompt="I didn't catch that name. Please say it again.",
            )
            for step_id, pos in self.positions.items()
        ]

    def vocabulary_for(self, step: WizardStep) -> Vocabulary:
        pos = self.positions[step.step_id]
        return Vocabulary.from_labels(pos.position, pos.candidate_names)

    def confirm_prompt(self, step: WizardStep, value: str) -> str:
        return f"You selected {value}. Say Confirm to vote, or No to choose again."

    async def should_skip(self, step: WizardStep) -> bool:
        position = self.positions[step.step_id].position
        try:
            return await self.ballot_service.has_voted(self.user_id, position)
        except BackendError as exc:
            # The transactional check in cast_vote still guards the tally.
            logger.warning("Could not check vote for %s: %s", position, exc)
            return False

    async def commit_step(self, step: WizardStep, value: str) -> None:
        position = self.positions[step.step_id].position
        await self.ballot_service.cast_vote(self.user_id, position, value)

    def skipped_message(self, step: WizardStep, exc: AlreadyVotedError) -> str:
        return f"You have already voted for {exc.position}."

    def failure_message(self, exc: Exception) -> str:
        return "Error recording vote. Please try again."

    async def complete(self, data: dict[str, str]) -> WizardResult:
        await self.controller.speak("All votes cast. Thank you.")
        return WizardResult(WizardOutcome.COMPLETED, target=RESULTS_TARGET, data=data)
