"""Tests for the voice ballot."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from tests.conftest import make_backend, make_controller, said
from voice_vote.backend import Backend
from voice_vote.classifier import UtteranceClassifier
from voice_vote.dialogue import phrases
from voice_vote.errors import AlreadyVotedError, BackendError
from voice_vote.models.records import BallotPosition, Candidate
from voice_vote.screens import BallotWizard
from voice_vote.services import BallotService
from voice_vote.wizard import WizardOutcome

PRESIDENT = BallotPosition(
    "President",
    (Candidate("c1", "Alice Wanjiru", "President"), Candidate("c2", "Brian Otieno", "President")),
)


def _run_ballot(backend: Backend, classifier: UtteranceClassifier, scripts, user_id="u1"):
    service = BallotService(backend.documents)
    controller, synth, _ = make_controller(scripts, screen="voting")

    async def scenario():
        ballot = await service.load_ballot()
        wizard = BallotWizard(controller, classifier, ballot, service, user_id)
        result = await wizard.run()
        return result, await backend.documents.list("votes")

    result, votes = asyncio.run(scenario())
    return result, {doc.id: doc.data for doc in votes}, synth


class TestBallotWizard:
    def test_votes_every_position(self, classifier: UtteranceClassifier, backend: Backend) -> None:
        result, votes, synth = _run_ballot(
            backend,
            classifier,
            [
                said("Alice Wanjiru"),
                said("confirm"),
                said("I choose Carol Njeri"),
                said("yes"),
                said("David Kamau"),
                said("yes"),
            ],
        )

        assert result.outcome is WizardOutcome.COMPLETED
        assert result.target == "results"
        assert votes == {
            "President": {"Alice Wanjiru": 1},
            "Vice President": {"Carol Njeri": 1},
            "Treasurer": {"David Kamau": 1},
        }
        assert synth.spoken[:3] == [
            "Voting for President. Candidates are: Alice Wanjiru, Brian Otieno. Say a name.",
            "You selected Alice Wanjiru. Say Confirm to vote, or No to choose again.",
            "Vote for Alice Wanjiru confirmed.",
        ]
        assert synth.spoken[-1] == "All votes cast. Thank you."

    def test_choose_again(self, classifier: UtteranceClassifier, backend: Backend) -> None:
        result, votes, synth = _run_ballot(
            backend,
            classifier,
            [
                said("Alice Wanjiru"),
                said("no"),
                said("Brian Otieno"),
                said("yes"),
                said("cancel"),
            ],
        )

        assert result.outcome is WizardOutcome.CANCELLED
        assert votes == {"President": {"Brian Otieno": 1}}
        assert phrases.TRY_AGAIN in synth.spoken

    def test_unsure_answer_casts_nothing(
        self, classifier: UtteranceClassifier, backend: Backend
    ) -> None:
        result, votes, synth = _run_ballot(
            backend, classifier, [said("Alice Wanjiru"), said("I'm not sure"), said("cancel")]
        )

        assert result.outcome is WizardOutcome.CANCELLED
        assert votes == {}
        assert phrases.TRY_AGAIN in synth.spoken

    def test_skips_positions_already_voted(self, classifier: UtteranceClassifier) -> None:
        backend = make_backend(voters={"u1": {"President": True, "Vice President": True}})

        result, votes, synth = _run_ballot(
            backend, classifier, [said("David Kamau"), said("yes")]
        )

        assert result.outcome is WizardOutcome.COMPLETED
        assert votes == {"Treasurer": {"David Kamau": 1}}
        assert synth.spoken[0].startswith("Voting for Treasurer.")

    def test_already_voted_on_commit(self, classifier: UtteranceClassifier) -> None:
        service = MagicMock()
        service.has_voted = AsyncMock(return_value=False)
        service.cast_vote = AsyncMock(side_effect=AlreadyVotedError("u1", "President"))
        controller, synth, _ = make_controller([said("Brian Otieno"), said("yes")])

        result = asyncio.run(BallotWizard(controller, classifier, [PRESIDENT], service, "u1").run())

        assert result.outcome is WizardOutcome.COMPLETED
        assert "You have already voted for President." in synth.spoken
        assert "Vote for Brian Otieno confirmed." not in synth.spoken

    def test_backend_failure_retries_position(self, classifier: UtteranceClassifier) -> None:
        service = MagicMock()
        service.has_voted = AsyncMock(side_effect=BackendError("offline"))
        service.cast_vote = AsyncMock(side_effect=[BackendError("offline"), None])
        controller, synth, _ = make_controller(
            [said("Alice Wanjiru"), said("yes"), said("Alice Wanjiru"), said("yes")]
        )

        result = asyncio.run(BallotWizard(controller, classifier, [PRESIDENT], service, "u1").run())

        assert result.outcome is WizardOutcome.COMPLETED
        assert "Error recording vote. Please try again." in synth.spoken
        assert service.cast_vote.await_count == 2
        service.cast_vote.assert_awaited_with("u1", "President", "Alice Wanjiru")

    def test_candidate_vocabulary(self, classifier: UtteranceClassifier) -> None:
        controller, _, _ = make_controller()
        wizard = BallotWizard(controller, classifier, [PRESIDENT], MagicMock(), "u1")

        vocabulary = wizard.vocabulary_for(wizard.machine.current_step)

        assert vocabulary.values == ["Alice Wanjiru", "Brian Otieno"]

    def test_empty_ballot(self, classifier: UtteranceClassifier) -> None:
        controller, _, _ = make_controller()
        with pytest.raises(ValueError, match="no positions"):
            BallotWizard(controller, classifier, [], MagicMock(), "u1")
