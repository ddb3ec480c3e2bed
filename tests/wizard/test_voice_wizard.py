"""Tests for the shared voice wizard driver."""

from __future__ import annotations

import asyncio

from tests.conftest import hang, make_controller, said, silence
from voice_vote.classifier import UtteranceClassifier
from voice_vote.dialogue import phrases
from voice_vote.errors import AlreadyVotedError, BackendError, MissingFieldsError
from voice_vote.models.session import TurnState
from voice_vote.models.step import InputKind, ValueFormat, WizardStep
from voice_vote.wizard import VoiceWizard, WizardOutcome, WizardResult

FORM = (
    WizardStep("collect-name", "What is your name?", acknowledgement="Name set to {value}."),
    WizardStep(
        "collect-position",
        "Which position?",
        InputKind.ENUMERATED_CHOICE,
        choices="positions",
        confirm=True,
    ),
    WizardStep("submit", "Say Submit.", InputKind.CONFIRMATION),
)


class FormWizard(VoiceWizard):
    screen = "form"
    steps = FORM


def _run(wizard: VoiceWizard) -> WizardResult:
    return asyncio.run(wizard.run())


class TestHappyPath:
    def test_completes_with_all_values(self, classifier: UtteranceClassifier) -> None:
        controller, synth, _ = make_controller(
            [said("Amina"), said("vice president"), said("yes"), said("submit")]
        )
        wizard = FormWizard(controller, classifier)

        result = _run(wizard)

        assert result.outcome is WizardOutcome.COMPLETED
        assert result.data == {
            "collect-name": "Amina",
            "collect-position": "Vice President",
            "submit": "yes",
        }
        assert synth.spoken == [
            "What is your name?",
            "Name set to Amina.",
            "Which position?",
            "I heard Vice President. Is this correct? Say Yes or No.",
            "Say Submit.",
        ]
        assert wizard.machine.finished
        assert controller.session.state is TurnState.STOPPED

    def test_introduction_is_spoken_first(self, classifier: UtteranceClassifier) -> None:
        class Introduced(FormWizard):
            def introduction(self) -> str | None:
                return "Welcome to the form."

        controller, synth, recognizer = make_controller([hang()])

        async def scenario() -> WizardResult:
            task = asyncio.create_task(Introduced(controller, classifier).run())
            while not recognizer.listening:
                await asyncio.sleep(0)
            await controller.stop()
            return await task

        asyncio.run(scenario())
        assert synth.spoken[:2] == ["Welcome to the form.", "What is your name?"]

    def test_session_tracks_current_step(self, classifier: UtteranceClassifier) -> None:
        controller, _, _ = make_controller([said("Amina"), silence(), silence()])

        result = _run(FormWizard(controller, classifier))

        assert controller.session.current_step_id == "collect-position"
        assert result.target == "collect-position"


class TestCorrections:
    def test_rejected_value_is_asked_again(self, classifier: UtteranceClassifier) -> None:
        controller, synth, _ = make_controller(
            [
                said("Amina"),
                said("president"),
                said("no"),
                said("treasurer"),
                said("yes"),
                said("submit"),
            ]
        )

        result = _run(FormWizard(controller, classifier))

        assert result.data["collect-position"] == "Treasurer"
        assert phrases.TRY_AGAIN in synth.spoken
        assert synth.spoken.count("Which position?") == 2

    def test_repeat_speaks_prompt_again(self, classifier: UtteranceClassifier) -> None:
        controller, synth, _ = make_controller(
            [said("Amina"), said("repeat"), said("president"), said("yes"), said("submit")]
        )

        result = _run(FormWizard(controller, classifier))

        assert result.outcome is WizardOutcome.COMPLETED
        assert synth.spoken.count("Which position?") == 2

    def test_declined_final_confirmation(self, classifier: UtteranceClassifier) -> None:
        controller, synth, _ = make_controller(
            [said("Amina"), said("president"), said("yes"), said("no"), said("submit")]
        )

        result = _run(FormWizard(controller, classifier))

        assert result.outcome is WizardOutcome.COMPLETED
        assert synth.spoken.count("Say Submit.") == 2


class TestLeaving:
    def test_cancel(self, classifier: UtteranceClassifier) -> None:
        controller, _, _ = make_controller([said("Amina"), said("cancel")])

        result = _run(FormWizard(controller, classifier))

        assert result.outcome is WizardOutcome.CANCELLED
        assert result.data == {"collect-name": "Amina"}
        assert controller.session.stop_requested

    def test_cancel_during_confirmation(self, classifier: UtteranceClassifier) -> None:
        controller, _, _ = make_controller([said("Amina"), said("president"), said("cancel")])

        result = _run(FormWizard(controller, classifier))

        assert result.outcome is WizardOutcome.CANCELLED
        assert "collect-position" not in result.data

    def test_manual_fallback(self, classifier: UtteranceClassifier) -> None:
        controller, synth, recognizer = make_controller([silence(), silence()], max_retries=2)

        result = _run(FormWizard(controller, classifier))

        assert result.outcome is WizardOutcome.MANUAL_FALLBACK
        assert result.target == "collect-name"
        assert synth.spoken[-1] == phrases.MANUAL_FALLBACK
        assert recognizer.stop_calls == 1

    def test_navigation(self, classifier: UtteranceClassifier) -> None:
        steps = [WizardStep("menu", "Main menu.", InputKind.NAVIGATION, choices="home_menu")]
        controller, _, _ = make_controller([said("view results")])

        result = _run(VoiceWizard(controller, classifier, steps))

        assert result.outcome is WizardOutcome.NAVIGATED
        assert result.target == "results"

    def test_external_stop(self, classifier: UtteranceClassifier) -> None:
        controller, _, recognizer = make_controller([hang()])

        async def scenario() -> WizardResult:
            task = asyncio.create_task(FormWizard(controller, classifier).run())
            while not recognizer.listening:
                await asyncio.sleep(0)
            await controller.stop()
            return await task

        result = asyncio.run(scenario())
        assert result.outcome is WizardOutcome.STOPPED
        assert result.target == "collect-name"


class TestManualStep:
    def test_manual_step_ends_voice_session(self, classifier: UtteranceClassifier) -> None:
        steps = [
            WizardStep("collect-email", "Say your email.", value_format=ValueFormat.EMAIL),
            WizardStep("type-password", "Please type your password.", InputKind.MANUAL),
        ]
        controller, synth, recognizer = make_controller([said("a at b dot c")])

        result = _run(VoiceWizard(controller, classifier, steps))

        assert result.outcome is WizardOutcome.MANUAL_INPUT
        assert result.target == "type-password"
        assert result.data == {"collect-email": "a@b.c"}
        assert synth.spoken[-1] == "Please type your password."
        assert recognizer.start_calls == 1


class UploadWizard(VoiceWizard):
    screen = "upload"
    steps = (
        WizardStep("upload-photo", "Upload a photo, then say Next.", InputKind.EXTERNAL_ACTION),
        WizardStep(
            "record-proof", "Record proof or say Skip.", InputKind.EXTERNAL_ACTION, required=False
        ),
        WizardStep("submit", "Say Submit.", InputKind.CONFIRMATION),
    )

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.checks = 0

    def external_ready(self, step: WizardStep) -> bool:
        self.checks += 1
        return self.checks > 1


class TestExternalAction:
    def test_requires_external_action(self, classifier: UtteranceClassifier) -> None:
        controller, synth, _ = make_controller(
            [said("next"), said("next"), said("skip"), said("submit")]
        )

        result = _run(UploadWizard(controller, classifier))

        assert result.outcome is WizardOutcome.COMPLETED
        assert phrases.NOT_READY in synth.spoken
        assert synth.spoken.count("Upload a photo, then say Next.") == 2
        assert result.data == {"submit": "yes"}


class TestHooks:
    def test_should_skip(self, classifier: UtteranceClassifier) -> None:
        class SkipName(FormWizard):
            async def should_skip(self, step: WizardStep) -> bool:
                return step.step_id == "collect-name"

        controller, synth, _ = make_controller([said("president"), said("yes"), said("submit")])

        result = _run(SkipName(controller, classifier))

        assert result.outcome is WizardOutcome.COMPLETED
        assert synth.spoken[0] == "Which position?"
        assert "collect-name" not in result.data

    def test_already_voted_skips_step(self, classifier: UtteranceClassifier) -> None:
        class Ballot(VoiceWizard):
            steps = (
                WizardStep("vote-1", "First.", InputKind.ENUMERATED_CHOICE, choices="positions"),
                WizardStep("vote-2", "Second.", InputKind.ENUMERATED_CHOICE, choices="positions"),
            )

            async def commit_step(self, step: WizardStep, value: str) -> None:
                if step.step_id == "vote-1":
                    raise AlreadyVotedError("u1", value)

            def skipped_message(self, step, exc) -> str | None:
                return f"Already voted for {exc.position}."

        controller, synth, _ = make_controller([said("president"), said("treasurer")])

        result = _run(Ballot(controller, classifier))

        assert result.data == {"vote-2": "Treasurer"}
        assert "Already voted for President." in synth.spoken

    def test_backend_failure_retries_step(self, classifier: UtteranceClassifier) -> None:
        class Flaky(VoiceWizard):
            steps = (
                WizardStep(
                    "pick",
                    "Pick one.",
                    InputKind.ENUMERATED_CHOICE,
                    choices="positions",
                    acknowledgement="Vote for {value} confirmed.",
                ),
            )
            attempts = 0

            async def commit_step(self, step: WizardStep, value: str) -> None:
                self.attempts += 1
                if self.attempts == 1:
                    raise BackendError("offline")

        controller, synth, _ = make_controller([said("president"), said("president")])

        result = _run(Flaky(controller, classifier))

        assert result.outcome is WizardOutcome.COMPLETED
        assert synth.spoken == [
            "Pick one.",
            phrases.ACTION_FAILED,
            "Pick one.",
            "Vote for President confirmed.",
        ]

    def test_completion_failure_stays_on_final_step(
        self, classifier: UtteranceClassifier
    ) -> None:
        class Strict(VoiceWizard):
            steps = (WizardStep("submit", "Say Submit.", InputKind.CONFIRMATION),)
            attempts = 0

            async def complete(self, data: dict[str, str]) -> WizardResult:
                self.attempts += 1
                if self.attempts == 1:
                    raise MissingFieldsError(["photo"])
                return WizardResult(WizardOutcome.COMPLETED, target="home", data=data)

        controller, synth, _ = make_controller([said("submit"), said("submit")])
        wizard = Strict(controller, classifier)

        result = _run(wizard)

        assert result.target == "home"
        assert "Please provide the following before submitting: photo." in synth.spoken
        assert wizard.attempts == 2

    def test_failed_completion_after_skipped_final_step(
        self, classifier: UtteranceClassifier
    ) -> None:
        class AllSkipped(VoiceWizard):
            steps = (WizardStep("submit", "Say Submit.", InputKind.CONFIRMATION),)
            attempts = 0

            async def should_skip(self, step: WizardStep) -> bool:
                return True

            async def complete(self, data: dict[str, str]) -> WizardResult:
                self.attempts += 1
                raise BackendError("offline")

            def failure_message(self, exc: Exception) -> str:
                return "Could not save."

        controller, synth, recognizer = make_controller([])
        wizard = AllSkipped(controller, classifier)

        result = _run(wizard)

        assert result.outcome is WizardOutcome.MANUAL_FALLBACK
        assert result.target == "submit"
        assert wizard.attempts == 1
        assert synth.spoken == ["Could not save."]
        assert recognizer.start_calls == 0

    def test_entering_a_step_starts_a_fresh_turn(
        self, classifier: UtteranceClassifier
    ) -> None:
        seen = []

        class Recording(FormWizard):
            async def should_skip(self, step: WizardStep) -> bool:
                session = self.controller.session
                seen.append((session.retry_count, session.pending_confirmation_value))
                return False

        controller, _, _ = make_controller([said("cancel")])
        controller.session.retry_count = 1
        controller.session.pending_confirmation_value = "President"

        _run(Recording(controller, classifier))

        assert seen == [(0, None)]

    def test_navigation_message_is_spoken(self, classifier: UtteranceClassifier) -> None:
        class Menu(VoiceWizard):
            steps = (
                WizardStep("menu", "Main menu.", InputKind.NAVIGATION, choices="home_menu"),
            )

            def navigation_message(self, target: str) -> str | None:
                return f"Opening {target}."

        controller, synth, _ = make_controller([said("view results")])

        result = _run(Menu(controller, classifier))

        assert result.target == "results"
        assert synth.spoken == ["Main menu.", "Opening results."]
