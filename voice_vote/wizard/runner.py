"""VoiceWizard -- the shared voice interpreter every screen reuses.

A screen is a ``VoiceWizard`` subclass that supplies its steps (data)
and overrides a handful of hooks (behaviour).  ``run()`` walks the
steps through a ``TurnController`` and returns a ``WizardResult``
telling the host screen what happened.

Usage::

    class FeedbackWizard(VoiceWizard):
        screen = "feedback"
        steps = (
            WizardStep("collect-comment", "What would you like to tell us?"),
        )

        async def complete(self, data):
            await self.feedback.send(data["collect-comment"])
            return WizardResult(WizardOutcome.COMPLETED, data=data)

    result = await FeedbackWizard(controller, classifier).run()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

from voice_vote.classifier import UtteranceClassifier, Vocabulary
from voice_vote.dialogue import phrases
from voice_vote.dialogue.controller import TurnController
from voice_vote.errors import AlreadyVotedError, BackendError, MissingFieldsError
from voice_vote.models.intent import Intent, IntentKind
from voice_vote.models.session import TurnState
from voice_vote.models.step import InputKind, WizardStep
from voice_vote.wizard.machine import WizardStateMachine

logger = logging.getLogger(__name__)


class WizardOutcome(str, Enum):
    """How a wizard run ended."""

    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NAVIGATED = "navigated"
    MANUAL_INPUT = "manual_input"
    MANUAL_FALLBACK = "manual_fallback"
    STOPPED = "stopped"


@dataclass(frozen=True)
class WizardResult:
    """Result of ``VoiceWizard.run()``.

    Attributes
    ----------
    outcome:
        How the run ended.
    target:
        Navigation target for ``NAVIGATED`` and ``COMPLETED`` results,
        or the step awaiting input for ``MANUAL_INPUT`` and fallback
        results.
    data:
        Values committed so far, keyed by step id.
    """

    outcome: WizardOutcome
    target: str | None = None
    data: dict[str, str] = field(default_factory=dict)


class VoiceWizard:
    """Base class for voice-driven screens.

    Parameters
    ----------
    controller:
        Turn controller of the screen's dialogue session.
    classifier:
        Classifier holding the named vocabularies the steps refer to.
    steps:
        Overrides the class-level ``steps``.
    """

    screen: str = "wizard"
    steps: Sequence[WizardStep] = ()

    def __init__(
        self,
        controller: TurnController,
        classifier: UtteranceClassifier,
        steps: Sequence[WizardStep] | None = None,
    ) -> None:
        self.controller = controller
        self.classifier = classifier
        self.machine = WizardStateMachine(steps if steps is not None else self.build_steps())

    # -- hooks --------------------------------------------------------------

    def build_steps(self) -> Sequence[WizardStep]:
        """Return the steps of this wizard.  Defaults to ``steps``."""
        return self.steps

    def introduction(self) -> str | None:
        """Text spoken once before the first step."""
        return None

    def prompt_for(self, step: WizardStep) -> str:
        return step.prompt

    def vocabulary_for(self, step: WizardStep) -> Vocabulary | None:
        """Vocabulary built at run time (overrides ``step.choices``)."""
        return None

    async def should_skip(self, step: WizardStep) -> bool:
        """Whether *step* is skipped without a voice turn."""
        return False

    def external_ready(self, step: WizardStep) -> bool:
        """Whether the external action of *step* has been performed."""
        return True

    def interpret(self, step: WizardStep, intent: Intent) -> Intent:
        """Rewrite a classified intent before it is acted on."""
        return intent

    async def commit_step(self, step: WizardStep, value: str) -> None:
        """Apply a confirmed value (e.g. cast the vote for one position).

        Raising ``AlreadyVotedError`` skips the step instead of failing.
        """

    async def complete(self, data: dict[str, str]) -> WizardResult:
        """Run the business action once the final step is done."""
        return WizardResult(WizardOutcome.COMPLETED, data=data)

    def confirm_prompt(self, step: WizardStep, value: str) -> str | None:
        """Question asked before committing *value*; ``None`` uses the default."""
        return None

    def failure_message(self, exc: Exception) -> str:
        if isinstance(exc, MissingFieldsError):
            return f"Please provide the following before submitting: {', '.join(exc.fields)}."
        return phrases.ACTION_FAILED

    def skipped_message(self, step: WizardStep, exc: AlreadyVotedError) -> str | None:
        return None

    def navigation_message(self, target: str) -> str | None:
        """Text spoken before leaving the screen for *target*."""
        return None

    # -- driver -------------------------------------------------------------

    async def run(self) -> WizardResult:
        """Walk the steps until the wizard completes or the session ends."""
        logger.info("Starting %s wizard (%d steps)", self.screen, len(self.machine.steps))
        try:
            return await self._run()
        finally:
            await self.controller.stop(intentional=True)

    async def _run(self) -> WizardResult:
        session = self.controller.session
        intro = self.introduction()
        if intro:
            await self.controller.speak(intro)

        while True:
            if session.terminated:
                return self._ended()
            step = self.machine.current_step
            if session.current_step_id != step.step_id:
                logger.info(
                    "%s: entering step %d (%s)", self.screen, self.machine.index, step.step_id
                )
                session.current_step_id = step.step_id
                session.reset_turn()

            if await self.should_skip(step):
                logger.info("%s: skipping step %s", self.screen, step.step_id)
                final = self.machine.is_final
                result = await self._finish_step()
                if result is None and final:
                    # Completion failed and no voice turn is left to retry it.
                    return self._give_up(step)
            else:
                result = await self._run_step(step)
            if result is not None:
                return result

    async def _run_step(self, step: WizardStep) -> WizardResult | None:
        controller = self.controller

        if step.kind is InputKind.MANUAL:
            await controller.speak(self.prompt_for(step))
            return WizardResult(
                WizardOutcome.MANUAL_INPUT, target=step.step_id, data=self.machine.data
            )

        context = self.classifier.context_for(step, self.vocabulary_for(step))
        intent = await controller.run_turn(self.prompt_for(step), context, reprompt=step.reprompt)
        if intent is None:
            return self._ended()
        intent = self.interpret(step, intent)

        if intent.kind is IntentKind.CANCEL:
            return await self._cancel()
        if intent.kind is IntentKind.REPEAT_PROMPT:
            return None
        if intent.kind is IntentKind.NAVIGATE:
            if step.kind is InputKind.EXTERNAL_ACTION:
                if step.required and not self.external_ready(step):
                    await controller.speak(phrases.NOT_READY)
                    return None
                return await self._finish_step()
            message = self.navigation_message(intent.value or "")
            if message:
                await controller.speak(message)
            await controller.stop(intentional=True)
            return WizardResult(
                WizardOutcome.NAVIGATED, target=intent.value, data=self.machine.data
            )
        if intent.kind is IntentKind.CONFIRM:
            if not intent.confirmed:
                await controller.speak(phrases.TRY_AGAIN)
                return None
            self.machine.record_value(step.step_id, "yes")
            return await self._finish_step()
        if intent.value is None:
            return None
        return await self._accept(step, intent.value)

    async def _accept(self, step: WizardStep, value: str) -> WizardResult | None:
        controller = self.controller
        if step.confirm:
            answer = await controller.confirm(value, self.confirm_prompt(step, value))
            if answer is None:
                last = controller.last_intent
                if last is not None and last.kind is IntentKind.CANCEL:
                    return await self._cancel()
                return self._ended()
            if not answer:
                self.machine.discard_value(step.step_id)
                self.machine.retreat_to_step(step.step_id)
                await controller.speak(phrases.TRY_AGAIN)
                return None

        try:
            await self.commit_step(step, value)
        except AlreadyVotedError as exc:
            logger.info("%s: %s; skipping step %s", self.screen, exc, step.step_id)
            message = self.skipped_message(step, exc)
            if message:
                await controller.speak(message)
            return await self._finish_step()
        except BackendError as exc:
            logger.warning("%s: step %s failed: %s", self.screen, step.step_id, exc)
            await controller.speak(self.failure_message(exc))
            return None

        self.machine.record_value(step.step_id, value)
        if step.acknowledgement:
            await controller.speak(step.acknowledgement.format(value=value))
        return await self._finish_step()

    async def _finish_step(self) -> WizardResult | None:
        """Advance past the current step, completing the wizard after the last one."""
        machine = self.machine
        if not machine.is_final:
            machine.advance()
            return None
        try:
            result = await self.complete(machine.data)
        except (BackendError, MissingFieldsError) as exc:
            logger.warning("%s: completion failed: %s", self.screen, exc)
            await self.controller.speak(self.failure_message(exc))
            machine.retreat_to_step(machine.current_step_id)
            return None
        machine.advance()
        logger.info("%s wizard completed (%s)", self.screen, result.outcome.value)
        return result

    async def _cancel(self) -> WizardResult:
        await self.controller.stop(intentional=True)
        logger.info("%s wizard cancelled at step %s", self.screen, self.machine.current_step_id)
        return WizardResult(WizardOutcome.CANCELLED, data=self.machine.data)

    def _ended(self) -> WizardResult:
        session = self.controller.session
        outcome = (
            WizardOutcome.MANUAL_FALLBACK
            if session.state is TurnState.MANUAL_FALLBACK
            else WizardOutcome.STOPPED
        )
        return WizardResult(outcome, target=self.machine.current_step_id, data=self.machine.data)

    def _give_up(self, step: WizardStep) -> WizardResult:
        logger.warning("%s: completion failed after skipped step %s", self.screen, step.step_id)
        self.controller.session.enter(TurnState.MANUAL_FALLBACK)
        return WizardResult(
            WizardOutcome.MANUAL_FALLBACK, target=step.step_id, data=self.machine.data
        )
