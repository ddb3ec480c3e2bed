"""TurnController -- one speak -> listen -> classify cycle at a time.

The controller owns the turn-taking and retry policy of a single
``DialogueSession``:

* it never starts the recognizer while the synthesizer is speaking;
* a silent, failed or unrecognized turn is retried with a clarifying
  prompt until ``max_retries`` consecutive failures, after which the
  session falls back to manual input and the recognizer is stopped
  exactly once;
* an intentional ``stop()`` halts all audio, and any event that arrives
  afterwards is discarded instead of resurrecting the session.
"""

from __future__ import annotations

import logging
from typing import Callable

from voice_vote.classifier import ClassificationContext, KeywordSet, classify
from voice_vote.dialogue import phrases
from voice_vote.errors import (
    MicrophonePermissionError,
    RecognizerUnavailableError,
    SpeechSynthesisError,
)
from voice_vote.models.intent import Intent, IntentKind
from voice_vote.models.session import TERMINAL_STATES, DialogueSession, TurnState
from voice_vote.models.step import InputKind
from voice_vote.stt.base import (
    AUDIO_CAPTURE,
    PERMISSION_DENIED,
    RecognitionEventKind,
    RecognitionOptions,
    SpeechRecognizer,
)
from voice_vote.tts.base import SpeechSynthesizer

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 2


class TurnController:
    """Drives the voice turns of one ``DialogueSession``.

    Parameters
    ----------
    session:
        The session whose state this controller updates.
    synthesizer:
        Speech synthesizer used for prompts.
    recognizer:
        Speech recognizer used for answers.
    max_retries:
        Consecutive failed turns tolerated before falling back to
        manual input.
    options:
        Options passed to every ``recognizer.start()``.
    keywords:
        Command words used by the confirmation sub-protocol.
    on_interim:
        Optional callback receiving interim transcripts (e.g. to show
        live captions).
    """

    def __init__(
        self,
        session: DialogueSession,
        synthesizer: SpeechSynthesizer,
        recognizer: SpeechRecognizer,
        max_retries: int = DEFAULT_MAX_RETRIES,
        options: RecognitionOptions | None = None,
        keywords: KeywordSet | None = None,
        on_interim: Callable[[str], None] | None = None,
    ) -> None:
        if max_retries < 1:
            raise ValueError(f"max_retries must be at least 1, got {max_retries}")
        self.session = session
        self._synthesizer = synthesizer
        self._recognizer = recognizer
        self._max_retries = max_retries
        self._options = options or RecognitionOptions()
        self._keywords = keywords or KeywordSet()
        self._on_interim = on_interim
        self._halted = False
        self.last_intent: Intent | None = None
        """The most recent recognized intent, or ``None``."""

    @property
    def max_retries(self) -> int:
        return self._max_retries

    @property
    def keywords(self) -> KeywordSet:
        return self._keywords

    # -- audio primitives ---------------------------------------------------

    async def _say(self, text: str) -> None:
        session = self.session
        session.is_speaking = True
        try:
            await self._synthesizer.speak(text)
        except SpeechSynthesisError:
            # The prompt is lost but the turn goes on to listening.
            logger.warning("Failed to speak prompt %r", text, exc_info=True)
        finally:
            session.is_speaking = False

    async def speak(self, text: str) -> None:
        """Speak *text*, returning once the synthesizer reports done.

        Does nothing once the session has terminated.
        """
        session = self.session
        if session.terminated:
            return
        if session.is_listening:
            # Own voice must never be captured.
            await self._recognizer.stop()
            session.is_listening = False
        session.enter(TurnState.SPEAKING)
        await self._say(text)

    async def listen(self) -> str | None:
        """Listen for one final transcript.

        Returns
        -------
        str or None
            The final transcript, or ``None`` when the capture ended in
            silence or an error, or the session was stopped.

        Raises
        ------
        RuntimeError
            If called while the synthesizer is still speaking.
        """
        session = self.session
        if session.terminated:
            return None
        if session.is_speaking:
            raise RuntimeError("Cannot listen while speaking")

        session.enter(TurnState.LISTENING)
        session.is_listening = True
        try:
            await self._recognizer.start(self._options)
        except MicrophonePermissionError:
            session.is_listening = False
            logger.warning("Microphone permission denied on screen %s", session.screen)
            await self._fall_back(phrases.PERMISSION_DENIED)
            return None
        except RecognizerUnavailableError:
            session.is_listening = False
            logger.warning("No speech recognizer available on screen %s", session.screen)
            await self._fall_back(phrases.RECOGNIZER_UNAVAILABLE)
            return None

        generation = self._recognizer.generation
        transcript: str | None = None
        reason: str | None = None
        try:
            while True:
                event = await self._recognizer.next_event()
                if session.stop_requested:
                    logger.debug("Discarding %s event after stop", event.kind.value)
                    return None
                if event.generation != generation:
                    continue
                if event.kind is RecognitionEventKind.RESULT:
                    text = (event.transcript or "").strip()
                    if not text:
                        continue
                    if event.is_final:
                        transcript = text
                        break
                    if self._on_interim is not None:
                        self._on_interim(text)
                elif event.kind is RecognitionEventKind.ERROR:
                    reason = event.reason
                    logger.info("Recognizer error on screen %s: %s", session.screen, reason)
                    break
                elif event.kind is RecognitionEventKind.END:
                    break
        finally:
            session.is_listening = False

        if reason == PERMISSION_DENIED:
            await self._fall_back(phrases.PERMISSION_DENIED)
            return None
        if reason == AUDIO_CAPTURE:
            await self._fall_back(phrases.RECOGNIZER_UNAVAILABLE)
            return None
        if transcript is None:
            return None

        await self._recognizer.stop()
        session.enter(TurnState.PROCESSING)
        return transcript

    # -- turns --------------------------------------------------------------

    async def run_turn(
        self,
        prompt: str,
        context: ClassificationContext,
        reprompt: str | None = None,
    ) -> Intent | None:
        """Speak *prompt*, listen, and classify the answer.

        Failed turns are retried with a clarifying prompt.  A recognized
        intent resets the retry counter.

        Parameters
        ----------
        prompt:
            Text spoken first.
        context:
            Classification context of the active step.
        reprompt:
            Text spoken after the clarification on a retry.  Defaults to
            *prompt*.

        Returns
        -------
        Intent or None
            The recognized intent, or ``None`` if the session fell back
            to manual input or was stopped.
        """
        session = self.session
        text = prompt
        while not session.terminated:
            await self.speak(text)
            transcript = await self.listen()
            if session.terminated:
                return None

            intent = classify(transcript, context) if transcript is not None else None
            if intent is not None and intent.recognized:
                session.retry_count = 0
                self.last_intent = intent
                logger.debug(
                    "Step %s: %r -> %s", session.current_step_id, transcript, intent.kind.value
                )
                return intent

            session.retry_count += 1
            logger.info(
                "Step %s: %s (attempt %d of %d)",
                session.current_step_id,
                "no answer" if transcript is None else f"unrecognized {transcript!r}",
                session.retry_count,
                self._max_retries,
            )
            if session.retry_count >= self._max_retries:
                await self._fall_back(phrases.MANUAL_FALLBACK)
                return None

            session.enter(TurnState.IDLE)
            clarification = phrases.DIDNT_CATCH if transcript is None else phrases.NOT_UNDERSTOOD
            text = f"{clarification} {reprompt or prompt}"
        return None

    async def confirm(self, value: str, prompt: str | None = None) -> bool | None:
        """Ask the user to confirm *value* with a yes/no answer.

        Returns ``True`` or ``False`` for the answer, or ``None`` if the
        user cancelled or the session ended.  ``last_intent`` tells a
        cancellation apart from a fallback.
        """
        session = self.session
        context = ClassificationContext(InputKind.CONFIRMATION, keywords=self._keywords)
        question = prompt or phrases.CONFIRM_VALUE.format(value=value)
        session.pending_confirmation_value = value
        try:
            while True:
                intent = await self.run_turn(question, context)
                if intent is None or intent.kind is IntentKind.CANCEL:
                    return None
                if intent.kind is IntentKind.CONFIRM:
                    return bool(intent.confirmed)
                # Repeat: ask again.
        finally:
            session.pending_confirmation_value = None

    # -- termination --------------------------------------------------------

    async def _fall_back(self, notice: str) -> None:
        """Enter manual fallback: speak *notice* and stop listening for good."""
        session = self.session
        session.enter(TurnState.MANUAL_FALLBACK)
        logger.info("Screen %s fell back to manual input", session.screen)
        await self._say(notice)
        if not self._halted:
            self._halted = True
            await self._recognizer.stop()
        session.is_listening = False

    async def stop(self, intentional: bool = True) -> None:
        """Stop all audio.

        An intentional stop (screen blur, cancel, navigation) ends the
        session: later recognizer events are discarded and no retry
        happens.  A non-intentional stop only cuts the current turn
        short, which then counts as a silent turn.  Idempotent.
        """
        session = self.session
        if intentional:
            session.stop_requested = True
            session.active = False
        if self._halted:
            session.is_speaking = False
            session.is_listening = False
            return
        if intentional:
            self._halted = True
        await self._synthesizer.stop()
        await self._recognizer.stop()
        session.is_speaking = False
        session.is_listening = False
        if intentional and session.state not in TERMINAL_STATES:
            session.enter(TurnState.STOPPED)
        logger.debug("Stopped audio on screen %s (intentional=%s)", session.screen, intentional)
