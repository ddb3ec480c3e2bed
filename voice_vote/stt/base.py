"""Abstract speech recognizer interface and shared event types.

A recognizer is an event source.  After ``start()`` it emits ``START``,
any number of ``RESULT`` events (interim or final), and finally ``END``
or ``ERROR``.  Every capture gets a new generation number; events left
over from an earlier capture are dropped by ``next_event()`` so a late
result can never leak into the next turn.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)

# ``ERROR`` reasons understood by the turn controller.
PERMISSION_DENIED = "not-allowed"
NO_SPEECH = "no-speech"
AUDIO_CAPTURE = "audio-capture"
SERVICE_ERROR = "network"


class RecognitionEventKind(str, Enum):
    START = "start"
    RESULT = "result"
    END = "end"
    ERROR = "error"


@dataclass(frozen=True)
class RecognitionEvent:
    """One event emitted by a ``SpeechRecognizer``.

    Attributes
    ----------
    kind:
        Event type.
    transcript:
        Recognized text for ``RESULT`` events.
    is_final:
        Whether a ``RESULT`` is final (only final results are classified).
    reason:
        Failure reason for ``ERROR`` events (e.g. ``"not-allowed"``).
    generation:
        Capture the event belongs to.
    """

    kind: RecognitionEventKind
    transcript: str | None = None
    is_final: bool = False
    reason: str | None = None
    generation: int = 0


@dataclass(frozen=True)
class RecognitionOptions:
    """Options passed to ``SpeechRecognizer.start()``."""

    language: str = "en-US"
    interim_results: bool = True
    max_alternatives: int = 1


class SpeechRecognizer(ABC):
    """Abstract base class for speech recognizer adapters.

    Subclasses implement :meth:`_start` and :meth:`_stop` and report
    progress through :meth:`_emit`.  The base class owns the event
    queue and the generation counter.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[RecognitionEvent] | None = None
        self._generation = 0
        self._listening = False

    @property
    def generation(self) -> int:
        """Number of the current (or last) capture."""
        return self._generation

    @property
    def listening(self) -> bool:
        return self._listening

    def _events(self) -> asyncio.Queue[RecognitionEvent]:
        if self._queue is None:
            self._queue = asyncio.Queue()
        return self._queue

    def _emit(
        self,
        kind: RecognitionEventKind,
        generation: int,
        *,
        transcript: str | None = None,
        is_final: bool = False,
        reason: str | None = None,
    ) -> None:
        """Queue an event for the capture identified by *generation*."""
        if kind in (RecognitionEventKind.END, RecognitionEventKind.ERROR) and (
            generation == self._generation
        ):
            self._listening = False
        self._events().put_nowait(
            RecognitionEvent(
                kind=kind,
                transcript=transcript,
                is_final=is_final,
                reason=reason,
                generation=generation,
            )
        )

    async def start(self, options: RecognitionOptions | None = None) -> None:
        """Begin a new capture.

        Raises
        ------
        voice_vote.errors.RecognizerUnavailableError
            If no recognizer is available on this device.
        voice_vote.errors.MicrophonePermissionError
            If microphone access is denied.
        """
        self._generation += 1
        queue = self._events()
        while not queue.empty():
            queue.get_nowait()
        self._listening = True
        try:
            await self._start(options or RecognitionOptions(), self._generation)
        except Exception:
            self._listening = False
            raise

    async def stop(self) -> None:
        """Stop the current capture.

        Safe to call at any time; never raises while listening.  A
        pending ``next_event()`` is woken with an ``END`` event.
        """
        was_listening = self._listening
        self._listening = False
        try:
            await self._stop()
        except Exception:
            logger.warning("Recognizer stop failed; ignoring", exc_info=True)
        if was_listening:
            self._emit(RecognitionEventKind.END, self._generation)

    async def next_event(self) -> RecognitionEvent:
        """Wait for the next event of the current capture."""
        queue = self._events()
        while True:
            event = await queue.get()
            if event.generation == self._generation:
                return event
            logger.debug(
                "Discarding stale %s event from capture %d (current=%d)",
                event.kind.value,
                event.generation,
                self._generation,
            )

    @abstractmethod
    async def _start(self, options: RecognitionOptions, generation: int) -> None:
        """Start capturing audio for *generation*."""
        ...

    @abstractmethod
    async def _stop(self) -> None:
        """Stop capturing audio."""
        ...
