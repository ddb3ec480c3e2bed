"""Shared test fixtures and helpers for Voice Vote tests.

Provides a recording fake synthesizer, a scripted fake recognizer, and
factories for controllers, wizards and a seeded in-memory backend.
"""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from voice_vote.backend import Backend, create_backend
from voice_vote.classifier import UtteranceClassifier
from voice_vote.dialogue.controller import TurnController
from voice_vote.errors import SpeechSynthesisError
from voice_vote.models.session import DialogueSession
from voice_vote.stt.base import (
    RecognitionEventKind,
    RecognitionOptions,
    SpeechRecognizer,
)
from voice_vote.tts.base import SpeechSynthesizer

# ---------------------------------------------------------------------------
# Recognizer scripts
# ---------------------------------------------------------------------------

Script = list[tuple[Any, ...]]
"""Events emitted for one ``start()``: ``("start",)``, ``("interim", text)``,
``("final", text)``, ``("end",)``, ``("error", reason)`` or ``("hang",)``."""


def said(text: str) -> Script:
    """A capture in which the user says *text*."""
    return [("start",), ("final", text), ("end",)]


def silence() -> Script:
    """A capture that ends without any speech."""
    return [("start",), ("end",)]


def failure(reason: str) -> Script:
    """A capture that ends with a recognizer error."""
    return [("start",), ("error", reason)]


def hang() -> Script:
    """A capture that starts and then waits for ``stop()``."""
    return [("start",), ("hang",)]


class FakeSynthesizer(SpeechSynthesizer):
    """Records every spoken prompt; can be told to fail on some texts."""

    def __init__(self, fail_on: tuple[str, ...] = ()) -> None:
        self.spoken: list[str] = []
        self.speaking = False
        self.stop_calls = 0
        self.fail_on = fail_on

    async def speak(self, text: str) -> None:
        self.speaking = True
        try:
            await asyncio.sleep(0)
            if any(fragment in text for fragment in self.fail_on):
                raise SpeechSynthesisError(f"cannot speak {text!r}")
            self.spoken.append(text)
        finally:
            self.speaking = False

    async def stop(self) -> None:
        self.stop_calls += 1
        self.speaking = False


class ScriptedRecognizer(SpeechRecognizer):
    """Replays one script per ``start()``; silence when scripts run out.

    Counts ``start()``/``stop()`` calls and any start that happened
    while the paired synthesizer was speaking.
    """

    def __init__(
        self,
        scripts: list[Script] | None = None,
        synthesizer: FakeSynthesizer | None = None,
        start_error: Exception | None = None,
    ) -> None:
        super().__init__()
        self.scripts = list(scripts or [])
        self.synthesizer = synthesizer
        self.start_error = start_error
        self.start_calls = 0
        self.stop_calls = 0
        self.started_while_speaking = 0
        self.options: list[RecognitionOptions] = []

    async def _start(self, options: RecognitionOptions, generation: int) -> None:
        self.start_calls += 1
        self.options.append(options)
        if self.synthesizer is not None and self.synthesizer.speaking:
            self.started_while_speaking += 1
        if self.start_error is not None:
            raise self.start_error
        script = self.scripts.pop(0) if self.scripts else silence()
        for event in script:
            tag = event[0]
            if tag == "start":
                self._emit(RecognitionEventKind.START, generation)
            elif tag == "interim":
                self._emit(RecognitionEventKind.RESULT, generation, transcript=event[1])
            elif tag == "final":
                self._emit(
                    RecognitionEventKind.RESULT, generation, transcript=event[1], is_final=True
                )
            elif tag == "end":
                self._emit(RecognitionEventKind.END, generation)
            elif tag == "error":
                self._emit(RecognitionEventKind.ERROR, generation, reason=event[1])
            elif tag == "hang":
                break

    async def stop(self) -> None:
        self.stop_calls += 1
        await super().stop()

    async def _stop(self) -> None:
        pass


def make_controller(
    scripts: list[Script] | None = None,
    max_retries: int = 2,
    screen: str = "test",
    **kwargs: Any,
) -> tuple[TurnController, FakeSynthesizer, ScriptedRecognizer]:
    """Create a controller wired to fresh fakes."""
    synthesizer = FakeSynthesizer(kwargs.pop("fail_on", ()))
    recognizer = ScriptedRecognizer(
        scripts, synthesizer=synthesizer, start_error=kwargs.pop("start_error", None)
    )
    controller = TurnController(
        DialogueSession(screen=screen),
        synthesizer,
        recognizer,
        max_retries=max_retries,
        **kwargs,
    )
    return controller, synthesizer, recognizer


# ---------------------------------------------------------------------------
# Sample data
# ---------------------------------------------------------------------------

CONTESTANTS = {
    "c1": {"name": "Alice Wanjiru", "position": "President", "briefInfo": "Fourth year law."},
    "c2": {"name": "Brian Otieno", "position": "President", "briefInfo": ""},
    "c3": {"name": "Carol Njeri", "position": "Vice President"},
    "c4": {"name": "David Kamau", "position": "Treasurer"},
}


def make_backend(**collections: dict[str, dict[str, Any]]) -> Backend:
    """In-memory backend seeded with the sample contestants plus *collections*."""
    initial = {"contestants": {k: dict(v) for k, v in CONTESTANTS.items()}}
    initial.update(collections)
    return create_backend("memory", initial=initial)


@pytest.fixture(scope="session")
def classifier() -> UtteranceClassifier:
    """Classifier over the packaged vocabularies."""
    return UtteranceClassifier()


@pytest.fixture()
def backend() -> Backend:
    return make_backend()
