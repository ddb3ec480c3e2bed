"""eSpeak speech synthesizer.

Uses ``pyttsx3`` (which wraps eSpeak on Linux) to speak prompts through
the local audio device.  ``runAndWait`` blocks, so each prompt is spoken
in a worker thread; ``stop()`` asks the engine to end the utterance
early, which makes the pending ``speak()`` return.

No API key required -- runs entirely on the local machine.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from voice_vote.errors import SpeechSynthesisError
from voice_vote.tts.base import SpeechSynthesizer

logger = logging.getLogger(__name__)


class ESpeakSynthesizer(SpeechSynthesizer):
    """eSpeak / pyttsx3-based speech synthesizer.

    Parameters
    ----------
    voice:
        Voice name or ID to use (e.g., ``"english"``, ``"english+f3"``).
        If ``None``, uses the system default.
    rate_wpm:
        Speaking rate in words per minute.  Defaults to ``175``.
    volume:
        Volume (0.0 - 1.0).  Defaults to ``1.0``.
    """

    def __init__(
        self,
        voice: str | None = None,
        rate_wpm: int = 175,
        volume: float = 1.0,
        **kwargs: object,
    ) -> None:
        self._voice = voice
        self._rate_wpm = rate_wpm
        self._volume = min(1.0, max(0.0, volume))
        self._engine: Any = None

    def _create_engine(self) -> Any:
        """Create a new pyttsx3 engine instance."""
        try:
            import pyttsx3  # type: ignore[import-untyped]
        except ImportError as exc:
            raise ImportError(
                "pyttsx3 is required for ESpeakSynthesizer. "
                "Install it with: pip install voice-vote[espeak]"
            ) from exc

        engine = pyttsx3.init()
        if self._voice:
            engine.setProperty("voice", self._voice)
        engine.setProperty("rate", self._rate_wpm)
        engine.setProperty("volume", self._volume)
        return engine

    def _say(self, engine: Any, text: str) -> None:
        engine.say(text)
        engine.runAndWait()

    async def speak(self, text: str) -> None:
        """Speak *text* and return once playback has finished or been stopped."""
        engine = self._create_engine()
        self._engine = engine
        try:
            await asyncio.to_thread(self._say, engine, text)
        except (RuntimeError, OSError) as exc:
            raise SpeechSynthesisError(f"eSpeak failed to speak prompt: {exc}") from exc
        finally:
            if self._engine is engine:
                self._engine = None
        logger.debug("eSpeak spoke %d characters", len(text))

    async def stop(self) -> None:
        engine = self._engine
        self._engine = None
        if engine is None:
            return
        try:
            engine.stop()
        except (RuntimeError, OSError):
            logger.warning("eSpeak stop failed; ignoring", exc_info=True)
