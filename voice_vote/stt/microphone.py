"""Microphone recognizer adapter.

Uses the ``SpeechRecognition`` package to capture one phrase from the
default microphone and transcribe it with Google Web Speech or a local
Whisper model.  Capture and transcription run in a worker thread; the
events they produce are emitted back on the event loop.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from voice_vote.errors import MicrophonePermissionError, RecognizerUnavailableError
from voice_vote.stt.base import (
    AUDIO_CAPTURE,
    NO_SPEECH,
    PERMISSION_DENIED,
    SERVICE_ERROR,
    RecognitionEventKind,
    RecognitionOptions,
    SpeechRecognizer,
)

logger = logging.getLogger(__name__)

_ENGINES = ("google", "whisper")


class _NoSpeech(Exception):
    """Internal: the capture ended without intelligible speech."""


class MicrophoneRecognizer(SpeechRecognizer):
    """Default-microphone recognizer built on ``SpeechRecognition``.

    Parameters
    ----------
    engine:
        Transcription backend, ``"google"`` or ``"whisper"``.
    whisper_model:
        Whisper model size when ``engine="whisper"``.
    listen_timeout:
        Seconds to wait for speech to begin before the capture ends as
        silence.
    phrase_time_limit:
        Maximum length of one utterance in seconds.
    device_index:
        Microphone device index, or ``None`` for the system default.
    """

    def __init__(
        self,
        engine: str = "google",
        whisper_model: str = "base",
        listen_timeout: float = 5.0,
        phrase_time_limit: float = 15.0,
        device_index: int | None = None,
        **kwargs: object,
    ) -> None:
        super().__init__()
        if engine not in _ENGINES:
            raise ValueError(
                f"Unknown recognition engine: {engine!r}. "
                f"Available engines: {', '.join(_ENGINES)}"
            )
        self._engine = engine
        self._whisper_model = whisper_model
        self._listen_timeout = listen_timeout
        self._phrase_time_limit = phrase_time_limit
        self._device_index = device_index
        self._sr: Any = None
        self._recognizer: Any = None
        self._task: asyncio.Task[None] | None = None

    def _load(self) -> Any:
        """Lazily import ``speech_recognition`` and create the recognizer."""
        if self._sr is None:
            try:
                import speech_recognition as sr  # type: ignore[import-untyped]
            except ImportError as exc:
                raise ImportError(
                    "SpeechRecognition is required for MicrophoneRecognizer. "
                    "Install it with: pip install voice-vote[microphone]"
                ) from exc
            self._sr = sr
            self._recognizer = sr.Recognizer()
        return self._sr

    def _open_microphone(self) -> Any:
        sr = self._load()
        try:
            return sr.Microphone(device_index=self._device_index)
        except AttributeError as exc:
            # Raised by SpeechRecognition when PyAudio is missing.
            raise RecognizerUnavailableError(
                "No audio input backend available (is PyAudio installed?)"
            ) from exc

    def _capture(self, options: RecognitionOptions) -> str:
        """Blocking: record one phrase and transcribe it."""
        sr = self._sr
        microphone = self._open_microphone()
        try:
            with microphone as source:
                self._recognizer.adjust_for_ambient_noise(source, duration=0.5)
                audio = self._recognizer.listen(
                    source,
                    timeout=self._listen_timeout,
                    phrase_time_limit=self._phrase_time_limit,
                )
        except sr.WaitTimeoutError as exc:
            raise _NoSpeech() from exc
        except OSError as exc:
            raise MicrophonePermissionError(f"Could not open the microphone: {exc}") from exc

        try:
            if self._engine == "whisper":
                text = self._recognizer.recognize_whisper(audio, model=self._whisper_model)
            else:
                text = self._recognizer.recognize_google(audio, language=options.language)
        except sr.UnknownValueError as exc:
            raise _NoSpeech() from exc
        return str(text).strip()

    async def _run(self, options: RecognitionOptions, generation: int) -> None:
        sr = self._sr
        self._emit(RecognitionEventKind.START, generation)
        try:
            text = await asyncio.to_thread(self._capture, options)
        except _NoSpeech:
            logger.debug("Capture %d ended without speech", generation)
            self._emit(RecognitionEventKind.END, generation, reason=NO_SPEECH)
            return
        except MicrophonePermissionError as exc:
            logger.warning("Microphone unavailable: %s", exc)
            self._emit(RecognitionEventKind.ERROR, generation, reason=PERMISSION_DENIED)
            return
        except RecognizerUnavailableError as exc:
            logger.warning("Recognizer unavailable: %s", exc)
            self._emit(RecognitionEventKind.ERROR, generation, reason=AUDIO_CAPTURE)
            return
        except sr.RequestError as exc:
            logger.warning("Recognition service error: %s", exc)
            self._emit(RecognitionEventKind.ERROR, generation, reason=SERVICE_ERROR)
            return
        except Exception:
            logger.exception("Capture %d failed", generation)
            self._emit(RecognitionEventKind.ERROR, generation, reason=SERVICE_ERROR)
            return

        if text:
            self._emit(RecognitionEventKind.RESULT, generation, transcript=text, is_final=True)
        self._emit(RecognitionEventKind.END, generation)

    async def _start(self, options: RecognitionOptions, generation: int) -> None:
        self._load()
        self._task = asyncio.create_task(self._run(options, generation))

    async def _stop(self) -> None:
        # A capture already inside the worker thread runs to completion,
        # but its events are never emitted.
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
