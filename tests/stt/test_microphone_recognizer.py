"""Tests for the microphone recognizer adapter."""

from __future__ import annotations

import asyncio
import sys
import types
from unittest.mock import MagicMock, patch

import pytest

from voice_vote.stt.base import (
    AUDIO_CAPTURE,
    NO_SPEECH,
    PERMISSION_DENIED,
    SERVICE_ERROR,
    RecognitionEvent,
    RecognitionEventKind,
)
from voice_vote.stt.microphone import MicrophoneRecognizer


def _fake_sr(recognizer: MagicMock) -> types.ModuleType:
    sr = types.ModuleType("speech_recognition")
    sr.Recognizer = MagicMock(return_value=recognizer)  # type: ignore[attr-defined]
    sr.Microphone = MagicMock()  # type: ignore[attr-defined]
    sr.WaitTimeoutError = type("WaitTimeoutError", (Exception,), {})  # type: ignore[attr-defined]
    sr.UnknownValueError = type("UnknownValueError", (Exception,), {})  # type: ignore[attr-defined]
    sr.RequestError = type("RequestError", (Exception,), {})  # type: ignore[attr-defined]
    return sr


def _capture(stt: MicrophoneRecognizer, sr: types.ModuleType) -> list[RecognitionEvent]:
    """Run one capture and collect its events up to END or ERROR."""

    async def scenario() -> list[RecognitionEvent]:
        await stt.start()
        events = []
        while True:
            event = await stt.next_event()
            events.append(event)
            if event.kind in (RecognitionEventKind.END, RecognitionEventKind.ERROR):
                return events

    with patch.dict(sys.modules, {"speech_recognition": sr}):
        return asyncio.run(scenario())


class TestMicrophoneRecognizerConstruction:
    def test_defaults(self) -> None:
        stt = MicrophoneRecognizer()
        assert stt._engine == "google"
        assert stt._listen_timeout == 5.0
        assert stt._device_index is None

    def test_unknown_engine(self) -> None:
        with pytest.raises(ValueError, match="Available engines: google, whisper"):
            MicrophoneRecognizer(engine="sphinx")

    def test_import_error_without_speech_recognition(self) -> None:
        stt = MicrophoneRecognizer()
        with patch.dict(sys.modules, {"speech_recognition": None}), pytest.raises(
            ImportError, match="SpeechRecognition is required"
        ):
            asyncio.run(stt.start())
        assert not stt.listening


class TestMicrophoneRecognizerCapture:
    def test_final_result(self) -> None:
        recognizer = MagicMock()
        recognizer.recognize_google.return_value = " Start voting "
        events = _capture(MicrophoneRecognizer(), _fake_sr(recognizer))

        assert [e.kind for e in events] == [
            RecognitionEventKind.START,
            RecognitionEventKind.RESULT,
            RecognitionEventKind.END,
        ]
        assert events[1].transcript == "Start voting"
        assert events[1].is_final
        assert recognizer.recognize_google.call_args.kwargs == {"language": "en-US"}

    def test_whisper_engine(self) -> None:
        recognizer = MagicMock()
        recognizer.listen.return_value = "audio"
        recognizer.recognize_whisper.return_value = "yes"
        stt = MicrophoneRecognizer(engine="whisper", whisper_model="tiny")
        events = _capture(stt, _fake_sr(recognizer))

        recognizer.recognize_whisper.assert_called_once_with("audio", model="tiny")
        assert events[1].transcript == "yes"

    def test_timeout_is_silence(self) -> None:
        recognizer = MagicMock()
        sr = _fake_sr(recognizer)
        recognizer.listen.side_effect = sr.WaitTimeoutError()
        events = _capture(MicrophoneRecognizer(), sr)

        assert [e.kind for e in events] == [RecognitionEventKind.START, RecognitionEventKind.END]
        assert events[-1].reason == NO_SPEECH

    def test_unintelligible_is_silence(self) -> None:
        recognizer = MagicMock()
        sr = _fake_sr(recognizer)
        recognizer.recognize_google.side_effect = sr.UnknownValueError()
        events = _capture(MicrophoneRecognizer(), sr)

        assert events[-1].kind is RecognitionEventKind.END

    def test_empty_transcript_has_no_result(self) -> None:
        recognizer = MagicMock()
        recognizer.recognize_google.return_value = "   "
        events = _capture(MicrophoneRecognizer(), _fake_sr(recognizer))

        assert [e.kind for e in events] == [RecognitionEventKind.START, RecognitionEventKind.END]

    def test_microphone_os_error_is_permission_denied(self) -> None:
        recognizer = MagicMock()
        recognizer.listen.side_effect = OSError("Device unavailable")
        events = _capture(MicrophoneRecognizer(), _fake_sr(recognizer))

        assert events[-1].kind is RecognitionEventKind.ERROR
        assert events[-1].reason == PERMISSION_DENIED

    def test_missing_pyaudio_is_audio_capture_error(self) -> None:
        recognizer = MagicMock()
        sr = _fake_sr(recognizer)
        sr.Microphone.side_effect = AttributeError("no PyAudio")  # type: ignore[attr-defined]
        events = _capture(MicrophoneRecognizer(), sr)

        assert events[-1].reason == AUDIO_CAPTURE

    def test_service_error(self) -> None:
        recognizer = MagicMock()
        sr = _fake_sr(recognizer)
        recognizer.recognize_google.side_effect = sr.RequestError("offline")
        events = _capture(MicrophoneRecognizer(), sr)

        assert events[-1].kind is RecognitionEventKind.ERROR
        assert events[-1].reason == SERVICE_ERROR

    def test_microphone_device_index(self) -> None:
        recognizer = MagicMock()
        recognizer.recognize_google.return_value = "hello"
        sr = _fake_sr(recognizer)
        _capture(MicrophoneRecognizer(device_index=2), sr)

        sr.Microphone.assert_called_once_with(device_index=2)  # type: ignore[attr-defined]


class TestMicrophoneRecognizerStop:
    def test_stop_before_start(self) -> None:
        asyncio.run(MicrophoneRecognizer().stop())
