"""Speech recognizer adapters.

Provides a provider-agnostic, event-based interface for turning the
user's speech into transcripts.

Usage::

    from voice_vote.stt import create_speech_recognizer

    recognizer = create_speech_recognizer("microphone", engine="google")
    await recognizer.start()
    event = await recognizer.next_event()
"""

from __future__ import annotations

from typing import Any

from voice_vote.stt.base import (
    RecognitionEvent,
    RecognitionEventKind,
    RecognitionOptions,
    SpeechRecognizer,
)

__all__ = [
    "RecognitionEvent",
    "RecognitionEventKind",
    "RecognitionOptions",
    "SpeechRecognizer",
    "STT_PROVIDERS",
    "create_speech_recognizer",
]


def _get_provider_class(name: str) -> type[SpeechRecognizer]:
    """Lazily import provider classes to avoid requiring all SDKs at once."""
    if name == "microphone":
        from voice_vote.stt.microphone import MicrophoneRecognizer

        return MicrophoneRecognizer
    raise ValueError(
        f"Unknown STT provider: {name!r}. "
        f"Available providers: {', '.join(STT_PROVIDERS)}"
    )


STT_PROVIDERS: dict[str, str] = {
    "microphone": "voice_vote.stt.microphone.MicrophoneRecognizer",
}
"""Registry of available speech recognizer names."""


def create_speech_recognizer(name: str, **kwargs: Any) -> SpeechRecognizer:
    """Create a speech recognizer by name.

    Parameters
    ----------
    name:
        Provider name.  Currently ``"microphone"``.
    **kwargs:
        Provider-specific configuration passed to the constructor.
    """
    cls = _get_provider_class(name)
    return cls(**kwargs)
