"""Speech synthesizer adapters.

Provides a provider-agnostic interface for speaking prompts aloud.

Usage::

    from voice_vote.tts import create_speech_synthesizer

    tts = create_speech_synthesizer("espeak", rate_wpm=160)
    await tts.speak("Welcome to the voting app.")
"""

from __future__ import annotations

from typing import Any

from voice_vote.tts.base import SpeechSynthesizer

__all__ = [
    "SpeechSynthesizer",
    "TTS_PROVIDERS",
    "create_speech_synthesizer",
]


def _get_provider_class(name: str) -> type[SpeechSynthesizer]:
    """Lazily import provider classes to avoid requiring all SDKs at once."""
    if name == "espeak":
        from voice_vote.tts.espeak import ESpeakSynthesizer

        return ESpeakSynthesizer
    raise ValueError(
        f"Unknown TTS provider: {name!r}. "
        f"Available providers: {', '.join(TTS_PROVIDERS)}"
    )


TTS_PROVIDERS: dict[str, str] = {
    "espeak": "voice_vote.tts.espeak.ESpeakSynthesizer",
}
"""Registry of available speech synthesizer names."""


def create_speech_synthesizer(name: str, **kwargs: Any) -> SpeechSynthesizer:
    """Create a speech synthesizer by name.

    Parameters
    ----------
    name:
        Provider name.  Currently ``"espeak"``.
    **kwargs:
        Provider-specific configuration passed to the constructor.

    Returns
    -------
    SpeechSynthesizer
        An initialized synthesizer instance.
    """
    cls = _get_provider_class(name)
    return cls(**kwargs)
