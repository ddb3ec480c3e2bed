"""Abstract speech synthesizer interface.

A synthesizer speaks one prompt at a time.  ``speak()`` returns once
the prompt has been fully spoken (the "done" signal) or raises
``SpeechSynthesisError``; ``stop()`` cuts the current prompt short and
makes a pending ``speak()`` return early.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class SpeechSynthesizer(ABC):
    """Abstract base class for text-to-speech adapters."""

    @abstractmethod
    async def speak(self, text: str) -> None:
        """Speak *text* and return when done.

        Raises
        ------
        voice_vote.errors.SpeechSynthesisError
            If synthesis or playback fails.
        """
        ...

    @abstractmethod
    async def stop(self) -> None:
        """Stop speaking.  Idempotent; callable at any time."""
        ...
