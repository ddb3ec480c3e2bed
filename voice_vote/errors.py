"""Voice Vote error hierarchy.

All exceptions inherit from ``VoiceVoteError`` so callers can catch a
single base class, while the dialogue layer still distinguishes the
cases it recovers from (silence, backend failures, already-voted
conflicts) from genuine platform failures.
"""

from __future__ import annotations


class VoiceVoteError(Exception):
    """Base exception for all Voice Vote errors."""


class SpeechSynthesisError(VoiceVoteError):
    """Raised when the speech synthesizer fails to speak a prompt."""


class SpeechRecognitionError(VoiceVoteError):
    """Raised when the speech recognizer cannot be started."""


class MicrophonePermissionError(SpeechRecognitionError):
    """Raised when access to the microphone is denied."""


class RecognizerUnavailableError(SpeechRecognitionError):
    """Raised when no speech recognizer is available on the device."""


class BackendError(VoiceVoteError):
    """Raised when a document, blob, or auth backend call fails.

    ``status_code`` is the HTTP status of a rejected REST call, if any.
    """

    def __init__(self, message: str = "", status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthError(BackendError):
    """Raised when account creation or sign-in is rejected."""


class AlreadyVotedError(BackendError):
    """Raised when a user has already voted for a position.

    The ballot wizard treats this as a non-fatal skip, not a failure.
    """

    def __init__(self, user_id: str, position: str) -> None:
        super().__init__(f"User {user_id!r} has already voted for {position!r}")
        self.user_id = user_id
        self.position = position


class MissingFieldsError(VoiceVoteError):
    """Raised when a submission is missing required fields."""

    def __init__(self, fields: list[str]) -> None:
        super().__init__(f"Missing required fields: {', '.join(fields)}")
        self.fields = list(fields)
