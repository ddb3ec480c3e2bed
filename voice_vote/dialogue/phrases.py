"""Generic spoken phrases shared by every screen."""

from __future__ import annotations

DIDNT_CATCH = "Sorry, I didn't catch that."
NOT_UNDERSTOOD = "Sorry, I didn't understand."
CONFIRM_VALUE = "I heard {value}. Is this correct? Say Yes or No."
TRY_AGAIN = "Okay, let's try that again."
MANUAL_FALLBACK = (
    "I'm having trouble hearing you. Voice guidance is now off. "
    "Please use the buttons on the screen."
)
PERMISSION_DENIED = (
    "Microphone permission is required for voice guidance. "
    "Please allow microphone access, or use the buttons on the screen."
)
RECOGNIZER_UNAVAILABLE = (
    "Speech recognition is not available on this device. "
    "Please use the buttons on the screen."
)
ACTION_FAILED = "Something went wrong. Please try again."
NOT_READY = "That step isn't finished yet."
MANUAL_INPUT = "Please complete this step on the screen."
