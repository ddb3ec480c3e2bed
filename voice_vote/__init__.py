"""Voice Vote -- voice-guided interaction layer for student elections.

Public API re-exports for convenient access::

    from voice_vote import VoiceVoteApp, WizardOutcome

    app = VoiceVoteApp(tts_provider="espeak", stt_provider="microphone")
    menu = await app.home(user_name="Amina")
    result = await menu.run()
"""

from voice_vote.app import VoiceVoteApp
from voice_vote.classifier import ClassificationContext, UtteranceClassifier, classify
from voice_vote.dialogue import AudioFocus, TurnController
from voice_vote.errors import (
    AlreadyVotedError,
    AuthError,
    BackendError,
    MicrophonePermissionError,
    MissingFieldsError,
    RecognizerUnavailableError,
    SpeechRecognitionError,
    SpeechSynthesisError,
    VoiceVoteError,
)
from voice_vote.models import DialogueSession, InputKind, Intent, IntentKind, WizardStep
from voice_vote.wizard import VoiceWizard, WizardOutcome, WizardResult, WizardStateMachine

__all__ = [
    # App
    "VoiceVoteApp",
    # Classification
    "ClassificationContext",
    "UtteranceClassifier",
    "classify",
    # Dialogue
    "AudioFocus",
    "TurnController",
    "VoiceWizard",
    "WizardOutcome",
    "WizardResult",
    "WizardStateMachine",
    # Models
    "DialogueSession",
    "InputKind",
    "Intent",
    "IntentKind",
    "WizardStep",
    # Errors
    "VoiceVoteError",
    "SpeechSynthesisError",
    "SpeechRecognitionError",
    "MicrophonePermissionError",
    "RecognizerUnavailableError",
    "BackendError",
    "AuthError",
    "AlreadyVotedError",
    "MissingFieldsError",
]
