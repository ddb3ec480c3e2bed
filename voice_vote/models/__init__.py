"""Voice Vote data models."""

from voice_vote.models.intent import Intent, IntentKind
from voice_vote.models.records import (
    POSITION_ORDER,
    REPORT_CATEGORIES,
    Application,
    Attachment,
    BallotPosition,
    Candidate,
    CandidateTally,
    IncidentReport,
    PositionResult,
    UserProfile,
)
from voice_vote.models.session import DialogueSession, TurnState
from voice_vote.models.step import InputKind, ValueFormat, WizardStep

__all__ = [
    "Intent",
    "IntentKind",
    "InputKind",
    "ValueFormat",
    "WizardStep",
    "DialogueSession",
    "TurnState",
    "Application",
    "Attachment",
    "BallotPosition",
    "Candidate",
    "CandidateTally",
    "IncidentReport",
    "PositionResult",
    "UserProfile",
    "POSITION_ORDER",
    "REPORT_CATEGORIES",
]
