"""Voice wizards -- ordered steps driven by the turn controller."""

from __future__ import annotations

from voice_vote.wizard.machine import WizardStateMachine
from voice_vote.wizard.runner import VoiceWizard, WizardOutcome, WizardResult

__all__ = ["VoiceWizard", "WizardOutcome", "WizardResult", "WizardStateMachine"]
