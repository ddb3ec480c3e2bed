"""Landing screen -- choose between logging in and signing up."""

from __future__ import annotations

from voice_vote.models.step import InputKind, WizardStep
from voice_vote.wizard.runner import VoiceWizard

WELCOME_PROMPT = "Please say Login to enter, or Sign Up to create an account."

WELCOME_TARGETS = {"login": "Opening Login...", "signup": "Opening Sign Up..."}
"""Navigation targets and what is said on the way out."""


class WelcomeMenu(VoiceWizard):
    screen = "welcome"
    steps = (
        WizardStep(
            "menu",
            WELCOME_PROMPT,
            kind=InputKind.NAVIGATION,
            choices="landing_menu",
            reprompt="Please say Login or Sign Up.",
        ),
    )

    def introduction(self) -> str:
        return "Welcome to the Voice Voting App."

    def navigation_message(self, target: str) -> str | None:
        return WELCOME_TARGETS.get(target)
