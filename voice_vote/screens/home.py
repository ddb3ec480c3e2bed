"""Home menu -- spoken navigation between the app's screens."""

from __future__ import annotations

from voice_vote.classifier import UtteranceClassifier
from voice_vote.dialogue.controller import TurnController
from voice_vote.models.step import InputKind, WizardStep
from voice_vote.wizard.runner import VoiceWizard

MENU_PROMPT = (
    "You are on the Home Menu. You can say: Start Voting, View contestants, "
    "View Results, Application page, Give feedback, Logout, or Replay instructions."
)

HOME_TARGETS = ("voting", "contestants", "results", "apply", "feedback", "logout")
"""Navigation targets the menu can return."""


class HomeMenu(VoiceWizard):
    """Single navigation step; the result's ``target`` is the chosen screen."""

    screen = "home"
    steps = (
        WizardStep(
            "menu",
            MENU_PROMPT,
            kind=InputKind.NAVIGATION,
            choices="home_menu",
            reprompt="Please say a command like Start Voting or Logout.",
        ),
    )

    def __init__(
        self,
        controller: TurnController,
        classifier: UtteranceClassifier,
        user_name: str | None = None,
    ) -> None:
        super().__init__(controller, classifier)
        self.user_name = user_name

    def introduction(self) -> str:
        return f"Welcome, {self.user_name}." if self.user_name else "Welcome."
