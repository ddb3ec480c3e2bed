"""Signup screen -- every spoken detail is confirmed before it is kept."""

from __future__ import annotations

from voice_vote.backend.base import AuthUser
from voice_vote.classifier import UtteranceClassifier
from voice_vote.dialogue.controller import TurnController
from voice_vote.errors import MissingFieldsError
from voice_vote.models.records import UserProfile
from voice_vote.models.step import InputKind, ValueFormat, WizardStep
from voice_vote.services.accounts import AccountService
from voice_vote.wizard.runner import VoiceWizard

FIELDS = {
    "collect-name": "full name",
    "collect-reg-number": "registration number",
    "collect-department": "department",
    "collect-email": "email",
}


class SignupWizard(VoiceWizard):
    screen = "signup"
    steps = (
        WizardStep("collect-name", "Welcome. Step 1. Please say your Full Name.", confirm=True),
        WizardStep(
            "collect-reg-number",
            "Step 2. Please say your Registration Number.",
            value_format=ValueFormat.IDENTIFIER,
            confirm=True,
        ),
        WizardStep("collect-department", "Step 3. Which Department are you in?", confirm=True),
        WizardStep(
            "collect-email",
            "Step 4. Please say your Email Address.",
            value_format=ValueFormat.EMAIL,
            confirm=True,
        ),
        WizardStep(
            "type-password",
            "Step 5. For security, please type your password manually.",
            kind=InputKind.MANUAL,
        ),
    )

    def __init__(
        self,
        controller: TurnController,
        classifier: UtteranceClassifier,
        accounts: AccountService,
    ) -> None:
        super().__init__(controller, classifier)
        self.accounts = accounts

    def profile(self) -> UserProfile:
        """Build the profile from the confirmed answers.

        Raises
        ------
        MissingFieldsError
            If any detail has not been collected.
        """
        data = self.machine.data
        missing = [label for step_id, label in FIELDS.items() if not data.get(step_id)]
        if missing:
            raise MissingFieldsError(missing)
        return UserProfile(
            full_name=data["collect-name"],
            email=data["collect-email"],
            reg_number=data["collect-reg-number"],
            department=data["collect-department"],
        )

    async def submit(self, password: str) -> AuthUser:
        """Create the account with the typed *password*."""
        if not password:
            raise MissingFieldsError(["password"])
        return await self.accounts.create_account(self.profile(), password)
