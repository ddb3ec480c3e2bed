"""Login screen -- spoken email, typed password, biometric shortcut."""

from __future__ import annotations

import logging

from voice_vote.classifier import UtteranceClassifier
from voice_vote.classifier.matching import best_match
from voice_vote.dialogue.controller import TurnController
from voice_vote.errors import MissingFieldsError
from voice_vote.models.intent import Intent, IntentKind
from voice_vote.models.step import InputKind, ValueFormat, WizardStep
from voice_vote.services.accounts import AccountService
from voice_vote.wizard.runner import VoiceWizard

logger = logging.getLogger(__name__)

EMAIL_STEP = "collect-email"
PASSWORD_STEP = "type-password"
BIOMETRIC_TARGET = "biometric"


class LoginWizard(VoiceWizard):
    """Collects and confirms the email by voice; the password is typed.

    ``run()`` ends with ``MANUAL_INPUT`` on the password step, or
    ``NAVIGATED`` to ``"biometric"`` when the user asks for fingerprint
    login.  The host then calls :meth:`submit` with the typed password.
    """

    screen = "login"
    steps = (
        WizardStep(
            EMAIL_STEP,
            "Login Page. Please say your Email, or say Fingerprint to log in securely.",
            value_format=ValueFormat.EMAIL,
            confirm=True,
        ),
        WizardStep(
            PASSWORD_STEP,
            "Step 2. Please type your password securely.",
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

    def confirm_prompt(self, step: WizardStep, value: str) -> str:
        return f"Email set to {value}. Is this correct? Say Yes or No."

    def interpret(self, step: WizardStep, intent: Intent) -> Intent:
        if step.step_id != EMAIL_STEP or intent.kind is not IntentKind.PROVIDE_VALUE:
            return intent
        value = intent.value or ""
        commands = self.classifier.lexicon.vocabulary("login_commands")
        if "@" not in value and best_match(value, commands) is not None:
            return Intent.navigate(BIOMETRIC_TARGET)
        return intent

    @property
    def email(self) -> str | None:
        return self.machine.data.get(EMAIL_STEP)

    async def submit(self, password: str, email: str | None = None) -> str:
        """Sign in and return the next screen: ``"admin"`` or ``"home"``.

        Raises
        ------
        MissingFieldsError
            If the email or password is empty.
        voice_vote.errors.AuthError
            If the credentials are rejected.
        """
        email = (email or self.email or "").strip()
        missing = [name for name, value in (("email", email), ("password", password)) if not value]
        if missing:
            raise MissingFieldsError(missing)
        await self.accounts.sign_in(email, password)
        return "admin" if self.accounts.is_admin(email) else "home"
