"""Tests for the login and signup screens."""

from __future__ import annotations

import asyncio

import pytest

from tests.conftest import make_controller, said
from voice_vote.backend import Backend
from voice_vote.classifier import UtteranceClassifier
from voice_vote.dialogue import phrases
from voice_vote.errors import AuthError, MissingFieldsError
from voice_vote.screens import LoginWizard, SignupWizard
from voice_vote.services import AccountService
from voice_vote.wizard import WizardOutcome

SPOKEN_EMAIL = "John dot Doe at example dot com"
EMAIL = "john.doe@example.com"


def _accounts(backend: Backend, admins: list[str] | None = None) -> AccountService:
    return AccountService(backend.auth, backend.documents, admins or [])


class TestLoginWizard:
    def test_email_then_manual_password(
        self, classifier: UtteranceClassifier, backend: Backend
    ) -> None:
        controller, synth, _ = make_controller([said(SPOKEN_EMAIL), said("yes")])
        wizard = LoginWizard(controller, classifier, _accounts(backend))

        result = asyncio.run(wizard.run())

        assert result.outcome is WizardOutcome.MANUAL_INPUT
        assert result.target == "type-password"
        assert wizard.email == EMAIL
        assert synth.spoken == [
            "Login Page. Please say your Email, or say Fingerprint to log in securely.",
            f"Email set to {EMAIL}. Is this correct? Say Yes or No.",
            "Step 2. Please type your password securely.",
        ]

    def test_rejected_email_is_asked_again(
        self, classifier: UtteranceClassifier, backend: Backend
    ) -> None:
        controller, synth, _ = make_controller(
            [said("jane at example dot com"), said("no"), said(SPOKEN_EMAIL), said("yes")]
        )
        wizard = LoginWizard(controller, classifier, _accounts(backend))

        asyncio.run(wizard.run())

        assert wizard.email == EMAIL
        assert phrases.TRY_AGAIN in synth.spoken

    @pytest.mark.parametrize("command", ["Fingerprint", "use face id"])
    def test_biometric_shortcut(
        self, classifier: UtteranceClassifier, backend: Backend, command: str
    ) -> None:
        controller, _, _ = make_controller([said(command)])

        result = asyncio.run(LoginWizard(controller, classifier, _accounts(backend)).run())

        assert result.outcome is WizardOutcome.NAVIGATED
        assert result.target == "biometric"

    def test_submit_routes_student_home(
        self, classifier: UtteranceClassifier, backend: Backend
    ) -> None:
        controller, _, _ = make_controller([said(SPOKEN_EMAIL), said("yes")])
        wizard = LoginWizard(controller, classifier, _accounts(backend))

        async def scenario() -> str:
            await backend.auth.create_user(EMAIL, "secret123")
            await wizard.run()
            return await wizard.submit("secret123")

        assert asyncio.run(scenario()) == "home"

    def test_submit_routes_admin(self, classifier: UtteranceClassifier, backend: Backend) -> None:
        controller, _, _ = make_controller()
        wizard = LoginWizard(controller, classifier, _accounts(backend, admins=[EMAIL.upper()]))

        async def scenario() -> str:
            await backend.auth.create_user(EMAIL, "secret123")
            return await wizard.submit("secret123", email=EMAIL)

        assert asyncio.run(scenario()) == "admin"

    def test_submit_requires_fields(
        self, classifier: UtteranceClassifier, backend: Backend
    ) -> None:
        controller, _, _ = make_controller()
        wizard = LoginWizard(controller, classifier, _accounts(backend))

        with pytest.raises(MissingFieldsError) as exc_info:
            asyncio.run(wizard.submit(""))
        assert exc_info.value.fields == ["email", "password"]

    def test_wrong_password(self, classifier: UtteranceClassifier, backend: Backend) -> None:
        controller, _, _ = make_controller()
        wizard = LoginWizard(controller, classifier, _accounts(backend))

        async def scenario() -> str:
            await backend.auth.create_user(EMAIL, "secret123")
            return await wizard.submit("wrong-password", email=EMAIL)

        with pytest.raises(AuthError):
            asyncio.run(scenario())


class TestSignupWizard:
    SCRIPT = [
        said("Amina Yusuf"),
        said("yes"),
        said("sct 211 001"),
        said("correct"),
        said("Law"),
        said("yes"),
        said("amina at uni dot ac dot ke"),
        said("yes"),
    ]

    def test_collects_confirmed_profile(
        self, classifier: UtteranceClassifier, backend: Backend
    ) -> None:
        controller, synth, _ = make_controller(list(self.SCRIPT))
        wizard = SignupWizard(controller, classifier, _accounts(backend))

        result = asyncio.run(wizard.run())

        assert result.outcome is WizardOutcome.MANUAL_INPUT
        assert result.target == "type-password"
        profile = wizard.profile()
        assert profile.full_name == "Amina Yusuf"
        assert profile.reg_number == "SCT211001"
        assert profile.department == "Law"
        assert profile.email == "amina@uni.ac.ke"
        assert "I heard SCT211001. Is this correct? Say Yes or No." in synth.spoken
        assert synth.spoken[-1] == "Step 5. For security, please type your password manually."

    def test_submit_creates_account(
        self, classifier: UtteranceClassifier, backend: Backend
    ) -> None:
        controller, _, _ = make_controller(list(self.SCRIPT))
        wizard = SignupWizard(controller, classifier, _accounts(backend))

        async def scenario():
            await wizard.run()
            user = await wizard.submit("secret123")
            return user, await backend.documents.get("users", user.uid)

        user, profile = asyncio.run(scenario())
        assert user.email == "amina@uni.ac.ke"
        assert profile["fullName"] == "Amina Yusuf"
        assert profile["regNumber"] == "SCT211001"
        assert profile["role"] == "student"

    def test_profile_lists_missing_fields(
        self, classifier: UtteranceClassifier, backend: Backend
    ) -> None:
        controller, _, _ = make_controller()
        wizard = SignupWizard(controller, classifier, _accounts(backend))

        with pytest.raises(MissingFieldsError) as exc_info:
            wizard.profile()
        assert exc_info.value.fields == [
            "full name",
            "registration number",
            "department",
            "email",
        ]

    def test_submit_requires_password(
        self, classifier: UtteranceClassifier, backend: Backend
    ) -> None:
        controller, _, _ = make_controller()
        wizard = SignupWizard(controller, classifier, _accounts(backend))

        with pytest.raises(MissingFieldsError) as exc_info:
            asyncio.run(wizard.submit(""))
        assert exc_info.value.fields == ["password"]
