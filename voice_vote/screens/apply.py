"""Candidate application -- a ten-step voice form with two uploads."""

from __future__ import annotations

import logging

from voice_vote.classifier import UtteranceClassifier
from voice_vote.dialogue.controller import TurnController
from voice_vote.errors import MissingFieldsError
from voice_vote.models.records import Application, Attachment
from voice_vote.models.step import InputKind, ValueFormat, WizardStep
from voice_vote.services.applications import ApplicationService
from voice_vote.wizard.runner import VoiceWizard, WizardOutcome, WizardResult

logger = logging.getLogger(__name__)

PHOTO_STEP = "upload-photo"
DOCUMENT_STEP = "upload-document"


class ApplicationWizard(VoiceWizard):
    """Collects an application and submits it for admin review.

    Photo and eligibility document are picked on screen; the host calls
    :meth:`attach_photo` / :meth:`attach_document` and the user says
    "Next" to continue.
    """

    screen = "apply"
    steps = (
        WizardStep(
            "collect-name",
            "Application started. Step 1. Please say your Full Name.",
            acknowledgement="Saved name {value}.",
        ),
        WizardStep(
            "collect-position",
            "Step 2. Say the position you are running for.",
            kind=InputKind.ENUMERATED_CHOICE,
            choices="positions",
            acknowledgement="Selected {value}.",
            reprompt="Position not recognized. Please say it again.",
        ),
        WizardStep(
            "collect-admission-number",
            "Step 3. Say your Admission Number.",
            value_format=ValueFormat.IDENTIFIER,
            acknowledgement="Admission number saved.",
        ),
        WizardStep(
            "collect-age",
            "Step 4. Say your Age.",
            value_format=ValueFormat.NUMBER,
            acknowledgement="Age {value} saved.",
            reprompt="Please say a number.",
        ),
        WizardStep(
            "collect-course",
            "Step 5. Say your Course or Department.",
            acknowledgement="Course saved.",
        ),
        WizardStep(
            "collect-email",
            "Step 6. Say your Email Address.",
            value_format=ValueFormat.EMAIL,
            acknowledgement="Email saved.",
        ),
        WizardStep(
            PHOTO_STEP,
            "Step 7. Photo Upload. Tap the camera icon to select a photo. Say Next when done.",
            kind=InputKind.EXTERNAL_ACTION,
            reprompt="Tap the camera icon, then say Next.",
        ),
        WizardStep(
            DOCUMENT_STEP,
            "Step 8. Document Upload. Tap the button to select your eligibility PDF. "
            "Say Next when done.",
            kind=InputKind.EXTERNAL_ACTION,
            reprompt="Select the document, then say Next.",
        ),
        WizardStep(
            "collect-manifesto",
            "Step 9. Say a brief manifesto about yourself.",
            acknowledgement="Manifesto saved.",
        ),
        WizardStep(
            "submit",
            "Application complete. Say Submit to finish, or Cancel to exit.",
            kind=InputKind.CONFIRMATION,
            reprompt="Say Submit to finish.",
        ),
    )

    def __init__(
        self,
        controller: TurnController,
        classifier: UtteranceClassifier,
        applications: ApplicationService,
    ) -> None:
        super().__init__(controller, classifier)
        self.applications = applications
        self.photo: Attachment | None = None
        self.document: Attachment | None = None

    async def attach_photo(self, photo: Attachment) -> None:
        self.photo = photo
        await self.controller.speak("Photo selected. Say Next.")

    async def attach_document(self, document: Attachment) -> None:
        self.document = document
        await self.controller.speak("Document selected. Say Next.")

    def external_ready(self, step: WizardStep) -> bool:
        if step.step_id == PHOTO_STEP:
            return self.photo is not None
        if step.step_id == DOCUMENT_STEP:
            return self.document is not None
        return True

    def application(self, data: dict[str, str] | None = None) -> Application:
        data = self.machine.data if data is None else data
        return Application(
            name=data.get("collect-name", ""),
            position=data.get("collect-position", ""),
            admission_number=data.get("collect-admission-number", ""),
            age=data.get("collect-age", ""),
            course=data.get("collect-course", ""),
            email=data.get("collect-email", ""),
            brief_info=data.get("collect-manifesto", ""),
        )

    def failure_message(self, exc: Exception) -> str:
        if isinstance(exc, MissingFieldsError):
            return "Missing details. Please check the form."
        return "Error submitting. Please try again."

    async def complete(self, data: dict[str, str]) -> WizardResult:
        await self.controller.speak("Submitting application...")
        await self.applications.submit(self.application(data), self.photo, self.document)
        await self.controller.speak("Application submitted successfully. Returning home.")
        return WizardResult(WizardOutcome.COMPLETED, target="home", data=data)
