"""Incident report -- category, description, optional audio proof."""

from __future__ import annotations

from voice_vote.classifier import UtteranceClassifier
from voice_vote.dialogue.controller import TurnController
from voice_vote.models.records import Attachment, IncidentReport
from voice_vote.models.step import InputKind, WizardStep
from voice_vote.services.reports import ReportService
from voice_vote.wizard.runner import VoiceWizard, WizardOutcome, WizardResult


class ReportWizard(VoiceWizard):
    screen = "feedback"
    steps = (
        WizardStep(
            "collect-category",
            "Step 1. What is the issue? You can say Bribery, Intimidation, or Technical Failure.",
            kind=InputKind.ENUMERATED_CHOICE,
            choices="report_categories",
            acknowledgement="Selected {value}.",
            reprompt="Please say one of the categories.",
        ),
        WizardStep(
            "collect-description",
            "Step 2. Please describe what happened. Speak clearly, I will type it for you.",
            acknowledgement="Description saved.",
        ),
        WizardStep(
            "record-proof",
            "Step 3. Do you want to record audio evidence? Press the red button manually "
            "to record. Or say Next to skip.",
            kind=InputKind.EXTERNAL_ACTION,
            required=False,
            reprompt="Say Next to continue to submission.",
        ),
        WizardStep(
            "submit",
            "Report ready. Say Submit to finish, or Cancel to exit.",
            kind=InputKind.CONFIRMATION,
            reprompt="Say Submit to send your report.",
        ),
    )

    def __init__(
        self,
        controller: TurnController,
        classifier: UtteranceClassifier,
        reports: ReportService,
        user_id: str | None = None,
    ) -> None:
        super().__init__(controller, classifier)
        self.reports = reports
        self.user_id = user_id
        self.proof: Attachment | None = None

    async def attach_proof(self, recording: Attachment) -> None:
        self.proof = recording
        await self.controller.speak("Audio recorded. Say Next to continue.")

    def failure_message(self, exc: Exception) -> str:
        return "There was an error submitting. Please try again."

    async def complete(self, data: dict[str, str]) -> WizardResult:
        report = IncidentReport(
            category=data["collect-category"],
            description=data.get("collect-description", ""),
            user_id=self.user_id,
        )
        await self.controller.speak("Submitting your report...")
        await self.reports.submit(report, self.proof)
        await self.controller.speak("Report submitted successfully. Going home.")
        return WizardResult(WizardOutcome.COMPLETED, target="home", data=data)
