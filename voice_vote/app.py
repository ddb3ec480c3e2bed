"""VoiceVoteApp -- composition root.

Wires the speech providers, the classifier vocabularies, the backend
services and the app-wide ``AudioFocus``, and builds the screen
wizards on top of them.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable

from voice_vote.backend import Backend, create_backend
from voice_vote.classifier import UtteranceClassifier
from voice_vote.dialogue import AudioFocus, TurnController
from voice_vote.models.session import DialogueSession
from voice_vote.screens import (
    ApplicationWizard,
    BallotWizard,
    ContestantsReader,
    HomeMenu,
    LoginWizard,
    ReportWizard,
    ResultsReader,
    SignupWizard,
    WelcomeMenu,
)
from voice_vote.services import (
    AccountService,
    ApplicationService,
    BallotService,
    ReportService,
    ResultsService,
)
from voice_vote.stt import RecognitionOptions, SpeechRecognizer, create_speech_recognizer
from voice_vote.tts import SpeechSynthesizer, create_speech_synthesizer

logger = logging.getLogger(__name__)


class VoiceVoteApp:
    """The voice layer of the voting app.

    Parameters
    ----------
    tts_provider:
        Speech synthesizer name (``"espeak"``), or an instance.
    stt_provider:
        Speech recognizer name (``"microphone"``), or an instance.
    backend:
        Backend name (``"memory"``, ``"firebase"``), or a ``Backend``.
    vocabulary_path:
        Optional YAML file replacing the packaged vocabularies.
    max_retries:
        Consecutive failed turns before a screen falls back to manual
        input.
    language:
        Recognition language.
    admin_emails:
        Emails routed to the admin screen after login.
    tts_kwargs:
        Provider-specific keyword arguments for the synthesizer.
    stt_kwargs:
        Provider-specific keyword arguments for the recognizer.
    backend_kwargs:
        Backend-specific keyword arguments (credentials, timeouts).
    """

    def __init__(
        self,
        tts_provider: str | SpeechSynthesizer = "espeak",
        stt_provider: str | SpeechRecognizer = "microphone",
        backend: str | Backend = "memory",
        vocabulary_path: str | Path | None = None,
        max_retries: int = 2,
        language: str = "en-US",
        admin_emails: list[str] | None = None,
        tts_kwargs: dict[str, Any] | None = None,
        stt_kwargs: dict[str, Any] | None = None,
        backend_kwargs: dict[str, Any] | None = None,
    ) -> None:
        self.synthesizer: SpeechSynthesizer = (
            create_speech_synthesizer(tts_provider, **(tts_kwargs or {}))
            if isinstance(tts_provider, str)
            else tts_provider
        )
        self.recognizer: SpeechRecognizer = (
            create_speech_recognizer(stt_provider, **(stt_kwargs or {}))
            if isinstance(stt_provider, str)
            else stt_provider
        )
        self.backend: Backend = (
            create_backend(backend, **(backend_kwargs or {}))
            if isinstance(backend, str)
            else backend
        )
        self.classifier = (
            UtteranceClassifier.from_yaml(vocabulary_path)
            if vocabulary_path
            else UtteranceClassifier()
        )
        self.max_retries = max_retries
        self.options = RecognitionOptions(language=language)
        self.focus = AudioFocus()

        documents = self.backend.documents
        self.accounts = AccountService(self.backend.auth, documents, admin_emails)
        self.ballot_service = BallotService(documents)
        self.applications = ApplicationService(documents, self.backend.blobs)
        self.reports = ReportService(documents, self.backend.blobs)
        self.results = ResultsService(documents)

        logger.info(
            "VoiceVoteApp initialized (tts=%s, stt=%s, backend=%s, max_retries=%d)",
            type(self.synthesizer).__name__,
            type(self.recognizer).__name__,
            type(self.backend.documents).__name__,
            max_retries,
        )

    async def open_session(
        self, screen: str, on_interim: Callable[[str], None] | None = None
    ) -> TurnController:
        """Start the dialogue session of *screen*, stopping the previous one."""
        controller = TurnController(
            DialogueSession(screen=screen),
            self.synthesizer,
            self.recognizer,
            max_retries=self.max_retries,
            options=self.options,
            keywords=self.classifier.keywords,
            on_interim=on_interim,
        )
        await self.focus.acquire(controller)
        logger.info("Opened voice session for %s", screen)
        return controller

    async def close_session(self, controller: TurnController) -> None:
        """Tear down a session when its screen loses focus."""
        await self.focus.release(controller)

    # -- screens ------------------------------------------------------------

    async def welcome(self) -> WelcomeMenu:
        return WelcomeMenu(await self.open_session(WelcomeMenu.screen), self.classifier)

    async def home(self, user_name: str | None = None) -> HomeMenu:
        return HomeMenu(await self.open_session(HomeMenu.screen), self.classifier, user_name)

    async def login(self) -> LoginWizard:
        controller = await self.open_session(LoginWizard.screen)
        return LoginWizard(controller, self.classifier, self.accounts)

    async def signup(self) -> SignupWizard:
        return SignupWizard(
            await self.open_session(SignupWizard.screen), self.classifier, self.accounts
        )

    async def apply(self) -> ApplicationWizard:
        return ApplicationWizard(
            await self.open_session(ApplicationWizard.screen), self.classifier, self.applications
        )

    async def report(self, user_id: str | None = None) -> ReportWizard:
        return ReportWizard(
            await self.open_session(ReportWizard.screen), self.classifier, self.reports, user_id
        )

    async def ballot(self, user_id: str) -> BallotWizard:
        """Load the ballot and build the voting wizard.

        Raises
        ------
        ValueError
            If there are no contestants to vote for.
        """
        positions = await self.ballot_service.load_ballot()
        controller = await self.open_session(BallotWizard.screen)
        try:
            return BallotWizard(
                controller, self.classifier, positions, self.ballot_service, user_id
            )
        except ValueError:
            await self.close_session(controller)
            raise

    async def results_reader(self, require_published: bool = False) -> ResultsReader:
        return ResultsReader(
            await self.open_session(ResultsReader.screen), self.results, require_published
        )

    async def contestants_reader(self) -> ContestantsReader:
        return ContestantsReader(
            await self.open_session(ContestantsReader.screen), self.ballot_service
        )
