"""Screen wizards of the voting app."""

from __future__ import annotations

from voice_vote.screens.apply import ApplicationWizard
from voice_vote.screens.ballot import BallotWizard
from voice_vote.screens.home import HOME_TARGETS, HomeMenu
from voice_vote.screens.login import LoginWizard
from voice_vote.screens.readers import ContestantsReader, ResultsReader
from voice_vote.screens.report import ReportWizard
from voice_vote.screens.signup import SignupWizard
from voice_vote.screens.welcome import WELCOME_TARGETS, WelcomeMenu

__all__ = [
    "ApplicationWizard",
    "BallotWizard",
    "ContestantsReader",
    "HOME_TARGETS",
    "HomeMenu",
    "LoginWizard",
    "ReportWizard",
    "ResultsReader",
    "SignupWizard",
    "WELCOME_TARGETS",
    "WelcomeMenu",
]
