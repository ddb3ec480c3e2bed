"""Election business actions over the backend collaborators."""

from __future__ import annotations

from voice_vote.services.accounts import AccountService
from voice_vote.services.applications import ApplicationService
from voice_vote.services.ballot import BallotService
from voice_vote.services.reports import ReportService
from voice_vote.services.results import ResultsService

__all__ = [
    "AccountService",
    "ApplicationService",
    "BallotService",
    "ReportService",
    "ResultsService",
]
