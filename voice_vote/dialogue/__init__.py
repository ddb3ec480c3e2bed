"""Dialogue turn control -- speak, listen, classify, retry."""

from __future__ import annotations

from voice_vote.dialogue.controller import DEFAULT_MAX_RETRIES, TurnController
from voice_vote.dialogue.focus import AudioFocus

__all__ = ["AudioFocus", "DEFAULT_MAX_RETRIES", "TurnController"]
