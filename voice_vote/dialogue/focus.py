"""AudioFocus -- the app-wide owner of the microphone and speaker."""

from __future__ import annotations

import logging

from voice_vote.dialogue.controller import TurnController

logger = logging.getLogger(__name__)


class AudioFocus:
    """Ensures only one dialogue session uses audio at a time.

    Granting focus to a new controller intentionally stops the previous
    one first, so a late event from the old screen can never reach the
    new one.
    """

    def __init__(self) -> None:
        self._current: TurnController | None = None

    @property
    def current(self) -> TurnController | None:
        return self._current

    async def acquire(self, controller: TurnController) -> None:
        previous = self._current
        if previous is controller:
            return
        if previous is not None:
            logger.info(
                "Audio focus moves from %s to %s",
                previous.session.screen,
                controller.session.screen,
            )
            await previous.stop(intentional=True)
        self._current = controller

    async def release(self, controller: TurnController) -> None:
        """Stop *controller* and drop focus if it still holds it."""
        await controller.stop(intentional=True)
        if self._current is controller:
            self._current = None
