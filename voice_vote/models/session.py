"""DialogueSession -- live voice interaction state for one screen."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class TurnState(str, Enum):
    """States of the speak -> listen -> classify turn cycle."""

    IDLE = "idle"
    SPEAKING = "speaking"
    LISTENING = "listening"
    PROCESSING = "processing"
    MANUAL_FALLBACK = "manual_fallback"
    STOPPED = "stopped"


TERMINAL_STATES = frozenset({TurnState.MANUAL_FALLBACK, TurnState.STOPPED})


@dataclass
class DialogueSession:
    """The voice interaction of one visible screen.

    Created when a screen gains focus and stopped when it loses focus.
    Nothing is persisted across sessions.
    """

    screen: str
    current_step_id: str = "idle"
    is_listening: bool = False
    is_speaking: bool = False
    pending_confirmation_value: str | None = None
    retry_count: int = 0
    state: TurnState = TurnState.IDLE
    stop_requested: bool = False
    """Set by an intentional stop; suppresses the silence-retry path."""
    active: bool = True
    trace: list[TurnState] = field(default_factory=list)
    """Every state entered, in order."""

    def enter(self, state: TurnState) -> None:
        """Record a state transition."""
        self.state = state
        self.trace.append(state)

    @property
    def terminated(self) -> bool:
        return self.state in TERMINAL_STATES or self.stop_requested

    def reset_turn(self) -> None:
        self.retry_count = 0
        self.pending_confirmation_value = None
