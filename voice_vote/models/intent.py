"""Intent dataclass -- output of ``classify()``."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class IntentKind(str, Enum):
    """Closed set of meanings an utterance can be classified into."""

    NAVIGATE = "navigate"
    SELECT_CHOICE = "select_choice"
    PROVIDE_VALUE = "provide_value"
    CONFIRM = "confirm"
    CANCEL = "cancel"
    REPEAT_PROMPT = "repeat_prompt"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class Intent:
    """Classified meaning of a single utterance.

    Every transcript maps to exactly one ``Intent``.  Use the
    constructor helpers rather than building instances by hand.
    """

    kind: IntentKind
    """Which variant this intent is."""

    value: str | None = None
    """Navigation target, selected choice, or captured free text."""

    confirmed: bool | None = None
    """Answer of a ``CONFIRM`` intent, ``None`` for other kinds."""

    @classmethod
    def navigate(cls, target: str) -> Intent:
        return cls(IntentKind.NAVIGATE, value=target)

    @classmethod
    def select(cls, value: str) -> Intent:
        return cls(IntentKind.SELECT_CHOICE, value=value)

    @classmethod
    def provide(cls, value: str) -> Intent:
        return cls(IntentKind.PROVIDE_VALUE, value=value)

    @classmethod
    def confirm(cls, answer: bool) -> Intent:
        return cls(IntentKind.CONFIRM, confirmed=answer)

    @classmethod
    def cancel(cls) -> Intent:
        return cls(IntentKind.CANCEL)

    @classmethod
    def repeat(cls) -> Intent:
        return cls(IntentKind.REPEAT_PROMPT)

    @classmethod
    def unrecognized(cls) -> Intent:
        return cls(IntentKind.UNRECOGNIZED)

    @property
    def recognized(self) -> bool:
        """Whether the utterance matched anything at all."""
        return self.kind is not IntentKind.UNRECOGNIZED
