"""WizardStep dataclass -- one node of a voice wizard."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class InputKind(str, Enum):
    """What kind of answer a step expects from the user."""

    FREE_TEXT = "free_text"
    ENUMERATED_CHOICE = "enumerated_choice"
    CONFIRMATION = "confirmation"
    EXTERNAL_ACTION = "external_action"
    NAVIGATION = "navigation"
    MANUAL = "manual"


class ValueFormat(str, Enum):
    """Deterministic text transform applied to free-text answers."""

    TEXT = "text"
    NUMBER = "number"
    EMAIL = "email"
    IDENTIFIER = "identifier"


@dataclass(frozen=True)
class WizardStep:
    """One step of a linear voice wizard.

    Attributes
    ----------
    step_id:
        Semantic identifier (e.g. ``"collect-name"``, ``"confirm"``).
    prompt:
        Text synthesized when the step is entered.
    kind:
        Expected input kind.
    choices:
        Name of the vocabulary used by ``ENUMERATED_CHOICE`` and
        ``NAVIGATION`` steps.
    value_format:
        Transform applied to ``FREE_TEXT`` answers.
    confirm:
        Whether the captured value is echoed back for a yes/no
        confirmation before it is committed.
    required:
        For ``EXTERNAL_ACTION`` steps, whether the external side effect
        must be present before the wizard may advance.
    acknowledgement:
        Spoken after the value is committed.  ``{value}`` is replaced
        with the committed value.
    reprompt:
        Spoken instead of the generic clarification when the answer is
        not understood.
    """

    step_id: str
    prompt: str
    kind: InputKind = InputKind.FREE_TEXT
    choices: str | None = None
    value_format: ValueFormat = ValueFormat.TEXT
    confirm: bool = False
    required: bool = True
    acknowledgement: str | None = None
    reprompt: str | None = None

    @property
    def listens(self) -> bool:
        """Whether entering this step opens a listening turn."""
        return self.kind is not InputKind.MANUAL
