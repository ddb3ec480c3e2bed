"""WizardStateMachine -- ordered steps plus the collected answers."""

from __future__ import annotations

import logging
from typing import Sequence

from voice_vote.models.step import WizardStep

logger = logging.getLogger(__name__)


class WizardStateMachine:
    """Linear step sequence with a data accumulator.

    Steps are visited in increasing order.  The only exceptions are
    skipping a step (which still moves forward) and staying on the same
    step to retry it.

    Parameters
    ----------
    steps:
        Ordered steps; step ids must be unique.

    Raises
    ------
    ValueError
        If *steps* is empty or contains duplicate ids.
    """

    def __init__(self, steps: Sequence[WizardStep]) -> None:
        if not steps:
            raise ValueError("A wizard needs at least one step")
        ids = [step.step_id for step in steps]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise ValueError(f"Duplicate step ids: {', '.join(duplicates)}")
        self._steps = tuple(steps)
        self._positions = {step_id: n for n, step_id in enumerate(ids)}
        self._cursor = 0
        self._finished = False
        self._data: dict[str, str] = {}
        self._history: list[int] = [1]

    @property
    def steps(self) -> tuple[WizardStep, ...]:
        return self._steps

    @property
    def index(self) -> int:
        """1-based position of the current step."""
        return self._cursor + 1

    @property
    def current_step(self) -> WizardStep:
        return self._steps[self._cursor]

    @property
    def current_step_id(self) -> str:
        return self.current_step.step_id

    @property
    def is_final(self) -> bool:
        return self._cursor == len(self._steps) - 1

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def data(self) -> dict[str, str]:
        """Copy of the committed values keyed by step id."""
        return dict(self._data)

    @property
    def history(self) -> list[int]:
        """Indices of every step entered, in order."""
        return list(self._history)

    def index_of(self, step_id: str) -> int:
        """Return the 1-based index of *step_id*.

        Raises
        ------
        KeyError
            If no step has that id.
        """
        try:
            return self._positions[step_id] + 1
        except KeyError:
            raise KeyError(f"Unknown step: {step_id!r}") from None

    def advance(self) -> WizardStep | None:
        """Move to the next step.

        Returns the new current step, or ``None`` when the final step
        was left and the wizard is finished.
        """
        if self._finished:
            raise RuntimeError("Wizard already finished")
        if self.is_final:
            self._finished = True
            logger.debug("Wizard finished after step %s", self.current_step_id)
            return None
        self._cursor += 1
        self._history.append(self.index)
        return self.current_step

    def retreat_to_step(self, step_id: str) -> WizardStep:
        """Go back to *step_id* (or stay on it) and forget later answers.

        Raises
        ------
        KeyError
            If no step has that id.
        ValueError
            If *step_id* lies ahead of the current step.
        """
        target = self.index_of(step_id) - 1
        if target > self._cursor:
            raise ValueError(
                f"Cannot retreat forward from {self.current_step_id!r} to {step_id!r}"
            )
        for step in self._steps[target:]:
            self._data.pop(step.step_id, None)
        self._cursor = target
        self._finished = False
        self._history.append(self.index)
        return self.current_step

    def record_value(self, step_id: str, value: str) -> None:
        self.index_of(step_id)
        self._data[step_id] = value

    def discard_value(self, step_id: str) -> None:
        self._data.pop(step_id, None)
