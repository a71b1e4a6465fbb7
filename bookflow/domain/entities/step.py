from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

EXIT = "exit"


class Step(str, Enum):
    SERVICE = "service"
    STAFF = "staff"
    DATE = "date"
    TIME = "time"
    CONFIRM = "confirm"


STEP_ORDER: tuple[Step, ...] = (
    Step.SERVICE,
    Step.STAFF,
    Step.DATE,
    Step.TIME,
    Step.CONFIRM,
)


@dataclass(frozen=True)
class StepView:
    current_step: Step
    accessible_steps: tuple[Step, ...]
    back_target: Step | str  # Step or EXIT

    def is_step_accessible(self, step: Step) -> bool:
        return step in self.accessible_steps


@dataclass(frozen=True)
class StepOption:
    """One choice offered on a step, with the address it leads to."""

    value: str
    label: str
    path: str
    available: bool = True
    reason: str | None = None
