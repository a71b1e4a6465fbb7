from __future__ import annotations

import logging
from typing import Callable

from bookflow.application.exceptions import NavigationError
from bookflow.domain.entities.booking_selection import BookingSelection
from bookflow.domain.entities.step import EXIT, STEP_ORDER, Step, StepView

StepPrerequisite = Callable[[BookingSelection], bool]


def _always(selection: BookingSelection) -> bool:
    return True


def _has_service(selection: BookingSelection) -> bool:
    return bool(selection.service_id)


def _has_date(selection: BookingSelection) -> bool:
    # Staff is optional, so it is never a prerequisite
    return _has_service(selection) and selection.date is not None


def _has_time(selection: BookingSelection) -> bool:
    return _has_date(selection) and selection.time is not None


# One entry per step, in flow order. Adding a step means adding a row here.
STEP_PREREQUISITES: dict[Step, StepPrerequisite] = {
    Step.SERVICE: _always,
    Step.STAFF: _has_service,
    Step.DATE: _has_service,
    Step.TIME: _has_date,
    Step.CONFIRM: _has_time,
}


class StepSequencer:
    """
    Pure navigation rules for the booking wizard.
    Holds no state between calls: every answer is derived from the selection alone.
    """

    def __init__(
        self,
        order: tuple[Step, ...] = STEP_ORDER,
        prerequisites: dict[Step, StepPrerequisite] | None = None,
    ) -> None:
        self._order = order
        self._prerequisites = prerequisites or STEP_PREREQUISITES
        self._logger = logging.getLogger(__name__)

    def is_step_accessible(self, selection: BookingSelection, step: Step) -> bool:
        """A step is accessible when its own and every earlier step's prerequisite holds."""
        for candidate in self._order:
            if not self._prerequisites[candidate](selection):
                return False
            if candidate == step:
                return True
        return False

    def accessible_steps(self, selection: BookingSelection) -> tuple[Step, ...]:
        return tuple(step for step in self._order if self.is_step_accessible(selection, step))

    def nearest_accessible(self, selection: BookingSelection, step: Step) -> Step:
        """The latest accessible step at or before `step`; where the missing field gets chosen."""
        position = self._order.index(step)
        for candidate in reversed(self._order[: position + 1]):
            if self.is_step_accessible(selection, candidate):
                return candidate
        return self._order[0]

    def back_target(self, step: Step) -> Step | str:
        position = self._order.index(step)
        if position == 0:
            return EXIT
        return self._order[position - 1]

    def next_step(self, step: Step) -> Step | None:
        position = self._order.index(step)
        if position + 1 >= len(self._order):
            return None
        return self._order[position + 1]

    def resolve(self, selection: BookingSelection, requested: Step) -> StepView:
        """
        Compute the view for the step implied by the caller's address.
        Raises NavigationError (with the redirect step) if the step is not reachable yet.
        """
        if not self.is_step_accessible(selection, requested):
            redirect_to = self.nearest_accessible(selection, requested)
            self._logger.info(
                "Step not accessible",
                extra={"step": requested.value, "reason": f"redirect:{redirect_to.value}"},
            )
            raise NavigationError(requested, redirect_to)

        return StepView(
            current_step=requested,
            accessible_steps=self.accessible_steps(selection),
            back_target=self.back_target(requested),
        )
