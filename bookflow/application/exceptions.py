from __future__ import annotations

from bookflow.domain.entities.step import Step


class NavigationError(RuntimeError):
    """Raised when a step is requested before its prerequisites are selected."""

    def __init__(self, step: Step, redirect_to: Step, redirect_path: str | None = None) -> None:
        super().__init__(f"Step '{step.value}' is not accessible; redirect to '{redirect_to.value}'")
        self.step = step
        self.redirect_to = redirect_to
        self.redirect_path = redirect_path


class ScheduleDataError(ValueError):
    """Raised when business hours or closures cannot be evaluated."""
    pass


class BusinessDataUnavailableError(RuntimeError):
    """Raised when the business data provider fails (network errors, bad responses)."""
    pass


class BusinessNotFoundError(BusinessDataUnavailableError):
    """Raised when no business exists for the identifier."""
    pass


class SubmissionError(RuntimeError):
    """Raised when the appointment backend refuses or fails a submission."""
    pass
