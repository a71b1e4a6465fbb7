from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Iterable
from zoneinfo import ZoneInfo

from bookflow.application.use_cases.availability import AvailabilityResolver
from bookflow.application.utils.date_time import parse_calendar_date, parse_clock_time
from bookflow.domain.entities.appointment import (
    AppointmentRequest,
    BookedInterval,
    SlotViolation,
    ValidationResult,
)
from bookflow.domain.entities.availability_window import AvailabilityWindow
from bookflow.domain.entities.business_schedule import BusinessSchedule

Clock = Callable[[], datetime]

SLOT_VIOLATION_MESSAGES = {
    SlotViolation.CLOSED_DAY: "The business is closed on this day",
    SlotViolation.CROSSES_MIDNIGHT: "The appointment would run past midnight",
    SlotViolation.OUTSIDE_HOURS: "The appointment is outside business hours",
    SlotViolation.IN_BREAK: "The appointment overlaps a break",
    SlotViolation.DATE_BLOCKED: "The business is closed on this date",
    SlotViolation.APPOINTMENT_CONFLICT: "This time is already booked",
    SlotViolation.TOO_SOON: "This time is too soon to book; please choose a later time",
}


class AppointmentRequestValidator:
    """
    Pre-submission checks for a complete appointment request.
    Field rules run first; cross-field rules only when every field is well formed,
    in order: not in the past, not inside the notice period, inside the booking window,
    conforming to the schedule.
    The backend remains authoritative for all limits.
    """

    def __init__(
        self,
        resolver: AvailabilityResolver,
        timezone: ZoneInfo,
        clock: Clock | None = None,
        notes_max_length: int = 500,
    ) -> None:
        self._resolver = resolver
        self._timezone = timezone
        self._clock = clock or (lambda: datetime.now(timezone))
        self._notes_max_length = notes_max_length
        self._logger = logging.getLogger(__name__)

    def validate(
        self,
        request: AppointmentRequest,
        schedule: BusinessSchedule,
        duration_minutes: int,
        booked: Iterable[BookedInterval] = (),
        not_before: datetime | None = None,
        window: AvailabilityWindow | None = None,
    ) -> ValidationResult:
        field_errors = self.validate_fields(request)
        if field_errors:
            return ValidationResult.failed(field_errors)

        day = parse_calendar_date(request.date)
        start = parse_clock_time(request.start_time)

        starts_at = datetime.combine(day, start, tzinfo=self._timezone)
        if starts_at <= self._now():
            return ValidationResult.failed({"startTime": "The appointment time cannot be in the past"})
        if not_before is not None and starts_at <= not_before:
            return ValidationResult.failed(
                {"startTime": SLOT_VIOLATION_MESSAGES[SlotViolation.TOO_SOON]},
                slot_violation=SlotViolation.TOO_SOON,
            )
        if window is not None and not window.contains(day):
            return ValidationResult.failed({"date": "The date is outside the booking window"})

        check = self._resolver.check_slot(schedule, day, start, duration_minutes, booked)
        if not check.valid:
            self._logger.info(
                "Appointment outside schedule",
                extra={"date": request.date, "reason": check.violation.value},
            )
            return ValidationResult.failed(
                {"startTime": SLOT_VIOLATION_MESSAGES[check.violation]},
                slot_violation=check.violation,
            )

        return ValidationResult.ok()

    def validate_fields(self, request: AppointmentRequest) -> dict[str, str]:
        errors: dict[str, str] = {}
        if not (request.business_id or "").strip():
            errors["businessId"] = "Business is required"
        if not (request.service_id or "").strip():
            errors["serviceId"] = "Service is required"
        if request.staff_id is not None and not request.staff_id.strip():
            errors["staffId"] = "Staff must not be empty when given"
        if parse_calendar_date(request.date) is None:
            errors["date"] = "Date must be in YYYY-MM-DD format"
        if parse_clock_time(request.start_time) is None:
            errors["startTime"] = "Start time must be in HH:MM format"
        if request.customer_notes and len(request.customer_notes) > self._notes_max_length:
            errors["customerNotes"] = f"Customer notes must be at most {self._notes_max_length} characters"
        return errors

    def _now(self) -> datetime:
        now = self._clock()
        if now.tzinfo is None:
            return now.replace(tzinfo=self._timezone)
        return now
