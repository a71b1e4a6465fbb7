from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from enum import Enum
from typing import Any, Mapping


@dataclass(frozen=True)
class AppointmentRequest:
    """Candidate appointment as submitted by the customer (raw strings)."""

    business_id: str
    service_id: str
    date: str  # YYYY-MM-DD
    start_time: str  # HH:MM
    staff_id: str | None = None
    customer_notes: str | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "businessId": self.business_id,
            "serviceId": self.service_id,
            "date": self.date,
            "startTime": self.start_time,
        }
        if self.staff_id:
            payload["staffId"] = self.staff_id
        if self.customer_notes:
            payload["customerNotes"] = self.customer_notes.strip()
        return payload


class SlotViolation(str, Enum):
    CLOSED_DAY = "closed-day"
    CROSSES_MIDNIGHT = "crosses-midnight"
    OUTSIDE_HOURS = "outside-hours"
    IN_BREAK = "in-break"
    DATE_BLOCKED = "date-blocked"
    APPOINTMENT_CONFLICT = "appointment-conflict"
    TOO_SOON = "too-soon"


@dataclass(frozen=True)
class SlotCheck:
    valid: bool
    violation: SlotViolation | None = None


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    field_errors: Mapping[str, str] = field(default_factory=dict)
    slot_violation: SlotViolation | None = None

    @classmethod
    def ok(cls) -> ValidationResult:
        return cls(valid=True)

    @classmethod
    def failed(
        cls,
        field_errors: Mapping[str, str],
        slot_violation: SlotViolation | None = None,
    ) -> ValidationResult:
        return cls(valid=False, field_errors=dict(field_errors), slot_violation=slot_violation)


@dataclass(frozen=True)
class BookedInterval:
    """An existing appointment occupying [start, end) on a date."""

    date: date
    start: time
    end: time
    staff_id: str | None = None


@dataclass(frozen=True)
class TimeSlot:
    time: time
    available: bool = True
    reason: SlotViolation | None = None
