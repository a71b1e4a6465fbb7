from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from bookflow.domain.entities.appointment import AppointmentRequest, BookedInterval


class AppointmentsPort(ABC):
    @abstractmethod
    def list_booked_intervals(
        self,
        business_id: str,
        day: date,
        staff_id: str | None = None,
    ) -> list[BookedInterval]:
        """Non-canceled appointments on a date. Filtered by staff when given."""
        raise NotImplementedError

    @abstractmethod
    def submit(self, request: AppointmentRequest) -> str:
        """Create the appointment. Returns appointment_id. Raises SubmissionError."""
        raise NotImplementedError
