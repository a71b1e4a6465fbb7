from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta

from bookflow.application.ports.appointments import AppointmentsPort
from bookflow.application.utils.date_time import parse_calendar_date, parse_clock_time
from bookflow.domain.entities.appointment import AppointmentRequest, BookedInterval


class MockAppointments(AppointmentsPort):
    def __init__(self, default_duration_minutes: int = 60) -> None:
        self._appointments: dict[str, tuple[str, BookedInterval]] = {}
        self._default_duration_minutes = default_duration_minutes
        self._logger = logging.getLogger(__name__)

    def add(self, business_id: str, interval: BookedInterval) -> str:
        appointment_id = f"mock_appointment_{len(self._appointments) + 1}"
        self._appointments[appointment_id] = (business_id, interval)
        return appointment_id

    def list_booked_intervals(
        self,
        business_id: str,
        day: date,
        staff_id: str | None = None,
    ) -> list[BookedInterval]:
        intervals: list[BookedInterval] = []
        for owner, interval in self._appointments.values():
            if owner != business_id or interval.date != day:
                continue
            if staff_id and interval.staff_id and interval.staff_id != staff_id:
                continue
            intervals.append(interval)
        return sorted(intervals, key=lambda i: i.start)

    def submit(self, request: AppointmentRequest) -> str:
        day = parse_calendar_date(request.date)
        start = parse_clock_time(request.start_time)
        if day is None or start is None:
            raise ValueError("Appointment request must be validated before submission")

        end_dt = datetime.combine(day, start) + timedelta(minutes=self._default_duration_minutes)
        end = end_dt.time() if end_dt.date() == day else time(23, 59)
        appointment_id = self.add(
            request.business_id,
            BookedInterval(date=day, start=start, end=end, staff_id=request.staff_id),
        )
        self._logger.info(
            "Mock appointment created",
            extra={"business_id": request.business_id, "date": request.date, "service_id": request.service_id},
        )
        return appointment_id
