from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, time


@dataclass(frozen=True)
class BookingSelection:
    """The whole wizard state. Rebuilt from the address on every request."""

    service_id: str | None = None
    staff_id: str | None = None  # optional; backend assigns staff when absent
    date: date | None = None
    time: time | None = None

    def with_service(self, service_id: str) -> BookingSelection:
        if service_id == self.service_id:
            return self
        return BookingSelection(service_id=service_id)

    def with_staff(self, staff_id: str | None) -> BookingSelection:
        if staff_id == self.staff_id:
            return self
        return replace(self, staff_id=staff_id, date=None, time=None)

    def with_date(self, day: date) -> BookingSelection:
        if day == self.date:
            return self
        return replace(self, date=day, time=None)

    def with_time(self, start: time) -> BookingSelection:
        return replace(self, time=start)

    def cleared(self, *fields: str) -> BookingSelection:
        return replace(self, **{name: None for name in fields})
