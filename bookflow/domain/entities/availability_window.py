from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta


@dataclass(frozen=True)
class ReservationSettings:
    max_advance_booking_days: int = 30
    min_notification_hours: int = 0
    max_daily_appointments: int | None = None

    MAX_ADVANCE_BOOKING_DAYS_RANGE = (1, 365)
    MIN_NOTIFICATION_HOURS_RANGE = (0, 168)

    def __post_init__(self) -> None:
        low, high = self.MAX_ADVANCE_BOOKING_DAYS_RANGE
        if not low <= self.max_advance_booking_days <= high:
            raise ValueError(f"max_advance_booking_days must be within {low}..{high}")
        low, high = self.MIN_NOTIFICATION_HOURS_RANGE
        if not low <= self.min_notification_hours <= high:
            raise ValueError(f"min_notification_hours must be within {low}..{high}")


@dataclass(frozen=True)
class AvailabilityWindow:
    """Inclusive booking horizon."""

    min_date: date
    max_date: date

    def __post_init__(self) -> None:
        if self.min_date > self.max_date:
            raise ValueError("min_date must not be after max_date")

    def contains(self, day: date) -> bool:
        return self.min_date <= day <= self.max_date

    @classmethod
    def from_settings(cls, now: datetime, settings: ReservationSettings) -> AvailabilityWindow:
        """Today (plus lead time) through today + max advance days."""
        today = now.date()
        earliest = (now + timedelta(hours=settings.min_notification_hours)).date()
        latest = today + timedelta(days=settings.max_advance_booking_days)
        return cls(min_date=min(earliest, latest), max_date=latest)
