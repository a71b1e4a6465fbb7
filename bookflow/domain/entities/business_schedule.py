from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from enum import Enum
from typing import Mapping


class Weekday(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @classmethod
    def of(cls, day: date) -> Weekday:
        return list(cls)[day.weekday()]


@dataclass(frozen=True)
class BreakWindow:
    start: time
    end: time
    description: str | None = None


@dataclass(frozen=True)
class DayHours:
    is_open: bool = False
    open: time | None = None
    close: time | None = None
    breaks: tuple[BreakWindow, ...] = ()


@dataclass(frozen=True)
class BusinessSchedule:
    """Weekly hours and closures of one business. Read-only snapshot."""

    weekly_hours: Mapping[Weekday, DayHours] = field(default_factory=dict)
    blocked_dates: frozenset[date] = frozenset()
    timezone: str | None = None

    def hours_for(self, day: date) -> DayHours:
        # No entry for a weekday means closed
        return self.weekly_hours.get(Weekday.of(day), DayHours())

    def is_open_on(self, day: date) -> bool:
        return self.hours_for(day).is_open

    def is_blocked(self, day: date) -> bool:
        return day in self.blocked_dates
