from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum


class DisabledReason(str, Enum):
    OUTSIDE_WINDOW = "outside-window"
    BLOCKED = "blocked"
    CLOSED = "closed"


@dataclass(frozen=True)
class CalendarDay:
    date: date
    selectable: bool
    is_today: bool = False
    reason: DisabledReason | None = None


@dataclass(frozen=True)
class MonthNavigation:
    can_go_previous: bool
    can_go_next: bool
