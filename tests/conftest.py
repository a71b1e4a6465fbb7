from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo

import pytest

from bookflow.application.use_cases.availability import AvailabilityResolver
from bookflow.application.utils.business_parser import parse_business_schedule
from bookflow.domain.entities.availability_window import AvailabilityWindow
from bookflow.domain.entities.business_schedule import BusinessSchedule

ISTANBUL = ZoneInfo("Europe/Istanbul")

WEEKDAY = {
    "isOpen": True,
    "open": "09:00",
    "close": "18:00",
    "breaks": [{"startTime": "12:00", "endTime": "13:00", "description": "Lunch"}],
}

WEEKLY_HOURS = {
    "monday": WEEKDAY,
    "tuesday": WEEKDAY,
    "wednesday": WEEKDAY,
    "thursday": WEEKDAY,
    "friday": WEEKDAY,
    "saturday": {"isOpen": False},
    "sunday": {"isOpen": False},
}


@pytest.fixture
def tz() -> ZoneInfo:
    return ISTANBUL


@pytest.fixture
def schedule() -> BusinessSchedule:
    """Mon-Fri 09:00-18:00 with a 12:00-13:00 break; weekends closed."""
    return parse_business_schedule(WEEKLY_HOURS, ["2024-06-12"])


@pytest.fixture
def window() -> AvailabilityWindow:
    return AvailabilityWindow(min_date=date(2024, 6, 3), max_date=date(2024, 6, 16))


@pytest.fixture
def resolver() -> AvailabilityResolver:
    return AvailabilityResolver()


@pytest.fixture
def fixed_now() -> datetime:
    # Saturday before the booking window opens
    return datetime(2024, 6, 1, 10, 0, tzinfo=ISTANBUL)
