from __future__ import annotations

import logging
from typing import Any, Mapping

from bookflow.application.exceptions import BusinessNotFoundError
from bookflow.application.ports.business_data import BusinessDataPort
from bookflow.application.utils.business_parser import parse_business_profile
from bookflow.domain.entities.business_profile import BusinessProfile

_WEEKDAY_HOURS = {
    "isOpen": True,
    "open": "09:00",
    "close": "18:00",
    "breaks": [{"startTime": "12:00", "endTime": "13:00", "description": "Lunch"}],
}

DEMO_BUSINESS: dict[str, Any] = {
    "id": "demo-salon",
    "slug": "demo-salon",
    "name": "Demo Salon",
    "timezone": "Europe/Istanbul",
    "businessHours": {
        "monday": _WEEKDAY_HOURS,
        "tuesday": _WEEKDAY_HOURS,
        "wednesday": _WEEKDAY_HOURS,
        "thursday": _WEEKDAY_HOURS,
        "friday": _WEEKDAY_HOURS,
        "saturday": {"isOpen": True, "open": "10:00", "close": "14:00", "breaks": []},
        "sunday": {"isOpen": False},
    },
    "closures": [],
    "reservationSettings": {"maxAdvanceBookingDays": 14, "minNotificationHours": 2},
    "services": [
        {"id": "haircut", "name": "Haircut", "duration": 30, "price": 400, "currency": "TRY", "isActive": True},
        {
            "id": "coloring",
            "name": "Hair Coloring",
            "duration": 90,
            "price": 1500,
            "currency": "TRY",
            "isActive": True,
            "staffIds": ["staff-ayse"],
        },
        {"id": "beard", "name": "Beard Trim", "duration": 15, "price": 200, "currency": "TRY", "isActive": False},
    ],
    "staff": [
        {"id": "staff-ayse", "name": "Ayse", "isActive": True},
        {"id": "staff-mehmet", "name": "Mehmet", "isActive": True},
    ],
}


class MockBusinessData(BusinessDataPort):
    def __init__(self, businesses: Mapping[str, Mapping[str, Any]] | None = None) -> None:
        raw = businesses if businesses is not None else {DEMO_BUSINESS["id"]: DEMO_BUSINESS}
        self._documents = dict(raw)
        self._logger = logging.getLogger(__name__)

    def get_business(self, business_id: str) -> BusinessProfile:
        document = self._documents.get(business_id)
        if document is None:
            # Slugs resolve as well as ids
            document = next((d for d in self._documents.values() if d.get("slug") == business_id), None)
        if document is None:
            self._logger.info("Mock business not found", extra={"business_id": business_id})
            raise BusinessNotFoundError(f"Business '{business_id}' not found")
        return parse_business_profile(document)
