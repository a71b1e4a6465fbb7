from __future__ import annotations

from dataclasses import dataclass, field

from bookflow.domain.entities.availability_window import ReservationSettings
from bookflow.domain.entities.business_schedule import BusinessSchedule
from bookflow.domain.entities.service_catalog import BusinessCatalog


@dataclass(frozen=True)
class BusinessProfile:
    """Everything the booking flow needs about one business, fetched once."""

    business_id: str
    slug: str
    name: str
    schedule: BusinessSchedule
    catalog: BusinessCatalog = field(default_factory=BusinessCatalog)
    reservation_settings: ReservationSettings = field(default_factory=ReservationSettings)
