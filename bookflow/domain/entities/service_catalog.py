from __future__ import annotations

from dataclasses import dataclass

DEFAULT_DURATION_MINUTES = 60


@dataclass(frozen=True)
class ServiceCatalogEntry:
    service_id: str
    display_name: str
    duration_minutes: int
    price: float | None = None
    currency: str | None = None
    is_active: bool = True
    staff_ids: tuple[str, ...] = ()  # empty means any staff member


@dataclass(frozen=True)
class StaffMember:
    staff_id: str
    display_name: str
    is_active: bool = True


@dataclass(frozen=True)
class BusinessCatalog:
    services: tuple[ServiceCatalogEntry, ...] = ()
    staff: tuple[StaffMember, ...] = ()

    def active_services(self) -> list[ServiceCatalogEntry]:
        return [s for s in self.services if s.is_active]

    def get_service(self, service_id: str) -> ServiceCatalogEntry | None:
        """Active service by id."""
        for service in self.services:
            if service.service_id == service_id and service.is_active:
                return service
        return None

    def staff_for_service(self, service_id: str) -> list[StaffMember]:
        service = self.get_service(service_id)
        if not service:
            return []
        members = [m for m in self.staff if m.is_active]
        if not service.staff_ids:
            return members
        return [m for m in members if m.staff_id in service.staff_ids]
