from __future__ import annotations

from abc import ABC, abstractmethod

from bookflow.domain.entities.business_profile import BusinessProfile


class BusinessDataPort(ABC):
    @abstractmethod
    def get_business(self, business_id: str) -> BusinessProfile:
        """
        Fetch hours, closures, catalog and reservation settings of a business.
        Raises BusinessNotFoundError / BusinessDataUnavailableError.
        """
        raise NotImplementedError
