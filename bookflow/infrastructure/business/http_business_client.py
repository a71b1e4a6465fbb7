from __future__ import annotations

import logging

import httpx

from bookflow.application.exceptions import BusinessDataUnavailableError, BusinessNotFoundError
from bookflow.application.ports.business_data import BusinessDataPort
from bookflow.application.utils.business_parser import parse_business_profile
from bookflow.core.config import settings
from bookflow.domain.entities.business_profile import BusinessProfile


class HttpBusinessData(BusinessDataPort):
    def __init__(
        self,
        base_url: str | None = None,
        api_token: str | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._base_url = (base_url or settings.BUSINESS_API_BASE_URL or "").rstrip("/")
        self._api_token = api_token or settings.BUSINESS_API_TOKEN
        self._client = client or httpx.Client(timeout=settings.BUSINESS_API_TIMEOUT_SECONDS)
        self._logger = logging.getLogger(__name__)

        if not self._base_url:
            raise ValueError("BUSINESS_API_BASE_URL is required for the business API client")

    def get_business(self, business_id: str) -> BusinessProfile:
        url = f"{self._base_url}/businesses/{business_id}"
        try:
            response = self._client.get(url, headers=self._headers())
            if response.status_code == 404:
                raise BusinessNotFoundError(f"Business '{business_id}' not found")
            response.raise_for_status()
            body = response.json()
        except BusinessNotFoundError:
            raise
        except (httpx.HTTPError, ValueError) as e:
            self._logger.error(
                "Error fetching business data",
                extra={"business_id": business_id, "error": str(e)},
            )
            raise BusinessDataUnavailableError(f"Business data unavailable for '{business_id}'") from e

        # Both bare documents and {"success": true, "data": {...}} envelopes are served
        document = body.get("data") if isinstance(body, dict) and "data" in body else body
        if not isinstance(document, dict):
            raise BusinessDataUnavailableError(f"Unexpected business document for '{business_id}'")
        return parse_business_profile(document)

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._api_token:
            headers["Authorization"] = f"Bearer {self._api_token}"
        return headers
