from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import Any, Mapping
from zoneinfo import ZoneInfo

import httpx

from bookflow.application.exceptions import BusinessDataUnavailableError, SubmissionError
from bookflow.application.ports.appointments import AppointmentsPort
from bookflow.application.utils.date_time import parse_clock_time
from bookflow.core.config import settings
from bookflow.domain.entities.appointment import AppointmentRequest, BookedInterval

CANCELED_STATUSES = {"CANCELED", "CANCELLED"}
DEFAULT_APPOINTMENT_MINUTES = 60


def booked_interval_from_document(
    document: Mapping[str, Any],
    day: date,
    timezone: ZoneInfo,
) -> BookedInterval | None:
    """
    Convert an appointment document to the interval it occupies on `day`.
    Start/end may be HH:MM or ISO datetimes; a missing end uses the duration.
    """
    start = _time_on_day(document.get("startTime"), timezone)
    if start is None:
        return None

    end = _time_on_day(document.get("endTime"), timezone)
    if end is None or end <= start:
        duration = int(document.get("duration") or DEFAULT_APPOINTMENT_MINUTES)
        end_dt = datetime.combine(day, start) + timedelta(minutes=duration)
        # Clamp at the end of the day
        end = end_dt.time() if end_dt.date() == day else time(23, 59)

    staff_id = document.get("staffId")
    return BookedInterval(date=day, start=start, end=end, staff_id=str(staff_id) if staff_id else None)


def _time_on_day(value: Any, timezone: ZoneInfo) -> time | None:
    if not value:
        return None
    text = str(value)
    if "T" in text:
        try:
            moment = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return None
        if moment.tzinfo is not None:
            moment = moment.astimezone(timezone)
        return time(moment.hour, moment.minute)
    return parse_clock_time(text)


class HttpAppointments(AppointmentsPort):
    def __init__(
        self,
        base_url: str | None = None,
        api_token: str | None = None,
        timezone: ZoneInfo | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._base_url = (base_url or settings.BUSINESS_API_BASE_URL or "").rstrip("/")
        self._api_token = api_token or settings.BUSINESS_API_TOKEN
        self._timezone = timezone or ZoneInfo(settings.BUSINESS_TIMEZONE)
        self._client = client or httpx.Client(timeout=settings.BUSINESS_API_TIMEOUT_SECONDS)
        self._logger = logging.getLogger(__name__)

        if not self._base_url:
            raise ValueError("BUSINESS_API_BASE_URL is required for the appointments API client")

    def list_booked_intervals(
        self,
        business_id: str,
        day: date,
        staff_id: str | None = None,
    ) -> list[BookedInterval]:
        url = f"{self._base_url}/appointments"
        params = {"businessId": business_id, "startDate": day.isoformat(), "endDate": day.isoformat()}
        try:
            response = self._client.get(url, params=params, headers=self._headers())
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            self._logger.error(
                "Error fetching appointments",
                extra={"business_id": business_id, "date": day.isoformat(), "error": str(e)},
            )
            raise BusinessDataUnavailableError("Existing appointments unavailable") from e

        documents = body.get("data", []) if isinstance(body, dict) else body
        if isinstance(documents, dict):
            documents = [documents]

        intervals: list[BookedInterval] = []
        for document in documents or []:
            if str(document.get("status", "")).upper() in CANCELED_STATUSES:
                continue
            if staff_id and document.get("staffId") and document.get("staffId") != staff_id:
                continue
            interval = booked_interval_from_document(document, day, self._timezone)
            if interval is not None:
                intervals.append(interval)
        return intervals

    def submit(self, request: AppointmentRequest) -> str:
        url = f"{self._base_url}/appointments"
        try:
            response = self._client.post(url, json=request.to_payload(), headers=self._headers())
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            self._logger.error(
                "Error submitting appointment",
                extra={"business_id": request.business_id, "error": str(e)},
            )
            raise SubmissionError("Appointment could not be created") from e

        document = body.get("data", body) if isinstance(body, dict) else {}
        appointment_id = document.get("id") if isinstance(document, dict) else None
        if not appointment_id:
            raise SubmissionError("No appointment id returned from the backend")

        self._logger.info("Appointment created", extra={"business_id": request.business_id})
        return str(appointment_id)

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._api_token:
            headers["Authorization"] = f"Bearer {self._api_token}"
        return headers
