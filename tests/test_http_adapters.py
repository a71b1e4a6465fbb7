"""
Tests for the business and appointments API clients using httpx.MockTransport.
"""

from __future__ import annotations

from datetime import date, time
from zoneinfo import ZoneInfo

import httpx
import pytest

from bookflow.application.exceptions import (
    BusinessDataUnavailableError,
    BusinessNotFoundError,
    SubmissionError,
)
from bookflow.core.config import settings
from bookflow.domain.entities.appointment import AppointmentRequest
from bookflow.infrastructure.appointments.http_appointments_client import (
    HttpAppointments,
    booked_interval_from_document,
)
from bookflow.infrastructure.business.http_business_client import HttpBusinessData
from bookflow.infrastructure.business.mock_business_data import DEMO_BUSINESS

BASE_URL = "https://api.example.test"
ISTANBUL = ZoneInfo("Europe/Istanbul")


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_business_document_in_envelope_is_parsed():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/businesses/demo-salon"
        assert request.headers["Authorization"] == "Bearer secret"
        return httpx.Response(200, json={"success": True, "data": DEMO_BUSINESS})

    adapter = HttpBusinessData(base_url=BASE_URL, api_token="secret", client=_client(handler))
    profile = adapter.get_business("demo-salon")

    assert profile.slug == "demo-salon"
    assert profile.reservation_settings.min_notification_hours == 2


def test_business_not_found_and_outage():
    not_found = HttpBusinessData(base_url=BASE_URL, client=_client(lambda r: httpx.Response(404)))
    with pytest.raises(BusinessNotFoundError):
        not_found.get_business("missing")

    down = HttpBusinessData(base_url=BASE_URL, client=_client(lambda r: httpx.Response(503)))
    with pytest.raises(BusinessDataUnavailableError):
        down.get_business("demo-salon")

    garbled = HttpBusinessData(base_url=BASE_URL, client=_client(lambda r: httpx.Response(200, text="<html>")))
    with pytest.raises(BusinessDataUnavailableError):
        garbled.get_business("demo-salon")


def test_booked_intervals_skip_canceled_and_other_staff():
    documents = [
        {"startTime": "09:00", "endTime": "09:30", "staffId": "st1", "status": "CONFIRMED"},
        {"startTime": "10:00", "endTime": "11:00", "staffId": "st1", "status": "CANCELED"},
        {"startTime": "11:00", "endTime": "12:00", "staffId": "st2"},
        {"startTime": "13:00", "duration": 45},
    ]

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["businessId"] == "biz1"
        assert request.url.params["startDate"] == "2024-06-03"
        return httpx.Response(200, json={"data": documents})

    adapter = HttpAppointments(base_url=BASE_URL, timezone=ISTANBUL, client=_client(handler))
    intervals = adapter.list_booked_intervals("biz1", date(2024, 6, 3), staff_id="st1")

    assert [(i.start, i.end) for i in intervals] == [(time(9, 0), time(9, 30)), (time(13, 0), time(13, 45))]


def test_booked_interval_from_iso_datetimes():
    interval = booked_interval_from_document(
        {"startTime": "2024-06-03T07:00:00Z", "endTime": "2024-06-03T08:30:00Z"},
        date(2024, 6, 3),
        ISTANBUL,
    )
    assert (interval.start, interval.end) == (time(10, 0), time(11, 30))

    late = booked_interval_from_document({"startTime": "23:30", "duration": 90}, date(2024, 6, 3), ISTANBUL)
    assert late.end == time(23, 59)
    assert booked_interval_from_document({"endTime": "10:00"}, date(2024, 6, 3), ISTANBUL) is None


def test_appointments_outage_raises_data_unavailable():
    adapter = HttpAppointments(base_url=BASE_URL, timezone=ISTANBUL, client=_client(lambda r: httpx.Response(500)))
    with pytest.raises(BusinessDataUnavailableError):
        adapter.list_booked_intervals("biz1", date(2024, 6, 3))


def test_submit_posts_camel_case_payload():
    request = AppointmentRequest(
        business_id="biz1",
        service_id="svc1",
        date="2024-06-03",
        start_time="10:00",
        staff_id="st1",
    )

    def handler(r: httpx.Request) -> httpx.Response:
        assert r.method == "POST"
        assert r.url.path == "/appointments"
        assert r.read() == httpx.Request("POST", BASE_URL, json=request.to_payload()).read()
        return httpx.Response(201, json={"success": True, "data": {"id": "apt_42"}})

    adapter = HttpAppointments(base_url=BASE_URL, timezone=ISTANBUL, client=_client(handler))
    assert adapter.submit(request) == "apt_42"


def test_submit_failures_raise_submission_error():
    request = AppointmentRequest(business_id="biz1", service_id="svc1", date="2024-06-03", start_time="10:00")

    rejected = HttpAppointments(
        base_url=BASE_URL,
        timezone=ISTANBUL,
        client=_client(lambda r: httpx.Response(409, json={"error": "Slot taken"})),
    )
    with pytest.raises(SubmissionError):
        rejected.submit(request)

    no_id = HttpAppointments(
        base_url=BASE_URL,
        timezone=ISTANBUL,
        client=_client(lambda r: httpx.Response(201, json={"success": True})),
    )
    with pytest.raises(SubmissionError):
        no_id.submit(request)


def test_base_url_is_required(monkeypatch):
    monkeypatch.setattr(settings, "BUSINESS_API_BASE_URL", None)
    with pytest.raises(ValueError):
        HttpBusinessData(client=_client(lambda r: httpx.Response(200)))
