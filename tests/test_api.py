"""
Tests for the booking HTTP endpoints.
"""

from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient

from bookflow.application.exceptions import BusinessDataUnavailableError
from bookflow.application.use_cases.appointment_validation import AppointmentRequestValidator
from bookflow.application.use_cases.availability import AvailabilityResolver
from bookflow.application.use_cases.booking_flow import BookingFlowUseCase
from bookflow.application.use_cases.step_sequencer import StepSequencer
from bookflow.infrastructure.appointments.mock_appointments import MockAppointments
from bookflow.infrastructure.business.mock_business_data import DEMO_BUSINESS, MockBusinessData
from bookflow.main import app
from bookflow.wiring.dependencies import get_booking_flow_use_case

ISTANBUL = ZoneInfo("Europe/Istanbul")
NOW = datetime(2024, 6, 3, 8, 0, tzinfo=ISTANBUL)


class _FailingBusinessData(MockBusinessData):
    def get_business(self, business_id):
        raise BusinessDataUnavailableError("backend down")


def _flow(business_data=None) -> BookingFlowUseCase:
    resolver = AvailabilityResolver()
    return BookingFlowUseCase(
        business_data=business_data or MockBusinessData(),
        appointments=MockAppointments(),
        sequencer=StepSequencer(),
        resolver=resolver,
        validator=AppointmentRequestValidator(resolver=resolver, timezone=ISTANBUL, clock=lambda: NOW),
        timezone=ISTANBUL,
        clock=lambda: NOW,
    )


@pytest.fixture
def client():
    flow = _flow()
    app.dependency_overrides[get_booking_flow_use_case] = lambda: flow
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_enter_step(client):
    response = client.get("/businesses/demo-salon/book/time?serviceId=haircut&date=2024-06-04")
    assert response.status_code == 200

    data = response.json()
    assert data["current_step"] == "time"
    assert data["accessible_steps"] == ["service", "staff", "datetime", "time"]
    assert data["back_target"] == "datetime"
    assert data["back_path"] == "/businesses/demo-salon/book/datetime?serviceId=haircut&date=2024-06-04"
    assert data["selection"]["serviceId"] == "haircut"
    assert data["next_path"] is None
    assert data["options"][0] == {
        "value": "09:00",
        "label": "09:00",
        "path": "/businesses/demo-salon/book/confirm?serviceId=haircut&date=2024-06-04&time=09%3A00",
        "available": True,
        "reason": None,
    }


def test_enter_step_redirects_when_unreachable(client):
    response = client.get("/businesses/demo-salon/book/confirm?serviceId=haircut")
    assert response.status_code == 409

    data = response.json()
    assert data["redirect_to"] == "datetime"
    assert data["redirect_path"] == "/businesses/demo-salon/book/datetime?serviceId=haircut"


def test_enter_step_unknown_segment_or_business(client):
    assert client.get("/businesses/demo-salon/book/payment").status_code == 404
    assert client.get("/businesses/nowhere/book/service").status_code == 404


def test_backend_outage_maps_to_503():
    flow = _flow(business_data=_FailingBusinessData())
    app.dependency_overrides[get_booking_flow_use_case] = lambda: flow
    try:
        response = TestClient(app).get("/businesses/demo-salon/calendar")
    finally:
        app.dependency_overrides.clear()
    assert response.status_code == 503


def test_calendar(client):
    response = client.get("/businesses/demo-salon/calendar", params={"year": 2024, "month": 6})
    assert response.status_code == 200

    data = response.json()
    assert data["min_date"] == "2024-06-03"
    assert data["max_date"] == "2024-06-17"
    assert data["disabled_dates"] == ["2024-06-09", "2024-06-16"]
    assert len(data["days"]) == 30
    assert client.get("/businesses/demo-salon/calendar", params={"month": 13}).status_code == 422


@pytest.mark.parametrize("year", [1, 9999])
def test_calendar_rejects_unrepresentable_years(client, year):
    response = client.get("/businesses/demo-salon/calendar", params={"year": year, "month": 1})
    assert response.status_code == 422


@pytest.mark.parametrize(
    "override",
    [
        {"services": [{"id": "haircut", "duration": "abc"}]},
        {"businessHours": {"monday": {"isOpen": True, "open": "18:00", "close": "09:00"}}},
    ],
)
def test_malformed_business_data_maps_to_503(override):
    document = {**DEMO_BUSINESS, **override}
    flow = _flow(business_data=MockBusinessData({"demo-salon": document}))
    app.dependency_overrides[get_booking_flow_use_case] = lambda: flow
    try:
        client = TestClient(app)
        step = client.get("/businesses/demo-salon/book/service")
        calendar = client.get("/businesses/demo-salon/calendar")
    finally:
        app.dependency_overrides.clear()
    assert step.status_code == 503
    assert calendar.status_code == 503
    assert calendar.json() == {"detail": "Booking is temporarily unavailable for this business"}


def test_slots(client):
    response = client.get(
        "/businesses/demo-salon/slots",
        params={"serviceId": "haircut", "date": "2024-06-04"},
    )
    assert response.status_code == 200
    slots = response.json()["slots"]
    assert slots[0] == {"time": "09:00", "available": True, "reason": None}

    bad_date = client.get("/businesses/demo-salon/slots", params={"serviceId": "haircut", "date": "04.06.2024"})
    assert bad_date.status_code == 400
    inactive = client.get("/businesses/demo-salon/slots", params={"serviceId": "beard", "date": "2024-06-04"})
    assert inactive.status_code == 400


def test_create_appointment(client):
    payload = {"serviceId": "haircut", "date": "2024-06-04", "startTime": "10:00", "customerNotes": "Hi"}
    response = client.post("/businesses/demo-salon/appointments", json=payload)
    assert response.status_code == 201
    assert response.json() == {"appointment_id": "mock_appointment_1"}

    conflict = client.post("/businesses/demo-salon/appointments", json=payload)
    assert conflict.status_code == 422
    assert conflict.json()["slot_violation"] == "appointment-conflict"
    assert "startTime" in conflict.json()["field_errors"]


def test_create_appointment_field_errors(client):
    payload = {"serviceId": "haircut", "date": "2024-06-04", "startTime": "10am", "customerNotes": "x" * 501}
    response = client.post("/businesses/demo-salon/appointments", json=payload)
    assert response.status_code == 422
    assert set(response.json()["field_errors"]) == {"startTime", "customerNotes"}
