"""
Tests for encoding a booking selection into resumable step addresses.
"""

from __future__ import annotations

from datetime import date, time

from bookflow.application.dto.booking_query import (
    BookingQueryDTO,
    decode_selection,
    encode_selection,
    exit_path,
    step_from_segment,
    step_path,
)
from bookflow.domain.entities.booking_selection import BookingSelection
from bookflow.domain.entities.step import Step


def test_selection_survives_address_round_trip():
    selection = BookingSelection(service_id="svc1", staff_id="st1", date=date(2024, 6, 3), time=time(9, 30))
    encoded = encode_selection(selection)

    assert encoded == "serviceId=svc1&staffId=st1&date=2024-06-03&time=09%3A30"
    assert decode_selection(encoded) == selection
    assert decode_selection("?" + encoded) == selection


def test_unset_fields_are_omitted():
    assert encode_selection(BookingSelection(service_id="svc1", date=date(2024, 6, 3))) == (
        "serviceId=svc1&date=2024-06-03"
    )
    assert encode_selection(BookingSelection()) == ""


def test_blank_and_unknown_keys_decode_as_not_selected():
    selection = decode_selection("serviceId=svc1&staffId=&date=%20&utm_source=mail")
    assert selection == BookingSelection(service_id="svc1")


def test_unparseable_date_or_time_decode_as_not_selected():
    selection = decode_selection({"serviceId": "svc1", "date": "2024-02-30", "time": "25:00"})
    assert selection.date is None
    assert selection.time is None


def test_dto_accepts_field_names_and_aliases():
    assert BookingQueryDTO(service_id="svc1").service_id == "svc1"
    assert BookingQueryDTO.model_validate({"serviceId": "svc1"}).service_id == "svc1"


def test_step_segments():
    assert step_from_segment("datetime") == Step.DATE
    assert step_from_segment("confirm") == Step.CONFIRM
    assert step_from_segment("date") is None


def test_step_and_exit_paths():
    selection = BookingSelection(service_id="svc1")
    assert step_path("demo-salon", Step.DATE, selection) == "/businesses/demo-salon/book/datetime?serviceId=svc1"
    assert step_path("demo-salon", Step.SERVICE, BookingSelection()) == "/businesses/demo-salon/book/service"
    assert exit_path("demo-salon") == "/businesses/demo-salon"
