from __future__ import annotations

from typing import Mapping
from urllib.parse import parse_qsl, urlencode

from pydantic import BaseModel, ConfigDict, Field, field_validator

from bookflow.application.utils.date_time import (
    format_calendar_date,
    format_clock_time,
    parse_calendar_date,
    parse_clock_time,
)
from bookflow.domain.entities.booking_selection import BookingSelection
from bookflow.domain.entities.step import Step

# Address segment per step; the date step lives under "datetime"
STEP_PATH_SEGMENTS: dict[Step, str] = {
    Step.SERVICE: "service",
    Step.STAFF: "staff",
    Step.DATE: "datetime",
    Step.TIME: "time",
    Step.CONFIRM: "confirm",
}


class BookingQueryDTO(BaseModel):
    """Query-string form of a BookingSelection. Keys: serviceId, staffId, date, time."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    service_id: str | None = Field(default=None, alias="serviceId")
    staff_id: str | None = Field(default=None, alias="staffId")
    date: str | None = None
    time: str | None = None

    @field_validator("service_id", "staff_id", "date", "time", mode="before")
    @classmethod
    def _blank_to_none(cls, value: object) -> object:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @classmethod
    def from_query(cls, query: str | Mapping[str, str]) -> BookingQueryDTO:
        if isinstance(query, str):
            query = dict(parse_qsl(query.lstrip("?"), keep_blank_values=True))
        return cls.model_validate(dict(query))

    @classmethod
    def from_selection(cls, selection: BookingSelection) -> BookingQueryDTO:
        return cls(
            service_id=selection.service_id,
            staff_id=selection.staff_id,
            date=format_calendar_date(selection.date) if selection.date else None,
            time=format_clock_time(selection.time) if selection.time else None,
        )

    def to_selection(self) -> BookingSelection:
        """Unparseable date or time values are treated as not selected."""
        return BookingSelection(
            service_id=self.service_id,
            staff_id=self.staff_id,
            date=parse_calendar_date(self.date),
            time=parse_clock_time(self.time),
        )

    def to_query_string(self) -> str:
        pairs = [
            ("serviceId", self.service_id),
            ("staffId", self.staff_id),
            ("date", self.date),
            ("time", self.time),
        ]
        return urlencode([(key, value) for key, value in pairs if value])


def encode_selection(selection: BookingSelection) -> str:
    return BookingQueryDTO.from_selection(selection).to_query_string()


def decode_selection(query: str | Mapping[str, str]) -> BookingSelection:
    return BookingQueryDTO.from_query(query).to_selection()


def step_from_segment(segment: str) -> Step | None:
    for step, value in STEP_PATH_SEGMENTS.items():
        if value == segment:
            return step
    return None


def exit_path(slug: str) -> str:
    return f"/businesses/{slug}"


def step_path(slug: str, step: Step, selection: BookingSelection) -> str:
    path = f"/businesses/{slug}/book/{STEP_PATH_SEGMENTS[step]}"
    query = encode_selection(selection)
    return f"{path}?{query}" if query else path
