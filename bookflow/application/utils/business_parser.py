from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Iterable, Mapping

from bookflow.application.exceptions import ScheduleDataError
from bookflow.core.config import settings as app_settings
from bookflow.application.utils.date_time import (
    iter_dates,
    parse_calendar_date,
    parse_clock_time,
    to_minutes,
)
from bookflow.domain.entities.availability_window import ReservationSettings
from bookflow.domain.entities.business_profile import BusinessProfile
from bookflow.domain.entities.business_schedule import (
    BreakWindow,
    BusinessSchedule,
    DayHours,
    Weekday,
)
from bookflow.domain.entities.service_catalog import (
    DEFAULT_DURATION_MINUTES,
    BusinessCatalog,
    ServiceCatalogEntry,
    StaffMember,
)

# Ranged closures longer than this are treated as bad data
MAX_CLOSURE_DAYS = 366


def parse_business_profile(raw: Mapping[str, Any]) -> BusinessProfile:
    """Build a BusinessProfile from the business API document."""
    business_id = str(raw.get("id") or "").strip()
    if not business_id:
        raise ScheduleDataError("Business document has no id")

    schedule = parse_business_schedule(
        raw.get("businessHours"),
        raw.get("closures") or [],
        timezone=raw.get("timezone"),
    )
    return BusinessProfile(
        business_id=business_id,
        slug=str(raw.get("slug") or business_id),
        name=str(raw.get("name") or ""),
        schedule=schedule,
        catalog=parse_catalog(raw.get("services") or [], raw.get("staff") or []),
        reservation_settings=parse_reservation_settings(raw.get("reservationSettings")),
    )


def parse_business_schedule(
    hours: Mapping[str, Any] | None,
    closures: Iterable[Any] = (),
    timezone: str | None = None,
) -> BusinessSchedule:
    if hours is None:
        raise ScheduleDataError("Business hours are missing")
    if not isinstance(hours, Mapping):
        raise ScheduleDataError("Business hours must be an object keyed by weekday")

    weekly: dict[Weekday, DayHours] = {}
    for key, value in hours.items():
        try:
            weekday = Weekday(str(key).lower())
        except ValueError:
            raise ScheduleDataError(f"Unknown weekday '{key}'") from None
        weekly[weekday] = _parse_day_hours(weekday, value or {})

    schedule = BusinessSchedule(
        weekly_hours=weekly,
        blocked_dates=frozenset(_parse_closures(closures)),
        timezone=timezone,
    )
    ensure_valid_schedule(schedule)
    return schedule


def ensure_valid_schedule(schedule: BusinessSchedule) -> None:
    """Raise ScheduleDataError unless every open day has open < close and contained, disjoint breaks."""
    for weekday, day in schedule.weekly_hours.items():
        if not day.is_open:
            continue
        if day.open is None or day.close is None:
            raise ScheduleDataError(f"{weekday.value}: open day without opening hours")
        open_minutes = to_minutes(day.open)
        close_minutes = to_minutes(day.close)
        if open_minutes >= close_minutes:
            raise ScheduleDataError(f"{weekday.value}: opening time must be before closing time")

        previous_end: int | None = None
        for window in sorted(day.breaks, key=lambda b: to_minutes(b.start)):
            start = to_minutes(window.start)
            end = to_minutes(window.end)
            if start >= end:
                raise ScheduleDataError(f"{weekday.value}: break must start before it ends")
            if start < open_minutes or end > close_minutes:
                raise ScheduleDataError(f"{weekday.value}: break outside opening hours")
            if previous_end is not None and start < previous_end:
                raise ScheduleDataError(f"{weekday.value}: breaks overlap")
            previous_end = end


def parse_reservation_settings(raw: Mapping[str, Any] | None) -> ReservationSettings:
    """Missing keys fall back to the configured defaults."""
    raw = raw or {}
    max_days = raw.get("maxAdvanceBookingDays")
    min_hours = raw.get("minNotificationHours")
    try:
        return ReservationSettings(
            max_advance_booking_days=int(
                max_days if max_days is not None else app_settings.DEFAULT_MAX_ADVANCE_BOOKING_DAYS
            ),
            min_notification_hours=int(
                min_hours if min_hours is not None else app_settings.DEFAULT_MIN_NOTIFICATION_HOURS
            ),
            max_daily_appointments=(
                int(raw["maxDailyAppointments"]) if raw.get("maxDailyAppointments") else None
            ),
        )
    except (TypeError, ValueError) as e:
        raise ScheduleDataError(f"Invalid reservation settings: {e}") from e


def parse_catalog(services: Iterable[Mapping[str, Any]], staff: Iterable[Mapping[str, Any]]) -> BusinessCatalog:
    entries: list[ServiceCatalogEntry] = []
    for item in services:
        service_id = item.get("id")
        if not service_id:
            continue
        raw_duration = item.get("duration")
        price = item.get("price")
        try:
            duration = int(raw_duration) if raw_duration is not None else DEFAULT_DURATION_MINUTES
            price = float(price) if price is not None else None
        except (TypeError, ValueError) as e:
            raise ScheduleDataError(f"Invalid service '{service_id}': {e}") from e
        if duration <= 0:
            raise ScheduleDataError(f"Service '{service_id}' must have a positive duration")

        entries.append(
            ServiceCatalogEntry(
                service_id=str(service_id),
                display_name=str(item.get("name") or service_id),
                duration_minutes=duration,
                price=price,
                currency=item.get("currency"),
                is_active=bool(item.get("isActive", True)),
                staff_ids=tuple(str(s) for s in item.get("staffIds") or ()),
            )
        )

    members: list[StaffMember] = []
    for item in staff:
        staff_id = item.get("id")
        if not staff_id:
            continue
        members.append(
            StaffMember(
                staff_id=str(staff_id),
                display_name=_staff_display_name(item),
                is_active=bool(item.get("isActive", True)),
            )
        )
    return BusinessCatalog(services=tuple(entries), staff=tuple(members))


def _parse_day_hours(weekday: Weekday, raw: Mapping[str, Any]) -> DayHours:
    if not raw.get("isOpen"):
        return DayHours(is_open=False)

    open_time = parse_clock_time(raw.get("open"))
    close_time = parse_clock_time(raw.get("close"))
    if open_time is None or close_time is None:
        raise ScheduleDataError(f"{weekday.value}: invalid opening hours")

    breaks: list[BreakWindow] = []
    for item in raw.get("breaks") or []:
        start = parse_clock_time(item.get("startTime"))
        end = parse_clock_time(item.get("endTime"))
        if start is None or end is None:
            raise ScheduleDataError(f"{weekday.value}: invalid break window")
        breaks.append(BreakWindow(start=start, end=end, description=item.get("description")))

    return DayHours(is_open=True, open=open_time, close=close_time, breaks=tuple(breaks))


def _parse_closures(closures: Iterable[Any]) -> set[date]:
    """Closures are either single dates or {startDate, endDate} ranges."""
    blocked: set[date] = set()
    for item in closures:
        if isinstance(item, str):
            day = parse_calendar_date(item)
            if day is None:
                raise ScheduleDataError(f"Invalid closure date '{item}'")
            blocked.add(day)
            continue

        if isinstance(item, Mapping):
            start = parse_calendar_date(item.get("startDate"))
            end = parse_calendar_date(item.get("endDate") or item.get("startDate"))
            if start is None or end is None or end < start:
                raise ScheduleDataError(f"Invalid closure range {dict(item)}")
            if end - start > timedelta(days=MAX_CLOSURE_DAYS):
                raise ScheduleDataError("Closure range is too long")
            blocked.update(iter_dates(start, end))
            continue

        raise ScheduleDataError(f"Unsupported closure entry {item!r}")
    return blocked


def _staff_display_name(item: Mapping[str, Any]) -> str:
    if item.get("name"):
        return str(item["name"])
    user = item.get("user") or {}
    full_name = " ".join(p for p in (user.get("firstName"), user.get("lastName")) if p)
    return full_name or str(item.get("id"))
