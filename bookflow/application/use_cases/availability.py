from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Iterable

from bookflow.application.exceptions import ScheduleDataError
from bookflow.application.utils.business_parser import ensure_valid_schedule
from bookflow.application.utils.date_time import (
    MINUTES_PER_DAY,
    first_day_of_month,
    intervals_overlap,
    iter_dates,
    last_day_of_month,
    minutes_to_clock,
    month_days,
    same_calendar_day,
    shift_month,
    to_minutes,
)
from bookflow.domain.entities.appointment import BookedInterval, SlotCheck, SlotViolation, TimeSlot
from bookflow.domain.entities.availability_window import AvailabilityWindow
from bookflow.domain.entities.business_schedule import BusinessSchedule, DayHours
from bookflow.domain.entities.calendar import CalendarDay, DisabledReason, MonthNavigation


def slot_interval_for(duration_minutes: int) -> int:
    """Spacing between offered start times for a service of this length."""
    if duration_minutes <= 30:
        return 15
    if duration_minutes <= 60:
        return 30
    if duration_minutes <= 120:
        return 60
    return max(60, duration_minutes // 2)


class AvailabilityResolver:
    """Which dates and start times a business schedule allows."""

    def __init__(self, fallback_enabled: bool = False) -> None:
        self._fallback_enabled = fallback_enabled
        self._logger = logging.getLogger(__name__)

    def compute_disabled_dates(
        self,
        schedule: BusinessSchedule,
        window: AvailabilityWindow,
        allow_fallback: bool | None = None,
    ) -> frozenset[date]:
        """
        Dates inside the window that are blocked or fall on a closed weekday.

        A malformed schedule raises ScheduleDataError, unless the fallback is enabled,
        in which case no dates are disabled.
        """
        if not self._schedule_usable(schedule, allow_fallback):
            return frozenset()

        return frozenset(
            day
            for day in iter_dates(window.min_date, window.max_date)
            if schedule.is_blocked(day) or not schedule.is_open_on(day)
        )

    def disabled_reason(
        self,
        schedule: BusinessSchedule,
        window: AvailabilityWindow,
        day: date,
    ) -> DisabledReason | None:
        if not window.contains(day):
            return DisabledReason.OUTSIDE_WINDOW
        if schedule.is_blocked(day):
            return DisabledReason.BLOCKED
        if not schedule.is_open_on(day):
            return DisabledReason.CLOSED
        return None

    def is_date_selectable(self, schedule: BusinessSchedule, window: AvailabilityWindow, day: date) -> bool:
        return self.disabled_reason(schedule, window, day) is None

    def check_slot(
        self,
        schedule: BusinessSchedule,
        day: date,
        start: time,
        duration_minutes: int,
        booked: Iterable[BookedInterval] = (),
    ) -> SlotCheck:
        """Evaluate a start time against the rules in order and report the first violation."""
        hours = schedule.hours_for(day)
        if not hours.is_open:
            return SlotCheck(valid=False, violation=SlotViolation.CLOSED_DAY)

        start_minutes = to_minutes(start)
        end_minutes = start_minutes + duration_minutes
        if end_minutes > MINUTES_PER_DAY:
            return SlotCheck(valid=False, violation=SlotViolation.CROSSES_MIDNIGHT)

        open_minutes, close_minutes = self._open_hours(hours)
        if start_minutes < open_minutes or end_minutes > close_minutes:
            return SlotCheck(valid=False, violation=SlotViolation.OUTSIDE_HOURS)

        if self._overlaps_break(hours, start_minutes, end_minutes):
            return SlotCheck(valid=False, violation=SlotViolation.IN_BREAK)

        if schedule.is_blocked(day):
            return SlotCheck(valid=False, violation=SlotViolation.DATE_BLOCKED)

        if self._conflicting_interval(day, start_minutes, end_minutes, booked):
            return SlotCheck(valid=False, violation=SlotViolation.APPOINTMENT_CONFLICT)

        return SlotCheck(valid=True)

    def is_slot_valid(
        self,
        schedule: BusinessSchedule,
        day: date,
        start: time,
        duration_minutes: int,
        booked: Iterable[BookedInterval] = (),
    ) -> bool:
        return self.check_slot(schedule, day, start, duration_minutes, booked).valid

    def month_navigation(self, window: AvailabilityWindow, year: int, month: int) -> MonthNavigation:
        """Prev/next are allowed only if the adjacent month overlaps the window."""
        return MonthNavigation(
            can_go_previous=self._month_overlaps(window, *shift_month(year, month, -1)),
            can_go_next=self._month_overlaps(window, *shift_month(year, month, 1)),
        )

    def calendar_month(
        self,
        schedule: BusinessSchedule,
        window: AvailabilityWindow,
        year: int,
        month: int,
        today: date,
        allow_fallback: bool | None = None,
    ) -> list[CalendarDay]:
        usable = self._schedule_usable(schedule, allow_fallback)
        days: list[CalendarDay] = []
        for day in month_days(year, month):
            if usable:
                reason = self.disabled_reason(schedule, window, day)
            else:
                reason = None if window.contains(day) else DisabledReason.OUTSIDE_WINDOW
            days.append(
                CalendarDay(
                    date=day,
                    selectable=reason is None,
                    is_today=same_calendar_day(day, today),
                    reason=reason,
                )
            )
        return days

    def generate_time_slots(
        self,
        schedule: BusinessSchedule,
        day: date,
        duration_minutes: int,
        booked: Iterable[BookedInterval] = (),
        not_before: datetime | None = None,
    ) -> list[TimeSlot]:
        """
        Start times offered for a service on a date.

        Break-overlapping starts are left out; starts taken by existing appointments
        or not after `not_before` are listed as unavailable.
        """
        ensure_valid_schedule(schedule)
        hours = schedule.hours_for(day)
        if not hours.is_open or schedule.is_blocked(day):
            return []

        booked = list(booked)
        open_minutes, close_minutes = self._open_hours(hours)
        slots: list[TimeSlot] = []
        interval = slot_interval_for(duration_minutes)
        for start_minutes in range(open_minutes, close_minutes, interval):
            end_minutes = start_minutes + duration_minutes
            if end_minutes > close_minutes:
                break
            if self._overlaps_break(hours, start_minutes, end_minutes):
                continue

            start = minutes_to_clock(start_minutes)
            if not_before is not None and datetime.combine(day, start, tzinfo=not_before.tzinfo) <= not_before:
                slots.append(TimeSlot(time=start, available=False, reason=SlotViolation.TOO_SOON))
            elif self._conflicting_interval(day, start_minutes, end_minutes, booked):
                slots.append(TimeSlot(time=start, available=False, reason=SlotViolation.APPOINTMENT_CONFLICT))
            else:
                slots.append(TimeSlot(time=start))

        self._logger.debug(
            "Time slots generated",
            extra={"date": day.isoformat(), "reason": f"count:{len(slots)}"},
        )
        return slots

    def _schedule_usable(self, schedule: BusinessSchedule, allow_fallback: bool | None) -> bool:
        try:
            ensure_valid_schedule(schedule)
        except ScheduleDataError as e:
            use_fallback = self._fallback_enabled if allow_fallback is None else allow_fallback
            if not use_fallback:
                raise
            self._logger.warning("Schedule unusable, falling back to the open window", extra={"error": str(e)})
            return False
        return True

    def _open_hours(self, hours: DayHours) -> tuple[int, int]:
        if hours.open is None or hours.close is None:
            raise ScheduleDataError("Open day without opening hours")
        return to_minutes(hours.open), to_minutes(hours.close)

    def _overlaps_break(self, hours: DayHours, start_minutes: int, end_minutes: int) -> bool:
        return any(
            intervals_overlap(start_minutes, end_minutes, to_minutes(b.start), to_minutes(b.end))
            for b in hours.breaks
        )

    def _conflicting_interval(
        self,
        day: date,
        start_minutes: int,
        end_minutes: int,
        booked: Iterable[BookedInterval],
    ) -> BookedInterval | None:
        for interval in booked:
            if interval.date != day:
                continue
            if intervals_overlap(start_minutes, end_minutes, to_minutes(interval.start), to_minutes(interval.end)):
                return interval
        return None

    def _month_overlaps(self, window: AvailabilityWindow, year: int, month: int) -> bool:
        return (
            last_day_of_month(year, month) >= window.min_date
            and first_day_of_month(year, month) <= window.max_date
        )
