from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from typing import Callable
from zoneinfo import ZoneInfo

from bookflow.application.dto.booking_query import exit_path, step_path
from bookflow.application.exceptions import NavigationError
from bookflow.application.ports.appointments import AppointmentsPort
from bookflow.application.ports.business_data import BusinessDataPort
from bookflow.application.use_cases.appointment_validation import AppointmentRequestValidator
from bookflow.application.use_cases.availability import AvailabilityResolver
from bookflow.application.use_cases.step_sequencer import StepSequencer
from bookflow.application.utils.date_time import (
    format_calendar_date,
    format_clock_time,
    iter_dates,
    parse_calendar_date,
)
from bookflow.domain.entities.appointment import AppointmentRequest, TimeSlot, ValidationResult
from bookflow.domain.entities.availability_window import AvailabilityWindow
from bookflow.domain.entities.booking_selection import BookingSelection
from bookflow.domain.entities.business_profile import BusinessProfile
from bookflow.domain.entities.calendar import CalendarDay, MonthNavigation
from bookflow.domain.entities.service_catalog import ServiceCatalogEntry
from bookflow.domain.entities.step import EXIT, Step, StepOption, StepView


@dataclass(frozen=True)
class StepResult:
    business: BusinessProfile
    selection: BookingSelection
    view: StepView
    back_path: str
    next_path: str | None = None
    options: tuple[StepOption, ...] = ()
    reset_fields: tuple[str, ...] = ()


@dataclass(frozen=True)
class CalendarResult:
    window: AvailabilityWindow
    year: int
    month: int
    disabled_dates: list[date]
    days: list[CalendarDay]
    navigation: MonthNavigation


@dataclass(frozen=True)
class SubmissionResult:
    validation: ValidationResult
    appointment_id: str | None = None


class BookingFlowUseCase:
    def __init__(
        self,
        business_data: BusinessDataPort,
        appointments: AppointmentsPort,
        sequencer: StepSequencer,
        resolver: AvailabilityResolver,
        validator: AppointmentRequestValidator,
        timezone: ZoneInfo,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._business_data = business_data
        self._appointments = appointments
        self._sequencer = sequencer
        self._resolver = resolver
        self._validator = validator
        self._timezone = timezone
        self._clock = clock or (lambda: datetime.now(timezone))
        self._logger = logging.getLogger(__name__)

    def enter_step(self, business_id: str, step: Step, selection: BookingSelection) -> StepResult:
        """
        Rebuild the wizard for the requested step from the selection in the address.
        Stale fields are dropped first; an unreachable step raises NavigationError
        carrying the address of the nearest reachable step.
        """
        business = self._business_data.get_business(business_id)
        selection, reset_fields = self.reconcile_selection(business, selection)

        try:
            view = self._sequencer.resolve(selection, step)
        except NavigationError as e:
            raise NavigationError(
                e.step,
                e.redirect_to,
                redirect_path=step_path(business.slug, e.redirect_to, selection),
            ) from e

        if view.back_target == EXIT:
            back_path = exit_path(business.slug)
        else:
            back_path = step_path(business.slug, view.back_target, selection)

        # Staff is optional, so the staff step can be skipped with the selection as is
        next_path = None
        following = self._sequencer.next_step(step)
        if following is not None and self._sequencer.is_step_accessible(selection, following):
            next_path = step_path(business.slug, following, selection)

        return StepResult(
            business=business,
            selection=selection,
            view=view,
            back_path=back_path,
            next_path=next_path,
            options=tuple(self.step_options(business, step, selection)),
            reset_fields=reset_fields,
        )

    def step_options(
        self,
        business: BusinessProfile,
        step: Step,
        selection: BookingSelection,
    ) -> list[StepOption]:
        """Choices for `step`, each addressed to the following step with the choice applied."""
        following = self._sequencer.next_step(step)
        if following is None:
            return []

        def option(value: str, label: str, chosen: BookingSelection, **extra) -> StepOption:
            return StepOption(value=value, label=label, path=step_path(business.slug, following, chosen), **extra)

        catalog = business.catalog
        if step == Step.SERVICE:
            return [
                option(s.service_id, s.display_name, selection.with_service(s.service_id))
                for s in catalog.active_services()
            ]

        if step == Step.STAFF:
            return [
                option(m.staff_id, m.display_name, selection.with_staff(m.staff_id))
                for m in catalog.staff_for_service(selection.service_id or "")
            ]

        if step == Step.DATE:
            window = self.window_for(business)
            disabled = self._resolver.compute_disabled_dates(business.schedule, window)
            return [
                option(format_calendar_date(day), format_calendar_date(day), selection.with_date(day))
                for day in iter_dates(window.min_date, window.max_date)
                if day not in disabled
            ]

        if step == Step.TIME:
            service = catalog.get_service(selection.service_id or "")
            if service is None or selection.date is None:
                return []
            slots = self._slots_for(business, service, selection.date, selection.staff_id)
            return [
                option(
                    format_clock_time(slot.time),
                    format_clock_time(slot.time),
                    selection.with_time(slot.time),
                    available=slot.available,
                    reason=slot.reason.value if slot.reason else None,
                )
                for slot in slots
            ]

        return []

    def reconcile_selection(
        self,
        business: BusinessProfile,
        selection: BookingSelection,
    ) -> tuple[BookingSelection, tuple[str, ...]]:
        """Reset fields that reference entities or dates the business no longer offers."""
        catalog = business.catalog
        reset: list[str] = []

        if selection.service_id and not catalog.get_service(selection.service_id):
            reset.append("service_id")
        if selection.staff_id:
            offered = {m.staff_id for m in catalog.staff_for_service(selection.service_id or "")}
            if "service_id" in reset or selection.staff_id not in offered:
                reset.append("staff_id")
        if selection.date is not None:
            window = self.window_for(business)
            if not self._resolver.is_date_selectable(business.schedule, window, selection.date):
                reset.extend(["date", "time"] if selection.time is not None else ["date"])

        if reset:
            self._logger.info(
                "Stale selection reset",
                extra={"business_id": business.business_id, "reason": ",".join(reset)},
            )
            selection = selection.cleared(*reset)
        return selection, tuple(reset)

    def window_for(self, business: BusinessProfile) -> AvailabilityWindow:
        return AvailabilityWindow.from_settings(self._now(), business.reservation_settings)

    def calendar(self, business_id: str, year: int | None = None, month: int | None = None) -> CalendarResult:
        business = self._business_data.get_business(business_id)
        window = self.window_for(business)
        year = year or window.min_date.year
        month = month or window.min_date.month

        disabled = self._resolver.compute_disabled_dates(business.schedule, window)
        return CalendarResult(
            window=window,
            year=year,
            month=month,
            disabled_dates=sorted(disabled),
            days=self._resolver.calendar_month(business.schedule, window, year, month, self._now().date()),
            navigation=self._resolver.month_navigation(window, year, month),
        )

    def time_slots(
        self,
        business_id: str,
        service_id: str,
        day: date,
        staff_id: str | None = None,
    ) -> list[TimeSlot]:
        business = self._business_data.get_business(business_id)
        service = business.catalog.get_service(service_id)
        if not service:
            raise ValueError(f"Service '{service_id}' is not available")
        return self._slots_for(business, service, day, staff_id)

    def submit(self, request: AppointmentRequest) -> SubmissionResult:
        """Validate the complete request end to end, then hand it to the backend."""
        field_errors = self._validator.validate_fields(request)
        if field_errors:
            return SubmissionResult(validation=ValidationResult.failed(field_errors))

        business = self._business_data.get_business(request.business_id)
        # The address may carry a slug; the backend expects the id
        request = replace(request, business_id=business.business_id)
        service = business.catalog.get_service(request.service_id)
        if not service:
            return SubmissionResult(
                validation=ValidationResult.failed({"serviceId": "This service is no longer available"})
            )
        if request.staff_id:
            offered = {m.staff_id for m in business.catalog.staff_for_service(service.service_id)}
            if request.staff_id not in offered:
                return SubmissionResult(
                    validation=ValidationResult.failed({"staffId": "This staff member is no longer available"})
                )

        day = parse_calendar_date(request.date)
        booked = self._appointments.list_booked_intervals(request.business_id, day, request.staff_id)
        validation = self._validator.validate(
            request,
            business.schedule,
            service.duration_minutes,
            booked,
            not_before=self._not_before(business),
            window=self.window_for(business),
        )
        if not validation.valid:
            return SubmissionResult(validation=validation)

        appointment_id = self._appointments.submit(request)
        self._logger.info(
            "Appointment submitted",
            extra={"business_id": request.business_id, "service_id": request.service_id, "date": request.date},
        )
        return SubmissionResult(validation=validation, appointment_id=appointment_id)

    def _slots_for(
        self,
        business: BusinessProfile,
        service: ServiceCatalogEntry,
        day: date,
        staff_id: str | None,
    ) -> list[TimeSlot]:
        window = self.window_for(business)
        if not self._resolver.is_date_selectable(business.schedule, window, day):
            return []

        booked = self._appointments.list_booked_intervals(business.business_id, day, staff_id)
        return self._resolver.generate_time_slots(
            business.schedule,
            day,
            service.duration_minutes,
            booked=booked,
            not_before=self._not_before(business),
        )

    def _not_before(self, business: BusinessProfile) -> datetime:
        """Earliest instant still bookable: starts must be strictly later."""
        return self._now() + timedelta(hours=business.reservation_settings.min_notification_hours)

    def _now(self) -> datetime:
        now = self._clock()
        if now.tzinfo is None:
            return now.replace(tzinfo=self._timezone)
        return now.astimezone(self._timezone)
