from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from bookflow.api.schemas import (
    AppointmentCreatedSchema,
    AppointmentRequestSchema,
    CalendarDaySchema,
    CalendarSchema,
    NavigationErrorSchema,
    SelectionSchema,
    StepOptionSchema,
    StepViewSchema,
    TimeSlotSchema,
    TimeSlotsSchema,
    ValidationErrorSchema,
)
from bookflow.application.dto.booking_query import BookingQueryDTO, STEP_PATH_SEGMENTS, step_from_segment
from bookflow.application.exceptions import NavigationError, ScheduleDataError, SubmissionError
from bookflow.application.use_cases.booking_flow import BookingFlowUseCase
from bookflow.application.utils.date_time import format_clock_time, parse_calendar_date
from bookflow.domain.entities.appointment import AppointmentRequest
from bookflow.domain.entities.step import EXIT
from bookflow.wiring.dependencies import get_booking_flow_use_case

# Business data failures (not found, unavailable, malformed) are mapped in main.py
router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/businesses/{business_id}/book/{segment}", response_model=StepViewSchema)
def enter_step(
    business_id: str,
    segment: str,
    request: Request,
    uc: BookingFlowUseCase = Depends(get_booking_flow_use_case),
):
    step = step_from_segment(segment)
    if step is None:
        raise HTTPException(status_code=404, detail=f"Unknown booking step '{segment}'")

    selection = BookingQueryDTO.from_query(dict(request.query_params)).to_selection()
    try:
        result = uc.enter_step(business_id, step, selection)
    except NavigationError as e:
        body = NavigationErrorSchema(
            detail=str(e),
            step=STEP_PATH_SEGMENTS[e.step],
            redirect_to=STEP_PATH_SEGMENTS[e.redirect_to],
            redirect_path=e.redirect_path,
        )
        return JSONResponse(status_code=409, content=body.model_dump())

    query = BookingQueryDTO.from_selection(result.selection)
    back = result.view.back_target
    return StepViewSchema(
        business_id=result.business.business_id,
        current_step=STEP_PATH_SEGMENTS[result.view.current_step],
        accessible_steps=[STEP_PATH_SEGMENTS[s] for s in result.view.accessible_steps],
        back_target=EXIT if back == EXIT else STEP_PATH_SEGMENTS[back],
        back_path=result.back_path,
        next_path=result.next_path,
        selection=SelectionSchema(**query.model_dump()),
        options=[
            StepOptionSchema(
                value=o.value,
                label=o.label,
                path=o.path,
                available=o.available,
                reason=o.reason,
            )
            for o in result.options
        ],
        reset_fields=list(result.reset_fields),
    )


@router.get("/businesses/{business_id}/calendar", response_model=CalendarSchema)
def calendar(
    business_id: str,
    # Adjacent months must stay representable for navigation
    year: int | None = Query(None, ge=2, le=9998),
    month: int | None = Query(None, ge=1, le=12),
    uc: BookingFlowUseCase = Depends(get_booking_flow_use_case),
):
    result = uc.calendar(business_id, year, month)
    return CalendarSchema(
        min_date=result.window.min_date.isoformat(),
        max_date=result.window.max_date.isoformat(),
        year=result.year,
        month=result.month,
        can_go_previous=result.navigation.can_go_previous,
        can_go_next=result.navigation.can_go_next,
        disabled_dates=[d.isoformat() for d in result.disabled_dates],
        days=[
            CalendarDaySchema(
                date=d.date.isoformat(),
                selectable=d.selectable,
                is_today=d.is_today,
                reason=d.reason.value if d.reason else None,
            )
            for d in result.days
        ],
    )


@router.get("/businesses/{business_id}/slots", response_model=TimeSlotsSchema)
def time_slots(
    business_id: str,
    service_id: str = Query(..., alias="serviceId"),
    date: str = Query(...),
    staff_id: str | None = Query(None, alias="staffId"),
    uc: BookingFlowUseCase = Depends(get_booking_flow_use_case),
):
    day = parse_calendar_date(date)
    if day is None:
        raise HTTPException(status_code=400, detail="date must be in YYYY-MM-DD format")

    try:
        slots = uc.time_slots(business_id, service_id, day, staff_id)
    except ScheduleDataError:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return TimeSlotsSchema(
        date=day.isoformat(),
        service_id=service_id,
        slots=[
            TimeSlotSchema(
                time=format_clock_time(s.time),
                available=s.available,
                reason=s.reason.value if s.reason else None,
            )
            for s in slots
        ],
    )


@router.post(
    "/businesses/{business_id}/appointments",
    response_model=AppointmentCreatedSchema,
    status_code=201,
)
def create_appointment(
    business_id: str,
    req: AppointmentRequestSchema,
    uc: BookingFlowUseCase = Depends(get_booking_flow_use_case),
):
    request = AppointmentRequest(
        business_id=business_id,
        service_id=req.service_id,
        staff_id=req.staff_id,
        date=req.date,
        start_time=req.start_time,
        customer_notes=req.customer_notes,
    )
    try:
        result = uc.submit(request)
    except SubmissionError as e:
        logger.error("Appointment submission failed", extra={"business_id": business_id, "error": str(e)})
        raise HTTPException(status_code=502, detail=str(e))

    if not result.validation.valid:
        violation = result.validation.slot_violation
        body = ValidationErrorSchema(
            field_errors=dict(result.validation.field_errors),
            slot_violation=violation.value if violation else None,
        )
        return JSONResponse(status_code=422, content=body.model_dump())

    return AppointmentCreatedSchema(appointment_id=result.appointment_id)
