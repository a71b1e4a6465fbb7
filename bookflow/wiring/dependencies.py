import logging
from zoneinfo import ZoneInfo

from bookflow.core.config import settings
from bookflow.application.ports.appointments import AppointmentsPort
from bookflow.application.ports.business_data import BusinessDataPort
from bookflow.application.use_cases.appointment_validation import AppointmentRequestValidator
from bookflow.application.use_cases.availability import AvailabilityResolver
from bookflow.application.use_cases.booking_flow import BookingFlowUseCase
from bookflow.application.use_cases.step_sequencer import StepSequencer
from bookflow.infrastructure.appointments.http_appointments_client import HttpAppointments
from bookflow.infrastructure.appointments.mock_appointments import MockAppointments
from bookflow.infrastructure.business.http_business_client import HttpBusinessData
from bookflow.infrastructure.business.mock_business_data import MockBusinessData


_business_data: BusinessDataPort | None = None
_appointments: AppointmentsPort | None = None


def uses_mock_adapters() -> bool:
    return not settings.BUSINESS_API_BASE_URL or settings.ENV.lower() in {"dev", "local"}


def get_timezone() -> ZoneInfo:
    return ZoneInfo(settings.BUSINESS_TIMEZONE)


def get_business_data() -> BusinessDataPort:
    global _business_data
    if _business_data is None:
        logger = logging.getLogger(__name__)
        if uses_mock_adapters():
            logger.info("Using MockBusinessData (ENV=%s)", settings.ENV)
            _business_data = MockBusinessData()
        else:
            _business_data = HttpBusinessData()
    return _business_data


def get_appointments() -> AppointmentsPort:
    global _appointments
    if _appointments is None:
        if uses_mock_adapters():
            _appointments = MockAppointments()
        else:
            _appointments = HttpAppointments(timezone=get_timezone())
    return _appointments


def get_availability_resolver() -> AvailabilityResolver:
    return AvailabilityResolver(fallback_enabled=settings.SCHEDULE_FALLBACK_ENABLED)


def get_booking_flow_use_case() -> BookingFlowUseCase:
    tz = get_timezone()
    resolver = get_availability_resolver()
    return BookingFlowUseCase(
        business_data=get_business_data(),
        appointments=get_appointments(),
        sequencer=StepSequencer(),
        resolver=resolver,
        validator=AppointmentRequestValidator(
            resolver=resolver,
            timezone=tz,
            notes_max_length=settings.CUSTOMER_NOTES_MAX_LENGTH,
        ),
        timezone=tz,
    )
