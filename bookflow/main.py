import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from bookflow.api.booking import router as booking_router
from bookflow.application.exceptions import (
    BusinessDataUnavailableError,
    BusinessNotFoundError,
    ScheduleDataError,
)
from bookflow.core.config import settings
from bookflow.wiring.dependencies import uses_mock_adapters


class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in ("business_id", "service_id", "step", "date", "reason", "error"):
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


handler = logging.StreamHandler()
handler.setFormatter(ContextFormatter("%(levelname)s:%(name)s:%(message)s"))

root = logging.getLogger()
root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
root.handlers.clear()
root.addHandler(handler)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "Booking flow ready",
        extra={"reason": "mock-adapters" if uses_mock_adapters() else "business-api"},
    )
    yield


app = FastAPI(title="Appointment Booking Flow", version="1.0.0", lifespan=lifespan)

app.include_router(booking_router, tags=["booking"])


@app.exception_handler(BusinessDataUnavailableError)
async def business_data_unavailable(request: Request, exc: BusinessDataUnavailableError) -> JSONResponse:
    business_id = request.path_params.get("business_id")
    if isinstance(exc, BusinessNotFoundError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})
    logger.error("Booking data unavailable", extra={"business_id": business_id, "error": str(exc)})
    return JSONResponse(
        status_code=503,
        content={"detail": "Booking is temporarily unavailable for this business"},
    )


@app.exception_handler(ScheduleDataError)
async def schedule_data_error(request: Request, exc: ScheduleDataError) -> JSONResponse:
    # Never offer a calendar built from hours we cannot read
    logger.error(
        "Business schedule unusable",
        extra={"business_id": request.path_params.get("business_id"), "error": str(exc)},
    )
    return JSONResponse(
        status_code=503,
        content={"detail": "Booking is temporarily unavailable for this business"},
    )


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
