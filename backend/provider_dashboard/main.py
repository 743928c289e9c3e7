# backend/provider_dashboard/main.py

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from . import models  # noqa: F401  registers tables on Base.metadata
from .api import api_booking, api_finance, api_payout
from .core.config import settings
from .core.observability import setup_logging, setup_tracer
from .database import Base, engine
from .utils.errors import BookingEngineError
from .utils.status_logger import register_status_listeners

setup_logging()
logger = logging.getLogger(__name__)

Base.metadata.create_all(bind=engine)
register_status_listeners()

app = FastAPI(title="Provider Dashboard API", default_response_class=ORJSONResponse)
setup_tracer(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(BookingEngineError)
async def booking_engine_exception_handler(request: Request, exc: BookingEngineError):
    """Render rule violations as ``{"detail": {"message", "code", "field_errors"}}``."""
    logger.warning(
        "Booking rule rejected %s %s: %s (%s)",
        request.method,
        request.url.path,
        exc.code,
        exc.message,
    )
    return ORJSONResponse(status_code=exc.http_status, content={"detail": exc.to_detail()})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    logger.warning("Validation error at %s: %s", request.url.path, errors)
    field_errors = {
        ".".join(str(part) for part in err.get("loc", ())[1:]) or "body": err.get("msg", "invalid")
        for err in errors
    }
    return ORJSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": {"message": "Validation error", "code": "validation_error", "field_errors": field_errors}},
    )


api_prefix = settings.API_V1_STR
app.include_router(api_booking.router, prefix=f"{api_prefix}/bookings")
app.include_router(api_finance.router, prefix=f"{api_prefix}/finance")
app.include_router(api_payout.router, prefix=f"{api_prefix}/payouts")


@app.get("/healthz")
def healthz():
    return {"status": "ok"}
