"""
Render domain errors as JSON responses.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from seat_reservation.core.exceptions import ReservationBusy, ReservationError, Unauthorized
from seat_reservation.core.logging import get_logger

logger = get_logger(__name__)


async def reservation_error_handler(request: Request, exc: ReservationError) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.info
    log("request_rejected", error=exc.code.value, detail=exc.message, status_code=exc.status_code)

    headers = None
    if isinstance(exc, Unauthorized):
        headers = {"WWW-Authenticate": "Bearer"}
    elif isinstance(exc, ReservationBusy):
        headers = {"Retry-After": "1"}

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code.value, "detail": exc.message, **exc.extra()},
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ReservationError, reservation_error_handler)
