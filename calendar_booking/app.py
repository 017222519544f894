"""FastAPI application: HTTP boundary for calendar booking.

Endpoints:

  POST /api/calendar-book   Book a slot if it is free
  GET  /health              Health check

Status mapping for /api/calendar-book:

  200  booked                      {"ok": true, "eventId", "link"}
  400  missing start/end/summary   {"error": ...}
  405  any method but POST         {"error": "Method not allowed"}, Allow: POST
  409  slot already taken          {"error": ..., "busy": [...]}
  500  config/auth/calendar error  {"error": "Kalender-Fehler", "detail": ...}
"""

from __future__ import annotations

# Load .env into os.environ before settings are read.
from dotenv import load_dotenv
load_dotenv()

import logging
import time
from typing import Any, AsyncIterator

# Configure root logger early so all app loggers have a handler
# when run via `uvicorn calendar_booking.app:app`.
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(name)-20s %(levelname)-7s %(message)s",
)

import httpx
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from calendar_booking.booking import Booked, BookingOrchestrator, BookingResult, Failed
from calendar_booking.config import settings
from calendar_booking.errors import ConfigurationError, ErrorKind
from calendar_booking.models.booking import BookingResponse, ErrorResponse

log = logging.getLogger("calendar_booking.app")

_START_TIME = time.time()

CALENDAR_ERROR = "Kalender-Fehler"


async def get_orchestrator() -> AsyncIterator[BookingOrchestrator]:
    """Per-request orchestrator with its own HTTP client.

    Raises ConfigurationError if the calendar id is missing. The service
    account credential is parsed later by the orchestrator, after the body
    has been validated.
    """
    config = settings.booking_config()
    async with httpx.AsyncClient() as client:
        yield BookingOrchestrator.for_google(config, client)


async def _read_body(request: Request) -> dict[str, Any]:
    """JSON object body, or ``{}`` when the body is empty, invalid or not an object."""
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _result_response(result: BookingResult) -> JSONResponse:
    if isinstance(result, Booked):
        payload = BookingResponse(event_id=result.event_id, link=result.link)
        return JSONResponse(payload.model_dump(by_alias=True))

    if result.kind is ErrorKind.CLIENT_INPUT:
        status_code = 400
        payload = ErrorResponse(error=result.detail)
    elif result.kind is ErrorKind.CONFLICT:
        status_code = 409
        payload = ErrorResponse(
            error=result.detail, busy=[interval.to_dict() for interval in result.busy]
        )
    else:
        status_code = 500
        payload = ErrorResponse(error=CALENDAR_ERROR, detail=result.detail)

    return JSONResponse(payload.model_dump(exclude_none=True), status_code=status_code)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Calendar Booking",
        description="Book a Google Calendar slot via a service account if it is free",
        version="0.1.0",
    )

    for warning in settings.validate_startup():
        log.warning(warning)

    # ── Error handlers ─────────────────────────────────────────

    @app.exception_handler(ConfigurationError)
    async def configuration_error(request: Request, exc: ConfigurationError) -> JSONResponse:
        log.error("Configuration error: %s", exc)
        return JSONResponse(
            ErrorResponse(error=CALENDAR_ERROR, detail=str(exc)).model_dump(exclude_none=True),
            status_code=500,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        # Starlette sets the Allow header on 405s from the route's methods.
        if exc.status_code == 405:
            return JSONResponse(
                {"error": "Method not allowed"}, status_code=405, headers=exc.headers
            )
        return JSONResponse(
            {"error": str(exc.detail)}, status_code=exc.status_code, headers=exc.headers
        )

    # ── Health check ───────────────────────────────────────────

    @app.get("/health")
    async def health() -> JSONResponse:
        """Lightweight health check, confirms the event loop is responsive."""
        uptime = round(time.time() - _START_TIME, 1)
        return JSONResponse({"status": "ok", "uptime": uptime})

    # ── Booking ────────────────────────────────────────────────

    @app.post("/api/calendar-book")
    async def calendar_book(
        request: Request,
        orchestrator: BookingOrchestrator = Depends(get_orchestrator),
    ) -> JSONResponse:
        """Check the requested window and insert the event if it is free."""
        body = await _read_body(request)

        try:
            result = await orchestrator.book(body)
        except Exception as exc:
            log.exception("Unexpected booking failure")
            result = Failed(kind=ErrorKind.UPSTREAM, detail=str(exc))

        return _result_response(result)

    return app


# ── Module-level app instance for uvicorn ──────────────────────

app = create_app()


if __name__ == "__main__":
    import uvicorn

    log_config = uvicorn.config.LOGGING_CONFIG
    log_config["formatters"]["default"]["fmt"] = (
        "%(asctime)s %(name)-12s %(levelname)-8s %(message)s"
    )

    uvicorn.run(
        "calendar_booking.app:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_config=log_config,
    )
