"""Boundary responder: uncaught request failures become JSON error bodies.

Every body has exactly four keys::

    {"timestamp": "...", "status": 400, "error": "Bad Request", "message": "..."}

``ValueError`` is treated as a client input error and its message is
returned verbatim.  Anything else is reported as a generic 500; the
detail is logged, never sent to the client.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from chempionat_bot.core.ids import utc_now

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "An internal error occurred"
TRACE_HEADER = "X-Trace-Id"


def build_error_body(message: str, status: HTTPStatus) -> dict[str, Any]:
    """Return the four-key error mapping for *status*."""
    return {
        "timestamp": utc_now().isoformat(),
        "status": status.value,
        "error": status.phrase,
        "message": message,
    }


def error_response(message: str, status: HTTPStatus) -> JSONResponse:
    return JSONResponse(
        status_code=status.value,
        content=build_error_body(message, status),
    )


def install_exception_handlers(app: FastAPI) -> None:
    """Register the argument-error and catch-all handlers on *app*."""

    @app.exception_handler(ValueError)
    async def illegal_argument_handler(
        request: Request, exc: ValueError,
    ) -> JSONResponse:
        logger.error("Illegal argument exception: %s", exc)
        return error_response(str(exc), HTTPStatus.BAD_REQUEST)

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request, exc: Exception,
    ) -> JSONResponse:
        logger.error(
            "Unexpected exception on %s %s",
            request.method,
            request.url.path,
            exc_info=exc,
        )
        response = error_response(
            INTERNAL_ERROR_MESSAGE, HTTPStatus.INTERNAL_SERVER_ERROR,
        )
        # Runs outside the trace middleware, so echo its header here.
        trace_id = getattr(request.state, "trace_id", None)
        if trace_id:
            response.headers[TRACE_HEADER] = trace_id
        return response
