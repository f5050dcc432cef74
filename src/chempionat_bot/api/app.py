"""FastAPI application bound to an ``AppContext``.

The lifespan runs the context's startup sequence before the first request,
so a failed bot registration aborts server startup.

Usage::

    from chempionat_bot.api.app import create_app

    app = create_app(context)
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response

from chempionat_bot import __version__
from chempionat_bot.core.context import AppContext
from chempionat_bot.observability.logger import new_trace_id, set_trace_id

from .errors import TRACE_HEADER, install_exception_handlers

logger = logging.getLogger(__name__)


def create_app(context: AppContext) -> FastAPI:
    """Create the HTTP application for *context*."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await context.start()
        try:
            yield
        finally:
            await context.stop()

    app = FastAPI(
        title="Chempionat-X Bot",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.context = context

    install_exception_handlers(app)

    @app.middleware("http")
    async def trace_id_middleware(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        incoming = request.headers.get(TRACE_HEADER)
        if incoming:
            set_trace_id(incoming)
            trace_id = incoming
        else:
            trace_id = new_trace_id()
        request.state.trace_id = trace_id
        response = await call_next(request)
        response.headers[TRACE_HEADER] = trace_id
        return response

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app
