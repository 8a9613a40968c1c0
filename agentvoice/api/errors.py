# agentvoice/api/errors.py
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse

from agentvoice.errors import PipelineError

log = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Error bodies are a bare JSON string, as clients of the gateway expect."""

    @app.exception_handler(PipelineError)
    async def on_pipeline_error(request: Request, exc: PipelineError):
        log.warning(
            "event=http.error path=%s status=%s kind=%s message=%s",
            request.url.path,
            exc.status_code,
            exc.__class__.__name__,
            exc.message,
        )
        return JSONResponse(status_code=exc.status_code, content=exc.message)

    @app.exception_handler(RequestValidationError)
    async def on_request_validation_error(request: Request, exc: RequestValidationError):
        fields = ", ".join(".".join(str(p) for p in e.get("loc", ())) for e in exc.errors())
        message = f"Request validation failed: {fields}" if fields else "Request validation failed"
        log.warning("event=http.validation_error path=%s fields=%s", request.url.path, fields)
        return JSONResponse(status_code=422, content=message)
