# agentvoice/api/health.py
import logging

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

log = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", response_class=PlainTextResponse)
def health() -> str:
    """Liveness only; no upstream checks."""
    log.debug("event=health.check")
    return "OK"


@router.get("/metrics")
def metrics(request: Request):
    return request.app.state.pipeline.counters.snapshot()
