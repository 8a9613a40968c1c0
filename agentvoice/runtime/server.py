# agentvoice/runtime/server.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from agentvoice.config import Settings, build_http_session, load_settings
from agentvoice.core.agents import default_registry
from agentvoice.providers.gemini_client import GeminiClient, GeminiConfig
from agentvoice.runtime.jsonrpc import RpcDispatcher

log = logging.getLogger(__name__)


def build_dispatcher(settings: Settings) -> RpcDispatcher:
    client = GeminiClient(GeminiConfig(settings), session=build_http_session())
    return RpcDispatcher(default_registry(), client)


def create_app(settings: Optional[Settings] = None, dispatcher: Optional[RpcDispatcher] = None) -> FastAPI:
    settings = settings or load_settings()
    dispatcher = dispatcher or build_dispatcher(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log.info("event=runtime.startup agents=%s", len(dispatcher.registry))
        log.info("event=runtime.startup methods=%s", ",".join(dispatcher.methods))
        yield

    app = FastAPI(title="agentvoice runtime", version="0.1.0", lifespan=lifespan)
    app.state.dispatcher = dispatcher

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.post("/")
    async def handle_jsonrpc(request: Request):
        """Single JSON-RPC endpoint; errors travel inside the envelope with HTTP 200."""
        body = await request.body()
        # generation blocks on the provider call
        response = await run_in_threadpool(request.app.state.dispatcher.handle_raw, body)
        return JSONResponse(content=response)

    return app
