# agentvoice/api/main.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

# ---- Local imports ----------------------------------------------------------
from agentvoice.api.errors import register_error_handlers
from agentvoice.api.health import router as health_router
from agentvoice.api.routes_agents import router as agents_router
from agentvoice.api.services.artifact_store import ArtifactStore
from agentvoice.api.services.pipeline import AgentPipeline
from agentvoice.api.services.rpc_client import AgentRuntimeClient
from agentvoice.config import Settings, build_http_session, load_settings
from agentvoice.providers.elevenlabs_client import ElevenLabsClient, ElevenLabsConfig

log = logging.getLogger(__name__)


def build_pipeline(settings: Settings) -> AgentPipeline:
    """Wire the gateway's collaborators around one shared HTTP session."""
    session = build_http_session()
    runtime = AgentRuntimeClient(settings.MCP_SERVER_URL, session=session, timeout=settings.HTTP_TIMEOUT_SECS)
    speech = ElevenLabsClient(ElevenLabsConfig(settings), session=session)
    store = ArtifactStore(settings.audio_dir, url_prefix=settings.AUDIO_URL_PREFIX)
    return AgentPipeline(runtime=runtime, speech=speech, store=store)


def create_app(settings: Optional[Settings] = None, pipeline: Optional[AgentPipeline] = None) -> FastAPI:
    settings = settings or load_settings()
    pipeline = pipeline or build_pipeline(settings)

    # StaticFiles checks the directory at mount time, so create it up front
    audio_dir = pipeline.store.ensure_root()

    # ---- Lifespan: startup/shutdown --------------------------------------------
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log.info("event=gateway.startup audio_dir=%s upstream=%s", audio_dir, settings.MCP_SERVER_URL)
        yield

    # ---- App --------------------------------------------------------------------
    app = FastAPI(title="agentvoice gateway", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.pipeline = pipeline

    # ---- CORS -------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    # ---- Routers ----------------------------------------------------------------
    app.include_router(health_router)
    app.include_router(agents_router, tags=["agents"])

    # Stored replies: GET /public/audio/<name>
    app.mount(pipeline.store.url_prefix, StaticFiles(directory=str(audio_dir)), name="audio")

    return app
