# agentvoice/api/routes_agents.py
from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from agentvoice.api.schemas import AgentReplyResponse, InputTextRequest
from agentvoice.api.services.pipeline import AgentPipeline, AgentReply
from agentvoice.runtime.schemas import AgentSummary

log = logging.getLogger(__name__)

router = APIRouter()


def get_pipeline(request: Request) -> AgentPipeline:
    """
    Pipeline built once in create_app().
    Usage in routes:
        pipeline: AgentPipeline = Depends(get_pipeline)
    """
    return request.app.state.pipeline


def _to_response(reply: AgentReply) -> AgentReplyResponse:
    return AgentReplyResponse(reply_text=reply.reply_text, audio_url=reply.audio_reference)


# -------- endpoints --------
@router.get("/agents", response_model=List[AgentSummary])
def list_agents(pipeline: AgentPipeline = Depends(get_pipeline)):
    agents = pipeline.list_agents()
    log.info("event=agents.listed count=%s", len(agents))
    return agents


@router.post("/input/text", status_code=201, response_model=AgentReplyResponse)
def input_text(payload: InputTextRequest, pipeline: AgentPipeline = Depends(get_pipeline)):
    log.info("event=input.text agent_id=%s", payload.agent_id)
    reply = pipeline.process_text_flow(payload.agent_id, payload.user_text)
    return _to_response(reply)


@router.post("/input/audio", status_code=201, response_model=AgentReplyResponse)
async def input_audio(request: Request, pipeline: AgentPipeline = Depends(get_pipeline)):
    """
    Multipart fields:
      - audio_file: binary upload (original filename optional)
      - agent_id:   text
    Missing either field -> 400 from the pipeline before any upstream call.
    """
    audio_bytes: Optional[bytes] = None
    filename: Optional[str] = None
    async with request.form() as form:
        upload = form.get("audio_file")
        agent_id = form.get("agent_id")
        if isinstance(upload, UploadFile):
            audio_bytes = await upload.read()
            filename = upload.filename or None
    if not isinstance(agent_id, str):
        agent_id = None

    log.info("event=input.audio agent_id=%s filename=%s", agent_id, filename)
    reply = await run_in_threadpool(pipeline.process_audio_flow, audio_bytes, filename, agent_id)
    return _to_response(reply)
