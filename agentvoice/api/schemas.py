# agentvoice/api/schemas.py
from __future__ import annotations

from pydantic import BaseModel, Field


class InputTextRequest(BaseModel):
    agent_id: str = Field(..., description="Registry id, e.g. agent_001")
    user_text: str


class AgentReplyResponse(BaseModel):
    reply_text: str
    audio_url: str = Field(..., description="Gateway-relative URL of the stored audio")
