# agentvoice/runtime/schemas.py
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

JSONRPC_VERSION = "2.0"

# JSON-RPC 2.0 error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


# ---------- envelopes ----------
class RpcRequest(BaseModel):
    # `jsonrpc` is checked by the dispatcher so a wrong version gets -32600, not a parse failure
    jsonrpc: Any = None
    method: str
    params: Optional[Any] = None
    id: Any = None


class RpcErrorObject(BaseModel):
    code: int
    message: str
    data: Optional[Any] = None


# ---------- method params ----------
class ConversationTurn(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class ListAgentsParams(BaseModel):
    model_config = ConfigDict(extra="ignore")


class ProcessTextParams(BaseModel):
    agent_id: str
    user_text: str
    conversation_history: Optional[List[ConversationTurn]] = None


# ---------- method results ----------
class AgentSummary(BaseModel):
    """The slice of an agent the gateway exposes to clients."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    description: str


class ListAgentsResult(BaseModel):
    agents: List[Dict[str, Any]]


class ProcessingMetadata(BaseModel):
    model: str
    tokens_used: Optional[int] = Field(default=None, ge=0)
    processing_time_ms: int = Field(..., ge=0)
    confidence: float


class ProcessTextResult(BaseModel):
    agent_id: str
    reply_text: str
    metadata: ProcessingMetadata
