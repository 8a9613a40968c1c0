# agentvoice/runtime/jsonrpc.py
"""
JSON-RPC 2.0 dispatcher for the agent runtime.

One request in, one response out, always carrying the request's `id`:
  1) envelope + version check          -> -32600
  2) method lookup                     -> -32601
  3) params -> typed model             -> -32602
  4) agent lookup                      -> -32602
  5) generation                        -> -32603 (with diagnostic `data`)
Each step returns before the next one runs.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, Optional, Protocol, Sequence, Tuple, Type

from pydantic import BaseModel, ValidationError

from agentvoice.core.agents import AgentNotFound, AgentRegistry
from agentvoice.errors import GenerationError
from agentvoice.runtime.schemas import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    JSONRPC_VERSION,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    ConversationTurn,
    ListAgentsParams,
    ListAgentsResult,
    ProcessingMetadata,
    ProcessTextParams,
    ProcessTextResult,
    RpcErrorObject,
    RpcRequest,
)

log = logging.getLogger(__name__)

CONFIDENCE = 0.95


class TextGenerator(Protocol):
    def generate(
        self,
        system_prompt: str,
        history: Sequence[ConversationTurn],
        user_text: str,
        model: str,
    ) -> Any: ...


class RpcFault(Exception):
    """Raised inside a method handler to end the request with an error object."""

    def __init__(self, code: int, message: str, data: Any = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data


def _result(req_id: Any, result: Any) -> Dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "result": result, "id": req_id}


def _error(req_id: Any, code: int, message: str, data: Any = None) -> Dict[str, Any]:
    err = RpcErrorObject(code=code, message=message, data=data)
    return {
        "jsonrpc": JSONRPC_VERSION,
        "error": err.model_dump(exclude_none=True),
        "id": req_id,
    }


Handler = Callable[[BaseModel], Dict[str, Any]]


class RpcDispatcher:
    def __init__(self, registry: AgentRegistry, generator: TextGenerator):
        self.registry = registry
        self.generator = generator
        # method -> (params model, handler); params are validated before the handler sees them
        self._methods: Dict[str, Tuple[Type[BaseModel], Handler, bool]] = {
            "list_agents": (ListAgentsParams, self._list_agents, False),
            "process_text": (ProcessTextParams, self._process_text, True),
        }

    @property
    def methods(self) -> Tuple[str, ...]:
        return tuple(self._methods)

    # ---- entry points ----------------------------------------------------------
    def handle_raw(self, body: bytes) -> Dict[str, Any]:
        try:
            payload = json.loads(body)
        except (ValueError, UnicodeDecodeError) as e:
            log.warning("event=rpc.parse_error error=%s", e)
            return _error(None, PARSE_ERROR, "Parse error", {"details": str(e)})
        return self.handle(payload)

    def handle(self, payload: Any) -> Dict[str, Any]:
        req_id = payload.get("id") if isinstance(payload, dict) else None
        try:
            request = RpcRequest.model_validate(payload)
        except ValidationError as e:
            log.warning("event=rpc.invalid_request id=%s", req_id)
            return _error(req_id, INVALID_REQUEST, "Invalid Request", {"details": str(e)})

        log.info("event=rpc.received method=%s id=%s", request.method, request.id)

        if request.jsonrpc != JSONRPC_VERSION:
            log.warning("event=rpc.bad_version method=%s version=%r", request.method, request.jsonrpc)
            return _error(request.id, INVALID_REQUEST, "Invalid Request: jsonrpc must be '2.0'")

        entry = self._methods.get(request.method)
        if entry is None:
            log.warning("event=rpc.method_not_found method=%s", request.method)
            return _error(request.id, METHOD_NOT_FOUND, f"Method not found: {request.method}")

        params_model, handler, params_required = entry
        try:
            params = self._parse_params(params_model, request.params, params_required)
            return _result(request.id, handler(params))
        except RpcFault as fault:
            return _error(request.id, fault.code, fault.message, fault.data)

    # ---- helpers ---------------------------------------------------------------
    def _parse_params(self, model: Type[BaseModel], raw: Optional[Any], required: bool) -> BaseModel:
        if raw is None:
            if required:
                raise RpcFault(INVALID_PARAMS, "Invalid params: agent_id and user_text are required")
            return model()
        try:
            return model.model_validate(raw)
        except ValidationError as e:
            if not required:
                # params are ignored by methods that take none
                return model()
            log.warning("event=rpc.invalid_params model=%s errors=%s", model.__name__, e.error_count())
            raise RpcFault(INVALID_PARAMS, f"Invalid params: {e}") from e

    # ---- methods ---------------------------------------------------------------
    def _list_agents(self, params: ListAgentsParams) -> Dict[str, Any]:
        agents = [a.to_dict() for a in self.registry.list()]
        return ListAgentsResult(agents=agents).model_dump()

    def _process_text(self, params: ProcessTextParams) -> Dict[str, Any]:
        try:
            agent = self.registry.find(params.agent_id)
        except AgentNotFound as e:
            log.warning("event=rpc.agent_not_found agent_id=%s", params.agent_id)
            raise RpcFault(INVALID_PARAMS, str(e)) from e

        try:
            generation = self.generator.generate(
                system_prompt=agent.system_prompt,
                history=params.conversation_history or [],
                user_text=params.user_text,
                model=agent.model,
            )
        except GenerationError as e:
            log.error(
                "event=rpc.generation_failed method=process_text agent_id=%s error_type=%s data=%s",
                agent.id,
                e.__class__.__name__,
                e.data(),
            )
            raise RpcFault(INTERNAL_ERROR, e.message, e.data()) from e

        result = ProcessTextResult(
            agent_id=agent.id,
            reply_text=generation.text,
            metadata=ProcessingMetadata(
                model=agent.model,
                tokens_used=generation.tokens_used,
                processing_time_ms=generation.elapsed_ms,
                confidence=CONFIDENCE,
            ),
        )
        log.info(
            "event=rpc.process_text.ok agent_id=%s model=%s latency_ms=%s",
            agent.id,
            agent.model,
            generation.elapsed_ms,
        )
        return result.model_dump()
