# agentvoice/api/services/rpc_client.py
from __future__ import annotations

import itertools
import logging
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError

from agentvoice.errors import RpcCallError
from agentvoice.runtime.schemas import (
    JSONRPC_VERSION,
    AgentSummary,
    ListAgentsResult,
    ProcessTextResult,
)

log = logging.getLogger(__name__)


class AgentRuntimeClient:
    """Blocking JSON-RPC client for the agent runtime's single POST endpoint."""

    def __init__(
        self,
        url: str,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = 60.0,
    ):
        self.url = url
        self.timeout = timeout
        self._session = session or requests.Session()
        self._ids = itertools.count(1)

    def call(self, method: str, params: Optional[Dict[str, Any]] = None) -> Any:
        req_id = next(self._ids)
        envelope = {"jsonrpc": JSONRPC_VERSION, "method": method, "params": params or {}, "id": req_id}

        try:
            r = self._session.post(self.url, json=envelope, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            log.error("event=rpc_client.unreachable method=%s error=%s", method, e)
            raise RpcCallError(f"Failed to call agent runtime: {e}") from e

        if not 200 <= r.status_code < 300:
            log.error("event=rpc_client.http_error method=%s status=%s", method, r.status_code)
            raise RpcCallError(f"Agent runtime returned HTTP {r.status_code}", status=r.status_code)

        try:
            data = r.json()
        except ValueError as e:
            log.error("event=rpc_client.parse_error method=%s raw=%s", method, r.text)
            raise RpcCallError("Error parsing agent runtime response") from e

        if not isinstance(data, dict) or data.get("id") != req_id:
            raise RpcCallError(f"Agent runtime response does not match request id {req_id}")

        err = data.get("error")
        if err is not None:
            code = err.get("code") if isinstance(err, dict) else None
            message = err.get("message") if isinstance(err, dict) else str(err)
            detail = err.get("data") if isinstance(err, dict) else None
            log.error("event=rpc_client.rpc_error method=%s code=%s message=%s data=%s", method, code, message, detail)
            raise RpcCallError(f"Agent runtime error {code}: {message}", code=code, data=detail)

        if "result" not in data:
            raise RpcCallError("Agent runtime response has neither result nor error")
        return data["result"]

    def list_agents(self) -> List[AgentSummary]:
        result = self.call("list_agents")
        try:
            parsed = ListAgentsResult.model_validate(result)
            return [AgentSummary.model_validate(a) for a in parsed.agents]
        except ValidationError as e:
            raise RpcCallError(f"Error parsing list_agents result: {e}") from e

    def process_text(self, agent_id: str, user_text: str) -> ProcessTextResult:
        # no conversation_history: the gateway is stateless per call
        result = self.call("process_text", {"agent_id": agent_id, "user_text": user_text})
        try:
            return ProcessTextResult.model_validate(result)
        except ValidationError as e:
            raise RpcCallError(f"Error parsing process_text result: {e}") from e
