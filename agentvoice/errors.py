# agentvoice/errors.py
"""
Failure taxonomy shared by the gateway and the agent runtime.

Provider adapters raise their own errors (GenerationError, SpeechError,
RpcCallError). The gateway pipeline wraps them into a PipelineError whose
`status_code` is what the HTTP boundary returns.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


# ---- provider / upstream errors --------------------------------------------

class GenerationError(RuntimeError):
    """Base for failures of the generative-model call."""

    message = "Internal error: Gemini API request failed"

    def data(self) -> Dict[str, Any]:
        return {"details": str(self)}


class GeminiUnreachable(GenerationError):
    """Connection error or timeout while talking to the provider."""


class GeminiRejected(GenerationError):
    message = "Gemini API error"

    def __init__(self, status: int, body: str):
        super().__init__(f"Gemini API error ({status}): {body}")
        self.status = status
        self.body = body

    def data(self) -> Dict[str, Any]:
        return {"status": self.status, "body": self.body}


class GeminiMalformedResponse(GenerationError):
    message = "Internal error: Failed to parse Gemini response"

    def __init__(self, details: str, raw: str):
        super().__init__(details)
        self.raw = raw

    def data(self) -> Dict[str, Any]:
        return {"details": str(self), "raw_response": self.raw}


class SpeechError(RuntimeError):
    """Voice provider failure; `status`/`body` are set when a response arrived."""

    def __init__(self, message: str, status: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status = status
        self.body = body


class RpcCallError(RuntimeError):
    """The agent runtime could not be reached or answered with an error object."""

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        data: Any = None,
        status: Optional[int] = None,
    ):
        super().__init__(message)
        self.code = code
        self.data = data
        self.status = status


# ---- pipeline errors (mapped to HTTP status at the boundary) ----------------

class PipelineError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequestError(PipelineError):
    status_code = 400


class UpstreamAgentError(PipelineError):
    pass


class SpeechStageError(PipelineError):
    pass


class StorageError(PipelineError):
    pass


__all__ = [
    "GenerationError",
    "GeminiUnreachable",
    "GeminiRejected",
    "GeminiMalformedResponse",
    "SpeechError",
    "RpcCallError",
    "PipelineError",
    "BadRequestError",
    "UpstreamAgentError",
    "SpeechStageError",
    "StorageError",
]
