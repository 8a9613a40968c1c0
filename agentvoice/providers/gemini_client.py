import time
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import requests
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from agentvoice.config import Settings
from agentvoice.errors import GeminiMalformedResponse, GeminiRejected, GeminiUnreachable
from agentvoice.runtime.schemas import ConversationTurn

log = logging.getLogger(__name__)

PLACEHOLDER_REPLY = "Sorry, I couldn't generate a response."

# ConversationTurn.role -> Gemini content role
_ROLE_MAP = {"user": "user", "assistant": "model"}


# ---- response schema (only the fields we read) ------------------------------
class _Part(BaseModel):
    text: Optional[str] = None


class _Content(BaseModel):
    role: Optional[str] = None
    parts: List[_Part] = Field(default_factory=list)


class _Candidate(BaseModel):
    content: Optional[_Content] = None


class _UsageMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    prompt_token_count: Optional[int] = Field(default=None, alias="promptTokenCount")
    candidates_token_count: Optional[int] = Field(default=None, alias="candidatesTokenCount")
    total_token_count: Optional[int] = Field(default=None, alias="totalTokenCount")


class GeminiResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    candidates: List[_Candidate] = Field(default_factory=list)
    usage_metadata: Optional[_UsageMetadata] = Field(default=None, alias="usageMetadata")


@dataclass
class Generation:
    text: str
    tokens_used: Optional[int]
    elapsed_ms: int


class GeminiConfig:
    def __init__(self, settings: Settings) -> None:
        self.api_key = settings.GEMINI_API_KEY
        self.base = settings.GEMINI_API_BASE.rstrip("/")
        self.timeout = settings.HTTP_TIMEOUT_SECS

        if not self.api_key:
            raise RuntimeError("GEMINI_API_KEY missing")

    def generate_url(self, model: str) -> str:
        return f"{self.base}/models/{model}:generateContent"


class GeminiClient:
    """Gemini generateContent client. One call per request, no retries."""

    def __init__(self, cfg: GeminiConfig, session: Optional[requests.Session] = None):
        self.cfg = cfg
        self._session = session or requests.Session()
        self._headers = {
            "x-goog-api-key": self.cfg.api_key,
            "Content-Type": "application/json",
        }

    def build_request(
        self,
        system_prompt: str,
        history: Sequence[ConversationTurn],
        user_text: str,
    ) -> Dict[str, Any]:
        contents = [
            {"role": _ROLE_MAP[turn.role], "parts": [{"text": turn.content}]}
            for turn in history
        ]
        contents.append({"role": "user", "parts": [{"text": user_text}]})
        return {
            "contents": contents,
            "system_instruction": {"parts": [{"text": system_prompt}]},
        }

    def _extract_text(self, data: GeminiResponse) -> str:
        if not data.candidates:
            return PLACEHOLDER_REPLY
        content = data.candidates[0].content
        if content is None or not content.parts:
            return PLACEHOLDER_REPLY
        text = content.parts[0].text
        return text if text else PLACEHOLDER_REPLY

    def generate(
        self,
        system_prompt: str,
        history: Sequence[ConversationTurn],
        user_text: str,
        model: str,
    ) -> Generation:
        body = self.build_request(system_prompt, history, user_text)
        start = time.monotonic()

        try:
            r = self._session.post(
                self.cfg.generate_url(model),
                headers=self._headers,
                json=body,
                timeout=self.cfg.timeout,
            )
        except requests.exceptions.RequestException as e:
            log.error("provider=gemini event=llm.unreachable model=%s error=%s", model, e)
            raise GeminiUnreachable(str(e)) from e

        status = r.status_code
        raw = r.text
        if not 200 <= status < 300:
            log.error("provider=gemini event=llm.rejected model=%s status=%s body=%s", model, status, raw)
            raise GeminiRejected(status, raw)

        try:
            data = GeminiResponse.model_validate_json(raw)
        except ValidationError as e:
            log.error("provider=gemini event=llm.parse_error model=%s raw=%s", model, raw)
            raise GeminiMalformedResponse(str(e), raw) from e

        elapsed_ms = int((time.monotonic() - start) * 1000)
        text = self._extract_text(data)
        tokens = data.usage_metadata.total_token_count if data.usage_metadata else None

        log.info(
            "provider=gemini event=llm.ok model=%s latency_ms=%s tokens=%s",
            model,
            elapsed_ms,
            tokens,
        )
        return Generation(text=text, tokens_used=tokens, elapsed_ms=elapsed_ms)
