# agentvoice/api/services/pipeline.py
"""
Gateway orchestration.

Text:   process_text (RPC) -> synthesize -> store
Audio:  validate -> transcribe -> process_text (RPC) -> synthesize -> store

Every stage waits for the previous one. The first failing stage raises a
PipelineError subclass and nothing after it runs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol

from agentvoice.api.metrics import StageCounters
from agentvoice.api.services.artifact_store import ArtifactStore
from agentvoice.errors import (
    BadRequestError,
    RpcCallError,
    SpeechError,
    SpeechStageError,
    StorageError,
    UpstreamAgentError,
)
from agentvoice.runtime.schemas import AgentSummary, ProcessTextResult

log = logging.getLogger(__name__)


class AgentRuntime(Protocol):
    def list_agents(self) -> List[AgentSummary]: ...
    def process_text(self, agent_id: str, user_text: str) -> ProcessTextResult: ...


class Speech(Protocol):
    def transcribe(self, audio_bytes: bytes, filename_hint: Optional[str] = None) -> str: ...
    def synthesize(self, text: str) -> bytes: ...


@dataclass(frozen=True)
class AgentReply:
    reply_text: str
    audio_reference: str


class AgentPipeline:
    def __init__(self, runtime: AgentRuntime, speech: Speech, store: ArtifactStore):
        self.runtime = runtime
        self.speech = speech
        self.store = store
        self.counters = StageCounters()

    # ---- stages ----------------------------------------------------------------
    def _ask_agent(self, agent_id: str, user_text: str) -> str:
        try:
            result = self.runtime.process_text(agent_id, user_text)
        except RpcCallError as e:
            self.counters.record("agent", "fail")
            log.error("event=pipeline.agent_failed agent_id=%s code=%s status=%s error=%s", agent_id, e.code, e.status, e)
            raise UpstreamAgentError(f"Error from MCP service: {e}") from e
        self.counters.record("agent", "ok")
        log.info("event=pipeline.agent_ok agent_id=%s model=%s", agent_id, result.metadata.model)
        return result.reply_text

    def _synthesize(self, agent_id: str, text: str) -> bytes:
        try:
            audio = self.speech.synthesize(text)
        except SpeechError as e:
            self.counters.record("tts", "fail")
            log.error("event=pipeline.tts_failed agent_id=%s status=%s", agent_id, e.status)
            raise SpeechStageError(str(e)) from e
        self.counters.record("tts", "ok")
        return audio

    def _store(self, agent_id: str, audio: bytes) -> str:
        try:
            artifact = self.store.save(audio, ext="mp3")
        except OSError as e:
            self.counters.record("storage", "fail")
            log.error("event=pipeline.storage_failed agent_id=%s error=%s", agent_id, e)
            raise StorageError("Failed to save audio file") from e
        self.counters.record("storage", "ok")
        return artifact.reference

    def _transcribe(self, agent_id: str, audio_bytes: bytes, filename: Optional[str]) -> str:
        try:
            text = self.speech.transcribe(audio_bytes, filename)
        except SpeechError as e:
            self.counters.record("stt", "fail")
            log.error("event=pipeline.stt_failed agent_id=%s status=%s", agent_id, e.status)
            raise SpeechStageError(str(e)) from e
        self.counters.record("stt", "ok")
        return text

    # ---- entry operations --------------------------------------------------------
    def list_agents(self) -> List[AgentSummary]:
        try:
            return self.runtime.list_agents()
        except RpcCallError as e:
            log.error("event=pipeline.list_agents_failed status=%s error=%s", e.status, e)
            raise UpstreamAgentError("Error from MCP service") from e

    def process_text_flow(self, agent_id: str, user_text: str) -> AgentReply:
        reply_text = self._ask_agent(agent_id, user_text)
        audio = self._synthesize(agent_id, reply_text)
        reference = self._store(agent_id, audio)
        self.counters.reply_completed()
        return AgentReply(reply_text=reply_text, audio_reference=reference)

    def process_audio_flow(
        self,
        audio_bytes: Optional[bytes],
        filename: Optional[str],
        agent_id: Optional[str],
    ) -> AgentReply:
        if not audio_bytes or not agent_id:
            raise BadRequestError("Missing 'audio_file' or 'agent_id'")
        log.info("event=pipeline.audio_received agent_id=%s bytes=%s", agent_id, len(audio_bytes))
        user_text = self._transcribe(agent_id, audio_bytes, filename)
        return self.process_text_flow(agent_id, user_text)
