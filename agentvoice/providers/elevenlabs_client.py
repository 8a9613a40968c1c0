import logging
from typing import Optional

import requests

from agentvoice.config import Settings
from agentvoice.errors import SpeechError

log = logging.getLogger(__name__)

STT_MODEL_ID = "scribe_v1"
STT_LANGUAGE_CODE = "eng"
TTS_MODEL_ID = "eleven_multilingual_v2"
TTS_VOICE_ID = "21m00Tcm4TlvDq8ikWAM"  # "Rachel"
TTS_OUTPUT_FORMAT = "mp3_44100_128"
DEFAULT_UPLOAD_NAME = "audio.mp3"


class ElevenLabsConfig:
    def __init__(self, settings: Settings) -> None:
        self.api_key = settings.ELEVENLABS_API_KEY
        self.base = settings.ELEVENLABS_API_BASE.rstrip("/")
        self.timeout = settings.HTTP_TIMEOUT_SECS

        if not self.api_key:
            raise RuntimeError("ELEVENLABS_API_KEY missing")

    @property
    def stt_url(self) -> str:
        return f"{self.base}/speech-to-text"

    def tts_url(self, voice_id: str = TTS_VOICE_ID) -> str:
        return f"{self.base}/text-to-speech/{voice_id}"


class ElevenLabsClient:
    """Speech-to-text and text-to-speech against ElevenLabs. The two calls share nothing but the session."""

    def __init__(self, cfg: ElevenLabsConfig, session: Optional[requests.Session] = None):
        self.cfg = cfg
        self._session = session or requests.Session()
        self._headers = {"xi-api-key": self.cfg.api_key}

    def transcribe(self, audio_bytes: bytes, filename_hint: Optional[str] = None) -> str:
        """
        Return the transcript of `audio_bytes`.
        A response without a usable `text` field yields "" rather than an error.
        """
        filename = filename_hint or DEFAULT_UPLOAD_NAME
        files = {"file": (filename, audio_bytes, "audio/mpeg")}
        data = {
            "model_id": STT_MODEL_ID,
            "language_code": STT_LANGUAGE_CODE,
            "tag_audio_events": "true",
        }
        try:
            r = self._session.post(
                self.cfg.stt_url,
                headers=self._headers,
                files=files,
                data=data,
                timeout=self.cfg.timeout,
            )
        except requests.exceptions.RequestException as e:
            log.error("provider=elevenlabs event=stt.unreachable error=%s", e)
            raise SpeechError(f"Failed to call STT service: {e}") from e

        if not 200 <= r.status_code < 300:
            body = r.text or "Unknown error"
            log.error("provider=elevenlabs event=stt.rejected status=%s body=%s", r.status_code, body)
            raise SpeechError(
                f"Error from STT service ({r.status_code}): {body}",
                status=r.status_code,
                body=body,
            )

        try:
            payload = r.json()
        except ValueError as e:
            log.error("provider=elevenlabs event=stt.parse_error body=%s", r.text)
            raise SpeechError("Failed to parse STT response", status=r.status_code, body=r.text) from e

        text = payload.get("text") if isinstance(payload, dict) else None
        if not isinstance(text, str):
            text = ""
        log.info("provider=elevenlabs event=stt.ok chars=%s", len(text))
        return text

    def synthesize(self, text: str) -> bytes:
        body = {"text": text, "model_id": TTS_MODEL_ID}
        try:
            r = self._session.post(
                self.cfg.tts_url(),
                headers={**self._headers, "Content-Type": "application/json"},
                params={"output_format": TTS_OUTPUT_FORMAT},
                json=body,
                timeout=self.cfg.timeout,
            )
        except requests.exceptions.RequestException as e:
            log.error("provider=elevenlabs event=tts.unreachable error=%s", e)
            raise SpeechError(f"Failed to call TTS service: {e}") from e

        if not 200 <= r.status_code < 300:
            err = r.text or "Unknown error"
            log.error("provider=elevenlabs event=tts.rejected status=%s body=%s", r.status_code, err)
            raise SpeechError(
                f"Error from TTS service ({r.status_code}): {err}",
                status=r.status_code,
                body=err,
            )

        log.info("provider=elevenlabs event=tts.ok bytes=%s", len(r.content))
        return r.content
