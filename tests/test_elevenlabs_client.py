import pytest
import requests

from agentvoice.config import Settings
from agentvoice.errors import SpeechError
from agentvoice.providers.elevenlabs_client import (
    STT_MODEL_ID,
    TTS_MODEL_ID,
    TTS_OUTPUT_FORMAT,
    ElevenLabsClient,
    ElevenLabsConfig,
)


class DummyResp:
    def __init__(self, status_code=200, payload=None, text="", content=b""):
        self.status_code = status_code
        self._payload = payload
        self.text = text
        self.content = content

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


def _client():
    return ElevenLabsClient(ElevenLabsConfig(Settings(ELEVENLABS_API_KEY="xi-test")))


def test_missing_key_raises():
    with pytest.raises(RuntimeError):
        ElevenLabsConfig(Settings(ELEVENLABS_API_KEY=""))


def test_transcribe_posts_audio_and_returns_text():
    client = _client()
    seen = {}

    def fake_post(url, headers, files, data, timeout):
        seen.update(url=url, headers=headers, files=files, data=data)
        return DummyResp(200, {"text": "hello there"})

    client._session.post = fake_post  # type: ignore
    assert client.transcribe(b"ID3...", "clip.webm") == "hello there"
    assert seen["url"].endswith("/speech-to-text")
    assert seen["headers"]["xi-api-key"] == "xi-test"
    assert seen["files"]["file"][0] == "clip.webm"
    assert seen["data"]["model_id"] == STT_MODEL_ID
    assert seen["data"]["language_code"] == "eng"


def test_transcribe_default_filename():
    client = _client()
    seen = {}

    def fake_post(url, headers, files, data, timeout):
        seen["files"] = files
        return DummyResp(200, {"text": "x"})

    client._session.post = fake_post  # type: ignore
    client.transcribe(b"abc", None)
    assert seen["files"]["file"][0] == "audio.mp3"


def test_transcribe_missing_text_is_empty_string():
    client = _client()
    client._session.post = lambda url, headers, files, data, timeout: DummyResp(200, {"language_code": "eng"})  # type: ignore
    assert client.transcribe(b"abc", "a.mp3") == ""


def test_transcribe_unparsable_body_fails():
    client = _client()
    client._session.post = lambda url, headers, files, data, timeout: DummyResp(200, None, text="oops")  # type: ignore
    with pytest.raises(SpeechError):
        client.transcribe(b"abc", "a.mp3")


def test_transcribe_non_2xx_carries_status_and_body():
    client = _client()
    client._session.post = lambda url, headers, files, data, timeout: DummyResp(401, text="invalid api key")  # type: ignore
    with pytest.raises(SpeechError) as e:
        client.transcribe(b"abc", "a.mp3")
    assert e.value.status == 401
    assert "401" in str(e.value) and "invalid api key" in str(e.value)


def test_transcribe_network_error():
    client = _client()

    def fake_post(url, headers, files, data, timeout):
        raise requests.exceptions.Timeout("slow")

    client._session.post = fake_post  # type: ignore
    with pytest.raises(SpeechError) as e:
        client.transcribe(b"abc", "a.mp3")
    assert e.value.status is None


def test_synthesize_returns_bytes():
    client = _client()
    seen = {}

    def fake_post(url, headers, params, json, timeout):
        seen.update(url=url, params=params, body=json)
        return DummyResp(200, content=b"\xff\xfbmp3")

    client._session.post = fake_post  # type: ignore
    assert client.synthesize("Hi!") == b"\xff\xfbmp3"
    assert seen["url"].endswith("/text-to-speech/21m00Tcm4TlvDq8ikWAM")
    assert seen["params"] == {"output_format": TTS_OUTPUT_FORMAT}
    assert seen["body"] == {"text": "Hi!", "model_id": TTS_MODEL_ID}


def test_synthesize_non_2xx_fails():
    client = _client()
    client._session.post = lambda url, headers, params, json, timeout: DummyResp(422, text="quota_exceeded")  # type: ignore
    with pytest.raises(SpeechError) as e:
        client.synthesize("Hi!")
    assert e.value.status == 422
    assert e.value.body == "quota_exceeded"
