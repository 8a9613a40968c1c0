# agentvoice/config.py
from __future__ import annotations

from pathlib import Path
from typing import Optional

import requests
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ROOT = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    """
    Read-only process configuration. Built once at startup and handed to the
    app factories; nothing reads the environment after that.
    """

    # ---- upstream agent runtime (gateway side) ----
    MCP_SERVER_URL: str = "http://127.0.0.1:3000/"

    # ---- providers ----
    GEMINI_API_KEY: str = ""
    GEMINI_API_BASE: str = "https://generativelanguage.googleapis.com/v1beta"
    ELEVENLABS_API_KEY: str = ""
    ELEVENLABS_API_BASE: str = "https://api.elevenlabs.io/v1"

    # Applied to every outbound call; None disables the client-side timeout
    HTTP_TIMEOUT_SECS: Optional[float] = 60.0

    # ---- storage ----
    AUDIO_DIR: str = "public/audio"
    AUDIO_URL_PREFIX: str = "/public/audio"

    # ---- servers ----
    GATEWAY_HOST: str = "127.0.0.1"
    GATEWAY_PORT: int = 8000
    RUNTIME_HOST: str = "0.0.0.0"
    RUNTIME_PORT: int = 3000

    # ---- cors ----
    CORS_ALLOW_ORIGINS: str = "*"  # comma-separated list

    LOG_LEVEL: str = Field("INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")

    model_config = SettingsConfigDict(
        env_file=ROOT / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # ---- derived helpers ----
    @property
    def cors_origins(self) -> list[str]:
        raw = (self.CORS_ALLOW_ORIGINS or "").strip()
        return [o.strip() for o in raw.split(",") if o.strip()]

    @property
    def audio_dir(self) -> Path:
        return Path(self.AUDIO_DIR).expanduser().resolve()


def load_settings(**overrides) -> Settings:
    return Settings(**overrides)


def build_http_session() -> requests.Session:
    """Single pooled session shared by every outbound client of a process."""
    session = requests.Session()
    session.headers.update({"User-Agent": "agentvoice/0.1"})
    return session
