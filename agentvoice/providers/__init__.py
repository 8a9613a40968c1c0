from .elevenlabs_client import ElevenLabsClient, ElevenLabsConfig
from .gemini_client import PLACEHOLDER_REPLY, GeminiClient, GeminiConfig, Generation

__all__ = [
    "ElevenLabsClient",
    "ElevenLabsConfig",
    "GeminiClient",
    "GeminiConfig",
    "Generation",
    "PLACEHOLDER_REPLY",
]
