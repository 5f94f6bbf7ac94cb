"""
settings.py
This module defines a `Settings` dataclass that centralizes configuration
parameters for the transcription and chat-completion services used by the
voice note summarizer. Values are read from the environment (a local `.env`
file is loaded first) when the dataclass is instantiated.
"""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()


def _env(name: str, default: str = "") -> str:
    return os.getenv(name, default)


@dataclass(frozen=True)
class Settings:
    # Transcription server + model
    TRANSCRIBE_URL: str = field(default_factory=lambda: _env("TRANSCRIBE_URL", "https://api.openai.com/v1/audio/transcriptions"))
    TRANSCRIBE_MODEL_ID: str = field(default_factory=lambda: _env("TRANSCRIBE_MODEL_ID", "whisper-1"))
    TRANSCRIBE_API_KEY: str = field(default_factory=lambda: _env("TRANSCRIBE_API_KEY"))
    TRANSCRIBE_LANGUAGE: str = field(default_factory=lambda: _env("TRANSCRIBE_LANGUAGE"))

    # Chat parameters
    CHAT_API_URL: str = field(default_factory=lambda: _env("CHAT_API_URL", "https://openrouter.ai/api/v1/chat/completions"))
    CHAT_MODEL_ID: str = field(default_factory=lambda: _env("CHAT_MODEL_ID", "nex-agi/deepseek-v3.1-nex-n1:free"))
    CHAT_API_KEY: str = field(default_factory=lambda: _env("CHAT_API_KEY", _env("OPENROUTER_API_KEY")))
    CHAT_TEMPERATURE: float = field(default_factory=lambda: float(_env("CHAT_TEMPERATURE", "0.2")))
    APP_REFERER: str = field(default_factory=lambda: _env("APP_REFERER", "http://localhost:3000"))
    APP_TITLE: str = field(default_factory=lambda: _env("APP_TITLE", "AI Voice Note Summarizer"))

    # Timeouts
    HTTP_TIMEOUT_SEC: float = field(default_factory=lambda: float(_env("HTTP_TIMEOUT_SEC", "120")))

    # Inbound surface
    ALLOWED_ORIGIN_REGEX: str = field(default_factory=lambda: _env("ALLOWED_ORIGIN_REGEX", r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$"))
    UPLOAD_DIR: str = field(default_factory=lambda: _env("UPLOAD_DIR"))
    HOST: str = field(default_factory=lambda: _env("HOST", "127.0.0.1"))
    PORT: int = field(default_factory=lambda: int(_env("PORT", "5001")))

    # Health check
    HEALTH_CHECK_URL: str = field(default_factory=lambda: _env("HEALTH_CHECK_URL"))
    HEALTH_CHECK_METHOD: str = field(default_factory=lambda: _env("HEALTH_CHECK_METHOD", "GET"))
    HEALTH_CHECK_EXPECTED_STATUS: int = field(default_factory=lambda: int(_env("HEALTH_CHECK_EXPECTED_STATUS", "200")))
    HEALTH_CHECK_TIMEOUT_SEC: float = field(default_factory=lambda: float(_env("HEALTH_CHECK_TIMEOUT_SEC", "5.0")))

    # Prompts

    SYSTEM_PROMPT = (
        "You are a helpful assistant that summarizes voice notes into key points and action items."
    )

    SUMMARY_PROMPT_TEMPLATE = (
      """
Here is a voice note transcript:

"{transcript}"

Return ONLY valid JSON (no backticks, no markdown, no extra prose) with this exact shape:
{{
  "key_points": ["point 1", "point 2", ...],
  "action_items": ["item 1", "item 2", ...]
}}
"""
   )

    def missing_credentials(self) -> list:
        missing = []
        if not self.TRANSCRIBE_API_KEY:
            missing.append("TRANSCRIBE_API_KEY")
        if not self.CHAT_API_KEY:
            missing.append("CHAT_API_KEY")
        return missing
