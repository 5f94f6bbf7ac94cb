import os
import tempfile

# Keep service logs out of the working tree; must run before `logger` is imported.
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="voicenote_logs_"))

import pytest

from config.settings import Settings
from services.transcription_client import TranscriptionClient


class FakeTranscriptionClient:
    """Records every call and returns a canned provider payload."""

    def __init__(self, payload=None, error=None):
        self.payload = payload if payload is not None else {"text": ""}
        self.error = error
        self.calls = []

    async def transcribe_file(self, audio_path, content_type="application/octet-stream"):
        with open(audio_path, "rb") as fh:
            data = fh.read()
        self.calls.append({"path": audio_path, "content_type": content_type, "data": data})
        if self.error is not None:
            raise self.error
        return self.payload

    extract_text = staticmethod(TranscriptionClient.extract_text)


class FakeChatClient:
    def __init__(self, completion="", error=None):
        self.completion = completion
        self.error = error
        self.calls = []

    async def complete(self, messages):
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return self.completion


@pytest.fixture
def settings(tmp_path):
    return Settings(
        TRANSCRIBE_URL="http://stt.test/v1/audio/transcriptions",
        TRANSCRIBE_API_KEY="stt-key",
        CHAT_API_URL="http://chat.test/v1/chat/completions",
        CHAT_API_KEY="chat-key",
        UPLOAD_DIR=str(tmp_path / "uploads"),
        HEALTH_CHECK_URL="",
    )
