import os

import pytest
from fastapi.testclient import TestClient

from conftest import FakeChatClient, FakeTranscriptionClient
from domain.errors import UpstreamStatusError, UpstreamTransportError
from main import create_app

ENDPOINT = "/api/transcribe-and-summarize"


def _client(settings, stt, chat, **kwargs):
    return TestClient(create_app(settings, stt=stt, chat=chat), **kwargs)


def _post_audio(client, data=b"\x1aE\xdf\xa3webm-bytes", field="audio"):
    return client.post(ENDPOINT, files={field: ("note.webm", data, "audio/webm")})


@pytest.mark.parametrize("text", [
    "Buy milk. Call Bob.",
    "Buy milk.\n\nCall  Bob. ",
    "\t indented note with trailing newline\n",
    "Rappeler Zoë à 9h. 牛乳を買う",
])
def test_exact_passthrough(settings, text):
    stt = FakeTranscriptionClient({"text": text})
    chat = FakeChatClient('{"key_points":["Buy milk"],"action_items":["Call Bob"]}')
    resp = _post_audio(_client(settings, stt, chat))

    assert resp.status_code == 200
    assert resp.json() == {
        "transcript": text,
        "summary": {"key_points": ["Buy milk"], "action_items": ["Call Bob"]},
    }
    assert f'"{text}"' in chat.calls[0][1]["content"]
    assert stt.calls[0]["data"] == b"\x1aE\xdf\xa3webm-bytes"


def test_non_json_completion_is_returned_as_single_key_point(settings):
    stt = FakeTranscriptionClient({"text": "Buy milk."})
    chat = FakeChatClient("Sure! Here's your summary: ...")
    resp = _post_audio(_client(settings, stt, chat))

    assert resp.status_code == 200
    assert resp.json()["summary"] == {"key_points": ["Sure! Here's your summary: ..."], "action_items": []}


def test_missing_audio_makes_no_outbound_calls(settings):
    stt = FakeTranscriptionClient({"text": "hello"})
    chat = FakeChatClient("{}")
    client = _client(settings, stt, chat)

    for resp in (
        client.post(ENDPOINT),
        client.post(ENDPOINT, files={"other": ("note.webm", b"abc", "audio/webm")}),
        _post_audio(client, data=b""),
    ):
        assert resp.status_code == 400
        assert "error" in resp.json()

    assert stt.calls == []
    assert chat.calls == []


def test_silent_clip_returns_transcript_error(settings):
    stt = FakeTranscriptionClient({"text": ""})
    chat = FakeChatClient("{}")
    resp = _post_audio(_client(settings, stt, chat), data=b"\x00" * 32000)

    assert resp.status_code == 422
    assert resp.json() == {"error": "Transcription is empty or failed"}
    assert len(stt.calls) == 1
    assert chat.calls == []


def test_completion_status_error_is_retrievable(settings):
    err = UpstreamStatusError(
        "summarization service request failed with status 401",
        upstream_status=401,
        upstream_body={"error": {"message": "No auth credentials found", "code": 401}},
    )
    stt = FakeTranscriptionClient({"text": "hello"})
    resp = _post_audio(_client(settings, stt, FakeChatClient(error=err)))

    assert resp.status_code == 502
    body = resp.json()
    assert body["error"] == "summarization service request failed with status 401"
    assert body["upstream_status"] == 401
    assert body["upstream_body"] == {"error": {"message": "No auth credentials found", "code": 401}}


def test_transport_error_envelope(settings):
    stt = FakeTranscriptionClient(error=UpstreamTransportError("Could not reach transcription service: ConnectError"))
    chat = FakeChatClient("{}")
    resp = _post_audio(_client(settings, stt, chat))

    assert resp.status_code == 502
    assert resp.json() == {"error": "Could not reach transcription service: ConnectError"}
    assert chat.calls == []


def test_unexpected_error_becomes_500_envelope(settings):
    stt = FakeTranscriptionClient(error=RuntimeError("kaboom"))
    client = _client(settings, stt, FakeChatClient("{}"), raise_server_exceptions=False)
    resp = _post_audio(client)

    assert resp.status_code == 500
    assert resp.json() == {"error": "Something went wrong"}


@pytest.mark.parametrize("stt_text, chat_error", [("hello", None), ("", None), ("hello", UpstreamTransportError("down"))])
def test_upload_dir_is_empty_after_request(settings, stt_text, chat_error):
    stt = FakeTranscriptionClient({"text": stt_text})
    _post_audio(_client(settings, stt, FakeChatClient("{}", error=chat_error)))
    assert os.listdir(settings.UPLOAD_DIR) == []


@pytest.mark.parametrize("origin", ["http://localhost:3000", "http://127.0.0.1:5173", "https://localhost"])
def test_cors_allows_localhost(settings, origin):
    client = _client(settings, FakeTranscriptionClient(), FakeChatClient())
    resp = client.options(ENDPOINT, headers={"Origin": origin, "Access-Control-Request-Method": "POST"})
    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] == origin


@pytest.mark.parametrize("origin", ["https://evil.example", "http://localhost.evil.example", "http://192.168.0.10:3000"])
def test_cors_rejects_other_origins(settings, origin):
    client = _client(settings, FakeTranscriptionClient(), FakeChatClient())
    resp = client.options(ENDPOINT, headers={"Origin": origin, "Access-Control-Request-Method": "POST"})
    assert resp.status_code == 400
    assert "access-control-allow-origin" not in resp.headers


def test_health(settings):
    client = _client(settings, FakeTranscriptionClient(), FakeChatClient())
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/health/upstream").json() == {"status": "unconfigured"}


def test_health_upstream_probe(settings, monkeypatch):
    from dataclasses import replace

    import main

    calls = []

    async def fake_check(**kwargs):
        calls.append(kwargs)
        return False

    monkeypatch.setattr(main.HealthCheck, "check_service_health", staticmethod(fake_check))
    configured = replace(settings, HEALTH_CHECK_URL="http://stt.test/health")
    client = _client(configured, FakeTranscriptionClient(), FakeChatClient())

    assert client.get("/health/upstream").json() == {"status": "degraded"}
    assert calls[0]["url"] == "http://stt.test/health"
