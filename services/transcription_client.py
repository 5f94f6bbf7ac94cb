"""
transcription_client.py
-----------------------

This module defines the `TranscriptionClient` class, which is responsible for
sending one voice note to an OpenAI-compatible speech-to-text endpoint
(`/v1/audio/transcriptions`) using asynchronous I/O.

Key Responsibilities:
1. Upload the staged audio file as multipart form data (field `file`).
2. Map connectivity failures and non-success statuses onto pipeline errors
   (`UpstreamTransportError`, `UpstreamStatusError`, and
   `UpstreamResponseError` for a 2xx body that is not JSON). There is a single
   attempt per request; no retries.
3. Extract the transcript from the JSON response: the "text" field is
   returned exactly as sent; the individual "segments" are joined only when
   "text" is missing or blank.
"""

from __future__ import annotations

import os
import re
from typing import Any, Dict, Optional

import httpx

from helpers.http_utils import response_body, status_error, transport_error
from domain.errors import UpstreamResponseError
from logger import get_logger

log = get_logger("Transcription Client")

SERVICE_NAME = "transcription service"


class TranscriptionClient:
    """
    Only handles STT HTTP I/O. Holds configuration only, so one instance can
    serve concurrent requests.
    """

    def __init__(self, stt_url: str, model_id: str, timeout_sec: float, api_key: str = "", language: str = "",
                 transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.url = stt_url
        self.model = model_id
        self.timeout_sec = timeout_sec
        self.language = language
        self.transport = transport
        self.headers: Dict[str, str] = {}
        if api_key:
            self.headers["Authorization"] = f"Bearer {api_key}"

    async def transcribe_file(self, audio_path: str, content_type: str = "application/octet-stream") -> Dict[str, Any]:
        data = {
            "model": self.model,
            "response_format": "json",
        }
        if self.language:
            data["language"] = self.language

        try:
            async with httpx.AsyncClient(timeout=self.timeout_sec, transport=self.transport) as client:
                with open(audio_path, "rb") as fh:
                    files = {"file": (os.path.basename(audio_path), fh, content_type)}
                    resp = await client.post(self.url, data=data, files=files, headers=self.headers)
        except httpx.RequestError as e:
            log.error("Transcription transport error | url=%s | error=%r", self.url, e)
            raise transport_error(SERVICE_NAME, e) from e

        if not resp.is_success:
            log.error("Transcription error | status=%d | body=%s", resp.status_code, (resp.text or "")[:400])
            raise status_error(SERVICE_NAME, resp)

        payload = response_body(resp)
        if not isinstance(payload, dict):
            log.error("Transcription returned a non-JSON body | body=%r", payload)
            raise UpstreamResponseError(
                "Transcription service returned an unreadable response",
                upstream_body=payload,
            )
        return payload

    @staticmethod
    def extract_text(payload: Dict[str, Any]) -> str:
        """
        Returns the provider's `text` unchanged when it has any non-blank
        content. Only the `segments` fallback is joined and whitespace-normalized.
        """
        if not isinstance(payload, dict):
            return ""
        t = payload.get("text")
        if isinstance(t, str) and t.strip():
            return t
        segs = payload.get("segments") or []
        parts = [s["text"].strip() for s in segs
                 if isinstance(s, dict) and isinstance(s.get("text"), str) and s["text"].strip()]
        return re.sub(r"\s+", " ", " ".join(parts)).strip()
