"""chat_client.py

Provides `ChatClient`, a thin HTTP wrapper for sending role-tagged messages to
a chat-completions style endpoint (OpenRouter or any OpenAI-compatible
`/v1/chat/completions`) and retrieving the free-form text of the first choice.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from domain.errors import EmptyCompletionError, UpstreamResponseError
from helpers.http_utils import response_body, status_error, transport_error
from logger import get_logger

log = get_logger("Chat Client")

SERVICE_NAME = "summarization service"


class ChatClient:
    def __init__(self, chat_url: str, model_id: str, timeout_sec: float = 120, api_key: str = "",
                 temperature: Optional[float] = None, referer: str = "", title: str = "",
                 transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.url = chat_url
        self.model = model_id
        self.timeout = timeout_sec
        self.temperature = temperature
        self.transport = transport
        self.headers = {"Content-Type": "application/json"}
        if api_key:
            self.headers["Authorization"] = f"Bearer {api_key}"
        # OpenRouter attribution headers
        if referer:
            self.headers["HTTP-Referer"] = referer
        if title:
            self.headers["X-Title"] = title

    async def complete(self, messages: List[Dict[str, str]]) -> str:
        """
        Returns the completion text of the first choice. Raises a pipeline
        error on transport failure, non-success status or empty content.
        """
        payload: Dict[str, Any] = {"model": self.model, "messages": messages}
        if self.temperature is not None:
            payload["temperature"] = self.temperature

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                log.info("Requesting summary | model=%s", self.model)
                r = await client.post(self.url, json=payload, headers=self.headers)
        except httpx.RequestError as e:
            log.error("Chat transport error | url=%s | error=%r", self.url, e)
            raise transport_error(SERVICE_NAME, e) from e

        if not r.is_success:
            log.error("Chat error: %s %s", r.status_code, (r.text or "")[:400])
            raise status_error(SERVICE_NAME, r)

        j = response_body(r)
        if not isinstance(j, dict):
            log.error("Chat JSON parse error | body=%r", j)
            raise UpstreamResponseError(
                "Summarization service returned an unreadable response",
                upstream_body=j,
            )

        content = self.extract_content(j)
        if not content:
            log.error("Chat returned no content | body=%s", str(j)[:400])
            raise EmptyCompletionError()
        return content

    @staticmethod
    def extract_content(body: Dict[str, Any]) -> Optional[str]:
        choices = body.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            return None
        msg = choices[0].get("message") or {}
        content = msg.get("content") if isinstance(msg, dict) else None

        if isinstance(content, str):
            return content if content.strip() else None

        if isinstance(content, list):
            parts: List[str] = []
            for p in content:
                if isinstance(p, dict):
                    t = p.get("text")
                    if isinstance(t, str) and t.strip():
                        parts.append(t)
            joined = "".join(parts)
            return joined if joined.strip() else None

        return None
