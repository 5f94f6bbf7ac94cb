"""health_check.py

This module provides a reusable HealthCheck utility for verifying the
availability of the upstream transcription/chat provider. It uses the httpx
asynchronous client to send a request to the given URL and validate the
response status code against an expected value.
"""

from __future__ import annotations

from typing import Optional

import httpx
from logger import get_logger

log = get_logger("Health Check")


class HealthCheck:
    @staticmethod
    async def check_service_health(*, url: str, method: str = "GET", expected_status: int = 200, timeout_sec: float = 5.0,
                                   transport: Optional[httpx.AsyncBaseTransport] = None) -> bool:
        """
        Returns True if calling `url` with `method` returns `expected_status`.
        """
        try:
            async with httpx.AsyncClient(timeout=timeout_sec, transport=transport) as client:
                resp = await client.request(method.upper(), url)
        except httpx.HTTPError as e:
            log.error("Health check failed for %s: %r", url, e)
            return False

        ok = resp.status_code == expected_status
        if not ok:
            log.warning(
                "Health check non-OK status: %s (expected %s)",
                resp.status_code, expected_status
            )
        return ok
