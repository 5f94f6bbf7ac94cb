"""
http_utils.py

Small helpers shared by the outbound HTTP clients for turning httpx
responses and exceptions into pipeline errors without exposing httpx types
to callers.
"""

from __future__ import annotations

from typing import Any

import httpx

from domain.errors import UpstreamStatusError, UpstreamTransportError

BODY_PREVIEW_CHARS = 2000


def response_body(resp: httpx.Response) -> Any:
    """
    Returns the decoded JSON body when the provider sent JSON, otherwise the
    first `BODY_PREVIEW_CHARS` characters of the text body (or None if empty).
    """
    try:
        return resp.json()
    except ValueError:
        text = resp.text or ""
        return text[:BODY_PREVIEW_CHARS] or None


def status_error(service: str, resp: httpx.Response) -> UpstreamStatusError:
    return UpstreamStatusError(
        f"{service} request failed with status {resp.status_code}",
        upstream_status=resp.status_code,
        upstream_body=response_body(resp),
    )


def transport_error(service: str, exc: httpx.RequestError) -> UpstreamTransportError:
    return UpstreamTransportError(f"Could not reach {service}: {exc.__class__.__name__}: {exc}")
