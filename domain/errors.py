"""
errors.py

Error taxonomy of the summarization pipeline. Every kind carries an HTTP
status for the inbound response and, for upstream failures, the provider's
status code and body so they can be passed through for diagnostics.
Malformed model output is not an error; see `services.summary_parser`.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class PipelineError(Exception):
    status_code: int = 500

    def __init__(self, message: str, upstream_status: Optional[int] = None, upstream_body: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.upstream_status = upstream_status
        self.upstream_body = upstream_body

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message}
        if self.upstream_status is not None:
            body["upstream_status"] = self.upstream_status
        if self.upstream_body is not None:
            body["upstream_body"] = self.upstream_body
        return body


class MissingAudioError(PipelineError):
    status_code = 400

    def __init__(self, message: str = "No audio file provided.") -> None:
        super().__init__(message)


class EmptyTranscriptError(PipelineError):
    status_code = 422

    def __init__(self, message: str = "Transcription is empty or failed") -> None:
        super().__init__(message)


class UpstreamTransportError(PipelineError):
    status_code = 502


class UpstreamStatusError(PipelineError):
    status_code = 502


class EmptyCompletionError(PipelineError):
    status_code = 502

    def __init__(self, message: str = "Summarization returned no content") -> None:
        super().__init__(message)


class UpstreamResponseError(PipelineError):
    """The provider answered with a success status but a body that is not JSON."""
    status_code = 502
