"""
models.py

This module defines the data shapes used by the voice note summarizer.

- ""AudioPayload"": the uploaded audio bytes plus the filename and media type
  declared by the browser. Lives only for the request that received it.
- ""SummaryResult"": the structured summary returned to the caller. Both
  fields are always present, possibly empty.
- ""SummaryOutcome"": result of parsing the model completion. Either the
  parsed summary (`fallback=False`) or the degraded form that keeps the raw
  completion as the only key point (`fallback=True`).
- ""VoiceNoteResponse"" / ""ErrorResponse"": the two JSON envelopes of
  `/api/transcribe-and-summarize`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional

from pydantic import BaseModel, StrictStr


@dataclass(frozen=True)
class AudioPayload:
    data: bytes
    filename: str = "note.webm"
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.data)


class SummaryResult(BaseModel):
    key_points: List[StrictStr]
    action_items: List[StrictStr]


@dataclass(frozen=True)
class SummaryOutcome:
    summary: SummaryResult
    raw: str
    fallback: bool = False

    @classmethod
    def parsed(cls, summary: SummaryResult, raw: str) -> "SummaryOutcome":
        return cls(summary=summary, raw=raw, fallback=False)

    @classmethod
    def degraded(cls, raw: str) -> "SummaryOutcome":
        return cls(summary=SummaryResult(key_points=[raw], action_items=[]), raw=raw, fallback=True)


class VoiceNoteResponse(BaseModel):
    transcript: str
    summary: SummaryResult


class ErrorResponse(BaseModel):
    error: str
    upstream_status: Optional[int] = None
    upstream_body: Optional[Any] = None
