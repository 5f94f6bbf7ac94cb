"""
pipeline.py

VoiceNotePipeline orchestrates the end-to-end flow for one uploaded voice
note: stage the audio, transcribe it (stage A), ask the chat model for a
structured summary (stage B), and return a single `VoiceNoteResponse`.

Stages run strictly in order and a hard failure in either one aborts the
request with a `PipelineError`; there is no partial result. Model output
that is not the requested JSON is not a failure: it degrades through
`parse_summary` into a summary that keeps the raw text.
"""

from __future__ import annotations

import time
from typing import Dict, List

from config.settings import Settings
from domain.errors import EmptyTranscriptError
from domain.models import AudioPayload, SummaryOutcome, VoiceNoteResponse
from helpers.file_utils import FileUtils
from logger import get_logger
from services.chat_client import ChatClient
from services.summary_parser import parse_summary
from services.transcription_client import TranscriptionClient

log = get_logger("Pipeline")


class VoiceNotePipeline:
    def __init__(self, settings: Settings, stt: TranscriptionClient, chat: ChatClient):
        self.s = settings
        self.stt = stt
        self.chat = chat

    def build_messages(self, transcript: str) -> List[Dict[str, str]]:
        return [
            {"role": "system", "content": self.s.SYSTEM_PROMPT},
            {"role": "user", "content": self.s.SUMMARY_PROMPT_TEMPLATE.format(transcript=transcript)},
        ]

    async def transcribe(self, audio_path: str, payload: AudioPayload) -> str:
        log.info("Transcription started | file=%s | type=%s | bytes=%d",
                 payload.filename, payload.content_type, payload.size)
        stt_payload = await self.stt.transcribe_file(audio_path, payload.content_type)
        transcript = self.stt.extract_text(stt_payload)
        if not transcript.strip():
            log.warning("Transcription returned no text | file=%s", payload.filename)
            raise EmptyTranscriptError()
        log.info("Transcription done | chars=%d", len(transcript))
        return transcript

    async def summarize(self, transcript: str) -> SummaryOutcome:
        raw = await self.chat.complete(self.build_messages(transcript))
        outcome = parse_summary(raw)
        if outcome.fallback:
            log.warning("Summary fell back to raw completion | chars=%d", len(raw))
        else:
            log.info("Summary parsed | key_points=%d | action_items=%d",
                     len(outcome.summary.key_points), len(outcome.summary.action_items))
        return outcome

    async def run(self, payload: AudioPayload) -> VoiceNoteResponse:
        started = time.time()
        try:
            with FileUtils.staged_audio(payload, self.s.UPLOAD_DIR or None) as audio_path:
                transcript = await self.transcribe(audio_path, payload)
            outcome = await self.summarize(transcript)
            return VoiceNoteResponse(transcript=transcript, summary=outcome.summary)
        finally:
            log.info("Total time | seconds=%.2f", time.time() - started)
