"""
main.py

This is the FastAPI entrypoint for the voice note summarizer. It provides an
endpoint (`/api/transcribe-and-summarize`) that accepts one recorded voice
note as multipart form data (field `audio`), transcribes it, asks a chat
model for key points and action items, and returns both in one JSON body.

Every failure is returned as `{"error": ...}`, with the upstream status and
body attached when a provider rejected the call.
"""

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI, File, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config.settings import Settings
from domain.errors import PipelineError
from domain.models import ErrorResponse, VoiceNoteResponse
from helpers.file_utils import FileUtils
from logger import get_logger
from services.chat_client import ChatClient
from services.health_check import HealthCheck
from services.pipeline import VoiceNotePipeline
from services.transcription_client import TranscriptionClient

logger = get_logger("Main")


def build_stt_client(settings: Settings) -> TranscriptionClient:
    return TranscriptionClient(
        stt_url=settings.TRANSCRIBE_URL,
        model_id=settings.TRANSCRIBE_MODEL_ID,
        timeout_sec=settings.HTTP_TIMEOUT_SEC,
        api_key=settings.TRANSCRIBE_API_KEY,
        language=settings.TRANSCRIBE_LANGUAGE,
    )


def build_chat_client(settings: Settings) -> ChatClient:
    return ChatClient(
        chat_url=settings.CHAT_API_URL,
        model_id=settings.CHAT_MODEL_ID,
        timeout_sec=settings.HTTP_TIMEOUT_SEC,
        api_key=settings.CHAT_API_KEY,
        temperature=settings.CHAT_TEMPERATURE,
        referer=settings.APP_REFERER,
        title=settings.APP_TITLE,
    )


def create_app(settings: Optional[Settings] = None,
               stt: Optional[TranscriptionClient] = None,
               chat: Optional[ChatClient] = None) -> FastAPI:
    settings = settings or Settings()
    pipeline = VoiceNotePipeline(
        settings,
        stt or build_stt_client(settings),
        chat or build_chat_client(settings),
    )

    app = FastAPI(title="AI Voice Note Summarizer", version="1.0.0")
    app.state.settings = settings
    app.state.pipeline = pipeline

    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=settings.ALLOWED_ORIGIN_REGEX,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def _startup() -> None:
        missing = settings.missing_credentials()
        if missing:
            logger.warning("Missing credentials: %s. Upstream calls will likely be rejected.", ", ".join(missing))
        logger.info("Voice note summarizer online | transcribe_url=%s | chat_url=%s | chat_model=%s",
                    settings.TRANSCRIBE_URL, settings.CHAT_API_URL, settings.CHAT_MODEL_ID)

    @app.exception_handler(PipelineError)
    async def _pipeline_error(request: Request, exc: PipelineError) -> JSONResponse:
        logger.error("Request failed | path=%s | kind=%s | status=%d | upstream_status=%s | error=%s",
                     request.url.path, type(exc).__name__, exc.status_code, exc.upstream_status, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.warning("Invalid request | path=%s | errors=%s", request.url.path, exc.errors())
        return JSONResponse(status_code=400, content={"error": "Invalid request: expected a multipart 'audio' file field."})

    @app.exception_handler(Exception)
    async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled error | path=%s | error=%r", request.url.path, exc, exc_info=True)
        return JSONResponse(status_code=500, content={"error": "Something went wrong"})

    @app.post(
        "/api/transcribe-and-summarize",
        response_model=VoiceNoteResponse,
        responses={400: {"model": ErrorResponse}, 422: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
    )
    async def transcribe_and_summarize(request: Request, audio: Optional[UploadFile] = File(None)):
        payload = await FileUtils.read_upload(audio)
        logger.info("Received audio | file=%s | type=%s | bytes=%d", payload.filename, payload.content_type, payload.size)
        return await request.app.state.pipeline.run(payload)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.get("/health/upstream")
    async def health_upstream():
        if not settings.HEALTH_CHECK_URL:
            return {"status": "unconfigured"}
        ok = await HealthCheck.check_service_health(
            url=settings.HEALTH_CHECK_URL,
            method=settings.HEALTH_CHECK_METHOD,
            expected_status=settings.HEALTH_CHECK_EXPECTED_STATUS,
            timeout_sec=settings.HEALTH_CHECK_TIMEOUT_SEC,
        )
        return {"status": "ok" if ok else "degraded"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    _settings = app.state.settings
    uvicorn.run("main:app", host=_settings.HOST, port=_settings.PORT)
