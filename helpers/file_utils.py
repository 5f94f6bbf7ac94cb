"""
file_utils.py

This module provides helpers for taking an uploaded voice note off the
request and staging it on disk for the transcription upload.

Methods:

1. read_upload:
  Reads the `audio` multipart field into an `AudioPayload`, raising
  `MissingAudioError` when the field is absent or empty.

2. staged_audio:
  Context manager that writes the payload into a fresh temporary
  directory and removes the directory on every exit path.

3. safe_filename:
  Reduces a client-supplied filename to a plain basename.
"""

from __future__ import annotations

import os
import re
import shutil
import tempfile
from contextlib import contextmanager
from typing import Iterator, Optional

from fastapi import UploadFile

from domain.errors import MissingAudioError
from domain.models import AudioPayload
from logger import get_logger

log = get_logger("File Utils")

DEFAULT_FILENAME = "note.webm"
DEFAULT_CONTENT_TYPE = "application/octet-stream"


class FileUtils:
    @staticmethod
    async def read_upload(upload: Optional[UploadFile]) -> AudioPayload:
        """
        Returns the upload as an `AudioPayload`. No format or codec checks are
        made here; the transcription provider rejects what it cannot decode.
        """
        if upload is None:
            log.warning("Request has no audio field")
            raise MissingAudioError()

        try:
            contents = await upload.read()
        finally:
            await upload.close()

        if not contents:
            log.warning("Empty audio file received | filename=%s", upload.filename)
            raise MissingAudioError("Empty audio file.")

        return AudioPayload(
            data=contents,
            filename=FileUtils.safe_filename(upload.filename),
            content_type=upload.content_type or DEFAULT_CONTENT_TYPE,
        )

    @staticmethod
    def safe_filename(name: Optional[str]) -> str:
        base = os.path.basename((name or "").replace("\\", "/"))
        base = re.sub(r"[^A-Za-z0-9._-]", "_", base).lstrip(".")
        return base or DEFAULT_FILENAME

    @staticmethod
    @contextmanager
    def staged_audio(payload: AudioPayload, root: Optional[str] = None) -> Iterator[str]:
        """
        Writes `payload` to `<tmp>/voicenote_*/<filename>` and yields the path.
        The directory is removed when the block exits, whether it returns or
        raises.
        """
        if root:
            os.makedirs(root, exist_ok=True)
        tmp_dir = tempfile.mkdtemp(prefix="voicenote_", dir=root or None)
        try:
            path = os.path.join(tmp_dir, payload.filename)
            with open(path, "wb") as fh:
                fh.write(payload.data)
            log.info("Staged audio | path=%s | bytes=%d", path, payload.size)
            yield path
        finally:
            shutil.rmtree(tmp_dir, ignore_errors=True)
            log.info("Removed staged audio | dir=%s", tmp_dir)
