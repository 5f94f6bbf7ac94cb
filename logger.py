"""
logger.py

Default behavior:
- Logs are stored in a directory set by the `LOG_DIR` environment variable
  (or `./logs` if unset).
- Main log file: `voice_notes.log`
- Rotates daily at midnight: UTC midnight when `LOG_TZ` is `UTC` (the
  default), otherwise the server's local midnight. `LOG_TZ` also names the
  archive date, `daily_logs/YYYY-MM-DD.log`. Keeps the newest `LOG_KEEP_DAYS` files.
- Records are mirrored to stderr so uvicorn output and service logs interleave.
- Log format: `%(asctime)s | %(levelname)s | %(name)s | %(message)s`

"""

import logging
import os
import re
import shutil
from dataclasses import dataclass, field
from datetime import datetime
from logging.handlers import TimedRotatingFileHandler
from typing import List, Optional, Protocol, Tuple
from zoneinfo import ZoneInfo

# -----------------------------
# Configuration & Contracts
# -----------------------------

@dataclass(frozen=True)
class LoggerConfig:
    """
    Immutable configuration for the logging system.
    """
    log_dir: str = field(default_factory=lambda: os.getenv("LOG_DIR", "logs"))
    main_log_filename: str = "voice_notes.log"
    daily_logs_subdir: str = "daily_logs"
    prune_keep: int = field(default_factory=lambda: int(os.getenv("LOG_KEEP_DAYS", "14")))
    rotate_when: str = "midnight"
    rotate_interval: int = 1
    rotate_tz: str = field(default_factory=lambda: os.getenv("LOG_TZ", "UTC"))
    level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    console: bool = True
    date_filename_regex: str = r"^\d{4}-\d{2}-\d{2}(?:_\d+)?\.log$"
    formatter: str = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    formatter_datefmt: str = "%Y-%m-%d %H:%M:%S"


class FileSystem(Protocol):
    """
    Abstraction over the file-system operations the rotator needs.
    """
    def listdir(self, path: str) -> List[str]: ...
    def exists(self, path: str) -> bool: ...
    def getmtime(self, path: str) -> float: ...
    def move(self, src: str, dst: str) -> None: ...
    def remove(self, path: str) -> None: ...
    def makedirs(self, path: str, exist_ok: bool = True) -> None: ...


class LocalFileSystem:
    def listdir(self, path: str) -> List[str]:
        return os.listdir(path)

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def getmtime(self, path: str) -> float:
        return os.path.getmtime(path)

    def move(self, src: str, dst: str) -> None:
        shutil.move(src, dst)

    def remove(self, path: str) -> None:
        os.remove(path)

    def makedirs(self, path: str, exist_ok: bool = True) -> None:
        os.makedirs(path, exist_ok=exist_ok)


# -----------------------------
# Rotation helpers
# -----------------------------

class DailyLogPruner:
    """
    Prunes older daily logs, keeping only the newest `keep` files.
    """
    def __init__(self, fs: FileSystem, daily_dir: str, pattern: re.Pattern, keep: int) -> None:
        self._fs = fs
        self._daily_dir = daily_dir
        self._pattern = pattern
        self._keep = keep

    def prune(self) -> List[str]:
        candidates: List[Tuple[float, str]] = []
        try:
            names = self._fs.listdir(self._daily_dir)
        except FileNotFoundError:
            return []

        for fname in names:
            if not self._pattern.match(fname):
                continue
            path = os.path.join(self._daily_dir, fname)
            try:
                candidates.append((self._fs.getmtime(path), path))
            except FileNotFoundError:
                # Removed between listdir and getmtime
                continue

        candidates.sort(key=lambda x: x[0], reverse=True)

        removed: List[str] = []
        for _, path in candidates[self._keep:]:
            try:
                self._fs.remove(path)
                removed.append(path)
            except FileNotFoundError:
                continue
        return removed


class DateBasedRotator:
    """
    `TimedRotatingFileHandler.rotator` hook: moves the active log file into
    the daily directory under its modification date, then prunes.
    """

    def __init__(self, fs: FileSystem, daily_dir: str, pruner: DailyLogPruner, tz: ZoneInfo) -> None:
        self._fs = fs
        self._daily_dir = daily_dir
        self._pruner = pruner
        self._tz = tz

    def target_path(self, source: str) -> str:
        ts = self._fs.getmtime(source)
        date_str = datetime.fromtimestamp(ts, tz=self._tz).strftime("%Y-%m-%d")
        final_path = os.path.join(self._daily_dir, f"{date_str}.log")
        suffix = 1
        while self._fs.exists(final_path):
            final_path = os.path.join(self._daily_dir, f"{date_str}_{suffix}.log")
            suffix += 1
        return final_path

    def __call__(self, source: str, dest: str) -> None:
        try:
            final_path = self.target_path(source)
            self._fs.move(source, final_path)
        except FileNotFoundError:
            return
        self._pruner.prune()


class LoggerFactory:
    def __init__(self, cfg: LoggerConfig, fs: Optional[FileSystem] = None) -> None:
        self._cfg = cfg
        self._fs = fs or LocalFileSystem()

        self.log_file = os.path.join(cfg.log_dir, cfg.main_log_filename)
        self.daily_logs_dir = os.path.join(cfg.log_dir, cfg.daily_logs_subdir)
        self._fs.makedirs(cfg.log_dir, exist_ok=True)
        self._fs.makedirs(self.daily_logs_dir, exist_ok=True)

        tz = ZoneInfo(cfg.rotate_tz)
        self._pruner = DailyLogPruner(
            fs=self._fs,
            daily_dir=self.daily_logs_dir,
            pattern=re.compile(cfg.date_filename_regex),
            keep=cfg.prune_keep,
        )
        self._rotator = DateBasedRotator(
            fs=self._fs,
            daily_dir=self.daily_logs_dir,
            pruner=self._pruner,
            tz=tz,
        )

        root = logging.getLogger()
        if not any(getattr(h, "_voice_notes_shared", False) for h in root.handlers):
            for handler in self._build_handlers():
                handler._voice_notes_shared = True
                root.addHandler(handler)
            root.setLevel(cfg.level.upper())

    def _build_handlers(self) -> List[logging.Handler]:
        fmt = logging.Formatter(self._cfg.formatter, datefmt=self._cfg.formatter_datefmt)
        file_handler = TimedRotatingFileHandler(
            self.log_file,
            when=self._cfg.rotate_when,
            interval=self._cfg.rotate_interval,
            backupCount=0,
            encoding="utf-8",
            utc=self._cfg.rotate_tz.upper() == "UTC",
        )
        file_handler.rotator = self._rotator
        file_handler.setFormatter(fmt)
        handlers: List[logging.Handler] = [file_handler]

        if self._cfg.console:
            stream = logging.StreamHandler()
            stream.setFormatter(fmt)
            handlers.append(stream)
        return handlers

    def get_logger(self, name: str, level: int = logging.INFO) -> logging.Logger:
        logger = logging.getLogger(name)
        logger.setLevel(level)
        logger.propagate = True
        return logger


# -----------------------------
# Public API
# -----------------------------

_FACTORY = None


def get_logger(name: str = "voice_notes", level=logging.INFO) -> logging.Logger:
    global _FACTORY
    if _FACTORY is None:
        _FACTORY = LoggerFactory(LoggerConfig())
    return _FACTORY.get_logger(name=name, level=level)
