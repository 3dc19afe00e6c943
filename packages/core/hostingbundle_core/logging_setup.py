"""Structured per-run logging for the hosting bundle updater."""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator


_LOGGER_NAME = "hostingbundle"


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts_utc": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        if hasattr(record, "event"):
            payload["event"] = getattr(record, "event")
        return json.dumps(payload, ensure_ascii=True)


def get_logger() -> logging.Logger:
    return logging.getLogger(_LOGGER_NAME)


def configure_console(level: int = logging.INFO) -> logging.Logger:
    logger = get_logger()
    logger.setLevel(level)
    if any(getattr(h, "_hostingbundle_console", False) for h in logger.handlers):
        return logger

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
    stream_handler._hostingbundle_console = True  # type: ignore[attr-defined]
    logger.addHandler(stream_handler)
    return logger


def run_log_path(log_dir: Path, now: datetime | None = None) -> Path:
    stamp = (now or datetime.now()).strftime("%Y%m%d-%H%M%S")
    return log_dir / f"install-{stamp}.log"


@contextmanager
def run_log(log_dir: Path, level: int = logging.INFO) -> Iterator[Path]:
    """Attach a fresh timestamped log file for one run and close it on exit."""
    log_dir.mkdir(parents=True, exist_ok=True)
    path = run_log_path(log_dir)

    handler = logging.FileHandler(str(path), mode="a", encoding="utf-8")
    handler.setFormatter(JsonFormatter())

    logger = get_logger()
    previous_level = logger.level
    if logger.level == logging.NOTSET or logger.level > level:
        logger.setLevel(level)
    logger.addHandler(handler)
    try:
        logger.info("run log opened %s", path, extra={"event": "log_opened"})
        yield path
    finally:
        logger.info("run log closed", extra={"event": "log_closed"})
        logger.removeHandler(handler)
        handler.close()
        logger.setLevel(previous_level)
