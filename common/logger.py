"""
Logging helpers shared by the pipeline, scorers and CLI.
Console output is human readable; set CONTRIB_SCORE_LOG_DIR to also write
one rotating JSONL file per logger name.
"""

import json
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

_MAX_BYTES = 10 * 1024 * 1024   # 10 MB
_BACKUP_COUNT = 5
_CONSOLE_FMT = "%(asctime)s | %(name)-20s | %(levelname)-7s | %(message)s"


class JsonFormatter(logging.Formatter):
    """Outputs each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "funcName": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def _resolve_level() -> int:
    name = (os.getenv("CONTRIB_SCORE_LOG_LEVEL") or "INFO").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def get_logger(name: str, *, console: bool = True) -> logging.Logger:
    """
    Return a logger configured with a console handler and, when
    CONTRIB_SCORE_LOG_DIR is set, a rotating JSONL file handler.

    Idempotent: repeated calls with the same *name* return the same logger
    without adding duplicate handlers.
    """
    logger = logging.getLogger(name)

    if logger.handlers:
        return logger

    logger.setLevel(_resolve_level())

    log_dir = os.getenv("CONTRIB_SCORE_LOG_DIR")
    if log_dir:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            path / f"{name}.jsonl",
            maxBytes=_MAX_BYTES,
            backupCount=_BACKUP_COUNT,
        )
        file_handler.setFormatter(JsonFormatter())
        logger.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter(_CONSOLE_FMT))
        logger.addHandler(console_handler)

    return logger
