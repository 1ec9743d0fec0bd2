"""Shared helpers (logging)."""

from common.logger import get_logger, JsonFormatter

__all__ = ["get_logger", "JsonFormatter"]
