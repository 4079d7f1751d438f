from __future__ import annotations

import logging
import os
import sys
from typing import Any

from loguru import logger


_LEVEL_MAP: dict[str, int] = {
    "TRACE": logging.DEBUG,
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "SUCCESS": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}
_SOURCE_WIDTH = 34
_FUNC_MAX_LEN = 28
_INTERCEPTED_LOGGERS = ("httpx", "httpcore", "asyncio")


def _normalize_level(value: str | None, fallback: str = "INFO") -> str:
    candidate = (value or "").strip().upper()
    if candidate in _LEVEL_MAP:
        return candidate
    return fallback


def _compact_source(module_name: Any, function_name: Any, line: Any) -> str:
    module = str(module_name or "-").split(".")[-1] or "-"
    function = str(function_name or "-")
    if len(function) > _FUNC_MAX_LEN:
        function = function[: (_FUNC_MAX_LEN - 3)] + "..."
    return f"{module}.{function}:{line}"


def _patch_record(record: dict[str, Any]) -> None:
    extra = record["extra"]
    extra["src"] = _compact_source(
        extra.get("py_name") or record.get("name"),
        extra.get("py_func") or record.get("function"),
        extra.get("py_line") or record.get("line"),
    )


class InterceptHandler(logging.Handler):
    """Route stdlib logging records into Loguru with original call-site metadata."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        logger.bind(
            py_name=record.name,
            py_func=record.funcName,
            py_line=record.lineno,
        ).opt(
            exception=record.exc_info,
        ).log(level, record.getMessage())


def setup_logging(default_level: str = "INFO", log_file: str | None = None) -> str:
    """
    Configure Loguru sinks and route stdlib loggers (httpx, httpcore) through it.

    Environment variables:
    - PAI_LOG_LEVEL: level for all PAI glue logs.
    - PAI_LOG_FILE: optional path of a plain-text log file.
    - PAI_HTTPX_LOG_LEVEL: level for httpx/httpcore logs.
    """
    global_level = _normalize_level(os.getenv("PAI_LOG_LEVEL"), fallback=_normalize_level(default_level))
    httpx_level = _normalize_level(os.getenv("PAI_HTTPX_LOG_LEVEL"), fallback="WARNING")
    file_path = log_file if log_file is not None else os.getenv("PAI_LOG_FILE", "")

    logger.remove()
    logger.configure(patcher=_patch_record)
    logger.add(
        sys.stderr,
        level=global_level,
        colorize=True,
        backtrace=False,
        diagnose=False,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{extra[src]: <" + str(_SOURCE_WIDTH) + "}</cyan> | "
            "<level>{message}</level>"
        ),
    )
    if file_path:
        logger.add(
            file_path,
            level="DEBUG",
            colorize=False,
            backtrace=False,
            diagnose=False,
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[src]} | {message}",
        )

    root_logger = logging.getLogger()
    root_logger.handlers = [InterceptHandler()]
    root_logger.setLevel(_LEVEL_MAP[global_level])

    for name in _INTERCEPTED_LOGGERS:
        logging_logger = logging.getLogger(name)
        logging_logger.handlers = [InterceptHandler()]
        logging_logger.propagate = False
        logging_logger.setLevel(_LEVEL_MAP[httpx_level])

    return global_level


def _serialize_field(value: Any) -> str:
    if isinstance(value, str):
        compact = value.replace("\n", "\\n")
        if (not compact) or any(ch in compact for ch in (" ", "|", "'")):
            escaped = compact.replace("'", "\\'")
            return f"'{escaped}'"
        return compact
    if value is None:
        return "None"
    return str(value)


def log_event(event: str, **fields: Any) -> str:
    """Build a consistent `evt=... | key=value` log message."""
    parts = [f"evt={event}"]
    for key, value in fields.items():
        parts.append(f"{key}={_serialize_field(value)}")
    return " | ".join(parts)
