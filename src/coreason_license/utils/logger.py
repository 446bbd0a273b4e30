# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_license

import logging
import os
import sys
from pathlib import Path
from typing import Any

from loguru import logger
from opentelemetry import trace

__all__ = ["logger", "configure_logging"]

DEFAULT_LOG_FILE = "logs/license.log"

TEXT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


class InterceptHandler(logging.Handler):
    """
    Redirects standard logging messages to Loguru.
    Hosts that use the standard logging module end up in the same sinks.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk back to the frame that issued the logging call
        frame = logging.currentframe()
        depth = 2
        while frame and frame.f_code.co_filename in (logging.__file__, __file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def trace_id_injector(record: dict[str, Any]) -> None:
    """
    Loguru patcher adding the active OpenTelemetry trace_id and span_id to `extra`.
    """
    ctx = trace.get_current_span().get_span_context()
    if ctx.is_valid:
        record["extra"]["trace_id"] = format(ctx.trace_id, "032x")
        record["extra"]["span_id"] = format(ctx.span_id, "016x")


def _resolve_level() -> str:
    log_level = os.getenv("COREASON_LOG_LEVEL", "INFO").upper()
    try:
        logger.level(log_level)
    except ValueError:
        log_level = "INFO"
    return log_level


def _add_file_sink(log_file: str, log_level: str) -> None:
    """
    Adds the rotating JSON file sink. Skipped on read-only filesystems.
    """
    try:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            rotation="500 MB",
            retention="10 days",
            serialize=True,
            enqueue=True,
            level=log_level,
        )
    except (PermissionError, OSError):
        pass


def configure_logging() -> None:
    """
    Configures the logger based on environment variables.
    Call this to reload configuration if env vars change.

    Environment:
        COREASON_LOG_LEVEL: Minimum level, defaults to INFO.
        COREASON_LOG_JSON: "true" switches the console sink to JSON on stdout.
        COREASON_LOG_FILE: Path of the JSON file sink, empty disables it.
    """
    log_level = _resolve_level()
    log_json = os.getenv("COREASON_LOG_JSON", "false").lower() == "true"
    log_file = os.getenv("COREASON_LOG_FILE", DEFAULT_LOG_FILE)

    # Drops previously added sinks, including loguru's default one
    logger.configure(handlers=[], patcher=trace_id_injector)

    if log_json:
        logger.add(sys.stdout, level=log_level, serialize=True)
    else:
        logger.add(sys.stderr, level=log_level, format=TEXT_FORMAT)

    if log_file:
        _add_file_sink(log_file, log_level)

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    numeric_level = logging.getLevelName(log_level)
    logging.getLogger().setLevel(numeric_level if isinstance(numeric_level, int) else logging.INFO)


# Initialize on import
configure_logging()
