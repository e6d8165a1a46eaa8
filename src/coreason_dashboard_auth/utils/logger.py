# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_dashboard_auth

import logging
import os
import sys
from pathlib import Path
from typing import Any

from loguru import logger
from opentelemetry import trace

__all__ = ["logger", "configure_logging"]

LOG_FILE = "logs/app.log"

# Loggers of the ASGI server stack that configure their own handlers
INTERCEPTED_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "starlette", "httpx")

TEXT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


class InterceptHandler(logging.Handler):
    """
    Redirects standard logging messages to Loguru.
    Captures uvicorn, starlette and httpx logs in the same sinks.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno  # type: ignore[assignment]

        # Find caller from where originated the logged message
        frame = logging.currentframe()
        depth = 2
        while frame and (frame.f_code.co_filename == logging.__file__ or frame.f_code.co_filename == __file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def trace_id_injector(record: dict[str, Any]) -> None:
    """
    Injects OpenTelemetry trace_id and span_id into the log record.
    Used as a patcher for Loguru.
    """
    ctx = trace.get_current_span().get_span_context()
    if ctx.is_valid:
        record["extra"]["trace_id"] = format(ctx.trace_id, "032x")
        record["extra"]["span_id"] = format(ctx.span_id, "016x")


def _file_sink_available(path: str) -> bool:
    try:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
    except OSError:
        return False
    return True


def _intercept_server_loggers(level: int) -> None:
    # Uvicorn attaches its own handlers to these and disables propagation
    for name in INTERCEPTED_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers = [InterceptHandler()]
        server_logger.propagate = False
        server_logger.setLevel(level)


def configure_logging() -> None:
    """
    Configures the logger based on environment variables.

    - DASHBOARD_AUTH_LOG_LEVEL (default INFO): minimum level of every sink.
    - DASHBOARD_AUTH_LOG_JSON=true: serialized records on stdout instead of text on stderr.
    - DASHBOARD_AUTH_LOG_FILE (default logs/app.log): rotating JSON file sink; empty disables it.

    Call again to reload after env changes.
    """
    log_level = os.getenv("DASHBOARD_AUTH_LOG_LEVEL", "INFO").upper()
    log_json = os.getenv("DASHBOARD_AUTH_LOG_JSON", "false").lower() == "true"
    log_file = os.getenv("DASHBOARD_AUTH_LOG_FILE", LOG_FILE).strip()

    try:
        logger.level(log_level)
    except ValueError:
        log_level = "INFO"

    # Drops every previously added sink, including Loguru's default one
    logger.configure(handlers=[], patcher=trace_id_injector)

    if log_json:
        logger.add(sys.stdout, level=log_level, serialize=True)
    else:
        logger.add(sys.stderr, level=log_level, format=TEXT_FORMAT)

    # Read-only filesystems (some containers) only get the console sink
    if log_file and _file_sink_available(log_file):
        try:
            logger.add(
                log_file,
                rotation="500 MB",
                retention="10 days",
                serialize=True,
                enqueue=True,
                level=log_level,
            )
        except OSError:
            pass

    numeric_level = logging.getLevelName(log_level)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    logging.getLogger().setLevel(numeric_level)
    _intercept_server_loggers(numeric_level)


# Initialize on import
configure_logging()
