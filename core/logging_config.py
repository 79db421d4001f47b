# core/logging_config.py
import logging
import os
import time

from fastapi import Request

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOGGER_NAME = "freshbasket"


def setup_logger() -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)

    # Avoid duplicate handlers in dev reload
    if logger.handlers:
        return logger

    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    logger.setLevel(getattr(logging, level_name, logging.INFO))

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(stream_handler)

    return logger


logger = setup_logger()


async def log_requests(request: Request, call_next):
    """HTTP middleware: one line per request with tenant hint and timing."""
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000

    tenant_hint = request.headers.get("X-Tenant-Subdomain") or request.headers.get("host", "-")
    logger.info(
        f"{request.method} {request.url.path} -> {response.status_code} "
        f"[{tenant_hint}] {elapsed_ms:.1f}ms"
    )
    return response
