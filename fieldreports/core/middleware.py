"""
Access log for every request.

One line per request with method, path, status and elapsed time. The
elapsed time also goes back to the caller in X-Request-Duration-Ms.
"""
from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request

logger = logging.getLogger(__name__)

# Polled by load balancers; not worth a log line each
SKIP_LOG_PATHS = frozenset({"/health"})

SLOW_THRESHOLD_MS = 1000


def log_request(method: str, path: str, status_code: int, duration_ms: float) -> None:
    if path in SKIP_LOG_PATHS:
        return
    if status_code >= 500:
        logger.error("%s %s %d (%.0fms)", method, path, status_code, duration_ms)
    elif duration_ms > SLOW_THRESHOLD_MS:
        logger.warning("Slow request: %s %s %d (%.0fms)", method, path, status_code, duration_ms)
    else:
        logger.info("%s %s %d (%.0fms)", method, path, status_code, duration_ms)


def register_request_logging(app: FastAPI) -> None:
    @app.middleware("http")
    async def access_log(request: Request, call_next):
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            log_request(request.method, request.url.path, 500, (time.perf_counter() - start) * 1000)
            raise

        duration_ms = (time.perf_counter() - start) * 1000
        response.headers["X-Request-Duration-Ms"] = f"{duration_ms:.1f}"
        log_request(request.method, request.url.path, response.status_code, duration_ms)
        return response
