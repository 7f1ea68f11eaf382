"""
Request logging middleware
"""
import logging
import time

from fastapi import Request

logger = logging.getLogger("api.requests")


async def log_requests(request: Request, call_next):
    """One log line per request: method, path, status, duration"""
    start = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception as e:
        duration_ms = (time.perf_counter() - start) * 1000
        logger.error(
            f"{request.method} {request.url.path} -> 500 ({duration_ms:.1f}ms) unhandled {type(e).__name__}"
        )
        raise
    duration_ms = (time.perf_counter() - start) * 1000

    level = logging.WARNING if response.status_code >= 500 else logging.INFO
    logger.log(
        level,
        f"{request.method} {request.url.path} -> {response.status_code} ({duration_ms:.1f}ms)"
    )
    return response
