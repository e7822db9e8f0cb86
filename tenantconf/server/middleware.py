"""
Request Logging Middleware

Assigns a correlation ID to every request and logs its outcome.
"""

import time

from fastapi import FastAPI, Request

from tenantconf.observability import correlation_scope, get_logger

CORRELATION_HEADER = "X-Correlation-ID"

log = get_logger("tenantconf.requests")


def add_request_logging(app: FastAPI) -> None:
    """Install the correlation/request-logging middleware on an app."""

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        incoming = request.headers.get(CORRELATION_HEADER)

        with correlation_scope(incoming) as correlation_id:
            start = time.perf_counter()
            log.info(
                "Request started",
                event="http.request.start",
                method=request.method,
                path=request.url.path,
            )
            try:
                response = await call_next(request)
            except Exception:
                log.exception(
                    "Request failed",
                    event="http.request.error",
                    method=request.method,
                    path=request.url.path,
                )
                raise

            duration_ms = (time.perf_counter() - start) * 1000
            log.info(
                "Request completed",
                event="http.request.complete",
                method=request.method,
                path=request.url.path,
                status=response.status_code,
                duration_ms=f"{duration_ms:.2f}",
            )
            response.headers[CORRELATION_HEADER] = correlation_id
            return response
