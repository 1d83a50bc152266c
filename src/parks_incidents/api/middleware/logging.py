"""
Request/response logging middleware.

Logs every API request with its method, path, status code and processing time,
and correlates the log lines of one request through a request id that is also
returned in the ``X-Request-ID`` response header.
"""

import time
import uuid

import structlog
from fastapi import Request, Response


class RequestLoggingMiddleware:
    """
    Structured logging of HTTP requests and responses.

    The request id is taken from the incoming ``X-Request-ID`` header when
    present and bound to structlog's context variables for the request.
    """

    def __init__(self, logger_name: str = "api.requests", exclude_paths: list[str] | None = None):
        """
        Initialize request logging middleware.

        Args:
            logger_name: Name for the request logger
            exclude_paths: Paths to exclude from logging (e.g., health checks)
        """
        self.logger = structlog.get_logger(logger_name)
        self.exclude_paths = exclude_paths or ["/api/health", "/docs", "/openapi.json"]

    async def __call__(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID") or f"req_{uuid.uuid4().hex[:12]}"
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        path = request.url.path
        log_request = not self._should_exclude_path(path)
        start_time = time.perf_counter()

        if log_request:
            self.logger.info(
                "HTTP request started",
                method=request.method,
                path=path,
                query_params=str(request.url.query) or None,
                client_ip=self._get_client_ip(request),
                user_id=request.headers.get("X-User-Id"),
            )

        try:
            response = await call_next(request)
        except Exception as e:
            self.logger.error(
                "HTTP request failed",
                method=request.method,
                path=path,
                processing_time_ms=round((time.perf_counter() - start_time) * 1000, 2),
                error_type=type(e).__name__,
            )
            raise

        processing_time = time.perf_counter() - start_time
        if log_request:
            log = self.logger.warning if response.status_code >= 400 else self.logger.info
            log(
                "HTTP request completed",
                method=request.method,
                path=path,
                status_code=response.status_code,
                processing_time_ms=round(processing_time * 1000, 2),
            )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Processing-Time"] = f"{processing_time:.4f}"
        return response

    def _should_exclude_path(self, path: str) -> bool:
        return any(path.startswith(excluded) for excluded in self.exclude_paths)

    def _get_client_ip(self, request: Request) -> str:
        """Extract client IP address with proxy support."""
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()
        if request.client:
            return request.client.host
        return "unknown"


request_logging_middleware = RequestLoggingMiddleware()

__all__ = ["RequestLoggingMiddleware", "request_logging_middleware"]
