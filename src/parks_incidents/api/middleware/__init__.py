from .logging import RequestLoggingMiddleware, request_logging_middleware

__all__ = ["RequestLoggingMiddleware", "request_logging_middleware"]
