"""API middleware."""

from stockcore.api.middleware.error_handler import ErrorHandlerMiddleware, setup_exception_handlers
from stockcore.api.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware", "ErrorHandlerMiddleware", "setup_exception_handlers"]
