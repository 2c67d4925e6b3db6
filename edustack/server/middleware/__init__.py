"""
Middleware modules for the EduStack server.

This package contains custom middleware for request/response logging and
request tracing.
"""

from .request_logging import RequestLoggingMiddleware

__all__ = ["RequestLoggingMiddleware"]
