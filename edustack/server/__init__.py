"""
EduStack Server Package.

This package contains the web server implementation for the EduStack platform.

Subpackages:
    api: FastAPI route definitions and endpoint logic.
    core: Configuration and server-wide constants.
    services: Business logic, request dependencies and integrations.
    middleware: Request logging middleware.
    exception_handlers: Mapping of errors to JSON responses.
"""
