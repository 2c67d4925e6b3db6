"""
Core utilities and configuration for EduStack.

This package provides core functionality including logging configuration,
database setup, security primitives and other shared utilities.
"""

from edustack.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
