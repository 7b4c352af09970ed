"""Utility modules for the relay."""

from authrelay.utils.logging import LogContext, setup_logging

__all__ = [
    "LogContext",
    "setup_logging",
]
