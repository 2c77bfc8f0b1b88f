"""
Middleware modules for the TutorConnect server.

This package contains request timing and monitoring middleware.
"""

from .logfire_middleware import LogfireMiddleware

__all__ = ["LogfireMiddleware"]
