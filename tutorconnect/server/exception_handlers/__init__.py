"""
Exception handlers for the TutorConnect server.

This package translates errors that escape the endpoints into JSON responses
and provides a setup function to register them with the FastAPI application.
"""

from .global_handler import setup_exception_handlers

__all__ = ["setup_exception_handlers"]
