"""
TutorConnect Server Package.

This package contains the web server implementation for the TutorConnect marketplace.
It includes the API definition, core configuration, request middleware, exception
handlers and the service layer used by the endpoints.

Subpackages:
    api: FastAPI route definitions and endpoint logic.
    core: Core configurations, constants and database session wiring.
    exception_handlers: Error to HTTP response translation.
    middleware: Request timing and monitoring.
    services: Business logic shared by several endpoints.
"""
