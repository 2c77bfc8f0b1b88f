"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware (CORS and
request timing), registers the exception handlers and includes all API routers.
It serves as the root of the web server.

Run it with ``uvicorn tutorconnect.server.main:app``.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tutorconnect.core.database import init_db
from tutorconnect.core.logging_config import get_logger, setup_logging
from tutorconnect.core.monitoring import initialize_logfire

from .api.v1 import (
    admin,
    ai_chat,
    analytics,
    auth,
    availability,
    calendar,
    health,
    messages,
    notifications,
    payments,
    reviews,
    sessions,
    subjects,
    tasks,
    tutors,
    users,
)
from .core import constant
from .core.config import settings
from .exception_handlers import setup_exception_handlers
from .middleware import LogfireMiddleware

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Creates missing tables on startup. A database that cannot be reached is
    logged and the server keeps starting so health checks stay answerable.
    """
    try:
        logger.info(f"Starting up {constant.PROJECT_NAME} Server ({settings.environment})...")
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    yield

    logger.info(f"Shutting down {constant.PROJECT_NAME} Server...")


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    TutorConnect Server API

    Backend of the TutorConnect tutoring marketplace. Students find tutors, book one-on-one
    sessions, message and review them. Tutors publish availability and follow their
    analytics. Administrators moderate accounts, broadcast notifications and manage
    platform settings. A study assistant answers questions between sessions.
    """,
    version=constant.VERSION,
    openapi_url=f"{constant.API_V1_STR}/openapi.json",
    docs_url=f"{constant.API_V1_STR}/docs",
    redoc_url=f"{constant.API_V1_STR}/redoc",
    lifespan=lifespan,
)

initialize_logfire(app)

cors = settings.cors
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors.origins,
    allow_credentials=cors.allow_credentials,
    allow_methods=cors.allow_methods,
    allow_headers=cors.allow_headers,
)
app.add_middleware(LogfireMiddleware)

setup_exception_handlers(app)


app.include_router(health.router, tags=["health"])
app.include_router(auth.router, prefix=f"{constant.API_V1_STR}/auth", tags=["auth"])
app.include_router(users.router, prefix=f"{constant.API_V1_STR}/users", tags=["users"])
app.include_router(tutors.router, prefix=f"{constant.API_V1_STR}/tutors", tags=["tutors"])
app.include_router(subjects.router, prefix=f"{constant.API_V1_STR}/subjects", tags=["subjects"])
app.include_router(sessions.router, prefix=f"{constant.API_V1_STR}/sessions", tags=["sessions"])
app.include_router(availability.router, prefix=f"{constant.API_V1_STR}/availability", tags=["availability"])
app.include_router(messages.router, prefix=f"{constant.API_V1_STR}/messages", tags=["messages"])
app.include_router(reviews.router, prefix=f"{constant.API_V1_STR}/reviews", tags=["reviews"])
app.include_router(tasks.router, prefix=f"{constant.API_V1_STR}/tasks", tags=["tasks"])
app.include_router(payments.router, prefix=f"{constant.API_V1_STR}/payments", tags=["payments"])
app.include_router(notifications.router, prefix=f"{constant.API_V1_STR}/notifications", tags=["notifications"])
app.include_router(admin.router, prefix=f"{constant.API_V1_STR}/admin", tags=["admin"])
app.include_router(admin.public_router, prefix=f"{constant.API_V1_STR}/settings", tags=["settings"])
app.include_router(ai_chat.router, prefix=f"{constant.API_V1_STR}/ai-chat", tags=["ai-chat"])
app.include_router(analytics.router, prefix=f"{constant.API_V1_STR}/analytics", tags=["analytics"])
app.include_router(calendar.router, prefix=f"{constant.API_V1_STR}/calendar", tags=["calendar"])
