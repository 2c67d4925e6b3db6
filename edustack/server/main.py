"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware (CORS,
request logging), registers the exception handlers and includes all API
routers. It serves as the root of the web server.
"""

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from edustack.core.database import init_db
from edustack.core.logging_config import get_logger, setup_logging
from edustack.core.monitoring import initialize_logfire

from .api.v1 import (
    analytics,
    auth,
    categories,
    courses,
    enrollments,
    health,
    notifications,
    payments,
    reviews,
    uploads,
    users,
)
from .core import constant
from .core.config import settings
from .exception_handlers import setup_exception_handlers
from .middleware import RequestLoggingMiddleware

# Initialize logging
setup_logging(settings.log_level)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Handles startup and shutdown events for the FastAPI application.
    """
    # Startup
    try:
        logger.info("Starting up EduStack Server...")
        await init_db(create_tables=settings.database_create_tables)
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    yield

    # Shutdown
    logger.info("Shutting down EduStack Server...")


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    EduStack Server API

    Backend of an online course marketplace: tutors author and publish courses,
    students enroll (free courses directly, paid ones through Stripe), follow
    lessons, earn certificates and review courses. Real-time notifications are
    delivered over Server-Sent Events.
    """,
    version=constant.API_VERSION,
    openapi_url=f"{constant.API_V1_STR}/openapi.json",
    docs_url=f"{constant.API_V1_STR}/docs",
    redoc_url=f"{constant.API_V1_STR}/redoc",
    lifespan=lifespan,
)

initialize_logfire(app)
setup_exception_handlers(app)

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.origins,
    allow_credentials=settings.cors.allow_credentials,
    allow_methods=settings.cors.allow_methods,
    allow_headers=settings.cors.allow_headers,
)

app.mount("/media", StaticFiles(directory=settings.uploads.directory, check_dir=False), name="media")

app.include_router(health.router, tags=["health"])
app.include_router(auth.router, prefix=f"{constant.API_V1_STR}/auth", tags=["auth"])
app.include_router(users.router, prefix=f"{constant.API_V1_STR}/users", tags=["users"])
app.include_router(categories.router, prefix=f"{constant.API_V1_STR}/categories", tags=["categories"])
app.include_router(courses.router, prefix=f"{constant.API_V1_STR}/courses", tags=["courses"])
app.include_router(enrollments.router, prefix=f"{constant.API_V1_STR}/enrollments", tags=["enrollments"])
app.include_router(reviews.router, prefix=f"{constant.API_V1_STR}/reviews", tags=["reviews"])
app.include_router(payments.router, prefix=f"{constant.API_V1_STR}/payments", tags=["payments"])
app.include_router(analytics.router, prefix=f"{constant.API_V1_STR}/analytics", tags=["analytics"])
app.include_router(uploads.router, prefix=f"{constant.API_V1_STR}/upload", tags=["uploads"])
app.include_router(notifications.router, prefix=f"{constant.API_V1_STR}/notifications", tags=["notifications"])


def run() -> None:
    """Console entry point: serve the application with uvicorn."""
    uvicorn.run(
        "edustack.server.main:app",
        host=settings.server_host,
        port=settings.server_port,
        log_level=settings.log_level.lower(),
    )
