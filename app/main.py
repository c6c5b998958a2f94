import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import Settings, settings as default_settings
from app.database import open_database
from app.errors import (
    BlogError,
    Conflict,
    NotFound,
    PolicyViolation,
    StorageError,
    Timeout,
    ValidationError,
)
from app.logging_config import configure_logging
from app.middleware import RequestTimingMiddleware
from app.repositories import SQLStorage
from app.routers import posts, status, users
from app.schemas import envelope
from app.services import PostService, UserService

logger = logging.getLogger(__name__)

_STATUS_CODES: dict[type[BlogError], int] = {
    ValidationError: 400,
    PolicyViolation: 400,
    NotFound: 404,
    Conflict: 409,
    StorageError: 500,
    Timeout: 504,
}


def status_code_for(exc: BlogError) -> int:
    for cls in type(exc).__mro__:
        if cls in _STATUS_CODES:
            return _STATUS_CODES[cls]
    return 500


async def handle_blog_error(request: Request, exc: BlogError) -> JSONResponse:
    code = status_code_for(exc)
    if code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=code, content=envelope(exc.message, status="fail"))


def create_app(settings: Settings = default_settings) -> FastAPI:
    """
    Build the FastAPI application.

    The lifespan opens the connection pool once, wires the repository and
    services onto ``app.state`` and disposes the pool on shutdown.
    """
    configure_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        async with open_database(settings.DATABASE_URL, echo=settings.DEBUG) as database:
            if settings.AUTO_CREATE_SCHEMA:
                await database.create_all()
            storage = SQLStorage(
                database,
                timeout=settings.QUERY_TIMEOUT_SECONDS,
                default_role_id=settings.DEFAULT_ROLE_ID,
            )
            app.state.post_service = PostService(storage)
            app.state.user_service = UserService(storage)
            logger.info("Blog API started (%s)", settings.APP_ENV)
            yield
        logger.info("Blog API stopped; connection pool released")

    app = FastAPI(
        title="Blog API",
        description="Posts, users and credentials over a relational store",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Middleware
    app.add_middleware(RequestTimingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Accept", "Authorization", "Content-Type", "X-CSRF-Token"],
        expose_headers=["Link"],
        max_age=300,
    )

    app.add_exception_handler(BlogError, handle_blog_error)

    # Routers
    app.include_router(status.router)
    app.include_router(posts.router)
    app.include_router(users.router)

    return app


app = create_app()
