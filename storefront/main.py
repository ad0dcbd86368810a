from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront.core.config import settings
from storefront.core.database import Database
from storefront.core.logger import setup_logging
from storefront.dependencies.rate_limit import CounterStore, build_rate_limit_store, build_rate_limiters
from storefront.middleware.cors import configure_cors
from storefront.middleware.logging import RequestLoggerMiddleware
from storefront.middleware import error_handler
from storefront.utils.errors import APIError

# Routers
from storefront.routers import admin as admin_router
from storefront.routers import auth as auth_router
from storefront.routers import health as health_router
from storefront.routers import users as users_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.DATABASE_AUTO_CREATE:
        app.state.database.create_all()
    logger.info(f"{settings.APP_NAME} started (env={settings.ENV}, rate limits={app.state.rate_limit_store.backend})")
    yield
    await app.state.rate_limit_store.close()
    app.state.database.dispose()
    logger.info(f"{settings.APP_NAME} stopped")


def create_app(
    database: Optional[Database] = None,
    rate_limit_store: Optional[CounterStore] = None,
) -> FastAPI:
    """Create and configure the FastAPI application instance."""
    setup_logging()
    description = (
        "Storefront authentication API.\n\n"
        "Cookie-based sessions, sign-up and sign-in, password policy and rate limiting."
    )

    openapi_tags = [
        {"name": "authentication", "description": "Register, sign in and out, session status."},
        {"name": "users", "description": "Account management for the signed-in user."},
        {"name": "admin", "description": "Session and rate limit administration."},
        {"name": "health", "description": "Health checks and service status endpoints."},
    ]

    app = FastAPI(
        title=settings.APP_NAME,
        version="0.1.0",
        description=description,
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )

    app.state.database = database or Database.from_settings(settings)
    app.state.rate_limit_store = rate_limit_store or build_rate_limit_store(settings)
    app.state.rate_limiters = build_rate_limiters(settings, app.state.rate_limit_store)

    # Middleware
    configure_cors(app)
    app.add_middleware(RequestLoggerMiddleware)

    # Exception handlers
    app.add_exception_handler(APIError, error_handler.api_error_handler)
    app.add_exception_handler(StarletteHTTPException, error_handler.http_exception_handler)
    app.add_exception_handler(RequestValidationError, error_handler.validation_exception_handler)
    app.add_exception_handler(Exception, error_handler.unhandled_exception_handler)

    # Include routers
    app.include_router(health_router.router)
    app.include_router(auth_router.router, prefix="/api")
    app.include_router(users_router.router, prefix="/api")
    app.include_router(admin_router.router, prefix="/api")

    return app


app = create_app()
