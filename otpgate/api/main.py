"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures exception handlers and lifespan events, and wires the
storage and notifier adapters selected by Settings.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import timedelta

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from otpgate import __version__
from otpgate.adapters.memory import InMemoryIdentityRepository, InMemoryPendingRegistrationStore
from otpgate.adapters.repository import (
    PostgresIdentityRepository,
    PostgresPendingRegistrationStore,
    create_pool,
    run_migrations,
)
from otpgate.adapters.smtp import ConsoleNotifier, SmtpNotifier
from otpgate.adapters.sweeper import build_sweeper
from otpgate.api.v1 import router as v1_router
from otpgate.config.settings import Settings, get_settings
from otpgate.domain.exceptions import DependencyError
from otpgate.domain.hashing import CredentialHasher
from otpgate.domain.models import AdminCredentials
from otpgate.domain.otp import OtpGenerator
from otpgate.domain.tokens import TokenIssuer

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "Registration and authentication API v1 - register, verify by email code, login",
    },
]


def _build_notifier(settings: Settings) -> ConsoleNotifier | SmtpNotifier:
    if settings.notifier == "smtp":
        return SmtpNotifier(
            host=settings.smtp_host,
            port=settings.smtp_port,
            user=settings.smtp_user,
            password=settings.smtp_password,
            sender=settings.smtp_from,
            timeout_seconds=settings.dependency_timeout_seconds,
        )
    return ConsoleNotifier()


def _open_stores(app: FastAPI, settings: Settings) -> None:
    """Attach pending and identity stores for the configured backend to app.state."""
    app.state.pool = None
    if settings.storage_backend == "postgres":
        logger.info("Connecting to database...")
        pool = create_pool(
            settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
            timeout_seconds=settings.dependency_timeout_seconds,
        )
        logger.info("Running database migrations...")
        run_migrations(pool)
        app.state.pool = pool
        app.state.pending_store = PostgresPendingRegistrationStore(
            pool, settings.dependency_timeout_seconds
        )
        app.state.identities = PostgresIdentityRepository(pool, settings.dependency_timeout_seconds)
    else:
        logger.info("Using in-memory stores; registrations are lost on restart")
        app.state.pending_store = InMemoryPendingRegistrationStore()
        app.state.identities = InMemoryIdentityRepository()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Opens the stores (and runs migrations for postgres)
    - Builds the hasher, OTP generator, token issuer and notifier
    - Starts the expired-registration sweep
    - Stops the sweep and closes the pool on shutdown
    """
    settings: Settings = app.state.settings

    logger.info("Starting application...")
    _open_stores(app, settings)

    app.state.hasher = CredentialHasher(cost=settings.bcrypt_cost)
    app.state.otp = OtpGenerator(
        digits=settings.otp_digits, ttl=timedelta(seconds=settings.otp_ttl_seconds)
    )
    app.state.tokens = TokenIssuer(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        ttl=timedelta(seconds=settings.token_ttl_seconds),
    )
    app.state.notifier = _build_notifier(settings)
    app.state.admin = (
        AdminCredentials(email=settings.admin_email, password=settings.admin_password)
        if settings.admin_email and settings.admin_password
        else None
    )

    sweeper = None
    if settings.pending_sweep_interval_seconds > 0:
        sweeper = build_sweeper(app.state.pending_store, settings.pending_sweep_interval_seconds)
        sweeper.start()
        logger.info(
            "Pending registration sweep every %s second(s)", settings.pending_sweep_interval_seconds
        )

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    if sweeper is not None:
        sweeper.shutdown(wait=False)
    if app.state.pool is not None:
        app.state.pool.close()
        logger.info("Database connection pool closed")


async def dependency_error_handler(request: Request, exc: DependencyError) -> JSONResponse:
    logger.error("Dependency failure on %s %s: %r", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": "Service temporarily unavailable, please retry"},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Something went wrong!"},
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application; settings default to the environment."""
    app = FastAPI(
        title="otpgate",
        description="Email OTP verified registration and bearer-token authentication API",
        version=__version__,
        openapi_tags=tags_metadata,
        lifespan=lifespan,
    )
    app.state.settings = settings or get_settings()

    app.add_exception_handler(DependencyError, dependency_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # Include v1 API routes
    app.include_router(v1_router, prefix="/v1")

    @app.get("/")
    async def root() -> dict[str, str]:
        return {"message": "API is running"}

    @app.get("/health")
    def health_check(request: Request) -> dict[str, str]:
        """
        Health check endpoint with database validation.

        Returns 200 OK if the application (and database, when configured) is healthy.
        An unreachable database raises StoreUnavailable and answers 502.
        """
        if request.app.state.pool is not None:
            request.app.state.identities.ping()
        return {"status": "healthy"}

    return app


app = create_app()


def run() -> None:
    """Console entrypoint: configure logging and serve with uvicorn."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
