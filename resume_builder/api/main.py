"""
FastAPI application for the resume builder.

Configures logging from settings, picks the email transport, and wires
the database pool, OTP stores and expiry sweeper through the lifespan.
"""

import asyncio
import contextlib
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI, Request
from psycopg_pool import ConnectionPool

from resume_builder.adapters.repository.postgres import run_migrations
from resume_builder.adapters.smtp.console import ConsoleEmailSender
from resume_builder.adapters.smtp.mailer import SmtpEmailSender
from resume_builder.api.v1 import router as v1_router
from resume_builder.config.settings import Settings, get_settings
from resume_builder.domain.models import PasswordResetRequest, PendingRegistration
from resume_builder.domain.otp_store import OtpStore, utcnow
from resume_builder.domain.ports import EmailSender

logger = logging.getLogger(__name__)

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "Registration, password reset and login with email one-time codes",
    },
    {
        "name": "catalog",
        "description": "Resume templates and resumes",
    },
    {
        "name": "admin",
        "description": "Account administration, restricted to the admin account",
    },
]


def create_email_sender(settings: Settings) -> EmailSender:
    """Use SMTP when a mail server is configured, console logging otherwise."""
    if settings.mail_server:
        logger.info("Email delivery via SMTP server %s", settings.mail_server)
        return SmtpEmailSender.from_settings(settings)
    logger.warning("No mail server configured, emails will be logged to the console")
    return ConsoleEmailSender()


async def sweep_expired_codes(
    stores: list[OtpStore], interval_seconds: int, retention: timedelta
) -> None:
    """Periodically drop OTP records that expired longer than `retention` ago."""
    while True:
        await asyncio.sleep(interval_seconds)
        now = utcnow()
        removed = sum(store.purge_expired(now, retention) for store in stores)
        if removed:
            logger.info("Purged %d expired OTP record(s)", removed)


def open_pool(settings: Settings) -> ConnectionPool:
    """Open the shared connection pool and bring the schema up to date."""
    logger.info(
        "Opening database pool (min=%d, max=%d)", settings.pool_min_size, settings.pool_max_size
    )
    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
    )
    applied = run_migrations(pool)
    if applied:
        logger.info("Applied migrations: %s", ", ".join(applied))
    return pool


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Own everything that lives as long as the process.

    The pool, both OTP stores and the email sender go on app.state for
    the dependency factories. The expiry sweeper runs until shutdown,
    when it is cancelled before the pool closes.
    """
    settings = get_settings()
    app.state.pool = open_pool(settings)
    app.state.pending_registrations = OtpStore[PendingRegistration]()
    app.state.password_reset_requests = OtpStore[PasswordResetRequest]()
    app.state.email_sender = create_email_sender(settings)

    sweeper = None
    if settings.otp_sweep_interval_seconds > 0:
        sweeper = asyncio.create_task(
            sweep_expired_codes(
                [app.state.pending_registrations, app.state.password_reset_requests],
                settings.otp_sweep_interval_seconds,
                timedelta(seconds=settings.otp_retention_seconds),
            )
        )
    logger.info("Application startup complete")

    try:
        yield
    finally:
        if sweeper is not None:
            sweeper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await sweeper
        app.state.pool.close()
        logger.info("Database connection pool closed")


app = FastAPI(
    title="resume-builder",
    description="Resume Builder API - OTP-confirmed registration, password reset and resume storage",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

app.include_router(v1_router, prefix="/v1")


@app.get("/health")
def health_check(request: Request) -> dict[str, str | int]:
    """
    Report database reachability and the OTP store sizes.

    A database failure propagates as a 500.
    """
    state = request.app.state
    with state.pool.connection() as conn:
        conn.execute("SELECT 1")

    return {
        "status": "healthy",
        "pending_registrations": len(state.pending_registrations),
        "password_reset_requests": len(state.password_reset_requests),
    }
