"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.

The OTP stores and the email sender live on app.state for the lifetime
of the application (created in the lifespan); services are cheap and are
built per request around them.
"""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from psycopg_pool import ConnectionPool

from resume_builder.adapters.repository.catalog import (
    PostgresResumeRepository,
    PostgresTemplateRepository,
)
from resume_builder.adapters.repository.postgres import PostgresAccountRepository
from resume_builder.config.settings import get_settings
from resume_builder.domain.administration import AdministrationService
from resume_builder.domain.authentication import AuthenticationService
from resume_builder.domain.models import Role, UserAccount
from resume_builder.domain.password_reset import PasswordResetService
from resume_builder.domain.ports import EmailSender
from resume_builder.domain.registration import RegistrationService
from resume_builder.domain.security import PasswordHasher


def get_pool(request: Request) -> ConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


def get_account_repository(request: Request) -> PostgresAccountRepository:
    """Create account repository with connection pool from app state."""
    return PostgresAccountRepository(get_pool(request))


def get_template_repository(request: Request) -> PostgresTemplateRepository:
    return PostgresTemplateRepository(get_pool(request))


def get_resume_repository(request: Request) -> PostgresResumeRepository:
    return PostgresResumeRepository(get_pool(request))


def get_email_sender(request: Request) -> EmailSender:
    """Get the email sender chosen at startup (console or SMTP)."""
    return request.app.state.email_sender


def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=get_settings().bcrypt_cost)


def get_registration_service(request: Request) -> RegistrationService:
    """
    Create registration service with injected dependencies.

    Wires together the repository, email sender and the application-wide
    pending-registration store.
    """
    return RegistrationService(
        repository=get_account_repository(request),
        email_sender=get_email_sender(request),
        pending=request.app.state.pending_registrations,
        hasher=get_password_hasher(),
        organization_domain=get_settings().organization_domain,
    )


def get_password_reset_service(request: Request) -> PasswordResetService:
    """Create password reset service around the application-wide request store."""
    return PasswordResetService(
        repository=get_account_repository(request),
        email_sender=get_email_sender(request),
        requests=request.app.state.password_reset_requests,
        hasher=get_password_hasher(),
    )


def get_authentication_service(request: Request) -> AuthenticationService:
    return AuthenticationService(
        repository=get_account_repository(request),
        hasher=get_password_hasher(),
    )


def get_administration_service(request: Request) -> AdministrationService:
    return AdministrationService(
        repository=get_account_repository(request),
        email_sender=get_email_sender(request),
        hasher=get_password_hasher(),
    )


# HTTP BASIC AUTH security scheme for OpenAPI documentation
http_basic = HTTPBasic()


def get_basic_auth_credentials(
    credentials: HTTPBasicCredentials = Depends(http_basic),
) -> tuple[str, str]:
    """
    Extract and normalize credentials from HTTP BASIC AUTH header.

    FastAPI's HTTPBasic automatically:
    - Returns 401 for missing Authorization header
    - Returns 401 for malformed base64 encoding
    - Parses base64(email:password) format

    Args:
        credentials: HTTPBasicCredentials from FastAPI's HTTPBasic

    Returns:
        Tuple of (normalized_email, password)
        Email is stripped and lowercased for consistency.
    """
    email = credentials.username.strip().lower()
    password = credentials.password
    return email, password


def require_admin(
    credentials: tuple[str, str] = Depends(get_basic_auth_credentials),
    service: AuthenticationService = Depends(get_authentication_service),
) -> UserAccount:
    """
    Authenticate the caller and insist on the admin role.

    Raises:
        HTTPException: 401 for bad credentials, 403 for any other role
    """
    email, password = credentials
    account = service.authenticate(email, password)
    if account is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )
    if account.role is not Role.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator access required",
        )
    return account
