"""
Domain layer - Pure business logic with zero framework imports.

This package contains the OTP-confirmed registration and password reset
workflows of the resume builder, plus account administration. It defines
its own port interfaces for infrastructure abstraction, ensuring true
hexagonal architecture decoupling.
"""

from .administration import AdministrationService
from .authentication import AuthenticationService
from .exceptions import (
    AccountNotFound,
    AdministrationError,
    DomainNotAllowed,
    EmailAlreadyRegistered,
    EmailNotRegistered,
    MissingRequiredField,
    NoNewAccounts,
    NoPendingRegistration,
    NotificationError,
    PasswordResetError,
    PersistenceError,
    RegistrationError,
    RoleChangeNotAllowed,
)
from .models import (
    AccountImport,
    PasswordResetRequest,
    PendingRegistration,
    RegistrationCandidate,
    Resume,
    Role,
    Template,
    UserAccount,
)
from .otp_store import OtpStore
from .password_reset import PasswordResetService
from .ports import (
    AccountRepository,
    EmailSender,
    ResumeRepository,
    TemplateRepository,
    VerifyResult,
)
from .registration import RegistrationService
from .security import OTP_VALIDITY, PasswordHasher, generate_otp

__all__ = [
    "OTP_VALIDITY",
    "AccountImport",
    "AccountNotFound",
    "AccountRepository",
    "AdministrationError",
    "AdministrationService",
    "AuthenticationService",
    "DomainNotAllowed",
    "EmailAlreadyRegistered",
    "EmailNotRegistered",
    "EmailSender",
    "MissingRequiredField",
    "NoNewAccounts",
    "NoPendingRegistration",
    "NotificationError",
    "OtpStore",
    "PasswordHasher",
    "PasswordResetError",
    "PasswordResetRequest",
    "PasswordResetService",
    "PendingRegistration",
    "PersistenceError",
    "RegistrationCandidate",
    "RegistrationError",
    "RegistrationService",
    "Resume",
    "ResumeRepository",
    "Role",
    "RoleChangeNotAllowed",
    "Template",
    "TemplateRepository",
    "UserAccount",
    "VerifyResult",
    "generate_otp",
]
