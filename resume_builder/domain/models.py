"""
Domain models - Plain dataclasses for accounts, OTP records and documents.

Records held by the OTP stores are frozen: a resend builds a new record
rather than mutating the one another thread may be reading.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum


class Role(str, Enum):
    """Account roles, assigned by signup order."""

    ADMIN = "admin"
    MANAGER = "manager"
    USER = "User"


@dataclass
class UserAccount:
    """A user account, persisted once its registration is confirmed."""

    first_name: str
    last_name: str
    email: str
    password_hash: str
    confirm_password_hash: str
    role: Role = Role.USER
    join_date: date = field(default_factory=date.today)
    id: int | None = None


@dataclass(frozen=True)
class RegistrationCandidate:
    """Registration input as submitted, with plaintext passwords."""

    email: str
    first_name: str
    password: str
    last_name: str | None = None
    confirm_password: str | None = None


@dataclass(frozen=True)
class AccountImport:
    """An employee entry for bulk account creation; no password is set."""

    email: str
    first_name: str
    last_name: str = ""


@dataclass(frozen=True)
class PendingRegistration:
    """An unconfirmed account awaiting OTP verification."""

    account: UserAccount
    otp: str
    expires_at: datetime

    @property
    def email(self) -> str:
        return self.account.email


@dataclass(frozen=True)
class PasswordResetRequest:
    """A time-bounded authorization to change an account's password."""

    email: str
    otp: str
    expires_at: datetime


@dataclass
class Template:
    name: str
    content: str
    content_type: str = "html"
    id: int | None = None
    created_at: datetime | None = None
    modified_at: datetime | None = None


@dataclass
class Resume:
    user_id: int
    template_id: int
    name: str
    content: str
    id: int | None = None
    created_at: datetime | None = None
    modified_at: datetime | None = None


def normalize_email(email: str) -> str:
    """
    Normalize email address for consistent storage and lookup.

    Applies: strip whitespace + lowercase
    """
    return email.strip().lower()
