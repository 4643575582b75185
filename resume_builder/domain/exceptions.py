"""
Domain exceptions - Semantic error types for accounts and OTP workflows.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
Invalid or expired codes are deliberately not exceptions: they are
reported as a VerifyResult internally and as a boolean at the boundary.
"""


class RegistrationError(Exception):
    """Base class for registration domain errors."""

    pass


class MissingRequiredField(RegistrationError):
    """A required registration field is empty."""

    def __init__(self, field: str) -> None:
        super().__init__(f"{field} is required")
        self.field = field


class EmailAlreadyRegistered(RegistrationError):
    """Email belongs to an already confirmed account."""

    pass


class DomainNotAllowed(RegistrationError):
    """Admin or manager candidate is outside the organization domain."""

    def __init__(self, email: str, role: str) -> None:
        super().__init__(f"{role} must belong to the organization: {email}")
        self.email = email
        self.role = role


class NoPendingRegistration(RegistrationError):
    """Resend requested for an email with no pending registration."""

    pass


class PasswordResetError(Exception):
    """Base class for password reset domain errors."""

    pass


class EmailNotRegistered(PasswordResetError):
    """No confirmed account exists for the email."""

    pass


class NotificationError(Exception):
    """Email delivery failed."""

    pass


class PersistenceError(Exception):
    """The backing store rejected or failed a write."""

    pass


class AdministrationError(Exception):
    """Base class for account administration errors."""

    pass


class AccountNotFound(AdministrationError):
    """No account exists with the given id."""

    def __init__(self, account_id: int) -> None:
        super().__init__(f"Account {account_id} not found")
        self.account_id = account_id


class RoleChangeNotAllowed(AdministrationError):
    """Only a manager's role can be changed."""

    pass


class NoNewAccounts(AdministrationError):
    """Every account in a batch import already exists."""

    pass
