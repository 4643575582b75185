"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from enum import Enum
from typing import Protocol

from .models import Resume, Role, Template, UserAccount


class VerifyResult(Enum):
    """
    Result of an OTP lookup.

    Services log the specific reason; callers outside the domain only
    see whether the result was SUCCESS, so a rejected code never reveals
    which check failed.
    """

    SUCCESS = "success"
    NOT_FOUND = "not_found"
    INVALID_CODE = "invalid_code"
    EXPIRED = "expired"
    PERSISTENCE_FAILED = "persistence_failed"


class AccountRepository(Protocol):
    """Port interface for confirmed account persistence."""

    def find_by_email(self, email: str) -> UserAccount | None:
        """
        Look up a confirmed account.

        Args:
            email: Normalized email address

        Returns:
            The account, or None if no account uses this email
        """
        ...

    def count(self) -> int:
        """Return the number of confirmed accounts."""
        ...

    def insert(self, account: UserAccount) -> UserAccount:
        """
        Persist a new account in its own transaction.

        Returns:
            The account with its generated id populated

        Raises:
            PersistenceError: If the write fails (including duplicate email)
        """
        ...

    def update(self, account: UserAccount) -> int:
        """
        Write all mutable fields of an existing account.

        Returns:
            Number of rows affected

        Raises:
            PersistenceError: If the write fails
        """
        ...

    def get(self, account_id: int) -> UserAccount | None:
        """Look up an account by id."""
        ...

    def list_accounts(self, role: Role | None = None) -> list[UserAccount]:
        """Return accounts ordered by id, optionally only those with `role`."""
        ...

    def delete(self, account_id: int) -> bool:
        """
        Remove an account and, by cascade, its resumes.

        Returns:
            True if a row was deleted
        """
        ...

    def update_role(self, account_id: int, role: Role) -> UserAccount | None:
        """
        Set an account's role.

        Returns:
            The updated account, or None if the id does not exist

        Raises:
            PersistenceError: If the write fails
        """
        ...

    def insert_many(self, accounts: list[UserAccount]) -> list[UserAccount]:
        """
        Persist several accounts in one transaction, skipping taken emails.

        Returns:
            The accounts actually inserted, with ids populated

        Raises:
            PersistenceError: If the write fails
        """
        ...


class EmailSender(Protocol):
    """Port interface for email delivery."""

    async def send(self, to_email: str, subject: str, html_body: str) -> None:
        """
        Deliver an HTML email.

        Raises:
            NotificationError: If the transport fails
        """
        ...


class TemplateRepository(Protocol):
    """Port interface for resume template persistence."""

    def create(self, template: Template) -> Template: ...

    def get(self, template_id: int) -> Template | None: ...

    def list(self) -> list[Template]: ...

    def update(self, template: Template) -> Template | None: ...

    def delete(self, template_id: int) -> bool: ...


class ResumeRepository(Protocol):
    """Port interface for resume persistence."""

    def create(self, resume: Resume) -> Resume: ...

    def get(self, resume_id: int) -> Resume | None: ...

    def list(self, user_id: int | None = None) -> list[Resume]: ...

    def update(self, resume: Resume) -> Resume | None: ...

    def delete(self, resume_id: int) -> bool: ...
