"""
Account administration domain service.

Lets an administrator manage accounts directly, outside the OTP
registration workflow: list them, create users and managers with a
chosen password, import employees in bulk, delete accounts and change
a manager's role. Accounts made here skip signup-order role assignment.

Bulk-imported accounts get no password. Their stored hashes are empty,
which never verifies, so the owner has to go through password reset
before the first login.
"""

import asyncio
import logging
from dataclasses import dataclass, field

from .exceptions import (
    AccountNotFound,
    EmailAlreadyRegistered,
    MissingRequiredField,
    NoNewAccounts,
    RoleChangeNotAllowed,
)
from .models import AccountImport, RegistrationCandidate, Role, UserAccount, normalize_email
from .notifications import send_account_created_email
from .ports import AccountRepository, EmailSender
from .security import PasswordHasher

logger = logging.getLogger(__name__)


@dataclass
class AdministrationService:
    repository: AccountRepository
    email_sender: EmailSender
    hasher: PasswordHasher = field(default_factory=PasswordHasher)

    def list_accounts(self, role: Role | None = None) -> list[UserAccount]:
        """All accounts except the admin when `role` is None, else only that role."""
        if role is not None:
            return self.repository.list_accounts(role)
        return [a for a in self.repository.list_accounts() if a.role is not Role.ADMIN]

    async def add_account(self, candidate: RegistrationCandidate, role: Role) -> UserAccount:
        """
        Create a confirmed account with the given role and notify its owner.

        Raises:
            MissingRequiredField: If email, first name or password is empty
            EmailAlreadyRegistered: If the email is taken
            PersistenceError: If the insert fails
        """
        account = await asyncio.to_thread(self._create, candidate, role)
        await send_account_created_email(self.email_sender, account.email, account.first_name)
        return account

    def delete_account(self, account_id: int, role: Role | None = None) -> None:
        """
        Delete an account, and its resumes by cascade.

        Raises:
            AccountNotFound: If no account has the id, or it does not hold `role`
        """
        account = self.repository.get(account_id)
        if account is None or (role is not None and account.role is not role):
            raise AccountNotFound(account_id)
        if not self.repository.delete(account_id):
            raise AccountNotFound(account_id)
        logger.info("Deleted account %s (%s)", account_id, account.email)

    def change_role(self, account_id: int, role: Role) -> UserAccount:
        """
        Change the role of a manager.

        Raises:
            AccountNotFound: If no account has the id
            RoleChangeNotAllowed: If the account is not a manager
        """
        account = self.repository.get(account_id)
        if account is None:
            raise AccountNotFound(account_id)
        if account.role is not Role.MANAGER:
            raise RoleChangeNotAllowed("Only a manager's role can be changed")

        updated = self.repository.update_role(account_id, role)
        if updated is None:
            raise AccountNotFound(account_id)
        logger.info(
            "Role of %s changed from %s to %s", updated.email, account.role.value, role.value
        )
        return updated

    async def import_accounts(self, entries: list[AccountImport]) -> list[UserAccount]:
        """
        Create User accounts for entries whose email is not taken yet.

        Duplicates within the batch keep their first occurrence. Each new
        account is sent the account-created notice.

        Raises:
            NoNewAccounts: If nothing in the batch was new
        """
        created = await asyncio.to_thread(self._insert_batch, entries)
        for account in created:
            await send_account_created_email(self.email_sender, account.email, account.first_name)
        return created

    def _create(self, candidate: RegistrationCandidate, role: Role) -> UserAccount:
        for name in ("email", "first_name", "password"):
            if not getattr(candidate, name):
                raise MissingRequiredField(name)

        email = normalize_email(candidate.email)
        if self.repository.find_by_email(email) is not None:
            raise EmailAlreadyRegistered(email)

        password_hash = self.hasher.hash(candidate.password)
        account = UserAccount(
            first_name=candidate.first_name.strip(),
            last_name=(candidate.last_name or "").strip(),
            email=email,
            password_hash=password_hash,
            confirm_password_hash=password_hash,
            role=role,
        )
        stored = self.repository.insert(account)
        logger.info("Administrator created %s account %s", role.value, email)
        return stored

    def _insert_batch(self, entries: list[AccountImport]) -> list[UserAccount]:
        accounts: dict[str, UserAccount] = {}
        for entry in entries:
            email = normalize_email(entry.email)
            if not email or not entry.first_name or email in accounts:
                continue
            accounts[email] = UserAccount(
                first_name=entry.first_name.strip(),
                last_name=entry.last_name.strip(),
                email=email,
                password_hash="",
                confirm_password_hash="",
                role=Role.USER,
            )

        created = self.repository.insert_many(list(accounts.values())) if accounts else []
        if not created:
            raise NoNewAccounts("No new employees to add")
        logger.info("Imported %d account(s)", len(created))
        return created
