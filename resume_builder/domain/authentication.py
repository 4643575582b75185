"""
Authentication domain service - credential checks for confirmed accounts.
"""

import logging
from dataclasses import dataclass, field

from .models import UserAccount, normalize_email
from .ports import AccountRepository
from .security import PasswordHasher

logger = logging.getLogger(__name__)


@dataclass
class AuthenticationService:
    repository: AccountRepository
    hasher: PasswordHasher = field(default_factory=PasswordHasher)

    def authenticate(self, email: str, password: str) -> UserAccount | None:
        """
        Check credentials against a confirmed account.

        Returns:
            The account on success, None for an unknown email or a wrong password
        """
        if not email or not password:
            return None
        account = self.repository.find_by_email(normalize_email(email))
        if account is None or not self.hasher.verify(password, account.password_hash):
            logger.info("Authentication failed for %s", normalize_email(email))
            return None
        return account
