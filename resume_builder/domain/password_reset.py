"""
Password reset domain service.

Per email the workflow is NONE -> REQUESTED -> NONE: a request is created
by initiate (or replaced by resend) and consumed by a successful reset.
Checking a code never consumes it; only the reset itself does. A reset by
code claims the request before writing, so one code resets at most once.

Account lookups in initiate and resend run in a worker thread, keeping the
event loop free while the email is sent.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta

from .exceptions import EmailNotRegistered, PersistenceError
from .models import PasswordResetRequest, UserAccount, normalize_email
from .notifications import PASSWORD_RESET_PURPOSE, PASSWORD_RESET_SUBJECT, send_otp_email
from .otp_store import OtpStore, utcnow
from .ports import AccountRepository, EmailSender, VerifyResult
from .security import OTP_VALIDITY, PasswordHasher

logger = logging.getLogger(__name__)


@dataclass
class PasswordResetService:
    """Domain service for OTP-gated password resets of confirmed accounts."""

    repository: AccountRepository
    email_sender: EmailSender
    requests: OtpStore[PasswordResetRequest] = field(default_factory=OtpStore)
    hasher: PasswordHasher = field(default_factory=PasswordHasher)
    clock: Callable[[], datetime] = utcnow

    async def initiate(self, email: str) -> str:
        """
        Create a reset request for a confirmed account and email its code.

        Raises:
            EmailNotRegistered: If no confirmed account uses the email
        """
        account = await asyncio.to_thread(self._require_account, email)
        record = self.requests.issue(account.email, self._build_request(account.email))
        logger.info("Password reset requested for %s", account.email)

        await self._send(account, record.otp)
        return record.otp

    def verify_code(self, otp: str) -> bool:
        """True if the code belongs to an unexpired request."""
        result, _ = self.requests.resolve(otp, self.clock())
        if result is not VerifyResult.SUCCESS:
            logger.warning("Password reset code rejected: %s", result.value)
        return result is VerifyResult.SUCCESS

    def email_for_code(self, otp: str) -> str | None:
        """Reverse lookup of an unexpired request's email."""
        result, record = self.requests.resolve(otp, self.clock())
        if result is not VerifyResult.SUCCESS:
            return None
        return record.email

    def reset(self, email: str, new_password: str) -> bool:
        """
        Replace a confirmed account's password and consume its reset request.

        Both stored hash fields receive the same new digest.

        Returns:
            False if the account is unknown, the password is empty,
            or the write fails
        """
        if not email or not new_password:
            return False
        email = normalize_email(email)

        if not self._write_password(email, new_password):
            return False
        self.requests.discard(email)
        logger.info("Password reset completed for %s", email)
        return True

    def reset_with_code(self, otp: str, new_password: str) -> bool:
        """
        Reset the password of the account that owns an unexpired code.

        The request is claimed before the write, so concurrent resets with
        one code succeed at most once. A failed write puts it back.
        """
        if not new_password:
            return False

        result, record = self.requests.claim(otp, self.clock())
        if result is not VerifyResult.SUCCESS:
            logger.warning("Password reset code rejected: %s", result.value)
            return False

        if not self._write_password(record.email, new_password):
            self.requests.restore(record)
            return False
        logger.info("Password reset completed for %s", record.email)
        return True

    async def resend(self, email: str) -> str:
        """
        Replace any existing request for the account with a fresh one.

        Raises:
            EmailNotRegistered: If no confirmed account uses the email
        """
        account = await asyncio.to_thread(self._require_account, email)
        record = self.requests.issue(account.email, self._build_request(account.email))
        logger.info("Password reset code reissued for %s", account.email)

        await self._send(account, record.otp)
        return record.otp

    def purge_expired(self, grace: timedelta = timedelta(0)) -> int:
        """Drop reset requests that expired more than `grace` ago."""
        return self.requests.purge_expired(self.clock(), grace)

    def _require_account(self, email: str) -> UserAccount:
        account = self.repository.find_by_email(normalize_email(email)) if email else None
        if account is None:
            raise EmailNotRegistered(email)
        return account

    def _write_password(self, email: str, new_password: str) -> bool:
        account = self.repository.find_by_email(email)
        if account is None:
            logger.warning("Password reset for unknown account %s", email)
            return False

        password_hash = self.hasher.hash(new_password)
        updated = replace(
            account, password_hash=password_hash, confirm_password_hash=password_hash
        )
        try:
            rows = self.repository.update(updated)
        except PersistenceError:
            logger.exception("Failed to update password for %s", email)
            return False
        return rows > 0

    def _build_request(self, email: str) -> Callable[[str], PasswordResetRequest]:
        expires_at = self.clock() + OTP_VALIDITY
        return lambda otp: PasswordResetRequest(email=email, otp=otp, expires_at=expires_at)

    async def _send(self, account: UserAccount, otp: str) -> None:
        await send_otp_email(
            self.email_sender,
            account.email,
            account.first_name,
            otp,
            subject=PASSWORD_RESET_SUBJECT,
            purpose=PASSWORD_RESET_PURPOSE,
        )
