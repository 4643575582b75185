"""
Registration domain service - OTP-confirmed account creation.

Registration State Machine (per email address)
==============================================

States:
- NONE: No pending registration and no confirmed account
- PENDING: Candidate held in the OTP store, waiting for its code
- CONFIRMED: Account persisted through the AccountRepository

Transitions:
    NONE -> PENDING       (initiate)
    PENDING -> PENDING    (resend: new code, old code unresolvable)
    PENDING -> CONFIRMED  (verify with the current, unexpired code)
    PENDING -> NONE       (expiry sweep)

A failed verification never changes state. Expired entries stay in the
store so a late resend can still recover them, until the sweeper drops
them after the retention window.

Role assignment happens at initiate time from the number of confirmed
accounts: the first becomes admin, the second manager, everyone after
that a plain User. Admin and manager must use the organization domain.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from .exceptions import (
    DomainNotAllowed,
    EmailAlreadyRegistered,
    MissingRequiredField,
    NoPendingRegistration,
    PersistenceError,
)
from .models import (
    PendingRegistration,
    RegistrationCandidate,
    Role,
    UserAccount,
    normalize_email,
)
from .notifications import send_otp_email
from .otp_store import OtpStore, refresh_otp, utcnow
from .ports import AccountRepository, EmailSender, VerifyResult
from .security import OTP_VALIDITY, PasswordHasher

logger = logging.getLogger(__name__)


@dataclass
class RegistrationService:
    """
    Domain service for user registration.

    Orchestrates the registration flow: validation, role assignment,
    password hashing, OTP issuance and verification, and the final
    commit of the account to persistence.
    """

    repository: AccountRepository
    email_sender: EmailSender
    pending: OtpStore[PendingRegistration] = field(default_factory=OtpStore)
    hasher: PasswordHasher = field(default_factory=PasswordHasher)
    organization_domain: str = "quadranttechnologies.com"
    clock: Callable[[], datetime] = utcnow

    async def initiate(self, candidate: RegistrationCandidate) -> str:
        """
        Start a registration and send its verification code.

        Any earlier pending registration for the same email is replaced.
        Repository lookups and hashing run in a worker thread; only the
        email send is awaited on the event loop.

        Args:
            candidate: Submitted registration data (plaintext passwords)

        Returns:
            The issued OTP

        Raises:
            MissingRequiredField: If email, first name or password is empty
            EmailAlreadyRegistered: If a confirmed account uses the email
            DomainNotAllowed: If an admin/manager candidate is outside the organization
        """
        record = await asyncio.to_thread(self._stage, candidate)
        await send_otp_email(
            self.email_sender, record.email, record.account.first_name, record.otp
        )
        return record.otp

    def confirm(self, otp: str) -> VerifyResult:
        """
        Verify a registration code and persist the account.

        The pending record is claimed atomically, so concurrent
        confirmations of one code persist at most one account. If the
        write fails the record is put back and the code stays usable.

        Args:
            otp: Code received by email

        Returns:
            VerifyResult indicating success or the specific failure reason
        """
        result, record = self.pending.claim(otp, self.clock())
        if result is not VerifyResult.SUCCESS:
            logger.warning("Registration code rejected: %s", result.value)
            return result

        try:
            account = self.repository.insert(record.account)
        except PersistenceError:
            logger.exception("Failed to persist account for %s", record.email)
            self.pending.restore(record)
            return VerifyResult.PERSISTENCE_FAILED

        logger.info("Registration confirmed for %s (id=%s)", account.email, account.id)
        return VerifyResult.SUCCESS

    def verify(self, otp: str) -> bool:
        """Boundary form of confirm(): True only on success."""
        return self.confirm(otp) is VerifyResult.SUCCESS

    async def resend(self, email: str) -> str:
        """
        Issue a new code for a pending registration.

        The previous code stops resolving immediately and the
        validity window restarts.

        Raises:
            MissingRequiredField: If email is empty
            NoPendingRegistration: If the email has no pending registration
        """
        if not email:
            raise MissingRequiredField("email")
        email = normalize_email(email)

        record = self.pending.reissue(email, refresh_otp(self.clock() + OTP_VALIDITY))
        if record is None:
            raise NoPendingRegistration(email)
        logger.info("Registration code reissued for %s", email)

        await send_otp_email(self.email_sender, email, record.account.first_name, record.otp)
        return record.otp

    def purge_expired(self, grace: timedelta = timedelta(0)) -> int:
        """Drop pending registrations that expired more than `grace` ago."""
        return self.pending.purge_expired(self.clock(), grace)

    def _stage(self, candidate: RegistrationCandidate) -> PendingRegistration:
        for name in ("email", "first_name", "password"):
            if not getattr(candidate, name):
                raise MissingRequiredField(name)

        email = normalize_email(candidate.email)
        if self.repository.find_by_email(email) is not None:
            raise EmailAlreadyRegistered(email)

        role = self._assign_role(email)
        password_hash = self.hasher.hash(candidate.password)
        if candidate.confirm_password and candidate.confirm_password != candidate.password:
            confirm_password_hash = self.hasher.hash(candidate.confirm_password)
        else:
            confirm_password_hash = password_hash

        account = UserAccount(
            first_name=candidate.first_name.strip(),
            last_name=(candidate.last_name or "").strip(),
            email=email,
            password_hash=password_hash,
            confirm_password_hash=confirm_password_hash,
            role=role,
        )
        expires_at = self.clock() + OTP_VALIDITY
        record = self.pending.issue(
            email,
            lambda otp: PendingRegistration(account=account, otp=otp, expires_at=expires_at),
        )
        logger.info("Registration pending for %s as %s", email, role.value)
        return record

    def _assign_role(self, email: str) -> Role:
        confirmed = self.repository.count()
        if confirmed == 0:
            role = Role.ADMIN
        elif confirmed == 1:
            role = Role.MANAGER
        else:
            return Role.USER

        domain = email.rsplit("@", 1)[-1]
        if domain != self.organization_domain.lower():
            raise DomainNotAllowed(email, role.value)
        return role
