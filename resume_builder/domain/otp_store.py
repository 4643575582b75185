"""
OTP store - In-memory holding area for records awaiting a one-time code.

Each store keeps one table of records keyed by email plus a secondary
index from OTP to email. Both are only ever touched under the same lock,
so a record can never be reachable by a code it no longer carries.

Operations on different emails only contend for the lock for the
duration of a dict update; operations on the same email serialize and
the last writer wins.
"""

import threading
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Generic, Protocol, TypeVar

from .ports import VerifyResult
from .security import generate_otp


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OtpRecord(Protocol):
    @property
    def email(self) -> str: ...

    @property
    def otp(self) -> str: ...

    @property
    def expires_at(self) -> datetime: ...


RecordT = TypeVar("RecordT", bound=OtpRecord)


class OtpStore(Generic[RecordT]):
    """Thread-safe record table indexed by email and by OTP."""

    def __init__(self, otp_factory: Callable[[], str] = generate_otp) -> None:
        self._otp_factory = otp_factory
        self._lock = threading.Lock()
        self._records: dict[str, RecordT] = {}
        self._email_by_otp: dict[str, str] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def issue(self, email: str, build: Callable[[str], RecordT]) -> RecordT:
        """
        Create or replace the record for an email under a fresh OTP.

        Args:
            email: Normalized email address the record belongs to
            build: Called with the allocated OTP, returns the new record

        Returns:
            The stored record
        """
        with self._lock:
            record = build(self._allocate_otp())
            self._put(email, record)
            return record

    def reissue(
        self, email: str, refresh: Callable[[RecordT, str], RecordT]
    ) -> RecordT | None:
        """
        Replace an existing record's OTP, leaving other fields to refresh().

        Returns:
            The new record, or None if no record exists for the email
        """
        with self._lock:
            current = self._records.get(email)
            if current is None:
                return None
            record = refresh(current, self._allocate_otp())
            self._put(email, record)
            return record

    def get(self, email: str) -> RecordT | None:
        with self._lock:
            return self._records.get(email)

    def resolve(self, otp: str, now: datetime) -> tuple[VerifyResult, RecordT | None]:
        """Look up a record by code without consuming it."""
        with self._lock:
            return self._check(otp, now)

    def claim(self, otp: str, now: datetime) -> tuple[VerifyResult, RecordT | None]:
        """
        Look up a record by code and remove it if the code is valid.

        Concurrent claims of the same code succeed at most once.
        Expired records are left in place.
        """
        with self._lock:
            result, record = self._check(otp, now)
            if result is VerifyResult.SUCCESS:
                self._remove(record.email)
            return result, record

    def restore(self, record: RecordT) -> bool:
        """
        Put a claimed record back, unless the email was re-issued meanwhile.

        Returns:
            True if the record was reinstated
        """
        with self._lock:
            if record.email in self._records or record.otp in self._email_by_otp:
                return False
            self._put(record.email, record)
            return True

    def discard(self, email: str) -> RecordT | None:
        """Remove an email's record from both indices."""
        with self._lock:
            return self._remove(email)

    def purge_expired(self, now: datetime, grace: timedelta = timedelta(0)) -> int:
        """
        Drop records that expired more than `grace` before `now`.

        Returns:
            Number of records removed
        """
        with self._lock:
            stale = [
                email
                for email, record in self._records.items()
                if now > record.expires_at + grace
            ]
            for email in stale:
                self._remove(email)
            return len(stale)

    def _check(self, otp: str, now: datetime) -> tuple[VerifyResult, RecordT | None]:
        email = self._email_by_otp.get(otp) if otp else None
        record = self._records.get(email) if email is not None else None
        if record is None:
            return VerifyResult.NOT_FOUND, None
        if record.otp != otp:
            return VerifyResult.INVALID_CODE, record
        if now > record.expires_at:
            return VerifyResult.EXPIRED, record
        return VerifyResult.SUCCESS, record

    def _allocate_otp(self) -> str:
        # Any indexed code is taken, including the one this email currently holds
        otp = self._otp_factory()
        while otp in self._email_by_otp:
            otp = self._otp_factory()
        return otp

    def _put(self, email: str, record: RecordT) -> None:
        previous = self._records.get(email)
        if previous is not None:
            self._email_by_otp.pop(previous.otp, None)
        self._records[email] = record
        self._email_by_otp[record.otp] = email

    def _remove(self, email: str) -> RecordT | None:
        record = self._records.pop(email, None)
        if record is not None:
            self._email_by_otp.pop(record.otp, None)
        return record


def refresh_otp(expires_at: datetime) -> Callable[[RecordT, str], RecordT]:
    """Build a reissue() callback that swaps in a new code and expiry."""

    def refresh(record: RecordT, otp: str) -> RecordT:
        return replace(record, otp=otp, expires_at=expires_at)

    return refresh
