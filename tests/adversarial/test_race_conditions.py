"""
Adversarial tests for race condition attack prevention.

Verifies that concurrent operations on the OTP stores are atomic,
preventing attackers from exploiting race conditions to:
- Create duplicate accounts from one verification code
- Reset a password more than once with one reset code
- Keep a superseded code alive through concurrent resends
- Cross-wire codes between different email addresses

Runs against the in-memory repository from tests/conftest.py; the
Postgres UNIQUE constraint is covered by the integration suite.
"""

import asyncio
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from resume_builder.domain.models import RegistrationCandidate
from resume_builder.domain.ports import VerifyResult

# Apply adversarial marker to all tests in this module
pytestmark = pytest.mark.adversarial

ADMIN_EMAIL = "admin@quadranttechnologies.com"


def start_registration(service, email: str = ADMIN_EMAIL) -> str:
    candidate = RegistrationCandidate(email=email, first_name="Eve", password="secure123")
    return asyncio.run(service.initiate(candidate))


def run_concurrently(func, count: int) -> list:
    """Release `count` threads through a barrier so they hit `func` together."""
    barrier = threading.Barrier(count)

    def task(index: int):
        barrier.wait()
        return func(index)

    with ThreadPoolExecutor(max_workers=count) as executor:
        return list(executor.map(task, range(count)))


class TestConcurrentVerification:
    def test_same_code_confirmed_exactly_once(self, registration_service, repository) -> None:
        """
        Attack scenario: replay one valid code from many clients at once.

        Expected defense: the pending record is claimed atomically, so only
        one confirmation reaches the repository.
        """
        otp = start_registration(registration_service)

        results = run_concurrently(lambda _: registration_service.confirm(otp), 10)

        assert results.count(VerifyResult.SUCCESS) == 1, (
            f"Race condition vulnerability: {results.count(VerifyResult.SUCCESS)} "
            "confirmations succeeded (expected exactly 1)"
        )
        assert repository.count() == 1
        assert len(registration_service.pending) == 0

    def test_concurrent_registrations_for_distinct_emails(
        self, registration_service, repository
    ) -> None:
        """Every concurrent registration gets its own code and can be confirmed."""
        repository.add(ADMIN_EMAIL)
        repository.add("manager@quadranttechnologies.com")
        emails = [f"user{i}@example.com" for i in range(20)]

        codes = run_concurrently(
            lambda i: start_registration(registration_service, emails[i]), len(emails)
        )

        assert len(set(codes)) == len(emails)
        assert all(registration_service.verify(code) for code in codes)
        for email in emails:
            assert repository.find_by_email(email) is not None


class TestConcurrentResend:
    def test_only_latest_code_survives(self, registration_service) -> None:
        """
        Attack scenario: flood resend for one email while racing verifications.

        Expected defense: resends serialize per email, so exactly one of the
        issued codes still resolves and it is the one held by the store.
        """
        original = start_registration(registration_service)

        codes = run_concurrently(
            lambda _: asyncio.run(registration_service.resend(ADMIN_EMAIL)), 10
        )

        current = registration_service.pending.get(ADMIN_EMAIL).otp
        assert current in codes
        assert registration_service.confirm(original) is VerifyResult.NOT_FOUND
        stale = [code for code in codes if code != current]
        assert all(
            registration_service.confirm(code) is VerifyResult.NOT_FOUND for code in stale
        )
        assert registration_service.verify(current) is True

    def test_password_reset_resend_race(self, password_reset_service, repository, hasher) -> None:
        repository.add("user@example.com", hasher.hash("oldpass123"))

        codes = run_concurrently(
            lambda _: asyncio.run(password_reset_service.resend("user@example.com")), 10
        )

        valid = [code for code in codes if password_reset_service.verify_code(code)]
        assert valid == [password_reset_service.requests.get("user@example.com").otp]


class TestConcurrentPasswordReset:
    def test_same_code_resets_exactly_once(
        self, password_reset_service, repository, hasher
    ) -> None:
        """
        Attack scenario: submit one reset code from several clients at once,
        each with a different new password.

        Expected defense: the request is claimed before the write, so only
        one password is ever stored and the code is spent afterwards.
        """
        repository.add("user@example.com", hasher.hash("oldpass123"))
        otp = asyncio.run(password_reset_service.initiate("user@example.com"))
        passwords = [f"newpass{i:03d}" for i in range(8)]

        results = run_concurrently(
            lambda i: password_reset_service.reset_with_code(otp, passwords[i]), len(passwords)
        )

        assert results.count(True) == 1, (
            f"Race condition vulnerability: {results.count(True)} resets succeeded "
            "with one code (expected exactly 1)"
        )
        winner = passwords[results.index(True)]
        stored = repository.find_by_email("user@example.com")
        assert hasher.verify(winner, stored.password_hash)
        assert password_reset_service.verify_code(otp) is False

    def test_resend_during_reset_keeps_fresh_code(
        self, password_reset_service, repository, hasher
    ) -> None:
        """A resend racing a reset never leaves the account without a usable code."""
        repository.add("user@example.com", hasher.hash("oldpass123"))
        otp = asyncio.run(password_reset_service.initiate("user@example.com"))

        def act(index: int):
            if index == 0:
                return password_reset_service.reset_with_code(otp, "newpass456")
            return asyncio.run(password_reset_service.resend("user@example.com"))

        reset_ok, new_otp = run_concurrently(act, 2)

        current = password_reset_service.requests.get("user@example.com")
        assert current is not None, f"fresh code discarded (reset succeeded: {reset_ok})"
        assert current.otp == new_otp
        assert password_reset_service.verify_code(new_otp) is True


class TestGuessingDoesNotMutate:
    def test_wrong_codes_leave_pending_registration_intact(self, registration_service) -> None:
        """Guessing codes in parallel never consumes or alters the real entry."""
        otp = start_registration(registration_service)
        guesses = [f"{100000 + i}" for i in range(50) if f"{100000 + i}" != otp]

        results = run_concurrently(lambda i: registration_service.verify(guesses[i]), len(guesses))

        assert not any(results)
        assert registration_service.pending.get(ADMIN_EMAIL).otp == otp
        assert registration_service.verify(otp) is True
