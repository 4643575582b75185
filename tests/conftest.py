"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- An in-memory AccountRepository with a unique-email guard
- A controllable clock for expiry scenarios
- Domain services wired to those fakes with a mocked email sender
- A slow repository and a ticker for checking the event loop stays free
"""

import asyncio
import threading
import time
from collections.abc import Awaitable, Callable, Coroutine
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from resume_builder.domain.administration import AdministrationService
from resume_builder.domain.exceptions import PersistenceError
from resume_builder.domain.models import Role, UserAccount
from resume_builder.domain.password_reset import PasswordResetService
from resume_builder.domain.registration import RegistrationService
from resume_builder.domain.security import PasswordHasher

ORG_DOMAIN = "quadranttechnologies.com"

# Minimum bcrypt cost keeps the suite fast; production uses settings.bcrypt_cost
FAST_HASHER = PasswordHasher(rounds=4)


class InMemoryAccountRepository:
    """AccountRepository fake; duplicate emails fail like the UNIQUE constraint."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._accounts: dict[str, UserAccount] = {}
        self._next_id = 1
        self.fail_writes = False

    def find_by_email(self, email: str) -> UserAccount | None:
        with self._lock:
            account = self._accounts.get(email)
            return replace(account) if account is not None else None

    def count(self) -> int:
        with self._lock:
            return len(self._accounts)

    def insert(self, account: UserAccount) -> UserAccount:
        with self._lock:
            if self.fail_writes:
                raise PersistenceError("database unavailable")
            if account.email in self._accounts:
                raise PersistenceError(f"duplicate email {account.email}")
            stored = replace(account, id=self._next_id)
            self._next_id += 1
            self._accounts[stored.email] = stored
            return replace(stored)

    def update(self, account: UserAccount) -> int:
        with self._lock:
            if self.fail_writes:
                raise PersistenceError("database unavailable")
            if account.email not in self._accounts:
                return 0
            self._accounts[account.email] = replace(account)
            return 1

    def get(self, account_id: int) -> UserAccount | None:
        with self._lock:
            for account in self._accounts.values():
                if account.id == account_id:
                    return replace(account)
            return None

    def list_accounts(self, role: Role | None = None) -> list[UserAccount]:
        with self._lock:
            accounts = sorted(self._accounts.values(), key=lambda a: a.id)
            return [replace(a) for a in accounts if role is None or a.role is role]

    def delete(self, account_id: int) -> bool:
        with self._lock:
            for email, account in self._accounts.items():
                if account.id == account_id:
                    del self._accounts[email]
                    return True
            return False

    def update_role(self, account_id: int, role: Role) -> UserAccount | None:
        with self._lock:
            if self.fail_writes:
                raise PersistenceError("database unavailable")
            for email, account in self._accounts.items():
                if account.id == account_id:
                    self._accounts[email] = replace(account, role=role)
                    return replace(self._accounts[email])
            return None

    def insert_many(self, accounts: list[UserAccount]) -> list[UserAccount]:
        with self._lock:
            if self.fail_writes:
                raise PersistenceError("database unavailable")
            created = []
            for account in accounts:
                if account.email in self._accounts:
                    continue
                stored = replace(account, id=self._next_id)
                self._next_id += 1
                self._accounts[stored.email] = stored
                created.append(replace(stored))
            return created

    def add(self, email: str, password_hash: str = "$2b$04$unused", role: Role = Role.USER) -> UserAccount:
        """Seed a confirmed account directly."""
        return self.insert(
            UserAccount(
                first_name="Seed",
                last_name="",
                email=email,
                password_hash=password_hash,
                confirm_password_hash=password_hash,
                role=role,
            )
        )


class SlowAccountRepository(InMemoryAccountRepository):
    """Repository whose reads block the calling thread like a real query."""

    def __init__(self, delay: float = 0.2) -> None:
        super().__init__()
        self.delay = delay

    def find_by_email(self, email: str) -> UserAccount | None:
        time.sleep(self.delay)
        return super().find_by_email(email)

    def count(self) -> int:
        time.sleep(self.delay)
        return super().count()


async def longest_loop_stall(coro: Coroutine) -> float:
    """
    Await `coro` while a ticker sleeps in 10ms steps next to it.

    Returns:
        The longest gap in seconds between two ticks
    """
    gaps: list[float] = []
    finished = asyncio.Event()

    async def tick() -> None:
        last = time.perf_counter()
        while not finished.is_set():
            await asyncio.sleep(0.01)
            now = time.perf_counter()
            gaps.append(now - last)
            last = now

    ticker = asyncio.create_task(tick())
    try:
        await coro
    finally:
        finished.set()
        await ticker
    return max(gaps, default=0.0)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self) -> None:
        self.now = datetime(2025, 5, 3, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def repository() -> InMemoryAccountRepository:
    return InMemoryAccountRepository()


@pytest.fixture
def email_sender() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def registration_service(
    repository: InMemoryAccountRepository, email_sender: AsyncMock, clock: FakeClock
) -> RegistrationService:
    return RegistrationService(
        repository=repository,
        email_sender=email_sender,
        hasher=FAST_HASHER,
        organization_domain=ORG_DOMAIN,
        clock=clock,
    )


@pytest.fixture
def password_reset_service(
    repository: InMemoryAccountRepository, email_sender: AsyncMock, clock: FakeClock
) -> PasswordResetService:
    return PasswordResetService(
        repository=repository,
        email_sender=email_sender,
        hasher=FAST_HASHER,
        clock=clock,
    )


@pytest.fixture
def hasher() -> PasswordHasher:
    return FAST_HASHER


@pytest.fixture
def administration_service(
    repository: InMemoryAccountRepository, email_sender: AsyncMock
) -> AdministrationService:
    return AdministrationService(repository=repository, email_sender=email_sender, hasher=FAST_HASHER)


@pytest.fixture
def slow_repository() -> SlowAccountRepository:
    return SlowAccountRepository()


@pytest.fixture
def loop_stall() -> Callable[[Coroutine], Awaitable[float]]:
    return longest_loop_stall
