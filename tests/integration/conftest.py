"""
Shared fixtures for integration tests.

Requires PostgreSQL to be running at DATABASE_URL; every test that
asks for the pool is skipped when the database cannot be reached.
"""

from collections.abc import Generator

import pytest
from psycopg_pool import ConnectionPool, PoolTimeout

from resume_builder.adapters.repository.postgres import run_migrations
from resume_builder.config.settings import get_settings


@pytest.fixture(scope="session")
def pool() -> Generator[ConnectionPool, None, None]:
    """Create connection pool for integration tests and apply migrations."""
    settings = get_settings()
    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=1,
        max_size=10,
        open=True,
    )
    try:
        pool.wait(timeout=5)
    except PoolTimeout:
        pool.close()
        pytest.skip(f"PostgreSQL not reachable at {settings.database_url}")
    run_migrations(pool)
    yield pool
    pool.close()


@pytest.fixture
def clean_database(pool: ConnectionPool) -> Generator[None, None, None]:
    """Empty every table before the test."""
    with pool.connection() as conn:
        conn.execute("TRUNCATE resumes, templates, users RESTART IDENTITY CASCADE")
        conn.commit()
    yield
