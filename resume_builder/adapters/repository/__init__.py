"""Repository adapters - Database implementations."""

from .catalog import PostgresResumeRepository, PostgresTemplateRepository
from .postgres import PostgresAccountRepository, run_migrations

__all__ = [
    "PostgresAccountRepository",
    "PostgresResumeRepository",
    "PostgresTemplateRepository",
    "run_migrations",
]
