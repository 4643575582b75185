"""
Unit tests for domain ports, models and exceptions.

Tests verify:
- Port interfaces are properly defined
- Exceptions are properly structured
- Domain purity (zero framework imports)
"""

import json
import subprocess
from enum import Enum

import pytest

from resume_builder.domain.exceptions import (
    AccountNotFound,
    AdministrationError,
    DomainNotAllowed,
    EmailAlreadyRegistered,
    EmailNotRegistered,
    MissingRequiredField,
    NoNewAccounts,
    NoPendingRegistration,
    PasswordResetError,
    RegistrationError,
    RoleChangeNotAllowed,
)
from resume_builder.domain.models import PendingRegistration, Role, UserAccount, normalize_email
from resume_builder.domain.ports import (
    AccountRepository,
    EmailSender,
    ResumeRepository,
    TemplateRepository,
    VerifyResult,
)


class TestVerifyResultEnum:
    """Tests for VerifyResult enum."""

    def test_verify_result_is_enum(self) -> None:
        assert issubclass(VerifyResult, Enum)

    @pytest.mark.parametrize(
        "member,value",
        [
            ("SUCCESS", "success"),
            ("NOT_FOUND", "not_found"),
            ("INVALID_CODE", "invalid_code"),
            ("EXPIRED", "expired"),
            ("PERSISTENCE_FAILED", "persistence_failed"),
        ],
    )
    def test_verify_result_values(self, member: str, value: str) -> None:
        assert VerifyResult[member].value == value


class TestRoleEnum:
    """Role values are stored verbatim in the users table."""

    def test_role_is_str_mixin(self) -> None:
        """Role uses str mixin for JSON serialization."""
        assert issubclass(Role, str)

    def test_role_values(self) -> None:
        assert Role.ADMIN.value == "admin"
        assert Role.MANAGER.value == "manager"
        # Plain users keep the capitalized spelling
        assert Role.USER.value == "User"

    def test_role_json_serializable(self) -> None:
        assert json.dumps(Role.MANAGER) == '"manager"'

    def test_role_from_stored_value(self) -> None:
        assert Role("User") is Role.USER


class TestModels:
    def test_normalize_email(self) -> None:
        assert normalize_email("  Jane.Doe@Example.COM ") == "jane.doe@example.com"

    def test_pending_registration_exposes_account_email(self) -> None:
        account = UserAccount(
            first_name="Jane",
            last_name="",
            email="jane@example.com",
            password_hash="h",
            confirm_password_hash="h",
        )
        pending = PendingRegistration(account=account, otp="123456", expires_at=None)

        assert pending.email == "jane@example.com"

    def test_user_account_defaults(self) -> None:
        account = UserAccount(
            first_name="Jane",
            last_name="",
            email="jane@example.com",
            password_hash="h",
            confirm_password_hash="h",
        )

        assert account.role is Role.USER
        assert account.id is None
        assert account.join_date is not None


class TestProtocols:
    """Ports are structural: adapters never inherit from them."""

    def test_account_repository_methods(self) -> None:
        for name in (
            "find_by_email",
            "count",
            "insert",
            "update",
            "get",
            "list_accounts",
            "delete",
            "update_role",
            "insert_many",
        ):
            assert hasattr(AccountRepository, name)

    def test_email_sender_has_send_method(self) -> None:
        assert hasattr(EmailSender, "send")

    @pytest.mark.parametrize("port", [TemplateRepository, ResumeRepository])
    def test_catalog_repository_methods(self, port: type) -> None:
        for name in ("create", "get", "list", "update", "delete"):
            assert hasattr(port, name)


class TestDomainExceptions:
    """Tests for domain exceptions."""

    @pytest.mark.parametrize(
        "exc",
        [MissingRequiredField, EmailAlreadyRegistered, DomainNotAllowed, NoPendingRegistration],
    )
    def test_registration_errors_share_base(self, exc: type) -> None:
        assert issubclass(exc, RegistrationError)

    def test_email_not_registered_is_reset_error(self) -> None:
        assert issubclass(EmailNotRegistered, PasswordResetError)
        assert not issubclass(EmailNotRegistered, RegistrationError)

    def test_missing_required_field_message(self) -> None:
        exc = MissingRequiredField("first_name")

        assert exc.field == "first_name"
        assert str(exc) == "first_name is required"

    def test_domain_not_allowed_carries_role(self) -> None:
        exc = DomainNotAllowed("boss@gmail.com", "admin")

        assert exc.role == "admin"
        assert exc.email == "boss@gmail.com"

    @pytest.mark.parametrize("exc", [AccountNotFound, RoleChangeNotAllowed, NoNewAccounts])
    def test_administration_errors_share_base(self, exc: type) -> None:
        assert issubclass(exc, AdministrationError)
        assert not issubclass(exc, RegistrationError)

    def test_account_not_found_carries_id(self) -> None:
        exc = AccountNotFound(42)

        assert exc.account_id == 42
        assert str(exc) == "Account 42 not found"


class TestDomainPurity:
    """Tests for domain purity - zero framework imports."""

    @pytest.mark.parametrize(
        "pattern",
        [
            "from fastapi",
            "import fastapi",
            "from pydantic",
            "import pydantic",
            "from psycopg",
            "import psycopg",
        ],
    )
    def test_no_framework_imports_in_domain(self, pattern: str) -> None:
        result = subprocess.run(
            ["grep", "-r", pattern, "resume_builder/domain/"],
            capture_output=True,
            text=True,
        )
        assert result.returncode != 0, f"Framework import found: {result.stdout}"
