"""
Unit tests for ConsoleEmailSender adapter.

Tests verify the console email sender implements EmailSender protocol
and logs outgoing mail in the correct format.
"""

import asyncio
import logging

import pytest

from resume_builder.adapters.smtp.console import ConsoleEmailSender
from resume_builder.domain.notifications import render_otp_email


def send(sender: ConsoleEmailSender, to_email: str, subject: str, body: str) -> None:
    asyncio.run(sender.send(to_email, subject, body))


class TestConsoleEmailSenderProtocol:
    """Tests for EmailSender protocol compliance."""

    def test_implements_email_sender_protocol(self) -> None:
        """ConsoleEmailSender implements EmailSender protocol."""
        from resume_builder.domain.ports import EmailSender

        sender = ConsoleEmailSender()
        assert asyncio.iscoroutinefunction(sender.send)

        def accepts_email_sender(s: EmailSender) -> None:
            pass

        accepts_email_sender(sender)

    def test_no_explicit_inheritance(self) -> None:
        """ConsoleEmailSender uses structural subtyping, not inheritance."""
        bases = ConsoleEmailSender.__bases__
        assert bases == (object,), f"Expected only object as base, got {bases}"


class TestSend:
    """Tests for send method."""

    def test_send_logs_message(self, caplog: pytest.LogCaptureFixture) -> None:
        """Message is logged at INFO level."""
        with caplog.at_level(logging.INFO):
            send(ConsoleEmailSender(), "test@example.com", "Subject", "<p>123456</p>")

        assert len(caplog.records) == 1
        assert caplog.records[0].levelno == logging.INFO

    def test_send_format(self, caplog: pytest.LogCaptureFixture) -> None:
        """Log format: [EMAIL] To: ... Subject: ... Code: ..."""
        subject, body = render_otp_email("Jane", "482913")

        with caplog.at_level(logging.INFO):
            send(ConsoleEmailSender(), "user@example.com", subject, body)

        assert "[EMAIL]" in caplog.text
        assert "To: user@example.com" in caplog.text
        assert "Subject: Email Verification OTP" in caplog.text
        assert "Code: 482913" in caplog.text

    def test_body_without_code(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO):
            send(ConsoleEmailSender(), "user@example.com", "Welcome", "<p>Hello</p>")

        assert "Code: -" in caplog.text

    def test_html_is_not_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        subject, body = render_otp_email("Jane", "482913")

        with caplog.at_level(logging.INFO):
            send(ConsoleEmailSender(), "user@example.com", subject, body)

        assert "<div" not in caplog.text

    def test_multiple_calls_are_independent(self, caplog: pytest.LogCaptureFixture) -> None:
        """Multiple calls don't affect each other."""
        sender = ConsoleEmailSender()

        with caplog.at_level(logging.INFO):
            send(sender, "first@example.com", "Subject", "111111")
            send(sender, "second@example.com", "Subject", "222222")

        assert len(caplog.records) == 2
        assert "first@example.com" in caplog.text
        assert "second@example.com" in caplog.text
        assert "Code: 111111" in caplog.text
        assert "Code: 222222" in caplog.text
