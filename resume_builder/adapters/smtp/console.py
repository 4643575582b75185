"""
Console email sender adapter - Implements EmailSender protocol.

This module provides a console-based implementation of the domain's
email sender port, logging outgoing mail to stdout for development.
"""

import logging
import re

logger = logging.getLogger(__name__)

_OTP_PATTERN = re.compile(r"\b\d{6}\b")


class ConsoleEmailSender:
    """
    Implements EmailSender protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Selected when no mail server is configured.
    """

    async def send(self, to_email: str, subject: str, html_body: str) -> None:
        """
        Log the message instead of delivering it.

        The first 6-digit code in the body is pulled out so it is
        readable in the server log without the HTML around it.

        Args:
            to_email: Recipient email address
            subject: Message subject
            html_body: Rendered HTML body
        """
        match = _OTP_PATTERN.search(html_body)
        code = match.group(0) if match else "-"
        logger.info("[EMAIL] To: %s Subject: %s Code: %s", to_email, subject, code)
