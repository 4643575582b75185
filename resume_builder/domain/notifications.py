"""
OTP and account notification email content.
"""

import logging
from html import escape

from .exceptions import NotificationError
from .ports import EmailSender
from .security import OTP_VALIDITY

logger = logging.getLogger(__name__)

REGISTRATION_SUBJECT = "Email Verification OTP"
REGISTRATION_PURPOSE = "email verification"
PASSWORD_RESET_SUBJECT = "Password Reset Request"
PASSWORD_RESET_PURPOSE = "password reset"
ACCOUNT_CREATED_SUBJECT = "Account Created - Change Your Password"

_OTP_BODY = """\
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
  <h1 style="color: #2c3e50; text-align: center;">{subject}</h1>
  <p>Hello <strong>{name}</strong>,</p>
  <div style="background-color: #f8f9fa; padding: 15px; text-align: center;">
    <p>Your OTP for {purpose} is:</p>
    <p style="font-size: 24px; font-weight: bold; letter-spacing: 2px;">{otp}</p>
  </div>
  <p style="font-size: 14px; color: #777;">This OTP is valid for {minutes} minutes.</p>
  <p style="font-size: 12px; color: #999;">This is an automated message. Please do not reply.</p>
</div>
"""

_ACCOUNT_CREATED_BODY = """\
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
  <h1 style="color: #2c3e50; text-align: center;">{subject}</h1>
  <p>Hello <strong>{name}</strong>,</p>
  <p>An account has been created for you. Your username is <strong>{email}</strong>.</p>
  <p>Please set your own password with the "Forgot password" option before signing in.</p>
  <p style="font-size: 12px; color: #999;">This is an automated message. Please do not reply.</p>
</div>
"""


def render_otp_email(
    name: str,
    otp: str,
    subject: str = REGISTRATION_SUBJECT,
    purpose: str = REGISTRATION_PURPOSE,
) -> tuple[str, str]:
    """
    Build the subject and HTML body of an OTP email.

    Returns:
        Tuple of (subject, html_body)
    """
    body = _OTP_BODY.format(
        subject=escape(subject),
        name=escape(name),
        purpose=escape(purpose),
        otp=otp,
        minutes=int(OTP_VALIDITY.total_seconds() // 60),
    )
    return subject, body


async def send_otp_email(
    sender: EmailSender,
    email: str,
    name: str,
    otp: str,
    subject: str = REGISTRATION_SUBJECT,
    purpose: str = REGISTRATION_PURPOSE,
) -> bool:
    """
    Deliver an OTP email, logging rather than raising on transport failure.

    The code stays valid when delivery fails; resend is the recovery path.

    Returns:
        True if the sender accepted the message
    """
    subject, body = render_otp_email(name, otp, subject, purpose)
    try:
        await sender.send(email, subject, body)
    except NotificationError:
        logger.warning("OTP email to %s failed, code remains valid", email, exc_info=True)
        return False
    return True


def render_account_created_email(name: str, email: str) -> tuple[str, str]:
    """Build the subject and HTML body telling someone an account was made for them."""
    body = _ACCOUNT_CREATED_BODY.format(
        subject=escape(ACCOUNT_CREATED_SUBJECT), name=escape(name), email=escape(email)
    )
    return ACCOUNT_CREATED_SUBJECT, body


async def send_account_created_email(sender: EmailSender, email: str, name: str) -> bool:
    """Deliver the account-created notice; the account stands either way."""
    subject, body = render_account_created_email(name, email)
    try:
        await sender.send(email, subject, body)
    except NotificationError:
        logger.warning("Account notice to %s failed", email, exc_info=True)
        return False
    return True
