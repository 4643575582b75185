"""
Credential primitives - password hashing and OTP generation.
"""

import secrets
from dataclasses import dataclass
from datetime import timedelta

import bcrypt

OTP_VALIDITY = timedelta(minutes=10)


@dataclass(frozen=True)
class PasswordHasher:
    """bcrypt hashing with a fresh salt per call."""

    rounds: int = 12

    def hash(self, password: str) -> str:
        """
        Hash a plaintext password.

        Two calls on the same input yield different digests since
        bcrypt embeds a new random salt in each one.
        """
        if not password:
            raise ValueError("password must not be empty")
        return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=self.rounds)).decode()

    def verify(self, password: str, password_hash: str) -> bool:
        """Check a plaintext password against a stored digest."""
        if not password or not password_hash:
            return False
        try:
            return bcrypt.checkpw(password.encode(), password_hash.encode())
        except ValueError:
            # Not a bcrypt digest
            return False


def generate_otp() -> str:
    """
    Generate a 6-digit one-time code.

    Leading digit is never zero, so the code is always in
    the range 100000-999999.
    """
    return str(100000 + secrets.randbelow(900000))
