# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Password hashing and password policy.

Example:
    >>> hasher = PasswordHasher(rounds=4)
    >>> hashed = hasher.hash("Str0ng!pass")
    >>> hasher.verify("Str0ng!pass", hashed)
    True
    >>> validate_password_strength("password")
    ['Password must be at least 8 characters long', ...]
"""

import logging
import re
import secrets
import string

import bcrypt

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_LENGTH = 128

COMMON_PASSWORDS = frozenset(
    {
        "password",
        "123456",
        "password123",
        "admin",
        "qwerty",
        "12345678",
        "123456789",
        "password1",
        "abc123",
    }
)

_SPECIAL_CHARS = re.compile(r"[!@#$%^&*(),.?\":{}|<>\[\]\\/~`_+=;'-]")


class PasswordPolicyError(ValueError):
    """Raised when a password does not satisfy the policy.

    Attributes:
        errors: Every rule the password broke.
    """

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = errors


class PasswordHasher:
    """bcrypt password hashing.

    Attributes:
        _rounds: bcrypt cost factor.
    """

    def __init__(self, rounds: int = 12) -> None:
        self._rounds = rounds

    def hash(self, password: str) -> str:
        """Hash a password.

        Raises:
            ValueError: If password is empty.
        """
        if not password:
            raise ValueError("Password cannot be empty")

        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """Check a password against a bcrypt hash."""
        if not password or not password_hash:
            return False

        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError as e:
            logger.warning("Password verification failed: %s", str(e))
            return False

    def needs_rehash(self, password_hash: str) -> bool:
        """Check whether a hash was produced with a different cost factor."""
        if not password_hash:
            return False
        try:
            rounds = int(password_hash.split("$")[2])
        except (IndexError, ValueError):
            return True
        return rounds != self._rounds


def validate_password_strength(password: str) -> list[str]:
    """Check a password against the policy.

    Args:
        password: Candidate password.

    Returns:
        Human readable violations, empty when the password is acceptable.
    """
    errors: list[str] = []

    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if len(password) > MAX_PASSWORD_LENGTH:
        errors.append(f"Password must be at most {MAX_PASSWORD_LENGTH} characters long")
    if not re.search(r"[A-Z]", password):
        errors.append("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", password):
        errors.append("Password must contain at least one lowercase letter")
    if not re.search(r"\d", password):
        errors.append("Password must contain at least one number")
    if not _SPECIAL_CHARS.search(password):
        errors.append("Password must contain at least one special character")
    if password.lower() in COMMON_PASSWORDS:
        errors.append("Password is too common. Please choose a stronger password")

    return errors


def ensure_password_strength(password: str) -> None:
    """Raise PasswordPolicyError unless the password satisfies the policy."""
    errors = validate_password_strength(password)
    if errors:
        raise PasswordPolicyError(errors)


def generate_initial_password(length: int = 12) -> str:
    """Generate a random password that satisfies the policy."""
    alphabet = string.ascii_letters + string.digits
    while True:
        body = "".join(secrets.choice(alphabet) for _ in range(length - 1))
        candidate = body + secrets.choice("!@#$%&*")
        if not validate_password_strength(candidate):
            return candidate


_default_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    """Hash a password using the default hasher."""
    return _default_hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password using the default hasher."""
    return _default_hasher.verify(password, password_hash)
