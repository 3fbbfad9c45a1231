# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Stateless arithmetic captcha.

The server never stores a captcha. The client receives the question, an
expiry timestamp and ``sha256(answer + secret + expires_at)``, and sends the
hash and expiry back with the answer. Tampering with the expiry changes the
hash, so it cannot be extended.
"""

import hashlib
import hmac
import secrets
from dataclasses import dataclass
from datetime import timedelta

from collegehub.utils.datetime import to_epoch_millis, utc_now

OPERATORS = ("+", "-", "×")


@dataclass(frozen=True)
class Captcha:
    question: str
    hash: str
    expires_at: int


def _digest(answer: str, secret: str, expires_at: int) -> str:
    return hashlib.sha256(f"{answer}{secret}{expires_at}".encode("utf-8")).hexdigest()


def generate_captcha(secret: str, ttl_seconds: int = 300) -> Captcha:
    """Create a new captcha.

    Args:
        secret: Server-side secret mixed into the hash.
        ttl_seconds: Validity window.

    Returns:
        Captcha with question text, answer hash and expiry in epoch millis.
    """
    a = secrets.randbelow(10) + 1
    b = secrets.randbelow(10) + 1
    operator = secrets.choice(OPERATORS)

    if operator == "+":
        answer = a + b
    elif operator == "-":
        # Keep the answer non-negative
        a, b = max(a, b), min(a, b)
        answer = a - b
    else:
        answer = a * b

    expires_at = to_epoch_millis(utc_now() + timedelta(seconds=ttl_seconds))
    return Captcha(
        question=f"What is {a} {operator} {b}?",
        hash=_digest(str(answer), secret, expires_at),
        expires_at=expires_at,
    )


def validate_captcha(answer: str, captcha_hash: str, expires_at: int, secret: str) -> bool:
    """Check a captcha answer.

    Returns:
        False when the captcha expired or the answer does not match.
    """
    if to_epoch_millis(utc_now()) > expires_at:
        return False
    expected = _digest(str(answer).strip(), secret, expires_at)
    return hmac.compare_digest(expected, captcha_hash or "")
