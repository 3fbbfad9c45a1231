# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the stateless captcha."""

import re
from datetime import timedelta
from unittest.mock import patch

from collegehub.domains.auth.captcha import generate_captcha, validate_captcha
from collegehub.utils.datetime import to_epoch_millis, utc_now

SECRET = "captcha-test-secret"


def _answer(question: str) -> str:
    a, operator, b = re.match(r"What is (\d+) (\S) (\d+)\?", question).groups()
    a, b = int(a), int(b)
    if operator == "+":
        return str(a + b)
    if operator == "-":
        return str(a - b)
    return str(a * b)


class TestCaptcha:
    """Tests for captcha generation and validation."""

    def test_generated_question_is_answerable(self) -> None:
        captcha = generate_captcha(SECRET)

        assert validate_captcha(_answer(captcha.question), captcha.hash, captcha.expires_at, SECRET)

    def test_subtraction_never_goes_negative(self) -> None:
        for _ in range(50):
            captcha = generate_captcha(SECRET)
            assert int(_answer(captcha.question)) >= 0

    def test_wrong_answer_rejected(self) -> None:
        captcha = generate_captcha(SECRET)
        wrong = str(int(_answer(captcha.question)) + 1)

        assert not validate_captcha(wrong, captcha.hash, captcha.expires_at, SECRET)

    def test_extended_expiry_rejected(self) -> None:
        captcha = generate_captcha(SECRET)

        assert not validate_captcha(
            _answer(captcha.question), captcha.hash, captcha.expires_at + 60_000, SECRET
        )

    def test_other_secret_rejected(self) -> None:
        captcha = generate_captcha(SECRET)

        assert not validate_captcha(
            _answer(captcha.question), captcha.hash, captcha.expires_at, "other"
        )

    def test_expired_captcha_rejected(self) -> None:
        captcha = generate_captcha(SECRET, ttl_seconds=1)
        later = utc_now() + timedelta(seconds=5)

        with patch("collegehub.domains.auth.captcha.utc_now", return_value=later):
            assert not validate_captcha(
                _answer(captcha.question), captcha.hash, captcha.expires_at, SECRET
            )

    def test_expiry_is_epoch_millis(self) -> None:
        before = to_epoch_millis(utc_now())
        captcha = generate_captcha(SECRET, ttl_seconds=300)

        assert before + 299_000 <= captcha.expires_at <= before + 301_000
