# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for password hashing and the password policy.

Tests the PasswordHasher class and convenience functions.
"""

import pytest

from collegehub.domains.auth.password import (
    PasswordHasher,
    PasswordPolicyError,
    ensure_password_strength,
    generate_initial_password,
    hash_password,
    validate_password_strength,
    verify_password,
)


class TestPasswordHasher:
    """Tests for PasswordHasher class."""

    def test_hash_password_returns_bcrypt_hash(self) -> None:
        """Test that hashing returns a bcrypt hash string."""
        hasher = PasswordHasher(rounds=4)

        hashed = hasher.hash("Str0ng!pass")

        assert hashed.startswith("$2b$")
        assert len(hashed) == 60

    def test_hash_produces_different_hashes_for_same_password(self) -> None:
        hasher = PasswordHasher(rounds=4)

        assert hasher.hash("Str0ng!pass") != hasher.hash("Str0ng!pass")

    def test_verify_correct_and_incorrect_password(self) -> None:
        hasher = PasswordHasher(rounds=4)
        hashed = hasher.hash("Str0ng!pass")

        assert hasher.verify("Str0ng!pass", hashed) is True
        assert hasher.verify("Wr0ng!pass", hashed) is False

    def test_verify_empty_inputs_return_false(self) -> None:
        hasher = PasswordHasher(rounds=4)

        assert hasher.verify("", hasher.hash("Str0ng!pass")) is False
        assert hasher.verify("Str0ng!pass", "") is False

    def test_verify_invalid_hash_returns_false(self) -> None:
        assert PasswordHasher(rounds=4).verify("Str0ng!pass", "not-a-bcrypt-hash") is False

    def test_hash_empty_password_raises(self) -> None:
        with pytest.raises(ValueError):
            PasswordHasher(rounds=4).hash("")

    def test_needs_rehash_on_cost_change(self) -> None:
        hashed = PasswordHasher(rounds=4).hash("Str0ng!pass")

        assert PasswordHasher(rounds=4).needs_rehash(hashed) is False
        assert PasswordHasher(rounds=5).needs_rehash(hashed) is True


class TestConvenienceFunctions:
    """Tests for module-level helpers."""

    def test_hash_and_verify_roundtrip(self) -> None:
        hashed = hash_password("Str0ng!pass")

        assert verify_password("Str0ng!pass", hashed)


class TestPasswordPolicy:
    """Tests for the password policy."""

    def test_strong_password_has_no_violations(self) -> None:
        assert validate_password_strength("Str0ng!pass") == []

    def test_every_rule_is_reported(self) -> None:
        errors = validate_password_strength("abc")

        assert "Password must be at least 8 characters long" in errors
        assert "Password must contain at least one uppercase letter" in errors
        assert "Password must contain at least one number" in errors
        assert "Password must contain at least one special character" in errors

    def test_common_password_rejected(self) -> None:
        errors = validate_password_strength("Password1")

        assert "Password is too common. Please choose a stronger password" in errors

    def test_ensure_raises_with_all_errors(self) -> None:
        with pytest.raises(PasswordPolicyError) as exc_info:
            ensure_password_strength("short")

        assert len(exc_info.value.errors) >= 3

    def test_generated_password_satisfies_policy(self) -> None:
        for _ in range(20):
            assert validate_password_strength(generate_initial_password()) == []
