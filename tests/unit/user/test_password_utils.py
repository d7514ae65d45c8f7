"""
Unit Tests for password hashing and the strength rule
"""

import pytest

from microservices.user_service.password_utils import hash_password, is_password_strong, verify_password


class TestHashing:

    def test_hash_verifies(self):
        hashed = hash_password("Secret123", rounds=4)

        assert hashed != "Secret123"
        assert hashed.startswith("$2")
        assert verify_password("Secret123", hashed) is True
        assert verify_password("secret123", hashed) is False

    def test_hashes_are_salted(self):
        assert hash_password("Secret123", rounds=4) != hash_password("Secret123", rounds=4)

    @pytest.mark.parametrize("stored", [None, "", "not-a-bcrypt-hash"])
    def test_missing_or_malformed_hash_never_matches(self, stored):
        assert verify_password("Secret123", stored) is False


class TestStrength:

    def test_strong(self):
        assert is_password_strong("Secret123") == (True, None)

    def test_too_short(self):
        ok, reason = is_password_strong("Sec12", min_length=8)

        assert ok is False
        assert reason == "Password must be at least 8 characters"

    @pytest.mark.parametrize("password", ["secret123", "SECRET123", "SecretPass"])
    def test_needs_mixed_case_and_digit(self, password):
        ok, reason = is_password_strong(password)

        assert ok is False
        assert reason == "Password must contain uppercase, lowercase, and a number"
