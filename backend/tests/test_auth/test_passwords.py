"""Unit tests for password hashing and verification."""

import pytest

from havenstay.auth.passwords import MAX_PASSWORD_BYTES, hash_password, password_too_long, verify_password


class TestHashPassword:
    """Test password hashing."""

    def test_hash_returns_bcrypt_string(self):
        hashed = hash_password("mypassword")
        assert isinstance(hashed, str)
        assert hashed.startswith("$2")

    def test_hash_differs_from_plaintext(self):
        assert hash_password("mypassword") != "mypassword"

    def test_same_password_different_salts(self):
        """Hashing the same password twice should produce different hashes (different salts)."""
        assert hash_password("samepassword") != hash_password("samepassword")

    def test_rejects_password_over_limit(self):
        with pytest.raises(ValueError):
            hash_password("a" * (MAX_PASSWORD_BYTES + 1))

    def test_limit_counts_bytes_not_characters(self):
        # 37 two-byte characters = 74 bytes
        assert password_too_long("é" * 37) is True
        assert password_too_long("é" * 36) is False


class TestVerifyPassword:
    """Test password verification."""

    def test_correct_password_verifies(self):
        hashed = hash_password("testpass123")
        assert verify_password("testpass123", hashed) is True

    def test_wrong_password_fails(self):
        hashed = hash_password("testpass123")
        assert verify_password("wrongpassword", hashed) is False

    def test_unicode_password(self):
        hashed = hash_password("pässwördü")
        assert verify_password("pässwördü", hashed) is True
        assert verify_password("password", hashed) is False

    def test_max_length_password(self):
        long_pass = "a" * MAX_PASSWORD_BYTES
        hashed = hash_password(long_pass)
        assert verify_password(long_pass, hashed) is True

    def test_over_long_candidate_never_matches(self):
        hashed = hash_password("a" * MAX_PASSWORD_BYTES)
        assert verify_password("a" * (MAX_PASSWORD_BYTES + 1), hashed) is False

    def test_malformed_hash_returns_false(self):
        assert verify_password("testpass123", "not-a-bcrypt-hash") is False
