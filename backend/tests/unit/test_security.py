"""Unit tests for security utilities."""

from datetime import timedelta

from app.core.security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    verify_password,
    get_password_hash,
)


class TestPasswordHashing:
    """Tests for password hashing."""

    def test_hash_uses_fresh_salt(self):
        """Hashing twice gives two different hashes."""
        password = "plot-twist"
        hash1 = get_password_hash(password)
        hash2 = get_password_hash(password)

        assert hash1 != password
        assert hash1 != hash2

    def test_verify_password_correct(self):
        hashed = get_password_hash("plot-twist")

        assert verify_password("plot-twist", hashed) is True

    def test_verify_password_incorrect(self):
        hashed = get_password_hash("plot-twist")

        assert verify_password("cliffhanger", hashed) is False

    def test_verify_against_malformed_hash(self):
        assert verify_password("plot-twist", "not-a-bcrypt-hash") is False


class TestTokens:
    """Tests for JWT token creation and decoding."""

    def test_access_token_round_trip(self):
        token = create_access_token(subject=7)
        payload = decode_token(token)

        assert payload["sub"] == "7"
        assert payload["type"] == "access"

    def test_refresh_token_type(self):
        payload = decode_token(create_refresh_token(data={"sub": "7"}))

        assert payload["type"] == "refresh"

    def test_expired_token_is_rejected(self):
        token = create_access_token(subject=7, expires_delta=timedelta(seconds=-1))

        assert decode_token(token) is None

    def test_garbage_token_is_rejected(self):
        assert decode_token("definitely.not.jwt") is None
