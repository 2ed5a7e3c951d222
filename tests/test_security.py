"""Unit tests for security functions."""
import pytest
from datetime import datetime, timedelta, timezone
from jose import jwt

from app.core.security import (
    get_password_hash,
    verify_password,
    create_access_token,
    decode_token
)
from app.config import get_settings


class TestPasswordHashing:
    """Test password hashing and verification."""

    def test_password_hashing(self):
        """Test password hashing works correctly."""
        password = "testpassword123"
        hashed = get_password_hash(password)

        assert hashed != password
        assert len(hashed) > 50  # bcrypt_sha256 produces long hashes
        assert verify_password(password, hashed)

    def test_hashes_are_salted(self):
        password = "same_password"

        assert get_password_hash(password) != get_password_hash(password)

    def test_wrong_password_verification(self):
        """Test wrong password verification fails."""
        password = "correct_password"
        wrong_password = "wrong_password"
        hashed = get_password_hash(password)

        assert not verify_password(wrong_password, hashed)


class TestJWTTokens:
    """Test JWT token creation and decoding."""

    def test_create_access_token(self):
        """Test access token creation."""
        token = create_access_token("user-123")

        assert isinstance(token, str)
        assert len(token) > 50

        payload = decode_token(token)
        assert payload["sub"] == "user-123"
        assert payload["type"] == "access"
        assert "exp" in payload

    def test_default_expiry_is_seven_days(self):
        before = datetime.now(timezone.utc)
        payload = decode_token(create_access_token("user-123"))

        expires_at = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
        assert timedelta(days=6, hours=23) < expires_at - before <= timedelta(days=7, seconds=5)

    def test_extra_claims(self):
        token = create_access_token("user-123", email="test@example.com")

        assert decode_token(token)["email"] == "test@example.com"

    def test_expired_token(self):
        """Test expired tokens are rejected."""
        settings = get_settings()
        expired_payload = {
            "sub": "user-789",
            "exp": datetime.now(timezone.utc) - timedelta(minutes=1),
            "type": "access"
        }
        expired_token = jwt.encode(
            expired_payload,
            settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm
        )

        with pytest.raises(Exception):  # Should raise JWT exception
            decode_token(expired_token)

    def test_token_signed_with_other_secret(self):
        forged = jwt.encode(
            {"sub": "user-1", "type": "access"},
            "another-secret-key-that-is-long-enough",
            algorithm="HS256",
        )

        with pytest.raises(Exception):
            decode_token(forged)

    def test_invalid_token(self):
        """Test invalid token handling."""
        with pytest.raises(Exception):
            decode_token("invalid.token.here")
