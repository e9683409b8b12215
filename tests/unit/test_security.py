"""
Unit tests for the security module.
Tests argon2 hashing in both salt modes, verification and session ids.
"""
import pytest

from happening.core import security
from happening.core.config import Settings, settings
from happening.core.security import hash_password, new_session_id, verify_password


@pytest.mark.unit
class TestPasswordHashing:
    """Test password hashing functionality."""

    def test_hash_is_argon2id(self):
        hashed = hash_password("password123")
        assert hashed.startswith("$argon2id$")
        assert "m=19456,t=2,p=1" in hashed

    def test_hash_password_creates_different_hashes(self):
        """Per-user salts make equal passwords hash differently."""
        assert hash_password("password123") != hash_password("password123")

    def test_verify_correct_password(self):
        hashed = hash_password("password123")
        assert verify_password("password123", hashed) is True

    def test_verify_wrong_password(self):
        hashed = hash_password("password123")
        assert verify_password("password124", hashed) is False

    def test_verify_unparseable_hash(self):
        assert verify_password("password123", "not-a-hash") is False

    def test_fixed_salt_mode(self, monkeypatch):
        """With PER_USER_SALT off, PASSWORD_SALT is used and hashes repeat."""
        monkeypatch.setattr(settings, "PER_USER_SALT", False)
        first = hash_password("password123")
        second = hash_password("password123")

        assert first == second
        assert verify_password("password123", first) is True

    def test_fixed_salt_hash_verifies_in_per_user_mode(self, monkeypatch):
        monkeypatch.setattr(settings, "PER_USER_SALT", False)
        hashed = hash_password("password123")
        monkeypatch.setattr(settings, "PER_USER_SALT", True)

        assert security.verify_password("password123", hashed) is True


@pytest.mark.unit
class TestSessionIds:
    def test_session_ids_are_unique_and_url_safe(self):
        ids = {new_session_id() for _ in range(50)}
        assert len(ids) == 50
        for session_id in ids:
            assert len(session_id) <= 64
            assert all(c.isalnum() or c in "-_" for c in session_id)


@pytest.mark.unit
class TestSettings:
    def test_password_salt_is_required(self, monkeypatch):
        monkeypatch.delenv("PASSWORD_SALT", raising=False)
        with pytest.raises(ValueError):
            Settings(_env_file=None, DATABASE_URL="sqlite+aiosqlite:///x.db")

    def test_short_password_salt_rejected(self):
        with pytest.raises(ValueError):
            Settings(_env_file=None, DATABASE_URL="sqlite+aiosqlite:///x.db", PASSWORD_SALT="c2hvcnQ")

    def test_session_max_age_in_seconds(self):
        s = Settings(
            _env_file=None,
            DATABASE_URL="sqlite+aiosqlite:///x.db",
            PASSWORD_SALT="c29tZXNhbHR2YWx1ZTEyMw",
            SESSION_EXPIRY_MINUTES=5,
        )
        assert s.session_max_age == 300
        assert s.password_salt_bytes == b"somesaltvalue123"
