"""
Password hashing and session identifiers.

Passwords are hashed with argon2id using the same cost parameters as the
hashes already stored by earlier deployments, so old and new hashes verify
through the same context.
"""
import secrets

from passlib.context import CryptContext
from passlib.hash import argon2

from happening.core.config import settings
from happening.core.logging import logger

ARGON2_MEMORY_COST = 19456  # KiB
ARGON2_ROUNDS = 2
ARGON2_PARALLELISM = 1

pwd_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
    argon2__type="id",
    argon2__memory_cost=ARGON2_MEMORY_COST,
    argon2__rounds=ARGON2_ROUNDS,
    argon2__parallelism=ARGON2_PARALLELISM,
)


def _fixed_salt_hasher():
    return argon2.using(
        type="id",
        memory_cost=ARGON2_MEMORY_COST,
        rounds=ARGON2_ROUNDS,
        parallelism=ARGON2_PARALLELISM,
        salt=settings.password_salt_bytes,
    )


def hash_password(password: str) -> str:
    """
    Hash a password.

    Uses a fresh random salt per call unless PER_USER_SALT is disabled, in
    which case the application-wide PASSWORD_SALT is used and equal
    passwords produce equal hashes.
    """
    if settings.PER_USER_SALT:
        return pwd_context.hash(password)
    return _fixed_salt_hasher().hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    """Verify a password against a hash."""
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError as e:
        logger.warning(f"Stored password hash could not be parsed: {e}")
        return False


def new_session_id() -> str:
    """Opaque, URL-safe session identifier."""
    return secrets.token_urlsafe(32)
