import base64
import binascii

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with type-safe configuration management."""

    # Database Configuration
    DATABASE_URL: str

    # Password hashing
    PASSWORD_SALT: str
    PER_USER_SALT: bool = True

    # Session Configuration
    SESSION_COOKIE_NAME: str = "happening_session"
    SESSION_EXPIRY_MINUTES: int = 60
    SESSION_SWEEP_INTERVAL_SECONDS: int = 60
    SESSION_COOKIE_SECURE: bool = False

    # Environment
    ENVIRONMENT: str = "development"

    class Config:
        env_file = ".env"
        case_sensitive = True

    @field_validator("PASSWORD_SALT")
    @classmethod
    def _salt_must_decode(cls, value: str) -> str:
        if len(_decode_salt(value)) < 8:
            raise ValueError("PASSWORD_SALT must decode to at least 8 bytes")
        return value

    @property
    def password_salt_bytes(self) -> bytes:
        """Decoded fixed salt used when PER_USER_SALT is disabled."""
        return _decode_salt(self.PASSWORD_SALT)

    @property
    def session_max_age(self) -> int:
        return self.SESSION_EXPIRY_MINUTES * 60


def _decode_salt(value: str) -> bytes:
    # Salts are stored the PHC way: base64 without padding.
    padded = value + "=" * (-len(value) % 4)
    try:
        return base64.b64decode(padded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"PASSWORD_SALT is not valid base64: {e}")


# Create a single instance to be imported throughout the app
settings = Settings()
