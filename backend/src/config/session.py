"""
Signed session cookie settings for CareLedger.

The login flow lives outside this backend; it writes ``user_guid`` into a
cookie signed with SESSION_SECRET_KEY, and this service only reads it back
through Starlette's SessionMiddleware.
"""

import secrets
from functools import lru_cache
from typing import Any, Dict

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class SessionSettings(BaseSettings):
    """
    Cookie settings shared with the login service.

    Environment Variables:
        SESSION_SECRET_KEY: Signing key, at least 32 characters. Must match
            the login service or no session will verify.
        SESSION_MAX_AGE: Cookie lifetime in seconds (default: 8 hours, one shift)
        SESSION_HTTPS_ONLY: Send the cookie over HTTPS only (default: True)
    """

    session_secret_key: str = Field(default="", validation_alias="SESSION_SECRET_KEY")

    session_max_age: int = Field(
        default=8 * 60 * 60,
        validation_alias="SESSION_MAX_AGE",
        ge=60,
        le=7 * 24 * 60 * 60,
    )

    session_https_only: bool = Field(default=True, validation_alias="SESSION_HTTPS_ONLY")

    class Config:
        env_file = ".env"
        extra = "ignore"

    @field_validator("session_secret_key")
    @classmethod
    def validate_secret_key(cls, v: str) -> str:
        if v and len(v) < 32:
            raise ValueError("SESSION_SECRET_KEY must be at least 32 characters")
        return v

    @property
    def is_configured(self) -> bool:
        return bool(self.session_secret_key)

    def middleware_options(self) -> Dict[str, Any]:
        """
        Keyword arguments for SessionMiddleware.

        Without a configured key a random one is used, so no cookie from
        another process verifies and every request is unauthenticated.
        """
        return {
            "secret_key": self.session_secret_key or secrets.token_urlsafe(32),
            "session_cookie": "careledger_session",
            "max_age": self.session_max_age,
            "same_site": "lax",
            "https_only": self.session_https_only,
        }


@lru_cache()
def get_session_settings() -> SessionSettings:
    """Get cached session settings instance."""
    return SessionSettings()
