"""Data models for OAuth tokens.

This module defines Pydantic models for the Drive OAuth token, its
bookkeeping metadata and the on-disk storage envelope.
"""

from datetime import datetime, timedelta, timezone
from enum import Enum

from pydantic import BaseModel, Field


class TokenStatus(str, Enum):
    """State of a stored token."""

    VALID = "valid"
    EXPIRED = "expired"
    MISSING = "missing"
    INVALID = "invalid"


class OAuthToken(BaseModel):
    """An OAuth2 access token with its refresh token.

    Attributes:
        access_token: Bearer token sent to Google APIs. Empty until the
            first refresh when seeded from a bare refresh token.
        refresh_token: Long-lived token used to mint new access tokens.
        expires_at: Access token expiry (timezone-aware).
        scopes: Granted OAuth scopes.
        token_type: Token type, always "Bearer" for Google.
    """

    access_token: str = Field(default="", description="OAuth access token")
    refresh_token: str | None = Field(default=None, description="OAuth refresh token")
    expires_at: datetime = Field(..., description="Access token expiry")
    scopes: list[str] = Field(default_factory=list, description="Granted scopes")
    token_type: str = Field(default="Bearer", description="Token type")

    def is_expired(self, buffer_seconds: int = 60) -> bool:
        """Check whether the access token is expired or about to expire.

        Args:
            buffer_seconds: Treat the token as expired this many seconds early.

        Returns:
            True if the token should be refreshed before use.
        """
        if not self.access_token:
            return True
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return datetime.now(timezone.utc) + timedelta(seconds=buffer_seconds) >= expires_at


class TokenMetadata(BaseModel):
    """Bookkeeping stored alongside a token.

    Attributes:
        service_name: Key the token is stored under.
        provider: OAuth provider name.
        created_at: When the token was first stored.
        last_refreshed: When the access token was last refreshed.
    """

    service_name: str = Field(..., description="Storage key")
    provider: str = Field(default="google", description="OAuth provider")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation time",
    )
    last_refreshed: datetime | None = Field(default=None, description="Last refresh time")


class StoredToken(BaseModel):
    """Versioned envelope persisted in tokens.json."""

    version: int = Field(default=1, description="Storage format version")
    metadata: TokenMetadata
    token: OAuthToken
