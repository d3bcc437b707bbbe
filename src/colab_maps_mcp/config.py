"""Startup configuration for the Colab and Maps servers.

Settings are read once from the environment (after loading an optional
``.env`` file) and passed explicitly into each server instead of living in
module globals.

Environment Variables:
    GOOGLE_CLIENT_ID: OAuth client ID (Colab server, setup command)
    GOOGLE_CLIENT_SECRET: OAuth client secret (Colab server, setup command)
    GOOGLE_REFRESH_TOKEN: OAuth refresh token (optional if `setup` stored one)
    GOOGLE_MAPS_API_KEY: Maps Platform API key (Maps server)
"""

import os
from collections.abc import Mapping

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field


class ConfigurationError(ValueError):
    """Required configuration is missing.

    Attributes:
        missing: Names of the missing environment variables.
    """

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(
            "Missing required environment variable(s): " + ", ".join(missing)
        )


def load_environment() -> None:
    """Load a ``.env`` file from the working directory, if present.

    Variables already set in the process environment take precedence.
    """
    load_dotenv(find_dotenv(usecwd=True), override=False)


class ColabSettings(BaseModel):
    """Credentials for the Drive-backed Colab server.

    Attributes:
        client_id: Google OAuth client ID.
        client_secret: Google OAuth client secret.
        refresh_token: Long-lived refresh token, if supplied via environment.
    """

    client_id: str = Field(..., min_length=1, description="Google OAuth client ID")
    client_secret: str = Field(..., min_length=1, description="Google OAuth client secret")
    refresh_token: str | None = Field(default=None, description="OAuth refresh token")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ColabSettings":
        """Build settings from environment variables.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.

        Raises:
            ConfigurationError: If the client ID or secret is missing.
        """
        env = os.environ if environ is None else environ
        client_id = env.get("GOOGLE_CLIENT_ID", "")
        client_secret = env.get("GOOGLE_CLIENT_SECRET", "")

        missing = [
            name
            for name, value in (
                ("GOOGLE_CLIENT_ID", client_id),
                ("GOOGLE_CLIENT_SECRET", client_secret),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(missing)

        return cls(
            client_id=client_id,
            client_secret=client_secret,
            refresh_token=env.get("GOOGLE_REFRESH_TOKEN") or None,
        )


class MapsSettings(BaseModel):
    """Credentials for the Maps server.

    Attributes:
        api_key: Google Maps Platform API key, sent with every request.
    """

    api_key: str = Field(..., min_length=1, description="Maps Platform API key")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "MapsSettings":
        """Build settings from environment variables.

        Raises:
            ConfigurationError: If GOOGLE_MAPS_API_KEY is missing.
        """
        env = os.environ if environ is None else environ
        api_key = env.get("GOOGLE_MAPS_API_KEY", "")
        if not api_key:
            raise ConfigurationError(["GOOGLE_MAPS_API_KEY"])
        return cls(api_key=api_key)
