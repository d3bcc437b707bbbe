"""OAuth manager for Google Drive access.

The Colab server authenticates with a long-lived refresh token. The token
either comes from the environment (GOOGLE_REFRESH_TOKEN) or from a prior
`colab-maps-mcp setup` run, which performs the browser consent flow with
google-auth-oauthlib and stores the result in TokenStorage.

Environment Variables:
    GOOGLE_OAUTH_REDIRECT_URI: Redirect URI for the consent flow
        (default: http://127.0.0.1:8789/callback)
"""

import asyncio
import logging
import os
import secrets
import webbrowser
from datetime import datetime, timedelta, timezone
from http.server import BaseHTTPRequestHandler, HTTPServer
from pathlib import Path
from typing import Any
from urllib.parse import parse_qs, urlparse

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow

from colab_maps_mcp.auth.models import OAuthToken, StoredToken, TokenMetadata, TokenStatus
from colab_maps_mcp.auth.token_storage import TokenStorage
from colab_maps_mcp.config import ColabSettings

logger = logging.getLogger(__name__)

SERVICE_NAME = "colab-maps-mcp"

# Full Drive access is needed to overwrite notebooks the app did not create
DRIVE_SCOPES = ["https://www.googleapis.com/auth/drive"]

GOOGLE_AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"  # nosec B105

DEFAULT_OAUTH_HOST = "127.0.0.1"
DEFAULT_OAUTH_PORT = 8789
DEFAULT_REDIRECT_URI = "http://127.0.0.1:8789/callback"

_SUCCESS_PAGE = (
    b"<html><body><h1>Authentication Successful!</h1>"
    b"<p>You can close this window and return to the terminal.</p></body></html>"
)
_FAILURE_PAGE = (
    b"<html><body><h1>Authentication Failed</h1>"
    b"<p>Please close this window and try again.</p></body></html>"
)


def _make_callback_handler(
    callback_path: str, result: dict[str, str]
) -> type[BaseHTTPRequestHandler]:
    """Build a one-shot HTTP handler that records the OAuth redirect.

    Args:
        callback_path: Path component of the redirect URI.
        result: Receives "code" or "error" from the redirect query.
    """

    class OAuthCallbackHandler(BaseHTTPRequestHandler):
        def log_message(self, format: str, *args: Any) -> None:
            """Keep the consent flow quiet."""

        def _respond(self, status: int, body: bytes) -> None:
            self.send_response(status)
            self.send_header("Content-type", "text/html")
            self.end_headers()
            self.wfile.write(body)

        def do_GET(self) -> None:
            parsed = urlparse(self.path)
            if parsed.path != callback_path:
                self.send_response(404)
                self.end_headers()
                self.wfile.write(b"Not Found")
                return

            query = parse_qs(parsed.query)
            if "error" in query:
                result["error"] = query["error"][0]
                self._respond(400, _FAILURE_PAGE)
            elif "code" in query:
                result["code"] = query["code"][0]
                self._respond(200, _SUCCESS_PAGE)
            else:
                self._respond(400, _FAILURE_PAGE)

    return OAuthCallbackHandler


class OAuthManager:
    """Issues Drive access tokens from a stored or configured refresh token.

    Attributes:
        storage: Token storage used to cache access tokens.
        client_id: OAuth client ID used for consent and refresh.
        client_secret: OAuth client secret used for consent and refresh.
        refresh_token: Refresh token from configuration, if any.

    Example:
        ```python
        manager = OAuthManager.from_settings(ColabSettings.from_env())
        access_token = await manager.get_access_token()
        ```
    """

    def __init__(
        self,
        storage: TokenStorage | None = None,
        client_id: str | None = None,
        client_secret: str | None = None,
        refresh_token: str | None = None,
    ) -> None:
        self.storage = storage or TokenStorage()
        self.client_id = client_id
        self.client_secret = client_secret
        self.refresh_token = refresh_token
        self._service_name = SERVICE_NAME

    @classmethod
    def from_settings(
        cls, settings: ColabSettings, storage: TokenStorage | None = None
    ) -> "OAuthManager":
        """Create a manager from startup settings."""
        return cls(
            storage=storage,
            client_id=settings.client_id,
            client_secret=settings.client_secret,
            refresh_token=settings.refresh_token,
        )

    @property
    def token_path(self) -> Path:
        """Path of the token cache file."""
        return self.storage.token_path

    def has_valid_tokens(self) -> bool:
        """Return True if a non-expired access token is cached."""
        return self.storage.get_status(self._service_name) == TokenStatus.VALID

    def _credentials_to_token(self, credentials: Credentials, scopes: list[str]) -> OAuthToken:
        """Convert google-auth Credentials to OAuthToken.

        Credentials without an expiry are assumed to last one hour.
        """
        if credentials.expiry:
            expires_at = credentials.expiry
            # google-auth reports naive UTC datetimes
            if expires_at.tzinfo is None:
                expires_at = expires_at.replace(tzinfo=timezone.utc)
        else:
            expires_at = datetime.now(timezone.utc) + timedelta(hours=1)

        return OAuthToken(  # nosec B106 - "Bearer" is the OAuth token type
            access_token=credentials.token,
            refresh_token=credentials.refresh_token,
            expires_at=expires_at,
            scopes=scopes,
            token_type="Bearer",
        )

    def _token_to_credentials(self, token: OAuthToken) -> Credentials:
        """Convert OAuthToken to refreshable google-auth Credentials."""
        return Credentials(
            token=token.access_token or None,
            refresh_token=token.refresh_token,
            token_uri=GOOGLE_TOKEN_URI,
            client_id=self.client_id,
            client_secret=self.client_secret,
            scopes=token.scopes,
        )

    def _seed_from_refresh_token(self) -> None:
        """Store the configured refresh token unless it is already cached.

        A cached token with a different refresh token is replaced, so a
        changed GOOGLE_REFRESH_TOKEN takes effect on the next call. The
        seeded entry has no access token, so the first use refreshes it.
        """
        if self.refresh_token is None:
            return
        stored = self.storage.retrieve(self._service_name)
        if stored is not None and stored.token.refresh_token == self.refresh_token:
            return

        logger.info("Seeding token storage from configured refresh token")
        token = OAuthToken(
            access_token="",
            refresh_token=self.refresh_token,
            expires_at=datetime.now(timezone.utc),
            scopes=DRIVE_SCOPES,
        )
        metadata = TokenMetadata(service_name=self._service_name, provider="google")
        self.storage.store(self._service_name, token, metadata)

    async def authenticate(
        self,
        scopes: list[str] | None = None,
        client_id: str | None = None,
        client_secret: str | None = None,
    ) -> OAuthToken:
        """Run the browser consent flow and store the resulting token.

        Args:
            scopes: OAuth scopes to request. Defaults to DRIVE_SCOPES.
            client_id: OAuth client ID. Falls back to the configured one.
            client_secret: OAuth client secret. Falls back to the configured one.

        Returns:
            Token including the refresh token.

        Raises:
            ValueError: If no client ID/secret is available.
        """
        scopes = scopes or DRIVE_SCOPES
        client_id = client_id or self.client_id
        client_secret = client_secret or self.client_secret

        if not client_id or not client_secret:
            raise ValueError(
                "Client ID and secret required. "
                "Pass as arguments or set GOOGLE_CLIENT_ID and "
                "GOOGLE_CLIENT_SECRET environment variables."
            )

        redirect_uri = os.environ.get("GOOGLE_OAUTH_REDIRECT_URI", DEFAULT_REDIRECT_URI)
        client_config = {
            "web": {
                "client_id": client_id,
                "client_secret": client_secret,
                "auth_uri": GOOGLE_AUTH_URI,
                "token_uri": GOOGLE_TOKEN_URI,
                "redirect_uris": [redirect_uri],
            }
        }

        # The consent flow blocks on a local HTTP server
        loop = asyncio.get_running_loop()
        credentials = await loop.run_in_executor(
            None, self._run_oauth_flow, client_config, scopes, redirect_uri
        )

        token = self._credentials_to_token(credentials, scopes)
        metadata = TokenMetadata(service_name=self._service_name, provider="google")
        self.storage.store(self._service_name, token, metadata)

        return token

    def _run_oauth_flow(
        self, client_config: dict[str, Any], scopes: list[str], redirect_uri: str
    ) -> Credentials:
        """Open the consent page and wait for the redirect (blocking).

        Args:
            client_config: Web application client configuration.
            scopes: OAuth scopes.
            redirect_uri: Full redirect URI, e.g. http://127.0.0.1:8789/callback.

        Returns:
            Credentials obtained by exchanging the authorization code.
        """
        flow = Flow.from_client_config(client_config, scopes=scopes, redirect_uri=redirect_uri)

        auth_url, _ = flow.authorization_url(
            access_type="offline",
            prompt="consent",
            state=secrets.token_urlsafe(32),
        )

        parsed = urlparse(redirect_uri)
        host = parsed.hostname or DEFAULT_OAUTH_HOST
        port = parsed.port or DEFAULT_OAUTH_PORT
        callback_path = parsed.path or "/callback"

        result: dict[str, str] = {}
        server = HTTPServer((host, port), _make_callback_handler(callback_path, result))
        server.timeout = 300

        print("Opening browser for Google authorization...")
        print(f"If browser doesn't open, visit: {auth_url}")
        webbrowser.open(auth_url)

        server.handle_request()
        server.server_close()

        if "error" in result:
            raise RuntimeError(f"OAuth authentication failed: {result['error']}")
        if "code" not in result:
            raise RuntimeError("No authorization code received from Google")

        flow.fetch_token(code=result["code"])
        return flow.credentials

    async def refresh_if_needed(self) -> OAuthToken | None:
        """Return a usable token, refreshing it first if expired.

        Returns:
            The current or refreshed token, or None if there is no token or
            it cannot be refreshed.
        """
        self._seed_from_refresh_token()

        stored = self.storage.retrieve(self._service_name)
        if stored is None:
            return None

        if not stored.token.is_expired():
            return stored.token

        if stored.token.refresh_token is None:
            return None

        credentials = self._token_to_credentials(stored.token)

        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, credentials.refresh, Request())

        new_token = self._credentials_to_token(credentials, stored.token.scopes)
        # Google omits the refresh token from refresh responses
        if new_token.refresh_token is None:
            new_token.refresh_token = stored.token.refresh_token

        stored.metadata.last_refreshed = datetime.now(timezone.utc)
        self.storage.store(self._service_name, new_token, stored.metadata)
        logger.info("Refreshed Drive access token")

        return new_token

    async def get_access_token(self) -> str:
        """Return a valid access token, refreshing if necessary.

        Raises:
            RuntimeError: If no token is available or the refresh fails.
        """
        self._seed_from_refresh_token()
        status = self.storage.get_status(self._service_name)

        if status == TokenStatus.MISSING:
            raise RuntimeError(
                "No OAuth token found. Set GOOGLE_REFRESH_TOKEN or "
                "authenticate first using: colab-maps-mcp setup"
            )

        if status == TokenStatus.INVALID:
            raise RuntimeError(
                "Stored OAuth token is invalid or corrupted. "
                "Please re-authenticate using: colab-maps-mcp setup"
            )

        if status == TokenStatus.EXPIRED:
            logger.info("Token expired, attempting refresh...")
            token = await self.refresh_if_needed()
            if token is None:
                raise RuntimeError(
                    "Token refresh failed. Please re-authenticate using: colab-maps-mcp setup"
                )
            return token.access_token

        stored = self.storage.retrieve(self._service_name)
        if stored is None:
            raise RuntimeError("Unexpected error: token retrieval failed")
        return stored.token.access_token

    def get_status(self) -> tuple[TokenStatus, StoredToken | None]:
        """Return the cached token status and the token itself, if any."""
        status = self.storage.get_status(self._service_name)
        stored = self.storage.retrieve(self._service_name) if status != TokenStatus.MISSING else None
        return (status, stored)
