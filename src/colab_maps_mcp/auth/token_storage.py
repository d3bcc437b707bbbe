"""JSON file cache for the Drive OAuth token.

Storage Location: ./.colab-maps-mcp/tokens.json (project level)

The Colab server refreshes its access token from a long-lived refresh
token. Caching the refreshed access token here avoids a token round trip
on every server start. The file holds secrets: the directory is created
0700 and the file written 0600.
"""

import json
import logging
from pathlib import Path
from typing import Any

from colab_maps_mcp.auth.models import (
    OAuthToken,
    StoredToken,
    TokenMetadata,
    TokenStatus,
)

logger = logging.getLogger(__name__)

CREDENTIALS_DIR_NAME = ".colab-maps-mcp"
TOKEN_FILE_NAME = "tokens.json"


def get_token_path() -> Path:
    """Return the default token path under the current working directory."""
    return Path.cwd() / CREDENTIALS_DIR_NAME / TOKEN_FILE_NAME


class TokenStorage:
    """Keyed JSON storage for OAuth tokens.

    Attributes:
        token_path: Path to the tokens.json file.

    Example:
        ```python
        storage = TokenStorage()
        storage.store("colab-maps-mcp", token, TokenMetadata(service_name="colab-maps-mcp"))

        if storage.get_status("colab-maps-mcp") == TokenStatus.VALID:
            access_token = storage.retrieve("colab-maps-mcp").token.access_token
        ```
    """

    def __init__(self, token_path: Path | None = None) -> None:
        """Initialize token storage.

        Args:
            token_path: Custom path for tokens.json. Defaults to
                ./.colab-maps-mcp/tokens.json.
        """
        self.token_path = token_path or get_token_path()
        self._ensure_credentials_dir()

    def _ensure_credentials_dir(self) -> None:
        """Create the credentials directory owner-only, or tighten it."""
        creds_dir = self.token_path.parent
        if not creds_dir.exists():
            creds_dir.mkdir(parents=True, mode=0o700)
        else:
            creds_dir.chmod(0o700)

    def _load_tokens(self) -> dict[str, Any]:
        if not self.token_path.exists():
            return {}

        try:
            with open(self.token_path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable token file {self.token_path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _save_tokens(self, tokens: dict[str, Any]) -> None:
        self._ensure_credentials_dir()

        with open(self.token_path, "w") as f:
            json.dump(tokens, f, indent=2, default=str)

        self.token_path.chmod(0o600)

    def store(self, service_name: str, token: OAuthToken, metadata: TokenMetadata) -> None:
        """Store (or replace) the token for a service.

        Args:
            service_name: Storage key.
            token: Token to persist.
            metadata: Bookkeeping stored with the token.
        """
        stored_token = StoredToken(version=1, metadata=metadata, token=token)

        tokens = self._load_tokens()
        tokens[service_name] = json.loads(stored_token.model_dump_json())
        self._save_tokens(tokens)

    def retrieve(self, service_name: str) -> StoredToken | None:
        """Return the stored token, or None if absent or unparseable."""
        tokens = self._load_tokens()

        if service_name not in tokens:
            return None

        try:
            return StoredToken.model_validate(tokens[service_name])
        except ValueError:
            return None

    def get_status(self, service_name: str) -> TokenStatus:
        """Classify the stored token for a service.

        Args:
            service_name: Storage key.

        Returns:
            MISSING if nothing is stored, INVALID if the entry cannot be
            parsed, EXPIRED if the access token needs a refresh, else VALID.
        """
        stored = self.retrieve(service_name)

        if stored is None:
            if service_name in self._load_tokens():
                return TokenStatus.INVALID
            return TokenStatus.MISSING

        if stored.token.is_expired():
            return TokenStatus.EXPIRED

        return TokenStatus.VALID
