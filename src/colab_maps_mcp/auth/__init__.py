"""OAuth authentication for Google Drive access.

Quick Start:
    ```python
    from colab_maps_mcp.auth import OAuthManager

    manager = OAuthManager(
        client_id="your-client-id",
        client_secret="your-client-secret",  # pragma: allowlist secret
        refresh_token="your-refresh-token",
    )
    access_token = await manager.get_access_token()
    ```
"""

from colab_maps_mcp.auth.models import (
    OAuthToken,
    StoredToken,
    TokenMetadata,
    TokenStatus,
)
from colab_maps_mcp.auth.oauth_manager import DRIVE_SCOPES, SERVICE_NAME, OAuthManager
from colab_maps_mcp.auth.token_storage import TokenStorage

__all__ = [
    "DRIVE_SCOPES",
    "OAuthManager",
    "OAuthToken",
    "SERVICE_NAME",
    "StoredToken",
    "TokenMetadata",
    "TokenStatus",
    "TokenStorage",
]
