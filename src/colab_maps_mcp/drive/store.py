"""Google Drive v3 file access over REST.

DriveStore is the document store behind the Colab tools: it lists folder
contents, downloads file bodies, creates files and replaces the content of
existing files. Each content replacement is a single media upload, so the
file on Drive is either fully updated or untouched.

Failures are classified here: HTTP 404 becomes NotFoundError, everything
else (HTTP errors, timeouts, connection failures) becomes
TransientProviderError. Nothing is retried.
"""

import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from colab_maps_mcp.errors import NotFoundError, TransientProviderError

logger = logging.getLogger(__name__)

DRIVE_API_BASE = "https://www.googleapis.com/drive/v3"
DRIVE_UPLOAD_BASE = "https://www.googleapis.com/upload/drive/v3"

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"

TokenProvider = Callable[[], Awaitable[str]]


def _provider_message(response: httpx.Response) -> str:
    """Extract Google's error message from a failed response."""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return f"HTTP {response.status_code}"


class DriveStore:
    """Async Drive client authenticated with a bearer token.

    Attributes:
        token_provider: Coroutine function returning a valid access token.

    Example:
        ```python
        store = DriveStore(manager.get_access_token)
        content = await store.fetch("1AbC...")
        await store.store("1AbC...", content, "application/x-ipynb+json")
        await store.close()
        ```
    """

    def __init__(
        self,
        token_provider: TokenProvider,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.token_provider = token_provider
        self._http_client = http_client

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create the shared HTTP client with connection pooling."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                http2=True,
                limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
                timeout=httpx.Timeout(30.0, connect=10.0),
            )
        return self._http_client

    async def close(self) -> None:
        """Close the shared HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def _request(
        self,
        method: str,
        url: str,
        resource_id: str | None = None,
        params: dict[str, Any] | None = None,
        content: bytes | str | None = None,
        headers: dict[str, str] | None = None,
        timeout: float = 30.0,
    ) -> httpx.Response:
        """Make an authenticated request and classify failures.

        Args:
            method: HTTP method.
            url: Full URL.
            resource_id: File or folder ID echoed back on 404.
            params: Query parameters.
            content: Raw request body.
            headers: Extra headers.
            timeout: Request timeout in seconds.

        Raises:
            NotFoundError: If Drive answers 404.
            TransientProviderError: On any other HTTP or transport failure.
        """
        access_token = await self.token_provider()
        client = await self._get_http_client()

        request_headers = {"Authorization": f"Bearer {access_token}"}
        if headers:
            request_headers.update(headers)

        try:
            response = await client.request(
                method=method,
                url=url,
                params=params,
                content=content,
                headers=request_headers,
                timeout=timeout,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            message = _provider_message(e.response)
            if e.response.status_code == 404 and resource_id is not None:
                raise NotFoundError(resource_id, message) from e
            raise TransientProviderError(f"Google Drive API error: {message}") from e
        except httpx.HTTPError as e:
            raise TransientProviderError(f"Google Drive request failed: {e}") from e

        return response

    async def list_files(
        self,
        folder_id: str = "root",
        page_size: int = 100,
        page_token: str | None = None,
    ) -> dict[str, Any]:
        """List non-trashed files and folders directly inside a folder.

        Folders come first, then files, each sorted by name.

        Args:
            folder_id: Drive folder ID or the "root" alias.
            page_size: Maximum entries to return.
            page_token: Token from a previous page.

        Returns:
            Drive response with "files" and optional "nextPageToken".
        """
        escaped_folder_id = folder_id.replace("\\", "\\\\").replace("'", "\\'")
        params: dict[str, Any] = {
            "q": f"'{escaped_folder_id}' in parents and trashed = false",
            "pageSize": page_size,
            "fields": "nextPageToken, files(id, name, mimeType)",
            "orderBy": "folder,name",
        }
        if page_token:
            params["pageToken"] = page_token

        response = await self._request(
            "GET", f"{DRIVE_API_BASE}/files", resource_id=folder_id, params=params
        )
        result: dict[str, Any] = response.json()
        return result

    async def fetch(self, file_id: str) -> str:
        """Download a file's content as text."""
        response = await self._request(
            "GET",
            f"{DRIVE_API_BASE}/files/{file_id}",
            resource_id=file_id,
            params={"alt": "media"},
        )
        return response.text

    async def store(self, file_id: str, content: str, mime_type: str) -> dict[str, Any]:
        """Replace a file's content in one media upload.

        Args:
            file_id: File to overwrite.
            content: New file body.
            mime_type: Content type of the body.

        Returns:
            Updated file's "id" and "name".
        """
        logger.info(f"Uploading {len(content)} characters to file {file_id}")
        response = await self._request(
            "PATCH",
            f"{DRIVE_UPLOAD_BASE}/files/{file_id}",
            resource_id=file_id,
            params={"uploadType": "media", "fields": "id,name"},
            content=content.encode("utf-8"),
            headers={"Content-Type": mime_type},
            timeout=60.0,
        )
        result: dict[str, Any] = response.json()
        return result

    async def create(
        self,
        name: str,
        content: str,
        parent_id: str = "root",
        mime_type: str = "text/plain",
    ) -> dict[str, Any]:
        """Create a new file with a multipart upload.

        Args:
            name: File name.
            content: File body.
            parent_id: Parent folder ID.
            mime_type: Content type of the body.

        Returns:
            Created file's "id" and "name".
        """
        metadata = {"name": name, "mimeType": mime_type, "parents": [parent_id]}

        boundary = "colab_maps_mcp_boundary"
        body = "\r\n".join(
            [
                f"--{boundary}",
                "Content-Type: application/json; charset=UTF-8",
                "",
                json.dumps(metadata),
                f"--{boundary}",
                f"Content-Type: {mime_type}",
                "",
                content,
                f"--{boundary}--",
            ]
        )

        response = await self._request(
            "POST",
            f"{DRIVE_UPLOAD_BASE}/files",
            resource_id=parent_id,
            params={"uploadType": "multipart", "fields": "id,name"},
            content=body.encode("utf-8"),
            headers={"Content-Type": f"multipart/related; boundary={boundary}"},
            timeout=60.0,
        )
        result: dict[str, Any] = response.json()
        return result
