"""Shared pytest fixtures for colab-maps-mcp tests.

This module provides reusable fixtures for OAuth tokens, token storage,
notebook documents and an in-memory Drive store.
"""

import copy
import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

from colab_maps_mcp.auth.models import OAuthToken, StoredToken, TokenMetadata
from colab_maps_mcp.config import ColabSettings, MapsSettings
from colab_maps_mcp.errors import NotFoundError

# =============================================================================
# Token Fixtures
# =============================================================================


@pytest.fixture
def valid_token() -> OAuthToken:
    """Create a valid, non-expired OAuth token."""
    return OAuthToken(
        access_token="test_access_token_abc123",
        refresh_token="test_refresh_token_xyz789",
        expires_at=datetime.now(timezone.utc) + timedelta(hours=1),
        scopes=["https://www.googleapis.com/auth/drive"],
        token_type="Bearer",
    )


@pytest.fixture
def expired_token() -> OAuthToken:
    """Create an expired OAuth token."""
    return OAuthToken(
        access_token="expired_access_token",
        refresh_token="test_refresh_token",
        expires_at=datetime.now(timezone.utc) - timedelta(hours=1),
        scopes=["https://www.googleapis.com/auth/drive"],
        token_type="Bearer",
    )


@pytest.fixture
def token_metadata() -> TokenMetadata:
    """Create token metadata for testing."""
    return TokenMetadata(
        service_name="colab-maps-mcp",
        provider="google",
        created_at=datetime.now(timezone.utc) - timedelta(days=1),
    )


@pytest.fixture
def stored_token(valid_token: OAuthToken, token_metadata: TokenMetadata) -> StoredToken:
    """Create a complete stored token for testing."""
    return StoredToken(version=1, metadata=token_metadata, token=valid_token)


# =============================================================================
# Token Storage / OAuth Manager Fixtures
# =============================================================================


@pytest.fixture
def temp_token_dir(tmp_path: Path) -> Path:
    """Create a temporary directory for token storage tests."""
    token_dir = tmp_path / ".colab-maps-mcp"
    token_dir.mkdir(parents=True, mode=0o700)
    return token_dir


@pytest.fixture
def temp_token_path(temp_token_dir: Path) -> Path:
    """Get the path for a temporary tokens.json file."""
    return temp_token_dir / "tokens.json"


@pytest.fixture
def token_storage(temp_token_path: Path):
    """Create a TokenStorage instance with temporary storage."""
    from colab_maps_mcp.auth.token_storage import TokenStorage

    return TokenStorage(token_path=temp_token_path)


@pytest.fixture
def oauth_manager(token_storage):
    """Create an OAuthManager with temporary storage and client credentials."""
    from colab_maps_mcp.auth.oauth_manager import OAuthManager

    return OAuthManager(
        storage=token_storage,
        client_id="test_client_id",
        client_secret="test_client_secret",  # pragma: allowlist secret
    )


@pytest.fixture
def mock_google_credentials() -> MagicMock:
    """Create a mock Google OAuth2 Credentials object."""
    mock_creds = MagicMock()
    mock_creds.token = "mock_access_token"
    mock_creds.refresh_token = "mock_refresh_token"
    mock_creds.expiry = datetime.now(timezone.utc) + timedelta(hours=1)
    mock_creds.expired = False
    mock_creds.valid = True
    mock_creds.scopes = ["https://www.googleapis.com/auth/drive"]
    return mock_creds


# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture
def colab_settings() -> ColabSettings:
    """Colab settings with a configured refresh token."""
    return ColabSettings(
        client_id="test_client_id",
        client_secret="test_client_secret",  # pragma: allowlist secret
        refresh_token="test_refresh_token",
    )


@pytest.fixture
def maps_settings() -> MapsSettings:
    """Maps settings with a test API key."""
    return MapsSettings(api_key="test_maps_key")


# =============================================================================
# Notebook Fixtures
# =============================================================================


@pytest.fixture
def sample_notebook() -> dict[str, Any]:
    """A two-cell notebook: a code cell followed by a markdown cell."""
    return {
        "cells": [
            {
                "cell_type": "code",
                "execution_count": 3,
                "metadata": {"id": "cell-a"},
                "outputs": [{"output_type": "stream", "name": "stdout", "text": ["1\n"]}],
                "source": ["a=1"],
            },
            {
                "cell_type": "markdown",
                "metadata": {},
                "source": ["# title"],
            },
        ],
        "metadata": {
            "colab": {"name": "Sample.ipynb", "provenance": []},
            "kernelspec": {"display_name": "Python 3", "name": "python3"},
        },
        "nbformat": 4,
        "nbformat_minor": 0,
    }


@pytest.fixture
def sample_notebook_json(sample_notebook: dict[str, Any]) -> str:
    """The sample notebook as stored on Drive."""
    return json.dumps(sample_notebook, indent=1)


class FakeDriveStore:
    """In-memory stand-in for DriveStore.

    Attributes:
        files: File ID to (name, content) mapping.
        writes: Every (file_id, content, mime_type) passed to store().
    """

    def __init__(self, files: dict[str, tuple[str, str]] | None = None) -> None:
        self.files = dict(files or {})
        self.writes: list[tuple[str, str, str]] = []
        self.closed = False

    async def list_files(
        self, folder_id: str = "root", page_size: int = 100, page_token: str | None = None
    ) -> dict[str, Any]:
        entries = [
            {"id": file_id, "name": name, "mimeType": "application/x-ipynb+json"}
            for file_id, (name, _) in sorted(self.files.items())
        ]
        return {"files": entries[:page_size]}

    async def fetch(self, file_id: str) -> str:
        if file_id not in self.files:
            raise NotFoundError(file_id, "File not found.")
        return self.files[file_id][1]

    async def store(self, file_id: str, content: str, mime_type: str) -> dict[str, Any]:
        if file_id not in self.files:
            raise NotFoundError(file_id, "File not found.")
        name = self.files[file_id][0]
        self.files[file_id] = (name, content)
        self.writes.append((file_id, content, mime_type))
        return {"id": file_id, "name": name}

    async def create(
        self, name: str, content: str, parent_id: str = "root", mime_type: str = "text/plain"
    ) -> dict[str, Any]:
        file_id = f"new_{len(self.files)}"
        self.files[file_id] = (name, content)
        return {"id": file_id, "name": name}

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_store(sample_notebook_json: str) -> FakeDriveStore:
    """Fake Drive holding the sample notebook as 'nb_001'."""
    return FakeDriveStore({"nb_001": ("Sample.ipynb", sample_notebook_json)})


@pytest.fixture
def notebook_copy(sample_notebook: dict[str, Any]) -> dict[str, Any]:
    """Deep copy of the sample notebook for before/after comparisons."""
    return copy.deepcopy(sample_notebook)


# =============================================================================
# CLI Test Fixtures
# =============================================================================


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
