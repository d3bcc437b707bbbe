"""Command-line interface for colab-maps-mcp."""

import asyncio
import sys

import click

from colab_maps_mcp.__version__ import __version__
from colab_maps_mcp.config import (
    ColabSettings,
    ConfigurationError,
    MapsSettings,
    load_environment,
)


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """Colab & Maps MCP Servers.

    \b
    - colab: Drive files and Colab notebook cell editing
    - maps:  geocoding, directions and distance matrix
    """
    load_environment()


@main.command()
@click.option("--client-id", envvar="GOOGLE_CLIENT_ID", help="Google OAuth client ID")
@click.option("--client-secret", envvar="GOOGLE_CLIENT_SECRET", help="Google OAuth client secret")
def setup(client_id: str | None, client_secret: str | None) -> None:
    """Obtain a Google Drive refresh token.

    Opens the browser for OAuth consent, stores the token at
    ./.colab-maps-mcp/tokens.json and prints the refresh token so it can
    be placed in GOOGLE_REFRESH_TOKEN for other machines.
    """
    from colab_maps_mcp.auth import OAuthManager

    manager = OAuthManager()

    if manager.has_valid_tokens():
        click.echo("✓ Already authenticated!")
        click.echo(f"Token stored at: {manager.token_path}")
        click.echo("")

        if not click.confirm("Re-authenticate?"):
            return

    if not client_id or not client_secret:
        click.echo("❌ Error: OAuth client credentials required")
        click.echo("")
        click.echo("Set environment variables:")
        click.echo("  export GOOGLE_CLIENT_ID='your-client-id'")
        click.echo("  export GOOGLE_CLIENT_SECRET='your-client-secret'")
        click.echo("")
        click.echo("Or pass as options:")
        click.echo("  colab-maps-mcp setup --client-id=... --client-secret=...")
        sys.exit(1)

    click.echo("Starting OAuth authentication flow...")
    click.echo("Browser will open for Google consent...")
    click.echo("")

    try:
        token = asyncio.run(
            manager.authenticate(client_id=client_id, client_secret=client_secret)
        )
    except Exception as e:
        click.echo(f"❌ Authentication failed: {e}")
        sys.exit(1)

    click.echo("✓ Authentication successful!")
    click.echo(f"Token stored at: {manager.token_path}")
    click.echo("")

    if token.refresh_token:
        click.echo("Refresh token (set as GOOGLE_REFRESH_TOKEN to use it elsewhere):")
        click.echo(token.refresh_token)
    else:
        click.echo("⚠️  No refresh token was returned. This can happen if this client")
        click.echo("was authorized before without offline access. Revoke the app's")
        click.echo("access in your Google Account settings and run setup again.")


@main.command()
def colab() -> None:
    """Start the Colab MCP server on stdio.

    Requires GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET, plus either
    GOOGLE_REFRESH_TOKEN or a token stored by 'colab-maps-mcp setup'.
    """
    from colab_maps_mcp.auth import OAuthManager, TokenStatus
    from colab_maps_mcp.server import ColabServer

    try:
        settings = ColabSettings.from_env()
    except ConfigurationError as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(1)

    manager = OAuthManager.from_settings(settings)
    status, _ = manager.get_status()

    if status == TokenStatus.MISSING and settings.refresh_token is None:
        click.echo(
            "❌ Not authenticated. Set GOOGLE_REFRESH_TOKEN or run 'colab-maps-mcp setup'.",
            err=True,
        )
        sys.exit(1)

    click.echo("Starting Google Colab MCP server...", err=True)
    server = ColabServer(settings, manager=manager)
    try:
        asyncio.run(server.run())
    except KeyboardInterrupt:
        click.echo("\nServer stopped.", err=True)


@main.command()
def maps() -> None:
    """Start the Maps MCP server on stdio.

    Requires GOOGLE_MAPS_API_KEY.
    """
    from colab_maps_mcp.server import MapsServer

    try:
        settings = MapsSettings.from_env()
    except ConfigurationError as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(1)

    click.echo("Starting Google Maps MCP server...", err=True)
    server = MapsServer(settings)
    try:
        asyncio.run(server.run())
    except KeyboardInterrupt:
        click.echo("\nServer stopped.", err=True)


@main.command()
def doctor() -> None:
    """Check configuration and authentication status."""
    from colab_maps_mcp.auth import OAuthManager, TokenStatus

    click.echo("Colab & Maps MCP Status:")
    click.echo("")

    click.echo("Configuration:")
    colab_settings: ColabSettings | None = None
    try:
        colab_settings = ColabSettings.from_env()
        click.echo("  ✓ Google OAuth client configured")
    except ConfigurationError as e:
        click.echo(f"  ❌ Colab server: {e}")

    try:
        MapsSettings.from_env()
        click.echo("  ✓ Google Maps API key configured")
    except ConfigurationError as e:
        click.echo(f"  ❌ Maps server: {e}")

    click.echo("")

    manager = OAuthManager()
    status, stored = manager.get_status()
    has_env_refresh_token = colab_settings is not None and colab_settings.refresh_token is not None

    click.echo("Drive authentication:")
    click.echo(f"  Token file: {manager.token_path}")

    if status == TokenStatus.VALID and stored:
        click.echo("  ✓ Authenticated")
        click.echo(
            f"  Token expires: {stored.token.expires_at.strftime('%Y-%m-%d %H:%M:%S UTC')}"
        )
    elif status == TokenStatus.EXPIRED:
        click.echo("  ⚠️  Access token expired (refreshed automatically on use)")
    elif status == TokenStatus.INVALID:
        click.echo("  ❌ Token file corrupted. Run 'colab-maps-mcp setup'.")
    elif has_env_refresh_token:
        click.echo("  ✓ Refresh token provided via GOOGLE_REFRESH_TOKEN")
    else:
        click.echo("  ❌ Not authenticated. Run 'colab-maps-mcp setup'.")

    ready = colab_settings is not None and (
        status in (TokenStatus.VALID, TokenStatus.EXPIRED) or has_env_refresh_token
    )
    click.echo("")
    if ready:
        click.echo("✓ Colab server ready to use!")
    else:
        click.echo("❌ Colab server needs setup.")
        sys.exit(1)


if __name__ == "__main__":
    main()
