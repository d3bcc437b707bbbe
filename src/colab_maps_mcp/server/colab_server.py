"""Google Colab MCP server.

Exposes Drive file tools and notebook cell-editing tools. Notebook edits
follow one pattern: fetch the whole .ipynb from Drive, parse it, apply a
single edit in memory, then upload the whole document back. Drive is only
written after the edit succeeded, so a failed call leaves the stored
notebook untouched.
"""

import asyncio
import logging
import sys
from typing import Any

from pydantic import BaseModel, Field

from colab_maps_mcp.auth import OAuthManager
from colab_maps_mcp.config import ColabSettings, ConfigurationError, load_environment
from colab_maps_mcp.drive import FOLDER_MIME_TYPE, DriveStore
from colab_maps_mcp.notebook import (
    NOTEBOOK_MIME_TYPE,
    NotebookDocument,
    insert_code_cell,
    replace_code_cell,
)
from colab_maps_mcp.server.base import ToolHandler, ToolServer, ToolSpec

logger = logging.getLogger(__name__)

SERVER_NAME = "google-colab-mcp"


class ListFilesArgs(BaseModel):
    folder_id: str = Field(
        default="root",
        min_length=1,
        description="Google Drive folder ID to list. Defaults to 'root'.",
    )
    page_size: int = Field(
        default=100,
        gt=0,
        le=1000,
        strict=True,
        description="Maximum number of files to return.",
    )
    page_token: str | None = Field(
        default=None, description="Page token for fetching subsequent pages."
    )


class ReadFileArgs(BaseModel):
    file_id: str = Field(..., min_length=1, description="The Google Drive file ID to read.")


class WriteFileArgs(BaseModel):
    file_name: str = Field(
        ..., min_length=1, description="The desired name for the file on Google Drive."
    )
    content: str = Field(..., description="The text content to write to the file.")
    parent_folder_id: str = Field(
        default="root",
        min_length=1,
        description="Google Drive folder ID to create the file in. Defaults to 'root'.",
    )
    mime_type: str = Field(
        default="text/plain",
        min_length=1,
        description="MIME type for the file (e.g., 'text/plain', 'application/json', 'text/csv').",
    )


class InsertCodeCellArgs(BaseModel):
    document_id: str = Field(
        ..., min_length=1, description="Google Drive file ID of the .ipynb notebook to modify."
    )
    code: str = Field(..., description="Python code for the new cell.")
    position: int | None = Field(
        default=None,
        ge=0,
        strict=True,
        description="0-based index to insert the cell at. Appends if omitted.",
    )


class ReplaceCodeCellArgs(BaseModel):
    document_id: str = Field(
        ..., min_length=1, description="Google Drive file ID of the .ipynb notebook to modify."
    )
    cell_index: int = Field(
        ..., ge=0, strict=True, description="0-based index of the code cell to edit."
    )
    new_code: str = Field(..., description="New Python code for the cell.")
    clear_outputs: bool = Field(
        default=False,
        description="Also clear the cell's outputs and execution count.",
    )


TOOL_SPECS = [
    ToolSpec(
        name="list_files",
        description="Lists files and folders within a folder in the user's Google Drive.",
        arguments=ListFilesArgs,
    ),
    ToolSpec(
        name="read_file",
        description="Reads the content of a file from the user's Google Drive by file ID.",
        arguments=ReadFileArgs,
    ),
    ToolSpec(
        name="write_file",
        description="Creates a new text file with the given content in the user's Google Drive.",
        arguments=WriteFileArgs,
    ),
    ToolSpec(
        name="insert_code_cell",
        description=(
            "Inserts a new code cell into a .ipynb notebook on Google Drive, "
            "at the given position or at the end."
        ),
        arguments=InsertCodeCellArgs,
    ),
    ToolSpec(
        name="replace_code_cell",
        description="Replaces the code of an existing code cell in a .ipynb notebook by index.",
        arguments=ReplaceCodeCellArgs,
    ),
]


class ColabServer(ToolServer):
    """MCP server for Colab notebooks stored on Google Drive.

    Attributes:
        settings: OAuth client configuration.
        manager: OAuthManager issuing Drive access tokens.
        store: DriveStore used for all file access.
    """

    def __init__(
        self,
        settings: ColabSettings,
        store: DriveStore | None = None,
        manager: OAuthManager | None = None,
    ) -> None:
        """Initialize the Colab server.

        Args:
            settings: Startup configuration.
            store: Drive store to use. Built from ``manager`` if omitted.
            manager: Token manager. Built from ``settings`` if omitted.
        """
        self.settings = settings
        self.manager = manager or OAuthManager.from_settings(settings)
        self.store = store or DriveStore(self.manager.get_access_token)
        super().__init__(SERVER_NAME)

    def tool_specs(self) -> list[ToolSpec]:
        return TOOL_SPECS

    def tool_handlers(self) -> dict[str, ToolHandler]:
        return {
            "list_files": self._list_files,
            "read_file": self._read_file,
            "write_file": self._write_file,
            "insert_code_cell": self._insert_code_cell,
            "replace_code_cell": self._replace_code_cell,
        }

    async def close(self) -> None:
        await self.store.close()

    async def _list_files(self, args: ListFilesArgs) -> dict[str, Any]:
        """List a Drive folder, folders first."""
        response = await self.store.list_files(
            folder_id=args.folder_id,
            page_size=args.page_size,
            page_token=args.page_token,
        )

        files = [
            {
                "id": item.get("id"),
                "name": item.get("name"),
                "mimeType": item.get("mimeType"),
                "is_folder": item.get("mimeType") == FOLDER_MIME_TYPE,
            }
            for item in response.get("files", [])
        ]

        return {
            "folder_id": args.folder_id,
            "files": files,
            "count": len(files),
            "next_page_token": response.get("nextPageToken"),
        }

    async def _read_file(self, args: ReadFileArgs) -> dict[str, Any]:
        content = await self.store.fetch(args.file_id)
        return {"file_id": args.file_id, "content": content}

    async def _write_file(self, args: WriteFileArgs) -> dict[str, Any]:
        logger.info(
            f"Writing file {args.file_name} to folder {args.parent_folder_id} "
            f"with mimeType {args.mime_type}"
        )
        created = await self.store.create(
            name=args.file_name,
            content=args.content,
            parent_id=args.parent_folder_id,
            mime_type=args.mime_type,
        )
        return {
            "status": "file_created",
            "id": created.get("id"),
            "name": created.get("name"),
            "parent_folder_id": args.parent_folder_id,
        }

    async def _load_notebook(self, document_id: str) -> NotebookDocument:
        """Download and parse a notebook."""
        logger.info(f"Downloading notebook {document_id}")
        content = await self.store.fetch(document_id)
        return NotebookDocument.parse(content)

    async def _save_notebook(self, document_id: str, document: NotebookDocument) -> dict[str, Any]:
        """Upload a notebook, replacing its content."""
        return await self.store.store(document_id, document.serialize(), NOTEBOOK_MIME_TYPE)

    async def _insert_code_cell(self, args: InsertCodeCellArgs) -> dict[str, Any]:
        """Insert a code cell and write the notebook back.

        Returns:
            Confirmation with the notebook's id/name and the new cell's index.
        """
        document = await self._load_notebook(args.document_id)
        index = insert_code_cell(document, args.code, args.position)
        logger.info(f"Inserted code cell at index {index} in notebook {args.document_id}")

        updated = await self._save_notebook(args.document_id, document)

        return {
            "status": "cell_inserted",
            "document_id": updated.get("id", args.document_id),
            "document_name": updated.get("name"),
            "cell_index": index,
            "cell_count": len(document),
        }

    async def _replace_code_cell(self, args: ReplaceCodeCellArgs) -> dict[str, Any]:
        """Replace a code cell's source and write the notebook back.

        Returns:
            Confirmation with the notebook's id/name and the edited index.
        """
        document = await self._load_notebook(args.document_id)
        replace_code_cell(document, args.cell_index, args.new_code, args.clear_outputs)
        logger.info(f"Updated source for cell {args.cell_index} in notebook {args.document_id}")

        updated = await self._save_notebook(args.document_id, document)

        return {
            "status": "cell_replaced",
            "document_id": updated.get("id", args.document_id),
            "document_name": updated.get("name"),
            "cell_index": args.cell_index,
        }


def main() -> None:
    """Entry point for the Colab MCP server."""
    load_environment()
    try:
        settings = ColabSettings.from_env()
    except ConfigurationError as e:
        logger.error(f"Failed to start {SERVER_NAME}: {e}")
        sys.exit(1)

    server = ColabServer(settings)
    asyncio.run(server.run())


if __name__ == "__main__":
    main()
