"""Error taxonomy shared by the Colab and Maps servers.

Every failure a tool call can report is one of a small fixed set of kinds.
Tool handlers raise the matching ``ToolError`` subclass; the server
boundary turns it into a structured payload of the form::

    {"error": {"kind": "RangeError", "message": "..."}}

Anything that is not already a ``ToolError`` is classified as a
``TransientProviderError`` by ``classify_error``.
"""

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Error kinds surfaced to MCP clients."""

    VALIDATION = "ValidationError"
    MALFORMED_DOCUMENT = "MalformedDocumentError"
    RANGE = "RangeError"
    INVALID_OPERATION = "InvalidOperationError"
    NOT_FOUND = "NotFoundError"
    TRANSIENT_PROVIDER = "TransientProviderError"


class ToolError(Exception):
    """Base class for errors reported back to the MCP client.

    Attributes:
        kind: The error kind reported to the client.
        message: Human-readable description.
    """

    kind: ErrorKind = ErrorKind.TRANSIENT_PROVIDER

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        """Return the structured error payload."""
        return {"error": {"kind": self.kind.value, "message": self.message}}


class ValidationError(ToolError):
    """Caller-supplied arguments failed shape or type constraints."""

    kind = ErrorKind.VALIDATION


class MalformedDocumentError(ToolError):
    """Document is not a JSON object with a ``cells`` list."""

    kind = ErrorKind.MALFORMED_DOCUMENT


class RangeError(ToolError):
    """Cell index outside the valid range.

    Attributes:
        index: Requested cell index.
        count: Number of cells in the document.
    """

    kind = ErrorKind.RANGE

    def __init__(self, index: int, count: int, message: str | None = None) -> None:
        self.index = index
        self.count = count
        super().__init__(
            message or f"Invalid cell index: {index}. Notebook has {count} cells."
        )


class InvalidOperationError(ToolError):
    """Operation not allowed on the target cell.

    Attributes:
        index: Index of the target cell.
        cell_type: Kind of cell actually found.
    """

    kind = ErrorKind.INVALID_OPERATION

    def __init__(self, index: int, cell_type: str | None) -> None:
        self.index = index
        self.cell_type = cell_type
        super().__init__(f"Cell at index {index} is not a code cell (type: {cell_type}).")


class NotFoundError(ToolError):
    """The provider reported that a resource does not exist.

    Attributes:
        resource_id: The identifier that was looked up.
    """

    kind = ErrorKind.NOT_FOUND

    def __init__(self, resource_id: str, detail: str | None = None) -> None:
        self.resource_id = resource_id
        message = f"Resource not found (ID: {resource_id})."
        if detail:
            message = f"{message} {detail}"
        super().__init__(message)


class TransientProviderError(ToolError):
    """Any other provider or network failure. Never retried."""

    kind = ErrorKind.TRANSIENT_PROVIDER


def classify_error(error: Exception) -> ToolError:
    """Map an arbitrary exception onto the error taxonomy.

    Args:
        error: Exception raised while handling a tool call.

    Returns:
        The error itself if it is already a ``ToolError``, otherwise a
        ``TransientProviderError`` carrying its message.
    """
    if isinstance(error, ToolError):
        return error
    return TransientProviderError(str(error) or type(error).__name__)
