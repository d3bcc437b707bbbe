"""In-place code cell edits on a parsed notebook.

Both operations validate before touching the document, so a failed edit
leaves it exactly as it was.
"""

from typing import Any

from colab_maps_mcp.errors import InvalidOperationError, RangeError
from colab_maps_mcp.notebook.document import NotebookDocument, encode_source, new_code_cell


def insert_code_cell(
    document: NotebookDocument,
    code: str,
    position: int | None = None,
) -> int:
    """Insert a new code cell.

    Args:
        document: Notebook to modify.
        code: Source of the new cell.
        position: 0-based index to insert at. Appends when omitted.

    Returns:
        Index of the inserted cell.

    Raises:
        RangeError: If ``position`` is outside ``[0, len(cells)]``.
    """
    cells = document.cells
    count = len(cells)

    if position is None:
        position = count
    elif position < 0 or position > count:
        raise RangeError(
            position,
            count,
            f"Invalid insert position: {position}. Notebook has {count} cells "
            f"(valid positions are 0 to {count}).",
        )

    cells.insert(position, new_code_cell(code))
    return position


def replace_code_cell(
    document: NotebookDocument,
    cell_index: int,
    code: str,
    clear_outputs: bool = False,
) -> dict[str, Any]:
    """Replace the source of an existing code cell.

    Only ``source`` changes unless ``clear_outputs`` is set, in which case
    ``outputs`` and ``execution_count`` are reset as well.

    Args:
        document: Notebook to modify.
        cell_index: 0-based index of the target cell.
        code: New source text.
        clear_outputs: Also drop stale outputs and the execution count.

    Returns:
        The edited cell.

    Raises:
        RangeError: If ``cell_index`` is outside ``[0, len(cells))``.
        InvalidOperationError: If the target is not a code cell.
    """
    cells = document.cells
    if cell_index < 0 or cell_index >= len(cells):
        raise RangeError(cell_index, len(cells))

    cell = cells[cell_index]
    cell_type = cell.get("cell_type") if isinstance(cell, dict) else None
    if cell_type != "code":
        raise InvalidOperationError(cell_index, cell_type)

    cell["source"] = encode_source(code)
    if clear_outputs:
        cell["outputs"] = []
        cell["execution_count"] = None
    return cell
