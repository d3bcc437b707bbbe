"""Notebook document editing.

Quick Start:
    ```python
    from colab_maps_mcp.notebook import NotebookDocument, insert_code_cell

    document = NotebookDocument.parse(raw_ipynb)
    index = insert_code_cell(document, "print(1)", position=0)
    updated = document.serialize()
    ```
"""

from colab_maps_mcp.notebook.document import (
    NOTEBOOK_MIME_TYPE,
    NotebookDocument,
    decode_source,
    encode_source,
    new_code_cell,
)
from colab_maps_mcp.notebook.editor import insert_code_cell, replace_code_cell

__all__ = [
    "NOTEBOOK_MIME_TYPE",
    "NotebookDocument",
    "decode_source",
    "encode_source",
    "insert_code_cell",
    "new_code_cell",
    "replace_code_cell",
]
