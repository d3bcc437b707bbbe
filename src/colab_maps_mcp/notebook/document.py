"""Parsed Jupyter notebook documents and cell source encoding.

A notebook is kept as the raw JSON object it was parsed from, so fields
this package does not understand (notebook metadata, nbformat version,
per-cell attachments, ...) survive a parse/serialize round trip.

Reference: https://nbformat.readthedocs.io/en/latest/format_description.html
"""

import json
from typing import Any

from colab_maps_mcp.errors import MalformedDocumentError

NOTEBOOK_MIME_TYPE = "application/x-ipynb+json"


def encode_source(code: str) -> list[str]:
    """Encode code text as notebook line fragments.

    Every fragment keeps its trailing newline except the last one. A single
    trailing newline in ``code`` does not produce an extra empty fragment.

    Args:
        code: Cell source text.

    Returns:
        Line fragments, never empty (``""`` encodes to ``[""]``).

    Example:
        >>> encode_source("a=2\\nb=3")
        ['a=2\\n', 'b=3']
    """
    fragments = [line + "\n" for line in code.split("\n")]

    if fragments and fragments[-1] == "\n":
        fragments.pop()

    if not fragments:
        return [""]

    fragments[-1] = fragments[-1].removesuffix("\n")
    return fragments


def decode_source(source: list[str] | str) -> str:
    """Join stored line fragments back into code text."""
    if isinstance(source, str):
        return source
    return "".join(source)


def new_code_cell(code: str) -> dict[str, Any]:
    """Create an unexecuted code cell holding ``code``."""
    return {
        "cell_type": "code",
        "execution_count": None,
        "metadata": {},
        "outputs": [],
        "source": encode_source(code),
    }


class NotebookDocument:
    """A notebook held as its parsed JSON object.

    Attributes:
        data: The full notebook object. ``data["cells"]`` is always a list.
    """

    def __init__(self, data: dict[str, Any]) -> None:
        if not isinstance(data, dict) or not isinstance(data.get("cells"), list):
            raise MalformedDocumentError('Invalid notebook structure: "cells" array not found.')
        self.data = data

    @classmethod
    def parse(cls, text: str | bytes) -> "NotebookDocument":
        """Parse notebook file content.

        Args:
            text: Raw ``.ipynb`` content as fetched from storage.

        Returns:
            Parsed document.

        Raises:
            MalformedDocumentError: If the content is not JSON or has no
                ``cells`` list.
        """
        try:
            data = json.loads(text)
        except (ValueError, TypeError) as e:
            raise MalformedDocumentError(
                f"Failed to parse notebook content. Is it a valid .ipynb file? ({e})"
            ) from e
        return cls(data)

    @property
    def cells(self) -> list[dict[str, Any]]:
        """Cells in display order."""
        cells: list[dict[str, Any]] = self.data["cells"]
        return cells

    def __len__(self) -> int:
        return len(self.cells)

    def serialize(self) -> str:
        """Serialize to ``.ipynb`` text (two-space indent, trailing newline)."""
        return json.dumps(self.data, indent=2, ensure_ascii=False) + "\n"
