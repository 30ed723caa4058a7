"""Front-matter block detection for line-number reconciliation.

A front-matter block starts with ``---`` on line 0 and ends at the next
line that is exactly ``---``. Rendered views hide the block, so line
numbers seen by a reader are offset from the raw source by its length.

Unlike YAML parsing, the comparison here is exact: a delimiter with
trailing spaces does not open or close the block.
"""

from __future__ import annotations

from collections.abc import Sequence

FRONTMATTER_DELIMITER = "---"


def split_lines(text: str) -> list[str]:
    """Split document text into lines, dropping a trailing ``\\r`` per line."""
    return [line.removesuffix("\r") for line in text.split("\n")]


def frontmatter_line_count(lines: Sequence[str]) -> int:
    """Return the number of lines occupied by the front-matter block.

    Returns 0 when line 0 is not the delimiter or when the block is
    never closed.
    """
    if not lines or lines[0] != FRONTMATTER_DELIMITER:
        return 0
    for index in range(1, len(lines)):
        if lines[index] == FRONTMATTER_DELIMITER:
            return index + 1
    return 0


def has_frontmatter(lines: Sequence[str]) -> bool:
    return frontmatter_line_count(lines) > 0
