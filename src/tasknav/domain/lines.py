"""Rendered-space to source-space line adjustment.

Preview coordinates have no reconciliation formula yet: preview mode is
the identity mapping. An unresolvable mode is also the identity, with a
diagnostic logged so the caller can see the line went unadjusted.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from tasknav.domain.frontmatter import frontmatter_line_count
from tasknav.domain.types import EditingMode

logger = logging.getLogger(__name__)


def clamp_line(line: int, line_count: int) -> int:
    """Clamp *line* into ``[0, line_count - 1]`` (0 for an empty document)."""
    if line_count <= 0:
        return 0
    return max(0, min(line, line_count - 1))


def adjust_source_line(
    rendered_line: int,
    mode: EditingMode,
    source_lines: Sequence[str],
) -> int:
    """Map a rendered-space line index to the matching source-space index."""
    match mode:
        case EditingMode.PREVIEW:
            return rendered_line
        case EditingMode.SOURCE:
            clamped = clamp_line(rendered_line, len(source_lines))
            return max(0, clamped - frontmatter_line_count(source_lines))
        case _:
            logger.warning(
                "Editing mode unresolved; using line %d unadjusted", rendered_line
            )
            return rendered_line
