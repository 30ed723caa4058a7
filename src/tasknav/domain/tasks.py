"""Task descriptors and the task line locator.

A task is found by its stable id when one is given, falling back to an
exact comparison of the task text. Both scans run top-to-bottom and the
first match wins, so duplicated task text resolves to the earliest line.

Recognised inline id markers:

- ``#id:<id>`` (tag form)
- ``🆔 <id>`` (Tasks plugin emoji form)

Absence is a normal outcome: :func:`locate_task_line` returns ``None``
rather than raising.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from pydantic import BaseModel

# An id is the whole non-space token after the marker, minus trailing
# sentence punctuation: "#id:abc.def" is "abc.def", never "abc".
TASK_ID_PATTERN: re.Pattern[str] = re.compile(
    r"(?:(?<!\S)#id:|\U0001F194\ufe0f?\s*)(\S+?)(?=[.,;:!?)\]]*(?:\s|$))"
)

_QUOTE_RE = re.compile(r"^(?:>\s*)+")
_LIST_MARKER_RE = re.compile(r"^(?:[-*+]|\d+[.)])(?=\s|$)")
_CHECKBOX_RE = re.compile(r"^\[.\](?=\s|$)")


class TaskDescriptor(BaseModel):
    """Identifies the task a navigation request targets."""

    model_config = {"frozen": True}

    id: str | None = None
    text: str = ""


def strip_task_markers(line: str) -> str:
    """Return *line* without quote, list, and checkbox prefixes.

    ``"- [x] call mom"`` becomes ``"call mom"``. Surrounding whitespace
    is removed as well.
    """
    text = _QUOTE_RE.sub("", line.strip())
    text = _LIST_MARKER_RE.sub("", text, count=1).lstrip()
    text = _CHECKBOX_RE.sub("", text, count=1)
    return text.strip()


def extract_task_ids(line: str) -> list[str]:
    """Return every task id embedded in *line*, in order of appearance."""
    return TASK_ID_PATTERN.findall(line)


def line_has_task_id(line: str, task_id: str) -> bool:
    """Check whether *line* carries a marker whose id equals *task_id* exactly."""
    return task_id in extract_task_ids(line)


def locate_task_line(
    lines: Sequence[str],
    task_id: str | None,
    text: str,
) -> int | None:
    """Return the zero-based index of the line holding the task, or None.

    The id scan takes priority; the text scan only runs when no line
    carries the id (or no id was given).
    """
    if task_id:
        for index, line in enumerate(lines):
            if line_has_task_id(line, task_id):
                return index

    target = strip_task_markers(text or "")
    if not target:
        return None

    for index, line in enumerate(lines):
        if strip_task_markers(line) == target:
            return index
    return None


def locate_task(lines: Sequence[str], task: TaskDescriptor) -> int | None:
    """Descriptor-based shorthand for :func:`locate_task_line`."""
    return locate_task_line(lines, task.id, task.text)
