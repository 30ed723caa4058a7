"""Headless in-memory host.

Implements the :mod:`tasknav.infrastructure.host` seams on plain Python
objects. The ``goto`` command runs navigation against it, and the test
suite uses it as the host double. Every mutating surface call is also
appended to ``MemorySurface.calls`` so step ordering can be inspected.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from tasknav.domain.frontmatter import split_lines
from tasknav.domain.types import EditingMode
from tasknav.infrastructure.host import (
    DocumentView,
    EditingSurface,
    EditorPosition,
    HostFile,
    Workspace,
)


class MemorySurface(EditingSurface):
    """Editing surface over an in-memory list of lines."""

    def __init__(self, text: str = "", mode: EditingMode = EditingMode.SOURCE) -> None:
        self._lines = split_lines(text)
        self._mode = mode
        self.cursor: EditorPosition | None = None
        self.selection: tuple[EditorPosition, EditorPosition] | None = None
        self.markers: set[int] = set()
        self.calls: list[tuple[str, Any]] = []

    @property
    def mode(self) -> EditingMode:
        return self._mode

    @mode.setter
    def mode(self, value: EditingMode) -> None:
        self._mode = value

    def set_value(self, text: str) -> None:
        self._lines = split_lines(text)

    def get_value(self) -> str:
        return "\n".join(self._lines)

    def get_line(self, line: int) -> str:
        return self._lines[line]

    def line_count(self) -> int:
        return len(self._lines)

    def set_cursor(self, position: EditorPosition) -> None:
        self.cursor = position
        self.calls.append(("cursor", position))

    def set_selection(self, anchor: EditorPosition, head: EditorPosition) -> None:
        self.selection = (anchor, head)
        self.calls.append(("select", (anchor, head)))

    def scroll_into_view(self, start: EditorPosition, end: EditorPosition) -> None:
        self.calls.append(("scroll", (start, end)))

    def add_line_marker(self, line: int) -> None:
        self.markers.add(line)
        self.calls.append(("mark", line))

    def remove_line_marker(self, line: int) -> None:
        self.markers.discard(line)
        self.calls.append(("unmark", line))


class MemoryView(DocumentView):
    """A view that can start unloaded (``surface=None``) or deferred."""

    def __init__(
        self,
        path: str,
        surface: MemorySurface | None = None,
        *,
        deferred: bool = False,
    ) -> None:
        self._path = path
        self._surface = surface
        self._deferred = deferred
        self._attached = True

    @property
    def file_path(self) -> str | None:
        return None if self._deferred else self._path

    @property
    def state_file_path(self) -> str | None:
        return self._path

    @property
    def surface(self) -> MemorySurface | None:
        return self._surface if self._attached else None

    @property
    def is_attached(self) -> bool:
        return self._attached

    def load(self, surface: MemorySurface) -> None:
        """Finish loading: expose *surface* and stop being deferred."""
        self._surface = surface
        self._deferred = False

    def close(self) -> None:
        self._attached = False

    def __repr__(self) -> str:
        return f"MemoryView({self._path!r}, loaded={self._surface is not None})"


class MemoryWorkspace(Workspace):
    """Workspace over a dict of ``path -> text``.

    With ``load_on_open=False`` newly opened views stay unloaded until
    the caller invokes :meth:`MemoryView.load`, mimicking a host whose
    editor finishes loading after ``open()`` returns.
    """

    def __init__(
        self,
        files: dict[str, str] | None = None,
        *,
        mode: EditingMode = EditingMode.SOURCE,
        load_on_open: bool = True,
    ) -> None:
        self._files: dict[str, HostFile] = {}
        self._texts: dict[str, str] = {}
        self._views: list[MemoryView] = []
        self._mode = mode
        self._load_on_open = load_on_open
        self.active: MemoryView | None = None
        for path, text in (files or {}).items():
            self.add_file(path, text)

    @classmethod
    def from_paths(cls, *paths: Path, **kwargs: Any) -> MemoryWorkspace:
        """Build a workspace whose files are read from disk."""
        return cls({str(p): p.read_text(encoding="utf-8") for p in paths}, **kwargs)

    def add_file(self, path: str, text: str = "", *, is_document: bool = True) -> None:
        self._files[path] = HostFile(path=path, is_document=is_document)
        self._texts[path] = text

    def add_view(self, view: MemoryView) -> MemoryView:
        self._views.append(view)
        return view

    def new_surface(self, path: str) -> MemorySurface:
        return MemorySurface(self._texts.get(path, ""), mode=self._mode)

    def views(self) -> list[DocumentView]:
        return [v for v in self._views if v.is_attached]

    def get_file(self, path: str) -> HostFile | None:
        return self._files.get(path)

    async def reveal_view(self, view: DocumentView) -> None:
        if not isinstance(view, MemoryView):
            return
        if view.surface is None and view.is_attached:
            view.load(self.new_surface(view.state_file_path or ""))
        self.active = view

    def focus_view(self, view: DocumentView) -> None:
        if isinstance(view, MemoryView):
            self.active = view

    async def open(self, path: str) -> None:
        surface = self.new_surface(path) if self._load_on_open else None
        self.active = self.add_view(MemoryView(path, surface))
