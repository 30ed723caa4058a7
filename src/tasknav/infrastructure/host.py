"""Host application collaborators, as abstract base classes.

tasknav never talks to a concrete editor. A host adapter implements
these three seams:

- :class:`EditingSurface`: the live, mutable editor of one document.
- :class:`DocumentView`: a tab/pane that shows a file and, once loaded,
  exposes an editing surface.
- :class:`Workspace`: enumerates views, focuses them, and opens files.

:mod:`tasknav.infrastructure.memory` ships a headless implementation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from tasknav.domain.types import EditingMode


class NotADocumentError(Exception):
    """The host resolved a path to something that is not an editable document."""


@dataclass(frozen=True)
class EditorPosition:
    """A ``(line, ch)`` position inside an editing surface."""

    line: int
    ch: int = 0


@dataclass(frozen=True)
class HostFile:
    """A file known to the host, as returned by :meth:`Workspace.get_file`."""

    path: str
    is_document: bool = True


class EditingSurface(ABC):
    """Live editor handle. Reads always reflect the current document."""

    @property
    @abstractmethod
    def mode(self) -> EditingMode:
        """Current editing mode of the surface."""
        ...

    @abstractmethod
    def get_value(self) -> str: ...

    @abstractmethod
    def get_line(self, line: int) -> str: ...

    @abstractmethod
    def line_count(self) -> int: ...

    @abstractmethod
    def set_cursor(self, position: EditorPosition) -> None: ...

    @abstractmethod
    def set_selection(self, anchor: EditorPosition, head: EditorPosition) -> None: ...

    @abstractmethod
    def scroll_into_view(self, start: EditorPosition, end: EditorPosition) -> None:
        """Request that the range become visible (centred where supported)."""
        ...

    @abstractmethod
    def add_line_marker(self, line: int) -> None:
        """Apply the transient highlight decoration to *line*."""
        ...

    @abstractmethod
    def remove_line_marker(self, line: int) -> None: ...


class DocumentView(ABC):
    """One open view of a file.

    ``surface`` is None while the view is still loading (or is a deferred
    tab that has never been activated).
    """

    @property
    @abstractmethod
    def file_path(self) -> str | None:
        """Path of the file loaded in the view, if loaded."""
        ...

    @property
    def state_file_path(self) -> str | None:
        """Path recorded in the view state of a deferred, unloaded tab."""
        return None

    @property
    @abstractmethod
    def surface(self) -> EditingSurface | None: ...

    @property
    @abstractmethod
    def is_attached(self) -> bool:
        """False once the view has been closed."""
        ...

    def shows_file(self, path: str) -> bool:
        return self.file_path == path or self.state_file_path == path


class Workspace(ABC):
    """Window/tab management of the host application."""

    @abstractmethod
    def views(self) -> list[DocumentView]:
        """Currently open document views, in tab order."""
        ...

    @abstractmethod
    def get_file(self, path: str) -> HostFile | None: ...

    @abstractmethod
    async def reveal_view(self, view: DocumentView) -> None:
        """Bring *view* to the foreground, loading it if it was deferred."""
        ...

    @abstractmethod
    def focus_view(self, view: DocumentView) -> None: ...

    @abstractmethod
    async def open(self, path: str) -> None:
        """Open *path* in a new view."""
        ...


def find_view_with_file(workspace: Workspace, path: str) -> DocumentView | None:
    """Return the first open view showing *path*, loaded or deferred."""
    for view in workspace.views():
        if view.shows_file(path):
            return view
    return None
