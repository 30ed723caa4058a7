"""NavigationService — locate a task, reconcile its line, and reveal it.

Composes the three core pieces against a host :class:`Workspace`:

1. Find (or open) the view showing the file, and focus it.
2. Once the view exposes an editor, re-read its text and locate the task.
   When the caller located against rendered text, map the rendered
   line into source space.
3. Hand the line to the :class:`LineRevealCoordinator`.

Absence is reported through ``ServiceResult``; the only exception raised
is :class:`NotADocumentError`, for a host file that is not a document.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from tasknav.config.models import LocatorConfig
from tasknav.domain.frontmatter import frontmatter_line_count, split_lines
from tasknav.domain.lines import adjust_source_line
from tasknav.domain.tasks import TaskDescriptor, locate_task
from tasknav.domain.types import EditingMode, RevealOutcome, RevealStrategy
from tasknav.infrastructure.host import (
    DocumentView,
    EditingSurface,
    NotADocumentError,
    Workspace,
    find_view_with_file,
)
from tasknav.services.result import ServiceResult

if TYPE_CHECKING:
    from tasknav.services.reveal import LineRevealCoordinator, LineResolver, RevealPipeline

logger = logging.getLogger(__name__)


def _task_not_found(op: str, task: TaskDescriptor, **detail: Any) -> ServiceResult:
    return ServiceResult.failure(
        op,
        "TASK_NOT_FOUND",
        "Task not found in document",
        id=task.id,
        text=task.text,
        **detail,
    )


def locate_in_text(
    text: str,
    task: TaskDescriptor,
    *,
    rendered: bool = False,
    mode: EditingMode = EditingMode.SOURCE,
    locator: LocatorConfig | None = None,
) -> ServiceResult:
    """Locate *task* in document *text* without involving any view."""
    op = "locate_task"
    lines = split_lines(text)
    line = locate_task(lines, task)
    if line is None:
        return _task_not_found(op, task)

    source_line = line
    if rendered and (locator or LocatorConfig()).adjust_rendered_lines:
        source_line = adjust_source_line(line, mode, lines)

    return ServiceResult(
        ok=True,
        op=op,
        data={
            "line": line,
            "source_line": source_line,
            "frontmatter_lines": frontmatter_line_count(lines),
            "content": lines[line],
        },
    )


class NavigationService:
    """Drives one workspace through locate -> adjust -> reveal."""

    def __init__(
        self,
        workspace: Workspace,
        coordinator: LineRevealCoordinator,
        locator: LocatorConfig | None = None,
    ) -> None:
        self._workspace = workspace
        self._coordinator = coordinator
        self._locator = locator or LocatorConfig()

    # ------------------------------------------------------------------
    # Locate (no view involved)
    # ------------------------------------------------------------------

    def locate(
        self,
        text: str,
        task: TaskDescriptor,
        *,
        rendered: bool = False,
        mode: EditingMode = EditingMode.SOURCE,
    ) -> ServiceResult:
        """Locate *task* in document *text*.

        With ``rendered=True`` the match is treated as a rendered-space
        line and mapped to source space through *mode*.
        """
        return locate_in_text(text, task, rendered=rendered, mode=mode, locator=self._locator)

    # ------------------------------------------------------------------
    # Navigate
    # ------------------------------------------------------------------

    async def navigate(
        self,
        path: str,
        task: TaskDescriptor,
        *,
        strategy: RevealStrategy | str | None = None,
        duration_ms: int | None = None,
        rendered_text: str | None = None,
    ) -> ServiceResult:
        """Bring *path* to the front and reveal *task* in it.

        *rendered_text* is the content as the reader saw it; when given,
        the task is located there and the line mapped into source space.
        """
        op = "navigate_task"
        host_file = self._workspace.get_file(path)
        if host_file is None:
            return ServiceResult.failure(op, "FILE_NOT_FOUND", f"File not found: {path}", path=path)
        if not host_file.is_document:
            msg = f"Host resolved {path} to a non-document file"
            raise NotADocumentError(msg)

        view = await self._acquire_view(path)
        if view is None:
            return ServiceResult.failure(
                op, "VIEW_UNAVAILABLE", f"No view could be opened for {path}", path=path
            )

        pipeline = self._coordinator.reveal_when_ready(
            view,
            self._resolver(task, rendered_text),
            strategy,
            duration_ms=duration_ms,
        )
        await pipeline.wait()
        return self._navigation_result(op, path, task, pipeline)

    async def _acquire_view(self, path: str) -> DocumentView | None:
        view = find_view_with_file(self._workspace, path)
        if view is not None:
            await self._workspace.reveal_view(view)
            self._workspace.focus_view(view)
            return view

        logger.debug("No open view for %s; opening", path)
        await self._workspace.open(path)
        return find_view_with_file(self._workspace, path)

    def _resolver(self, task: TaskDescriptor, rendered_text: str | None) -> LineResolver:
        adjust = self._locator.adjust_rendered_lines

        def resolve(surface: EditingSurface) -> int | None:
            source_lines = split_lines(surface.get_value())
            if rendered_text is None:
                return locate_task(source_lines, task)
            line = locate_task(split_lines(rendered_text), task)
            if line is None or not adjust:
                return line
            return adjust_source_line(line, surface.mode, source_lines)

        return resolve

    # ------------------------------------------------------------------
    # Result mapping
    # ------------------------------------------------------------------

    def _navigation_result(
        self,
        op: str,
        path: str,
        task: TaskDescriptor,
        pipeline: RevealPipeline,
    ) -> ServiceResult:
        data: dict[str, Any] = {
            "path": path,
            "line": pipeline.target_line,
            "strategy": str(pipeline.strategy),
            "outcome": str(pipeline.outcome),
        }
        if pipeline.strategy is RevealStrategy.TIMED_HIGHLIGHT:
            data["duration_ms"] = pipeline.duration_ms

        match pipeline.outcome:
            case RevealOutcome.COMPLETED:
                return ServiceResult(ok=True, op=op, data=data)
            case RevealOutcome.NOT_FOUND:
                return _task_not_found(op, task, path=path)
            case RevealOutcome.GAVE_UP:
                return ServiceResult.failure(
                    op,
                    "SURFACE_NOT_READY",
                    f"View for {path} never became editable",
                    path=path,
                    polls=pipeline.polls,
                )
            case RevealOutcome.STALE:
                warning = f"View for {path} closed before navigation completed"
            case _:
                warning = "Superseded by a newer navigation request"
        return ServiceResult(ok=True, op=op, data=data, warnings=[warning])
