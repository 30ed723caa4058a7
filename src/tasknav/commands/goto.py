"""Command: run the full navigation pipeline against a headless view."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from tasknav.commands._base import NavCommand, build_task, task_options
from tasknav.domain.types import EditingMode, RevealStrategy

if TYPE_CHECKING:
    from tasknav.commands._context import AppContext
    from tasknav.domain.tasks import TaskDescriptor
    from tasknav.infrastructure.memory import MemoryWorkspace
    from tasknav.services.result import ServiceResult


@click.command(
    cls=NavCommand,
    examples="""\
  tasknav goto notes/today.md --text "call mom"
  tasknav goto notes/today.md --id 7f3a2c --strategy timed_highlight
  tasknav goto notes/today.md --text "call mom" --rendered-from notes/today.html.txt""",
)
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@task_options
@click.option(
    "--strategy",
    type=click.Choice([s.value for s in RevealStrategy]),
    default=None,
    help="Reveal strategy (default from [reveal] config).",
)
@click.option("--duration-ms", type=click.IntRange(min=0), default=None, help="Highlight duration.")
@click.option(
    "--rendered-from",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Locate against this rendered text and map the line to source.",
)
@click.option(
    "--mode",
    type=click.Choice([m.value for m in EditingMode]),
    default=EditingMode.SOURCE.value,
    help="Editing mode the headless view reports.",
)
@click.pass_obj
def goto(
    app: AppContext,
    path: Path,
    text: str,
    task_id: str | None,
    strategy: str | None,
    duration_ms: int | None,
    rendered_from: Path | None,
    mode: str,
) -> None:
    """Open PATH in a headless view, then scroll to and select the task."""
    from tasknav.infrastructure.memory import MemoryWorkspace

    task = build_task(text, task_id)
    workspace = MemoryWorkspace.from_paths(path, mode=EditingMode(mode))
    rendered_text = rendered_from.read_text(encoding="utf-8") if rendered_from else None
    result = asyncio.run(
        _navigate(app, workspace, str(path), task, strategy, duration_ms, rendered_text)
    )
    app.emit(result)


async def _navigate(
    app: AppContext,
    workspace: MemoryWorkspace,
    path: str,
    task: TaskDescriptor,
    strategy: str | None,
    duration_ms: int | None,
    rendered_text: str | None,
) -> ServiceResult:
    from tasknav.infrastructure.scheduler import AsyncioScheduler
    from tasknav.services.navigation import NavigationService
    from tasknav.services.reveal import LineRevealCoordinator

    coordinator = LineRevealCoordinator(AsyncioScheduler(), app.settings.reveal)
    service = NavigationService(workspace, coordinator, app.settings.locator)
    result = await service.navigate(
        path,
        task,
        strategy=strategy,
        duration_ms=duration_ms,
        rendered_text=rendered_text,
    )

    surface = workspace.active.surface if workspace.active else None
    if not result.ok or surface is None:
        return result

    extra: dict[str, Any] = {}
    if surface.selection is not None:
        anchor, head = surface.selection
        extra["selection"] = f"{anchor.line}:{anchor.ch}-{head.line}:{head.ch}"
    if surface.markers:
        extra["highlighted"] = sorted(surface.markers)
    return result.model_copy(update={"data": {**result.data, **extra}})
