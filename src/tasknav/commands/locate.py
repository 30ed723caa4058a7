"""Command: find a task's line in a Markdown file."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from tasknav.commands._base import NavCommand, build_task, task_options
from tasknav.domain.types import EditingMode

if TYPE_CHECKING:
    from tasknav.commands._context import AppContext


@click.command(
    cls=NavCommand,
    examples="""\
  tasknav locate notes/today.md --text "call mom"
  tasknav --json locate notes/today.md --text "- [ ] buy milk"
  tasknav locate notes/today.md --text "call mom" --rendered
  tasknav locate notes/today.md --id 7f3a2c""",
)
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@task_options
@click.option(
    "--rendered",
    is_flag=True,
    help="Treat the match as a rendered-view line and map it to source.",
)
@click.option(
    "--mode",
    type=click.Choice([m.value for m in EditingMode]),
    default=EditingMode.SOURCE.value,
    help="Editing mode used for the rendered-to-source mapping.",
)
@click.pass_obj
def locate(
    app: AppContext,
    path: Path,
    text: str,
    task_id: str | None,
    rendered: bool,
    mode: str,
) -> None:
    """Print the line holding a task, by id or exact text."""
    from tasknav.services.navigation import locate_in_text

    task = build_task(text, task_id)
    result = locate_in_text(
        path.read_text(encoding="utf-8"),
        task,
        rendered=rendered,
        mode=EditingMode(mode),
        locator=app.settings.locator,
    )
    app.emit(result.model_copy(update={"data": {"path": str(path), **result.data}}))
