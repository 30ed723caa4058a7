"""Click base class with --examples support, plus shared task options."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import click

from tasknav.domain.tasks import TaskDescriptor


def _add_examples_option(cmd: click.Command, examples: str) -> None:
    """Attach an eager ``--examples`` flag to a Click command."""

    def show_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(examples)
        ctx.exit(0)

    cmd.params.append(
        click.Option(
            ["--examples"],
            is_flag=True,
            expose_value=False,
            is_eager=True,
            callback=show_examples,
            help="Show usage examples.",
        )
    )


class NavCommand(click.Command):
    """Click Command subclass that supports an ``--examples`` flag."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)


def task_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Add ``--text`` and ``--id`` options identifying the target task."""
    fn = click.option("--id", "task_id", default=None, help="Task id (#id:... or 🆔 marker).")(fn)
    fn = click.option("--text", default="", help="Task text; checkbox markers optional.")(fn)
    return fn


def build_task(text: str, task_id: str | None) -> TaskDescriptor:
    """Build a TaskDescriptor, rejecting an empty request."""
    if not text.strip() and not task_id:
        raise click.UsageError("Provide --text, --id, or both.")
    return TaskDescriptor(id=task_id, text=text)
