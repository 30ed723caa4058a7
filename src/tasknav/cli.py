"""Root CLI group for tasknav with global flags and command registration."""

from __future__ import annotations

import click

from tasknav import __version__
from tasknav.commands import register_commands
from tasknav.commands._context import AppContext
from tasknav.config.discovery import CONFIG_ENV_VAR, CONFIG_FILENAME
from tasknav.config.models import RevealConfig
from tasknav.config.settings import TaskNavSettings


def _epilog() -> str:
    defaults = RevealConfig()
    timeout = defaults.readiness_timeout_ms
    return f"""\b
Configuration:
  {CONFIG_FILENAME} in the current directory or an ancestor, or ${CONFIG_ENV_VAR}.
  Override any key with TASKNAV_<SECTION>__<KEY>, e.g.
  TASKNAV_REVEAL__STRATEGY=timed_highlight.

\b
Reveal defaults ([reveal]):
  strategy {defaults.strategy}, settle {defaults.scroll_settle_ms} ms,
  highlight {defaults.highlight_duration_ms} ms, poll every {defaults.poll_interval_ms} ms,
  give up after {timeout} ms.
"""


@click.group(
    invoke_without_command=True,
    epilog=_epilog(),
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.version_option(
    version=__version__, prog_name="tasknav", message="%(prog)s %(version)s"
)
@click.option("--json", "json_output", is_flag=True, help="Print results as JSON.")
@click.option("-q", "--quiet", is_flag=True, help="Print only the target line number.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging, including reveal events.")
@click.option("--log-json", is_flag=True, help="Log JSON lines to stderr.")
@click.option("--no-color", is_flag=True, help="Disable colored result output.")
@click.option(
    "-c",
    "--config",
    "config_path",
    default=None,
    metavar="FILE",
    help=f"Use FILE instead of discovering {CONFIG_FILENAME}.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    no_color: bool,
    config_path: str | None,
) -> None:
    """Find Markdown tasks and reveal them in a document view."""
    settings = TaskNavSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
        no_color=no_color,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
