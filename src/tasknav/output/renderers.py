"""Rich renderers for ServiceResult.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.text import Text

from tasknav.output.console import create_console, get_output

if TYPE_CHECKING:
    from collections.abc import Callable

    from rich.console import Console

    from tasknav.services.result import ServiceResult


def render_result(result: ServiceResult, *, no_color: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console(no_color=no_color)
    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console)
    else:
        _render_error(result, console)
    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Minimal output: the target line number, or the error."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} - {msg}"
    line = result.data.get("source_line", result.data.get("line"))
    return "" if line is None else str(line)


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text("OK", style="nav.ok"), Text(f"  {result.op}", style="nav.op"))


def _field(console: Console, key: str, value: Any) -> None:
    k = Text(f"  {key}: ", style="nav.key")
    if key.endswith("line"):
        v = Text(str(value), style="nav.line")
    elif key == "path":
        v = Text(str(value), style="nav.path")
    elif key == "content":
        v = Text(str(value), style="nav.content")
    else:
        v = Text(str(value))
    console.print(k, v, sep="")


def _render_warnings(console: Console, result: ServiceResult) -> None:
    for warning in result.warnings:
        console.print(Text("  warning: ", style="nav.warning"), Text(warning), sep="")


# ── Renderers ─────────────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    _render_warnings(console, result)


def _render_locate(result: ServiceResult, console: Console) -> None:
    _status_line(console, result)
    data = result.data
    if data.get("path"):
        _field(console, "path", data["path"])
    _field(console, "line", data["line"])
    if data["source_line"] != data["line"]:
        _field(console, "source_line", data["source_line"])
    if data.get("frontmatter_lines"):
        _field(console, "frontmatter_lines", data["frontmatter_lines"])
    _field(console, "content", data["content"])
    _render_warnings(console, result)


def _render_navigate(result: ServiceResult, console: Console) -> None:
    _status_line(console, result)
    for key in ("path", "line", "strategy", "outcome", "duration_ms", "selection", "highlighted"):
        if result.data.get(key) is not None:
            _field(console, key, result.data[key])
    _render_warnings(console, result)


def _render_error(result: ServiceResult, console: Console) -> None:
    msg = result.error.message if result.error else "Unknown error"
    console.print(
        Text("ERROR", style="nav.error"), Text(f"  {result.op}", style="nav.op"), Text(f"  {msg}")
    )
    if result.error and result.error.code:
        _field(console, "code", result.error.code)


_OP_RENDERERS: dict[str, Callable[[ServiceResult, Console], None]] = {
    "locate_task": _render_locate,
    "navigate_task": _render_navigate,
}
