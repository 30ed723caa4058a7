"""Pick an output mode for a ServiceResult.

``--json`` wins over ``--quiet``, which wins over the Rich renderer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from tasknav.output.renderers import render_quiet, render_result

if TYPE_CHECKING:
    from tasknav.services.result import ServiceResult


def format_result(
    result: ServiceResult,
    *,
    json_output: bool = False,
    quiet: bool = False,
    no_color: bool = False,
) -> str:
    if json_output:
        return result.model_dump_json(indent=2)
    if quiet:
        return render_quiet(result)
    return render_result(result, no_color=no_color)
