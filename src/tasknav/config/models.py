"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, tasknav.toml only contains
overrides. An empty (or missing) tasknav.toml is a valid configuration.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from tasknav.domain.types import RevealStrategy


class RevealConfig(BaseModel):
    """[reveal] section.

    ``readiness_timeout_ms`` bounds how long a reveal waits for a view
    to expose its editor. ``None`` polls until the view closes.
    """

    model_config = {"frozen": True}

    strategy: RevealStrategy = RevealStrategy.SELECT_AND_SCROLL
    poll_interval_ms: int = Field(default=100, gt=0)
    scroll_settle_ms: int = Field(default=350, ge=0)
    readiness_timeout_ms: int | None = Field(default=10_000, ge=0)
    highlight_duration_ms: int = Field(default=2_000, ge=0)


class LocatorConfig(BaseModel):
    """[locator] section."""

    model_config = {"frozen": True}

    adjust_rendered_lines: bool = True
