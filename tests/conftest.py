"""Shared pytest fixtures for tasknav tests."""

from __future__ import annotations

import logging
from collections.abc import Generator
from pathlib import Path

import pytest
import structlog
from click.testing import CliRunner

from tasknav.config.models import RevealConfig
from tasknav.infrastructure.memory import MemorySurface, MemoryView
from tasknav.infrastructure.scheduler import ManualScheduler
from tasknav.services.reveal import LineRevealCoordinator

SAMPLE_DOC = "---\ntags: x\n---\n- [ ] buy milk\n- [x] call mom"
SAMPLE_LINES = SAMPLE_DOC.split("\n")


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def reveal_config() -> RevealConfig:
    """Round numbers so virtual-clock assertions stay readable."""
    return RevealConfig(
        poll_interval_ms=100,
        scroll_settle_ms=350,
        readiness_timeout_ms=1_000,
        highlight_duration_ms=500,
    )


@pytest.fixture
def coordinator(scheduler: ManualScheduler, reveal_config: RevealConfig) -> LineRevealCoordinator:
    return LineRevealCoordinator(scheduler, reveal_config)


@pytest.fixture
def surface() -> MemorySurface:
    return MemorySurface(SAMPLE_DOC)


@pytest.fixture
def view(surface: MemorySurface) -> MemoryView:
    return MemoryView("daily.md", surface)


@pytest.fixture
def _isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run in an empty temp dir with no tasknav config or env overrides.

    Use via ``@pytest.mark.usefixtures("_isolated_cwd")``.
    """
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("TASKNAV_CONFIG", raising=False)


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Drop handlers and levels installed by CLI invocations."""
    nav = logging.getLogger("tasknav")
    level = nav.level
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        if isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter):
            root.removeHandler(handler)
    nav.setLevel(level)
