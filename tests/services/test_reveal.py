"""Tests for LineRevealCoordinator — readiness, strategies, and supersession."""

from __future__ import annotations

import asyncio

import pytest
from pydantic import ValidationError

from tasknav.config.models import RevealConfig
from tasknav.domain.types import ReadinessState, RevealOutcome, RevealStrategy
from tasknav.infrastructure.host import EditorPosition
from tasknav.infrastructure.memory import MemorySurface, MemoryView
from tasknav.infrastructure.scheduler import AsyncioScheduler, ManualScheduler
from tasknav.services.reveal import HighlightRequest, LineRevealCoordinator
from tests.conftest import SAMPLE_DOC

HIGHLIGHT = RevealStrategy.TIMED_HIGHLIGHT


def _names(surface: MemorySurface) -> list[str]:
    return [name for name, _ in surface.calls]


# ---------------------------------------------------------------------------
# selectAndScroll
# ---------------------------------------------------------------------------


class TestSelectAndScroll:
    def test_scrolls_immediately(
        self, coordinator: LineRevealCoordinator, view: MemoryView, surface: MemorySurface
    ) -> None:
        pipeline = coordinator.reveal(view, 3)
        assert surface.calls == [("scroll", (EditorPosition(3), EditorPosition(3)))]
        assert pipeline.state is ReadinessState.READY
        assert pipeline.outcome is RevealOutcome.PENDING

    def test_selects_after_settle_delay(
        self,
        coordinator: LineRevealCoordinator,
        scheduler: ManualScheduler,
        view: MemoryView,
        surface: MemorySurface,
    ) -> None:
        pipeline = coordinator.reveal(view, 3)
        scheduler.advance(349)
        assert surface.cursor is None
        scheduler.advance(1)
        assert surface.cursor == EditorPosition(3, 0)
        assert surface.selection == (EditorPosition(3, 0), EditorPosition(3, 14))
        assert pipeline.outcome is RevealOutcome.COMPLETED
        assert _names(surface) == ["scroll", "cursor", "select"]

    def test_selection_rereads_line_length(
        self,
        coordinator: LineRevealCoordinator,
        scheduler: ManualScheduler,
        view: MemoryView,
        surface: MemorySurface,
    ) -> None:
        coordinator.reveal(view, 3)
        surface.set_value(SAMPLE_DOC.replace("buy milk", "buy oat milk"))
        scheduler.advance(350)
        assert surface.selection == (EditorPosition(3, 0), EditorPosition(3, 18))

    def test_document_shrinking_during_settle_clamps(
        self,
        coordinator: LineRevealCoordinator,
        scheduler: ManualScheduler,
        view: MemoryView,
        surface: MemorySurface,
    ) -> None:
        pipeline = coordinator.reveal(view, 4)
        surface.set_value("only\ntwo")
        scheduler.advance(350)
        assert surface.selection == (EditorPosition(1, 0), EditorPosition(1, 3))
        assert pipeline.target_line == 1

    def test_target_beyond_document_is_clamped(
        self,
        coordinator: LineRevealCoordinator,
        scheduler: ManualScheduler,
        view: MemoryView,
        surface: MemorySurface,
    ) -> None:
        coordinator.reveal(view, 40)
        scheduler.advance(350)
        assert surface.cursor == EditorPosition(4, 0)

    def test_uses_live_surface_at_selection_time(
        self,
        coordinator: LineRevealCoordinator,
        scheduler: ManualScheduler,
        view: MemoryView,
        surface: MemorySurface,
    ) -> None:
        coordinator.reveal(view, 3)
        replacement = MemorySurface(SAMPLE_DOC)
        view.load(replacement)
        scheduler.advance(350)
        assert surface.cursor is None
        assert replacement.cursor == EditorPosition(3, 0)


# ---------------------------------------------------------------------------
# Readiness gating
# ---------------------------------------------------------------------------


class TestReadiness:
    def test_waits_for_surface(
        self, coordinator: LineRevealCoordinator, scheduler: ManualScheduler
    ) -> None:
        view = MemoryView("daily.md")
        pipeline = coordinator.reveal(view, 3)
        assert pipeline.state is ReadinessState.AWAITING_SURFACE
        scheduler.advance(250)
        assert pipeline.polls == 3

        surface = MemorySurface(SAMPLE_DOC)
        view.load(surface)
        scheduler.advance(50)
        assert pipeline.state is ReadinessState.READY
        assert _names(surface) == ["scroll"]
        scheduler.advance(350)
        assert pipeline.outcome is RevealOutcome.COMPLETED

    def test_gives_up_after_timeout(
        self, coordinator: LineRevealCoordinator, scheduler: ManualScheduler
    ) -> None:
        pipeline = coordinator.reveal(MemoryView("daily.md"), 3)
        scheduler.advance(900)
        assert pipeline.outcome is RevealOutcome.PENDING
        scheduler.advance(100)
        assert pipeline.state is ReadinessState.GAVE_UP
        assert pipeline.outcome is RevealOutcome.GAVE_UP
        assert pipeline.polls == 10
        assert scheduler.pending_count == 0

    def test_zero_timeout_gives_up_at_once(self, scheduler: ManualScheduler) -> None:
        coordinator = LineRevealCoordinator(scheduler, RevealConfig(readiness_timeout_ms=0))
        pipeline = coordinator.reveal(MemoryView("daily.md"), 0)
        assert pipeline.outcome is RevealOutcome.GAVE_UP
        assert pipeline.polls == 0

    def test_unbounded_polling(self, scheduler: ManualScheduler) -> None:
        coordinator = LineRevealCoordinator(
            scheduler, RevealConfig(poll_interval_ms=100, readiness_timeout_ms=None)
        )
        pipeline = coordinator.reveal(MemoryView("daily.md"), 0)
        scheduler.advance(60_000)
        assert pipeline.state is ReadinessState.AWAITING_SURFACE
        assert scheduler.pending_count == 1

    def test_not_found_resolver_touches_nothing(
        self,
        coordinator: LineRevealCoordinator,
        scheduler: ManualScheduler,
        view: MemoryView,
        surface: MemorySurface,
    ) -> None:
        pipeline = coordinator.reveal_when_ready(view, lambda _s: None)
        scheduler.advance(1_000)
        assert pipeline.outcome is RevealOutcome.NOT_FOUND
        assert surface.calls == []

    def test_resolver_reads_surface_once_ready(
        self, coordinator: LineRevealCoordinator, scheduler: ManualScheduler
    ) -> None:
        view = MemoryView("daily.md")
        seen: list[str] = []

        def resolve(surface: MemorySurface) -> int:
            seen.append(surface.get_line(0))
            return 0

        coordinator.reveal_when_ready(view, resolve)  # type: ignore[arg-type]
        scheduler.advance(100)
        assert seen == []
        view.load(MemorySurface("loaded"))
        scheduler.advance(100)
        assert seen == ["loaded"]


# ---------------------------------------------------------------------------
# Stale targets
# ---------------------------------------------------------------------------


class TestStaleTarget:
    def test_view_closed_during_settle(
        self,
        coordinator: LineRevealCoordinator,
        scheduler: ManualScheduler,
        view: MemoryView,
        surface: MemorySurface,
    ) -> None:
        pipeline = coordinator.reveal(view, 3)
        view.close()
        scheduler.advance(350)
        assert pipeline.outcome is RevealOutcome.STALE
        assert surface.cursor is None

    def test_view_closed_while_awaiting(
        self, coordinator: LineRevealCoordinator, scheduler: ManualScheduler
    ) -> None:
        view = MemoryView("daily.md")
        pipeline = coordinator.reveal(view, 3)
        view.close()
        scheduler.advance(100)
        assert pipeline.outcome is RevealOutcome.STALE
        assert coordinator.pending(view) is None

    def test_highlight_expiry_on_closed_view_is_silent(
        self,
        coordinator: LineRevealCoordinator,
        scheduler: ManualScheduler,
        view: MemoryView,
        surface: MemorySurface,
    ) -> None:
        coordinator.reveal(view, 3, HIGHLIGHT)
        view.close()
        scheduler.advance(500)
        assert coordinator.active_highlight(view) is None
        assert _names(surface) == ["mark"]


# ---------------------------------------------------------------------------
# Per-view serialization
# ---------------------------------------------------------------------------


class TestSerialization:
    def test_new_request_cancels_pending_one(
        self,
        coordinator: LineRevealCoordinator,
        scheduler: ManualScheduler,
        view: MemoryView,
        surface: MemorySurface,
    ) -> None:
        first = coordinator.reveal(view, 3)
        scheduler.advance(200)
        second = coordinator.reveal(view, 4)
        assert first.outcome is RevealOutcome.CANCELLED
        assert coordinator.pending(view) is second

        scheduler.advance(1_000)
        assert _names(surface) == ["scroll", "scroll", "cursor", "select"]
        assert surface.cursor == EditorPosition(4, 0)
        assert second.outcome is RevealOutcome.COMPLETED

    def test_views_are_independent(
        self, coordinator: LineRevealCoordinator, scheduler: ManualScheduler
    ) -> None:
        a_surface, b_surface = MemorySurface(SAMPLE_DOC), MemorySurface(SAMPLE_DOC)
        a = coordinator.reveal(MemoryView("a.md", a_surface), 3)
        b = coordinator.reveal(MemoryView("b.md", b_surface), 4)
        scheduler.advance(350)
        assert a.outcome is b.outcome is RevealOutcome.COMPLETED
        assert a_surface.cursor == EditorPosition(3)
        assert b_surface.cursor == EditorPosition(4)

    def test_pending_released_after_completion(
        self,
        coordinator: LineRevealCoordinator,
        scheduler: ManualScheduler,
        view: MemoryView,
    ) -> None:
        coordinator.reveal(view, 3)
        assert coordinator.pending(view) is not None
        scheduler.advance(350)
        assert coordinator.pending(view) is None

    def test_cancel(
        self,
        coordinator: LineRevealCoordinator,
        scheduler: ManualScheduler,
        view: MemoryView,
        surface: MemorySurface,
    ) -> None:
        assert coordinator.cancel(view) is False
        pipeline = coordinator.reveal(view, 3)
        assert coordinator.cancel(view) is True
        assert pipeline.outcome is RevealOutcome.CANCELLED
        assert scheduler.pending_count == 0
        scheduler.advance(1_000)
        assert surface.cursor is None


# ---------------------------------------------------------------------------
# timedHighlight
# ---------------------------------------------------------------------------


class TestTimedHighlight:
    def test_marks_then_clears(
        self,
        coordinator: LineRevealCoordinator,
        scheduler: ManualScheduler,
        view: MemoryView,
        surface: MemorySurface,
    ) -> None:
        pipeline = coordinator.reveal(view, 3, HIGHLIGHT)
        assert surface.markers == {3}
        assert pipeline.outcome is RevealOutcome.COMPLETED
        assert coordinator.active_highlight(view) == HighlightRequest(
            target_line=3, duration_ms=500
        )
        scheduler.advance(499)
        assert surface.markers == {3}
        scheduler.advance(1)
        assert surface.markers == set()
        assert coordinator.active_highlight(view) is None

    def test_explicit_duration(
        self,
        coordinator: LineRevealCoordinator,
        scheduler: ManualScheduler,
        view: MemoryView,
        surface: MemorySurface,
    ) -> None:
        coordinator.reveal(view, 3, "timed_highlight", duration_ms=50)
        scheduler.advance(50)
        assert surface.markers == set()

    def test_newer_highlight_replaces_older(
        self,
        coordinator: LineRevealCoordinator,
        scheduler: ManualScheduler,
        view: MemoryView,
        surface: MemorySurface,
    ) -> None:
        coordinator.reveal(view, 3, HIGHLIGHT)
        scheduler.advance(200)
        coordinator.reveal(view, 4, HIGHLIGHT)
        assert surface.markers == {4}
        assert scheduler.pending_count == 1

        scheduler.advance(300)  # the first request's clear would have fired here
        assert surface.markers == {4}
        scheduler.advance(200)
        assert surface.markers == set()
        assert _names(surface) == ["mark", "unmark", "mark", "unmark"]

    def test_identical_requests_leave_one_timer(
        self,
        coordinator: LineRevealCoordinator,
        scheduler: ManualScheduler,
        view: MemoryView,
        surface: MemorySurface,
    ) -> None:
        coordinator.reveal(view, 3, HIGHLIGHT)
        coordinator.reveal(view, 3, HIGHLIGHT)
        assert scheduler.pending_count == 1
        assert surface.markers == {3}
        scheduler.advance(500)
        assert surface.markers == set()
        assert _names(surface).count("unmark") == 2

    def test_clear_highlight(
        self,
        coordinator: LineRevealCoordinator,
        scheduler: ManualScheduler,
        view: MemoryView,
        surface: MemorySurface,
    ) -> None:
        assert coordinator.clear_highlight(view) is False
        coordinator.reveal(view, 3, HIGHLIGHT)
        assert coordinator.clear_highlight(view) is True
        assert surface.markers == set()
        assert scheduler.pending_count == 0

    def test_default_strategy_from_config(self, scheduler: ManualScheduler) -> None:
        config = RevealConfig(strategy=HIGHLIGHT, highlight_duration_ms=10)
        coordinator = LineRevealCoordinator(scheduler, config)
        surface = MemorySurface(SAMPLE_DOC)
        pipeline = coordinator.reveal(MemoryView("a.md", surface), 2)
        assert pipeline.strategy is HIGHLIGHT
        assert surface.markers == {2}


# ---------------------------------------------------------------------------
# Argument validation and async waiting
# ---------------------------------------------------------------------------


class TestValidation:
    def test_negative_line_rejected(
        self, coordinator: LineRevealCoordinator, view: MemoryView
    ) -> None:
        with pytest.raises(ValidationError, match="target_line"):
            coordinator.reveal(view, -1)
        assert coordinator.pending(view) is None

    def test_negative_duration_rejected(
        self, coordinator: LineRevealCoordinator, view: MemoryView
    ) -> None:
        with pytest.raises(ValidationError, match="duration_ms"):
            coordinator.reveal(view, 0, HIGHLIGHT, duration_ms=-5)

    def test_unknown_strategy_rejected(
        self, coordinator: LineRevealCoordinator, view: MemoryView
    ) -> None:
        with pytest.raises(ValidationError, match="strategy"):
            coordinator.reveal_when_ready(view, lambda _s: 0, "teleport")

    def test_negative_duration_leaves_pending_pipeline(
        self, coordinator: LineRevealCoordinator, view: MemoryView
    ) -> None:
        first = coordinator.reveal(view, 3)
        with pytest.raises(ValidationError):
            coordinator.reveal(view, 4, HIGHLIGHT, duration_ms=-1)
        assert coordinator.pending(view) is first

    def test_highlight_request_bounds(self) -> None:
        with pytest.raises(ValidationError):
            HighlightRequest(target_line=-1, duration_ms=0)
        with pytest.raises(ValidationError):
            HighlightRequest(target_line=0, duration_ms=-1)


class TestWaiting:
    def test_done_callback_after_finish_runs_immediately(
        self, coordinator: LineRevealCoordinator, view: MemoryView
    ) -> None:
        pipeline = coordinator.reveal(view, 3, HIGHLIGHT)
        seen: list[RevealOutcome] = []
        pipeline.add_done_callback(lambda p: seen.append(p.outcome))
        assert seen == [RevealOutcome.COMPLETED]

    def test_wait_on_asyncio_loop(self) -> None:
        surface = MemorySurface(SAMPLE_DOC)
        view = MemoryView("daily.md", surface)

        async def main() -> RevealOutcome:
            config = RevealConfig(scroll_settle_ms=5, poll_interval_ms=1)
            coordinator = LineRevealCoordinator(AsyncioScheduler(), config)
            return await coordinator.reveal(view, 4).wait()

        assert asyncio.run(main()) is RevealOutcome.COMPLETED
        assert surface.selection == (EditorPosition(4, 0), EditorPosition(4, 14))


# ---------------------------------------------------------------------------
# Failing steps
# ---------------------------------------------------------------------------


class _BrokenSelectionSurface(MemorySurface):
    def set_selection(self, anchor: EditorPosition, head: EditorPosition) -> None:
        raise RuntimeError("selection API unavailable")


def _boom(_surface: MemorySurface) -> int:
    raise RuntimeError("resolver exploded")


class TestFailingSteps:
    def test_resolver_error_fails_pipeline(
        self, coordinator: LineRevealCoordinator, view: MemoryView
    ) -> None:
        pipeline = coordinator.reveal_when_ready(view, _boom)
        assert pipeline.outcome is RevealOutcome.FAILED
        assert isinstance(pipeline.error, RuntimeError)
        assert coordinator.pending(view) is None

    def test_surface_error_after_settle_delay(
        self, scheduler: ManualScheduler, coordinator: LineRevealCoordinator
    ) -> None:
        view = MemoryView("daily.md", _BrokenSelectionSurface(SAMPLE_DOC))
        pipeline = coordinator.reveal(view, 3)
        scheduler.advance(350)
        assert pipeline.outcome is RevealOutcome.FAILED
        assert str(pipeline.error) == "selection API unavailable"
        assert coordinator.pending(view) is None
        assert scheduler.pending_count == 0

    def test_failure_is_logged(
        self,
        coordinator: LineRevealCoordinator,
        view: MemoryView,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        coordinator.reveal_when_ready(view, _boom)
        assert any(
            r.levelname == "ERROR" and r.exc_info is not None for r in caplog.records
        )

    def test_failed_pipeline_does_not_block_next_request(
        self, coordinator: LineRevealCoordinator, view: MemoryView
    ) -> None:
        coordinator.reveal_when_ready(view, _boom)
        pipeline = coordinator.reveal(view, 3, HIGHLIGHT)
        assert pipeline.outcome is RevealOutcome.COMPLETED

    def test_wait_reraises_after_finish(
        self, coordinator: LineRevealCoordinator, view: MemoryView
    ) -> None:
        pipeline = coordinator.reveal_when_ready(view, _boom)
        with pytest.raises(RuntimeError, match="resolver exploded"):
            asyncio.run(pipeline.wait())

    def test_wait_raises_instead_of_hanging(self) -> None:
        view = MemoryView("daily.md")

        async def main() -> None:
            config = RevealConfig(poll_interval_ms=1, readiness_timeout_ms=None)
            coordinator = LineRevealCoordinator(AsyncioScheduler(), config)
            pipeline = coordinator.reveal_when_ready(view, _boom)
            asyncio.get_running_loop().call_later(0.005, view.load, MemorySurface(SAMPLE_DOC))
            await asyncio.wait_for(pipeline.wait(), timeout=2)

        with pytest.raises(RuntimeError, match="resolver exploded"):
            asyncio.run(main())
