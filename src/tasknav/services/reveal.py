"""LineRevealCoordinator — scroll, select, or highlight a line in a live view.

Each reveal runs as a :class:`RevealPipeline` driven entirely by
scheduler callbacks:

1. **Readiness**: poll every ``poll_interval_ms`` until the view exposes
   an editing surface (``awaiting_surface -> ready``), or give up once
   ``readiness_timeout_ms`` has elapsed (``gave_up``).
2. **Strategy**: either
   ``scroll -> settle delay -> cursor -> full-line selection``, or an
   immediate line marker that clears itself after ``duration_ms``.

INVARIANT: At most one pipeline per view. A new request for the same
view cancels the pending one's timers before it starts.

INVARIANT: At most one active highlight per view. A new highlight
removes the previous marker and cancels its clear timer first, so a
stale clear can never remove a newer marker.

A view that closes mid-pipeline ends it silently with outcome ``stale``.
An exception raised by a step (resolver or host surface call) ends it
with outcome ``failed``; :meth:`RevealPipeline.wait` re-raises it.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass

import structlog
from pydantic import BaseModel, Field

from tasknav.config.models import RevealConfig
from tasknav.domain.lines import clamp_line
from tasknav.domain.types import ReadinessState, RevealOutcome, RevealStrategy
from tasknav.infrastructure.host import DocumentView, EditingSurface, EditorPosition
from tasknav.infrastructure.scheduler import Scheduler, TimerHandle

logger = logging.getLogger(__name__)

LineResolver = Callable[[EditingSurface], int | None]


class RevealRequest(BaseModel):
    """Validated arguments of one reveal call."""

    model_config = {"frozen": True}

    strategy: RevealStrategy
    duration_ms: int = Field(ge=0)
    target_line: int | None = Field(default=None, ge=0)


class HighlightRequest(BaseModel):
    """A transient marker on one line, alive for ``duration_ms``."""

    model_config = {"frozen": True}

    target_line: int = Field(ge=0)
    duration_ms: int = Field(ge=0)


@dataclass
class _ActiveHighlight:
    request: HighlightRequest
    surface: EditingSurface
    timer: TimerHandle | None = None


class RevealPipeline:
    """One in-flight reveal request against one view.

    Created and started by :class:`LineRevealCoordinator`; callers only
    observe it (``state``, ``outcome``, ``target_line``), cancel it, or
    wait for it.
    """

    def __init__(
        self,
        coordinator: LineRevealCoordinator,
        view: DocumentView,
        resolve: LineResolver,
        strategy: RevealStrategy,
        duration_ms: int,
    ) -> None:
        self.view = view
        self.strategy = strategy
        self.duration_ms = duration_ms
        self.state = ReadinessState.AWAITING_SURFACE
        self.outcome = RevealOutcome.PENDING
        self.target_line: int | None = None
        self.polls = 0
        self.error: Exception | None = None
        self._coordinator = coordinator
        self._resolve = resolve
        self._timer: TimerHandle | None = None
        self._started_ms = 0.0
        self._callbacks: list[Callable[[RevealPipeline], None]] = []

    @property
    def done(self) -> bool:
        return self.outcome is not RevealOutcome.PENDING

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def start(self) -> None:
        self._started_ms = self._scheduler.now_ms()
        self._run(self._tick)

    def cancel(self) -> None:
        """Stop the pipeline; pending timers never fire."""
        if self.done:
            return
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._finish(RevealOutcome.CANCELLED)

    def add_done_callback(self, fn: Callable[[RevealPipeline], None]) -> None:
        """Call *fn* once the pipeline ends (immediately if it already has)."""
        if self.done:
            fn(self)
        else:
            self._callbacks.append(fn)

    async def wait(self) -> RevealOutcome:
        """Await the outcome. Requires a scheduler running on this event loop.

        Raises:
            Exception: Whatever a pipeline step raised, when the outcome
                is ``failed``.
        """
        if self.done:
            if self.error is not None:
                raise self.error
            return self.outcome
        future: asyncio.Future[RevealOutcome] = asyncio.get_running_loop().create_future()

        def _resolve(pipeline: RevealPipeline) -> None:
            if future.done():
                return
            if pipeline.error is not None:
                future.set_exception(pipeline.error)
            else:
                future.set_result(pipeline.outcome)

        self.add_done_callback(_resolve)
        return await future

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    @property
    def _scheduler(self) -> Scheduler:
        return self._coordinator.scheduler

    @property
    def _config(self) -> RevealConfig:
        return self._coordinator.config

    def _schedule(self, delay_ms: int, step: Callable[[], None]) -> None:
        self._timer = self._scheduler.call_later(delay_ms, lambda: self._run(step))

    def _run(self, step: Callable[[], None]) -> None:
        try:
            step()
        except Exception as exc:
            if self.done:
                raise
            logger.exception("Reveal step %s failed", step.__name__)
            self.error = exc
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._finish(RevealOutcome.FAILED)

    def _tick(self) -> None:
        self._timer = None
        if self.done:
            return
        if not self.view.is_attached:
            self._finish(RevealOutcome.STALE)
            return

        surface = self.view.surface
        if surface is None:
            self._await_surface()
            return

        self.state = ReadinessState.READY
        line = self._resolve(surface)
        if line is None:
            self._finish(RevealOutcome.NOT_FOUND)
            return
        self.target_line = clamp_line(line, surface.line_count())

        if self.strategy is RevealStrategy.TIMED_HIGHLIGHT:
            request = HighlightRequest(target_line=self.target_line, duration_ms=self.duration_ms)
            self._coordinator._apply_highlight(self.view, surface, request)
            self._finish(RevealOutcome.COMPLETED)
            return

        start = EditorPosition(self.target_line, 0)
        surface.scroll_into_view(start, start)
        # Scroll completion is not observable; wait a fixed settle delay.
        self._schedule(self._config.scroll_settle_ms, self._select)

    def _await_surface(self) -> None:
        timeout = self._config.readiness_timeout_ms
        elapsed = self._scheduler.now_ms() - self._started_ms
        if timeout is not None and elapsed >= timeout:
            self.state = ReadinessState.GAVE_UP
            logger.warning(
                "View never exposed an editor; gave up after %d polls (%.0fms)",
                self.polls,
                elapsed,
            )
            self._finish(RevealOutcome.GAVE_UP)
            return
        self.polls += 1
        self._schedule(self._config.poll_interval_ms, self._tick)

    def _select(self) -> None:
        self._timer = None
        if self.done:
            return
        surface = self.view.surface if self.view.is_attached else None
        if surface is None or self.target_line is None:
            self._finish(RevealOutcome.STALE)
            return

        # Re-read at selection time: the document may have changed
        # during the settle delay.
        line = clamp_line(self.target_line, surface.line_count())
        start = EditorPosition(line, 0)
        surface.set_cursor(start)
        surface.set_selection(start, EditorPosition(line, len(surface.get_line(line))))
        self.target_line = line
        self._finish(RevealOutcome.COMPLETED)

    def _finish(self, outcome: RevealOutcome) -> None:
        self.outcome = outcome
        structlog.get_logger("tasknav.reveal").debug(
            "reveal.finished",
            outcome=str(outcome),
            line=self.target_line,
            strategy=str(self.strategy),
            polls=self.polls,
        )
        self._coordinator._release(self)
        callbacks, self._callbacks = self._callbacks, []
        for fn in callbacks:
            fn(self)

    def __repr__(self) -> str:
        return (
            f"RevealPipeline(view={self.view!r}, strategy={self.strategy}, "
            f"state={self.state}, outcome={self.outcome}, line={self.target_line})"
        )


class LineRevealCoordinator:
    """Owns per-view reveal pipelines and highlight slots.

    Usage::

        coordinator = LineRevealCoordinator(AsyncioScheduler(), settings.reveal)
        pipeline = coordinator.reveal(view, 12)
        await pipeline.wait()
    """

    def __init__(self, scheduler: Scheduler, config: RevealConfig | None = None) -> None:
        self._scheduler = scheduler
        self._config = config or RevealConfig()
        self._pipelines: dict[DocumentView, RevealPipeline] = {}
        self._highlights: dict[DocumentView, _ActiveHighlight] = {}

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    @property
    def config(self) -> RevealConfig:
        return self._config

    def reveal(
        self,
        view: DocumentView,
        target_line: int,
        strategy: RevealStrategy | str | None = None,
        *,
        duration_ms: int | None = None,
    ) -> RevealPipeline:
        """Reveal a known line once *view* is ready.

        Raises:
            pydantic.ValidationError: *target_line* or *duration_ms* is
                negative, or *strategy* is not a known strategy.
        """
        request = self._request(strategy, duration_ms, target_line)
        return self._start(view, lambda _surface: target_line, request)

    def reveal_when_ready(
        self,
        view: DocumentView,
        resolve: LineResolver,
        strategy: RevealStrategy | str | None = None,
        *,
        duration_ms: int | None = None,
    ) -> RevealPipeline:
        """Reveal the line *resolve* computes from the surface once it is ready.

        *resolve* runs against the live surface, so the document is read
        at the moment the view finishes loading. Returning None ends the
        pipeline with ``not_found`` and touches nothing.
        """
        return self._start(view, resolve, self._request(strategy, duration_ms))

    def pending(self, view: DocumentView) -> RevealPipeline | None:
        """The in-flight pipeline for *view*, if any."""
        return self._pipelines.get(view)

    def cancel(self, view: DocumentView) -> bool:
        """Cancel the in-flight pipeline for *view*. Returns True if one existed."""
        pipeline = self._pipelines.get(view)
        if pipeline is None:
            return False
        pipeline.cancel()
        return True

    def active_highlight(self, view: DocumentView) -> HighlightRequest | None:
        slot = self._highlights.get(view)
        return slot.request if slot else None

    def clear_highlight(self, view: DocumentView) -> bool:
        """Remove the active marker on *view* now. Returns True if one existed."""
        slot = self._highlights.pop(view, None)
        if slot is None:
            return False
        if slot.timer is not None:
            slot.timer.cancel()
        if view.is_attached:
            slot.surface.remove_line_marker(slot.request.target_line)
        return True

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _request(
        self,
        strategy: RevealStrategy | str | None,
        duration_ms: int | None,
        target_line: int | None = None,
    ) -> RevealRequest:
        return RevealRequest(
            strategy=strategy or self._config.strategy,
            duration_ms=self._config.highlight_duration_ms if duration_ms is None else duration_ms,
            target_line=target_line,
        )

    def _start(
        self, view: DocumentView, resolve: LineResolver, request: RevealRequest
    ) -> RevealPipeline:
        self.cancel(view)
        pipeline = RevealPipeline(self, view, resolve, request.strategy, request.duration_ms)
        self._pipelines[view] = pipeline
        pipeline.start()
        return pipeline

    def _apply_highlight(
        self,
        view: DocumentView,
        surface: EditingSurface,
        request: HighlightRequest,
    ) -> None:
        self.clear_highlight(view)
        surface.add_line_marker(request.target_line)
        slot = _ActiveHighlight(request=request, surface=surface)
        self._highlights[view] = slot
        slot.timer = self._scheduler.call_later(
            request.duration_ms, lambda: self._expire_highlight(view, slot)
        )

    def _expire_highlight(self, view: DocumentView, slot: _ActiveHighlight) -> None:
        if self._highlights.get(view) is not slot:
            return
        del self._highlights[view]
        if view.is_attached:
            slot.surface.remove_line_marker(slot.request.target_line)

    def _release(self, pipeline: RevealPipeline) -> None:
        if self._pipelines.get(pipeline.view) is pipeline:
            del self._pipelines[pipeline.view]
