"""Closed enums shared by the locator, adjuster, and reveal coordinator."""

from __future__ import annotations

from enum import StrEnum


class EditingMode(StrEnum):
    """How the active view currently presents the document."""

    SOURCE = "source"
    PREVIEW = "preview"
    UNKNOWN = "unknown"


class RevealStrategy(StrEnum):
    """Navigation strategies supported by the reveal coordinator."""

    SELECT_AND_SCROLL = "select_and_scroll"
    TIMED_HIGHLIGHT = "timed_highlight"


class ReadinessState(StrEnum):
    """Surface readiness state machine driven by scheduler ticks."""

    AWAITING_SURFACE = "awaiting_surface"
    READY = "ready"
    GAVE_UP = "gave_up"


class RevealOutcome(StrEnum):
    """Terminal (or pending) result of a reveal pipeline."""

    PENDING = "pending"
    COMPLETED = "completed"
    NOT_FOUND = "not_found"
    CANCELLED = "cancelled"
    GAVE_UP = "gave_up"
    STALE = "stale"
    FAILED = "failed"
