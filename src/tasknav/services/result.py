"""ServiceResult and ServiceError — the contract between services and the CLI.

INVARIANT: Expected failures (task absent, file absent, view never
ready) are ServiceResult values with ``ok=False``, never exceptions.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Return type for navigation service operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (``"locate_task"``, ``"navigate_task"``).
        data: Operation-specific payload.
        warnings: Non-fatal issues, e.g. the view closed mid-navigation.
        error: Structured error if ``ok`` is False.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None

    @classmethod
    def failure(
        cls,
        op: str,
        code: str,
        message: str,
        **detail: Any,
    ) -> ServiceResult:
        return cls(ok=False, op=op, error=ServiceError(code=code, message=message, detail=detail))
