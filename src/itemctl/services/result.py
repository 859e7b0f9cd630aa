"""ServiceResult and ServiceError — the return contract of ItemService.

The CLI and the HTTP adapter both consume this type; neither inspects
exceptions coming out of the service layer for expected failures.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ServiceError(BaseModel):
    """Structured error payload (``NOT_FOUND``, ``PROCESSING_FAILED``, ...)."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of one service operation.

    Attributes:
        ok: Whether the operation succeeded.
        op: Operation name (e.g. ``"create_item"``, ``"process_items"``).
        data: Operation payload on success.
        warnings: Non-fatal issues.
        error: Set when ``ok`` is False.
        meta: Optional metadata such as run state or timings.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None
