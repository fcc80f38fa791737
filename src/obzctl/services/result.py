"""ServiceResult and ServiceError — the return type of every service method.

The CLI renders these; nothing below the service layer knows about them.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ServiceError(BaseModel):
    """Structured failure: a stable ``code`` plus a human ``message``."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of one service operation.

    ``op`` names the operation (``"board_create"``, ``"archive_pack"``).
    On success the payload sits in ``data`` and ``error`` is None; on
    failure ``error`` says why and ``data`` is empty. ``warnings`` collects
    non-fatal findings such as buttons left without a grid cell.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None

    @classmethod
    def fail(
        cls, op: str, code: str, message: str, *, detail: dict[str, Any] | None = None
    ) -> ServiceResult:
        return cls(
            ok=False,
            op=op,
            error=ServiceError(code=code, message=message, detail=detail or {}),
        )
