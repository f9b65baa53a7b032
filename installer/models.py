from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

from core.models import PipelineResult
from installer.errors import ErrorCode


class InstallReport(BaseModel):
    """Summary of one installer run, logged as a single structured record."""

    status: Literal["completed", "halted"]
    code: ErrorCode | None = None
    halted_at: int | None = Field(default=None, ge=0)
    halted_step: str | None = None
    reason: str | None = None
    completed_steps: list[str] = Field(default_factory=list)
    desktop_integration: Literal["passed", "skipped"] | None = None
    cleanup_ok: bool = True
    timestamp: datetime

    @staticmethod
    def from_result(
        result: PipelineResult, *, code: ErrorCode | None = None
    ) -> InstallReport:
        return InstallReport(
            status=result.status,
            code=code,
            halted_at=result.halted_at,
            halted_step=result.halted_step,
            reason=result.reason,
            completed_steps=[r.name for r in result.records if r.ok],
            desktop_integration=result.gate,
            cleanup_ok=result.cleanup_ok,
            timestamp=datetime.now(timezone.utc),
        )
