from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from core.models import PipelineResult, StepRecord


class InstallError(Exception):
    """Base for every failure that halts the pipeline.

    Each instance carries the halted ``PipelineResult`` so callers can report
    where the pipeline stopped without inspecting loose flags.
    """

    def __init__(self, message: str, *, result: PipelineResult | None = None) -> None:
        super().__init__(message)
        self.reason = message
        self.result = result or PipelineResult.halted(
            records=(), index=None, step=None, reason=message
        )


class InsufficientPrivileges(InstallError):
    """The process is not running with elevated rights."""


class PrecheckFailure(InstallError):
    """A required precondition is unsatisfied; nothing has been mutated."""

    def __init__(self, *, missing: Sequence[str]) -> None:
        self.missing = tuple(missing)
        super().__init__(
            "required preconditions unsatisfied: " + ", ".join(self.missing)
        )


class ResourceUnavailable(InstallError):
    """None of the alternative mechanisms for an action is available."""

    def __init__(self, message: str, *, alternatives: Sequence[str]) -> None:
        self.alternatives = tuple(alternatives)
        super().__init__(message)


class StepFailure(InstallError):
    """A step failed; the steps recorded before it stay applied."""

    def __init__(
        self,
        *,
        index: int | None,
        step: str,
        reason: str,
        artifact: Path | None = None,
        records: Sequence[StepRecord] = (),
    ) -> None:
        self.index = index
        self.step = step
        self.artifact = artifact
        super().__init__(
            reason,
            result=PipelineResult.halted(
                records=records, index=index, step=step, reason=reason
            ),
        )
