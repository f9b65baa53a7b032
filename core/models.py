from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Generic, Literal, TypeVar

Decision = Literal["proceed", "abort"]
PipelineStatus = Literal["completed", "halted"]
GateDecision = Literal["passed", "skipped"]

T = TypeVar("T")


@dataclass(frozen=True)
class Precondition:
    name: str
    check: Callable[[], bool]
    remediation: str
    required: bool = True


@dataclass(frozen=True)
class PreconditionStatus:
    name: str
    satisfied: bool
    remediation: str
    required: bool


@dataclass(frozen=True)
class PrecheckReport:
    """Outcome of evaluating every precondition, in declared order."""

    statuses: tuple[PreconditionStatus, ...]
    decision: Decision

    def unsatisfied(self) -> list[PreconditionStatus]:
        return [s for s in self.statuses if not s.satisfied]

    def is_satisfied(self, name: str) -> bool:
        for status in self.statuses:
            if status.name == name:
                return status.satisfied
        raise KeyError(name)


@dataclass(frozen=True)
class StepResult:
    ok: bool
    detail: str = ""

    @staticmethod
    def success(detail: str = "") -> StepResult:
        return StepResult(ok=True, detail=detail)

    @staticmethod
    def failure(detail: str) -> StepResult:
        return StepResult(ok=False, detail=detail)


@dataclass(frozen=True)
class Step:
    """One fallible action of the pipeline.

    ``cleanup`` only runs when the step fails. It may return the path of a
    diagnostic artifact it produced (for example a relocated build log).
    """

    name: str
    action: Callable[[], StepResult]
    failure_message: str
    cleanup: Callable[[], Path | None] | None = None


@dataclass(frozen=True)
class StepRecord:
    index: int
    name: str
    ok: bool
    detail: str = ""


@dataclass(frozen=True)
class Alternative(Generic[T]):
    name: str
    available: bool
    mechanism: T


@dataclass(frozen=True)
class GateProbe:
    """Answer of a capability probe.

    ``ran`` is false when the probe produced no usable answer.
    """

    ran: bool
    holds: bool
    detail: str = ""


@dataclass(frozen=True)
class CapabilityGate:
    name: str
    probe: Callable[[], GateProbe]
    steps: Sequence[Step]
    failure_message: str


@dataclass(frozen=True)
class PipelineResult:
    status: PipelineStatus
    records: tuple[StepRecord, ...] = field(default_factory=tuple)
    halted_at: int | None = None
    halted_step: str | None = None
    reason: str | None = None
    gate: GateDecision | None = None
    cleanup_ok: bool = True

    @staticmethod
    def halted(
        *,
        records: Sequence[StepRecord],
        index: int | None,
        step: str | None,
        reason: str,
    ) -> PipelineResult:
        return PipelineResult(
            status="halted",
            records=tuple(records),
            halted_at=index,
            halted_step=step,
            reason=reason,
        )


@dataclass(frozen=True)
class PipelinePlan:
    """Ordered steps plus an optional capability gate."""

    steps: Sequence[Step]
    gate: CapabilityGate | None = None
