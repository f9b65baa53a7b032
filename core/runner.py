from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import replace
from pathlib import Path

from core.errors import InstallError
from core.gate import run_gate
from core.models import (
    GateDecision,
    PipelinePlan,
    PipelineResult,
    Precondition,
    PrecheckReport,
    StepRecord,
)
from core.preconditions import check_preconditions, require_proceed
from core.sequencer import GuardedSequencer
from core.workspace import TemporaryWorkspace

Planner = Callable[[PrecheckReport, Path], PipelinePlan]


class GuardedPipeline:
    """Precheck, plan, run steps fail-fast, then an optional capability gate.

    The planner is called only after the precheck decided to proceed and the
    workspace exists; it is where alternative mechanisms get selected.
    """

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger
        self._sequencer = GuardedSequencer(logger)

    def run(
        self,
        *,
        preconditions: Sequence[Precondition],
        plan: Planner,
        workspace_root: Path | None = None,
    ) -> PipelineResult:
        report = check_preconditions(preconditions, logger=self._logger)
        require_proceed(report)

        workspace = TemporaryWorkspace(self._logger, root=workspace_root)
        try:
            with workspace:
                records, gate = self._execute(plan(report, workspace.path))
        except InstallError as exc:
            exc.result = replace(exc.result, cleanup_ok=workspace.cleanup_ok)
            raise

        return PipelineResult(
            status="completed",
            records=tuple(records),
            gate=gate,
            cleanup_ok=workspace.cleanup_ok,
        )

    def _execute(
        self, plan: PipelinePlan
    ) -> tuple[list[StepRecord], GateDecision | None]:
        records = self._sequencer.run(plan.steps)
        if plan.gate is None:
            return records, None
        decision, gated = run_gate(
            plan.gate, self._sequencer, prior=records, logger=self._logger
        )
        return [*records, *gated], decision
