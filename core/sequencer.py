from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from core.errors import StepFailure
from core.models import Step, StepRecord, StepResult


class GuardedSequencer:
    """Runs steps strictly in order and halts on the first failure."""

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def run(
        self, steps: Sequence[Step], *, prior: Sequence[StepRecord] = ()
    ) -> list[StepRecord]:
        """Run ``steps`` and return their records.

        Indices continue from ``prior`` so a sub-sequence numbers its steps
        after the ones already run. Raises StepFailure on the first failing
        step; no later step runs.
        """
        records: list[StepRecord] = []
        for offset, step in enumerate(steps):
            index = len(prior) + offset
            self._logger.debug("step started", extra={"step": step.name})
            try:
                result = step.action()
            except OSError as exc:
                failed = StepResult.failure(f"{type(exc).__name__}: {exc}")
                raise self._failure(step, index, failed, [*prior, *records]) from exc
            if not result.ok:
                raise self._failure(step, index, result, [*prior, *records])
            records.append(
                StepRecord(index=index, name=step.name, ok=True, detail=result.detail)
            )
            self._logger.debug("step succeeded", extra={"step": step.name})
        return records

    def _failure(
        self,
        step: Step,
        index: int,
        result: StepResult,
        records: list[StepRecord],
    ) -> StepFailure:
        """Run the step's cleanup, log diagnostics and build the StepFailure."""
        history = [
            *records,
            StepRecord(index=index, name=step.name, ok=False, detail=result.detail),
        ]
        try:
            artifact = step.cleanup() if step.cleanup is not None else None
        except OSError as exc:
            # The step failure is still what gets reported.
            self._logger.warning(
                "Cleanup after %s failed: %s", step.name, exc, extra={"step": step.name}
            )
            self._report(step, result, None)
            raise StepFailure(
                index=index,
                step=step.name,
                reason=step.failure_message,
                records=history,
            ) from exc
        self._report(step, result, artifact)
        return StepFailure(
            index=index,
            step=step.name,
            reason=step.failure_message,
            artifact=artifact,
            records=history,
        )

    def _report(self, step: Step, result: StepResult, artifact: Path | None) -> None:
        self._logger.error(step.failure_message, extra={"step": step.name})
        if result.detail:
            self._logger.error(
                "Step %s failed: %s",
                step.name,
                result.detail,
                extra={"step": step.name},
            )
        if artifact is not None:
            self._logger.error(
                "Diagnostic log saved to %s",
                artifact,
                extra={"step": step.name, "path": str(artifact)},
            )
