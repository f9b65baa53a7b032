from __future__ import annotations

import logging
from collections.abc import Sequence

from core.errors import StepFailure
from core.models import CapabilityGate, GateDecision, StepRecord
from core.sequencer import GuardedSequencer


def run_gate(
    gate: CapabilityGate,
    sequencer: GuardedSequencer,
    *,
    prior: Sequence[StepRecord],
    logger: logging.Logger,
) -> tuple[GateDecision, list[StepRecord]]:
    """Probe a capability and run the gated steps only when it holds.

    A probe that cannot answer halts the pipeline instead of skipping the
    gate. A probe that answers "no" skips the steps and is not a failure.
    """
    try:
        probe = gate.probe()
    except OSError as exc:
        raise _halt(gate, prior, str(exc), logger) from exc

    if not probe.ran:
        raise _halt(gate, prior, probe.detail, logger)

    if not probe.holds:
        logger.info(
            "Skipping %s: %s",
            gate.name,
            probe.detail or "capability not present",
            extra={"step": gate.name},
        )
        return "skipped", []

    logger.info("Proceeding with %s", gate.name, extra={"step": gate.name})
    return "passed", sequencer.run(gate.steps, prior=prior)


def _halt(
    gate: CapabilityGate,
    prior: Sequence[StepRecord],
    detail: str,
    logger: logging.Logger,
) -> StepFailure:
    index = len(prior)
    logger.error(gate.failure_message, extra={"step": gate.name})
    if detail:
        logger.error("Probe output: %s", detail, extra={"step": gate.name})
    failed = StepRecord(index=index, name=gate.name, ok=False, detail=detail)
    return StepFailure(
        index=index,
        step=gate.name,
        reason=gate.failure_message,
        records=[*prior, failed],
    )
