from __future__ import annotations

import logging
from collections.abc import Sequence

from core.errors import PrecheckFailure
from core.models import Decision, Precondition, PrecheckReport, PreconditionStatus


def check_preconditions(
    preconditions: Sequence[Precondition], *, logger: logging.Logger
) -> PrecheckReport:
    """Evaluate every precondition and report each unsatisfied one.

    All checks run even after one fails so the operator sees every missing
    dependency at once. Remediations are logged in declared order.
    """
    statuses = tuple(
        PreconditionStatus(
            name=p.name,
            satisfied=bool(p.check()),
            remediation=p.remediation,
            required=p.required,
        )
        for p in preconditions
    )

    for status in statuses:
        if status.satisfied:
            logger.debug("precondition satisfied", extra={"precondition": status.name})
            continue
        level = logging.ERROR if status.required else logging.WARNING
        logger.log(level, status.remediation, extra={"precondition": status.name})

    decision: Decision = (
        "abort" if any(s.required and not s.satisfied for s in statuses) else "proceed"
    )
    return PrecheckReport(statuses=statuses, decision=decision)


def require_proceed(report: PrecheckReport) -> None:
    """Raise PrecheckFailure when the report's decision is to abort."""
    if report.decision == "proceed":
        return
    missing = [s.name for s in report.statuses if s.required and not s.satisfied]
    raise PrecheckFailure(missing=missing)
