from __future__ import annotations

from typing import Literal

from core.errors import (
    InstallError,
    InsufficientPrivileges,
    PrecheckFailure,
    ResourceUnavailable,
    StepFailure,
)

ErrorCode = Literal[
    "PERMISSION_DENIED",
    "UNSUPPORTED_SYSTEM",
    "PRECHECK_FAILED",
    "RESOURCE_UNAVAILABLE",
    "STEP_FAILED",
    "INTERNAL_ERROR",
]

_EXIT_STATUS: dict[ErrorCode, int] = {
    "PERMISSION_DENIED": 1,
    "UNSUPPORTED_SYSTEM": 1,
    "PRECHECK_FAILED": 2,
    "RESOURCE_UNAVAILABLE": 3,
    "STEP_FAILED": 4,
    "INTERNAL_ERROR": 70,
}


class UnsupportedSystem(InstallError):
    """The host lacks the package database this installer queries."""


def code_for(exc: InstallError) -> ErrorCode:
    if isinstance(exc, InsufficientPrivileges):
        return "PERMISSION_DENIED"
    if isinstance(exc, UnsupportedSystem):
        return "UNSUPPORTED_SYSTEM"
    if isinstance(exc, PrecheckFailure):
        return "PRECHECK_FAILED"
    if isinstance(exc, ResourceUnavailable):
        return "RESOURCE_UNAVAILABLE"
    if isinstance(exc, StepFailure):
        return "STEP_FAILED"
    return "INTERNAL_ERROR"


def exit_status_for(exc: InstallError) -> int:
    """Process exit status for a halted install; always non-zero."""
    return _EXIT_STATUS[code_for(exc)]
