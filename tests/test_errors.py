from __future__ import annotations

import pytest

from core.errors import (
    InstallError,
    InsufficientPrivileges,
    PrecheckFailure,
    ResourceUnavailable,
    StepFailure,
)
from installer.errors import UnsupportedSystem, code_for, exit_status_for


@pytest.mark.parametrize(
    ("exc", "code", "status"),
    [
        (InsufficientPrivileges("root"), "PERMISSION_DENIED", 1),
        (UnsupportedSystem("no dpkg"), "UNSUPPORTED_SYSTEM", 1),
        (PrecheckFailure(missing=["cmake"]), "PRECHECK_FAILED", 2),
        (
            ResourceUnavailable("none", alternatives=["curl", "wget"]),
            "RESOURCE_UNAVAILABLE",
            3,
        ),
        (StepFailure(index=3, step="build", reason="Build failed."), "STEP_FAILED", 4),
        (InstallError("other"), "INTERNAL_ERROR", 70),
    ],
)
def test_code_and_exit_status(exc: InstallError, code: str, status: int) -> None:
    assert code_for(exc) == code
    assert exit_status_for(exc) == status
    assert exit_status_for(exc) != 0


def test_every_install_error_carries_a_halted_result() -> None:
    exc = StepFailure(index=2, step="build", reason="Build failed.")
    assert exc.result.status == "halted"
    assert exc.result.halted_at == 2
    assert exc.result.halted_step == "build"
    assert exc.result.reason == "Build failed."

    plain = PrecheckFailure(missing=["qt5", "cmake"])
    assert plain.result.status == "halted"
    assert plain.result.halted_at is None
    assert "qt5, cmake" in str(plain)
