from __future__ import annotations

import logging
import shutil
from pathlib import Path

import pytest

from core.errors import StepFailure
from core.workspace import TemporaryWorkspace


def test_workspace_is_created_under_root_and_removed(tmp_path: Path) -> None:
    ws = TemporaryWorkspace(logging.getLogger("t"), root=tmp_path)
    with ws:
        (ws.path / "BUILD").mkdir()
        assert ws.path.parent == tmp_path
    assert not ws.path.exists()
    assert ws.cleanup_ok is True


def test_workspace_removed_when_body_raises(tmp_path: Path) -> None:
    ws = TemporaryWorkspace(logging.getLogger("t"), root=tmp_path)
    with pytest.raises(RuntimeError), ws:
        raise RuntimeError("halt")
    assert list(tmp_path.iterdir()) == []


def test_removal_failure_is_reported_not_raised(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    monkeypatch.setattr(shutil, "rmtree", lambda *_a, **_k: None)
    ws = TemporaryWorkspace(logging.getLogger("t"), root=tmp_path)
    with caplog.at_level(logging.WARNING), ws:
        pass
    assert ws.cleanup_ok is False
    assert "Could not remove temporary files." in caplog.text


def test_missing_root_is_a_step_failure(tmp_path: Path) -> None:
    ws = TemporaryWorkspace(logging.getLogger("t"), root=tmp_path / "absent")
    with pytest.raises(StepFailure) as info, ws:
        pass
    assert info.value.step == "create-workspace"
    assert info.value.index is None
    assert info.value.result.halted_at is None
    assert info.value.result.halted_step == "create-workspace"
    assert "$TMPDIR" in info.value.reason


def test_path_before_enter_raises() -> None:
    with pytest.raises(RuntimeError):
        _ = TemporaryWorkspace(logging.getLogger("t")).path
