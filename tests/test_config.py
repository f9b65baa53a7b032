from __future__ import annotations

from pathlib import Path

import pytest

from installer.config import DEFAULT_ARCHIVE_URL, Settings

_VARS = (
    "ARCHIVE_URL",
    "BIN_DIR",
    "SHARE_DIR",
    "LOG_DIR",
    "TMP_DIR",
    "JOBS",
    "MIN_CMAKE_VERSION",
    "LOG_LEVEL",
    "LOG_FORMAT",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _VARS:
        monkeypatch.delenv(f"SLIM_INSTALL_{name}", raising=False)


def test_defaults_match_system_locations(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("os.cpu_count", lambda: 6)
    s = Settings.from_env()
    assert s.archive_url == DEFAULT_ARCHIVE_URL
    assert s.bin_dir == Path("/usr/bin")
    assert s.share_dir == Path("/usr/share")
    assert s.log_dir == Path("/var/log")
    assert s.tmp_dir is None
    assert s.jobs == 6
    assert s.min_cmake_version == "3.14"
    assert s.log_level == "INFO"
    assert s.log_format == "text"


def test_overrides_and_blank_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SLIM_INSTALL_BIN_DIR", "/opt/slim/bin")
    monkeypatch.setenv("SLIM_INSTALL_SHARE_DIR", "   ")
    monkeypatch.setenv("SLIM_INSTALL_TMP_DIR", "/scratch")
    monkeypatch.setenv("SLIM_INSTALL_JOBS", "2")
    monkeypatch.setenv("SLIM_INSTALL_LOG_LEVEL", "debug")
    monkeypatch.setenv("SLIM_INSTALL_LOG_FORMAT", "JSON")
    s = Settings.from_env()
    assert s.bin_dir == Path("/opt/slim/bin")
    assert s.share_dir == Path("/usr/share")
    assert s.tmp_dir == Path("/scratch")
    assert s.jobs == 2
    assert s.log_level == "DEBUG"
    assert s.log_format == "json"


def test_unknown_log_format_falls_back_to_text(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SLIM_INSTALL_LOG_FORMAT", "xml")
    assert Settings.from_env().log_format == "text"


@pytest.mark.parametrize("raw", ["0", "-3", "four", "2.5"])
def test_invalid_jobs_rejected(monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
    monkeypatch.setenv("SLIM_INSTALL_JOBS", raw)
    with pytest.raises(ValueError, match="JOBS must be a positive integer"):
        Settings.from_env()
