from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path

import pytest

from installer.errors import UnsupportedSystem
from installer.tools import (
    CMakeBuilder,
    CurlFetcher,
    DpkgPackageQuery,
    SubprocessRunner,
    UnzipExtractor,
    WgetFetcher,
    XdgDesktopRegistry,
)
from installer.types import CommandResult


class _RunnerStub:
    def __init__(
        self, *, returncode: int = 0, stdout: str = "", stderr: str = ""
    ) -> None:
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.calls: list[tuple[tuple[str, ...], Path | None, bool]] = []

    def run(
        self, cmd: Sequence[str], *, cwd: Path | None = None, capture: bool = False
    ) -> CommandResult:
        args = tuple(cmd)
        self.calls.append((args, cwd, capture))
        return CommandResult(
            args=args,
            returncode=self.returncode,
            stdout=self.stdout,
            stderr=self.stderr,
        )


_DPKG_INSTALLED = """Package: cmake
Status: install ok installed
Priority: optional
"""

_DPKG_REMOVED = """Package: cmake
Status: deinstall ok config-files
"""


def _which(_name: str) -> str | None:
    return "/usr/bin/dpkg-query"


def test_dpkg_query_reports_installed_package() -> None:
    runner = _RunnerStub(stdout=_DPKG_INSTALLED)
    assert DpkgPackageQuery(runner, which=_which).is_installed("cmake") is True
    assert runner.calls == [(("dpkg-query", "-s", "cmake"), None, True)]


def test_dpkg_query_config_files_only_is_not_installed() -> None:
    runner = _RunnerStub(stdout=_DPKG_REMOVED)
    assert DpkgPackageQuery(runner, which=_which).is_installed("cmake") is False


def test_dpkg_query_unknown_package_is_not_installed() -> None:
    runner = _RunnerStub(returncode=1, stderr="package 'x' is not installed")
    assert DpkgPackageQuery(runner, which=_which).is_installed("x") is False


def test_dpkg_query_missing_tool_raises_unsupported_system() -> None:
    runner = _RunnerStub()
    with pytest.raises(UnsupportedSystem):
        DpkgPackageQuery(runner, which=lambda _n: None).is_installed("cmake")
    assert runner.calls == []


def test_fetchers_and_extractor_build_argument_lists(tmp_path: Path) -> None:
    runner = _RunnerStub()
    dest = tmp_path / "SLiM.zip"
    CurlFetcher(runner).fetch("http://h/SLiM.zip", dest)
    WgetFetcher(runner).fetch("http://h/SLiM.zip", dest)
    UnzipExtractor(runner).extract(dest, tmp_path)

    assert [c[0] for c in runner.calls] == [
        ("curl", "--fail", "--location", "--output", str(dest), "http://h/SLiM.zip"),
        ("wget", "--output-document", str(dest), "http://h/SLiM.zip"),
        ("unzip", "-q", "-o", str(dest), "-d", str(tmp_path)),
    ]


def test_cmake_configure_and_build_run_in_build_dir(tmp_path: Path) -> None:
    runner = _RunnerStub()
    builder = CMakeBuilder(runner)
    builder.configure(tmp_path / "SLiM", tmp_path / "BUILD", {"BUILD_SLIMGUI": "ON"})
    builder.build(tmp_path / "BUILD", 8)

    assert runner.calls == [
        (
            ("cmake", "-D", "BUILD_SLIMGUI=ON", str(tmp_path / "SLiM")),
            tmp_path / "BUILD",
            False,
        ),
        (("cmake", "--build", ".", "--", "-j8"), tmp_path / "BUILD", False),
    ]


@pytest.mark.parametrize(
    ("stderr", "ran", "holds"),
    [
        ("SLIM_INSTALL_CMAKE_OK 3.22.1\n", True, True),
        ("SLIM_INSTALL_CMAKE_BELOW 3.10.2\n", True, False),
        ("something unexpected\n", False, False),
    ],
)
def test_cmake_version_probe_parses_output(
    tmp_path: Path, stderr: str, ran: bool, holds: bool
) -> None:
    runner = _RunnerStub(stderr=stderr)
    probe = CMakeBuilder(runner).version_at_least("3.14", tmp_path)

    assert (probe.ran, probe.holds) == (ran, holds)
    script = tmp_path / "cmake-version-probe.cmake"
    assert 'VERSION_LESS "3.14"' in script.read_text(encoding="utf-8")
    assert runner.calls == [(("cmake", "-P", str(script)), None, True)]


def test_cmake_version_probe_nonzero_exit_did_not_run(tmp_path: Path) -> None:
    runner = _RunnerStub(returncode=1, stderr="CMake Error: bad script")
    probe = CMakeBuilder(runner).version_at_least("3.14", tmp_path)
    assert probe.ran is False
    assert "bad script" in probe.detail


def test_desktop_registry_commands(tmp_path: Path) -> None:
    runner = _RunnerStub()
    registry = XdgDesktopRegistry(runner)
    registry.update_mime_database(tmp_path / "mime")
    registry.install_mime_package(tmp_path / "mime/packages/x-mime.xml")
    assert [c[0] for c in runner.calls] == [
        ("update-mime-database", "-n", str(tmp_path / "mime")),
        (
            "xdg-mime",
            "install",
            "--mode",
            "system",
            str(tmp_path / "mime/packages/x-mime.xml"),
        ),
    ]


def test_subprocess_runner_passes_list_and_captures(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    seen: dict[str, object] = {}

    def _fake_run(
        args: tuple[str, ...], **kwargs: object
    ) -> subprocess.CompletedProcess[str]:
        seen["args"] = args
        seen.update(kwargs)
        return subprocess.CompletedProcess(args, 3, stdout="out", stderr="err")

    monkeypatch.setattr(subprocess, "run", _fake_run)
    result = SubprocessRunner(logging.getLogger("t")).run(
        ["cmake", "-P", str(tmp_path / "p.cmake")], cwd=tmp_path, capture=True
    )

    assert seen["args"] == ("cmake", "-P", str(tmp_path / "p.cmake"))
    assert seen["cwd"] == str(tmp_path)
    assert seen["capture_output"] is True
    assert seen["check"] is False
    assert "shell" not in seen
    assert result.returncode == 3
    assert result.ok is False
    assert result.stdout == "out"
    assert "exited with status 3: err" in result.describe()
