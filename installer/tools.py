"""Subprocess-backed implementations of the installer's capability Protocols."""

from __future__ import annotations

import logging
import shutil
import subprocess
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path

from core.models import GateProbe
from installer.errors import UnsupportedSystem
from installer.types import CommandResult, CommandRunner

INSTALLED_STATUS = "Status: install ok installed"

_PROBE_OK = "SLIM_INSTALL_CMAKE_OK"
_PROBE_BELOW = "SLIM_INSTALL_CMAKE_BELOW"


class SubprocessRunner:
    """Runs commands with ``subprocess.run`` and never through a shell.

    Uncaptured commands inherit the terminal so long builds stream their
    output to the operator.
    """

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def run(
        self, cmd: Sequence[str], *, cwd: Path | None = None, capture: bool = False
    ) -> CommandResult:
        args = tuple(str(c) for c in cmd)
        self._logger.debug("running command", extra={"command": " ".join(args)})
        proc = subprocess.run(
            args,
            cwd=str(cwd) if cwd is not None else None,
            capture_output=capture,
            text=True,
            check=False,
        )
        return CommandResult(
            args=args,
            returncode=proc.returncode,
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
        )


class DpkgPackageQuery:
    """Package presence from the dpkg database, as reported by ``dpkg-query -s``."""

    def __init__(
        self,
        runner: CommandRunner,
        *,
        which: Callable[[str], str | None] = shutil.which,
    ) -> None:
        self._runner = runner
        self._which = which

    def is_installed(self, package: str) -> bool:
        if self._which("dpkg-query") is None:
            raise UnsupportedSystem(
                "dpkg-query was not found; this installer supports Debian and "
                "Ubuntu systems only."
            )
        result = self._runner.run(["dpkg-query", "-s", package], capture=True)
        if not result.ok:
            return False
        lines = result.stdout.splitlines()
        return any(line.strip() == INSTALLED_STATUS for line in lines)


class CurlFetcher:
    def __init__(self, runner: CommandRunner) -> None:
        self._runner = runner

    def fetch(self, url: str, dest: Path) -> CommandResult:
        return self._runner.run(
            ["curl", "--fail", "--location", "--output", str(dest), url]
        )


class WgetFetcher:
    def __init__(self, runner: CommandRunner) -> None:
        self._runner = runner

    def fetch(self, url: str, dest: Path) -> CommandResult:
        return self._runner.run(["wget", "--output-document", str(dest), url])


class UnzipExtractor:
    def __init__(self, runner: CommandRunner) -> None:
        self._runner = runner

    def extract(self, archive: Path, dest: Path) -> CommandResult:
        return self._runner.run(["unzip", "-q", "-o", str(archive), "-d", str(dest)])


class CMakeBuilder:
    """Configures in the build directory, then builds with the native tool."""

    def __init__(self, runner: CommandRunner) -> None:
        self._runner = runner

    def configure(
        self, source: Path, build_dir: Path, options: Mapping[str, str]
    ) -> CommandResult:
        defines: list[str] = []
        for key, value in options.items():
            defines.extend(["-D", f"{key}={value}"])
        return self._runner.run(["cmake", *defines, str(source)], cwd=build_dir)

    def build(self, build_dir: Path, jobs: int) -> CommandResult:
        # "--parallel" needs CMake 3.12; pass the job count to make instead.
        return self._runner.run(
            ["cmake", "--build", ".", "--", f"-j{jobs}"], cwd=build_dir
        )

    def version_at_least(self, minimum: str, scratch: Path) -> GateProbe:
        """Ask CMake itself whether ``CMAKE_VERSION`` is at least ``minimum``."""
        script = scratch / "cmake-version-probe.cmake"
        script.write_text(_probe_script(minimum), encoding="utf-8")
        result = self._runner.run(["cmake", "-P", str(script)], capture=True)
        if not result.ok:
            return GateProbe(ran=False, holds=False, detail=result.describe())
        output = f"{result.stdout}\n{result.stderr}"
        if _PROBE_OK in output:
            return GateProbe(ran=True, holds=True, detail=f"CMake >= {minimum}")
        if _PROBE_BELOW in output:
            return GateProbe(
                ran=True, holds=False, detail=f"CMake is older than {minimum}"
            )
        detail = f"unexpected probe output: {output.strip()!r}"
        return GateProbe(ran=False, holds=False, detail=detail)


class XdgDesktopRegistry:
    def __init__(self, runner: CommandRunner) -> None:
        self._runner = runner

    def update_mime_database(self, mime_dir: Path) -> CommandResult:
        return self._runner.run(["update-mime-database", "-n", str(mime_dir)])

    def install_mime_package(self, package_file: Path) -> CommandResult:
        return self._runner.run(
            ["xdg-mime", "install", "--mode", "system", str(package_file)]
        )


def _probe_script(minimum: str) -> str:
    return (
        f'if(CMAKE_VERSION VERSION_LESS "{minimum}")\n'
        f'  message("{_PROBE_BELOW} ${{CMAKE_VERSION}}")\n'
        "else()\n"
        f'  message("{_PROBE_OK} ${{CMAKE_VERSION}}")\n'
        "endif()\n"
    )
