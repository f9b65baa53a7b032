from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from core.models import GateProbe


@dataclass(frozen=True)
class CommandResult:
    """Exit status and captured output of one external command."""

    args: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def describe(self) -> str:
        cmd = " ".join(self.args)
        tail = self.stderr.strip().splitlines()[-1:] if self.stderr.strip() else []
        suffix = f": {tail[0]}" if tail else ""
        return f"'{cmd}' exited with status {self.returncode}{suffix}"


class CommandRunner(Protocol):
    """Runs an external command without a shell."""

    def run(
        self, cmd: Sequence[str], *, cwd: Path | None = None, capture: bool = False
    ) -> CommandResult: ...


class PackageQuery(Protocol):
    """Install status lookup in the system package database."""

    def is_installed(self, package: str) -> bool: ...


class Fetcher(Protocol):
    """Retrieves a URL into a local file."""

    def fetch(self, url: str, dest: Path) -> CommandResult: ...


class Extractor(Protocol):
    def extract(self, archive: Path, dest: Path) -> CommandResult: ...


class Builder(Protocol):
    """Configures and compiles a source tree; also answers version probes."""

    def configure(
        self, source: Path, build_dir: Path, options: Mapping[str, str]
    ) -> CommandResult: ...

    def build(self, build_dir: Path, jobs: int) -> CommandResult: ...

    def version_at_least(self, minimum: str, scratch: Path) -> GateProbe: ...


class DesktopRegistry(Protocol):
    """System-wide MIME and desktop-file registration."""

    def update_mime_database(self, mime_dir: Path) -> CommandResult: ...

    def install_mime_package(self, package_file: Path) -> CommandResult: ...
