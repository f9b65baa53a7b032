from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from core.errors import InsufficientPrivileges
from core.models import (
    Alternative,
    CapabilityGate,
    GateProbe,
    PipelinePlan,
    PipelineResult,
    Precondition,
    Step,
    StepResult,
)
from core.runner import GuardedPipeline
from core.selector import select_alternative
from installer.config import Settings
from installer.types import (
    Builder,
    CommandResult,
    DesktopRegistry,
    Extractor,
    Fetcher,
    PackageQuery,
)

ARCHIVE_NAME = "SLiM.zip"
SOURCE_DIR = "SLiM"
BUILD_DIR = "BUILD"
BINARIES = ("slim", "eidos", "SLiMgui")
BUILD_OPTIONS: Mapping[str, str] = {"BUILD_SLIMGUI": "ON"}

QT_PACKAGES = ("qt5-qmake", "qtchooser", "qtbase5-dev")
FETCH_TOOLS = ("curl", "wget")
PACKAGES = ("cmake", *QT_PACKAGES, "unzip", *FETCH_TOOLS)

CMAKE_LOGS = ("CMakeFiles/CMakeOutput.log", "CMakeFiles/CMakeConfigureLog.yaml")

_SUPPORT = "Please see the output and make a post on the slim-discuss mailing list."

ROOT_REQUIRED = "This script must be run by root. Invoke the script with sudo."
QT_MISSING = (
    "All of: qt5-qmake, qtchooser, and qtbase5-dev must be installed. Install "
    "the Qt5 requirements with 'sudo apt install qtbase5-dev qtchooser "
    "qt5-qmake'. Installing these packages ensures all build and runtime "
    "requirements are satisfied."
)
CMAKE_MISSING = "cmake is not installed. Install it with 'sudo apt install cmake'."
UNZIP_MISSING = "unzip is not installed. Install it with 'sudo apt install unzip'."
NO_DOWNLOADER = (
    "Neither curl nor wget are installed. Install either with one of: "
    "'sudo apt install wget', OR 'sudo apt install curl'."
)
FETCH_FAILED = f"Failed to download {ARCHIVE_NAME} or unzip it."
BUILD_DIR_FAILED = (
    "Unable to create the BUILD directory in the temporary workspace. It likely "
    "already exists. Try again after deleting it."
)
BUILD_FAILED = (
    f"Build failed. {_SUPPORT} The CMake output from this build is saved in the "
    "log directory as SLiM-CMakeOutput-<timestamp>.log. You may be asked to "
    "upload this file during a support request."
)
DIRS_FAILED = (
    "Some directory necessary for installation was not successfully created. "
    f"{_SUPPORT}"
)
INSTALL_FAILED = f"Installation of the SLiM executables was unsuccessful. {_SUPPORT}"
PROBE_FAILED = (
    "Could not determine the CMake version, so desktop integration cannot be "
    f"decided. {_SUPPORT}"
)
DESKTOP_FAILED = f"Desktop integration failed. {_SUPPORT}"


@dataclass(frozen=True)
class DesktopFile:
    """A FreeDesktop integration file shipped in the source tree."""

    source: str
    target_dir: str
    target_name: str

    def target(self, share_dir: Path) -> Path:
        return share_dir / self.target_dir / self.target_name


DESKTOP_FILES: tuple[DesktopFile, ...] = (
    DesktopFile(
        "QtSLiM/icons/AppIcon64.svg",
        "icons/hicolor/scalable/apps",
        "org.messerlab.slimgui.svg",
    ),
    DesktopFile(
        "QtSLiM/icons/DocIcon.svg",
        "icons/hicolor/scalable/mimetypes",
        "text-slim.svg",
    ),
    DesktopFile(
        "org.messerlab.slimgui-mime.xml",
        "mime/packages",
        "org.messerlab.slimgui-mime.xml",
    ),
    DesktopFile(
        "org.messerlab.slimgui.desktop",
        "applications",
        "org.messerlab.slimgui.desktop",
    ),
    DesktopFile(
        "org.messerlab.slimgui.appdata.xml",
        "metainfo",
        "org.messerlab.slimgui.appdata.xml",
    ),
)
MIME_PACKAGE = next(f for f in DESKTOP_FILES if f.target_dir == "mime/packages")


def _local_now() -> datetime:
    return datetime.now().astimezone()


def _command_step(result: CommandResult) -> StepResult:
    return StepResult.success() if result.ok else StepResult.failure(result.describe())


class SlimInstaller:
    """Downloads, builds and installs SLiM; collaborators are injected explicitly."""

    def __init__(
        self,
        *,
        settings: Settings,
        logger: logging.Logger,
        packages: PackageQuery,
        fetchers: Sequence[tuple[str, Fetcher]],
        extractor: Extractor,
        builder: Builder,
        registry: DesktopRegistry,
        euid: Callable[[], int] = os.geteuid,
        clock: Callable[[], datetime] = _local_now,
    ) -> None:
        self._settings = settings
        self._logger = logger
        self._packages = packages
        self._fetchers = fetchers
        self._extractor = extractor
        self._builder = builder
        self._registry = registry
        self._euid = euid
        self._clock = clock

    def run(self) -> PipelineResult:
        """Run the whole installation and return the completed result.

        Raises an InstallError subclass carrying the halted result on any
        failure. Nothing is mutated unless every required package is present.
        """
        if self._euid() != 0:
            self._logger.error(ROOT_REQUIRED)
            raise InsufficientPrivileges(ROOT_REQUIRED)

        installed = self.query_packages()
        result = GuardedPipeline(self._logger).run(
            preconditions=self.preconditions(installed),
            plan=lambda _report, workspace: self.plan(installed, workspace),
            workspace_root=self._settings.tmp_dir,
        )
        if result.gate == "passed":
            self._logger.info("Desktop integration was successful.")
        self._logger.info("Installation successful!")
        return result

    def query_packages(self) -> dict[str, bool]:
        """Query each package once; every later decision reads this snapshot."""
        names = dict.fromkeys([*PACKAGES, *(name for name, _ in self._fetchers)])
        return {name: self._packages.is_installed(name) for name in names}

    def preconditions(self, installed: Mapping[str, bool]) -> list[Precondition]:
        fetch_names = [name for name, _ in self._fetchers]
        return [
            Precondition(
                name="qt5",
                check=lambda: all(installed.get(p, False) for p in QT_PACKAGES),
                remediation=QT_MISSING,
            ),
            Precondition(
                name="cmake",
                check=lambda: installed.get("cmake", False),
                remediation=CMAKE_MISSING,
            ),
            Precondition(
                name="unzip",
                check=lambda: installed.get("unzip", False),
                remediation=UNZIP_MISSING,
            ),
            # Not required here: the selector aborts later when neither exists.
            Precondition(
                name="download-tool",
                check=lambda: any(installed.get(n, False) for n in fetch_names),
                remediation=NO_DOWNLOADER,
                required=False,
            ),
        ]

    def plan(self, installed: Mapping[str, bool], workspace: Path) -> PipelinePlan:
        chosen = select_alternative(
            [
                Alternative(name=n, available=installed.get(n, False), mechanism=f)
                for n, f in self._fetchers
            ],
            unavailable_message=NO_DOWNLOADER,
            logger=self._logger,
        )
        fetcher = chosen.mechanism
        archive = workspace / ARCHIVE_NAME
        source = workspace / SOURCE_DIR
        build_dir = workspace / BUILD_DIR

        steps = [
            Step(
                name="fetch-archive",
                action=lambda: _command_step(
                    fetcher.fetch(self._settings.archive_url, archive)
                ),
                failure_message=FETCH_FAILED,
            ),
            Step(
                name="extract-archive",
                action=lambda: self._extract(archive, workspace, source),
                failure_message=FETCH_FAILED,
            ),
            Step(
                name="create-build-directory",
                action=lambda: self._create_build_dir(build_dir),
                failure_message=BUILD_DIR_FAILED,
            ),
            Step(
                name="build",
                action=lambda: self._build(source, build_dir),
                failure_message=BUILD_FAILED,
                cleanup=lambda: self.save_build_log(build_dir),
            ),
            Step(
                name="create-install-directories",
                action=self._create_install_dirs,
                failure_message=DIRS_FAILED,
            ),
            Step(
                name="install-binaries",
                action=lambda: self._install_binaries(build_dir),
                failure_message=INSTALL_FAILED,
            ),
        ]
        gate = CapabilityGate(
            name="desktop-integration",
            probe=lambda: self._probe_cmake(workspace),
            steps=self.desktop_steps(source),
            failure_message=PROBE_FAILED,
        )
        return PipelinePlan(steps=steps, gate=gate)

    def desktop_steps(self, source: Path) -> list[Step]:
        share = self._settings.share_dir
        steps = [
            self._place_step(source / f.source, f.target(share)) for f in DESKTOP_FILES
        ]
        mime_package = MIME_PACKAGE.target(share)
        steps.extend(
            [
                Step(
                    name="update-mime-database",
                    action=lambda: _command_step(
                        self._registry.update_mime_database(share / "mime")
                    ),
                    failure_message=DESKTOP_FAILED,
                ),
                Step(
                    name="register-mime-package",
                    action=lambda: _command_step(
                        self._registry.install_mime_package(mime_package)
                    ),
                    failure_message=DESKTOP_FAILED,
                ),
            ]
        )
        return steps

    def save_build_log(self, build_dir: Path) -> Path | None:
        """Move the CMake log out of the workspace under a timestamped name."""
        log = next(
            (build_dir / rel for rel in CMAKE_LOGS if (build_dir / rel).is_file()), None
        )
        if log is None:
            self._logger.warning(
                "CMake produced no log to save.", extra={"step": "build"}
            )
            return None
        stamp = self._clock().isoformat(timespec="seconds")
        self._settings.log_dir.mkdir(parents=True, exist_ok=True)
        dest = self._settings.log_dir / f"SLiM-CMakeOutput-{stamp}.log"
        shutil.move(str(log), str(dest))
        return dest

    def _extract(self, archive: Path, workspace: Path, source: Path) -> StepResult:
        result = self._extractor.extract(archive, workspace)
        if not result.ok:
            return StepResult.failure(result.describe())
        if not source.is_dir():
            return StepResult.failure(f"{archive.name} did not contain {SOURCE_DIR}/")
        return StepResult.success()

    def _create_build_dir(self, build_dir: Path) -> StepResult:
        build_dir.mkdir()
        return StepResult.success(str(build_dir))

    def _build(self, source: Path, build_dir: Path) -> StepResult:
        configured = self._builder.configure(source, build_dir, BUILD_OPTIONS)
        if not configured.ok:
            return StepResult.failure(configured.describe())
        return _command_step(self._builder.build(build_dir, self._settings.jobs))

    def _create_install_dirs(self) -> StepResult:
        share = self._settings.share_dir
        dirs = [self._settings.bin_dir, *(share / f.target_dir for f in DESKTOP_FILES)]
        for d in dirs:
            d.mkdir(parents=True, exist_ok=True)
        return StepResult.success()

    def _install_binaries(self, build_dir: Path) -> StepResult:
        missing = [name for name in BINARIES if not (build_dir / name).is_file()]
        if missing:
            produced = ", ".join(missing)
            return StepResult.failure(f"not produced by the build: {produced}")
        for name in BINARIES:
            dest = self._settings.bin_dir / name
            shutil.copy2(build_dir / name, dest)
            dest.chmod(0o755)
            self._logger.info("Installed %s", dest, extra={"path": str(dest)})
        return StepResult.success(str(self._settings.bin_dir))

    def _probe_cmake(self, workspace: Path) -> GateProbe:
        self._logger.info(
            "Installation to %s was successful. Checking whether CMake supports "
            "desktop integration.",
            self._settings.bin_dir,
        )
        minimum = self._settings.min_cmake_version
        return self._builder.version_at_least(minimum, workspace)

    def _place_step(self, src: Path, dest: Path) -> Step:
        return Step(
            name=f"place-{dest.name}",
            action=lambda: self._relocate(src, dest),
            failure_message=DESKTOP_FAILED,
        )

    def _relocate(self, src: Path, dest: Path) -> StepResult:
        if not src.is_file():
            return StepResult.failure(f"{src.name} is missing from the source tree")
        shutil.move(str(src), str(dest))
        return StepResult.success(str(dest))
