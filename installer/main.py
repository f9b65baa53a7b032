from __future__ import annotations

import logging

from core.errors import InstallError
from installer.config import Settings
from installer.errors import code_for, exit_status_for
from installer.logging import get_logger, setup_logging
from installer.models import InstallReport
from installer.pipeline import SlimInstaller
from installer.tools import (
    CMakeBuilder,
    CurlFetcher,
    DpkgPackageQuery,
    SubprocessRunner,
    UnzipExtractor,
    WgetFetcher,
    XdgDesktopRegistry,
)


def create_installer(settings: Settings, logger: logging.Logger) -> SlimInstaller:
    """Wire the installer to the real system tools."""
    runner = SubprocessRunner(logger)
    return SlimInstaller(
        settings=settings,
        logger=logger,
        packages=DpkgPackageQuery(runner),
        fetchers=[("curl", CurlFetcher(runner)), ("wget", WgetFetcher(runner))],
        extractor=UnzipExtractor(runner),
        builder=CMakeBuilder(runner),
        registry=XdgDesktopRegistry(runner),
    )


def _log_report(
    logger: logging.Logger, settings: Settings, report: InstallReport
) -> None:
    # Operators reading plain text get the summary only at DEBUG.
    level = logging.INFO if settings.log_format == "json" else logging.DEBUG
    payload = report.model_dump(mode="json")
    logger.log(level, "install report", extra={"report": payload})


def main(installer: SlimInstaller | None = None) -> int:
    settings = Settings.from_env()
    setup_logging(settings.log_level, settings.log_format)
    logger = get_logger(__name__)
    slim = installer or create_installer(settings, logger)
    try:
        result = slim.run()
    except InstallError as exc:
        code = code_for(exc)
        _log_report(logger, settings, InstallReport.from_result(exc.result, code=code))
        raise SystemExit(exit_status_for(exc)) from exc
    _log_report(logger, settings, InstallReport.from_result(result))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
