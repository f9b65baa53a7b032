from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

LogFormat = Literal["text", "json"]

DEFAULT_ARCHIVE_URL = "http://benhaller.com/slim/SLiM.zip"


def _env(name: str, default: str) -> str:
    return os.getenv(name, default).strip() or default


def _jobs(name: str, raw: str) -> int:
    if not raw:
        return os.cpu_count() or 1
    if not raw.isdecimal() or int(raw) < 1:
        raise ValueError(f"{name} must be a positive integer, got {raw!r}")
    return int(raw)


@dataclass(frozen=True)
class Settings:
    """Installer settings loaded from environment in a type-safe, framework-free way."""

    archive_url: str
    bin_dir: Path
    share_dir: Path
    log_dir: Path
    tmp_dir: Path | None
    jobs: int
    min_cmake_version: str
    log_level: str
    log_format: LogFormat

    @staticmethod
    def from_env() -> Settings:
        prefix = "SLIM_INSTALL_"
        tmp_raw = os.getenv(f"{prefix}TMP_DIR", "").strip()
        jobs_raw = os.getenv(f"{prefix}JOBS", "").strip()
        jobs = _jobs(f"{prefix}JOBS", jobs_raw)
        fmt = _env(f"{prefix}LOG_FORMAT", "text").lower()
        log_format: LogFormat = "json" if fmt == "json" else "text"
        return Settings(
            archive_url=_env(f"{prefix}ARCHIVE_URL", DEFAULT_ARCHIVE_URL),
            bin_dir=Path(_env(f"{prefix}BIN_DIR", "/usr/bin")),
            share_dir=Path(_env(f"{prefix}SHARE_DIR", "/usr/share")),
            log_dir=Path(_env(f"{prefix}LOG_DIR", "/var/log")),
            tmp_dir=Path(tmp_raw) if tmp_raw else None,
            jobs=jobs,
            min_cmake_version=_env(f"{prefix}MIN_CMAKE_VERSION", "3.14"),
            log_level=_env(f"{prefix}LOG_LEVEL", "INFO").upper(),
            log_format=log_format,
        )
