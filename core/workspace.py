from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path
from types import TracebackType

from core.errors import StepFailure

WORKSPACE_STEP = "create-workspace"

_CREATE_FAILED = (
    "The Filesystem Hierarchy-standard directory /tmp does not exist, $TMPDIR "
    "is not set, or some strange permissions issue exists with root and one of "
    "these locations. Resolve the issue by creating that directory; inspect "
    "this installer, and your system, as other issues may exist."
)


class TemporaryWorkspace:
    """Private temporary directory owned by one pipeline run.

    Removed on exit whether the pipeline completed or halted. A failed
    removal is reported and recorded in ``cleanup_ok`` but never raised.
    """

    def __init__(
        self,
        logger: logging.Logger,
        *,
        root: Path | None = None,
        prefix: str = "slim-install-",
    ) -> None:
        self._logger = logger
        self._root = root
        self._prefix = prefix
        self._path: Path | None = None
        self.cleanup_ok = True

    @property
    def path(self) -> Path:
        if self._path is None:
            raise RuntimeError("workspace has not been entered")
        return self._path

    def __enter__(self) -> TemporaryWorkspace:
        try:
            created = tempfile.mkdtemp(
                prefix=self._prefix,
                dir=str(self._root) if self._root is not None else None,
            )
        except OSError as exc:
            self._logger.error(_CREATE_FAILED, extra={"step": WORKSPACE_STEP})
            # Not one of the plan's numbered steps.
            raise StepFailure(
                index=None, step=WORKSPACE_STEP, reason=_CREATE_FAILED
            ) from exc
        self._path = Path(created)
        self._logger.debug("workspace created", extra={"path": created})
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.cleanup_ok = self.remove()

    def remove(self) -> bool:
        """Delete the workspace tree; return whether it is gone."""
        if self._path is None:
            return True
        shutil.rmtree(self._path, ignore_errors=True)
        if self._path.exists():
            self._logger.warning(
                "Could not remove temporary files.", extra={"path": str(self._path)}
            )
            return False
        self._logger.debug("workspace removed", extra={"path": str(self._path)})
        return True
