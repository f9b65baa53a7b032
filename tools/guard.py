"""Repository guard checks for the installer.

Enforced on every Python file under the scanned roots:
- No use of typing.Any or casts, no "type: ignore" comments
- No bare except, and every handler re-raises
- No print; operator output goes through logging
- No shell interpretation of external commands

Run with ``python -m tools.guard``.
"""
from __future__ import annotations

from collections.abc import Callable

from tools.guards import exceptions_guard, logging_guard, subprocess_guard, typing_guard

Runner = Callable[[list[str]], int]

DEFAULT_ROOTS = ["core", "installer", "tests", "tools"]


def run_guards(roots: list[str]) -> int:
    runners: list[Runner] = [
        typing_guard.run,
        exceptions_guard.run,
        logging_guard.run,
        subprocess_guard.run,
    ]
    for runner in runners:
        rc = runner(roots)
        if rc != 0:
            return rc
    return 0


def main() -> int:
    return run_guards(DEFAULT_ROOTS)


if __name__ == "__main__":
    raise SystemExit(main())
