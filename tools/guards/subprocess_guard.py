"""Forbid shell interpretation of commands.

The installer runs as root with URLs and paths taken from the environment,
so every external command must be an argument list: no ``shell=True`` and
no ``os.system`` / ``os.popen``.
"""
from __future__ import annotations

import ast
import sys
from pathlib import Path

from tools.guards import iter_python_files, parse, report

_OS_SHELL_CALLS = {"system", "popen"}


def _is_true(node: ast.expr) -> bool:
    return isinstance(node, ast.Constant) and node.value is True


def check_path(path: Path) -> list[str]:
    _, tree = parse(path)
    errors: list[str] = []
    for node in ast.walk(tree):
        if not isinstance(node, ast.Call):
            continue
        for kw in node.keywords:
            if kw.arg == "shell" and _is_true(kw.value):
                errors.append(f"{path}:{node.lineno} 'shell=True' is forbidden")
        func = node.func
        if (
            isinstance(func, ast.Attribute)
            and isinstance(func.value, ast.Name)
            and func.value.id == "os"
            and func.attr in _OS_SHELL_CALLS
        ):
            errors.append(f"{path}:{node.lineno} forbidden use of os.{func.attr}()")
    return errors


def run(roots: list[str]) -> int:
    errors: list[str] = []
    for path in iter_python_files(roots):
        errors.extend(check_path(path))
    return report(errors)


def main() -> int:
    return run(sys.argv[1:])


if __name__ == "__main__":
    raise SystemExit(main())
