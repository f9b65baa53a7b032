from __future__ import annotations

import ast
import sys
from pathlib import Path

from tools.guards import iter_python_files, parse, report


def handler_has_raise(handler: ast.ExceptHandler) -> bool:
    return any(isinstance(node, ast.Raise) for node in ast.walk(handler))


def check_path(path: Path) -> list[str]:
    _, tree = parse(path)
    errors: list[str] = []
    for node in ast.walk(tree):
        if not isinstance(node, ast.ExceptHandler):
            continue
        if node.type is None:
            errors.append(f"{path}:{node.lineno} bare 'except' is forbidden")
        if not handler_has_raise(node):
            errors.append(f"{path}:{node.lineno} except without re-raise is forbidden")
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
