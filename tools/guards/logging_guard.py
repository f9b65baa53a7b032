from __future__ import annotations

import ast
import sys
from pathlib import Path

from tools.guards import iter_python_files, parse, report

# Writing to the terminal goes through logging so every message shares one
# format and level filter.
_FORBIDDEN_CALLS = {"print", "pprint"}


def check_path(path: Path) -> list[str]:
    _, tree = parse(path)
    return [
        f"{path}:{n.lineno} use logger; '{n.func.id}' is forbidden"
        for n in ast.walk(tree)
        if (
            isinstance(n, ast.Call)
            and isinstance(n.func, ast.Name)
            and n.func.id in _FORBIDDEN_CALLS
        )
    ]


def run(roots: list[str]) -> int:
    errors: list[str] = []
    for path in iter_python_files(roots):
        errors.extend(check_path(path))
    return report(errors)


def main() -> int:
    return run(sys.argv[1:])


if __name__ == "__main__":
    raise SystemExit(main())
