from __future__ import annotations

import ast
import sys
import tokenize
from io import StringIO
from pathlib import Path

from tools.guards import iter_python_files, parse, report

FORBIDDEN_IMPORTS = {"Any", "cast"}


def _typing_violations(path: Path, tree: ast.Module) -> list[str]:
    errors: list[str] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.ImportFrom) and node.module == "typing":
            errors.extend(
                f"{path}:{node.lineno} forbidden typing import '{alias.name}'"
                for alias in node.names
                if alias.name in FORBIDDEN_IMPORTS
            )
        elif (
            isinstance(node, ast.Attribute)
            and isinstance(node.value, ast.Name)
            and node.value.id == "typing"
            and node.attr in FORBIDDEN_IMPORTS
        ):
            errors.append(f"{path}:{node.lineno} forbidden use of typing.{node.attr}")
        elif (
            isinstance(node, ast.Call)
            and isinstance(node.func, ast.Name)
            and node.func.id == "cast"
        ):
            errors.append(f"{path}:{node.lineno} forbidden use of cast()")
        elif isinstance(node, ast.Name) and node.id == "Any":
            errors.append(f"{path}:{node.lineno} forbidden type 'Any'")
    return errors


def _ignore_comments(path: Path, text: str) -> list[str]:
    # Tokenize so the marker inside string literals is not reported.
    reader = StringIO(text).readline
    return [
        f"{path}:{tok.start[0]} forbidden 'type: ignore'"
        for tok in tokenize.generate_tokens(reader)
        if tok.type == tokenize.COMMENT and "type: ignore" in tok.string
    ]


def check_path(path: Path) -> list[str]:
    text, tree = parse(path)
    return [*_typing_violations(path, tree), *_ignore_comments(path, text)]


def run(roots: list[str]) -> int:
    errors: list[str] = []
    for path in iter_python_files(roots):
        errors.extend(check_path(path))
    return report(errors)


def main() -> int:
    return run(sys.argv[1:])


if __name__ == "__main__":
    raise SystemExit(main())
