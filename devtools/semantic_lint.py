"""Check that validator issue codes stay consistent.

Every module-level code constant in ``structural.py`` must spell its own name,
be unique, be exported through ``__all__`` and be raised by at least one
``_push`` call.
"""

from __future__ import annotations

import ast
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
VALIDATOR_FILE = PROJECT_ROOT / "src" / "nodeflow" / "core" / "validation" / "structural.py"

# Codes that are produced outside the rule battery.
_EMITTED_ELSEWHERE = {"GRAPH_EMPTY"}


def _code_constants(tree: ast.Module) -> dict[str, tuple[int, str]]:
    codes: dict[str, tuple[int, str]] = {}
    for stmt in tree.body:
        if not isinstance(stmt, ast.Assign) or len(stmt.targets) != 1:
            continue
        target = stmt.targets[0]
        if not isinstance(target, ast.Name) or not target.id.isupper():
            continue
        if isinstance(stmt.value, ast.Constant) and isinstance(stmt.value.value, str):
            codes[target.id] = (stmt.lineno, stmt.value.value)
    return codes


def _exported(tree: ast.Module) -> set[str]:
    for stmt in tree.body:
        if (
            isinstance(stmt, ast.Assign)
            and any(isinstance(t, ast.Name) and t.id == "__all__" for t in stmt.targets)
            and isinstance(stmt.value, ast.List)
        ):
            return {
                elt.value
                for elt in stmt.value.elts
                if isinstance(elt, ast.Constant) and isinstance(elt.value, str)
            }
    return set()


class PushVisitor(ast.NodeVisitor):
    def __init__(self) -> None:
        self.pushed: set[str] = set()

    def visit_Call(self, node: ast.Call) -> None:
        func = node.func
        if (
            isinstance(func, ast.Attribute)
            and func.attr == "_push"
            and node.args
            and isinstance(node.args[0], ast.Name)
        ):
            self.pushed.add(node.args[0].id)
        self.generic_visit(node)


def main() -> int:
    source = VALIDATOR_FILE.read_text(encoding="utf-8")
    tree = ast.parse(source, filename=str(VALIDATOR_FILE))
    codes = _code_constants(tree)
    exported = _exported(tree)
    visitor = PushVisitor()
    visitor.visit(tree)

    violations: list[tuple[int, str]] = []
    seen: dict[str, str] = {}
    for name, (line, value) in codes.items():
        if value != name:
            violations.append((line, f"{name} is spelled {value!r}"))
        if value in seen:
            violations.append((line, f"{name} duplicates {seen[value]}"))
        seen.setdefault(value, name)
        if name not in exported:
            violations.append((line, f"{name} missing from __all__"))
        if name not in visitor.pushed and name not in _EMITTED_ELSEWHERE:
            violations.append((line, f"{name} is never reported"))

    if not violations:
        print("semantic-lint: ok")
        return 0

    print("semantic-lint: issue code problems:")
    for line, message in violations:
        print(f"  - {VALIDATOR_FILE}:{line}: {message}")
    return 1


if __name__ == "__main__":
    sys.exit(main())
