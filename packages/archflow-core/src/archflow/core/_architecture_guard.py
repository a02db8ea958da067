"""Import-time layout check for archflow.core.

Two rules hold for every module under ``archflow/core``:

1) Exception classes live in ``exception.py``.
2) ``*Spec`` models live in ``spec.py``.

A violation raises RuntimeError listing each offending class and file.
Set ARCHFLOW_STRICT_ARCH=0 to skip the check.
"""

from __future__ import annotations

import ast
import os
from pathlib import Path
from typing import Iterable

_EXCLUDED_DIRS = {"__pycache__", ".venv", "venv", ".tox", "build", "dist", ".eggs", ".git"}
_EXCLUDED_TOPLEVEL = {"tests", "test", "docs"}


def _iter_python_files(package_root: Path) -> Iterable[Path]:
    for path in package_root.rglob("*.py"):
        parts = set(path.relative_to(package_root).parts)
        if parts & _EXCLUDED_DIRS or parts & _EXCLUDED_TOPLEVEL:
            continue
        yield path


def _base_name(node: ast.expr) -> str | None:
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return node.attr
    if isinstance(node, ast.Subscript):
        return _base_name(node.value)
    return None


def _looks_like_exception(cls: ast.ClassDef) -> bool:
    # Any base named *Error/*Exception counts, builtins included.
    for base in cls.bases:
        name = _base_name(base)
        if name and (name in {"BaseException", "Exception"} or name.endswith(("Error", "Exception"))):
            return True
    return False


def assert_architecture() -> None:
    if os.getenv("ARCHFLOW_STRICT_ARCH", "1") == "0":
        return

    package_root = Path(__file__).resolve().parent
    allowed_exc = (package_root / "exception.py").resolve()
    allowed_spec = (package_root / "spec.py").resolve()

    exc_violations: list[tuple[str, Path]] = []
    spec_violations: list[tuple[str, Path]] = []

    for path in _iter_python_files(package_root):
        resolved = path.resolve()
        try:
            tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
        except (OSError, UnicodeDecodeError, SyntaxError) as e:
            raise RuntimeError(f"[archflow strict-arch] Cannot parse source file: {path}") from e

        for node in ast.walk(tree):
            if not isinstance(node, ast.ClassDef):
                continue
            if resolved != allowed_exc and _looks_like_exception(node):
                exc_violations.append((node.name, path))
            if resolved != allowed_spec and node.name.endswith("Spec"):
                spec_violations.append((node.name, path))

    if not exc_violations and not spec_violations:
        return

    lines: list[str] = ["archflow strict architecture check failed:"]
    if exc_violations:
        lines.append("")
        lines.append("exception classes outside exception.py:")
        for cls, path in sorted(exc_violations, key=lambda x: (str(x[1]), x[0])):
            lines.append(f"  - {cls} defined in {path}")
        lines.append("Fix: move them into archflow/core/exception.py and import from archflow.core.exception.")
    if spec_violations:
        lines.append("")
        lines.append("Spec classes outside spec.py:")
        for cls, path in sorted(spec_violations, key=lambda x: (str(x[1]), x[0])):
            lines.append(f"  - {cls} defined in {path}")
        lines.append("Fix: move them into archflow/core/spec.py and import from archflow.core.spec.")

    raise RuntimeError("\n".join(lines))
