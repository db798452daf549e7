#!/usr/bin/env python3
"""
Fail if core imports transport-specific modules.
Checks all Python files under src/pipedrive_mcp/core/, resolving relative
imports against the file's own package.
"""

from __future__ import annotations

import ast
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parent.parent
SRC_DIR = REPO_ROOT / "src"
CORE_DIR = SRC_DIR / "pipedrive_mcp" / "core"

FORBIDDEN_PREFIXES = (
    "starlette",
    "uvicorn",
    "mcp.server",
    "fastmcp",
    "pipedrive_mcp.transports",
    "pipedrive_mcp.server",
)


def is_forbidden(module: str) -> bool:
    return any(
        module == prefix or module.startswith(prefix + ".")
        for prefix in FORBIDDEN_PREFIXES
    )


def _package_of(path: Path) -> list[str]:
    return list(path.relative_to(SRC_DIR).parts[:-1])


def _absolute(node: ast.ImportFrom, package: list[str]) -> str:
    if node.level == 0:
        return node.module or ""
    base = package[: len(package) - (node.level - 1)]
    return ".".join(base + ([node.module] if node.module else []))


def scan_file(path: Path) -> list[str]:
    errors: list[str] = []
    package = _package_of(path)
    tree = ast.parse(path.read_text())
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                if is_forbidden(alias.name):
                    errors.append(f"{path}: forbidden import '{alias.name}'")
        elif isinstance(node, ast.ImportFrom):
            mod = _absolute(node, package)
            if not mod:
                continue
            candidates = [mod] + [f"{mod}.{alias.name}" for alias in node.names]
            for candidate in candidates:
                if is_forbidden(candidate):
                    errors.append(f"{path}: forbidden import '{candidate}'")
                    break
    return errors


def main() -> int:
    violations: list[str] = []
    for py_file in sorted(CORE_DIR.rglob("*.py")):
        violations.extend(scan_file(py_file))

    if violations:
        for v in violations:
            print(v, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
