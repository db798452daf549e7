import ast
import importlib.util
from pathlib import Path

import pytest


@pytest.fixture(scope="module")
def guard():
    script = (
        Path(__file__).resolve().parent.parent / "scripts" / "check_core_imports.py"
    )
    spec = importlib.util.spec_from_file_location("check_core_imports", script)
    module = importlib.util.module_from_spec(spec)
    assert spec.loader is not None  # for mypy
    spec.loader.exec_module(module)
    return module


def test_core_import_guard_passes(guard):
    assert guard.main() == 0, "core import guard failed"


@pytest.mark.parametrize(
    "module, forbidden",
    [
        ("pipedrive_mcp.server", True),
        ("pipedrive_mcp.transports.http.rest", True),
        ("mcp.server.fastmcp", True),
        ("starlette.routing", True),
        ("pipedrive_mcp.core.client", False),
        ("pipedrive_mcp.serverless", False),
        ("mcp.types", False),
    ],
)
def test_forbidden_prefixes(guard, module, forbidden):
    assert guard.is_forbidden(module) is forbidden


def test_relative_imports_resolve_against_package(guard):
    package = ["pipedrive_mcp", "core", "tools"]
    sibling, parent, root = ast.parse(
        "from ._render import x\n"
        "from ..context import y\n"
        "from ...transports import http\n"
    ).body

    assert guard._absolute(sibling, package) == "pipedrive_mcp.core.tools._render"
    assert guard._absolute(parent, package) == "pipedrive_mcp.core.context"
    assert guard._absolute(root, package) == "pipedrive_mcp.transports"
    assert guard.is_forbidden(guard._absolute(root, package))


def test_package_of_core_module(guard):
    path = guard.CORE_DIR / "tools" / "deals.py"
    assert guard._package_of(path) == ["pipedrive_mcp", "core", "tools"]
