import ast
import importlib.util
from pathlib import Path

SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "check_core_imports.py"


def _load_guard():
    spec = importlib.util.spec_from_file_location("check_core_imports", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    assert spec.loader is not None  # for mypy
    spec.loader.exec_module(module)
    return module


def test_core_import_guard_passes():
    exit_code = _load_guard().main()
    assert exit_code == 0, "core import guard failed"


def test_relative_import_out_of_core_is_resolved():
    guard = _load_guard()
    path = guard.CORE_DIR / "tools" / "example.py"

    node = ast.parse("from ...server import build_server").body[0]
    assert guard.resolve_import_from(path, node) == "insight_hub_mcp.server"
    assert guard.is_forbidden("insight_hub_mcp.server")

    sibling = ast.parse("from ..resolver import ProjectResolver").body[0]
    assert guard.resolve_import_from(path, sibling) == "insight_hub_mcp.core.resolver"
    assert not guard.is_forbidden("insight_hub_mcp.core.resolver")
