"""
tests/test_layering.py
Enforce architectural layering:
  core   → may NOT import main
  utils  → may NOT import core, main

Run: pytest tests/test_layering.py -v
"""

import sys, os, ast
from pathlib import Path

ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))


def get_imports(filepath: Path) -> list[str]:
    """Extract all imported module names from a Python file."""
    try:
        tree = ast.parse(filepath.read_text())
    except SyntaxError:
        return []
    imports = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                imports.append(alias.name)
        elif isinstance(node, ast.ImportFrom):
            if node.module:
                imports.append(node.module)
    return imports


def all_py_files(pkg_dir: Path):
    return list(pkg_dir.rglob("*.py"))


class TestLayering:
    def _check(self, package: str, forbidden: set[str]):
        pkg_dir = ROOT / package
        assert pkg_dir.exists(), f"missing package {package}"
        for pyfile in all_py_files(pkg_dir):
            for imp in get_imports(pyfile):
                top = imp.split(".")[0]
                assert top not in forbidden, (
                    f"LAYERING VIOLATION in {pyfile.relative_to(ROOT)}: "
                    f"'{package}' imports '{top}' — "
                    f"forbidden packages: {forbidden}"
                )

    def test_core_does_not_import_cli(self):
        self._check("core", {"main"})

    def test_utils_does_not_import_core(self):
        self._check("utils", {"core"})

    def test_utils_does_not_import_cli(self):
        self._check("utils", {"main"})

    def test_core_has_no_module_level_mutable_state(self):
        # Sinks are created per scan and handed to workers, never shared globally
        for pyfile in all_py_files(ROOT / "core"):
            tree = ast.parse(pyfile.read_text())
            for node in tree.body:
                if isinstance(node, ast.Assign) and isinstance(node.value, (ast.List, ast.Dict, ast.Set, ast.Call)):
                    names = [t.id for t in node.targets if isinstance(t, ast.Name)]
                    assert set(names) <= {"log", "__all__"}, (
                        f"module-level state {names} in {pyfile.relative_to(ROOT)}"
                    )


if __name__ == "__main__":
    import pytest
    pytest.main([__file__, "-v"])
