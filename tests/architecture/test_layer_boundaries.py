"""
Layer boundary tests.

1. invoicing_kernel/** may NOT import invoicing_engines, invoicing_config
   or invoicing_services.  The kernel never depends upward.

2. invoicing_engines/** may NOT import invoicing_config, invoicing_services,
   SQLAlchemy, or the kernel's db/models/selectors packages.  Engines stay
   pure and receive reference data as plain mappings.

3. invoicing_config/** may NOT import invoicing_engines or invoicing_services.

4. Engines never use floats for money or read the clock.

These tests read source code via AST -- they cannot break anything.
"""

import ast
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _python_files(package: str) -> list[Path]:
    """Return all .py files in a top-level package."""
    return sorted((ROOT / package).rglob("*.py"))


def _extract_imports(filepath: Path) -> list[tuple[int, str]]:
    """Extract (line_number, module_string) for all imports in a file."""
    tree = ast.parse(filepath.read_text(), filename=str(filepath))

    results: list[tuple[int, str]] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                results.append((node.lineno, alias.name))
        elif isinstance(node, ast.ImportFrom):
            if node.module:
                results.append((node.lineno, node.module))
    return results


def _violations(package: str, forbidden: tuple[str, ...]) -> list[str]:
    found: list[str] = []
    for filepath in _python_files(package):
        for lineno, module in _extract_imports(filepath):
            for prefix in forbidden:
                if module == prefix or module.startswith(f"{prefix}."):
                    found.append(f"  {filepath.relative_to(ROOT)}:{lineno} imports '{module}'")
    return found


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestKernelNoUpwardDependencies:

    FORBIDDEN_PREFIXES = (
        "invoicing_engines",
        "invoicing_config",
        "invoicing_services",
    )

    def test_kernel_does_not_import_outer_layers(self):
        violations = _violations("invoicing_kernel", self.FORBIDDEN_PREFIXES)
        assert not violations, "Kernel imports an outer layer:\n" + "\n".join(violations)


class TestEnginePurity:

    FORBIDDEN_PREFIXES = (
        "invoicing_config",
        "invoicing_services",
        "invoicing_kernel.db",
        "invoicing_kernel.models",
        "invoicing_kernel.selectors",
        "sqlalchemy",
    )

    def test_engines_import_only_pure_modules(self):
        violations = _violations("invoicing_engines", self.FORBIDDEN_PREFIXES)
        assert not violations, "Engine purity violation:\n" + "\n".join(violations)

    def test_engines_do_not_read_the_clock(self):
        found: list[str] = []
        for filepath in _python_files("invoicing_engines"):
            for node in ast.walk(ast.parse(filepath.read_text())):
                if (
                    isinstance(node, ast.Attribute)
                    and node.attr in ("now", "today", "utcnow")
                ):
                    found.append(f"  {filepath.relative_to(ROOT)}:{node.lineno} .{node.attr}()")
        assert not found, "Engines must not read the clock:\n" + "\n".join(found)

    def test_engines_do_not_construct_floats(self):
        found: list[str] = []
        for filepath in _python_files("invoicing_engines"):
            for node in ast.walk(ast.parse(filepath.read_text())):
                if isinstance(node, ast.Call) and getattr(node.func, "id", None) == "float":
                    found.append(f"  {filepath.relative_to(ROOT)}:{node.lineno}")
                if isinstance(node, ast.Constant) and isinstance(node.value, float):
                    found.append(f"  {filepath.relative_to(ROOT)}:{node.lineno} float literal")
        assert not found, "Float arithmetic in engines:\n" + "\n".join(found)


class TestConfigBoundary:

    def test_config_does_not_import_engines_or_services(self):
        violations = _violations("invoicing_config", ("invoicing_engines", "invoicing_services"))
        assert not violations, "Config boundary violation:\n" + "\n".join(violations)
