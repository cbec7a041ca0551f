"""
Layer boundary contract.

Tests that enforce the package layering:

1. attendance_kernel/** may NOT import any other attendance package.
   The kernel never depends upward.

2. attendance_config/** may only depend on the kernel.

3. attendance_engines/** and attendance_ingestion/** never import the
   services layer, and the engines never import ingestion.

4. Engines and ingestion are pure: no filesystem or YAML imports.

5. Every engine module opens with the Responsibility / Architecture
   position / Invariants enforced header.

These tests read source code via AST -- they cannot break anything.
"""

import ast
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[2]

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _python_files(package: str) -> list[Path]:
    """Return all .py files under a top-level package."""
    return sorted((REPO_ROOT / package).rglob("*.py"))


def _extract_imports(filepath: Path) -> list[tuple[int, str]]:
    """Extract (line_number, module_string) for all imports in a file."""
    try:
        tree = ast.parse(filepath.read_text(), filename=str(filepath))
    except (SyntaxError, UnicodeDecodeError):
        return []

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
                    found.append(
                        f"  {filepath.relative_to(REPO_ROOT)}:{lineno} imports '{module}'"
                    )
    return found


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestPackagesPresent:
    def test_layers_have_sources(self):
        for package in (
            "attendance_kernel",
            "attendance_config",
            "attendance_engines",
            "attendance_ingestion",
            "attendance_services",
        ):
            assert _python_files(package), f"{package} has no Python sources"


class TestNoUpwardDependencies:
    def test_kernel_imports_nothing_above_it(self):
        violations = _violations(
            "attendance_kernel",
            (
                "attendance_config",
                "attendance_engines",
                "attendance_ingestion",
                "attendance_services",
            ),
        )
        assert not violations, (
            "Kernel boundary violation -- attendance_kernel/** must not import "
            "upward packages:\n" + "\n".join(violations)
        )

    def test_config_depends_only_on_kernel(self):
        violations = _violations(
            "attendance_config",
            ("attendance_engines", "attendance_ingestion", "attendance_services"),
        )
        assert not violations, (
            "Config boundary violation:\n" + "\n".join(violations)
        )

    def test_engines_do_not_import_ingestion_or_services(self):
        violations = _violations(
            "attendance_engines",
            ("attendance_ingestion", "attendance_services"),
        )
        assert not violations, (
            "Engine boundary violation:\n" + "\n".join(violations)
        )

    def test_ingestion_does_not_import_services(self):
        violations = _violations("attendance_ingestion", ("attendance_services",))
        assert not violations, (
            "Ingestion boundary violation:\n" + "\n".join(violations)
        )


class TestPureLayers:
    """Engines and ingestion receive data; they never read it."""

    IO_MODULES = ("os", "io", "pathlib", "shutil", "yaml")

    def test_engines_do_no_io(self):
        violations = _violations("attendance_engines", self.IO_MODULES)
        assert not violations, "I/O import in engines:\n" + "\n".join(violations)

    def test_ingestion_does_no_io(self):
        violations = _violations("attendance_ingestion", self.IO_MODULES)
        assert not violations, "I/O import in ingestion:\n" + "\n".join(violations)


class TestEngineModuleHeaders:
    """Engine modules document their contract in the module docstring."""

    SECTIONS = ("Responsibility", "Architecture position", "Invariants enforced")

    def test_engine_docstrings_have_sections(self):
        missing: list[str] = []
        for filepath in _python_files("attendance_engines"):
            if filepath.name == "__init__.py":
                continue
            doc = ast.get_docstring(ast.parse(filepath.read_text())) or ""
            for section in self.SECTIONS:
                if section not in doc:
                    missing.append(f"  {filepath.relative_to(REPO_ROOT)} lacks '{section}'")
        assert not missing, "Engine module header incomplete:\n" + "\n".join(missing)
