"""
Tests for project scaffolding and the production tree audit.
"""

import pytest

from layerdoc.api import LayerDoc
from layerdoc.errors import LayerDocError
from layerdoc.layout import ProjectLayout, audit_tree, scaffold


def _codes(findings):
    return sorted(f.code for f in findings)


@pytest.fixture
def layout(tmp_path):
    return ProjectLayout.from_config(tmp_path / "demo-proj")


class TestProjectLayout:
    """Tests for ProjectLayout."""

    def test_package_from_root_name(self, layout, tmp_path):
        assert layout.package == "demo_proj"
        assert layout.package_dir == tmp_path / "demo-proj" / "src" / "demo_proj"
        assert layout.notebook_path == tmp_path / "demo-proj" / "prototypes" / "demo_proj.py"

    def test_configured_directories(self, tmp_path, config):
        config.layout_settings.src_dir = "lib"
        config.layout_settings.package = "core"
        layout = ProjectLayout.from_config(tmp_path, config=config)
        assert layout.package_dir == tmp_path / "lib" / "core"
        assert set(layout.areas()) == {"prototypes", "src", "tests", "docs"}

    def test_invalid_package(self, tmp_path):
        with pytest.raises(LayerDocError):
            ProjectLayout.from_config(tmp_path, package="1abc")


class TestScaffold:
    """Tests for scaffold."""

    def test_creates_layout(self, layout):
        created = scaffold(layout)

        for area in layout.areas().values():
            assert area.is_dir()
        assert layout.notebook_path in created
        assert (layout.package_dir / "__init__.py").exists()
        test_file = layout.tests_dir / "test_layer_00.py"
        assert "from demo_proj.layer_00_base import DemoProj" in test_file.read_text(encoding="utf-8")

    def test_second_run_keeps_files(self, layout):
        scaffold(layout)
        layout.notebook_path.write_text("# %%\nx = 1\n", encoding="utf-8")
        assert scaffold(layout) == []
        assert layout.notebook_path.read_text(encoding="utf-8") == "# %%\nx = 1\n"

    def test_overwrite(self, layout):
        scaffold(layout)
        layout.notebook_path.write_text("# %%\nx = 1\n", encoding="utf-8")
        created = scaffold(layout, overwrite=True)
        assert layout.notebook_path in created
        assert "class DemoProj:" in layout.notebook_path.read_text(encoding="utf-8")

    def test_starter_notebook_passes_checks(self, layout):
        scaffold(layout)
        result = LayerDoc().check(layout.notebook_path)
        assert result.success
        assert result.gate.is_open


class TestAuditTree:
    """Tests for audit_tree."""

    def test_missing_package(self, layout):
        assert _codes(audit_tree(layout)) == ["missing_package"]

    def test_fresh_scaffold_is_clean(self, layout):
        scaffold(layout)
        assert audit_tree(layout) == []

    def test_exported_starter_is_clean(self, layout):
        scaffold(layout)
        LayerDoc().export(layout.notebook_path, package=layout.package, root=layout.root, overwrite=True)
        assert audit_tree(layout) == []

    def test_naming_numbering_tests_and_docs(self, layout):
        scaffold(layout)
        (layout.package_dir / "helpers.py").write_text("x = 1\n", encoding="utf-8")
        (layout.package_dir / "layer_00_base.py").write_text("x = 1\n", encoding="utf-8")
        (layout.package_dir / "layer_02_extra.py").write_text("y = 2\n", encoding="utf-8")

        findings = audit_tree(layout)
        assert _codes(findings) == [
            "bad_layer_filename",
            "missing_doc",
            "missing_doc",
            "missing_test",
            "non_contiguous_numbering",
        ]
        missing_test = [f for f in findings if f.code == "missing_test"]
        assert missing_test[0].layer == 2

    def test_too_long_file(self, layout, config):
        scaffold(layout)
        config.layer_settings.max_layer_lines = 5
        (layout.docs_dir / "layer_00_base.md").write_text("# Base\n", encoding="utf-8")
        (layout.package_dir / "layer_00_base.py").write_text("x = 1\n" * 5, encoding="utf-8")
        findings = audit_tree(layout, config)
        assert _codes(findings) == ["layer_too_long"]
        assert findings[0].metadata["line_count"] == 5

    def test_facade_audit(self, tmp_path):
        layerdoc = LayerDoc()
        layerdoc.scaffold(tmp_path, package="demo")
        report = layerdoc.audit(tmp_path, package="demo")
        assert len(report) == 0

    def test_preamble_module_is_not_a_layer(self, layout):
        scaffold(layout)
        (layout.package_dir / "_preamble.py").write_text('SEP = ": "\n', encoding="utf-8")
        assert audit_tree(layout) == []
