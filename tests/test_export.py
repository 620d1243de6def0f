"""
Tests for exporting layers to the production tree.
"""

import importlib
from pathlib import Path

import pytest

from layerdoc.api import LayerDoc
from layerdoc.errors import ExportError, LayerGateError
from layerdoc.examples.text_formatter import PROTOTYPE_NOTEBOOK
from layerdoc.export import LayerExporter
from layerdoc.layers import build_layers
from layerdoc.notebook import parse_percent, read_notebook

EXAMPLE_DIR = PROTOTYPE_NOTEBOOK.parent

SAME_NAME_CHAIN = """# %% [markdown]
# # Layer 0: Base
#
# `Fmt` holds text.

# %%
class Fmt:
    def __init__(self, text):
        self.text = text

# %% [markdown]
# # Layer 1: Case
#
# `Fmt` gains `upper()`.

# %%
class Fmt(Fmt):
    def upper(self):
        return self.text.upper()
"""

PREAMBLE_DEFINITIONS = """# %%
import re

SEP = ": "

WORD = re.compile(r"\\w+")

print("exploring")

# %% [markdown]
# # Layer 0: Join
#
# `Joiner` has `join()`, which joins the words of two strings with `SEP`.

# %%
class Joiner:
    def join(self, a, b):
        return SEP.join(WORD.findall(a + " " + b))
"""


def _by_name(files):
    return {f.path.name: f for f in files}


class TestLayerExporterPlan:
    """Tests for rendering exported files."""

    def test_prototype_matches_shipped_modules(self):
        layer_set = build_layers(read_notebook(PROTOTYPE_NOTEBOOK))
        files = _by_name(LayerExporter().plan(layer_set, "text_formatter"))

        for name in ("layer_00_base.py", "layer_01_case.py", "layer_02_numbering.py"):
            expected = (EXAMPLE_DIR / name).read_text(encoding="utf-8")
            assert files[name].content == expected

    def test_planned_paths(self, sample_layers, tmp_path):
        files = LayerExporter().plan(sample_layers, "pkg", tmp_path)
        paths = sorted(str(f.path.relative_to(tmp_path)) for f in files)
        assert paths == [
            "docs/index.md",
            "docs/layer_00_tokens.md",
            "docs/layer_01_counts.md",
            "src/pkg/__init__.py",
            "src/pkg/layer_00_tokens.py",
            "src/pkg/layer_01_counts.py",
        ]

    def test_imports_from_preamble_and_earlier_layers(self, sample_layers):
        files = _by_name(LayerExporter().plan(sample_layers, "pkg"))
        first = files["layer_00_tokens.py"].content
        second = files["layer_01_counts.py"].content

        assert first.startswith('"""\nLayer 0: Tokens\n\n`Tokenizer` splits text')
        assert "\nimport re\n\n\nclass Tokenizer:" in first
        assert "from .layer_00_tokens import Tokenizer\n\n\nclass CountingTokenizer(Tokenizer):" in second
        assert "import re" not in second

    def test_future_imports_first(self):
        layer_set = build_layers(
            parse_percent(
                "# %%\nimport os\n\n"
                "# %% [markdown]\n# `where()` returns the cwd.\n\n"
                "# %%\nfrom __future__ import annotations\n\n"
                "def where() -> str:\n    return os.getcwd()\n"
            )
        )
        content = LayerExporter().plan(layer_set, "pkg")[0].content
        assert '"""\n\nfrom __future__ import annotations\n\nimport os\n\n\ndef where()' in content
        assert content.count("from __future__") == 1

    def test_init_and_index(self, sample_layers):
        files = _by_name(LayerExporter().plan(sample_layers, "pkg"))
        assert files["__init__.py"].content == (
            '"""pkg: exported from sample_layers."""\n'
            "\n"
            "from .layer_00_tokens import Tokenizer\n"
            "from .layer_01_counts import CountingTokenizer\n"
            "\n"
            '__all__ = ["Tokenizer", "CountingTokenizer"]\n'
        )
        assert files["index.md"].content == (
            "# pkg\n\n- [Layer 0: Tokens](layer_00_tokens.md)\n- [Layer 1: Counts](layer_01_counts.md)\n"
        )

    def test_layer_doc(self, sample_layers):
        files = _by_name(LayerExporter().plan(sample_layers, "pkg"))
        doc = files["layer_01_counts.md"].content
        assert doc.startswith("# Layer 1: Counts")
        assert doc.endswith("Source: `src/pkg/layer_01_counts.py`\n")

    def test_same_name_extension_imports_base(self):
        layer_set = build_layers(parse_percent(SAME_NAME_CHAIN))
        files = _by_name(LayerExporter().plan(layer_set, "pkg"))

        assert "from .layer_00_base import Fmt\n\n\nclass Fmt(Fmt):" in files["layer_01_case.py"].content
        assert "import" not in files["layer_00_base.py"].content
        assert files["__init__.py"].content == (
            '"""pkg: exported from notebook."""\n'
            "\n"
            "from .layer_01_case import Fmt\n"
            "\n"
            '__all__ = ["Fmt"]\n'
        )

    def test_names_read_before_binding(self):
        layer_set = build_layers(
            parse_percent(
                "# %% [markdown]\n# `LIMIT` and `Base`.\n\n# %%\nLIMIT = 3\n\nclass Base:\n    pass\n\n"
                "# %% [markdown]\n# `LIMIT` doubles; `Base` again.\n\n# %%\n"
                "LIMIT = LIMIT * 2\n\nclass Base(Base):\n    def size(self, n=LIMIT):\n        return n\n"
            )
        )
        content = LayerExporter().plan(layer_set, "pkg")[2].content
        assert "from .layer_00_limit_and_base import Base, LIMIT\n" in content

    def test_preamble_definitions_module(self):
        layer_set = build_layers(parse_percent(PREAMBLE_DEFINITIONS))
        files = _by_name(LayerExporter().plan(layer_set, "pkg"))

        preamble = files["_preamble.py"].content
        assert preamble.startswith('"""Shared definitions from the notebook preamble."""\n\nimport re\n\n\n')
        assert "SEP = ': '" in preamble
        assert "WORD = re.compile(" in preamble
        assert "print" not in preamble

        layer = files["layer_00_join.py"].content
        assert "from ._preamble import SEP, WORD\n" in layer
        assert "import re" not in layer
        assert "_preamble" not in files["__init__.py"].content

    def test_import_only_preamble_adds_no_module(self, sample_layers):
        files = _by_name(LayerExporter().plan(sample_layers, "pkg"))
        assert "_preamble.py" not in files

    def test_invalid_package(self, sample_layers):
        with pytest.raises(ExportError, match="not a valid Python identifier"):
            LayerExporter().plan(sample_layers, "my-pkg")

    def test_unparseable_layer(self, broken_layers):
        with pytest.raises(ExportError, match="Layer 2 code does not parse"):
            LayerExporter().plan(broken_layers, "pkg")


class TestExportWrite:
    """Tests for writing exported files through the LayerDoc facade."""

    def test_export_writes_files(self, sample_path, tmp_path):
        result = LayerDoc().export(sample_path, root=tmp_path)

        assert len(result.written) == 6
        package_dir = tmp_path / "src" / "sample_layers"
        assert (package_dir / "layer_00_tokens.py").exists()
        assert (tmp_path / "docs" / "index.md").exists()

    def test_second_export_is_unchanged(self, sample_path, tmp_path):
        layerdoc = LayerDoc()
        layerdoc.export(sample_path, package="pkg", root=tmp_path)
        result = layerdoc.export(sample_path, package="pkg", root=tmp_path)
        assert result.written == []
        assert len(result.unchanged) == 6

    def test_modified_file_needs_overwrite(self, sample_path, tmp_path):
        layerdoc = LayerDoc()
        layerdoc.export(sample_path, package="pkg", root=tmp_path)
        target = tmp_path / "src" / "pkg" / "layer_00_tokens.py"
        target.write_text("# edited by hand\n", encoding="utf-8")

        with pytest.raises(ExportError, match="Refusing to overwrite"):
            layerdoc.export(sample_path, package="pkg", root=tmp_path)
        assert target.read_text(encoding="utf-8") == "# edited by hand\n"

        result = layerdoc.export(sample_path, package="pkg", root=tmp_path, overwrite=True)
        assert result.written == [target]

    def test_dry_run_writes_nothing(self, sample_path, tmp_path):
        result = LayerDoc().export(sample_path, package="pkg", root=tmp_path, dry_run=True)
        assert result.dry_run
        assert len(result.written) == 6
        assert not (tmp_path / "src").exists()

    def test_gate_refuses_unverified_layers(self, broken_path, tmp_path):
        with pytest.raises(LayerGateError) as exc_info:
            LayerDoc().export(broken_path, package="pkg", root=tmp_path)
        assert exc_info.value.layer == 0
        assert not (tmp_path / "src").exists()

    def test_force_still_needs_parseable_code(self, broken_path, tmp_path):
        with pytest.raises(ExportError):
            LayerDoc().export(broken_path, package="pkg", root=tmp_path, force=True)

    def test_configured_package(self, sample_path, tmp_path, config):
        config.layout_settings.package = "configured"
        LayerDoc(config).export(sample_path, root=tmp_path)
        assert (tmp_path / "src" / "configured" / "__init__.py").exists()

    def test_result_to_dict(self, sample_path, tmp_path):
        data = LayerDoc().export(sample_path, package="pkg", root=tmp_path, dry_run=True).to_dict()
        assert data["dry_run"] is True
        assert str(Path(tmp_path) / "src" / "pkg" / "__init__.py") in data["written"]

    def test_same_name_extension_imports_cleanly(self, tmp_path, monkeypatch):
        notebook = tmp_path / "chain.py"
        notebook.write_text(SAME_NAME_CHAIN, encoding="utf-8")
        layerdoc = LayerDoc()
        assert layerdoc.check(notebook).gate.is_open

        layerdoc.export(notebook, package="same_name_chain", root=tmp_path)
        monkeypatch.syspath_prepend(str(tmp_path / "src"))
        module = importlib.import_module("same_name_chain")

        base = importlib.import_module("same_name_chain.layer_00_base")
        assert issubclass(module.Fmt, base.Fmt)
        assert module.Fmt("abc").upper() == "ABC"

    def test_preamble_definitions_available_after_export(self, tmp_path, monkeypatch):
        notebook = tmp_path / "joiner.py"
        notebook.write_text(PREAMBLE_DEFINITIONS, encoding="utf-8")
        layerdoc = LayerDoc()
        assert layerdoc.check(notebook).gate.is_open

        result = layerdoc.export(notebook, package="preamble_joiner", root=tmp_path)
        assert tmp_path / "src" / "preamble_joiner" / "_preamble.py" in result.written

        monkeypatch.syspath_prepend(str(tmp_path / "src"))
        module = importlib.import_module("preamble_joiner")
        assert module.Joiner().join("a", "b") == "a: b"
