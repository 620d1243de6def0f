"""Shared fixtures for layerdoc tests."""

from pathlib import Path

import pytest

from layerdoc.config import LayerDocConfig
from layerdoc.layers import build_layers
from layerdoc.notebook import read_notebook

NOTEBOOKS = Path(__file__).parent / "fixtures" / "notebooks"


@pytest.fixture
def sample_path():
    """Valid two-layer percent notebook with a preamble, a draft and a scratch cell."""
    return NOTEBOOKS / "sample_layers.py"


@pytest.fixture
def broken_path():
    """Notebook that breaks the pairing, consistency and syntax rules."""
    return NOTEBOOKS / "broken_layers.py"


@pytest.fixture
def config():
    return LayerDocConfig.default()


@pytest.fixture
def sample_layers(sample_path, config):
    return build_layers(read_notebook(sample_path), config)


@pytest.fixture
def broken_layers(broken_path, config):
    return build_layers(read_notebook(broken_path), config)


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path_factory, monkeypatch):
    """Run each test outside the repo with no LAYERDOC_* variables set."""
    for name in (
        "LAYERDOC_MAX_LAYER_LINES",
        "LAYERDOC_DRAFT_TAG",
        "LAYERDOC_SCRATCH_TAG",
        "LAYERDOC_UNDOCUMENTED_SEVERITY",
        "LAYERDOC_SRC_DIR",
        "LAYERDOC_DOCS_DIR",
        "LAYERDOC_PACKAGE",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path_factory.mktemp("cwd"))
