"""
Layer assembly and structural rules.

A layer is one documentation cell paired with one implementation cell.
Layers are assembled from a notebook in cell order:

- a markdown cell tagged as draft never opens a layer
- every other markdown cell is a final documentation cell and opens a layer
- code cells tagged as scratch are exploration, never implementation
- remaining code cells belong to the most recently opened layer

Code before the first final documentation cell is the preamble (imports,
setup) and is not part of any layer.
"""

import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .config import LayerDocConfig
from .findings import Finding, Severity
from .notebook import Cell, Notebook

logger = logging.getLogger(__name__)

_LAYER_HEADING_RE = re.compile(
    r"^\s*#{1,6}\s*layer\s+(?P<number>\d+)\s*(?:[:\-]\s*(?P<title>.*?))?\s*$",
    re.IGNORECASE,
)
_HEADING_RE = re.compile(r"^\s*#{1,6}\s+(?P<title>.+?)\s*$")


def slugify(title: str) -> str:
    """Lowercase ``title`` and collapse non-alphanumerics to underscores."""
    slug = re.sub(r"[^a-z0-9]+", "_", title.lower()).strip("_")
    return slug or "layer"


def parse_heading(doc: str):
    """Return ``(number, title)`` from a documentation cell; number may be None."""
    for line in doc.splitlines():
        if not line.strip():
            continue
        match = _LAYER_HEADING_RE.match(line)
        if match:
            return int(match.group("number")), (match.group("title") or "").strip()
        match = _HEADING_RE.match(line)
        if match:
            return None, match.group("title")
        return None, line.strip()[:60]
    return None, ""


@dataclass
class Layer:
    """One documentation cell and the implementation cells paired with it."""

    number: int
    title: str
    doc_cell: Cell
    code_cells: List[Cell] = field(default_factory=list)
    draft_cells: List[Cell] = field(default_factory=list)
    scratch_cells: List[Cell] = field(default_factory=list)

    @property
    def slug(self) -> str:
        return slugify(self.title)

    @property
    def file_stem(self) -> str:
        return f"layer_{self.number:02d}_{self.slug}"

    @property
    def doc(self) -> str:
        return self.doc_cell.source

    @property
    def code(self) -> str:
        return "\n\n".join(c.source for c in self.code_cells)

    @property
    def line_count(self) -> int:
        return self.doc_cell.line_count + sum(c.line_count for c in self.code_cells)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "number": self.number,
            "title": self.title,
            "file_stem": self.file_stem,
            "line_count": self.line_count,
            "doc_cell": self.doc_cell.index,
            "code_cells": [c.index for c in self.code_cells],
            "draft_cells": [c.index for c in self.draft_cells],
            "scratch_cells": [c.index for c in self.scratch_cells],
        }


@dataclass
class LayerSet:
    """Layers assembled from a notebook, plus the cells outside any layer."""

    notebook: Notebook
    layers: List[Layer] = field(default_factory=list)
    preamble: List[Cell] = field(default_factory=list)

    def get(self, number: int) -> Optional[Layer]:
        for layer in self.layers:
            if layer.number == number:
                return layer
        return None

    def before(self, number: int) -> List[Layer]:
        """Layers that come before layer ``number`` in notebook order."""
        result = []
        for layer in self.layers:
            if layer.number == number:
                break
            result.append(layer)
        return result

    def __iter__(self):
        return iter(self.layers)

    def __len__(self) -> int:
        return len(self.layers)


def build_layers(notebook: Notebook, config: Optional[LayerDocConfig] = None) -> LayerSet:
    """Group notebook cells into layers."""
    settings = (config or LayerDocConfig.default()).layer_settings
    result = LayerSet(notebook)
    current: Optional[Layer] = None
    next_number = settings.first_layer_number

    for cell in notebook.cells:
        if cell.is_doc and cell.has_tag(settings.draft_tag):
            if current is not None:
                current.draft_cells.append(cell)
            else:
                result.preamble.append(cell)
            continue

        if cell.is_doc:
            number, title = parse_heading(cell.source)
            if number is None:
                number = next_number
            current = Layer(number=number, title=title, doc_cell=cell)
            result.layers.append(current)
            next_number = number + 1
            continue

        if current is None:
            result.preamble.append(cell)
        elif cell.has_tag(settings.scratch_tag):
            current.scratch_cells.append(cell)
        else:
            current.code_cells.append(cell)

    logger.debug(
        f"Built {len(result.layers)} layers from {notebook.name} "
        f"({len(result.preamble)} preamble cells)"
    )
    return result


def check_numbering(
    numbers: List[int], first: int = 0, path: Optional[str] = None
) -> List[Finding]:
    """Check that layer numbers are unique and run contiguously from ``first``."""
    findings = []
    duplicates = sorted(n for n, count in Counter(numbers).items() if count > 1)
    for number in duplicates:
        findings.append(
            Finding(
                code="duplicate_layer_number",
                severity=Severity.ERROR,
                message=f"Layer number {number} is used more than once",
                layer=number,
                path=path,
            )
        )

    expected = list(range(first, first + len(numbers)))
    if not duplicates and numbers != expected:
        findings.append(
            Finding(
                code="non_contiguous_numbering",
                severity=Severity.WARNING,
                message=f"Layer numbers {numbers} should run {expected}",
                path=path,
                metadata={"numbers": numbers, "expected": expected},
            )
        )
    return findings


def check_structure(layer_set: LayerSet, config: Optional[LayerDocConfig] = None) -> List[Finding]:
    """Check the pairing and size rules for every layer."""
    settings = (config or LayerDocConfig.default()).layer_settings
    path = str(layer_set.notebook.path) if layer_set.notebook.path else None
    findings: List[Finding] = []

    for layer in layer_set.layers:
        if not layer.code_cells:
            findings.append(
                Finding(
                    code="unpaired_doc",
                    severity=Severity.ERROR,
                    message=f"Layer {layer.number} documentation has no implementation cell",
                    layer=layer.number,
                    path=path,
                )
            )
        elif len(layer.code_cells) > 1:
            findings.append(
                Finding(
                    code="multiple_implementations",
                    severity=Severity.ERROR,
                    message=(
                        f"Layer {layer.number} has {len(layer.code_cells)} implementation "
                        "cells; merge them or tag exploration as scratch"
                    ),
                    layer=layer.number,
                    path=path,
                    metadata={"cells": [c.index for c in layer.code_cells]},
                )
            )

        if layer.line_count >= settings.max_layer_lines:
            findings.append(
                Finding(
                    code="layer_too_long",
                    severity=Severity.ERROR,
                    message=(
                        f"Layer {layer.number} has {layer.line_count} lines; "
                        f"keep it under {settings.max_layer_lines}"
                    ),
                    layer=layer.number,
                    path=path,
                    metadata={"line_count": layer.line_count},
                )
            )

    findings.extend(
        check_numbering([layer.number for layer in layer_set.layers], settings.first_layer_number, path)
    )
    return findings
