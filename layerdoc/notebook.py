"""
Notebook readers and writers for layerdoc.

Prototype notebooks come in two shapes:

- Jupyter ``.ipynb`` files (nbformat 4 JSON)
- percent-format ``.py`` scripts, where ``# %%`` starts a code cell and
  ``# %% [markdown]`` starts a documentation cell

Both are read into the same ``Notebook``/``Cell`` model. Cell tags come from
``metadata.tags`` in JSON notebooks and from a ``tags=...`` suffix on the
percent marker line.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from .errors import NotebookFormatError

logger = logging.getLogger(__name__)

_MARKER_RE = re.compile(r"^# %%(?P<rest>.*)$")
_KIND_RE = re.compile(r"\[(?P<kind>markdown|md)\]", re.IGNORECASE)
_TAGS_RE = re.compile(r"tags\s*=\s*(?P<tags>\[[^\]]*\]|\S+)")


class CellKind(Enum):
    """Kind of a notebook cell."""

    MARKDOWN = "markdown"
    CODE = "code"


@dataclass
class Cell:
    """A single documentation or code cell."""

    index: int
    kind: CellKind
    source: str
    tags: Tuple[str, ...] = ()

    @property
    def is_doc(self) -> bool:
        return self.kind is CellKind.MARKDOWN

    @property
    def is_code(self) -> bool:
        return self.kind is CellKind.CODE

    @property
    def line_count(self) -> int:
        return len(self.source.splitlines())

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "kind": self.kind.value,
            "tags": list(self.tags),
            "line_count": self.line_count,
        }


@dataclass
class Notebook:
    """An ordered collection of cells read from one file."""

    path: Optional[Path]
    cells: List[Cell] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    format: str = "percent"

    def doc_cells(self) -> List[Cell]:
        return [c for c in self.cells if c.is_doc]

    def code_cells(self) -> List[Cell]:
        return [c for c in self.cells if c.is_code]

    @property
    def name(self) -> str:
        return self.path.stem if self.path else "notebook"


def read_notebook(path: Union[str, Path]) -> Notebook:
    """Read a notebook, choosing the parser by file suffix."""
    path = Path(path)
    if path.suffix not in (".ipynb", ".py"):
        raise NotebookFormatError(
            f"Unsupported notebook format '{path.suffix}' (expected .ipynb or .py)", path
        )

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise NotebookFormatError(f"Cannot read notebook: {e}", path)

    if path.suffix == ".ipynb":
        notebook = parse_ipynb(text, path)
    else:
        notebook = parse_percent(text, path)

    logger.debug(f"Read {len(notebook.cells)} cells from {path}")
    return notebook


def parse_ipynb(text: str, path: Optional[Union[str, Path]] = None) -> Notebook:
    """Parse nbformat-4 JSON. Raw cells are skipped."""
    path = Path(path) if path is not None else None
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise NotebookFormatError(f"Invalid notebook JSON: {e}", path)

    if not isinstance(payload, dict) or not isinstance(payload.get("cells"), list):
        raise NotebookFormatError("Notebook JSON has no 'cells' list", path)

    cells: List[Cell] = []
    for position, raw in enumerate(payload["cells"]):
        if not isinstance(raw, dict):
            raise NotebookFormatError(f"Cell {position} is not an object", path)

        cell_type = raw.get("cell_type")
        if cell_type == "raw":
            continue
        try:
            kind = CellKind(cell_type)
        except ValueError:
            raise NotebookFormatError(f"Cell {position} has unknown type {cell_type!r}", path)

        source = raw.get("source", "")
        if isinstance(source, list) and all(isinstance(part, str) for part in source):
            source = "".join(source)
        if not isinstance(source, str):
            raise NotebookFormatError(
                f"Cell {position} source must be a string or a list of strings", path
            )
        tags = (raw.get("metadata") or {}).get("tags") or []
        cells.append(Cell(position, kind, source.strip("\n"), tuple(str(t) for t in tags)))

    return Notebook(path, cells, payload.get("metadata") or {}, format="ipynb")


def _parse_tags(rest: str) -> Tuple[str, ...]:
    match = _TAGS_RE.search(rest)
    if not match:
        return ()
    raw = match.group("tags").strip("[]")
    tags = [t.strip().strip("'\"") for t in raw.split(",")]
    return tuple(t for t in tags if t)


def _strip_comment(line: str) -> str:
    if line.startswith("# "):
        return line[2:]
    if line.rstrip() == "#":
        return ""
    return line


def _finish_cell(cells: List[Cell], kind: CellKind, tags: Tuple[str, ...], lines: List[str]) -> None:
    if kind is CellKind.MARKDOWN:
        lines = [_strip_comment(line) for line in lines]
    source = "\n".join(lines).strip("\n")
    cells.append(Cell(len(cells), kind, source, tags))


def parse_percent(text: str, path: Optional[Union[str, Path]] = None) -> Notebook:
    """Parse a percent-format script into cells."""
    path = Path(path) if path is not None else None
    cells: List[Cell] = []

    kind: Optional[CellKind] = None
    tags: Tuple[str, ...] = ()
    lines: List[str] = []

    for line in text.splitlines():
        match = _MARKER_RE.match(line)
        if not match:
            lines.append(line)
            continue

        if kind is not None:
            _finish_cell(cells, kind, tags, lines)
        elif "\n".join(lines).strip():
            _finish_cell(cells, CellKind.CODE, (), lines)

        rest = match.group("rest")
        kind = CellKind.MARKDOWN if _KIND_RE.search(rest) else CellKind.CODE
        tags = _parse_tags(rest)
        lines = []

    if kind is not None:
        _finish_cell(cells, kind, tags, lines)
    elif "\n".join(lines).strip():
        _finish_cell(cells, CellKind.CODE, (), lines)

    return Notebook(path, cells, {}, format="percent")


def format_percent(cells: Iterable[Cell]) -> str:
    """Render cells as a percent-format script."""
    blocks = []
    for cell in cells:
        marker = "# %% [markdown]" if cell.is_doc else "# %%"
        if cell.tags:
            marker += f" tags=[{','.join(cell.tags)}]"
        body = cell.source.splitlines()
        if cell.is_doc:
            body = [f"# {line}" if line else "#" for line in body]
        blocks.append("\n".join([marker] + body))
    return "\n\n".join(blocks) + "\n"


def write_percent(notebook: Union[Notebook, Iterable[Cell]], path: Union[str, Path]) -> Path:
    """Write cells to ``path`` in percent format."""
    cells = notebook.cells if isinstance(notebook, Notebook) else list(notebook)
    path = Path(path)
    path.write_text(format_percent(cells), encoding="utf-8")
    logger.debug(f"Wrote {len(cells)} cells to {path}")
    return path
