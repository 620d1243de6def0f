"""
Export verified layers into production source files and documentation.

Each layer becomes ``<src>/<package>/layer_NN_<slug>.py``. In the notebook
every layer shares one namespace, so the exporter works out which names a
layer borrows from earlier layers (and from the preamble) and writes the
matching import statements at the top of the file. Preamble definitions
other than imports go to ``_preamble.py``.
"""

import ast
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Set, Union

from .config import LayerDocConfig
from .errors import ExportError
from .layers import Layer, LayerSet

logger = logging.getLogger(__name__)

PREAMBLE_MODULE = "_preamble"


@dataclass
class ExportedFile:
    """A file the exporter wants to write."""

    path: Path
    content: str
    kind: str  # "source", "doc" or "index"
    layer: Optional[int] = None


@dataclass
class ExportResult:
    """Outcome of writing exported files."""

    written: List[Path] = field(default_factory=list)
    unchanged: List[Path] = field(default_factory=list)
    dry_run: bool = False

    def to_dict(self):
        return {
            "written": [str(p) for p in self.written],
            "unchanged": [str(p) for p in self.unchanged],
            "dry_run": self.dry_run,
        }


def _bound_names(node: ast.stmt) -> List[str]:
    if isinstance(node, (ast.ClassDef, ast.FunctionDef, ast.AsyncFunctionDef)):
        return [node.name]
    if isinstance(node, ast.Import):
        return [(a.asname or a.name).split(".")[0] for a in node.names]
    if isinstance(node, ast.ImportFrom):
        return [a.asname or a.name for a in node.names if a.name != "*"]
    if isinstance(node, (ast.Assign, ast.AnnAssign)):
        targets = node.targets if isinstance(node, ast.Assign) else [node.target]
        return [n.id for t in targets for n in ast.walk(t) if isinstance(n, ast.Name)]
    return []


def defined_names(tree: ast.Module) -> Set[str]:
    names: Set[str] = set()
    for node in tree.body:
        names.update(_bound_names(node))
    return names


def used_names(tree: ast.Module) -> Set[str]:
    """Names read anywhere in the module."""
    return {
        node.id for node in ast.walk(tree) if isinstance(node, ast.Name) and isinstance(node.ctx, ast.Load)
    }


def early_reads(tree: ast.Module) -> Set[str]:
    """
    Names read while the module body runs, before the module binds them.

    Class bases and decorators, and function defaults, are evaluated at
    definition time, so ``class Fmt(Fmt):`` reads the earlier ``Fmt``.
    """
    bound: Set[str] = set()
    early: Set[str] = set()
    for node in tree.body:
        if isinstance(node, ast.ClassDef):
            evaluated = node.bases + [k.value for k in node.keywords] + node.decorator_list
        elif isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
            evaluated = (
                node.decorator_list
                + node.args.defaults
                + [d for d in node.args.kw_defaults if d is not None]
            )
        else:
            evaluated = [node]
        for expr in evaluated:
            for sub in ast.walk(expr):
                if isinstance(sub, ast.Name) and isinstance(sub.ctx, ast.Load) and sub.id not in bound:
                    early.add(sub.id)
        bound.update(_bound_names(node))
    return early


def _docstring(text: str) -> str:
    text = re.sub(r"^#+[ \t]*", "", text, flags=re.MULTILINE)
    body = text.replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
    return f'"""\n{body}\n"""\n'


def _public_names(code: str) -> List[str]:
    try:
        tree = ast.parse(code)
    except SyntaxError:
        return []
    return [
        node.name
        for node in tree.body
        if isinstance(node, (ast.ClassDef, ast.FunctionDef, ast.AsyncFunctionDef))
        and not node.name.startswith("_")
    ]


class LayerExporter:
    """Plans and writes the production tree for a set of layers."""

    def __init__(self, config: Optional[LayerDocConfig] = None):
        self.config = config or LayerDocConfig.default()

    def plan(
        self, layer_set: LayerSet, package: str, root: Union[str, Path] = "."
    ) -> List[ExportedFile]:
        """Render every exported file without touching the disk."""
        if not package.isidentifier():
            raise ExportError(f"Package name '{package}' is not a valid Python identifier")

        layout = self.config.layout_settings
        root = Path(root)
        src_pkg = root / layout.src_dir / package
        docs_dir = root / layout.docs_dir

        preamble_imports = self._preamble_imports(layer_set)
        preamble_source, preamble_names = self.render_preamble(layer_set, preamble_imports)
        providers: Dict[str, str] = {name: PREAMBLE_MODULE for name in preamble_names}
        files: List[ExportedFile] = []
        if preamble_source:
            files.append(ExportedFile(src_pkg / f"{PREAMBLE_MODULE}.py", preamble_source, "source"))

        for layer in layer_set.layers:
            try:
                tree = ast.parse(layer.code)
            except SyntaxError as e:
                raise ExportError(f"Layer {layer.number} code does not parse: {e.msg}")

            content = self.render_source(layer, tree, providers, preamble_imports)
            files.append(
                ExportedFile(src_pkg / f"{layer.file_stem}.py", content, "source", layer.number)
            )
            files.append(
                ExportedFile(
                    docs_dir / f"{layer.file_stem}.md",
                    self.render_doc(layer, package),
                    "doc",
                    layer.number,
                )
            )

            for name in defined_names(tree):
                providers[name] = layer.file_stem

        files.append(ExportedFile(src_pkg / "__init__.py", self.render_init(layer_set, package), "index"))
        files.append(ExportedFile(docs_dir / "index.md", self.render_index(layer_set, package), "index"))
        return files

    @staticmethod
    def _preamble_imports(layer_set: LayerSet) -> Dict[str, str]:
        """Map each name bound by a preamble import to its import statement."""
        imports: Dict[str, str] = {}
        for cell in layer_set.preamble:
            if not cell.is_code:
                continue
            try:
                tree = ast.parse(cell.source)
            except SyntaxError:
                logger.warning(f"Skipping preamble cell {cell.index}: it does not parse")
                continue
            for node in tree.body:
                if isinstance(node, (ast.Import, ast.ImportFrom)):
                    statement = ast.unparse(node)
                    for name in _bound_names(node):
                        imports[name] = statement
        return imports

    @staticmethod
    def render_preamble(layer_set: LayerSet, preamble_imports: Dict[str, str]):
        """
        Render the preamble's own definitions as a module.

        Returns ``(source, names)``; source is None when the preamble only
        imports. Statements that bind no name (calls, prints) are dropped.
        """
        statements: List[str] = []
        names: Set[str] = set()
        used: Set[str] = set()
        for cell in layer_set.preamble:
            if not cell.is_code:
                continue
            try:
                tree = ast.parse(cell.source)
            except SyntaxError:
                continue
            for node in tree.body:
                if isinstance(node, (ast.Import, ast.ImportFrom)):
                    continue
                bound = _bound_names(node)
                if not bound:
                    continue
                statements.append(ast.unparse(node))
                names.update(bound)
                used |= used_names(ast.Module(body=[node], type_ignores=[]))

        if not statements:
            return None, names

        imports = sorted({preamble_imports[n] for n in used - names if n in preamble_imports})
        header = f'"""Shared definitions from the {layer_set.notebook.name} preamble."""\n'
        if imports:
            header += "\n" + "\n".join(imports) + "\n"
        return header + "\n\n" + "\n\n\n".join(statements) + "\n", names

    def render_source(
        self,
        layer: Layer,
        tree: ast.Module,
        providers: Dict[str, str],
        preamble_imports: Dict[str, str],
    ) -> str:
        """Render one layer module: docstring, imports, then the layer code."""
        own = defined_names(tree)
        needed = (used_names(tree) - own) | early_reads(tree)

        future = [
            ast.unparse(node)
            for node in tree.body
            if isinstance(node, ast.ImportFrom) and node.module == "__future__"
        ]
        code = layer.code
        if future:
            code = "\n".join(
                line for line in code.splitlines() if not line.startswith("from __future__")
            ).strip("\n")

        external = sorted({preamble_imports[n] for n in needed if n in preamble_imports})

        by_module: Dict[str, Set[str]] = {}
        for name in needed:
            if name in providers and name not in preamble_imports:
                by_module.setdefault(providers[name], set()).add(name)
        internal = [
            f"from .{module} import {', '.join(sorted(names))}"
            for module, names in sorted(by_module.items())
        ]

        imports = "\n\n".join("\n".join(block) for block in (future, external, internal) if block)
        header = _docstring(layer.doc)
        if imports:
            header += f"\n{imports}\n"
        return f"{header}\n\n{code.rstrip()}\n"

    def render_doc(self, layer: Layer, package: str) -> str:
        source = f"{self.config.layout_settings.src_dir}/{package}/{layer.file_stem}.py"
        return f"{layer.doc.rstrip()}\n\nSource: `{source}`\n"

    @staticmethod
    def render_init(layer_set: LayerSet, package: str) -> str:
        lines = [f'"""{package}: exported from {layer_set.notebook.name}."""', ""]
        # a name redefined by a later layer is exported from that layer only
        final: Dict[str, str] = {}
        for layer in layer_set.layers:
            for name in _public_names(layer.code):
                final[name] = layer.file_stem

        exported: List[str] = []
        for layer in layer_set.layers:
            names = [n for n in _public_names(layer.code) if final[n] == layer.file_stem]
            if names:
                lines.append(f"from .{layer.file_stem} import {', '.join(names)}")
                exported.extend(names)
        lines.append("")
        lines.append("__all__ = [" + ", ".join(f'"{n}"' for n in exported) + "]")
        return "\n".join(lines) + "\n"

    @staticmethod
    def render_index(layer_set: LayerSet, package: str) -> str:
        lines = [f"# {package}", ""]
        for layer in layer_set.layers:
            title = f": {layer.title}" if layer.title else ""
            lines.append(f"- [Layer {layer.number}{title}]({layer.file_stem}.md)")
        return "\n".join(lines) + "\n"

    def write(
        self, files: List[ExportedFile], overwrite: bool = False, dry_run: bool = False
    ) -> ExportResult:
        """
        Write planned files.

        Existing files with different content are only replaced when
        ``overwrite`` is set; otherwise nothing is written and ``ExportError``
        lists the conflicts.
        """
        result = ExportResult(dry_run=dry_run)
        pending: List[ExportedFile] = []
        conflicts: List[Path] = []

        for exported in files:
            if exported.path.exists():
                current = exported.path.read_text(encoding="utf-8")
                if current == exported.content:
                    result.unchanged.append(exported.path)
                    continue
                if not overwrite:
                    conflicts.append(exported.path)
                    continue
            pending.append(exported)

        if conflicts:
            listing = ", ".join(str(p) for p in conflicts)
            raise ExportError(f"Refusing to overwrite modified files: {listing}")

        for exported in pending:
            if not dry_run:
                try:
                    exported.path.parent.mkdir(parents=True, exist_ok=True)
                    exported.path.write_text(exported.content, encoding="utf-8")
                except OSError as e:
                    raise ExportError(f"Cannot write {exported.path}: {e}")
                logger.info(f"Wrote {exported.path}")
            result.written.append(exported.path)

        return result
