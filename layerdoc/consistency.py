"""
Documentation/code consistency checks.

Each layer's documentation and code must describe the same thing. The checks
here compare what the code defines (via ``ast``) against what the
documentation mentions:

- public classes, functions and methods the documentation never mentions
- called references in the documentation (``name()``, ``Class.method()``)
  that no layer so far implements
- layers that define classes without extending an earlier layer's class
"""

import ast
import builtins
import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from .config import LayerDocConfig
from .findings import Finding, Severity
from .layers import Layer, LayerSet

logger = logging.getLogger(__name__)

_REFERENCE_RE = re.compile(r"`(?P<name>[A-Za-z_][\w.]*)(?P<call>\([^`]*\))?`")
_BUILTINS = frozenset(dir(builtins))


@dataclass
class ClassInfo:
    """A class defined at module level."""

    name: str
    bases: List[str]
    methods: List[str]
    lineno: int


@dataclass
class Definitions:
    """Names defined at module level by a piece of code."""

    classes: Dict[str, ClassInfo] = field(default_factory=dict)
    functions: Dict[str, int] = field(default_factory=dict)
    assignments: Set[str] = field(default_factory=set)
    imports: Set[str] = field(default_factory=set)

    def names(self) -> Set[str]:
        """Every name a later layer could use."""
        return set(self.classes) | set(self.functions) | self.assignments | self.imports

    def method_names(self) -> Set[str]:
        return {m for info in self.classes.values() for m in info.methods}

    def update(self, other: "Definitions") -> None:
        self.classes.update(other.classes)
        self.functions.update(other.functions)
        self.assignments |= other.assignments
        self.imports |= other.imports


@dataclass
class Reference:
    """A backticked identifier found in documentation."""

    name: str
    called: bool

    @property
    def parts(self) -> List[str]:
        return self.name.split(".")


def _base_name(node: ast.expr) -> Optional[str]:
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return node.attr
    return None


def _target_names(target: ast.expr) -> List[str]:
    if isinstance(target, ast.Name):
        return [target.id]
    if isinstance(target, (ast.Tuple, ast.List)):
        names = []
        for elt in target.elts:
            names.extend(_target_names(elt))
        return names
    return []


def extract_definitions(code: str) -> Definitions:
    """Collect module-level definitions. Raises ``SyntaxError`` for invalid code."""
    tree = ast.parse(code)
    result = Definitions()

    for node in tree.body:
        if isinstance(node, ast.ClassDef):
            methods = [
                item.name
                for item in node.body
                if isinstance(item, (ast.FunctionDef, ast.AsyncFunctionDef))
            ]
            bases = [b for b in (_base_name(base) for base in node.bases) if b]
            result.classes[node.name] = ClassInfo(node.name, bases, methods, node.lineno)
        elif isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
            result.functions[node.name] = node.lineno
        elif isinstance(node, ast.Assign):
            for target in node.targets:
                result.assignments.update(_target_names(target))
        elif isinstance(node, ast.AnnAssign):
            result.assignments.update(_target_names(node.target))
        elif isinstance(node, ast.Import):
            for alias in node.names:
                result.imports.add((alias.asname or alias.name).split(".")[0])
        elif isinstance(node, ast.ImportFrom):
            for alias in node.names:
                if alias.name != "*":
                    result.imports.add(alias.asname or alias.name)

    return result


def extract_references(doc: str) -> List[Reference]:
    """Collect backticked identifiers, in order, without duplicates."""
    seen = set()
    references = []
    for match in _REFERENCE_RE.finditer(doc):
        ref = Reference(match.group("name").rstrip("."), match.group("call") is not None)
        key = (ref.name, ref.called)
        if key not in seen:
            seen.add(key)
            references.append(ref)
    return references


def is_public(name: str) -> bool:
    return not name.startswith("_")


def mentions(doc: str, name: str) -> bool:
    return re.search(rf"(?<!\w){re.escape(name)}\b", doc) is not None


def _class_methods(name: str, known: Definitions, seen: Optional[Set[str]] = None) -> Optional[Set[str]]:
    """Methods of ``name`` including inherited ones; None when an ancestor is unknown."""
    seen = seen or set()
    if name in seen:
        return set()
    seen.add(name)
    info = known.classes.get(name)
    if info is None:
        return None
    methods = set(info.methods)
    for base in info.bases:
        if base == "object":
            continue
        inherited = _class_methods(base, known, seen)
        if inherited is None:
            return None
        methods |= inherited
    return methods


def _is_resolved(ref: Reference, known: Definitions) -> bool:
    parts = ref.parts
    if len(parts) == 1:
        name = parts[0]
        return name in _BUILTINS or name in known.names() or name in known.method_names()

    head, attr = parts[0], parts[-1]
    if head not in known.classes:
        # module attribute or external object; cannot be checked here
        return True
    methods = _class_methods(head, known)
    return methods is None or attr in methods


def check_layer(
    layer: Layer,
    known: Definitions,
    config: LayerDocConfig,
    is_first: bool = False,
    path: Optional[str] = None,
) -> List[Finding]:
    """
    Check one layer against the definitions of everything before it.

    ``known`` is extended in place with the layer's own definitions so the
    caller can feed it to the next layer.
    """
    settings = config.consistency_settings
    findings: List[Finding] = []

    if not layer.code_cells:
        return findings

    try:
        defs = extract_definitions(layer.code)
    except SyntaxError as e:
        findings.append(
            Finding(
                code="syntax_error",
                severity=Severity.ERROR,
                message=f"Layer {layer.number} code does not parse: {e.msg}",
                layer=layer.number,
                path=path,
                line=e.lineno,
            )
        )
        return findings

    earlier_classes = set(known.classes)
    known.update(defs)

    undocumented_severity = Severity.parse(settings.undocumented_severity)
    for name, info in defs.classes.items():
        if is_public(name) and not mentions(layer.doc, name):
            findings.append(
                Finding(
                    code="undocumented_name",
                    severity=undocumented_severity,
                    message=f"Class '{name}' is not mentioned in the layer {layer.number} documentation",
                    layer=layer.number,
                    path=path,
                    line=info.lineno,
                    metadata={"name": name, "kind": "class"},
                )
            )
        for method in info.methods:
            if is_public(method) and not mentions(layer.doc, method):
                findings.append(
                    Finding(
                        code="undocumented_name",
                        severity=undocumented_severity,
                        message=(
                            f"Method '{name}.{method}' is not mentioned in the "
                            f"layer {layer.number} documentation"
                        ),
                        layer=layer.number,
                        path=path,
                        metadata={"name": f"{name}.{method}", "kind": "method"},
                    )
                )

    for name, lineno in defs.functions.items():
        if is_public(name) and not mentions(layer.doc, name):
            findings.append(
                Finding(
                    code="undocumented_name",
                    severity=undocumented_severity,
                    message=f"Function '{name}' is not mentioned in the layer {layer.number} documentation",
                    layer=layer.number,
                    path=path,
                    line=lineno,
                    metadata={"name": name, "kind": "function"},
                )
            )

    for ref in extract_references(layer.doc):
        if ref.called and not _is_resolved(ref, known):
            findings.append(
                Finding(
                    code="missing_implementation",
                    severity=Severity.ERROR,
                    message=(
                        f"Documentation of layer {layer.number} describes '{ref.name}()' "
                        "but no layer implements it"
                    ),
                    layer=layer.number,
                    path=path,
                    metadata={"name": ref.name},
                )
            )

    if settings.check_extension and not is_first and defs.classes:
        extends = any(
            base in earlier_classes for info in defs.classes.values() for base in info.bases
        )
        if not extends:
            findings.append(
                Finding(
                    code="no_extension",
                    severity=Severity.parse(settings.extension_severity),
                    message=(
                        f"Layer {layer.number} defines {sorted(defs.classes)} without "
                        "extending a class from an earlier layer"
                    ),
                    layer=layer.number,
                    path=path,
                    metadata={"classes": sorted(defs.classes)},
                )
            )

    return findings


def preamble_definitions(layer_set: LayerSet) -> Definitions:
    """Definitions from preamble code cells, skipping any that do not parse."""
    known = Definitions()
    for cell in layer_set.preamble:
        if not cell.is_code:
            continue
        try:
            known.update(extract_definitions(cell.source))
        except SyntaxError as e:
            logger.warning(f"Skipping preamble cell {cell.index}: {e.msg}")
    return known


def check_consistency(layer_set: LayerSet, config: Optional[LayerDocConfig] = None) -> List[Finding]:
    """Run the consistency checks over every layer in notebook order."""
    config = config or LayerDocConfig.default()
    path = str(layer_set.notebook.path) if layer_set.notebook.path else None
    known = preamble_definitions(layer_set)
    findings: List[Finding] = []

    for position, layer in enumerate(layer_set.layers):
        findings.extend(check_layer(layer, known, config, is_first=position == 0, path=path))

    logger.debug(f"Consistency check produced {len(findings)} findings")
    return findings
