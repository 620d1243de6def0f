"""
LLM synchronization prompts.

Builds the markdown prompt a developer hands to a language model to bring a
layer's documentation and code back in sync: write code from the
documentation, write documentation from the code, or review both. The prompt
carries the conventions, the public API of earlier layers and any open
findings for the layer. Nothing is sent anywhere.
"""

import ast
import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Union

from .config import LayerDocConfig
from .errors import UnknownLayerError
from .findings import Finding
from .layers import Layer, LayerSet

logger = logging.getLogger(__name__)


class SyncDirection(Enum):
    """Which half of a layer the model should produce."""

    DOC_TO_CODE = "doc-to-code"
    CODE_TO_DOC = "code-to-doc"
    REVIEW = "review"


INSTRUCTIONS = {
    SyncDirection.DOC_TO_CODE: (
        "Write the implementation cell for this layer. Implement exactly what the "
        "documentation describes, nothing more. Reuse the classes from earlier layers "
        "instead of redefining them."
    ),
    SyncDirection.CODE_TO_DOC: (
        "Write the documentation cell for this layer. Start with the heading "
        "`# Layer {number}: {title}`. Describe every public class, function and method "
        "the code defines, in backticks, and what each one returns."
    ),
    SyncDirection.REVIEW: (
        "Compare the documentation and the implementation of this layer. List every "
        "place where they disagree, then give the corrected documentation cell and the "
        "corrected implementation cell."
    ),
}


@dataclass
class SyncPrompt:
    """A rendered synchronization prompt for one layer."""

    layer_number: int
    direction: SyncDirection
    text: str

    @property
    def token_count(self) -> int:
        """Rough token estimate: four tokens per three words."""
        return math.ceil(len(self.text.split()) * 4 / 3)

    def to_dict(self):
        return {
            "layer": self.layer_number,
            "direction": self.direction.value,
            "token_count": self.token_count,
            "text": self.text,
        }


def doc_is_heading_only(doc: str) -> bool:
    body = [line for line in doc.splitlines() if line.strip() and not line.lstrip().startswith("#")]
    return not body


def choose_direction(layer: Layer) -> SyncDirection:
    """Pick a direction from what the layer already has."""
    if not layer.code.strip():
        return SyncDirection.DOC_TO_CODE
    if doc_is_heading_only(layer.doc):
        return SyncDirection.CODE_TO_DOC
    return SyncDirection.REVIEW


def _signature(node: Union[ast.FunctionDef, ast.AsyncFunctionDef], indent: str = "") -> List[str]:
    prefix = "async def" if isinstance(node, ast.AsyncFunctionDef) else "def"
    line = f"{indent}{prefix} {node.name}({ast.unparse(node.args)})"
    if node.returns is not None:
        line += f" -> {ast.unparse(node.returns)}"
    lines = [line + ":"]
    docstring = ast.get_docstring(node)
    if docstring:
        lines.append(f'{indent}    """{docstring.splitlines()[0]}"""')
    lines.append(f"{indent}    ...")
    return lines


def public_api(code: str) -> str:
    """Render class and function signatures of ``code`` without bodies."""
    try:
        tree = ast.parse(code)
    except SyntaxError:
        return "# (code does not parse)"

    out: List[str] = []
    for node in tree.body:
        if isinstance(node, ast.ClassDef):
            bases = ", ".join(ast.unparse(b) for b in node.bases)
            out.append(f"class {node.name}({bases}):" if bases else f"class {node.name}:")
            members = [
                item
                for item in node.body
                if isinstance(item, (ast.FunctionDef, ast.AsyncFunctionDef))
                and (not item.name.startswith("_") or item.name == "__init__")
            ]
            if not members:
                out.append("    ...")
            for item in members:
                out.extend(_signature(item, indent="    "))
            out.append("")
        elif isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)) and not node.name.startswith("_"):
            out.extend(_signature(node))
            out.append("")
    return "\n".join(out).rstrip() or "# (no public API)"


class PromptBuilder:
    """Renders synchronization prompts for layers of a notebook."""

    def __init__(self, config: Optional[LayerDocConfig] = None):
        self.config = config or LayerDocConfig.default()

    def build(
        self,
        layer_set: LayerSet,
        number: int,
        direction: Union[SyncDirection, str, None] = None,
        findings: Iterable[Finding] = (),
    ) -> SyncPrompt:
        layer = layer_set.get(number)
        if layer is None:
            raise UnknownLayerError(number, layer_set.notebook.name)

        if direction is None or direction == "auto":
            direction = choose_direction(layer)
        elif not isinstance(direction, SyncDirection):
            direction = SyncDirection(direction)

        sections = [
            self._header(layer, direction),
            self._conventions(layer),
        ]
        if self.config.sync_settings.include_previous_api:
            sections.append(self._previous_api(layer_set.before(number)))
        sections.append(self._current_layer(layer, direction))
        if self.config.sync_settings.include_findings:
            sections.append(self._findings([f for f in findings if f.layer == number]))

        text = "\n\n".join(s for s in sections if s).rstrip() + "\n"
        prompt = SyncPrompt(layer.number, direction, text)
        logger.debug(
            f"Built {direction.value} prompt for layer {number} (~{prompt.token_count} tokens)"
        )
        return prompt

    def _header(self, layer: Layer, direction: SyncDirection) -> str:
        title = layer.title or f"Layer {layer.number}"
        instructions = INSTRUCTIONS[direction].format(number=layer.number, title=title)
        return (
            f"# Sync request: layer {layer.number} ({direction.value})\n\n"
            "You are helping develop a Python module one small layer at a time. "
            "Each layer is one documentation cell paired with one implementation cell.\n\n"
            f"## Task\n\n{instructions}"
        )

    def _conventions(self, layer: Layer) -> str:
        limit = self.config.layer_settings.max_layer_lines
        rules = [
            f"Documentation and code together stay under {limit} lines.",
            "The layer has exactly one implementation cell.",
            "Mention every public class, function and method in the documentation, in backticks.",
        ]
        if layer.number > self.config.layer_settings.first_layer_number:
            rules.append("Add capability by extending the class from the previous layer.")
        return "## Conventions\n\n" + "\n".join(f"- {rule}" for rule in rules)

    def _previous_api(self, earlier: List[Layer]) -> str:
        if not earlier:
            return ""
        parts = ["## Earlier layers (public API)"]
        for layer in earlier:
            parts.append(
                f"### Layer {layer.number}: {layer.title}\n\n```python\n{public_api(layer.code)}\n```"
            )
        return "\n\n".join(parts)

    def _current_layer(self, layer: Layer, direction: SyncDirection) -> str:
        parts = [f"## Layer {layer.number}"]
        if direction is not SyncDirection.CODE_TO_DOC or not doc_is_heading_only(layer.doc):
            parts.append(f"### Documentation\n\n{layer.doc}")
        if direction is not SyncDirection.DOC_TO_CODE:
            parts.append(f"### Implementation\n\n```python\n{layer.code}\n```")
        return "\n\n".join(parts)

    def _findings(self, findings: List[Finding]) -> str:
        if not findings:
            return ""
        lines = [f"- [{f.severity.value}] {f.code}: {f.message}" for f in findings]
        return "## Open findings\n\n" + "\n".join(lines)
