"""
Main API interface for layerdoc

Provides a unified facade over notebook loading, layer checks, the progress
gate, sync prompts, export and project layout.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .config import LayerDocConfig
from .consistency import check_consistency
from .export import ExportResult, LayerExporter
from .findings import FindingReport
from .gate import LayerGate
from .layers import LayerSet, build_layers, check_structure
from .layout import ProjectLayout, audit_tree, scaffold
from .notebook import read_notebook
from .sync import PromptBuilder, SyncDirection, SyncPrompt

logger = logging.getLogger(__name__)


@dataclass
class CheckResult:
    """Findings and gate state for one notebook."""

    layer_set: LayerSet
    report: FindingReport
    gate: LayerGate
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return not self.report.has_errors()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "notebook": str(self.layer_set.notebook.path),
            "layers": [layer.to_dict() for layer in self.layer_set.layers],
            "gate": self.gate.to_dict(),
            **self.report.to_dict(),
            "metadata": self.metadata,
        }


class LayerDoc:
    """
    Main API class for layerdoc.

    Every operation takes a notebook path (``.ipynb`` or percent-format
    ``.py``) or a project root and uses the configuration given here.
    """

    def __init__(self, config: Optional[LayerDocConfig] = None):
        self.config = config or LayerDocConfig.default()
        self.exporter = LayerExporter(self.config)
        self.prompt_builder = PromptBuilder(self.config)
        logger.debug("layerdoc initialized")

    def load(self, path: Union[str, Path]) -> LayerSet:
        """Read a notebook and assemble its layers."""
        return build_layers(read_notebook(path), self.config)

    def check(self, path: Union[str, Path]) -> CheckResult:
        """Run structure and consistency checks and evaluate the gate."""
        layer_set = self.load(path)
        return self._check(layer_set)

    def _check(self, layer_set: LayerSet) -> CheckResult:
        report = FindingReport()
        report.extend(check_structure(layer_set, self.config))
        report.extend(check_consistency(layer_set, self.config))
        gate = LayerGate(layer_set, report.findings)
        logger.info(
            f"Checked {len(layer_set)} layers in {layer_set.notebook.name}: "
            f"{report.counts_by_severity()}"
        )
        return CheckResult(
            layer_set=layer_set,
            report=report,
            gate=gate,
            metadata={"timestamp": datetime.now().isoformat()},
        )

    def prompt(
        self,
        path: Union[str, Path],
        layer: int,
        direction: Union[SyncDirection, str, None] = None,
    ) -> SyncPrompt:
        """Build the LLM synchronization prompt for one layer."""
        result = self.check(path)
        return self.prompt_builder.build(result.layer_set, layer, direction, result.report.findings)

    def export(
        self,
        path: Union[str, Path],
        package: Optional[str] = None,
        root: Union[str, Path] = ".",
        overwrite: bool = False,
        dry_run: bool = False,
        force: bool = False,
    ) -> ExportResult:
        """
        Export every layer to the production tree.

        Refuses with ``LayerGateError`` while any layer is unverified,
        unless ``force`` is set.
        """
        result = self.check(path)
        if force:
            if not result.gate.is_open:
                logger.warning("Exporting with unverified layers (forced)")
        else:
            result.gate.require()

        package = package or self.config.layout_settings.package or result.layer_set.notebook.name
        files = self.exporter.plan(result.layer_set, package, root)
        return self.exporter.write(files, overwrite=overwrite, dry_run=dry_run)

    def scaffold(
        self, root: Union[str, Path], package: Optional[str] = None, overwrite: bool = False
    ) -> List[Path]:
        """Create the project layout with starter files."""
        layout = ProjectLayout.from_config(root, package, self.config)
        return scaffold(layout, overwrite=overwrite)

    def audit(self, root: Union[str, Path], package: Optional[str] = None) -> FindingReport:
        """Audit the production tree of a project."""
        layout = ProjectLayout.from_config(root, package, self.config)
        return FindingReport(audit_tree(layout, self.config))

    def status(self) -> Dict[str, Any]:
        """Describe the active configuration."""
        return {
            "configuration": self.config.to_dict(),
            "timestamp": datetime.now().isoformat(),
        }
