"""
Output formatters for layerdoc CLI results.
"""

from typing import Iterable, List, Optional

from layerdoc.findings import Finding, FindingReport, Severity
from layerdoc.layers import LayerSet
from layerdoc.cli.rich_output import RichOutputManager


def format_finding(finding: Finding) -> str:
    """One-line text form of a finding."""
    location = ""
    if finding.layer is not None:
        location = f"layer {finding.layer}"
    if finding.line is not None:
        location += f", line {finding.line}" if location else f"line {finding.line}"
    location = f" ({location})" if location else ""
    return f"[{finding.severity.value}] {finding.code}{location}: {finding.message}"


def format_findings_text(findings: Iterable[Finding]) -> str:
    lines = [format_finding(f) for f in findings]
    return "\n".join(lines) if lines else "No findings."


def format_summary(report: FindingReport) -> str:
    counts = report.counts_by_severity()
    return ", ".join(f"{count} {severity}" for severity, count in counts.items())


def print_layers_table(
    output: RichOutputManager,
    layer_set: LayerSet,
    report: Optional[FindingReport] = None,
    max_lines: Optional[int] = None,
) -> None:
    """Print one row per layer with its size and finding counts."""
    table = output.create_table(
        f"Layers in {layer_set.notebook.name}",
        ["Layer", "Title", "Lines", "Code cells", "Errors", "Warnings", "File"],
    )
    for layer in layer_set.layers:
        findings: List[Finding] = report.for_layer(layer.number) if report else []
        errors = sum(1 for f in findings if f.severity is Severity.ERROR)
        warnings = sum(1 for f in findings if f.severity is Severity.WARNING)
        lines = str(layer.line_count)
        if max_lines is not None:
            lines = f"{layer.line_count}/{max_lines}"
        output.add_table_row(
            table,
            layer.number,
            layer.title or "-",
            lines,
            len(layer.code_cells),
            errors,
            warnings,
            f"{layer.file_stem}.py",
        )
    output.print_table(table)


def print_findings(output: RichOutputManager, report: FindingReport) -> None:
    """Print findings grouped by severity color."""
    if not len(report):
        output.print_success("No findings")
        return

    for finding in report.sorted():
        text = format_finding(finding)
        if finding.severity is Severity.ERROR:
            output.print_error(text)
        elif finding.severity is Severity.WARNING:
            output.print_warning(text)
        else:
            output.print_info(text)
