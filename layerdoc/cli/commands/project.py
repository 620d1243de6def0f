"""
Project layout commands for the layerdoc CLI.
"""

import json

from layerdoc.api import LayerDoc
from layerdoc.cli.formatters import format_summary, print_findings
from layerdoc.cli.rich_output import get_rich_output
from layerdoc.examples.text_formatter import PROTOTYPE_NOTEBOOK, NumberedFormatter

DEMO_TEXT = "Small files.\nPaired docs and code.\nOne layer at a time."


def cmd_init(args, layerdoc: LayerDoc) -> int:
    """Handle init command."""
    created = layerdoc.scaffold(args.root, package=args.package, overwrite=args.overwrite)
    output = get_rich_output()
    if not created:
        output.print_info("Project layout already in place; nothing created")
    for path in created:
        output.print_success(f"Created {path}")
    return 0


def cmd_audit(args, layerdoc: LayerDoc) -> int:
    """Handle audit command."""
    report = layerdoc.audit(args.root, package=args.package)

    if args.format == "json":
        print(json.dumps(report.to_dict(), indent=2))
    else:
        output = get_rich_output()
        output.print_header("Production tree audit", str(args.root))
        print_findings(output, report)
        output.print_section("Summary")
        output.console.print(format_summary(report))

    return 1 if report.has_errors() else 0


def cmd_demo(args, layerdoc: LayerDoc) -> int:
    """Run the TextFormatter example and check its prototype notebook."""
    output = get_rich_output()
    formatter = NumberedFormatter(args.text or DEMO_TEXT)

    output.print_header("TextFormatter example", "three layers, one class each")
    output.print_section("Layer 1: to_upper() / to_lower()")
    output.console.print(formatter.to_upper(), markup=False)
    output.console.print(formatter.to_lower(), markup=False)
    output.print_section("Layer 2: with_line_numbers()")
    output.console.print(formatter.with_line_numbers(), markup=False)

    result = layerdoc.check(PROTOTYPE_NOTEBOOK)
    output.print_section(f"Checking {PROTOTYPE_NOTEBOOK.name}")
    print_findings(output, result.report)
    return 0 if result.success else 1
