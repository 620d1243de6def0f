"""
Notebook commands for the layerdoc CLI.

This module contains command handlers for:
- listing the layers of a notebook
- checking structure and consistency, and the progress gate
- building LLM synchronization prompts
- exporting layers to the production tree
"""

import json
import logging
from pathlib import Path

from layerdoc.api import LayerDoc
from layerdoc.cli.formatters import format_summary, print_findings, print_layers_table
from layerdoc.cli.rich_output import get_rich_output
from layerdoc.findings import FindingReport

logger = logging.getLogger(__name__)


def cmd_layers(args, layerdoc: LayerDoc) -> int:
    """Handle layers command."""
    layer_set = layerdoc.load(args.notebook)

    if args.format == "json":
        payload = {
            "notebook": str(layer_set.notebook.path),
            "preamble_cells": [c.index for c in layer_set.preamble],
            "layers": [layer.to_dict() for layer in layer_set.layers],
        }
        print(json.dumps(payload, indent=2))
        return 0

    output = get_rich_output()
    print_layers_table(output, layer_set, max_lines=layerdoc.config.layer_settings.max_layer_lines)
    if layer_set.preamble:
        output.print_info(f"{len(layer_set.preamble)} preamble cell(s) outside any layer")
    return 0


def cmd_check(args, layerdoc: LayerDoc) -> int:
    """Handle check command. Exit status 1 means the gate is closed."""
    result = layerdoc.check(args.notebook)
    gate = result.gate

    if args.layer is not None:
        passed = gate.can_proceed(args.layer)
    else:
        passed = gate.is_open

    if args.format == "json":
        payload = result.to_dict()
        payload["passed"] = passed
        print(json.dumps(payload, indent=2, default=str))
        return 0 if passed else 1

    output = get_rich_output()
    output.print_header("Layer check", str(result.layer_set.notebook.path))
    report = result.report
    if args.layer is not None:
        report = FindingReport(
            [f for f in result.report.findings if f.layer is None or f.layer <= args.layer]
        )

    print_layers_table(
        output, result.layer_set, result.report, layerdoc.config.layer_settings.max_layer_lines
    )
    print_findings(output, report)
    output.print_section("Summary")
    output.console.print(format_summary(report))

    if args.layer is not None:
        blocking = gate.blocking_layer(args.layer)
        if blocking is None:
            output.print_success(f"Layers up to {args.layer} are verified; you may proceed")
        else:
            output.print_error(f"Layer {blocking} is not verified; fix it before moving past it")
    elif passed:
        output.print_success("All layers verified")
    else:
        output.print_error(f"Gate closed at layer {gate.frontier()}")

    return 0 if passed else 1


def cmd_prompt(args, layerdoc: LayerDoc) -> int:
    """Handle prompt command."""
    prompt = layerdoc.prompt(args.notebook, args.layer, args.direction)

    if args.output:
        Path(args.output).write_text(prompt.text, encoding="utf-8")
        get_rich_output().print_success(
            f"Wrote {prompt.direction.value} prompt for layer {prompt.layer_number} "
            f"to {args.output} (~{prompt.token_count} tokens)"
        )
    elif args.format == "json":
        print(json.dumps(prompt.to_dict(), indent=2))
    else:
        get_rich_output().print_markdown(prompt.text.rstrip("\n"))
    return 0


def cmd_export(args, layerdoc: LayerDoc) -> int:
    """Handle export command."""
    result = layerdoc.export(
        args.notebook,
        package=args.package,
        root=args.root,
        overwrite=args.overwrite,
        dry_run=args.dry_run,
        force=args.force,
    )

    if args.format == "json":
        print(json.dumps(result.to_dict(), indent=2))
        return 0

    output = get_rich_output()
    verb = "Would write" if result.dry_run else "Wrote"
    for path in result.written:
        output.print_success(f"{verb} {path}")
    for path in result.unchanged:
        output.print_info(f"Unchanged {path}")
    if not result.written:
        output.print_info("Nothing to write")
    return 0
