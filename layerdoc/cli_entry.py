"""
Command-line interface for layerdoc

Provides CLI access to notebook layering, checks, sync prompts, export and
project layout, with rich terminal output.
"""

import argparse
import logging
import sys
from typing import List, Optional

from layerdoc import __version__
from layerdoc.api import LayerDoc
from layerdoc.config import load_config
from layerdoc.errors import LayerDocError
from layerdoc.cli.rich_output import set_rich_enabled
from layerdoc.cli.commands import (
    cmd_audit,
    cmd_check,
    cmd_config,
    cmd_demo,
    cmd_export,
    cmd_init,
    cmd_layers,
    cmd_prompt,
)
from layerdoc.sync import SyncDirection

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _add_format(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--format", "-f", choices=["text", "json"], default="text", help="Output format"
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="layerdoc",
        description="layerdoc - develop modules one documented layer at a time",
        epilog='Use "layerdoc <command> --help" for detailed command help.',
    )

    parser.add_argument("--config", "-c", type=str, help="Path to configuration file")
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output and debug logging",
    )
    parser.add_argument(
        "--no-rich",
        action="store_true",
        help="Disable rich terminal output (use plain text)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # init
    init_parser = subparsers.add_parser("init", help="Create the project layout")
    init_parser.add_argument("root", nargs="?", default=".", help="Project root (default: .)")
    init_parser.add_argument("--package", "-p", help="Package name (default: root directory name)")
    init_parser.add_argument(
        "--overwrite", action="store_true", help="Replace existing starter files"
    )

    # layers
    layers_parser = subparsers.add_parser("layers", help="List the layers of a notebook")
    layers_parser.add_argument("notebook", help="Notebook (.ipynb or percent-format .py)")
    _add_format(layers_parser)

    # check
    check_parser = subparsers.add_parser(
        "check", help="Check layer structure and documentation/code consistency"
    )
    check_parser.add_argument("notebook", help="Notebook (.ipynb or percent-format .py)")
    check_parser.add_argument(
        "--layer",
        "-l",
        type=int,
        help="Only require layers up to this number to be verified",
    )
    _add_format(check_parser)

    # prompt
    prompt_parser = subparsers.add_parser(
        "prompt", help="Build an LLM prompt to synchronize a layer"
    )
    prompt_parser.add_argument("notebook", help="Notebook (.ipynb or percent-format .py)")
    prompt_parser.add_argument("--layer", "-l", type=int, required=True, help="Layer number")
    prompt_parser.add_argument(
        "--direction",
        "-d",
        choices=["auto"] + [d.value for d in SyncDirection],
        default="auto",
        help="What the model should produce (default: auto)",
    )
    prompt_parser.add_argument("--output", "-o", help="Write the prompt to this file")
    _add_format(prompt_parser)

    # export
    export_parser = subparsers.add_parser(
        "export", help="Export verified layers to layer-numbered source files"
    )
    export_parser.add_argument("notebook", help="Notebook (.ipynb or percent-format .py)")
    export_parser.add_argument("--package", "-p", help="Target package name")
    export_parser.add_argument("--root", default=".", help="Project root (default: .)")
    export_parser.add_argument(
        "--overwrite", action="store_true", help="Replace files that differ"
    )
    export_parser.add_argument(
        "--dry-run", action="store_true", help="Show what would be written"
    )
    export_parser.add_argument(
        "--force", action="store_true", help="Export even when layers are unverified"
    )
    _add_format(export_parser)

    # audit
    audit_parser = subparsers.add_parser("audit", help="Audit the production source tree")
    audit_parser.add_argument("root", nargs="?", default=".", help="Project root (default: .)")
    audit_parser.add_argument("--package", "-p", help="Package name")
    _add_format(audit_parser)

    # demo
    demo_parser = subparsers.add_parser("demo", help="Run the TextFormatter example")
    demo_parser.add_argument("--text", help="Text to format")

    # config
    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_subparsers = config_parser.add_subparsers(
        dest="config_action", help="Configuration actions"
    )

    show_parser = config_subparsers.add_parser("show", help="Show current configuration")
    show_parser.add_argument(
        "--format", "-f", choices=["text", "json", "yaml"], default="text", help="Output format"
    )

    init_config_parser = config_subparsers.add_parser("init", help="Create a configuration file")
    init_config_parser.add_argument(
        "--path", default="layerdoc.yaml", help="Configuration file path"
    )
    init_config_parser.add_argument(
        "--file-format", choices=["yaml", "json"], default="yaml", help="File format"
    )
    init_config_parser.add_argument(
        "--template", choices=["default", "strict", "relaxed"], help="Start from a template"
    )

    validate_parser = config_subparsers.add_parser("validate", help="Validate a configuration file")
    validate_parser.add_argument("config_file", help="Configuration file to validate")

    config_subparsers.add_parser("templates", help="List configuration templates")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    setup_logging(getattr(args, "verbose", False))
    set_rich_enabled(not getattr(args, "no_rich", False))

    try:
        if args.command == "config":
            return cmd_config(args)

        layerdoc = LayerDoc(load_config(getattr(args, "config", None)))

        if args.command == "init":
            return cmd_init(args, layerdoc)
        elif args.command == "layers":
            return cmd_layers(args, layerdoc)
        elif args.command == "check":
            return cmd_check(args, layerdoc)
        elif args.command == "prompt":
            return cmd_prompt(args, layerdoc)
        elif args.command == "export":
            return cmd_export(args, layerdoc)
        elif args.command == "audit":
            return cmd_audit(args, layerdoc)
        elif args.command == "demo":
            return cmd_demo(args, layerdoc)

        parser.error(f"Unknown command: {args.command}")

    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=sys.stderr)
        return 1
    except LayerDocError as e:
        print(f"Error: {e}", file=sys.stderr)
        if getattr(args, "verbose", False):
            import traceback

            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
