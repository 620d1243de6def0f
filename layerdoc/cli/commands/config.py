"""
Configuration and template commands for the layerdoc CLI.

This module contains command handlers for:
- Configuration management (show, init, validate)
- Template listing
"""

import logging

import yaml

from layerdoc.cli.rich_output import get_rich_output
from layerdoc.config import LayerDocConfig, load_config
from layerdoc.templates import TemplateGenerator

logger = logging.getLogger(__name__)


def cmd_config(args) -> int:
    """Handle config command."""
    output = get_rich_output()

    if args.config_action == "show":
        config = load_config(getattr(args, "config", None))
        if args.format == "json":
            output.print_json(config.to_dict())
        elif args.format == "yaml":
            print(yaml.safe_dump(config.to_dict(), default_flow_style=False, sort_keys=False), end="")
        else:
            output.console.print(config.get_config_summary(), markup=False)
        return 0

    if args.config_action == "init":
        if args.template:
            TemplateGenerator.generate_config(args.template, args.path, args.file_format)
            output.print_success(
                f"Configuration file created from template '{args.template}' at {args.path}"
            )
        else:
            LayerDocConfig.default().to_file(args.path, args.file_format)
            output.print_success(f"Default configuration file created at {args.path}")
        output.print_info("Edit the file to customize your layerdoc settings.")
        return 0

    if args.config_action == "validate":
        LayerDocConfig.load(args.config_file, use_env=False, validate=True)
        output.print_success(f"Configuration file {args.config_file} is valid")
        return 0

    if args.config_action == "templates":
        output.console.print("Available configuration templates:", markup=False)
        for name in TemplateGenerator.list_templates():
            output.console.print(f"  {name}: {TemplateGenerator.get_template_description(name)}", markup=False)
        return 0

    output.print_error("No config action given (show, init, validate, templates)")
    return 2
