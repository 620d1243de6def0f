"""
Configuration template generator for layerdoc.

Provides utilities to generate and customize configuration templates
for different levels of strictness.
"""

import json
import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional

from ..config import ConfigurationManager
from ..errors import ConfigurationError


class TemplateGenerator:
    """Generates configuration files from the bundled templates."""

    TEMPLATE_DIR = Path(__file__).parent

    AVAILABLE_TEMPLATES = {
        "default": "default",
        "strict": "strict",
        "relaxed": "relaxed",
    }

    @classmethod
    def list_templates(cls) -> Dict[str, str]:
        """List all available templates."""
        return cls.AVAILABLE_TEMPLATES.copy()

    @classmethod
    def get_template_path(cls, template_name: str) -> Path:
        """Get the path to a template file."""
        if template_name not in cls.AVAILABLE_TEMPLATES:
            raise ConfigurationError(
                f"Unknown template: {template_name}. Available: {list(cls.AVAILABLE_TEMPLATES.keys())}"
            )
        return cls.TEMPLATE_DIR / f"{cls.AVAILABLE_TEMPLATES[template_name]}.yaml"

    @classmethod
    def load_template(cls, template_name: str) -> Dict[str, Any]:
        """Load a template configuration, including its ``_description``."""
        template_path = cls.get_template_path(template_name)

        if not template_path.exists():
            raise ConfigurationError(f"Template file not found: {template_path}")

        with open(template_path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    @classmethod
    def get_template_description(cls, template_name: str) -> str:
        """Get the description of a template."""
        try:
            template_data = cls.load_template(template_name)
        except ConfigurationError:
            return f"Configuration template: {template_name}"
        return template_data.get("_description", f"Configuration template: {template_name}")

    @classmethod
    def render(
        cls,
        template_name: str,
        customizations: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Template data merged with customizations, without the description."""
        template_data = cls.load_template(template_name)
        if customizations:
            template_data = ConfigurationManager.merge_configs(template_data, customizations)
        template_data.pop("_description", None)

        errors = cls.validate_template(template_data)
        if errors:
            raise ConfigurationError("; ".join(errors))
        return template_data

    @classmethod
    def generate_config(
        cls,
        template_name: str,
        output_path: str,
        format: str = "yaml",
        customizations: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Generate a configuration file from a template.

        Args:
            template_name: Name of the template to use
            output_path: Path where to save the configuration
            format: Output format ('json' or 'yaml')
            customizations: Additional customizations to apply
        """
        template_data = cls.render(template_name, customizations)

        with open(output_path, "w", encoding="utf-8") as f:
            if format.lower() in ["yaml", "yml"]:
                yaml.safe_dump(template_data, f, default_flow_style=False, indent=2, sort_keys=False)
            else:
                json.dump(template_data, f, indent=2)

    @classmethod
    def validate_template(cls, template_data: Dict[str, Any]) -> List[str]:
        """
        Validate a template configuration.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        for section in ["layers", "consistency", "layout", "sync"]:
            if section not in template_data:
                errors.append(f"Missing required section: {section}")

        try:
            ConfigurationManager.validate_config(template_data)
        except ConfigurationError as e:
            errors.append(str(e))

        return errors
