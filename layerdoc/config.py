"""
Configuration system for layerdoc

Provides configuration management with support for files and environment variables.
Includes validation, default value handling, and configuration merging.
"""

import os
import json
import yaml
from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional, Any
import logging

from .errors import ConfigurationError
from .findings import Severity

logger = logging.getLogger(__name__)

VALID_SEVERITIES = [s.value for s in Severity]


class ConfigurationManager:
    """Manages configuration loading, validation, and merging."""

    DEFAULT_CONFIG_PATHS = [
        "layerdoc.yaml",
        "layerdoc.yml",
        "layerdoc.json",
        ".layerdoc.yaml",
        ".layerdoc.yml",
        ".layerdoc.json",
        os.path.expanduser("~/.layerdoc.yaml"),
    ]

    @staticmethod
    def find_config_file(search_paths: Optional[List[str]] = None) -> Optional[str]:
        """Find the first existing configuration file."""
        paths = search_paths or ConfigurationManager.DEFAULT_CONFIG_PATHS

        for path in paths:
            if os.path.exists(path):
                return path
        return None

    @staticmethod
    def load_config_file(config_path: str) -> Dict[str, Any]:
        """Load configuration from file (JSON or YAML)."""
        if not os.path.exists(config_path):
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                if config_path.endswith((".yaml", ".yml")):
                    data = yaml.safe_load(f) or {}
                else:
                    data = json.load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Invalid configuration file format: {e}")
        except OSError as e:
            raise ConfigurationError(f"Error reading configuration file: {e}")

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration file must contain a mapping, got {type(data).__name__}"
            )
        return data

    @staticmethod
    def load_env_config() -> Dict[str, Any]:
        """Load configuration from environment variables."""
        config = {}

        layers = {}
        if os.getenv("LAYERDOC_MAX_LAYER_LINES"):
            try:
                layers["max_layer_lines"] = int(os.getenv("LAYERDOC_MAX_LAYER_LINES"))
            except ValueError:
                logger.warning("Invalid LAYERDOC_MAX_LAYER_LINES value, using default")

        if os.getenv("LAYERDOC_DRAFT_TAG"):
            layers["draft_tag"] = os.getenv("LAYERDOC_DRAFT_TAG")

        if os.getenv("LAYERDOC_SCRATCH_TAG"):
            layers["scratch_tag"] = os.getenv("LAYERDOC_SCRATCH_TAG")

        if layers:
            config["layers"] = layers

        consistency = {}
        if os.getenv("LAYERDOC_UNDOCUMENTED_SEVERITY"):
            severity = os.getenv("LAYERDOC_UNDOCUMENTED_SEVERITY").lower()
            if severity in VALID_SEVERITIES:
                consistency["undocumented_severity"] = severity
            else:
                logger.warning("Invalid LAYERDOC_UNDOCUMENTED_SEVERITY value, using default")

        if consistency:
            config["consistency"] = consistency

        layout = {}
        if os.getenv("LAYERDOC_SRC_DIR"):
            layout["src_dir"] = os.getenv("LAYERDOC_SRC_DIR")

        if os.getenv("LAYERDOC_DOCS_DIR"):
            layout["docs_dir"] = os.getenv("LAYERDOC_DOCS_DIR")

        if os.getenv("LAYERDOC_PACKAGE"):
            layout["package"] = os.getenv("LAYERDOC_PACKAGE")

        if layout:
            config["layout"] = layout

        return config

    @staticmethod
    def merge_configs(*configs: Dict[str, Any]) -> Dict[str, Any]:
        """Merge multiple configuration dictionaries, with later ones taking precedence."""
        result = {}

        for config in configs:
            if not config:
                continue

            for key, value in config.items():
                if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                    result[key] = ConfigurationManager.merge_configs(result[key], value)
                else:
                    result[key] = value

        return result

    @staticmethod
    def validate_config(config_data: Dict[str, Any]) -> None:
        """Validate configuration data."""
        for section in LayerDocConfig.SECTIONS:
            value = config_data.get(section)
            if value is not None and not isinstance(value, dict):
                raise ConfigurationError(
                    f"Configuration section '{section}' must be a mapping, got {type(value).__name__}"
                )

        if "layers" in config_data:
            layers = config_data["layers"]

            if "max_layer_lines" in layers:
                value = layers["max_layer_lines"]
                if not isinstance(value, int) or value <= 0:
                    raise ConfigurationError("max_layer_lines must be a positive integer")

            if "first_layer_number" in layers:
                value = layers["first_layer_number"]
                if not isinstance(value, int) or value < 0:
                    raise ConfigurationError("first_layer_number must be a non-negative integer")

            for key in ("draft_tag", "scratch_tag"):
                if key in layers and not str(layers[key]).strip():
                    raise ConfigurationError(f"{key} must not be empty")

        if "consistency" in config_data:
            consistency = config_data["consistency"]

            for key in ("undocumented_severity", "extension_severity"):
                if key in consistency and consistency[key] not in VALID_SEVERITIES:
                    raise ConfigurationError(f"{key} must be one of: {VALID_SEVERITIES}")


@dataclass
class LayerSettings:
    """Configuration for layer assembly and structural rules."""

    max_layer_lines: int = 100  # layers must stay strictly below this
    first_layer_number: int = 0
    draft_tag: str = "draft"
    scratch_tag: str = "scratch"


@dataclass
class ConsistencySettings:
    """Configuration for documentation/code consistency checks."""

    undocumented_severity: str = "warning"
    extension_severity: str = "info"
    check_extension: bool = True


@dataclass
class LayoutSettings:
    """Configuration for the project directory layout."""

    prototypes_dir: str = "prototypes"
    src_dir: str = "src"
    tests_dir: str = "tests"
    docs_dir: str = "docs"
    package: Optional[str] = None


@dataclass
class SyncSettings:
    """Configuration for LLM synchronization prompts."""

    include_previous_api: bool = True
    include_findings: bool = True


@dataclass
class LayerDocConfig:
    """Main configuration class for layerdoc."""

    layer_settings: LayerSettings = field(default_factory=LayerSettings)
    consistency_settings: ConsistencySettings = field(default_factory=ConsistencySettings)
    layout_settings: LayoutSettings = field(default_factory=LayoutSettings)
    sync_settings: SyncSettings = field(default_factory=SyncSettings)

    SECTIONS = {
        "layers": "layer_settings",
        "consistency": "consistency_settings",
        "layout": "layout_settings",
        "sync": "sync_settings",
    }

    @classmethod
    def default(cls) -> "LayerDocConfig":
        """Create default configuration."""
        return cls()

    @classmethod
    def load(
        cls,
        config_path: Optional[str] = None,
        use_env: bool = True,
        validate: bool = True,
    ) -> "LayerDocConfig":
        """
        Load configuration from multiple sources with precedence:
        1. Default values
        2. Configuration file
        3. Environment variables (if use_env=True)

        Args:
            config_path: Path to configuration file. If None, searches for default files.
            use_env: Whether to load environment variables
            validate: Whether to validate the configuration
        """
        configs_to_merge = []

        file_config = {}
        if config_path:
            file_config = ConfigurationManager.load_config_file(config_path)
        else:
            found_config = ConfigurationManager.find_config_file()
            if found_config:
                file_config = ConfigurationManager.load_config_file(found_config)
                logger.info(f"Loaded configuration from: {found_config}")

        configs_to_merge.append(file_config)

        if use_env:
            configs_to_merge.append(ConfigurationManager.load_env_config())

        merged_config = ConfigurationManager.merge_configs(*configs_to_merge)

        if validate:
            ConfigurationManager.validate_config(merged_config)

        return cls.from_dict(merged_config)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LayerDocConfig":
        """Build a configuration from a section dictionary, ignoring unknown keys."""
        config = cls()
        for section, attr in cls.SECTIONS.items():
            section_obj = getattr(config, attr)
            values = data.get(section) or {}
            if not isinstance(values, dict):
                raise ConfigurationError(
                    f"Configuration section '{section}' must be a mapping, got {type(values).__name__}"
                )
            for key, value in values.items():
                if hasattr(section_obj, key):
                    setattr(section_obj, key, value)
                else:
                    logger.debug(f"Ignoring unknown configuration key: {section}.{key}")
        return config

    @classmethod
    def from_file(cls, config_path: str) -> "LayerDocConfig":
        """Load configuration from a file only."""
        return cls.load(config_path=config_path, use_env=False)

    @classmethod
    def from_env(cls) -> "LayerDocConfig":
        """Load configuration from default files and environment variables."""
        return cls.load(config_path=None, use_env=True)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {section: asdict(getattr(self, attr)) for section, attr in self.SECTIONS.items()}

    def to_file(self, config_path: str, format: str = "yaml") -> None:
        """
        Save configuration to file.

        Args:
            config_path: Path to save configuration
            format: File format ('json' or 'yaml')
        """
        config_data = self.to_dict()

        try:
            with open(config_path, "w", encoding="utf-8") as f:
                if format.lower() in ("yaml", "yml"):
                    yaml.safe_dump(config_data, f, default_flow_style=False, indent=2, sort_keys=False)
                else:
                    json.dump(config_data, f, indent=2)
        except OSError as e:
            raise ConfigurationError(f"Error saving configuration file: {e}")

    def validate(self) -> None:
        """Validate the current configuration."""
        ConfigurationManager.validate_config(self.to_dict())

    def get_config_summary(self) -> str:
        """Get a human-readable summary of the configuration."""
        layers = self.layer_settings
        consistency = self.consistency_settings
        layout = self.layout_settings
        return f"""layerdoc Configuration Summary:
Layers:
  - Max layer lines (exclusive): {layers.max_layer_lines}
  - First layer number: {layers.first_layer_number}
  - Draft tag: {layers.draft_tag}
  - Scratch tag: {layers.scratch_tag}

Consistency:
  - Undocumented names: {consistency.undocumented_severity}
  - Layer extension: {consistency.extension_severity if consistency.check_extension else "off"}

Layout:
  - Prototypes: {layout.prototypes_dir}
  - Source: {layout.src_dir}
  - Tests: {layout.tests_dir}
  - Docs: {layout.docs_dir}
  - Package: {layout.package or "(not set)"}

Sync:
  - Include previous API: {self.sync_settings.include_previous_api}
  - Include findings: {self.sync_settings.include_findings}
"""


def load_config(config_path: Optional[str] = None, use_env: bool = True) -> LayerDocConfig:
    """
    Load configuration from file and/or environment variables.

    Args:
        config_path: Path to configuration file
        use_env: Whether to load environment variables

    Returns:
        LayerDocConfig: Loaded configuration
    """
    return LayerDocConfig.load(config_path=config_path, use_env=use_env)
