"""
CLI command handlers.

Organized by functional domain:
- layers.py: notebook commands (layers, check, prompt, export)
- project.py: project layout commands (init, audit, demo)
- config.py: configuration and template commands
"""

from .layers import (
    cmd_layers,
    cmd_check,
    cmd_prompt,
    cmd_export,
)
from .project import (
    cmd_init,
    cmd_audit,
    cmd_demo,
)
from .config import (
    cmd_config,
)

__all__ = [
    # Notebook commands
    "cmd_layers",
    "cmd_check",
    "cmd_prompt",
    "cmd_export",
    # Project commands
    "cmd_init",
    "cmd_audit",
    "cmd_demo",
    # Config commands
    "cmd_config",
]
