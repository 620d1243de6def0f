"""
layerdoc - Layered notebook development toolkit

Splits prototype notebooks into small documentation+code layers, checks that
each layer's documentation and code agree, gates progress one layer at a
time, builds LLM prompts to resynchronize a layer and exports verified
layers into layer-numbered production modules.
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Main API
    "LayerDoc",
    "CheckResult",
    "LayerDocConfig",
    # Core components (for advanced usage)
    "read_notebook",
    "build_layers",
    "LayerGate",
    "PromptBuilder",
    "SyncDirection",
    "LayerExporter",
]


def __getattr__(name):
    """Lazy loading of the main API to keep ``import layerdoc`` light."""
    if name in {"LayerDoc", "CheckResult"}:
        from .api import LayerDoc, CheckResult
        return {"LayerDoc": LayerDoc, "CheckResult": CheckResult}[name]

    if name == "LayerDocConfig":
        from .config import LayerDocConfig
        return LayerDocConfig

    if name in {"read_notebook", "build_layers"}:
        from .layers import build_layers
        from .notebook import read_notebook
        return {"read_notebook": read_notebook, "build_layers": build_layers}[name]

    if name == "LayerGate":
        from .gate import LayerGate
        return LayerGate

    if name in {"PromptBuilder", "SyncDirection"}:
        from .sync import PromptBuilder, SyncDirection
        return {"PromptBuilder": PromptBuilder, "SyncDirection": SyncDirection}[name]

    if name == "LayerExporter":
        from .export import LayerExporter
        return LayerExporter

    raise AttributeError(f"module 'layerdoc' has no attribute '{name}'")
