"""
Exception hierarchy for layerdoc.

Rule violations found in notebooks or source trees are reported as
findings, not raised. These exceptions cover conditions that stop an
operation outright.
"""


class LayerDocError(Exception):
    """Base class for all layerdoc errors."""

    pass


class ConfigurationError(LayerDocError):
    """Raised when configuration loading or validation fails."""

    pass


class NotebookFormatError(LayerDocError):
    """Raised when a notebook cannot be read or parsed."""

    def __init__(self, message: str, path=None):
        self.path = str(path) if path is not None else None
        if self.path:
            message = f"{self.path}: {message}"
        super().__init__(message)


class LayerGateError(LayerDocError):
    """Raised when an operation needs a layer that has not been verified."""

    def __init__(self, layer: int, codes=None):
        self.layer = layer
        self.codes = sorted(set(codes or []))
        detail = f" ({', '.join(self.codes)})" if self.codes else ""
        super().__init__(f"Layer {layer} is not verified{detail}; fix it before proceeding")


class ExportError(LayerDocError):
    """Raised when exported files cannot be written."""

    pass


class UnknownLayerError(LayerDocError, KeyError):
    """Raised when a layer number does not exist in the notebook."""

    def __init__(self, layer: int, source=None):
        self.layer = layer
        where = f" in {source}" if source else ""
        super().__init__(f"No layer {layer}{where}")

    def __str__(self) -> str:
        return self.args[0]
