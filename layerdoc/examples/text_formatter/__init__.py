"""
TextFormatter example.

A three-layer class chain where every layer extends the one before it:

- layer 0: ``TextFormatter`` holds the text
- layer 1: ``CaseFormatter`` adds case conversion
- layer 2: ``NumberedFormatter`` adds line numbering

``prototype.ipynb`` in this directory is the notebook the layers were
exported from.
"""

from pathlib import Path

from .layer_00_base import TextFormatter
from .layer_01_case import CaseFormatter
from .layer_02_numbering import NumberedFormatter

PROTOTYPE_NOTEBOOK = Path(__file__).parent / "prototype.ipynb"

__all__ = ["TextFormatter", "CaseFormatter", "NumberedFormatter", "PROTOTYPE_NOTEBOOK"]
