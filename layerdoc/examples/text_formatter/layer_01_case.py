"""
Layer 1: Case

`CaseFormatter` extends `TextFormatter` with case conversion.
`to_upper()` returns the text with every character uppercased and
`to_lower()` returns it lowercased. The stored text is never modified.
"""

from .layer_00_base import TextFormatter


class CaseFormatter(TextFormatter):
    def to_upper(self) -> str:
        return self.text.upper()

    def to_lower(self) -> str:
        return self.text.lower()
