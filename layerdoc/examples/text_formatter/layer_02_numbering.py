"""
Layer 2: Numbering

`NumberedFormatter` extends `CaseFormatter` with line numbering.
`with_line_numbers()` prefixes every line with its index and a separator,
counting from 1 by default. Line order and line count are preserved, so a
trailing newline does not produce an extra numbered line.
"""

from .layer_01_case import CaseFormatter


class NumberedFormatter(CaseFormatter):
    def with_line_numbers(self, separator: str = ": ", start: int = 1) -> str:
        if start < 0:
            raise ValueError(f"start must be non-negative, got {start}")
        lines = self.text.splitlines()
        return "\n".join(f"{i}{separator}{line}" for i, line in enumerate(lines, start))
