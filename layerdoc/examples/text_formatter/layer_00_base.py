"""
Layer 0: Base

`TextFormatter` stores a piece of text so later layers can transform it.
The text is available as the `text` attribute and `str()` returns it.
"""


class TextFormatter:
    def __init__(self, text: str):
        self.text = text

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.text!r})"
