"""
Layer-by-layer progress gate.

Work moves forward one layer at a time: a layer may only be built on once
it and every layer before it are verified, meaning none of them has an
error finding.
"""

import logging
from typing import Dict, Iterable, List, Optional

from .errors import LayerGateError, UnknownLayerError
from .findings import Finding
from .layers import LayerSet

logger = logging.getLogger(__name__)


class LayerGate:
    """Answers whether work may proceed past a given layer."""

    def __init__(self, layer_set: LayerSet, findings: Iterable[Finding]):
        self.numbers: List[int] = [layer.number for layer in layer_set.layers]
        self._errors: Dict[int, List[str]] = {n: [] for n in self.numbers}
        self._global_errors: List[str] = []

        for finding in findings:
            if not finding.is_error:
                continue
            if finding.layer is None:
                self._global_errors.append(finding.code)
            elif finding.layer in self._errors:
                self._errors[finding.layer].append(finding.code)

    def error_codes(self, number: int) -> List[str]:
        if number not in self._errors:
            raise UnknownLayerError(number)
        return list(self._errors[number])

    def is_verified(self, number: int) -> bool:
        """True when layer ``number`` has no error findings."""
        return not self.error_codes(number)

    def can_proceed(self, number: int) -> bool:
        """True when every layer up to and including ``number`` is verified."""
        return self.blocking_layer(number) is None

    def blocking_layer(self, number: int) -> Optional[int]:
        if number not in self._errors:
            raise UnknownLayerError(number)
        for n in self.numbers:
            if self._errors[n]:
                return n
            if n == number:
                break
        return None

    def frontier(self) -> Optional[int]:
        """The first unverified layer, or None when all are verified."""
        for n in self.numbers:
            if self._errors[n]:
                return n
        return None

    @property
    def is_open(self) -> bool:
        """True when every layer is verified and no notebook-wide errors remain."""
        return self.frontier() is None and not self._global_errors

    def require(self, number: Optional[int] = None) -> None:
        """
        Raise ``LayerGateError`` unless work may proceed past ``number``.

        With no number, every layer must be verified.
        """
        if number is None:
            blocking = self.frontier()
            if blocking is None and self._global_errors:
                raise LayerGateError(self.numbers[0] if self.numbers else 0, self._global_errors)
        else:
            blocking = self.blocking_layer(number)

        if blocking is not None:
            logger.info(f"Gate closed at layer {blocking}")
            raise LayerGateError(blocking, self._errors[blocking])

    def to_dict(self) -> Dict[str, object]:
        return {
            "open": self.is_open,
            "frontier": self.frontier(),
            "layers": {n: {"verified": not codes, "errors": codes} for n, codes in self._errors.items()},
            "notebook_errors": list(self._global_errors),
        }
